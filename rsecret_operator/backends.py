# -*- coding: utf-8 -*-
"""Resolve one backend declaration of an RSecret into secret data.

Every backend kind has its own ``_resolve_*`` method producing the entries for a
single field. ``BackendResolver.resolve`` picks the method by backend kind, runs it
for every field and keeps whatever succeeded. A field that fails is logged and
skipped. It never stops its siblings.

Remote lookups all go through the shared ``ValueCache`` so the same parameter,
secret or stack is fetched at most once per ttl however many RSecrets use it.
"""

import json
import logging

from .exceptions import StackOutputNotFound
from .resource import BackendType
from .value_cache import DEFAULT_TTL
from .values import get_secret_data, to_text

# backends whose fields may omit a key and expand the whole fetched object
EXPANDABLE_BACKENDS = (BackendType.CLOUDFORMATION,
                       BackendType.PULUMI,
                       BackendType.VAULT)


class BackendResolver:

    def __init__(self, clients, cache, ttl=DEFAULT_TTL):
        self.clients = clients
        self.cache = cache
        self.ttl = ttl

    def _cached(self, key, fetch_fn):
        return self.cache.get_or_fetch(key, self.ttl, fetch_fn)

    def resolve(self, backend):
        """Return the secret data for one backend, sorted by key.

        When two fields of the same backend produce the same key the earlier field wins.
        """
        kind = backend.backend
        if kind is BackendType.PLAINTEXT:
            resolve_field = self._resolve_plaintext
        elif kind is BackendType.SSM:
            resolve_field = self._resolve_ssm
        elif kind is BackendType.SECRET_MANAGER:
            resolve_field = self._resolve_secret_manager
        elif kind is BackendType.CLOUDFORMATION:
            resolve_field = self._resolve_cloudformation
        elif kind is BackendType.APP_CONFIG:
            resolve_field = self._resolve_appconfig
        elif kind is BackendType.PULUMI:
            resolve_field = self._resolve_pulumi
        elif kind is BackendType.VAULT:
            resolve_field = self._resolve_vault
        else:
            logging.getLogger(__name__).warning(f"Skipping unsupported backend {kind.value}")
            return {}

        secrets = {}
        for secret_field in backend.data:
            try:
                data = resolve_field(backend, secret_field)
            except Exception:
                logging.getLogger(__name__).exception(
                    f"While resolving {kind.value} value {secret_field.value}")
                continue

            for key, value in data.items():
                secrets.setdefault(key, value)

        return dict(sorted(secrets.items()))

    def _resolve_plaintext(self, backend, secret_field):
        # the declared value is the secret itself
        return get_secret_data(secret_field, secret_field.value)

    def _resolve_ssm(self, backend, secret_field):
        name = secret_field.value
        value = self._cached((BackendType.SSM.value, name),
                             lambda: self.clients.get_ssm_parameter(name))
        return get_secret_data(secret_field, value)

    def _resolve_secret_manager(self, backend, secret_field):
        name = secret_field.value
        value = self._cached((BackendType.SECRET_MANAGER.value, name),
                             lambda: self.clients.get_secret_manager_value(name))
        return get_secret_data(secret_field, value)

    def _resolve_appconfig(self, backend, secret_field):
        application_id = secret_field.value
        profile_id = secret_field.configuration_profile_id
        version_number = secret_field.version_number
        value = self._cached(
            (BackendType.APP_CONFIG.value, application_id, profile_id, version_number),
            lambda: self.clients.get_appconfig_configuration(application_id,
                                                             profile_id,
                                                             version_number))
        return get_secret_data(secret_field, value)

    def _resolve_cloudformation(self, backend, secret_field):
        stack_name = secret_field.value
        outputs = self._cached((BackendType.CLOUDFORMATION.value, stack_name),
                               lambda: self.clients.get_cloudformation_outputs(stack_name))
        return self._outputs_to_secret_data(secret_field, outputs)

    def _resolve_pulumi(self, backend, secret_field):
        stack_path = secret_field.value
        token = backend.pulumi_token
        outputs = self._cached((BackendType.PULUMI.value, stack_path, token),
                               lambda: self.clients.get_pulumi_outputs(stack_path, token))
        return self._outputs_to_secret_data(secret_field, outputs)

    def _resolve_vault(self, backend, secret_field):
        path = secret_field.value
        document = self._cached((BackendType.VAULT.value, path),
                                lambda: self.clients.get_vault_secret(path))

        # a single "value" property is the conventional shape for one secret
        if secret_field.key and "value" in document:
            text = to_text(document["value"])
        else:
            text = json.dumps(document)
        return get_secret_data(secret_field, text, expand=True)

    def _outputs_to_secret_data(self, secret_field, outputs):
        """Select one stack output by output_key, or hand on the whole outputs document."""
        if secret_field.output_key:
            if secret_field.output_key not in outputs:
                raise StackOutputNotFound(secret_field.value, secret_field.output_key)
            text = to_text(outputs[secret_field.output_key])
        else:
            text = json.dumps(outputs)
        return get_secret_data(secret_field, text, expand=True)
