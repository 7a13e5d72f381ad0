# -*- coding: utf-8 -*-
"""Create, patch and delete the kubernetes Secret backing an RSecret."""

import base64
import logging
from enum import Enum

from kubernetes import client
from kubernetes.client.exceptions import ApiException

from .fingerprint import build_labels, fingerprint, stored_fingerprint

PATCH_CONTENT_TYPE = "application/strategic-merge-patch+json"


class MaterializeResult(Enum):
    CREATED = "created"
    PATCHED = "patched"
    UNCHANGED = "unchanged"


def encode_secret_data(data):
    return {key: base64.b64encode(value).decode("ascii") for key, value in data.items()}


class TargetMaterializer:
    """Keeps the Secret named after an RSecret in step with its resolved data.

    The Secret carries two labels, ``app`` with the RSecret name and ``hash_id`` with
    the fingerprint of the data it holds. Writes always set data and hash_id
    together so the label never describes stale content.

    Attributes:
        core_api (kubernetes.client.CoreV1Api): Api used for the secrets.
    """

    def __init__(self, core_api):
        self.core_api = core_api

    def get(self, name, namespace):
        """Return the V1Secret or None if it does not exist."""
        try:
            return self.core_api.read_namespaced_secret(name, namespace)
        except ApiException as e:
            if e.status == 404:
                return None
            raise

    def ensure(self, rsecret, data, existing=None):
        """Make the Secret for rsecret hold data.

        Args:
            rsecret (RSecret): The source resource.
            data (dict): Resolved secret data, key to bytes.
            existing (V1Secret, optional): The current Secret if the caller already
                read it, otherwise it is read here.

        Returns:
            MaterializeResult: What was done.
        """
        if existing is None:
            existing = self.get(rsecret.name, rsecret.namespace)
        if existing is None:
            self.create(rsecret, data)
            return MaterializeResult.CREATED

        hash_id = fingerprint(data)
        if stored_fingerprint(existing) == hash_id:
            logging.getLogger(__name__).info(
                f"No changes to rsecret {rsecret.name} in namespace {rsecret.namespace}")
            return MaterializeResult.UNCHANGED

        self.patch(rsecret, data, existing, hash_id)
        return MaterializeResult.PATCHED

    def create(self, rsecret, data):
        hash_id = fingerprint(data)
        body = client.V1Secret(
            metadata=client.V1ObjectMeta(
                name=rsecret.name,
                namespace=rsecret.namespace,
                labels=build_labels(rsecret.name, hash_id),
            ),
            type="Opaque",
            data=encode_secret_data(data),
            immutable=False,
        )
        logging.getLogger(__name__).info(
            f"Creating secret {rsecret.name} in namespace {rsecret.namespace} "
            f"with {len(data)} keys")
        return self.core_api.create_namespaced_secret(rsecret.namespace, body)

    def patch(self, rsecret, data, existing, hash_id=None):
        if hash_id is None:
            hash_id = fingerprint(data)

        patch_data = encode_secret_data(data)
        # keys that are gone must be nulled or the patch keeps them
        for key in (existing.data or {}):
            if key not in patch_data:
                patch_data[key] = None

        body = {
            "metadata": {
                "labels": build_labels(rsecret.name, hash_id)
            },
            "data": patch_data,
        }
        logging.getLogger(__name__).info(
            f"Updating secret {rsecret.name} in namespace {rsecret.namespace}")
        # the client defaults a dict body to json-patch, which expects a list of operations
        return self.core_api.patch_namespaced_secret(rsecret.name, rsecret.namespace, body,
                                                     _content_type=PATCH_CONTENT_TYPE)

    def remove(self, name, namespace):
        """Delete the Secret, a Secret that is already gone is not an error."""
        try:
            self.core_api.delete_namespaced_secret(name, namespace)
            logging.getLogger(__name__).info(f"Deleted secret {name} in namespace {namespace}")
        except ApiException as e:
            if e.status != 404:
                raise
