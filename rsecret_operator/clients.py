# -*- coding: utf-8 -*-
"""Remote calls for each backend kind.

Each method performs exactly one remote lookup and returns raw data, either text or
a dict of outputs. Shaping into secret data and caching happen in the resolver.

Clients are created lazily per thread. boto3 sessions, requests sessions and hvac
clients are not safe to share between the threads resolving backends in parallel,
so we keep one of each per thread in ``threading.local`` storage.
"""

import logging
import re
import threading

import boto3
import google.auth
import google_crc32c
import hvac
import requests
from google.cloud import secretmanager, secretmanager_v1

from .exceptions import BackendConfigurationError, \
    EmptyRemoteValue, \
    NoActiveSecretVersion, \
    SecretChecksumMismatch

GCP_SECRET_RE = re.compile(r'^(projects/[^/]+/secrets/[^/]+)(?:/versions/([0-9]+|latest))?$')

PULUMI_EXPORT_HEADERS = {
    "Accept": "application/vnd.pulumi+8",
    "Content-Type": "application/json",
}

REQUEST_TIMEOUT = 30.0


def is_gcp_secret_name(name):
    return GCP_SECRET_RE.match(name) is not None


class RemoteClients:
    """Thread safe access to the remote services backing each backend kind.

    Attributes:
        config (OperatorConfig): Endpoints, regions and tokens for the backends.
    """

    def __init__(self, config, _credentials_callback=None):
        """
        Args:
            config (OperatorConfig): Operator configuration.
            _credentials_callback (callable, optional): Returns a tuple of
                (credentials, project_id) for google cloud. Defaults to
                `google.auth.default()`.
        """
        self.config = config
        self._credentials_callback = _credentials_callback
        self.ns = threading.local()

    @property
    def _gcp_credentials(self):
        if not hasattr(self.ns, "_gcp_credentials"):
            if self._credentials_callback is not None:
                _credentials, _project_id = self._credentials_callback()
            else:
                _credentials, _project_id = google.auth.default()
            self.ns._gcp_credentials = _credentials
        return self.ns._gcp_credentials

    def _gcp_client(self):
        if not hasattr(self.ns, "gcp_client"):
            self.ns.gcp_client = secretmanager.SecretManagerServiceClient(
                credentials=self._gcp_credentials)
        return self.ns.gcp_client

    def _aws_client(self, service):
        if not hasattr(self.ns, "aws_clients"):
            self.ns.aws_session = boto3.session.Session()
            self.ns.aws_clients = {}

        if service not in self.ns.aws_clients:
            kwargs = {}
            if self.config.aws_region:
                kwargs["region_name"] = self.config.aws_region
            if self.config.test_env:
                logging.getLogger(__name__).info(
                    f"Using localstack for {service} {self.config.localstack_url}")
                kwargs["endpoint_url"] = self.config.localstack_url
            self.ns.aws_clients[service] = self.ns.aws_session.client(service, **kwargs)

        return self.ns.aws_clients[service]

    def _http_session(self):
        if not hasattr(self.ns, "http_session"):
            self.ns.http_session = requests.Session()
        return self.ns.http_session

    def _vault_client(self):
        if not self.config.vault_addr:
            raise BackendConfigurationError("Vault", "VAULT_ADDR")
        if not self.config.vault_token:
            raise BackendConfigurationError("Vault", "VAULT_TOKEN")

        if not hasattr(self.ns, "vault_client"):
            self.ns.vault_client = hvac.Client(url=self.config.vault_addr,
                                               token=self.config.vault_token)
        return self.ns.vault_client

    def get_ssm_parameter(self, name):
        """Get the value of a parameter store parameter, decrypting secure strings."""
        response = self._aws_client("ssm").get_parameter(Name=name, WithDecryption=True)
        parameter = response.get("Parameter")
        if not parameter:
            raise EmptyRemoteValue("SSM", name)
        return parameter.get("Value", "")

    def get_secret_manager_value(self, name):
        """Get a secret string from google cloud or aws depending on the shape of name."""
        if is_gcp_secret_name(name):
            return self.get_gcp_secret(name)
        return self.get_aws_secret(name)

    def get_aws_secret(self, secret_id):
        response = self._aws_client("secretsmanager").get_secret_value(SecretId=secret_id)
        if response.get("SecretString") is not None:
            return response["SecretString"]
        if response.get("SecretBinary") is not None:
            return response["SecretBinary"].decode("utf-8")
        raise EmptyRemoteValue("SecretManager", secret_id)

    def get_gcp_secret(self, secret_name):
        """Get the most recent enabled version of a google cloud secret.

        This does not use "latest", which is simply the last version added. It takes the
        most recent *enabled* version so a bad release is rolled back by disabling it.

        A version can be pinned with ``.../versions/<n>``, in which case the version
        returned is the most recent enabled one at or below n.

        Args:
            secret_name (str): ``projects/<p>/secrets/<s>`` optionally followed by
                ``/versions/<n|latest>``.

        Returns:
            str: The utf-8 decoded payload.

        Raises:
            NoActiveSecretVersion: No enabled version qualifies.
            SecretChecksumMismatch: The payload does not match its crc32c.
        """
        secret_version_match = GCP_SECRET_RE.match(secret_name)
        secret_name = secret_version_match.group(1)
        max_version = secret_version_match.group(2)
        if max_version == "latest":
            max_version = None

        request = secretmanager_v1.ListSecretVersionsRequest(
            parent=secret_name,
            filter="state=ENABLED"
        )
        page_result = self._gcp_client().list_secret_versions(request=request)

        latest = None
        for response in sorted(page_result, key=lambda d: d.create_time):
            if max_version:
                version_num = int(response.name.rsplit("/", 1)[1])
                if version_num > int(max_version):
                    continue
            if latest is None or latest.create_time < response.create_time:
                latest = response

        if not latest:
            raise NoActiveSecretVersion(secret_name)

        request = secretmanager_v1.AccessSecretVersionRequest(
            name=latest.name
        )
        response = self._gcp_client().access_secret_version(request=request)

        crc32c = google_crc32c.Checksum()
        crc32c.update(response.payload.data)
        if response.payload.data_crc32c and \
                response.payload.data_crc32c != int(crc32c.hexdigest(), 16):
            raise SecretChecksumMismatch(latest.name)

        return response.payload.data.decode("utf-8")

    def get_cloudformation_outputs(self, stack_name):
        """Return the outputs of a cloudformation stack as a dict of name to value."""
        response = self._aws_client("cloudformation").describe_stacks(StackName=stack_name)
        stacks = response.get("Stacks") or []
        if not stacks:
            raise EmptyRemoteValue("Cloudformation", stack_name)

        return {output["OutputKey"]: output.get("OutputValue", "")
                for output in stacks[0].get("Outputs") or []}

    def get_appconfig_configuration(self, application_id, configuration_profile_id,
                                    version_number):
        """Return the content of one hosted configuration version as text."""
        if not configuration_profile_id:
            raise BackendConfigurationError("AppConfig", "configuration_profile_id")
        try:
            version_number = int(version_number)
        except (TypeError, ValueError):
            raise BackendConfigurationError("AppConfig", "version_number")

        response = self._aws_client("appconfig").get_hosted_configuration_version(
            ApplicationId=application_id,
            ConfigurationProfileId=configuration_profile_id,
            VersionNumber=version_number,
        )
        content = response.get("Content")
        if content is None:
            raise EmptyRemoteValue("AppConfig", application_id)
        if hasattr(content, "read"):
            content = content.read()
        return content.decode("utf-8")

    def get_pulumi_outputs(self, stack_path, pulumi_token=None):
        """Return the outputs of the first resource in a pulumi stack export.

        Args:
            stack_path (str): ``<org>/<project>/<stack>``.
            pulumi_token (str, optional): Overrides PULUMI_ACCESS_TOKEN.

        Returns:
            dict: Output name to value, values may be any json type.
        """
        token = pulumi_token or self.config.pulumi_access_token
        if not token:
            raise BackendConfigurationError("Pulumi", "PULUMI_ACCESS_TOKEN")

        url = f"{self.config.pulumi_endpoint.rstrip('/')}/{stack_path}/export"
        headers = dict(PULUMI_EXPORT_HEADERS)
        headers["Authorization"] = f"token {token}"

        response = self._http_session().get(url, headers=headers, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        export = response.json()

        resources = (export.get("deployment") or {}).get("resources") or []
        if not resources:
            return {}
        return resources[0].get("outputs") or {}

    def get_vault_secret(self, path):
        """Return the data of the current version of a kv v2 secret."""
        response = self._vault_client().secrets.kv.v2.read_secret_version(
            path=path,
            mount_point=self.config.vault_mount_point,
            raise_on_deleted_version=True,
        )
        return response["data"]["data"]
