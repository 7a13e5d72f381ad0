# -*- coding: utf-8 -*-
"""The RSecret custom resource as the operator sees it.

Bodies arrive from the watch as plain dictionaries (kopf bodies or the dicts the
kubernetes custom objects api returns), ``RSecret.from_body`` turns one into the
dataclasses below. Nothing here talks to the cluster.

Example::

    apiVersion: jerry153fish.com/v1beta1
    kind: RSecret
    metadata:
      name: example
      namespace: default
    spec:
      description: database credentials
      resources:
        - backend: SSM
          data:
            - value: /prod/db/password
              key: password
        - backend: Plaintext
          data:
            - value: admin
              key: username
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from dateutil import parser

GROUP = "jerry153fish.com"
VERSION = "v1beta1"
PLURAL = "rsecrets"
KIND = "RSecret"
FINALIZER = "rsecrets.jerry153fish.com/finalizer"


class BackendType(Enum):
    SSM = "SSM"
    SECRET_MANAGER = "SecretManager"
    CLOUDFORMATION = "Cloudformation"
    APP_CONFIG = "AppConfig"
    PULUMI = "Pulumi"
    VAULT = "Vault"
    PLAINTEXT = "Plaintext"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value):
        for member in cls:
            if member.value == value:
                return member
        logging.getLogger(__name__).warning(f"Unsupported backend type {value}")
        return cls.UNKNOWN


@dataclass
class SecretField:
    value: str
    key: Optional[str] = None
    is_json_string: bool = False
    remote_path: Optional[str] = None
    output_key: Optional[str] = None
    configuration_profile_id: Optional[str] = None
    version_number: Optional[Any] = None

    @classmethod
    def from_dict(cls, data):
        return cls(
            value=str(data.get("value", "")),
            key=data.get("key"),
            is_json_string=bool(data.get("is_json_string") or False),
            remote_path=data.get("remote_path"),
            output_key=data.get("output_key"),
            configuration_profile_id=data.get("configuration_profile_id"),
            version_number=data.get("version_number"),
        )


@dataclass
class Backend:
    backend: BackendType
    data: List[SecretField] = field(default_factory=list)
    pulumi_token: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        return cls(
            backend=BackendType.parse(data.get("backend")),
            data=[SecretField.from_dict(item) for item in data.get("data") or []],
            pulumi_token=data.get("pulumi_token"),
        )


@dataclass
class RSecret:
    name: str
    namespace: str
    resources: List[Backend] = field(default_factory=list)
    description: Optional[str] = None
    finalizers: List[str] = field(default_factory=list)
    deletion_timestamp: Optional[datetime] = None
    resource_version: Optional[str] = None

    @classmethod
    def from_body(cls, body):
        metadata = body.get("metadata") or {}
        spec = body.get("spec") or {}

        deletion_timestamp = metadata.get("deletionTimestamp")
        if isinstance(deletion_timestamp, str):
            deletion_timestamp = parser.isoparse(deletion_timestamp)

        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace") or "default",
            resources=[Backend.from_dict(item) for item in spec.get("resources") or []],
            description=spec.get("description"),
            finalizers=list(metadata.get("finalizers") or []),
            deletion_timestamp=deletion_timestamp,
            resource_version=metadata.get("resourceVersion"),
        )

    @property
    def key(self):
        return self.namespace, self.name

    @property
    def is_deleting(self):
        return self.deletion_timestamp is not None

    def has_finalizer(self, finalizer=FINALIZER):
        return finalizer in self.finalizers
