# -*- coding: utf-8 -*-
"""Operator configuration read from the process environment.

Variable names follow the ones the operator has always honoured so existing
deployments keep working::

    TEST_ENV                        "true" sends AWS calls to localstack
    LOCALSTACK_URL                  localstack endpoint
    AWS_REGION / AWS_DEFAULT_REGION region for the boto3 clients
    VAULT_ADDR, VAULT_TOKEN         vault server and token
    VAULT_MOUNT_POINT               kv v2 mount point
    PULUMI_ENDPOINT                 pulumi stacks api
    PULUMI_ACCESS_TOKEN             default pulumi token
    RSECRET_CACHE_TTL               seconds a remote value is reused
    RSECRET_REQUEUE_SECONDS         steady state resync interval
    RSECRET_ERROR_REQUEUE_SECONDS   resync interval after a failed reconcile
    RSECRET_MAX_WORKERS             threads resolving backends in parallel
    METRICS_PORT                    serve prometheus metrics when set
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_LOCALSTACK_URL = "http://localhost:4566/"
DEFAULT_TEST_VAULT_ADDR = "http://localhost:8200"
DEFAULT_TEST_VAULT_TOKEN = "vault-plaintext-root-token"
DEFAULT_PULUMI_ENDPOINT = "https://api.pulumi.com/api/stacks"

DEFAULT_CACHE_TTL = 60.0
DEFAULT_REQUEUE_SECONDS = 20.0
DEFAULT_ERROR_REQUEUE_SECONDS = 300.0


def _flag(value):
    return str(value).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class OperatorConfig:
    test_env: bool = False
    localstack_url: str = DEFAULT_LOCALSTACK_URL
    aws_region: Optional[str] = None
    vault_addr: Optional[str] = None
    vault_token: Optional[str] = None
    vault_mount_point: str = "secret"
    pulumi_endpoint: str = DEFAULT_PULUMI_ENDPOINT
    pulumi_access_token: Optional[str] = None
    cache_ttl: float = DEFAULT_CACHE_TTL
    requeue_seconds: float = DEFAULT_REQUEUE_SECONDS
    error_requeue_seconds: float = DEFAULT_ERROR_REQUEUE_SECONDS
    max_workers: int = 4
    metrics_port: Optional[int] = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = None) -> "OperatorConfig":
        if environ is None:
            environ = os.environ

        test_env = _flag(environ.get("TEST_ENV", "false"))

        vault_addr = environ.get("VAULT_ADDR")
        vault_token = environ.get("VAULT_TOKEN")
        # a local dev vault is assumed when running against localstack
        if test_env:
            vault_addr = vault_addr or DEFAULT_TEST_VAULT_ADDR
            vault_token = vault_token or DEFAULT_TEST_VAULT_TOKEN

        metrics_port = environ.get("METRICS_PORT")

        return cls(
            test_env=test_env,
            localstack_url=environ.get("LOCALSTACK_URL", DEFAULT_LOCALSTACK_URL),
            aws_region=environ.get("AWS_REGION") or environ.get("AWS_DEFAULT_REGION"),
            vault_addr=vault_addr,
            vault_token=vault_token,
            vault_mount_point=environ.get("VAULT_MOUNT_POINT", "secret"),
            pulumi_endpoint=environ.get("PULUMI_ENDPOINT", DEFAULT_PULUMI_ENDPOINT),
            pulumi_access_token=environ.get("PULUMI_ACCESS_TOKEN"),
            cache_ttl=float(environ.get("RSECRET_CACHE_TTL", DEFAULT_CACHE_TTL)),
            requeue_seconds=float(environ.get("RSECRET_REQUEUE_SECONDS",
                                              DEFAULT_REQUEUE_SECONDS)),
            error_requeue_seconds=float(environ.get("RSECRET_ERROR_REQUEUE_SECONDS",
                                                    DEFAULT_ERROR_REQUEUE_SECONDS)),
            max_workers=int(environ.get("RSECRET_MAX_WORKERS", 4)),
            metrics_port=int(metrics_port) if metrics_port else None,
        )
