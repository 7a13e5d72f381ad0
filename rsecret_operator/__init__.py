# -*- coding: utf-8 -*-
"""rsecret_operator

A kubernetes operator that keeps Secrets in sync with values held in external
backends (parameter store, secret managers, stack outputs, appconfig, vault or plain
values) as declared by RSecret custom resources.

"""

from __future__ import absolute_import

from rsecret_operator.value_cache import ValueCache
from rsecret_operator.exceptions import RSecretError, \
    BackendFetchError, \
    NoActiveSecretVersion, \
    SecretChecksumMismatch, \
    StackOutputNotFound, \
    BackendConfigurationError, \
    EmptyRemoteValue
from rsecret_operator.resource import BackendType, \
    SecretField, \
    Backend, \
    RSecret, \
    FINALIZER
from rsecret_operator.config import OperatorConfig
from rsecret_operator.backends import BackendResolver
from rsecret_operator.assembler import SecretAssembler, merge_secret_data
from rsecret_operator.fingerprint import fingerprint, stored_fingerprint
from rsecret_operator.materializer import TargetMaterializer, MaterializeResult
from rsecret_operator.finalizer import FinalizerManager
from rsecret_operator.reconciler import Reconciler, \
    ReconcileAction, \
    Action, \
    classify
from rsecret_operator.controller import Controller
from ._version import __version__

__all__ = ["__version__",
           "ValueCache",
           "RSecretError",
           "BackendFetchError",
           "NoActiveSecretVersion",
           "SecretChecksumMismatch",
           "StackOutputNotFound",
           "BackendConfigurationError",
           "EmptyRemoteValue",
           "BackendType",
           "SecretField",
           "Backend",
           "RSecret",
           "FINALIZER",
           "OperatorConfig",
           "BackendResolver",
           "SecretAssembler",
           "merge_secret_data",
           "fingerprint",
           "stored_fingerprint",
           "TargetMaterializer",
           "MaterializeResult",
           "FinalizerManager",
           "Reconciler",
           "ReconcileAction",
           "Action",
           "classify",
           "Controller"]
