# -*- coding: utf-8 -*-
"""Wires the operator together and keeps track of when each RSecret is next due.

The watch handler and the per resource resync loop both hand work to a
``Controller``. Every reconciliation returns an ``Action`` and the controller
records when that resource should run again. The resync loop asks
``seconds_until_due`` and sleeps until then.
"""

import logging
import threading
import time

from kubernetes.client.exceptions import ApiException

from .assembler import SecretAssembler
from .backends import BackendResolver
from .clients import RemoteClients
from .finalizer import FinalizerManager
from .materializer import TargetMaterializer
from .reconciler import Action, Reconciler
from .resource import GROUP, PLURAL, VERSION, RSecret
from .value_cache import ValueCache


class Controller:

    def __init__(self, config, core_api, custom_api, clients=None, cache=None, metrics=None,
                 _clock=None):
        self.config = config
        self.custom_api = custom_api
        self.cache = cache if cache is not None else ValueCache()
        self.clients = clients if clients is not None else RemoteClients(config)

        resolver = BackendResolver(self.clients, self.cache, ttl=config.cache_ttl)
        self.assembler = SecretAssembler(resolver, max_workers=config.max_workers)
        self.reconciler = Reconciler(
            self.assembler,
            TargetMaterializer(core_api),
            FinalizerManager(custom_api),
            metrics=metrics,
            requeue_seconds=config.requeue_seconds,
            error_requeue_seconds=config.error_requeue_seconds,
        )

        self._clock = _clock if _clock is not None else time.monotonic
        self._due = {}
        self._due_lock = threading.Lock()

    def state(self):
        return self.reconciler.state()

    def handle(self, body):
        """Reconcile a resource snapshot and schedule its next run."""
        try:
            rsecret = RSecret.from_body(body)
        except Exception as e:
            metadata = body.get("metadata") or {}
            rsecret = RSecret(name=metadata.get("name", ""),
                              namespace=metadata.get("namespace") or "default")
            action = self.reconciler.error_policy(rsecret, e)
        else:
            action = self.reconciler.run(rsecret)
        self.schedule(rsecret.key, action)
        return action

    def fetch(self, name, namespace):
        """Return the current body of an RSecret, None once it is gone."""
        try:
            return self.custom_api.get_namespaced_custom_object(
                GROUP, VERSION, namespace, PLURAL, name)
        except ApiException as e:
            if e.status == 404:
                return None
            raise

    def resync(self, name, namespace):
        """Reconcile the live state of an RSecret, used by the periodic loop."""
        key = (namespace, name)
        try:
            body = self.fetch(name, namespace)
        except ApiException as e:
            action = self.reconciler.error_policy(RSecret(name=name, namespace=namespace), e)
            self.schedule(key, action)
            return action

        if body is None:
            logging.getLogger(__name__).info(
                f"rsecret {name} in namespace {namespace} is gone, stopping resync")
            self.forget(key)
            return Action.await_change()

        return self.handle(body)

    def schedule(self, key, action):
        # nothing is due until the next change, so nothing is kept for the resource
        if action.requeue_after is None:
            self.forget(key)
            return

        with self._due_lock:
            self._due[key] = self._clock() + action.requeue_after

    def seconds_until_due(self, key):
        """Seconds until key should reconcile again, 0.0 for a resource not scheduled."""
        with self._due_lock:
            due = self._due.get(key)
        if due is None:
            return 0.0
        return max(0.0, due - self._clock())

    def forget(self, key):
        with self._due_lock:
            self._due.pop(key, None)
        self.reconciler.forget(key)
