# -*- coding: utf-8 -*-
"""Reconciliation of one RSecret observation.

What to do is worked out afresh on every call from two fields of the resource,
the deletion timestamp and the operator's finalizer. Nothing is remembered between
calls, so a restart or a missed event is repaired by the next reconciliation.

    deletion timestamp  finalizer   action
    set                 any         Delete  remove the Secret then the finalizer
    unset               absent      Create  add the finalizer then write the Secret
    unset               present     Update  rewrite the Secret if its content changed
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from prometheus_client import CollectorRegistry

from .config import DEFAULT_ERROR_REQUEUE_SECONDS, DEFAULT_REQUEUE_SECONDS
from .materializer import MaterializeResult
from .metrics import Metrics


class ReconcileAction(Enum):
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


def classify(has_deletion_timestamp, has_finalizer):
    if has_deletion_timestamp:
        return ReconcileAction.DELETE
    if not has_finalizer:
        return ReconcileAction.CREATE
    return ReconcileAction.UPDATE


@dataclass(frozen=True)
class Action:
    """When to reconcile the resource again, None means only on the next change."""
    requeue_after: Optional[float] = None

    @classmethod
    def requeue(cls, seconds):
        return cls(requeue_after=float(seconds))

    @classmethod
    def await_change(cls):
        return cls(requeue_after=None)


class Reconciler:
    """Drives an RSecret to its desired state.

    Calls for the same (namespace, name) are serialised with a per resource lock,
    the watch handler and the resync daemon can otherwise race on the same Secret.
    Calls for different resources run concurrently.
    """

    def __init__(self,
                 assembler,
                 materializer,
                 finalizers,
                 metrics=None,
                 requeue_seconds=DEFAULT_REQUEUE_SECONDS,
                 error_requeue_seconds=DEFAULT_ERROR_REQUEUE_SECONDS):
        self.assembler = assembler
        self.materializer = materializer
        self.finalizers = finalizers
        self.metrics = metrics if metrics is not None else Metrics(CollectorRegistry())
        self.requeue_seconds = requeue_seconds
        self.error_requeue_seconds = error_requeue_seconds
        self.last_event = datetime.now(timezone.utc)
        self._locks = {}
        self._locks_lock = threading.Lock()

    def _lock_for(self, key):
        with self._locks_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def forget(self, key):
        """Drop the lock of a resource that is gone, kept while a reconcile holds it."""
        with self._locks_lock:
            lock = self._locks.get(key)
            if lock is not None and not lock.locked():
                del self._locks[key]

    def state(self):
        return {"last_event": self.last_event.isoformat()}

    def run(self, rsecret):
        """Reconcile, turning any failure into a delayed retry."""
        try:
            return self.reconcile(rsecret)
        except Exception as e:
            return self.error_policy(rsecret, e)

    def error_policy(self, rsecret, error):
        logging.getLogger(__name__).warning(
            f"reconcile failed for rsecret {rsecret.name} in namespace {rsecret.namespace}: "
            f"{error!r}")
        self.metrics.failures.inc()
        return Action.requeue(self.error_requeue_seconds)

    def reconcile(self, rsecret):
        self.metrics.reconciliations.inc()
        self.last_event = datetime.now(timezone.utc)
        self.metrics.last_event.set_to_current_time()

        with self.metrics.reconcile_duration.time(), self._lock_for(rsecret.key):
            action = classify(rsecret.is_deleting,
                              rsecret.has_finalizer(self.finalizers.finalizer))

            if action is ReconcileAction.DELETE:
                return self._delete(rsecret)
            if action is ReconcileAction.CREATE:
                return self._create(rsecret)
            return self._update(rsecret)

    def _create(self, rsecret):
        self.finalizers.guard(rsecret)
        data = self.assembler.assemble(rsecret)
        self._count(self.materializer.ensure(rsecret, data))
        return Action.requeue(self.requeue_seconds)

    def _update(self, rsecret):
        logging.getLogger(__name__).info(
            f"Updating rsecret {rsecret.name} in namespace {rsecret.namespace}")

        existing = self.materializer.get(rsecret.name, rsecret.namespace)
        if existing is None:
            # deleted behind our back, start over
            return self._create(rsecret)

        data = self.assembler.assemble(rsecret)
        self._count(self.materializer.ensure(rsecret, data, existing=existing))
        return Action.requeue(self.requeue_seconds)

    def _delete(self, rsecret):
        self.materializer.remove(rsecret.name, rsecret.namespace)
        self.finalizers.release(rsecret)
        return Action.await_change()

    def _count(self, result):
        if result is MaterializeResult.CREATED:
            self.metrics.create_counts.inc()
        elif result is MaterializeResult.PATCHED:
            self.metrics.update_counts.inc()
