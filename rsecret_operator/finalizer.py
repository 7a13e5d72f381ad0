# -*- coding: utf-8 -*-
"""Deletion guard on RSecret resources.

The operator's finalizer keeps an RSecret around until its Secret has been deleted.
Both operations are merge patches of ``metadata.finalizers`` and leave finalizers
owned by anybody else in place. Patches carry the snapshot's resourceVersion, so a
list written from a stale snapshot is rejected with a conflict instead of dropping a
finalizer added in the meantime. On a conflict the resource is read again and the
change is applied once more.
"""

import logging

from kubernetes.client.exceptions import ApiException

from .resource import FINALIZER, GROUP, PLURAL, VERSION


class FinalizerManager:

    def __init__(self, custom_api, finalizer=FINALIZER):
        self.custom_api = custom_api
        self.finalizer = finalizer

    def _patch_finalizers(self, rsecret, finalizers):
        metadata = {"finalizers": finalizers}
        if rsecret.resource_version:
            metadata["resourceVersion"] = rsecret.resource_version

        response = self.custom_api.patch_namespaced_custom_object(
            GROUP, VERSION, rsecret.namespace, PLURAL, rsecret.name, {"metadata": metadata})

        rsecret.finalizers = list(finalizers or [])
        if isinstance(response, dict):
            rsecret.resource_version = (response.get("metadata") or {}).get("resourceVersion")
        return response

    def _refresh(self, rsecret):
        """Reload finalizers and resourceVersion from the live resource."""
        body = self.custom_api.get_namespaced_custom_object(
            GROUP, VERSION, rsecret.namespace, PLURAL, rsecret.name)
        metadata = body.get("metadata") or {}
        rsecret.finalizers = list(metadata.get("finalizers") or [])
        rsecret.resource_version = metadata.get("resourceVersion")

    def _apply(self, rsecret, change):
        try:
            self._patch_finalizers(rsecret, change(rsecret.finalizers))
        except ApiException as e:
            if e.status != 409:
                raise
            logging.getLogger(__name__).info(
                f"rsecret {rsecret.name} in namespace {rsecret.namespace} changed, "
                f"retrying finalizer update")
            self._refresh(rsecret)
            self._patch_finalizers(rsecret, change(rsecret.finalizers))

    def guard(self, rsecret):
        """Add the finalizer, no-op when it is already there."""
        if rsecret.has_finalizer(self.finalizer):
            return False

        def add(finalizers):
            if self.finalizer in finalizers:
                return list(finalizers)
            return finalizers + [self.finalizer]

        self._apply(rsecret, add)
        logging.getLogger(__name__).info(
            f"Added finalizer to rsecret {rsecret.name} in namespace {rsecret.namespace}")
        return True

    def release(self, rsecret):
        """Remove the finalizer, no-op when it is absent or the resource is gone."""
        if not rsecret.has_finalizer(self.finalizer):
            return False

        def remove(finalizers):
            return [f for f in finalizers if f != self.finalizer] or None

        try:
            self._apply(rsecret, remove)
        except ApiException as e:
            if e.status != 404:
                raise
            rsecret.finalizers = [f for f in rsecret.finalizers if f != self.finalizer]
        logging.getLogger(__name__).info(
            f"Removed finalizer from rsecret {rsecret.name} in namespace {rsecret.namespace}")
        return True
