# -*- coding: utf-8 -*-
"""kopf handlers for the RSecret operator.

Run with::

    kopf run -m rsecret_operator.handlers --all-namespaces
"""

import logging

import kopf
from kubernetes import client, config
from prometheus_client import start_http_server

from .config import OperatorConfig
from .controller import Controller
from .metrics import Metrics
from .resource import GROUP, PLURAL, VERSION

# how often an idle resync loop looks at its schedule again
POLL_SECONDS = 5.0


def load_kubernetes_config():
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, memo: kopf.Memo, **_):
    operator_config = OperatorConfig.from_env()
    load_kubernetes_config()

    memo.controller = Controller(operator_config,
                                 client.CoreV1Api(),
                                 client.CustomObjectsApi(),
                                 metrics=Metrics())

    if operator_config.metrics_port:
        start_http_server(operator_config.metrics_port)
        logging.getLogger(__name__).info(
            f"Serving metrics on port {operator_config.metrics_port}")


@kopf.on.event(GROUP, VERSION, PLURAL)
def on_event(event, body, memo: kopf.Memo, **_):
    # the object no longer exists, teardown already happened on its deletion timestamp
    if event.get("type") == "DELETED":
        metadata = body.get("metadata") or {}
        memo.controller.forget((metadata.get("namespace") or "default", metadata.get("name", "")))
        return
    memo.controller.handle(body)


@kopf.daemon(GROUP, VERSION, PLURAL, cancellation_timeout=POLL_SECONDS)
def resync(stopped, name, namespace, memo: kopf.Memo, **_):
    controller = memo.controller
    key = (namespace, name)

    while not stopped:
        delay = controller.seconds_until_due(key)
        if delay > 0:
            stopped.wait(min(delay, POLL_SECONDS))
        else:
            action = controller.resync(name, namespace)
            # deleted, kopf stops daemons once the deletion timestamp is set
            if action.requeue_after is None:
                return
