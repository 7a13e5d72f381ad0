# -*- coding: utf-8 -*-
"""Prometheus metrics exposed by the operator."""

from prometheus_client import REGISTRY, Counter, Gauge, Histogram


class Metrics:
    """Reconciliation counters, pass a fresh CollectorRegistry to keep tests isolated."""

    def __init__(self, registry=REGISTRY):
        self.reconciliations = Counter(
            "rsecrets_controller_reconciliations_total",
            "reconciliations",
            registry=registry)
        self.failures = Counter(
            "rsecrets_controller_reconciliation_errors_total",
            "reconciliation errors",
            registry=registry)
        self.create_counts = Counter(
            "rsecrets_controller_create_counts_total",
            "create counts",
            registry=registry)
        self.update_counts = Counter(
            "rsecrets_controller_update_counts_total",
            "update counts",
            registry=registry)
        self.reconcile_duration = Histogram(
            "rsecrets_controller_reconcile_duration_seconds",
            "The duration of reconcile to complete in seconds",
            buckets=(0.01, 0.1, 0.25, 0.5, 1.0, 5.0, 15.0, 60.0),
            registry=registry)
        self.last_event = Gauge(
            "rsecrets_controller_last_event_timestamp_seconds",
            "Unix time of the last reconciliation event",
            registry=registry)
