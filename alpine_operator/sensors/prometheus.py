"""Prometheus monitoring backend for the Alpine operator.

PrometheusMonitor collects operator lifecycle events and exposes them as
Prometheus metrics:

1. Reconciliation loop health - duration, throughput, errors
2. Worker pods - creation attempts and latency, observed children
"""

from typing import Dict, Optional, Any
import time
import logging

from prometheus_client import Counter, Histogram, Gauge, REGISTRY, CollectorRegistry

from alpine_operator.sensors.base import OperatorSensor

logger = logging.getLogger(__name__)


class PrometheusMonitor(OperatorSensor):
    """Prometheus metrics monitor for the Alpine operator.

    Metrics:
    - alpineop_reconcile_* - Reconciliation loop metrics
    - alpineop_pod_* - Worker pod metrics
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        super().__init__()

        # =============================================================================
        # Reconciliation Loop Metrics
        # =============================================================================

        self.reconcile_duration = Histogram(
            'alpineop_reconcile_duration_seconds',
            'Time spent in a reconciliation pass',
            labelnames=['name', 'namespace', 'trigger_source', 'result'],
            buckets=[0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
            registry=registry,
        )

        self.reconcile_total = Counter(
            'alpineop_reconcile_total',
            'Total number of reconciliation passes',
            labelnames=['name', 'namespace', 'trigger_source', 'result'],
            registry=registry,
        )

        self.reconcile_errors = Counter(
            'alpineop_reconcile_errors_total',
            'Total number of reconciliation errors',
            labelnames=['name', 'namespace', 'error_type'],
            registry=registry,
        )

        # =============================================================================
        # Worker Pod Metrics
        # =============================================================================

        self.pod_create_duration = Histogram(
            'alpineop_pod_create_duration_seconds',
            'Time spent submitting a worker pod',
            labelnames=['name', 'namespace', 'result'],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
            registry=registry,
        )

        self.pod_create_total = Counter(
            'alpineop_pod_create_total',
            'Total number of worker pod creation attempts',
            labelnames=['name', 'namespace', 'result'],
            registry=registry,
        )

        self.children = Gauge(
            'alpineop_pod_children',
            'Worker pods observed for an Alpine during its last reconciliation pass',
            labelnames=['name', 'namespace'],
            registry=registry,
        )

        logger.info("PrometheusMonitor initialized with all metrics")

    # =============================================================================
    # Reconciliation Lifecycle Hooks
    # =============================================================================

    def on_reconcile_start(
        self,
        name: str,
        namespace: str,
        generation: Optional[int],
        trigger_source: str,
    ) -> Optional[Dict[str, Any]]:
        """Record reconciliation start time."""
        return {
            'start_time': time.time(),
            'trigger_source': trigger_source,
        }

    def on_reconcile_complete(
        self,
        name: str,
        namespace: str,
        state: Optional[Dict[str, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        """Record reconciliation duration and result."""
        if state:
            duration = time.time() - state['start_time']
            trigger_source = state['trigger_source']
            result = 'success' if success else 'failure'

            self.reconcile_duration.labels(
                name=name,
                namespace=namespace,
                trigger_source=trigger_source,
                result=result,
            ).observe(duration)

            self.reconcile_total.labels(
                name=name,
                namespace=namespace,
                trigger_source=trigger_source,
                result=result,
            ).inc()

        if error:
            self.reconcile_errors.labels(
                name=name,
                namespace=namespace,
                error_type=error.__class__.__name__,
            ).inc()

    # =============================================================================
    # Worker Pod Hooks
    # =============================================================================

    def on_pod_create_start(
        self,
        name: str,
        pod_name: str,
        namespace: str,
    ) -> Optional[Dict[str, Any]]:
        return {'start_time': time.time()}

    def on_pod_create_complete(
        self,
        name: str,
        pod_name: str,
        namespace: str,
        state: Optional[Dict[str, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        result = 'success' if success else 'failure'
        if state:
            self.pod_create_duration.labels(
                name=name, namespace=namespace, result=result
            ).observe(time.time() - state['start_time'])
        self.pod_create_total.labels(name=name, namespace=namespace, result=result).inc()

    def on_children_observed(self, name: str, namespace: str, count: int) -> None:
        self.children.labels(name=name, namespace=namespace).set(count)
