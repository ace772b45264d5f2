"""Sensor delegation for fan-out pattern.

SensorDelegate routes sensor events to multiple monitoring backends. Each
backend receives the same events and keeps independent state. A failing
backend is logged and never breaks reconciliation.
"""

from typing import Set, Dict, Optional, Any
import logging

from alpine_operator.sensors.base import OperatorSensor

logger = logging.getLogger(__name__)


class SensorDelegate(OperatorSensor):
    """Delegate sensor that fans out events to multiple backends.

    Example:
        delegate = SensorDelegate()
        delegate.add(PrometheusMonitor())

        state = delegate.on_reconcile_start("web", "default", 1, "interval")
        delegate.on_reconcile_complete("web", "default", state, True)
    """

    def __init__(self) -> None:
        self._sensors: Set[OperatorSensor] = set()

    def add(self, sensor: OperatorSensor) -> None:
        logger.info(f"Adding sensor: {sensor.__class__.__name__}")
        self._sensors.add(sensor)

    def remove(self, sensor: OperatorSensor) -> None:
        logger.info(f"Removing sensor: {sensor.__class__.__name__}")
        self._sensors.discard(sensor)

    def clear(self) -> None:
        logger.info(f"Clearing {len(self._sensors)} sensors")
        self._sensors.clear()

    def _start(self, hook: str, *args) -> Optional[Dict[OperatorSensor, Any]]:
        if not self._sensors:
            return None

        states = {}
        for sensor in self._sensors:
            try:
                state = getattr(sensor, hook)(*args)
                if state is not None:
                    states[sensor] = state
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.{hook}: {e}",
                    exc_info=True,
                )

        return states if states else None

    def _complete(self, hook: str, state: Optional[Dict[OperatorSensor, Any]], *args, **kwargs) -> None:
        for sensor in self._sensors:
            try:
                sensor_state = state.get(sensor) if state else None
                getattr(sensor, hook)(*args, sensor_state, **kwargs)
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.{hook}: {e}",
                    exc_info=True,
                )

    # =============================================================================
    # Reconciliation Lifecycle Hooks
    # =============================================================================

    def on_reconcile_start(
        self,
        name: str,
        namespace: str,
        generation: Optional[int],
        trigger_source: str,
    ) -> Optional[Dict[OperatorSensor, Any]]:
        """Delegate reconcile_start to all sensors.

        Returns:
            Dict mapping each sensor to its returned state, or None if no sensors
        """
        return self._start("on_reconcile_start", name, namespace, generation, trigger_source)

    def on_reconcile_complete(
        self,
        name: str,
        namespace: str,
        state: Optional[Dict[OperatorSensor, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        self._complete(
            "on_reconcile_complete", state, name, namespace, success=success, error=error
        )

    # =============================================================================
    # Worker Pod Hooks
    # =============================================================================

    def on_pod_create_start(
        self,
        name: str,
        pod_name: str,
        namespace: str,
    ) -> Optional[Dict[OperatorSensor, Any]]:
        return self._start("on_pod_create_start", name, pod_name, namespace)

    def on_pod_create_complete(
        self,
        name: str,
        pod_name: str,
        namespace: str,
        state: Optional[Dict[OperatorSensor, Any]],
        success: bool,
        error: Optional[Exception] = None,
    ) -> None:
        self._complete(
            "on_pod_create_complete",
            state,
            name,
            pod_name,
            namespace,
            success=success,
            error=error,
        )

    def on_children_observed(self, name: str, namespace: str, count: int) -> None:
        for sensor in self._sensors:
            try:
                sensor.on_children_observed(name, namespace, count)
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.on_children_observed: {e}",
                    exc_info=True,
                )
