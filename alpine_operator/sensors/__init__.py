"""Alpine Operator Sensor Framework.

Hook-based, non-invasive instrumentation of operator lifecycle events.

Key components:
- OperatorSensor: Base class defining lifecycle hooks for operator events
- SensorDelegate: Fan-out pattern for routing events to multiple sensor backends
- PrometheusMonitor: Prometheus metrics exporter
"""

from alpine_operator.sensors.base import OperatorSensor
from alpine_operator.sensors.delegate import SensorDelegate
from alpine_operator.sensors.prometheus import PrometheusMonitor
from alpine_operator.sensors.server import init_metrics_server

__all__ = [
    'OperatorSensor',
    'SensorDelegate',
    'PrometheusMonitor',
    'init_metrics_server',
]
