import os
import shlex
from typing import Any, List
from alpine_operator.types.models.pod_template import DefaultWorkerTemplate

_TRUE, _FALSE = {"True", "true", "yes", "1"}, {"False", "false", "no", "0"}


def _getenv(name: str, *default: Any) -> Any:
    try:
        v = os.environ[name]
        if v in _TRUE:
            return True
        elif v in _FALSE:
            return False
        else:
            return v
    except KeyError:
        pass
    if default:
        return default[0]
    raise KeyError(name)


def _split_command(command: Any) -> List[str]:
    if isinstance(command, (list, tuple)):
        return list(command)
    return shlex.split(str(command))


# ------------------------------------------------
# ---- Defaults and environment variables ----
# ------------------------------------------------

#: Image of the worker container when an Alpine has no pod template
DEFAULT_WORKER_IMAGE = _getenv("DEFAULT_WORKER_IMAGE", "alpine")

#: Name of the worker container when an Alpine has no pod template
DEFAULT_WORKER_CONTAINER_NAME = _getenv("DEFAULT_WORKER_CONTAINER_NAME", "alpine")

#: Image pull policy of the default worker container
DEFAULT_WORKER_IMAGE_PULL_POLICY = _getenv(
    "DEFAULT_WORKER_IMAGE_PULL_POLICY", "IfNotPresent"
)

#: Command of the default worker container (shell-split)
DEFAULT_WORKER_COMMAND = _split_command(
    _getenv("DEFAULT_WORKER_COMMAND", "sleep 3600")
)

#: Restart policy of the default worker pod
DEFAULT_WORKER_RESTART_POLICY = _getenv("DEFAULT_WORKER_RESTART_POLICY", "Always")

#: Seconds between periodic (level-triggered) reconciliation passes
RECONCILE_INTERVAL_SECONDS = float(_getenv("RECONCILE_INTERVAL_SECONDS", 10.0))

#: Seconds a single reconciliation pass may take before it is abandoned between steps
RECONCILE_TIMEOUT_SECONDS = float(_getenv("RECONCILE_TIMEOUT_SECONDS", 60.0))

#: Seconds Kopf waits before retrying a failed reconciliation pass
RETRY_DELAY_SECONDS = float(_getenv("RETRY_DELAY_SECONDS", 30.0))

#: Maximum number of resources reconciled concurrently
WORKER_LIMIT = int(_getenv("WORKER_LIMIT", 2))

#: Confirm an empty owner index with a live pod listing before creating a worker
LIVE_LIST_CONFIRM_ENABLED = bool(_getenv("LIVE_LIST_CONFIRM_ENABLED", True))

#: Expose Prometheus metrics
METRICS_ENABLED = bool(_getenv("METRICS_ENABLED", True))

#: Port of the Prometheus metrics server
METRICS_PORT = int(_getenv("METRICS_PORT", 8000))


class Settings:
    """Operator settings"""

    default_worker_image: str = DEFAULT_WORKER_IMAGE
    default_worker_container_name: str = DEFAULT_WORKER_CONTAINER_NAME
    default_worker_image_pull_policy: str = DEFAULT_WORKER_IMAGE_PULL_POLICY
    default_worker_command: List[str] = DEFAULT_WORKER_COMMAND
    default_worker_restart_policy: str = DEFAULT_WORKER_RESTART_POLICY
    reconcile_interval_seconds: float = RECONCILE_INTERVAL_SECONDS
    reconcile_timeout_seconds: float = RECONCILE_TIMEOUT_SECONDS
    retry_delay_seconds: float = RETRY_DELAY_SECONDS
    worker_limit: int = WORKER_LIMIT
    live_list_confirm_enabled: bool = LIVE_LIST_CONFIRM_ENABLED
    metrics_enabled: bool = METRICS_ENABLED
    metrics_port: int = METRICS_PORT

    def __init__(
        self,
        *args,
        default_worker_image: str = None,
        default_worker_container_name: str = None,
        default_worker_image_pull_policy: str = None,
        default_worker_command: List[str] = None,
        default_worker_restart_policy: str = None,
        reconcile_interval_seconds: float = None,
        reconcile_timeout_seconds: float = None,
        retry_delay_seconds: float = None,
        worker_limit: int = None,
        live_list_confirm_enabled: bool = None,
        metrics_enabled: bool = None,
        metrics_port: int = None,
        **kwargs,
    ):
        if default_worker_image is not None:
            self.default_worker_image = default_worker_image

        if default_worker_container_name is not None:
            self.default_worker_container_name = default_worker_container_name

        if default_worker_image_pull_policy is not None:
            self.default_worker_image_pull_policy = default_worker_image_pull_policy

        if default_worker_command is not None:
            self.default_worker_command = _split_command(default_worker_command)

        if default_worker_restart_policy is not None:
            self.default_worker_restart_policy = default_worker_restart_policy

        if reconcile_interval_seconds is not None:
            self.reconcile_interval_seconds = reconcile_interval_seconds

        if reconcile_timeout_seconds is not None:
            self.reconcile_timeout_seconds = reconcile_timeout_seconds

        if retry_delay_seconds is not None:
            self.retry_delay_seconds = retry_delay_seconds

        if worker_limit is not None:
            self.worker_limit = worker_limit

        if live_list_confirm_enabled is not None:
            self.live_list_confirm_enabled = live_list_confirm_enabled

        if metrics_enabled is not None:
            self.metrics_enabled = metrics_enabled

        if metrics_port is not None:
            self.metrics_port = metrics_port

    @property
    def default_worker_template(self) -> DefaultWorkerTemplate:
        """Immutable worker template used when an Alpine has no pod template."""
        return DefaultWorkerTemplate(
            image=self.default_worker_image,
            container_name=self.default_worker_container_name,
            image_pull_policy=self.default_worker_image_pull_policy,
            command=tuple(self.default_worker_command),
            restart_policy=self.default_worker_restart_policy,
        )
