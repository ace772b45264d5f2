import kopf
import logging
import alpine_operator.handlers.alpine as alpine
import alpine_operator.handlers.probes as probes
from alpine_operator.types.settings import Settings
from alpine_operator.resources import Alpine
from alpine_operator.sensors import init_metrics_server, SensorDelegate, PrometheusMonitor
from kubernetes_asyncio import config
from kubernetes_asyncio.client.api_client import ApiClient


# Configure Kopf settings
@kopf.on.startup()
async def setup(
    settings: kopf.OperatorSettings, memo: kopf.Memo, logger: logging.Logger, **kwargs
):
    # Load Kubernetes config - try in-cluster first (for production), then local kubeconfig (for dev)
    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        logger.info("In-cluster config not found, trying local kubeconfig")
        try:
            await config.load_kube_config()
            logger.info("Loaded local Kubernetes configuration")
        except config.ConfigException as e:
            logger.error(f"Failed to load Kubernetes configuration: {e}")
            raise

    memo.conf = Settings()
    Alpine.conf = memo.conf
    template = memo.conf.default_worker_template
    logger.info(
        f"Default worker: image={template.image} command={list(template.command)} "
        f"restartPolicy={template.restart_policy}"
    )

    # Create a shared ApiClient for all resources to prevent connection leaks
    Alpine.shared_api_client = ApiClient()
    logger.info("Shared Kubernetes API client initialized")

    sensor_delegate = SensorDelegate()
    if memo.conf.metrics_enabled:
        sensor_delegate.add(PrometheusMonitor())
        try:
            init_metrics_server(memo.conf.metrics_port)
        except Exception as e:
            # Don't fail operator startup if metrics server fails
            logger.error(f"Failed to start metrics server: {e}")
            logger.warning("Continuing without metrics server")
    memo.sensor = sensor_delegate
    Alpine.sensor = sensor_delegate

    # Limit the number of concurrent workers to prevent flooding the API
    settings.batching.worker_limit = memo.conf.worker_limit

    # Post log records at Warning and above as events on the resource
    settings.posting.enabled = True
    settings.posting.level = logging.WARNING


@kopf.on.cleanup()
async def cleanup(logger: logging.Logger, **kwargs):
    """Cleanup handler for operator shutdown."""
    logger.info("Shutting down operator...")

    if Alpine.shared_api_client is not None:
        await Alpine.shared_api_client.close()
        Alpine.shared_api_client = None
        logger.info("Shared API client closed")

    logger.info("Operator shutdown complete")


__all__ = [
    "alpine",
    "probes",
]
