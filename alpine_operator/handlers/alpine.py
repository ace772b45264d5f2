import asyncio
import time
import kopf
import logging
from collections import defaultdict
from typing import Dict, Optional
from benedict import benedict
from alpine_operator.resources import Alpine, OwnerIndex, ReconcileResult
from alpine_operator.resources.owner_index import OwnerKey
from alpine_operator.types.settings import Settings
from alpine_operator.utils.errors import (
    ReconcileError,
    StatusWriteError,
    to_temporary_error,
)
from alpine_operator.utils.helpers import deep_compare_dict

KIND = Alpine.KIND
GROUP = Alpine.GROUP_NAME
POD_CREATED = "PodCreated"

owner_index = OwnerIndex(Alpine.OWNER_KIND)

# Wake-up signals for the reconcile loop of each Alpine, keyed by (namespace, name)
triggers: Dict[OwnerKey, asyncio.Event] = defaultdict(asyncio.Event)


def get_conf() -> Settings:
    return Alpine.conf or Settings()


@kopf.index("pods")
def alpine_pods(body, **kwargs):
    """Index worker pods by their controlling Alpine."""
    return owner_index.extract(body)


@kopf.on.event("pods")
def wake_owner(body, type, logger, **kwargs):
    """Any change to a worker pod triggers a pass for its Alpine."""
    entry = owner_index.extract(body)
    if not entry:
        return
    for key in entry:
        if key in triggers:
            logger.debug(f"Pod event {type} for {KIND}/{key[1]} in {key[0]} namespace.")
            triggers[key].set()


@kopf.on.update(group=GROUP, kind=KIND, field="spec")
def on_spec_update(name, namespace, **kwargs):
    key = (namespace, name)
    if key in triggers:
        triggers[key].set()


async def run_reconcile(
    body,
    name: str,
    namespace: str,
    meta,
    status,
    logger: logging.Logger,
    pods_index,
    trigger_source: str,
) -> ReconcileResult:
    """Run one reconciliation pass and report its outcome on the resource."""
    conf = get_conf()
    sensor = Alpine.sensor
    sensor_state = sensor.on_reconcile_start(
        name, namespace, meta.get("generation"), trigger_source
    )
    success = True
    error: Optional[Exception] = None

    alpine = Alpine(
        name, namespace, default_template=conf.default_worker_template, logger=logger
    )
    try:
        logger.debug(f"Reconciling {KIND}/{name} in {namespace} namespace ({trigger_source}).")
        result = await alpine.reconcile(
            OwnerIndex(Alpine.OWNER_KIND, pods_index),
            deadline=time.monotonic() + conf.reconcile_timeout_seconds,
            live_list_confirm=conf.live_list_confirm_enabled,
        )
    except ReconcileError as e:
        success, error = False, e
        kopf.warn(body, reason=e.reason, message=str(e))
        raise to_temporary_error(e, conf.retry_delay_seconds) from e
    except Exception as e:
        success, error = False, e
        raise
    finally:
        sensor.on_reconcile_complete(name, namespace, sensor_state, success, error)

    if result.created is not None:
        kopf.event(
            body,
            type="Normal",
            reason=POD_CREATED,
            message=f"Created worker pod `{result.created.metadata.name}` in `{namespace}` namespace.",
        )
    elif result.children:
        await refresh_status(alpine, result, status, logger)
    return result


async def refresh_status(alpine: Alpine, result: ReconcileResult, status, logger) -> None:
    """Record the observed worker pods if they differ from the current status.

    Best-effort: a failed write is retried on the next pass.
    """
    _status = benedict(dict(status or {}), keyattr_dynamic=True)
    children = list(result.children)
    current = list(_status.get("active") or [])
    if deep_compare_dict(current, alpine.prepare_status_patch(children)["active"]):
        return
    try:
        await alpine.write_status(alpine.prepare_status(children))
    except StatusWriteError as e:
        logger.info(f"Skipped status refresh: {e}")


async def wait_for_trigger(
    trigger: asyncio.Event, stopped, timeout: float
) -> str:
    """Sleep until the next interval, a trigger, or the daemon being stopped."""
    waiters = [
        asyncio.ensure_future(trigger.wait()),
        asyncio.ensure_future(stopped.wait()),
    ]
    try:
        await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for waiter in waiters:
            waiter.cancel()
    return "event" if trigger.is_set() else "interval"


@kopf.daemon(group=GROUP, kind=KIND, cancellation_timeout=5.0)
async def reconcile(
    stopped, body, name, namespace, meta, status, logger, alpine_pods, **kwargs
):
    """Level-triggered reconcile loop; one per Alpine, so passes never overlap."""
    key = (namespace, name)
    trigger = triggers[key]
    trigger_source = "start"
    try:
        while not stopped:
            trigger.clear()
            conf = get_conf()
            delay = conf.reconcile_interval_seconds
            try:
                result = await run_reconcile(
                    body,
                    name,
                    namespace,
                    meta,
                    status,
                    logger,
                    alpine_pods,
                    trigger_source=trigger_source,
                )
                if result.deleted:
                    break
            except kopf.TemporaryError as e:
                logger.warning(f"Reconciliation failed, retrying in {e.delay}s: {e}")
                delay = e.delay or conf.retry_delay_seconds
            except Exception as e:
                logger.error(f"Unexpected error during reconciliation: {e}")
                logger.exception(e)
                delay = conf.retry_delay_seconds
            trigger_source = await wait_for_trigger(trigger, stopped, delay)
    finally:
        triggers.pop(key, None)
