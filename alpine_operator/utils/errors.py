import json
import kopf
import kubernetes_asyncio

_ALREADY_EXISTS = "alreadyexists"
_NOT_FOUND = "notfound"
_CONFLICT = "conflict"


def _reason(ex: kubernetes_asyncio.client.ApiException) -> str:
    try:
        err = json.loads(ex.body) if ex.body else {}
    except (json.JSONDecodeError, TypeError):
        return ""
    return str(err.get("reason", "")).lower()


def already_exists_error(ex: kubernetes_asyncio.client.ApiException) -> bool:
    if not isinstance(ex, kubernetes_asyncio.client.ApiException):
        return False
    return ex.status == 409 and _reason(ex) == _ALREADY_EXISTS


def not_found_error(ex: kubernetes_asyncio.client.ApiException) -> bool:
    if not isinstance(ex, kubernetes_asyncio.client.ApiException):
        return False
    return ex.status == 404 or _reason(ex) == _NOT_FOUND


def conflict_error(ex: kubernetes_asyncio.client.ApiException) -> bool:
    """Resource version conflict (optimistic concurrency failure)."""
    if not isinstance(ex, kubernetes_asyncio.client.ApiException):
        return False
    return ex.status == 409 and _reason(ex) == _CONFLICT


def describe_api_exception(ex: kubernetes_asyncio.client.ApiException) -> str:
    """Render an ApiException as a short, serializable message."""
    error_msg = f"Kubernetes API error ({ex.status}): {ex.reason}"
    try:
        if ex.body:
            body = json.loads(ex.body)
            if "message" in body:
                error_msg = f"{error_msg} - {body['message']}"
    except (json.JSONDecodeError, AttributeError, TypeError):
        pass
    return error_msg


class ReconcileError(Exception):
    """A reconciliation pass failed and should be retried."""

    #: Reason attached to the Kubernetes event posted for this failure.
    reason: str = "ReconcileFailed"


class FetchError(ReconcileError):
    reason = "FetchFailed"


class ListError(ReconcileError):
    reason = "ListPodsFailed"


class StatusWriteError(ReconcileError):
    reason = "StatusUpdateFailed"


class ConstructionError(ReconcileError):
    reason = "PodConstructionFailed"


class OwnershipError(ConstructionError):
    reason = "OwnershipFailed"


class CreateError(ReconcileError):
    reason = "PodCreateFailed"


class ReconcileTimeout(ReconcileError):
    reason = "ReconcileTimeout"


def to_temporary_error(ex: Exception, delay: float) -> kopf.TemporaryError:
    """Convert a reconciliation failure to a Kopf-friendly, retriable exception.

    Failures are never permanent: the resource always stays eligible for
    another pass.
    """
    if isinstance(ex, kubernetes_asyncio.client.ApiException):
        message = describe_api_exception(ex)
    else:
        message = str(ex) or ex.__class__.__name__
    return kopf.TemporaryError(message, delay=delay)
