"""Unit tests for error helpers."""

import json
import kopf
from kubernetes_asyncio.client import ApiException
from alpine_operator.utils.errors import (
    ConstructionError,
    CreateError,
    OwnershipError,
    ReconcileError,
    already_exists_error,
    conflict_error,
    describe_api_exception,
    not_found_error,
    to_temporary_error,
)


def api_exception(status, reason, message=None):
    ex = ApiException(status=status, reason=reason)
    body = {"kind": "Status", "reason": reason}
    if message:
        body["message"] = message
    ex.body = json.dumps(body)
    return ex


class TestApiExceptionClassifiers:
    """Tests for ApiException classifiers."""

    def test_already_exists(self):
        assert already_exists_error(api_exception(409, "AlreadyExists"))
        assert not already_exists_error(api_exception(409, "Conflict"))

    def test_conflict(self):
        assert conflict_error(api_exception(409, "Conflict"))
        assert not conflict_error(api_exception(409, "AlreadyExists"))

    def test_not_found(self):
        assert not_found_error(api_exception(404, "NotFound"))
        assert not not_found_error(api_exception(500, "InternalError"))

    def test_other_exceptions(self):
        assert not already_exists_error(ValueError("x"))
        assert not conflict_error(ValueError("x"))

    def test_unparseable_body(self):
        ex = ApiException(status=409, reason="Conflict")
        ex.body = "not json"
        assert not conflict_error(ex)

    def test_describe(self):
        message = describe_api_exception(api_exception(422, "Invalid", "spec.containers: Required"))
        assert message == "Kubernetes API error (422): Invalid - spec.containers: Required"


class TestReconcileErrors:
    """Tests for the reconciliation error taxonomy."""

    def test_hierarchy(self):
        assert issubclass(OwnershipError, ConstructionError)
        assert issubclass(CreateError, ReconcileError)

    def test_reasons(self):
        assert CreateError("x").reason == "PodCreateFailed"
        assert OwnershipError("x").reason == "OwnershipFailed"

    def test_to_temporary_error(self):
        error = to_temporary_error(CreateError("boom"), delay=15)
        assert isinstance(error, kopf.TemporaryError)
        assert not isinstance(error, kopf.PermanentError)
        assert error.delay == 15
        assert str(error) == "boom"

    def test_to_temporary_error_from_api_exception(self):
        error = to_temporary_error(api_exception(500, "InternalError", "etcd down"), delay=1)
        assert "etcd down" in str(error)
