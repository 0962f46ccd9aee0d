"""Unit tests for the fault hierarchy and the error translator."""

from __future__ import annotations

import logging

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel

from studenthub_api.middleware.auth_errors import (
    AccountLockedError,
    EmailAlreadyExistsError,
    InvalidCredentialsError,
    TokenExpiredError,
)
from studenthub_api.middleware.error_handler import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    HttpError,
    InternalServerError,
    NotFoundError,
    RateLimitExceededError,
    ServiceUnavailableError,
    UnauthorizedError,
    register_error_handlers,
    translate_exception,
)
from studenthub_api.middleware.request_id import RequestIdMiddleware


# ---------------------------------------------------------------------------
# Test app fixture
# ---------------------------------------------------------------------------


class Payload(BaseModel):
    name: str
    age: int


def _make_app() -> FastAPI:
    """Build a minimal FastAPI app with error handlers registered."""
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/raise-conflict")
    async def _raise_conflict():
        raise HttpError({"message": "Resource already exists"}, 409)

    @app.get("/raise-not-found")
    async def _raise_not_found():
        raise NotFoundError("Post 42 not found")

    @app.get("/raise-domain")
    async def _raise_domain():
        raise InvalidCredentialsError()

    @app.get("/raise-fastapi-http")
    async def _raise_fastapi_http():
        raise HTTPException(status_code=403, detail="Only group admins can do this")

    @app.get("/raise-throttled")
    async def _raise_throttled():
        raise RateLimitExceededError(
            details={"retryAfter": 12}, headers={"Retry-After": "12"}
        )

    @app.get("/raise-unhandled")
    async def _raise_unhandled():
        raise RuntimeError("database password=hunter2 leaked")

    @app.post("/validate")
    async def _validate(payload: Payload):
        return {"ok": True}

    app.add_middleware(RequestIdMiddleware)
    return app


@pytest.fixture()
def client():
    return TestClient(_make_app(), raise_server_exceptions=False)


# ---------------------------------------------------------------------------
# Error hierarchy tests
# ---------------------------------------------------------------------------


class TestErrorHierarchy:
    """All classified faults are HttpError subclasses with a fixed status."""

    @pytest.mark.parametrize(
        "cls,status",
        [
            (BadRequestError, 400),
            (UnauthorizedError, 401),
            (ForbiddenError, 403),
            (NotFoundError, 404),
            (ConflictError, 409),
            (RateLimitExceededError, 429),
            (InternalServerError, 500),
            (ServiceUnavailableError, 503),
            (InvalidCredentialsError, 401),
            (EmailAlreadyExistsError, 409),
            (AccountLockedError, 403),
            (TokenExpiredError, 401),
        ],
    )
    def test_status_codes(self, cls, status):
        assert issubclass(cls, HttpError)
        assert cls().status_code == status

    def test_default_message_is_payload(self):
        err = NotFoundError()
        assert err.payload == "Not found"
        assert err.message == "Not found"
        assert str(err) == "Not found"

    def test_custom_message_override(self):
        err = NotFoundError("Group abc-123 not found")
        assert err.message == "Group abc-123 not found"

    def test_mapping_payload_message(self):
        err = HttpError({"message": "Slot taken", "code": "EVENT_FULL"}, 409)
        assert err.status_code == 409
        assert err.message == "Slot taken"

    def test_status_override_is_per_instance(self):
        err = BadRequestError("teapot", status_code=418)
        assert err.status_code == 418
        assert BadRequestError.status_code == 400

    def test_email_already_exists_mentions_email(self):
        err = EmailAlreadyExistsError("ann@uni.edu")
        assert err.message == "User with email ann@uni.edu already exists"
        assert err.email == "ann@uni.edu"


# ---------------------------------------------------------------------------
# translate_exception
# ---------------------------------------------------------------------------


class TestTranslateException:
    def test_string_payload_derives_code_from_status(self):
        status, body = translate_exception(HttpError("Post not found", 404))
        assert status == 404
        assert body["success"] is False
        assert body["error"]["code"] == "RESOURCE_NOT_FOUND"
        assert body["error"]["statusCode"] == 404

    def test_canonical_message_overrides_fault_text(self):
        _, body = translate_exception(NotFoundError("Post 42 not found"))
        assert body["error"]["message"] == "Resource not found"

    def test_mapping_payload_code_and_details_win(self):
        exc = HttpError(
            {"code": "EVENT_FULL", "message": "Event is full", "details": {"capacity": 30}},
            409,
        )
        _, body = translate_exception(exc)
        assert body["error"]["code"] == "EVENT_FULL"
        assert body["error"]["message"] == "Event is full"
        assert body["error"]["details"] == {"capacity": 30}

    def test_mapping_payload_without_code_falls_back_to_status(self):
        _, body = translate_exception(HttpError({"details": ["title too long"]}, 400))
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["error"]["message"] == "Validation failed"
        assert body["error"]["details"] == ["title too long"]

    def test_list_message_becomes_details(self):
        exc = BadRequestError({"message": ["email must be an email", "age must be positive"]})
        _, body = translate_exception(exc)
        assert body["error"]["details"] == ["email must be an email", "age must be positive"]
        assert body["error"]["message"] == "Validation failed"

    def test_other_payload_uses_fault_message(self):
        _, body = translate_exception(HttpError(12345, 404))
        assert body["error"]["code"] == "RESOURCE_NOT_FOUND"

    def test_domain_code_keeps_its_message(self):
        _, body = translate_exception(AccountLockedError())
        assert body["error"]["code"] == "AUTH_ACCOUNT_LOCKED"
        assert body["error"]["message"] == "Account is locked due to multiple failed login attempts"
        assert body["error"]["statusCode"] == 403

    def test_unmapped_status_maps_to_internal_error_code(self):
        status, body = translate_exception(HttpError("I'm a teapot", 418))
        assert status == 418
        assert body["error"]["code"] == "INTERNAL_SERVER_ERROR"

    def test_unclassified_exception_is_500_and_logged(self, caplog):
        with caplog.at_level(logging.ERROR, logger="studenthub_api.middleware.error_handler"):
            status, body = translate_exception(
                KeyError("user_id"), request_id="rid-1", version="1.0", route="GET /posts"
            )

        assert status == 500
        assert body["error"] == {
            "code": "INTERNAL_SERVER_ERROR",
            "message": "Internal server error",
            "statusCode": 500,
            "timestamp": body["error"]["timestamp"],
        }
        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.route == "GET /posts"
        assert record.exc_info is not None

    def test_classified_faults_are_not_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="studenthub_api.middleware.error_handler"):
            translate_exception(ConflictError("dup"))
        assert caplog.records == []

    def test_meta_carries_request_id_and_version(self):
        _, body = translate_exception(NotFoundError(), request_id="abc", version="2.1")
        assert body["meta"]["requestId"] == "abc"
        assert body["meta"]["version"] == "2.1"
        assert body["meta"]["timestamp"].endswith("Z")

    def test_details_omitted_when_absent(self):
        _, body = translate_exception(NotFoundError())
        assert "details" not in body["error"]
        assert "data" not in body


# ---------------------------------------------------------------------------
# Exception handler tests
# ---------------------------------------------------------------------------


class TestExceptionHandlers:
    """FastAPI exception handlers return the error envelope and status."""

    def test_conflict_end_to_end(self, client):
        resp = client.get("/raise-conflict")
        assert resp.status_code == 409
        body = resp.json()
        assert body["success"] is False
        assert body["error"]["code"] == "RESOURCE_ALREADY_EXISTS"
        assert body["error"]["message"] == "Resource already exists"
        assert body["error"]["statusCode"] == 409
        assert "timestamp" in body["error"]
        assert body["meta"]["version"] == "1.0"

    def test_request_id_propagated(self, client):
        resp = client.get("/raise-not-found", headers={"X-Request-ID": "trace-123"})
        assert resp.json()["meta"]["requestId"] == "trace-123"
        assert resp.headers["X-Request-ID"] == "trace-123"

    def test_domain_fault(self, client):
        resp = client.get("/raise-domain")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "AUTH_INVALID_CREDENTIALS"

    def test_fastapi_http_exception_is_classified(self, client):
        resp = client.get("/raise-fastapi-http")
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "AUTH_INSUFFICIENT_PERMISSIONS"

    def test_unknown_route_is_resource_not_found(self, client):
        resp = client.get("/no-such-route")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "RESOURCE_NOT_FOUND"

    def test_rate_limit_sets_retry_after(self, client):
        resp = client.get("/raise-throttled")
        assert resp.status_code == 429
        assert resp.headers["Retry-After"] == "12"
        body = resp.json()
        assert body["error"]["code"] == "RATE_LIMIT_EXCEEDED"
        assert body["error"]["details"] == {"retryAfter": 12}

    def test_request_validation_error_is_400(self, client):
        resp = client.post("/validate", json={"name": 123})
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"]["code"] == "VALIDATION_ERROR"
        fields = [item["field"] for item in body["error"]["details"]]
        assert "body -> age" in fields

    def test_unhandled_exception_returns_generic_500(self, client):
        resp = client.get("/raise-unhandled")
        assert resp.status_code == 500
        body = resp.json()
        assert body["success"] is False
        assert body["error"]["code"] == "INTERNAL_SERVER_ERROR"
        assert body["error"]["message"] == "Internal server error"
        assert "hunter2" not in resp.text
        assert body["meta"]["requestId"]

    def test_api_version_from_environment(self, client, monkeypatch):
        from studenthub_api.config.settings import get_settings

        monkeypatch.setenv("API_VERSION", "2.0")
        get_settings.cache_clear()
        resp = client.get("/raise-not-found")
        assert resp.json()["meta"]["version"] == "2.0"

    def test_unhandled_exception_logged_once_by_translator(self, client, caplog):
        with caplog.at_level(logging.ERROR, logger="studenthub_api.middleware.error_handler"):
            client.get("/raise-unhandled")

        records = [r for r in caplog.records if r.name == "studenthub_api.middleware.error_handler"]
        assert len(records) == 1
        assert records[0].route == "GET /raise-unhandled"
        assert records[0].request_id
