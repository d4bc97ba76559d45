"""
Tests for error responses over HTTP.

Drives the example routes through the full middleware stack and checks
that every failure comes back in the canonical shape.
"""

from datetime import datetime, timedelta, timezone

import jwt
from fastapi.testclient import TestClient

from faultline.core.config import Settings

REQUIRED_FIELDS = {"errorName", "errorCode", "httpStatus", "message", "timestamp", "path"}


def _token(secret: str, expires_in: timedelta) -> str:
    claims = {"sub": "user-1", "exp": datetime.now(timezone.utc) + expires_in}
    return jwt.encode(claims, secret, algorithm="HS256")


class TestOperationalFaults:
    """AppErrors raised by handlers keep their status, code and message."""

    def test_validation_scenario(self, client: TestClient) -> None:
        response = client.get("/api/v1/examples/validation")
        assert response.status_code == 400
        body = response.json()
        assert REQUIRED_FIELDS <= set(body)
        assert body["errorCode"] == "validation-failed"
        assert body["httpStatus"] == 400
        assert body["message"] == "Email is required"
        assert body["errorName"] == "ValidationError"
        assert body["path"] == "/api/v1/examples/validation"
        assert "details" not in body

    def test_details_are_returned(self, client: TestClient) -> None:
        body = client.get("/api/v1/examples/validation/details").json()
        assert body["details"]["fields"] == ["email", "password"]

    def test_async_handler_fault(self, client: TestClient) -> None:
        response = client.get("/api/v1/examples/users/42")
        assert response.status_code == 404
        assert response.json()["message"] == "User with ID 42 not found"

    def test_conflict_with_custom_code(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/examples/signup",
            json={"email": "taken@example.com", "password": "longenough"},
        )
        assert response.status_code == 409
        assert response.json()["errorCode"] == "auth-email-already-exists"

    def test_operational_5xx(self, client: TestClient) -> None:
        response = client.get("/api/v1/examples/failures/not-implemented")
        assert response.status_code == 501
        assert response.json()["errorCode"] == "server-not-implemented"

    def test_signup_success_is_untouched(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/examples/signup",
            json={"email": "new@example.com", "password": "longenough"},
        )
        assert response.status_code == 201
        assert response.json() == {"email": "new@example.com"}


class TestRequestBodyFaults:
    def test_malformed_json(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/examples/signup",
            content=b'{"email": ',
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["errorCode"] == "validation-failed"
        assert body["message"] == "Invalid JSON in request body"

    def test_missing_field(self, client: TestClient) -> None:
        response = client.post("/api/v1/examples/signup", json={"email": "a@b.c"})
        assert response.status_code == 400
        body = response.json()
        assert body["errorCode"] == "validation-db-error"
        assert body["details"] == [{"field": "body.password", "message": "Field required"}]


class TestTokenFaults:
    def test_expired_token(self, client: TestClient) -> None:
        token = _token(Settings().jwt_secret, timedelta(minutes=-5))
        response = client.get("/api/v1/examples/token", params={"token": token})
        assert response.status_code == 401
        body = response.json()
        assert body["errorCode"] == "auth-invalid-token"
        assert body["message"] == "Your session has expired. Please log in again"

    def test_malformed_token(self, client: TestClient) -> None:
        response = client.get("/api/v1/examples/token", params={"token": "abc"})
        assert response.status_code == 401
        body = response.json()
        assert body["errorCode"] == "auth-invalid-token"
        assert body["message"] == "Invalid authentication token"

    def test_valid_token(self, client: TestClient) -> None:
        token = _token(Settings().jwt_secret, timedelta(minutes=5))
        response = client.get("/api/v1/examples/token", params={"token": token})
        assert response.status_code == 200
        assert response.json() == {"subject": "user-1"}


class TestRateLimitFaults:
    def test_limit_breach(self, client: TestClient) -> None:
        statuses = [client.get("/api/v1/examples/limited").status_code for _ in range(4)]
        assert statuses[:3] == [200, 200, 200]
        assert statuses[3] == 429
        body = client.get("/api/v1/examples/limited").json()
        assert body["errorCode"] == "rate-limit-exceeded"
        assert body["message"] == "Too many requests. Please try again later"

    def test_operational_rate_limit_keeps_message(self, client: TestClient) -> None:
        body = client.get("/api/v1/examples/login-attempts").json()
        assert body["httpStatus"] == 429
        assert body["message"] == "Too many login attempts. Please try again in 15 minutes"


class TestUploadFaults:
    def test_accepted_files(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/examples/uploads",
            files=[("files", ("a.txt", b"aaa", "text/plain")), ("files", ("b.txt", b"b", "text/plain"))],
        )
        assert response.status_code == 200
        assert response.json() == {"filenames": ["a.txt", "b.txt"]}

    def test_unexpected_field(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/examples/uploads",
            files=[("avatar", ("a.png", b"x", "image/png"))],
        )
        assert response.status_code == 400
        body = response.json()
        assert body["errorCode"] == "upload-error"
        assert body["message"] == "File upload error"

    def test_file_too_large(self, make_client) -> None:
        small = make_client(max_upload_size_bytes=4)
        response = small.post(
            "/api/v1/examples/uploads",
            files=[("files", ("big.bin", b"0123456789", "application/octet-stream"))],
        )
        assert response.status_code == 400
        body = response.json()
        assert body["errorCode"] == "upload-error"
        assert body["message"] == "File size exceeds the maximum allowed limit"

    def test_too_many_files(self, make_client) -> None:
        one = make_client(max_upload_files=1)
        response = one.post(
            "/api/v1/examples/uploads",
            files=[("files", ("a", b"a", "text/plain")), ("files", ("b", b"b", "text/plain"))],
        )
        assert response.status_code == 400
        assert response.json()["message"] == "File upload error"

    def test_malformed_multipart_body(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/examples/uploads",
            content=b"not a multipart body",
            headers={"Content-Type": "multipart/form-data"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["errorName"] == "HTTPException"
        assert body["errorCode"] == "client-bad-request"


class TestForeignFaults:
    def test_network_fault(self, client: TestClient) -> None:
        response = client.get("/api/v1/examples/failures/network")
        assert response.status_code == 503
        assert response.json()["errorCode"] == "external-unavailable"

    def test_unexpected_fault_in_production(self, client: TestClient) -> None:
        response = client.get("/api/v1/examples/failures/unexpected")
        assert response.status_code == 500
        body = response.json()
        assert body["errorCode"] == "server-internal-error"
        assert body["errorName"] == "RuntimeError"
        assert body["message"] == "An unexpected error occurred"
        assert "details" not in body

    def test_unexpected_fault_in_debug(self, debug_client: TestClient) -> None:
        body = debug_client.get("/api/v1/examples/failures/unexpected").json()
        assert body["message"] == "Cache index corrupted at slot 7"
        assert "RuntimeError" in body["details"]["stack"]

    def test_debug_stack_on_operational_fault(self, debug_client: TestClient) -> None:
        body = debug_client.get("/api/v1/examples/validation/details").json()
        assert body["details"]["fields"] == ["email", "password"]
        assert "stack" in body["details"]

    def test_database_fault(self, client: TestClient) -> None:
        body = client.get("/api/v1/examples/failures/database").json()
        assert body["httpStatus"] == 500
        assert body["errorCode"] == "storage-error"
        assert body["message"] == "Failed to save user to database"


class TestRoutingFaults:
    def test_unmatched_route_scenario(self, client: TestClient) -> None:
        response = client.get("/nope")
        assert response.status_code == 404
        body = response.json()
        assert body["errorCode"] == "client-not-found"
        assert body["httpStatus"] == 404
        assert body["message"] == "The requested endpoint GET /nope was not found"
        assert body["path"] == "/nope"

    def test_unmatched_route_keeps_query(self, client: TestClient) -> None:
        body = client.delete("/missing", params={"page": "2"}).json()
        assert body["message"] == "The requested endpoint DELETE /missing?page=2 was not found"

    def test_wrong_method_is_405(self, client: TestClient) -> None:
        response = client.post("/api/v1/health")
        assert response.status_code == 405
        assert response.json()["errorCode"] == "client-method-not-allowed"
        assert "GET" in response.headers["allow"]


class TestHeadersOnErrors:
    def test_security_headers_present(self, client: TestClient) -> None:
        response = client.get("/nope")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Cache-Control"] == "no-store"

    def test_success_responses_are_cacheable(self, client: TestClient) -> None:
        response = client.get("/api/v1/health")
        assert "Cache-Control" not in response.headers
        assert response.headers["X-Frame-Options"] == "DENY"
