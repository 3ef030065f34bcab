"""Tests for application wiring: health, OpenAPI, request gate."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from form_mailer.core.errors import MethodNotAllowedAppError
from form_mailer.main import app
from form_mailer.services.submission_service import gate_request

client = TestClient(app)


def test_health_check():
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "rate_limit_backend": "memory"}


class TestGateRequest:
    def test_options_is_preflight(self):
        assert gate_request("OPTIONS") == "preflight"

    def test_post_proceeds(self):
        assert gate_request("POST") == "proceed"

    def test_method_is_case_insensitive(self):
        assert gate_request("post") == "proceed"

    @pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "PATCH", "HEAD"])
    def test_other_methods_rejected(self, method: str):
        with pytest.raises(MethodNotAllowedAppError) as exc_info:
            gate_request(method)

        assert exc_info.value.status_code == 405
        assert exc_info.value.message == "Method not allowed"


class TestOpenAPI:
    def test_documents_form_endpoints(self):
        schema = client.get("/openapi.json").json()

        assert "post" in schema["paths"]["/v1/contact-form"]
        assert "post" in schema["paths"]["/v1/reminder-form"]
        # Catch-all method routes stay out of the docs
        assert "get" not in schema["paths"]["/v1/contact-form"]

    def test_request_body_uses_camel_case(self):
        schema = client.get("/openapi.json").json()
        body = schema["paths"]["/v1/contact-form"]["post"]["requestBody"]
        properties = body["content"]["application/json"]["schema"]["properties"]

        assert {"firstName", "lastName", "email", "message", "reason"} <= set(properties)

    def test_tags_and_cors_headers(self):
        schema = client.get("/openapi.json").json()

        assert {tag["name"] for tag in schema["tags"]} >= {"Forms", "Health"}
        responses = schema["paths"]["/v1/reminder-form"]["post"]["responses"]
        assert "Access-Control-Allow-Origin" in responses["429"]["headers"]
