"""
Tests for the shared request adapter.
"""
import base64
import json

import pytest

from brandboffin import config
from brandboffin.adapter import create_api_handler, to_lambda_handler
from brandboffin.errors import HttpError
from brandboffin.models import DomainCheckResult

from conftest import invoke, make_event

CORS_KEYS = ("Access-Control-Allow-Origin", "Access-Control-Allow-Methods", "Access-Control-Allow-Headers")


def echo_handler(**options):
    seen = []

    async def echo(payload):
        seen.append(payload)
        return {"body": payload.body, "query": payload.query_parameters}

    handler = create_api_handler(echo, **options)
    handler.seen = seen
    return handler


def failing_handler(error):
    async def fail(payload):
        raise error

    return create_api_handler(fail, allowed_methods=["POST"])


class TestPreflightAndMethods:
    @pytest.mark.parametrize("allowed", [["GET"], ["POST"], ["GET", "POST"], []])
    def test_options_short_circuits_for_any_allow_list(self, allowed):
        handler = echo_handler(allowed_methods=allowed, is_body_required=True)
        response, body = invoke(handler, "OPTIONS")

        assert response["statusCode"] == 204
        assert response["body"] == ""
        for key in CORS_KEYS:
            assert key in response["headers"]
        assert handler.seen == []

    def test_method_not_allowed(self):
        handler = echo_handler(allowed_methods=["POST"])
        response, body = invoke(handler, "DELETE")

        assert response["statusCode"] == 405
        assert body == {"message": "Method Not Allowed"}
        assert response["headers"]["Access-Control-Allow-Origin"] == "*"

    def test_method_match_is_case_insensitive(self):
        handler = echo_handler(allowed_methods=["get"])
        response, _ = invoke(handler, "GET", query={"a": "1"})
        assert response["statusCode"] == 200

    def test_configured_origin_is_used(self, monkeypatch):
        monkeypatch.setattr(config, "CORS_ALLOW_ORIGIN", "https://brandboffin.example")
        response, _ = invoke(echo_handler(allowed_methods=["GET"]), "GET")
        assert response["headers"]["Access-Control-Allow-Origin"] == "https://brandboffin.example"


class TestBodyParsing:
    def test_missing_required_body(self):
        handler = echo_handler(allowed_methods=["POST"], is_body_required=True)
        response, body = invoke(handler, "POST")

        assert response["statusCode"] == 400
        assert body == {"message": "Request body is required"}
        assert handler.seen == []

    def test_invalid_json(self):
        handler = echo_handler(allowed_methods=["POST"], is_body_required=True)
        response, body = invoke(handler, "POST", raw_body="{not json")

        assert response["statusCode"] == 400
        assert body == {"message": "Invalid JSON in request body"}

    def test_null_body_when_required(self):
        handler = echo_handler(allowed_methods=["PUT"], is_body_required=True)
        response, body = invoke(handler, "PUT", raw_body="null")

        assert response["statusCode"] == 400
        assert "Valid request body is required" in body["message"]

    def test_optional_body_may_be_absent(self):
        handler = echo_handler(allowed_methods=["POST"])
        response, body = invoke(handler, "POST")

        assert response["statusCode"] == 200
        assert body == {"body": None, "query": {}}

    def test_default_request_body(self):
        handler = echo_handler(allowed_methods=["POST"], default_request_body={"tld": "com"})
        _, body = invoke(handler, "POST")
        assert body["body"] == {"tld": "com"}

    def test_get_body_is_not_parsed(self):
        handler = echo_handler(allowed_methods=["GET"], is_body_required=True)
        response, body = invoke(handler, "GET", raw_body="{not json", query={"domain": "x.com"})

        assert response["statusCode"] == 200
        assert body == {"body": None, "query": {"domain": "x.com"}}

    def test_base64_body(self):
        handler = echo_handler(allowed_methods=["POST"], is_body_required=True)
        event = make_event("POST", raw_body=base64.b64encode(b'{"domains": ["a.com"]}').decode())
        event["isBase64Encoded"] = True

        response = to_lambda_handler(handler)(event, None)

        assert response["statusCode"] == 200
        assert json.loads(response["body"])["body"] == {"domains": ["a.com"]}

    def test_payload_carries_query_and_path(self):
        handler = echo_handler(allowed_methods=["GET"])
        event = make_event("GET", query={"tld": "io"})
        event["pathParameters"] = {"id": "7"}
        to_lambda_handler(handler)(event, None)

        payload = handler.seen[0]
        assert payload.query_parameters == {"tld": "io"}
        assert payload.path_parameters == {"id": "7"}


class TestErrorTranslation:
    def test_http_error_status_and_details(self):
        handler = failing_handler(HttpError("Nope", 418, {"field": "domains"}))
        response, body = invoke(handler, "POST", body={})

        assert response["statusCode"] == 418
        assert body == {"message": "Nope", "details": {"field": "domains"}}
        assert "Access-Control-Allow-Origin" in response["headers"]

    def test_http_error_without_details(self):
        response, body = invoke(failing_handler(HttpError("Bad", 400)), "POST", body={})
        assert body == {"message": "Bad"}

    def test_unexpected_error_is_not_leaked(self):
        handler = failing_handler(RuntimeError("secret connection string"))
        response, body = invoke(handler, "POST", body={})

        assert response["statusCode"] == 500
        assert body == {"message": "Internal Server Error"}
        assert "secret" not in response["body"]


class TestSerialization:
    def test_pydantic_result_uses_wire_names_and_drops_none(self):
        async def logic(payload):
            return DomainCheckResult(domain="example.com", available=True)

        response, body = invoke(create_api_handler(logic, ["GET"]), "GET")

        assert response["statusCode"] == 200
        assert response["headers"]["Content-Type"] == "application/json"
        assert body == {"domain": "example.com", "available": True}


def test_lambda_handler_can_be_reused_across_invocations():
    lambda_handler = to_lambda_handler(echo_handler(allowed_methods=["GET"]))

    first = lambda_handler(make_event("GET", query={"n": "1"}), None)
    second = lambda_handler(make_event("GET", query={"n": "2"}), None)

    assert json.loads(first["body"])["query"] == {"n": "1"}
    assert json.loads(second["body"])["query"] == {"n": "2"}
