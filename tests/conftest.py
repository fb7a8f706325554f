"""
Test configuration and fixtures for brandboffin tests.
"""
import asyncio
import json
from unittest.mock import AsyncMock

import boto3
import httpx
import pytest
from botocore.stub import Stubber

from brandboffin import config
from brandboffin.brands import AnthropicBrandClient, BedrockBrandClient, BrandNameClient, OutputFormat
from brandboffin.models import DomainCheckResult
from brandboffin.registry import DomainRegistry
from brandboffin.routes import build_routes


class RecordingSleep:
    """Stand-in for asyncio.sleep that returns immediately and records delays."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


def run(coro):
    return asyncio.run(coro)


def make_event(method, body=None, query=None, raw_body=None):
    """Build an API Gateway proxy event."""
    if raw_body is None and body is not None:
        raw_body = json.dumps(body)
    return {
        "httpMethod": method,
        "body": raw_body,
        "queryStringParameters": query,
        "pathParameters": None,
        "isBase64Encoded": False,
    }


def invoke(handler, method, body=None, query=None, raw_body=None):
    """Call an adapter handler and decode its JSON body."""
    response = run(handler(make_event(method, body=body, query=query, raw_body=raw_body)))
    decoded = json.loads(response["body"]) if response["body"] else None
    return response, decoded


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep local .env values out of the tests."""
    monkeypatch.setattr(config, "ANTHROPIC_API_KEY", "")
    monkeypatch.setattr(config, "MODEL_SECRET_NAME", "")
    monkeypatch.setattr(config, "CORS_ALLOW_ORIGIN", "*")
    monkeypatch.setattr(config, "DEFAULT_BATCH_DELAY_MS", 1000)
    monkeypatch.setattr(config, "DEFAULT_SUGGESTION_COUNT", 20)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def route53_client():
    return boto3.client(
        "route53domains",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def route53_stub(route53_client):
    with Stubber(route53_client) as stubber:
        yield stubber
        stubber.assert_no_pending_responses()


@pytest.fixture
def registry(route53_client, route53_stub, recording_sleep):
    return DomainRegistry(client=route53_client, sleep=recording_sleep)


@pytest.fixture
def secrets_client():
    return boto3.client(
        "secretsmanager",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


class ModelAPI:
    """httpx MockTransport answering like the Anthropic Messages API."""

    def __init__(self):
        self.text = "[]"
        self.status_code = 200
        self.error = None
        self.requests = []

    def reply_with(self, text, status_code=200):
        self.text = text
        self.status_code = status_code

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"type": "error", "error": {"message": "nope"}})
        return httpx.Response(
            200,
            json={
                "id": "msg_test",
                "type": "message",
                "role": "assistant",
                "content": [{"type": "text", "text": self.text}],
            },
        )

    @property
    def last_json(self):
        return json.loads(self.requests[-1].content)


@pytest.fixture
def model_api():
    return ModelAPI()


@pytest.fixture
def make_brand_client(model_api):
    def factory(output_format=OutputFormat.JSON, **kwargs):
        kwargs.setdefault("api_key", "test-key")
        return AnthropicBrandClient(
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(model_api)),
            output_format=output_format,
            **kwargs,
        )

    return factory


@pytest.fixture
def fake_registry():
    registry = AsyncMock(spec=DomainRegistry)
    registry.check_domain.side_effect = lambda domain: DomainCheckResult(domain=domain, available=True)
    registry.check_domains.side_effect = lambda domains, delay_ms, max_retries: [
        DomainCheckResult(domain=d, available=False) for d in domains
    ]
    registry.get_domain_suggestions.return_value = []
    registry.get_tld_prices.return_value = []
    return registry


@pytest.fixture
def fake_brand_client():
    client = AsyncMock(spec=BrandNameClient)
    client.suggest.return_value = []
    return client


@pytest.fixture
def routes(fake_registry, fake_brand_client):
    return build_routes(fake_registry, fake_brand_client)


@pytest.fixture
def bedrock_runtime():
    return boto3.client(
        "bedrock-runtime",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def bedrock_stub(bedrock_runtime):
    with Stubber(bedrock_runtime) as stubber:
        yield stubber
        stubber.assert_no_pending_responses()


@pytest.fixture
def bedrock_client(bedrock_runtime, bedrock_stub):
    return BedrockBrandClient(
        bedrock_client=bedrock_runtime,
        model="amazon.nova-premier-v1:0",
        temperature=0.7,
        max_tokens=2000,
        top_p=0.9,
        output_format=OutputFormat.JSON,
    )
