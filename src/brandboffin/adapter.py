"""Request adapter shared by every route.

Turns a core function `async (ApiPayload) -> result` into an API Gateway
proxy handler with method allow-listing, JSON body parsing, CORS headers
and the single HttpError -> status code translation.
"""

import asyncio
import base64
import binascii
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

from pydantic import BaseModel

from brandboffin import config
from brandboffin.errors import HttpError
from brandboffin.models import ApiPayload

logger = logging.getLogger(__name__)

CoreLogic = Callable[[ApiPayload], Awaitable[Any]]
ApiHandler = Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]

BODY_METHODS = {"POST", "PUT", "PATCH"}


def cors_headers() -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": config.CORS_ALLOW_ORIGIN,
        "Access-Control-Allow-Methods": "POST, GET, OPTIONS, PUT, DELETE, PATCH",
        "Access-Control-Allow-Headers": "Content-Type, X-Amz-Date, Authorization, X-Api-Key, X-Amz-Security-Token, Accept",
        "Content-Type": "application/json",
    }


def _response(status_code: int, body: Any = None) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": cors_headers(),
        "body": "" if body is None else json.dumps(body),
    }


def _serialize(result: Any) -> Any:
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json", by_alias=True, exclude_none=True)
    return result


def _raw_body(event: Dict[str, Any]) -> Optional[str]:
    body = event.get("body")
    if not body:
        return None
    if event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            raise ValueError("body is not valid base64")
    return body


def create_api_handler(
    core_logic: CoreLogic,
    allowed_methods: Iterable[str],
    is_body_required: bool = False,
    default_request_body: Any = None,
) -> ApiHandler:
    """Wrap `core_logic` into an async API Gateway proxy handler."""
    allowed = {m.upper() for m in allowed_methods}
    name = getattr(core_logic, "__name__", "handler")

    async def handler(event: Dict[str, Any]) -> Dict[str, Any]:
        method = (event.get("httpMethod") or "").upper()
        logger.info(f"{name}: {method} request")

        if method == "OPTIONS":
            return _response(204)

        if method not in allowed:
            logger.info(f"{name}: returning 405 for {method}")
            return _response(405, {"message": "Method Not Allowed"})

        parsed_body = default_request_body
        if method in BODY_METHODS:
            try:
                raw_body = _raw_body(event)
            except ValueError:
                return _response(400, {"message": "Invalid JSON in request body"})

            if is_body_required and raw_body is None:
                logger.info(f"{name}: returning 400 for missing body")
                return _response(400, {"message": "Request body is required"})

            if raw_body is not None:
                try:
                    parsed_body = json.loads(raw_body)
                except json.JSONDecodeError:
                    logger.info(f"{name}: invalid JSON in request body")
                    return _response(400, {"message": "Invalid JSON in request body"})

            if is_body_required and parsed_body is None:
                return _response(
                    400,
                    {"message": "Valid request body is required and could not be parsed or was missing."},
                )

        logger.debug(f"{name}: parsed body {parsed_body!r}")

        payload = ApiPayload(
            body=parsed_body,
            query_parameters=event.get("queryStringParameters") or {},
            path_parameters=event.get("pathParameters") or {},
        )

        try:
            result = await core_logic(payload)
        except HttpError as e:
            logger.warning(f"{name}: returning {e.status_code}: {e.message}")
            return _response(e.status_code, e.to_body())
        except Exception:
            logger.exception(f"{name}: unexpected error")
            return _response(500, {"message": "Internal Server Error"})

        logger.info(f"{name}: returning 200")
        return _response(200, _serialize(result))

    handler.__name__ = name
    return handler


_loop: Optional[asyncio.AbstractEventLoop] = None


def _event_loop() -> asyncio.AbstractEventLoop:
    # One loop per warm process so pooled httpx connections stay usable
    global _loop
    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
    return _loop


def to_lambda_handler(api_handler: ApiHandler) -> Callable[[Dict[str, Any], Any], Dict[str, Any]]:
    """Synchronous `(event, context)` entry point for serverless runtimes."""

    def lambda_handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
        return _event_loop().run_until_complete(api_handler(event))

    lambda_handler.__name__ = getattr(api_handler, "__name__", "lambda_handler")
    return lambda_handler
