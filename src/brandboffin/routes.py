"""Core logic for every route.

Each route validates its own input, calls one client operation and wraps
the result in the route's response envelope.
"""

import logging
import re
from typing import Any, Dict

from pydantic import ValidationError

from brandboffin import config
from brandboffin.adapter import ApiHandler, create_api_handler
from brandboffin.brands import BrandNameClient
from brandboffin.errors import bad_request
from brandboffin.models import (
    ApiPayload,
    BatchDomainCheckResponse,
    BrandNameRequest,
    BrandNameSuggestionsResponse,
    DomainCheckResponse,
    DomainSuggestionsResponse,
    TLDPricesResponse,
)
from brandboffin.registry import DomainRegistry

logger = logging.getLogger(__name__)

MAX_BATCH_DELAY_MS = 10_000
MAX_PENDING_RETRIES = 5
MAX_SUGGESTION_COUNT = 50

ROUTE_METHODS = {
    "check_domain": ["GET", "POST"],
    "check_domains": ["POST"],
    "domain_suggestions": ["GET", "POST"],
    "tld_prices": ["GET", "POST"],
    "brand_names": ["POST"],
}


# ==================== INPUT HELPERS ====================
def sanitize_domain(raw: str) -> str:
    """Lowercase, strip whitespace and drop characters not valid in a domain name."""
    domain = re.sub(r"\s+", "", raw.strip().lower())
    return re.sub(r"[^a-z0-9.-]", "", domain)


def _body(payload: ApiPayload) -> Dict[str, Any]:
    if not isinstance(payload.body, dict):
        raise bad_request("Request body must be a JSON object")
    return payload.body


def _parse_bool(value: Any, name: str, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise bad_request(f"{name} must be a boolean")


def _parse_int(value: Any, name: str, default: int, minimum: int, maximum: int) -> int:
    if value is None:
        return default
    invalid = bad_request(f"{name} must be an integer between {minimum} and {maximum}")
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise invalid
    elif isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or not minimum <= value <= maximum:
        raise invalid
    return value


# ==================== DOMAINS ====================
def make_check_domain(registry: DomainRegistry):
    async def check_domain(payload: ApiPayload) -> DomainCheckResponse:
        raw_domain = payload.param("domain", "domainName")
        domain = sanitize_domain(raw_domain) if isinstance(raw_domain, str) else ""
        if not domain:
            raise bad_request("Domain is required and must be a non-empty string")

        logger.info(f"Domain to check: {domain}")
        result = await registry.check_domain(domain)
        return DomainCheckResponse(result=result)

    return check_domain


def make_check_domains(registry: DomainRegistry):
    async def check_domains(payload: ApiPayload) -> BatchDomainCheckResponse:
        body = payload.body if isinstance(payload.body, dict) else {}
        domains = body.get("domains")
        if not isinstance(domains, list) or len(domains) == 0:
            raise bad_request("Domains array is required and must not be empty")
        if any(not isinstance(d, str) or not sanitize_domain(d) for d in domains):
            raise bad_request("All domains in the array must be non-empty strings")

        delay_ms = _parse_int(body.get("delayMs"), "delayMs", config.DEFAULT_BATCH_DELAY_MS, 0, MAX_BATCH_DELAY_MS)
        max_retries = _parse_int(body.get("maxRetries"), "maxRetries", 0, 0, MAX_PENDING_RETRIES)

        domains = [sanitize_domain(d) for d in domains]
        logger.info(f"Domains to check: {', '.join(domains)}, delay: {delay_ms}ms")
        results = await registry.check_domains(domains, delay_ms=delay_ms, max_retries=max_retries)
        return BatchDomainCheckResponse(results=results)

    return check_domains


def make_domain_suggestions(registry: DomainRegistry):
    async def domain_suggestions(payload: ApiPayload) -> DomainSuggestionsResponse:
        domain_name = payload.param("domainName")
        if not isinstance(domain_name, str) or not domain_name.strip():
            raise bad_request("domainName is required and must be a non-empty string")

        domain_name = domain_name.strip().lower().rstrip(".")
        if not domain_name or domain_name.startswith("."):
            raise bad_request(f"Invalid domain name format: '{domain_name}'. Please provide a valid domain or keyword.")
        # Route 53 needs a TLD to base suggestions on
        if "." not in domain_name:
            domain_name = f"{domain_name}.com"

        only_available = _parse_bool(payload.param("onlyAvailable"), "onlyAvailable", True)
        suggestion_count = _parse_int(
            payload.param("suggestionCount"),
            "suggestionCount",
            config.DEFAULT_SUGGESTION_COUNT,
            1,
            MAX_SUGGESTION_COUNT,
        )

        logger.info(
            f'Fetching domain suggestions for "{domain_name}", '
            f"onlyAvailable: {only_available}, count: {suggestion_count}"
        )
        suggestions = await registry.get_domain_suggestions(domain_name, only_available, suggestion_count)
        return DomainSuggestionsResponse(suggestions=suggestions)

    return domain_suggestions


def make_tld_prices(registry: DomainRegistry):
    async def tld_prices(payload: ApiPayload) -> TLDPricesResponse:
        tld = payload.param("tld")
        if tld is not None and not isinstance(tld, str):
            raise bad_request("tld must be a string")

        logger.info(f"Fetching TLD prices. Filter TLD: {tld or 'all'}")
        prices = await registry.get_tld_prices(tld)
        return TLDPricesResponse(prices=prices)

    return tld_prices


# ==================== BRANDS ====================
def make_brand_names(brand_client: BrandNameClient):
    async def brand_names(payload: ApiPayload) -> BrandNameSuggestionsResponse:
        body = _body(payload)
        prompt = body.get("prompt")
        if not isinstance(prompt, str) or not prompt.strip():
            raise bad_request("Prompt is required and must be a non-empty string")

        try:
            request = BrandNameRequest.model_validate({k: v for k, v in body.items() if v is not None})
        except ValidationError as e:
            details = [
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]
            raise bad_request("Invalid brand name request", details)

        suggestions = await brand_client.suggest(request)
        logger.info(f"Returning {len(suggestions)} brand suggestions")
        return BrandNameSuggestionsResponse(suggestions=suggestions)

    return brand_names


# ==================== COMPOSITION ====================
def build_routes(registry: DomainRegistry, brand_client: BrandNameClient) -> Dict[str, ApiHandler]:
    """Adapter-wrapped handler per capability, sharing the given clients."""
    return {
        "check_domain": create_api_handler(make_check_domain(registry), ROUTE_METHODS["check_domain"]),
        "check_domains": create_api_handler(
            make_check_domains(registry), ROUTE_METHODS["check_domains"], is_body_required=True
        ),
        "domain_suggestions": create_api_handler(
            make_domain_suggestions(registry), ROUTE_METHODS["domain_suggestions"]
        ),
        "tld_prices": create_api_handler(make_tld_prices(registry), ROUTE_METHODS["tld_prices"]),
        "brand_names": create_api_handler(
            make_brand_names(brand_client), ROUTE_METHODS["brand_names"], is_body_required=True
        ),
    }
