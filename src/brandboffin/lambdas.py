"""Serverless entry points, one per capability.

Clients are built on first use and reused while the process stays warm.
"""

from functools import lru_cache
from typing import Any, Dict

from brandboffin.adapter import ApiHandler, to_lambda_handler
from brandboffin.brands import BrandNameClient, create_brand_client
from brandboffin.config import configure_logging
from brandboffin.registry import DomainRegistry
from brandboffin.routes import build_routes

configure_logging()


@lru_cache(maxsize=1)
def get_registry() -> DomainRegistry:
    return DomainRegistry()


@lru_cache(maxsize=1)
def get_brand_client() -> BrandNameClient:
    return create_brand_client()


@lru_cache(maxsize=1)
def get_routes() -> Dict[str, ApiHandler]:
    return build_routes(get_registry(), get_brand_client())


async def close_clients():
    """Release pooled connections of clients that were actually built."""
    if get_brand_client.cache_info().currsize:
        await get_brand_client().aclose()


def _entry_point(route: str):
    def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
        return to_lambda_handler(get_routes()[route])(event, context)

    handler.__name__ = f"{route}_handler"
    return handler


check_domain_handler = _entry_point("check_domain")
check_domains_handler = _entry_point("check_domains")
domain_suggestions_handler = _entry_point("domain_suggestions")
tld_prices_handler = _entry_point("tld_prices")
brand_names_handler = _entry_point("brand_names")
