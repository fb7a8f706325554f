"""Route 53 Domains client.

Route 53 Domains has no bulk availability endpoint and throttles
undocumented, so batches are checked one domain at a time with a fixed
pause between calls.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from brandboffin import config
from brandboffin.errors import HttpError, bad_request, upstream_error
from brandboffin.models import DomainCheckResult, DomainSuggestion, TLDPrice

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

INVALID_INPUT_CODES = {"InvalidInput", "UnsupportedTLD"}
LIST_PRICES_PAGE_SIZE = 1000  # maximum accepted by ListPrices


def build_route53domains_client(region_name: str = config.REGISTRY_REGION):
    return boto3.client("route53domains", region_name=region_name)


def _error_code(error: Exception) -> str:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code", "")
    return ""


class DomainRegistry:
    def __init__(self, client=None, sleep: Sleep = asyncio.sleep):
        self.client = client or build_route53domains_client()
        self.sleep = sleep

    async def _availability(self, domain: str) -> str:
        """Raw availability status for one domain, e.g. AVAILABLE or PENDING."""
        try:
            response = await asyncio.to_thread(self.client.check_domain_availability, DomainName=domain)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error checking domain {domain}: {e}")
            if _error_code(e) in INVALID_INPUT_CODES:
                raise bad_request(
                    f"Invalid domain name or TLD: {domain}. "
                    "Please ensure the format is correct and the TLD is valid."
                )
            raise upstream_error("Failed to check domain availability.")

        availability = response.get("Availability") or "UNKNOWN"
        logger.info(f"Domain {domain} availability: {availability}")
        return availability

    async def check_domain(self, domain: str) -> DomainCheckResult:
        availability = await self._availability(domain)
        return DomainCheckResult(domain=domain, available=availability == "AVAILABLE")

    async def check_domains(
        self,
        domains: List[str],
        delay_ms: int = config.DEFAULT_BATCH_DELAY_MS,
        max_retries: int = 0,
    ) -> List[DomainCheckResult]:
        """Check `domains` sequentially, pausing `delay_ms` between calls.

        A failed check is reported in that domain's result and does not
        stop the batch. With `max_retries`, a PENDING status is re-checked
        after waiting twice the delay.
        """
        results = []

        for i, domain in enumerate(domains):
            try:
                availability = await self._availability(domain)
                retries = 0
                while availability == "PENDING" and retries < max_retries:
                    logger.info(f"Domain {domain} is PENDING, retrying in {delay_ms * 2}ms")
                    await self.sleep(delay_ms * 2 / 1000)
                    availability = await self._availability(domain)
                    retries += 1
                results.append(DomainCheckResult(domain=domain, available=availability == "AVAILABLE"))
            except HttpError as e:
                results.append(DomainCheckResult(domain=domain, available=False, error=e.message))

            if i < len(domains) - 1:
                await self.sleep(delay_ms / 1000)

        return results

    async def get_domain_suggestions(
        self,
        query: str,
        only_available: bool = True,
        suggestion_count: int = 10,
    ) -> List[DomainSuggestion]:
        """Suggestions for `query`; an upstream failure yields an empty list."""
        try:
            response = await asyncio.to_thread(
                self.client.get_domain_suggestions,
                DomainName=query,
                OnlyAvailable=only_available,
                SuggestionCount=suggestion_count,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f'Error getting domain suggestions for "{query}": {e}')
            return []

        return [
            DomainSuggestion(
                domain_name=suggestion.get("DomainName") or "",
                available=suggestion.get("Availability") == "AVAILABLE",
            )
            for suggestion in response.get("SuggestionsList") or []
        ]

    async def get_tld_prices(self, tld: Optional[str] = None) -> List[TLDPrice]:
        """All TLD prices across every page, optionally for one TLD, sorted by TLD."""
        tld_filter = tld.strip().lstrip(".").lower() if tld else None

        all_prices = []
        marker = None
        try:
            while True:
                params = {"MaxItems": LIST_PRICES_PAGE_SIZE}
                if tld_filter:
                    params["Tld"] = tld_filter
                if marker:
                    params["Marker"] = marker
                response = await asyncio.to_thread(self.client.list_prices, **params)
                page = response.get("Prices") or []
                logger.info(f"ListPrices page (marker: {marker or 'initial'}) returned {len(page)} prices")
                all_prices.extend(page)
                marker = response.get("NextPageMarker")
                if not marker:
                    break
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error listing TLD prices (TLD: {tld_filter or 'all'}): {e}")
            raise upstream_error("Failed to fetch TLD prices.")

        prices = []
        for price_info in all_prices:
            name = price_info.get("Name")
            if not name:
                continue
            if tld_filter and name.lower() != tld_filter:
                continue

            registration = price_info.get("RegistrationPrice") or {}
            renewal = price_info.get("RenewalPrice") or {}
            transfer = price_info.get("TransferPrice") or {}
            prices.append(
                TLDPrice(
                    tld=name,
                    registration_price=registration.get("Price"),
                    renewal_price=renewal.get("Price"),
                    transfer_price=transfer.get("Price"),
                    currency=registration.get("Currency") or renewal.get("Currency") or transfer.get("Currency"),
                )
            )

        prices.sort(key=lambda p: p.tld.lower())
        return prices
