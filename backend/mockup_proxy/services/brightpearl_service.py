"""
Mockup Approval Proxy - Brightpearl Pass-Through Client
=========================================================

What:  Read-only lookups against the Brightpearl public API: orders,
       products, warehouse availability, and the "proof required" queue.
Why:   The account token must never reach the browser.
How:   One httpx GET per lookup with the app-ref/account-token headers.
       Upstream bodies pass through untouched; upstream failures keep
       their status code (UpstreamError).

Order search result encodings:
    Brightpearl's order-search `response.results` has been seen in three
    shapes. Each is a variant of SearchResults and decodes to order ids:

        RowResults      [[123, "ref", ...], [124, ...]]  → first column
        IdResults       [123, 124]                       → as-is
        EncodedResults  anything else                    → flattened to a
                        comma string; every 20th token that is all digits
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import httpx

from mockup_proxy.config import Settings, settings as default_settings
from mockup_proxy.exceptions import ConfigurationError, UpstreamError
from mockup_proxy.schemas.brightpearl import ProofOrder
from mockup_proxy.services.http_client import get_http_client

logger = logging.getLogger(__name__)

DATACENTER_HOSTS: Dict[str, str] = {
    "use1": "https://use1.brightpearlconnect.com",
    "euw1": "https://euw1.brightpearlconnect.com",
}

PROOF_REQUIRED_STATUS_ID = 34
SEARCH_PAGE_SIZE = 50
DETAIL_BATCH_SIZE = 10
ENCODED_RESULT_STRIDE = 20

_DIGITS = re.compile(r"^\d+$")


def resolve_base_url(datacenter: str) -> str:
    """Map a datacenter code (use1, euw1) to its API host."""
    key = (datacenter or "").strip().lower()
    try:
        return DATACENTER_HOSTS[key]
    except KeyError:
        raise ConfigurationError(
            message=f"Unknown Brightpearl datacenter '{datacenter}'",
            context={"supported": sorted(DATACENTER_HOSTS)},
        )


# ══════════════════════════════════════════════════════════════════════════
# Search result decoding
# ══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RowResults:
    rows: List[List[Any]]

    def order_ids(self) -> List[Any]:
        return [row[0] for row in self.rows if row]


@dataclass(frozen=True)
class IdResults:
    ids: List[Any]

    def order_ids(self) -> List[Any]:
        return list(self.ids)


@dataclass(frozen=True)
class EncodedResults:
    raw: List[Any]

    def order_ids(self) -> List[Any]:
        parts = _flatten_to_string(self.raw).split(",")
        return [
            part.strip()
            for index, part in enumerate(parts)
            if index % ENCODED_RESULT_STRIDE == 0 and _DIGITS.match(part.strip())
        ]


SearchResults = Union[RowResults, IdResults, EncodedResults]


def _flatten_to_string(value: Any) -> str:
    # Comma-joins nested lists the way JavaScript's Array.toString does
    if isinstance(value, list):
        return ",".join(_flatten_to_string(item) for item in value)
    if value is None:
        return ""
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def classify_search_results(results: List[Any]) -> SearchResults:
    """Pick the variant by looking at the first element."""
    first = results[0]
    if isinstance(first, list):
        return RowResults(rows=results)
    if isinstance(first, (int, str)) and not isinstance(first, bool):
        return IdResults(ids=results)
    return EncodedResults(raw=results)


def decode_search_results(payload: Any) -> List[Any]:
    """Extract order ids from an order-search response body ([] when empty)."""
    if not isinstance(payload, dict):
        return []
    response = payload.get("response")
    if not isinstance(response, dict):
        return []
    results = response.get("results")
    if not isinstance(results, list) or not results:
        return []
    variant = classify_search_results(results)
    order_ids = variant.order_ids()
    logger.debug("Decoded %d order ids from %s", len(order_ids), type(variant).__name__)
    return order_ids


def reshape_order(order: Dict[str, Any]) -> ProofOrder:
    """Reduce a full order document to the proof-queue summary."""
    parties = order.get("parties") or {}
    customer = parties.get("customer") or {}
    delivery_party = parties.get("delivery") or {}
    delivery = order.get("delivery") or {}
    customer_name = (
        customer.get("contactName")
        or delivery_party.get("addressFullName")
        or customer.get("addressFullName")
        or "Unknown"
    )
    return ProofOrder(
        order_id=order.get("id"),
        order_reference=order.get("reference"),
        customer_name=customer_name,
        placed_on=order.get("placedOn"),
        delivery_date=delivery.get("deliveryDate") or None,
    )


# ══════════════════════════════════════════════════════════════════════════
# Client
# ══════════════════════════════════════════════════════════════════════════

class BrightpearlService:
    """Brightpearl public API client bound to one account."""

    def __init__(self, config: Settings = default_settings, http: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._http = http

    @property
    def http(self) -> httpx.AsyncClient:
        return self._http or get_http_client()

    def _account_url(self) -> str:
        if not self.config.brightpearl_api_token or not self.config.brightpearl_account_id:
            raise ConfigurationError(message="Brightpearl credentials not configured")
        base_url = resolve_base_url(self.config.brightpearl_datacenter)
        return f"{base_url}/public-api/{self.config.brightpearl_account_id}"

    def _headers(self) -> Dict[str, str]:
        return {
            "brightpearl-app-ref": self.config.brightpearl_app_ref,
            "brightpearl-account-token": self.config.brightpearl_api_token,
            "Content-Type": "application/json",
        }

    async def _get(self, path: str) -> Any:
        url = f"{self._account_url()}/{path}"
        try:
            response = await self.http.get(url, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error("Brightpearl request failed: %s", str(e))
            raise UpstreamError(message=f"Brightpearl request failed: {e}", status_code=500) from e
        if response.status_code >= 400:
            logger.error("Brightpearl %s answered %d: %s", path, response.status_code, response.text)
            raise UpstreamError(message=response.text, status_code=response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(message="Brightpearl returned a non-JSON body", status_code=500) from e

    async def get_order(self, order_id: str) -> Any:
        logger.info("Fetching Brightpearl order: %s", order_id)
        return await self._get(f"order-service/order/{order_id}")

    async def get_product(self, product_id: str) -> Any:
        logger.info("Fetching Brightpearl product: %s", product_id)
        return await self._get(f"product-service/product/{product_id}")

    async def get_availability(self, order_id: str) -> Any:
        """
        Warehouse product availability.

        The upstream call is account-wide; `order_id` is only logged.
        """
        logger.info("Fetching Brightpearl availability for order: %s", order_id)
        return await self._get("warehouse-service/product-availability")

    async def list_proof_required(self) -> List[ProofOrder]:
        """
        Orders waiting on mockup approval (status id 34), first 10 only.

        Two upstream calls: an order search, then one batched detail fetch
        using Brightpearl's comma-separated id range syntax.
        """
        search = await self._get(
            f"order-service/order-search?orderStatusId={PROOF_REQUIRED_STATUS_ID}"
            f"&pageSize={SEARCH_PAGE_SIZE}&firstResult=1"
        )
        order_ids = decode_search_results(search)
        if not order_ids:
            return []

        order_range = ",".join(str(order_id) for order_id in order_ids[:DETAIL_BATCH_SIZE])
        details = await self._get(f"order-service/order/{order_range}")
        orders = details.get("response") if isinstance(details, dict) else None
        if not isinstance(orders, list):
            return []
        return [reshape_order(order) for order in orders if isinstance(order, dict)]


brightpearl_service = BrightpearlService()
