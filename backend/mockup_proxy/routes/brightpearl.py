"""
Mockup Approval Proxy - Brightpearl Routes
============================================

What:  Read-only Brightpearl lookups for the order picker and proof queue.
How:   Upstream JSON is returned as-is, except proof-required, which is
       reshaped to ProofOrder summaries. Upstream errors keep their status.
"""

import logging
from typing import Any, List

from fastapi import APIRouter

from mockup_proxy.schemas.brightpearl import ProofOrder
from mockup_proxy.schemas.common import ErrorResponse
from mockup_proxy.services.brightpearl_service import brightpearl_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/brightpearl",
    tags=["Brightpearl"],
    responses={500: {"description": "Not configured or upstream failure", "model": ErrorResponse}},
)


@router.get(
    "/proof-required",
    response_model=List[ProofOrder],
    response_model_by_alias=True,
    summary="Orders awaiting mockup proof approval",
)
async def list_proof_required() -> List[ProofOrder]:
    return await brightpearl_service.list_proof_required()


@router.get("/order/{order_id}", summary="Fetch a Brightpearl order")
async def get_order(order_id: str) -> Any:
    return await brightpearl_service.get_order(order_id)


@router.get("/order/{order_id}/availability", summary="Warehouse product availability")
async def get_order_availability(order_id: str) -> Any:
    return await brightpearl_service.get_availability(order_id)


@router.get("/product/{product_id}", summary="Fetch a Brightpearl product")
async def get_product(product_id: str) -> Any:
    return await brightpearl_service.get_product(product_id)
