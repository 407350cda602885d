"""
Mockup Approval Proxy - Brightpearl Response Schemas
======================================================

What:  The reshaped order summary returned by /api/brightpearl/proof-required.
Why:   The front end's proof queue only needs five fields out of the full
       Brightpearl order document.
"""

from typing import Any, Optional

from mockup_proxy.schemas.signature import CamelModel


class ProofOrder(CamelModel):
    """An order awaiting mockup proof approval."""

    order_id: Any
    order_reference: Optional[str] = None
    customer_name: str = "Unknown"
    placed_on: Optional[str] = None
    delivery_date: Optional[str] = None
