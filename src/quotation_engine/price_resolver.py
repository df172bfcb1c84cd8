"""
Price resolution for quotation add-ons (accessories and options).

An add-on's unit price is taken from the first source that yields one:

1. an embedded price-like field with a positive value,
2. the catalog price of its reference id,
3. zero.
"""

import logging
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional, Tuple

from .models import PRICE_FIELDS, LineAddOn, ResolvedPrice, to_decimal

logger = logging.getLogger(__name__)

PriceSource = Callable[[LineAddOn, Mapping[str, Decimal]], Optional[Decimal]]


def resolve_quantity(quantity: Any) -> int:
    """Quantity of an add-on: a positive count, otherwise 1 (zero counts as unset)."""
    value = to_decimal(quantity)
    if value is None or value <= 0:
        return 1
    # Fractional counts are truncated; anything that truncates to 0 is unset
    return int(value) or 1


def embedded_price(add_on: LineAddOn, catalog: Mapping[str, Decimal]) -> Optional[Decimal]:
    for name in PRICE_FIELDS:
        value = to_decimal(add_on.price_fields.get(name))
        if value is not None and value > 0:
            return value
    return None


def catalog_price(add_on: LineAddOn, catalog: Mapping[str, Decimal]) -> Optional[Decimal]:
    if add_on.ref_id is None or not catalog:
        return None
    return catalog.get(add_on.ref_id)


PRICE_CHAIN: Tuple[Tuple[str, PriceSource], ...] = (
    ("embedded", embedded_price),
    ("catalog", catalog_price),
)


def resolve(add_on: LineAddOn, catalog: Optional[Mapping[str, Decimal]] = None) -> ResolvedPrice:
    """
    Determine the effective unit price and quantity of one add-on.

    Args:
        add_on: The accessory or option line.
        catalog: Reference prices by id; None is treated as an empty catalog.

    Returns:
        A ResolvedPrice whose ``source`` names the rule that supplied the price.
    """
    catalog = catalog or {}
    quantity = resolve_quantity(add_on.quantity)

    for source, accessor in PRICE_CHAIN:
        price = accessor(add_on, catalog)
        if price is not None:
            return ResolvedPrice(price=price, quantity=quantity, source=source)

    logger.debug(f"No price found for add-on {add_on.ref_id or add_on.name!r}; using 0")
    return ResolvedPrice(price=Decimal("0"), quantity=quantity, source="default")
