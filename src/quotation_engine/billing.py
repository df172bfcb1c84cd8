"""
Billing table construction for a quotation.

Rows are emitted per item in list order: the vehicle, then its
accessories, then its options. ``sequence`` runs across the whole table.
"""

import logging
from decimal import Decimal
from typing import Iterator, List, Optional, Tuple

from .models import (
    ACCESSORY_UNIT,
    OPTION_UNIT,
    VEHICLE_UNIT,
    BillingRow,
    BillingTable,
    CatalogSet,
    LineAddOn,
    Quotation,
    QuotationItem,
    ResolvedPrice,
)
from .price_resolver import resolve

logger = logging.getLogger(__name__)


def vehicle_label(item: QuotationItem) -> str:
    label = item.vehicle_name or item.vehicle_ref or "Xe"
    if item.color:
        label = f"{label} - Màu {item.color}"
    return label


def add_on_label(add_on: LineAddOn, fallback: str) -> str:
    return add_on.name or add_on.ref_id or fallback


def _walk(quotation: Quotation, catalogs: CatalogSet) -> Iterator[Tuple[str, object, ResolvedPrice]]:
    """Yield every priced line of a quotation in billing order."""
    for item in quotation.items or []:
        yield "vehicle", item, ResolvedPrice(
            price=item.effective_vehicle_price, quantity=item.quantity, source="vehicle"
        )
        for accessory in item.accessories:
            yield "accessory", accessory, resolve(accessory, catalogs.accessories)
        for option in item.options:
            yield "option", option, resolve(option, catalogs.options)


def build_billing_table(quotation: Optional[Quotation], catalogs: Optional[CatalogSet] = None) -> BillingTable:
    """
    Project a quotation into numbered billing rows and a grand total.

    Resolved price and quantity are attached to each add-on for display.
    Catalogs that are not loaded yet behave as empty catalogs.
    """
    if quotation is None or not quotation.items:
        return BillingTable()
    catalogs = catalogs or CatalogSet()

    rows: List[BillingRow] = []
    for kind, line, resolved in _walk(quotation, catalogs):
        if kind == "vehicle":
            label, unit = vehicle_label(line), VEHICLE_UNIT
        elif kind == "accessory":
            label, unit = add_on_label(line, "Phụ kiện"), ACCESSORY_UNIT
        else:
            label, unit = add_on_label(line, "Tùy chọn"), OPTION_UNIT

        if kind != "vehicle":
            line.resolved_price = resolved.price
            line.resolved_quantity = resolved.quantity

        rows.append(BillingRow(
            sequence=len(rows) + 1,
            label=label,
            unit=unit,
            quantity=resolved.quantity,
            unit_price=resolved.price,
            line_total=resolved.price * resolved.quantity,
            kind=kind,
        ))

    grand_total = sum((row.line_total for row in rows), Decimal("0"))
    return BillingTable(rows=rows, grand_total=grand_total)


def recompute_grand_total(quotation: Optional[Quotation], catalogs: Optional[CatalogSet] = None) -> Decimal:
    """Grand total re-derived item by item, without building rows."""
    if quotation is None or not quotation.items:
        return Decimal("0")
    catalogs = catalogs or CatalogSet()

    total = Decimal("0")
    for item in quotation.items:
        total += item.effective_vehicle_price * item.quantity
        for accessory in item.accessories:
            resolved = resolve(accessory, catalogs.accessories)
            total += resolved.price * resolved.quantity
        for option in item.options:
            resolved = resolve(option, catalogs.options)
            total += resolved.price * resolved.quantity
    return total


def verify_totals(quotation: Optional[Quotation], catalogs: Optional[CatalogSet] = None) -> bool:
    """
    Check that the table total, the row sum and the re-derived total agree.

    The backend ``final_amount`` is not part of this check.
    """
    table = build_billing_table(quotation, catalogs)
    row_sum = sum((row.line_total for row in table.rows), Decimal("0"))
    recomputed = recompute_grand_total(quotation, catalogs)
    consistent = table.grand_total == row_sum == recomputed
    if not consistent:
        logger.error(
            f"Total mismatch: table={table.grand_total}, rows={row_sum}, recomputed={recomputed}"
        )
    return consistent
