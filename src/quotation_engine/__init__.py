"""
Quotation Engine

Pricing, reconciliation and lifecycle gating for dealership quotations.
"""

__version__ = "1.0.0"

from .billing import build_billing_table, recompute_grand_total, verify_totals
from .catalog import build_index
from .envelope import extract_list, extract_record
from .lifecycle import can_cancel, can_convert, cancel
from .models import BillingRow, BillingTable, CatalogSet, LineAddOn, Quotation, QuotationItem
from .price_resolver import resolve

__all__ = [
    "build_index",
    "resolve",
    "build_billing_table",
    "recompute_grand_total",
    "verify_totals",
    "can_cancel",
    "can_convert",
    "cancel",
    "extract_record",
    "extract_list",
    "BillingRow",
    "BillingTable",
    "CatalogSet",
    "LineAddOn",
    "Quotation",
    "QuotationItem",
]
