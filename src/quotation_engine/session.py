"""
Quotation detail-view session: fetch, price, and gate one quotation.

Each session loads its own catalogs and builds its own billing table;
nothing is shared between sessions.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

import httpx

from .billing import build_billing_table
from .envelope import extract_record
from .errors import IneligibleReason, MalformedResponse
from .lifecycle import CancelOutcome, QuotationStatus, cancel, cancel_eligibility, convert_eligibility
from .models import BillingTable, CatalogSet, Quotation

logger = logging.getLogger(__name__)


@dataclass
class QuotationDetail:
    quotation: Quotation
    catalogs: CatalogSet = field(default_factory=CatalogSet)
    table: BillingTable = field(default_factory=BillingTable)
    cancel_reason: Optional[IneligibleReason] = None
    convert_reason: Optional[IneligibleReason] = None

    @property
    def can_cancel(self) -> bool:
        return self.cancel_reason is None

    @property
    def can_convert(self) -> bool:
        return self.convert_reason is None

    def refresh(self, now: Optional[datetime] = None) -> None:
        """Rebuild the table and re-evaluate both gates from current state."""
        self.table = build_billing_table(self.quotation, self.catalogs)
        self.cancel_reason = cancel_eligibility(self.quotation, now)
        self.convert_reason = convert_eligibility(self.quotation)


async def _fetch_full_record(client, summary: Optional[Quotation], quotation_id: str) -> Quotation:
    try:
        raw = await client.fetch_quotation_by_id(quotation_id)
    except httpx.HTTPError:
        if summary is None:
            raise
        logger.exception(f"Failed to fetch quotation {quotation_id}; using the list record")
        return summary

    record = extract_record(raw)
    if record is not None:
        return record
    if summary is not None:
        logger.warning(f"Quotation {quotation_id} detail was malformed; using the list record")
        return summary
    raise MalformedResponse(f"No quotation record in response for {quotation_id}")


async def open_detail(client, quotation: Union[Quotation, str], now: Optional[datetime] = None) -> QuotationDetail:
    """
    Open a detail view for a list row or a quotation id.

    The full record is fetched by id; if that fails and a list row was
    given, the row is used as-is. Catalogs are always reloaded.
    """
    summary = quotation if isinstance(quotation, Quotation) else None
    quotation_id = summary.id if summary is not None else quotation
    if not quotation_id:
        raise ValueError("Quotation has no id")

    record = await _fetch_full_record(client, summary, quotation_id)
    catalogs = await client.load_catalogs()

    detail = QuotationDetail(quotation=record, catalogs=catalogs)
    detail.refresh(now)
    logger.info(
        f"Opened quotation {record.code or record.id}: {len(detail.table.rows)} rows, "
        f"total {detail.table.grand_total}"
    )
    return detail


async def cancel_from_detail(client, detail: QuotationDetail, now: Optional[datetime] = None) -> CancelOutcome:
    """Run the gated cancel and mark the in-memory record canceled on success."""
    outcome = await cancel(detail.quotation, client, now)
    if outcome.performed:
        detail.quotation.status = QuotationStatus.CANCELED.value
    detail.refresh(now)
    return outcome
