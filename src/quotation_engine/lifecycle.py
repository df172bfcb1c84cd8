"""
Quotation status lifecycle and action gating.

``valid`` is the only state a cancel or convert may start from. Cancel
eligibility is lenient (an absent status counts as valid) while convert
eligibility requires an explicit ``valid`` status.
"""

import enum
import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from .errors import IneligibleReason, IneligibleTransition
from .models import Quotation, parse_datetime

logger = logging.getLogger(__name__)


class QuotationStatus(str, enum.Enum):
    VALID = "valid"
    EXPIRED = "expired"
    CANCELED = "canceled"
    INVALID = "invalid"
    USED = "used"
    CONVERTED = "converted"


STATUS_ALIASES = {
    "cancelled": QuotationStatus.CANCELED,
}


def normalize_status(status: Optional[str]) -> Optional[QuotationStatus]:
    """Map a raw status string to a QuotationStatus; None for absent or unknown."""
    if not status:
        return None
    key = str(status).strip().lower()
    if key in STATUS_ALIASES:
        return STATUS_ALIASES[key]
    try:
        return QuotationStatus(key)
    except ValueError:
        return None


def _now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    return parse_datetime(now)


def is_expired(quotation: Quotation, now: Optional[datetime] = None) -> bool:
    """True when the quotation has an expiry date strictly before ``now``."""
    if quotation.valid_until is None:
        return False
    return quotation.valid_until < _now(now)


def cancel_eligibility(quotation: Quotation, now: Optional[datetime] = None) -> Optional[IneligibleReason]:
    """Reason a cancel is refused, or None when it is allowed."""
    if normalize_status(quotation.status) is QuotationStatus.CANCELED:
        return IneligibleReason.ALREADY_CANCELED
    if is_expired(quotation, now):
        return IneligibleReason.EXPIRED
    return None


def can_cancel(quotation: Quotation, now: Optional[datetime] = None) -> bool:
    return cancel_eligibility(quotation, now) is None


def convert_eligibility(quotation: Quotation) -> Optional[IneligibleReason]:
    """Reason a conversion to order is refused, or None when it is allowed."""
    if quotation.status != QuotationStatus.VALID.value:
        return IneligibleReason.NOT_VALID
    return None


def can_convert(quotation: Quotation) -> bool:
    return convert_eligibility(quotation) is None


def ensure_can_cancel(quotation: Quotation, now: Optional[datetime] = None) -> None:
    reason = cancel_eligibility(quotation, now)
    if reason is not None:
        raise IneligibleTransition("cancel", reason)


def ensure_can_convert(quotation: Quotation) -> None:
    reason = convert_eligibility(quotation)
    if reason is not None:
        raise IneligibleTransition("convert", reason)


@dataclass(frozen=True)
class CancelOutcome:
    """Result of a gated cancel attempt."""
    performed: bool
    reason: Optional[IneligibleReason] = None
    response: Any = None


async def cancel(quotation: Quotation, store: Any, now: Optional[datetime] = None) -> CancelOutcome:
    """
    Cancel a quotation through ``store.cancel_quotation`` if the gate allows it.

    The gate is evaluated against the quotation as passed in, on every call.
    Transport errors from the store propagate unchanged. Updating the
    in-memory status after success is left to the caller.
    """
    reason = cancel_eligibility(quotation, now)
    if reason is not None:
        logger.info(f"Cancel refused for quotation {quotation.code or quotation.id}: {reason.value}")
        return CancelOutcome(performed=False, reason=reason)

    response = await store.cancel_quotation(quotation.id)
    logger.info(f"Quotation {quotation.code or quotation.id} canceled")
    return CancelOutcome(performed=True, response=response)


def status_counts(quotations: Iterable[Quotation]) -> Dict[str, int]:
    """Count quotations per status bucket; absent status counts as valid."""
    counter: Counter = Counter()
    total = 0
    for quotation in quotations:
        total += 1
        if not quotation.status:
            counter["valid"] += 1
            continue
        status = normalize_status(quotation.status)
        if status in (QuotationStatus.VALID, QuotationStatus.EXPIRED,
                      QuotationStatus.CANCELED, QuotationStatus.CONVERTED):
            counter[status.value] += 1
        else:
            counter["other"] += 1
    counts = {"total": total}
    for bucket in ("valid", "expired", "canceled", "converted", "other"):
        counts[bucket] = counter[bucket]
    return counts


def filter_by_status(quotations: Iterable[Quotation], status: Optional[str]) -> List[Quotation]:
    """Keep quotations whose status matches ``status``, treating aliases as equal."""
    quotations = list(quotations)
    if not status:
        return quotations
    wanted = normalize_status(status)
    if wanted is None:
        key = status.strip().lower()
        return [q for q in quotations if (q.status or "").strip().lower() == key]
    return [q for q in quotations if normalize_status(q.status) is wanted]
