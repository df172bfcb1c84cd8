"""
Extraction of quotation records from REST responses of varying shape.
"""

import logging
from typing import Any, List, Mapping, Optional

from .models import Quotation, QuotationPage, to_decimal

logger = logging.getLogger(__name__)

LIST_KEYS = ("quotes", "data", "items", "results", "list")
RECORD_KEYS = ("_id", "id", "code", "items")


def _looks_like_record(obj: Any) -> bool:
    return isinstance(obj, Mapping) and any(key in obj for key in RECORD_KEYS)


def extract_record(raw: Any) -> Optional[Quotation]:
    """
    Extract a single quotation from a detail response.

    Accepts the record itself, ``{"data": record}``, ``{"quotation": record}``
    and ``{"data": {"quotation": record}}``. Returns None when no record is found.
    """
    if not isinstance(raw, Mapping):
        logger.warning(f"Malformed quotation response: expected an object, got {type(raw).__name__}")
        return None

    data = raw.get("data")
    if isinstance(data, Mapping):
        nested = data.get("quotation")
        if _looks_like_record(nested):
            return Quotation.from_dict(nested)
        if _looks_like_record(data):
            return Quotation.from_dict(data)
    if isinstance(data, list) and data and _looks_like_record(data[0]):
        logger.debug("Quotation response wrapped the record in a list; using the first entry")
        return Quotation.from_dict(data[0])

    quotation = raw.get("quotation")
    if _looks_like_record(quotation):
        return Quotation.from_dict(quotation)

    if _looks_like_record(raw):
        return Quotation.from_dict(raw)

    logger.warning(f"Malformed quotation response: no record found among keys {sorted(raw)}")
    return None


def _find_list(obj: Mapping[str, Any]) -> Optional[List[Any]]:
    for key in LIST_KEYS:
        value = obj.get(key)
        if isinstance(value, list):
            return value
    return None


def _first_int(*values: Any) -> Optional[int]:
    for value in values:
        number = to_decimal(value)
        if number is not None:
            return int(number)
    return None


def _pagination_of(obj: Any) -> Mapping[str, Any]:
    if isinstance(obj, Mapping) and isinstance(obj.get("pagination"), Mapping):
        return obj["pagination"]
    return {}


def extract_list(raw: Any) -> QuotationPage:
    """
    Extract a page of quotations from a list response.

    Recognized shapes: a bare array, ``{"data": [...]}``,
    ``{"data": {"quotes": [...], "pagination": {...}}}`` and
    ``{"data": {<key>: [...]}}`` for the keys in ``LIST_KEYS``. An
    unrecognized shape yields an empty page flagged as malformed.
    """
    records = None
    container: Mapping[str, Any] = {}

    if isinstance(raw, list):
        records = raw
    elif isinstance(raw, Mapping):
        data = raw.get("data")
        if isinstance(data, list):
            records, container = data, raw
        elif isinstance(data, Mapping):
            records, container = _find_list(data), data
        else:
            records, container = _find_list(raw), raw

    if records is None:
        shape = sorted(raw) if isinstance(raw, Mapping) else type(raw).__name__
        logger.warning(f"Malformed quotation list response: no quotation array in {shape}")
        return QuotationPage(malformed=True)

    quotations = [Quotation.from_dict(record) for record in records if isinstance(record, Mapping)]
    if len(quotations) != len(records):
        logger.warning(f"Skipped {len(records) - len(quotations)} non-object entries in quotation list")

    pagination = _pagination_of(container)
    outer = raw if isinstance(raw, Mapping) else {}
    outer_pagination = _pagination_of(outer)
    total = _first_int(
        pagination.get("total"),
        container.get("totalRecords"),
        container.get("total"),
        outer_pagination.get("total"),
        outer.get("totalRecords"),
        outer.get("total"),
    )
    return QuotationPage(
        quotations=quotations,
        total=total if total is not None else len(quotations),
        page=_first_int(pagination.get("page"), container.get("page"), outer.get("page")),
        limit=_first_int(pagination.get("limit"), container.get("limit"), outer.get("limit")),
    )
