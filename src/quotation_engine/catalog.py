"""
Catalog index for accessory and option reference prices.

Catalog list endpoints do not agree on an envelope: some return a bare
array, others wrap it in ``data``/``items``/``records``/``results``, and
some wrap it twice. The search below is bounded and ordered so the same
response always yields the same index.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from .models import CatalogEntry, to_decimal

logger = logging.getLogger(__name__)

CANDIDATE_FIELDS = ("data", "items", "records", "results")
MAX_NESTING = 2


def find_entries(raw: Any) -> Optional[List[Any]]:
    """Locate the entry array inside a catalog response, or None."""
    if isinstance(raw, list):
        return raw
    if isinstance(raw, Mapping):
        return _search(raw, depth=0)
    return None


def _search(obj: Mapping[str, Any], depth: int) -> Optional[List[Any]]:
    for name in CANDIDATE_FIELDS:
        candidate = obj.get(name)
        # An empty array still ends the search
        if isinstance(candidate, list):
            return candidate
        if isinstance(candidate, Mapping) and depth < MAX_NESTING:
            found = _search(candidate, depth + 1)
            if found is not None:
                return found
    return None


def entry_id(entry: Mapping[str, Any]) -> Optional[str]:
    """Identifier of a catalog entry: ``_id``, ``id``, then any ``*_id`` field."""
    for key in ("_id", "id"):
        value = entry.get(key)
        if value not in (None, ""):
            return str(value)
    for key, value in entry.items():
        if key.endswith("_id") and isinstance(value, (str, int)) and not isinstance(value, bool):
            if value != "":
                return str(value)
    return None


def build_entries(raw: Any) -> List[CatalogEntry]:
    """Convert a catalog response into entries, skipping unpriced ones."""
    records = find_entries(raw)
    if records is None:
        logger.warning("Catalog response has no recognizable entry array")
        return []

    entries = []
    for record in records:
        if not isinstance(record, Mapping):
            continue
        identifier = entry_id(record)
        price = record.get("price")
        # Prices must be real numbers; a missing price is not a zero price
        if identifier is None or isinstance(price, (bool, str)):
            continue
        amount = to_decimal(price)
        if amount is None or amount < 0:
            continue
        entries.append(CatalogEntry(id=identifier, price=amount))
    return entries


def build_index(raw: Any) -> Dict[str, Decimal]:
    """
    Build an ``id -> price`` mapping from a catalog list response.

    The first entry wins when an identifier repeats. Never raises; an
    unrecognized response yields an empty mapping.
    """
    index: Dict[str, Decimal] = {}
    for entry in build_entries(raw):
        index.setdefault(entry.id, entry.price)
    logger.debug(f"Built catalog index with {len(index)} entries")
    return index
