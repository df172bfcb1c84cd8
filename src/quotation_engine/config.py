"""
Runtime configuration read from environment variables.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000"
DEFAULT_TIMEOUT = 30.0
DEFAULT_CURRENCY = "VND"
DEFAULT_PAGE_SIZE = 10


def _number_env(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}; using {default}")
        return default


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    token: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    currency: str = DEFAULT_CURRENCY
    page_size: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            base_url=os.getenv("QUOTATION_API_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            token=os.getenv("QUOTATION_API_TOKEN") or None,
            timeout=_number_env("QUOTATION_API_TIMEOUT", DEFAULT_TIMEOUT, float),
            currency=os.getenv("QUOTATION_CURRENCY", DEFAULT_CURRENCY).upper(),
            page_size=_number_env("QUOTATION_PAGE_SIZE", DEFAULT_PAGE_SIZE, int),
        )
