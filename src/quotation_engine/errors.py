"""
Error classifications for the Quotation Engine.

Only transport failures are hard errors; they are raised by ``httpx`` and
reach the caller unchanged. The rest are advisory and recovered locally.
"""

import enum
from dataclasses import dataclass
from typing import Any, Optional

import httpx


class IneligibleReason(str, enum.Enum):
    """Why a cancel or convert action is refused."""
    ALREADY_CANCELED = "already_canceled"
    EXPIRED = "expired"
    NOT_VALID = "not_valid"


class QuotationEngineError(Exception):
    """Base class for errors raised by the engine itself."""


class IneligibleTransition(QuotationEngineError):
    """Raised by callers that treat a refused transition as a hard stop."""

    def __init__(self, action: str, reason: IneligibleReason):
        self.action = action
        self.reason = reason
        super().__init__(f"Cannot {action} quotation: {reason.value}")


class MalformedResponse(QuotationEngineError):
    """A response envelope did not have any recognized shape."""


@dataclass(frozen=True)
class TransportFailure:
    """Presentation details of a failed external call."""
    message: str
    status_code: Optional[int] = None
    error_code: Optional[str] = None

    @property
    def is_server_error(self) -> bool:
        return self.status_code is not None and self.status_code >= 500

    @property
    def is_rejection(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def describe_transport_failure(exc: Exception) -> TransportFailure:
    """
    Summarize an exception from the quotation store for display.

    Server errors (5xx) and validation rejections (4xx) keep their status
    code so callers can present them differently.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        body = _json_body(response)
        message = str(exc)
        error_code = None
        if isinstance(body, dict):
            message = body.get("message") or message
            if body.get("error") not in (None, ""):
                error_code = str(body["error"])
        return TransportFailure(message=message, status_code=response.status_code, error_code=error_code)
    return TransportFailure(message=str(exc) or exc.__class__.__name__)
