"""Query outcome data model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class ErrorKind(Enum):
    UNKNOWN_PROVIDER = "unknown_provider"
    INVALID_PROMPT = "invalid_prompt"
    MISSING_CREDENTIAL = "missing_credential"
    MALFORMED_RESPONSE = "malformed_response"
    TRANSPORT_FAILURE = "transport_failure"
    UNAUTHORIZED = "unauthorized"
    BILLING_REQUIRED = "billing_required"
    RATE_LIMITED = "rate_limited"
    PAYMENT_REQUIRED = "payment_required"
    MODEL_NOT_FOUND = "model_not_found"
    PROVIDER_ERROR = "provider_error"


@dataclass(frozen=True)
class Success:
    """A provider answered with usable text."""

    text: str
    model_name: str

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """A provider call failed; ``message`` is safe to show to users."""

    kind: ErrorKind
    message: str
    status_code: int = 500

    @property
    def ok(self) -> bool:
        return False


QueryOutcome = Union[Success, Failure]
