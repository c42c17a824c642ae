"""
Typed failure results for provider calls.

A provider call returns either its decoded JSON payload or a ProviderFailure.
Failures are values, not exceptions, so that one provider going down never
aborts its siblings; the Aggregator turns them into data-quality warnings.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FailureKind(str, Enum):
    """Why a provider call produced no data."""
    TRANSPORT = "transport"            # connection refused/reset, DNS, TLS
    TIMEOUT = "timeout"                # request or caller deadline exceeded
    RATE_LIMITED = "rate_limited"      # 429 or soft throttle, retries exhausted
    HTTP_ERROR = "http_error"          # non-retriable non-2xx (401/403/404...)
    PARSE = "parse"                    # truncated or non-JSON body
    PROVIDER_ERROR = "provider_error"  # well-formed body reporting an error


@dataclass(frozen=True)
class ProviderFailure:
    """Terminal outcome of a provider call that yielded no usable payload."""
    provider: str
    kind: FailureKind
    message: str
    attempts: int = 1


def is_failure(value: Any) -> bool:
    """True if a call result is a ProviderFailure rather than a payload."""
    return isinstance(value, ProviderFailure)
