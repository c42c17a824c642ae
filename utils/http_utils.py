"""
HTTP Utility module for rate-limited provider requests.
Handles per-provider pacing, retries with exponential backoff, timeouts,
caller deadlines and common error logging.

Every outcome is either the decoded JSON payload or a ProviderFailure; no
exception escapes `call()`.
"""

import threading
import time
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple, Union

import requests

from utils.logger import setup_logger
from utils.result import FailureKind, ProviderFailure

logger = setup_logger('http_utils')

JSONPayload = Union[Dict[str, Any], list]

# Inspects a decoded 200 response; returns (kind, message) if the body is
# really an error (e.g. a soft throttle notice), None if it is data.
PayloadInspector = Callable[[Any], Optional[Tuple[FailureKind, str]]]

RETRIABLE_STATUS = (429, 500, 502, 503, 504)


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class RateLimitedClient:
    """
    HTTP client bound to one provider.

    Pacing is a leaky bucket of one token per `min_interval` seconds: each
    attempt reserves the next free slot under a lock, then sleeps outside
    it until the slot arrives. Concurrent lookups sharing the provider are
    therefore serialized on the slot, never on the network call.

    Retries: HTTP 429/5xx, connection errors, timeouts and soft throttles
    are retried up to `max_retries` times; retry n (0-based) waits
    `retry_delay * 2**n` first. Other 4xx, undecodable bodies and provider
    error payloads fail immediately.
    """

    def __init__(
        self,
        provider: str,
        base_url: str,
        min_interval: float = 0.0,
        timeout: float = 10,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        daily_quota: Optional[int] = None,
        default_params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        payload_inspector: Optional[PayloadInspector] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        today: Callable[[], date] = _utc_today,
    ):
        self.provider = provider
        self.base_url = base_url.rstrip('/')
        self.min_interval = min_interval
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.daily_quota = daily_quota
        self.default_params = dict(default_params or {})
        self.headers = dict(headers or {})
        self.payload_inspector = payload_inspector
        self.session = session or requests.Session()
        self._sleep = sleep
        self._clock = clock
        self._today = today

        self._lock = threading.Lock()
        self._last_slot = float('-inf')
        self._total_calls = 0
        self._calls_today = 0
        self._quota_day = today()
        self._quota_warned = False

    # ------------------------------------------------------------------
    # Pacing
    # ------------------------------------------------------------------

    def _reserve_slot(self, deadline: Optional[float]) -> Optional[float]:
        """
        Reserve the next call slot.

        Returns:
            Seconds to wait before calling, or None if the slot would land
            past the deadline (nothing is reserved in that case).
        """
        with self._lock:
            now = self._clock()
            slot = max(now, self._last_slot + self.min_interval)
            if deadline is not None and slot >= deadline:
                return None
            self._last_slot = slot
            self._count_call()
            return slot - now

    def _count_call(self) -> None:
        # Called with the lock held
        today = self._today()
        if today != self._quota_day:
            self._quota_day = today
            self._calls_today = 0
            self._quota_warned = False

        self._total_calls += 1
        self._calls_today += 1

        if self.daily_quota and self._calls_today > self.daily_quota and not self._quota_warned:
            self._quota_warned = True
            logger.warning(
                f"{self.provider} daily quota exceeded: "
                f"{self._calls_today} calls > {self.daily_quota} (not enforced locally)"
            )

    def stats(self) -> Dict[str, Any]:
        """Call counters for observability."""
        with self._lock:
            return {
                'provider': self.provider,
                'total_calls': self._total_calls,
                'calls_today': self._calls_today,
                'daily_quota': self.daily_quota,
                'quota_exceeded': bool(self.daily_quota and self._calls_today > self.daily_quota),
            }

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def _url(self, endpoint: str) -> str:
        if not endpoint:
            return self.base_url
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _remaining(self, deadline: Optional[float]) -> Optional[float]:
        if deadline is None:
            return None
        return deadline - self._clock()

    def _attempt(
        self,
        url: str,
        params: Dict[str, Any],
        timeout: float,
    ) -> Tuple[Optional[JSONPayload], Optional[ProviderFailure], bool]:
        """
        Issue one request.

        Returns:
            (payload, failure, retriable)
        """
        try:
            response = self.session.get(url, params=params, headers=self.headers or None, timeout=timeout)
        except requests.exceptions.Timeout as e:
            return None, ProviderFailure(self.provider, FailureKind.TIMEOUT, f"request timed out: {e}"), True
        except requests.exceptions.RequestException as e:
            return None, ProviderFailure(self.provider, FailureKind.TRANSPORT, f"connection error: {e}"), True

        status = response.status_code
        if status in RETRIABLE_STATUS:
            kind = FailureKind.RATE_LIMITED if status == 429 else FailureKind.HTTP_ERROR
            return None, ProviderFailure(self.provider, kind, f"HTTP {status}"), True

        if status >= 400:
            if status in (402, 403):
                message = f"HTTP {status}: feature not available on current plan or key invalid"
            elif status == 404:
                message = "HTTP 404: not found"
            else:
                message = f"HTTP {status}"
            return None, ProviderFailure(self.provider, FailureKind.HTTP_ERROR, message), False

        try:
            payload = response.json()
        except ValueError as e:
            return None, ProviderFailure(self.provider, FailureKind.PARSE, f"JSON parsing error: {e}"), False

        if self.payload_inspector is not None:
            verdict = self.payload_inspector(payload)
            if verdict is not None:
                kind, message = verdict
                return None, ProviderFailure(self.provider, kind, message), kind == FailureKind.RATE_LIMITED

        return payload, None, False

    def call(
        self,
        endpoint: str = '',
        params: Optional[Dict[str, Any]] = None,
        deadline: Optional[float] = None,
    ) -> Union[JSONPayload, ProviderFailure]:
        """
        Call an endpoint of this provider.

        Args:
            endpoint: Path relative to the base URL ('' for query-style APIs)
            params: Query parameters (merged over the default params)
            deadline: Absolute time on this client's clock after which no
                request is issued

        Returns:
            Decoded JSON payload, or ProviderFailure after retries are
            exhausted / on a non-retriable error.
        """
        url = self._url(endpoint)
        merged = {**self.default_params, **(params or {})}
        label = endpoint or merged.get('function', 'request')

        failure: Optional[ProviderFailure] = None
        attempts = 0

        for attempt in range(self.max_retries + 1):
            if attempt > 0:
                backoff = self.retry_delay * (2 ** (attempt - 1))
                remaining = self._remaining(deadline)
                if remaining is not None and backoff >= remaining:
                    break
                logger.warning(
                    f"{self.provider} {label}: {failure.message}. "
                    f"Retrying in {backoff:.1f}s ({attempt}/{self.max_retries})..."
                )
                self._sleep(backoff)

            wait = self._reserve_slot(deadline)
            if wait is None:
                break
            if wait > 0:
                logger.debug(f"{self.provider} rate limit: waiting {wait:.2f}s")
                self._sleep(wait)

            timeout = self.timeout
            remaining = self._remaining(deadline)
            if remaining is not None:
                if remaining <= 0:
                    break
                timeout = min(timeout, remaining)

            attempts += 1
            payload, failure, retriable = self._attempt(url, merged, timeout)
            if failure is None:
                return payload
            if not retriable:
                logger.warning(f"{self.provider} {label} failed: {failure.message}")
                return ProviderFailure(self.provider, failure.kind, failure.message, attempts)

        if failure is None or attempts < self.max_retries + 1:
            # Stopped by the caller's deadline rather than by the retry bound
            message = "deadline exceeded" if failure is None else f"deadline exceeded after {failure.message}"
            logger.warning(f"{self.provider} {label}: {message}")
            return ProviderFailure(self.provider, FailureKind.TIMEOUT, message, attempts)

        logger.error(f"{self.provider} {label} failed after {attempts} attempts: {failure.message}")
        return ProviderFailure(self.provider, failure.kind, failure.message, attempts)
