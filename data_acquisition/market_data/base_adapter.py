"""
Base Adapter - Common utilities and protocol for all provider adapters.

Provides:
1. The fetch() contract: symbol in, ProviderResult out, never raises
2. Conversion of ProviderFailure results into "provider absent" records
3. Safe field accessors so raw provider keys never leave an adapter
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from utils.http_utils import RateLimitedClient
from utils.logger import setup_logger
from utils.numeric_utils import clean_numeric, clean_non_negative
from utils.result import FailureKind, ProviderFailure, is_failure
from utils.unified_schema import ProviderResult

logger = setup_logger('base_adapter')

ModelT = TypeVar('ModelT', bound=BaseModel)


class ProviderAdapter(ABC):
    """
    Abstract base class for all provider adapters.

    Subclasses set `name` (the display name used in data-quality output)
    and implement `_fetch()`. Any parse-level exception raised while mapping
    a payload is converted into a PARSE failure here, so a malformed payload
    can never abort sibling providers.
    """

    name: str = "Provider"

    def __init__(self, client: RateLimitedClient, timeout: Optional[float] = None):
        """
        Args:
            client: Rate-limited client for this adapter's provider
            timeout: Optional per-adapter ceiling (seconds) applied by the
                Aggregator on top of the caller deadline
        """
        self.client = client
        self.timeout = timeout

    def fetch(self, symbol: str, deadline: Optional[float] = None) -> ProviderResult:
        """
        Fetch this provider's partial record for a symbol.

        Args:
            symbol: Normalized symbol (uppercase ticker or CoinGecko id)
            deadline: Absolute monotonic deadline propagated to every call

        Returns:
            ProviderResult; `failure` is set if nothing could be retrieved
        """
        try:
            return self._fetch(symbol, deadline)
        except (ValueError, TypeError, KeyError, AttributeError, IndexError) as e:
            logger.warning(f"{self.name} payload for {symbol} could not be mapped: {e}")
            return self._failed(ProviderFailure(self.client.provider, FailureKind.PARSE, str(e)))

    @abstractmethod
    def _fetch(self, symbol: str, deadline: Optional[float]) -> ProviderResult:
        pass

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _call(self, endpoint: str = '', params: Optional[Dict[str, Any]] = None,
              deadline: Optional[float] = None):
        return self.client.call(endpoint, params, deadline=deadline)

    def _failed(self, failure: ProviderFailure, warnings: Optional[List[str]] = None) -> ProviderResult:
        return ProviderResult(provider=self.name, failure=failure, warnings=warnings or [])

    def _partial_warning(self, what: str, failure: ProviderFailure) -> str:
        return f"{self.name}: {what} unavailable ({failure.kind.value}: {failure.message})"

    @staticmethod
    def _is_failure(value: Any) -> bool:
        return is_failure(value)

    @staticmethod
    def _get(data: Any, key: str, default: Any = None) -> Any:
        """dict.get that tolerates non-dict payloads."""
        if not isinstance(data, dict):
            return default
        return data.get(key, default)

    @staticmethod
    def _safe_float(value: Any) -> Optional[float]:
        return clean_numeric(value)

    @staticmethod
    def _safe_price(value: Any) -> Optional[float]:
        """Non-negative number; providers use 0 as 'no value' for ranges too."""
        return clean_non_negative(value)

    @staticmethod
    def _text(value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        if not text or text in ('None', '-', 'N/A'):
            return None
        return text

    def _build(self, model: Type[ModelT], **fields) -> Optional[ModelT]:
        """
        Construct a schema model, mapping invalid combinations to absence.

        Returns:
            Model instance, or None if required fields are missing or a
            model invariant (e.g. Bollinger ordering) does not hold
        """
        try:
            return model(**fields)
        except ValidationError as e:
            logger.debug(f"{self.name}: dropping invalid {model.__name__}: {e.errors()[0].get('msg')}")
            return None

    @staticmethod
    def _all_none(**values) -> bool:
        return all(v is None for v in values.values())
