"""
Market Data Aggregator - parallel fan-out and priority merge.

Adapters are queried concurrently; results are then merged in ROSTER order,
never in arrival order, so the composite record is the same however the
network happens to behave:

- Quote: whole record from the first adapter (in priority order) that
  produced one. Later quote providers are fallbacks only.
- Average volume, fundamentals, profile, 52-week range, technicals:
  per field, first non-null in priority order (gap fill).
- Sentiment fragments and headlines: additive across all adapters.

Failures never propagate; they become data-quality warnings naming the
source. The only "no data" outcome is that no adapter produced a quote.
"""

import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout
from typing import Any, Callable, Iterable, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from config.constants import AGGREGATOR_MAX_WORKERS
from utils.logger import setup_logger
from utils.result import FailureKind, ProviderFailure
from utils.unified_schema import CompanyProfile, CompositeRecord, Fundamentals, Headline, ProviderResult, TechnicalIndicators
from .asset_classifier import resolve_asset_type
from .base_adapter import ProviderAdapter

logger = setup_logger('aggregator')

ModelT = TypeVar('ModelT', bound=BaseModel)


def merge_field(values: Iterable[Any]) -> Any:
    """First non-null value, in the order given (priority order)."""
    for value in values:
        if value is not None:
            return value
    return None


def merge_models(model: Type[ModelT], candidates: Sequence[Optional[ModelT]]) -> Optional[ModelT]:
    """
    Field-level priority merge of several partial models.

    Args:
        model: Target model class
        candidates: Partial instances in priority order (None entries skipped)

    Returns:
        Merged instance, or None if no candidate had any field set
    """
    present = [c for c in candidates if c is not None]
    if not present:
        return None

    merged = {}
    for field_name in model.model_fields:
        value = merge_field(getattr(c, field_name) for c in present)
        if value is not None:
            merged[field_name] = value

    return model(**merged) if merged else None


def merge_headlines(groups: Iterable[List[Headline]]) -> List[Headline]:
    """
    Union of headlines, deduplicated by URL (title when there is no URL),
    newest first with title as tie-breaker.
    """
    seen = set()
    unique: List[Headline] = []
    for headlines in groups:
        for headline in headlines:
            key = headline.url or headline.title
            if key in seen:
                continue
            seen.add(key)
            unique.append(headline)

    unique.sort(key=lambda h: h.title)
    unique.sort(key=lambda h: h.published_at or '', reverse=True)
    return unique


def failure_warning(result: ProviderResult) -> str:
    failure = result.failure
    return f"{result.provider} unavailable ({failure.kind.value}): {failure.message}"


class MarketDataAggregator:
    """
    Fans out one roster of adapters and merges their partial records.

    The roster order IS the merge priority: put the primary quote provider
    first and its fallback second.
    """

    def __init__(
        self,
        adapters: Sequence[ProviderAdapter],
        max_workers: int = AGGREGATOR_MAX_WORKERS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if not adapters:
            raise ValueError("Aggregator needs at least one adapter")
        self.adapters = list(adapters)
        self.max_workers = max_workers
        self._clock = clock

    @property
    def source_names(self) -> List[str]:
        return [adapter.name for adapter in self.adapters]

    def aggregate(self, symbol: str, is_crypto: bool = False,
                  deadline: Optional[float] = None) -> Optional[CompositeRecord]:
        """
        Fetch and merge everything the roster knows about a symbol.

        Returns:
            CompositeRecord, or None if no adapter produced a quote
        """
        return self.merge(symbol, is_crypto, self.collect(symbol, deadline))

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    def _adapter_deadline(self, adapter: ProviderAdapter, start: float,
                          deadline: Optional[float]) -> Optional[float]:
        bounds = [b for b in (deadline, start + adapter.timeout if adapter.timeout else None) if b is not None]
        return min(bounds) if bounds else None

    def _timed_out(self, adapter: ProviderAdapter) -> ProviderResult:
        failure = ProviderFailure(adapter.client.provider, FailureKind.TIMEOUT, "no response before deadline")
        return ProviderResult(provider=adapter.name, failure=failure)

    def collect(self, symbol: str, deadline: Optional[float] = None) -> List[ProviderResult]:
        """
        Run every adapter concurrently.

        Each adapter is awaited until its own deadline (the earlier of the
        caller deadline and its per-adapter timeout); a late adapter is
        recorded as a TIMEOUT and not awaited further.

        Returns:
            One ProviderResult per adapter, in roster order
        """
        start = self._clock()
        executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(self.adapters)),
            thread_name_prefix='market-data',
        )
        try:
            futures = []
            for adapter in self.adapters:
                adapter_deadline = self._adapter_deadline(adapter, start, deadline)
                futures.append(executor.submit(adapter.fetch, symbol, adapter_deadline))

            results: List[ProviderResult] = []
            for adapter, future in zip(self.adapters, futures):
                adapter_deadline = self._adapter_deadline(adapter, start, deadline)
                wait = None if adapter_deadline is None else max(adapter_deadline - self._clock(), 0.0)
                try:
                    results.append(future.result(timeout=wait))
                except FuturesTimeout:
                    future.cancel()
                    logger.warning(f"{adapter.name} timed out for {symbol}")
                    results.append(self._timed_out(adapter))
                except Exception as e:
                    # Unexpected adapter bug: isolate it from the siblings
                    logger.exception(f"{adapter.name} crashed for {symbol}")
                    failure = ProviderFailure(adapter.client.provider, FailureKind.PROVIDER_ERROR, repr(e))
                    results.append(ProviderResult(provider=adapter.name, failure=failure))
        finally:
            # Late threads finish on their own; their clients stop at the deadline
            executor.shutdown(wait=False, cancel_futures=True)

        ok = sum(1 for r in results if r.ok)
        logger.info(f"{symbol}: {ok}/{len(results)} providers responded")
        return results

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------

    def merge(self, symbol: str, is_crypto: bool,
              results: Sequence[ProviderResult]) -> Optional[CompositeRecord]:
        """
        Merge per-adapter results (roster order) into one composite record.

        Returns:
            CompositeRecord, or None if no result carries a quote
        """
        quote_result = next((r for r in results if r.quote is not None), None)
        if quote_result is None:
            logger.warning(f"{symbol}: no provider returned a quote")
            return None

        warnings = self.failure_warnings(results)
        failed_sources = [r.provider for r in results if r.failure is not None]

        if quote_result.provider != self.adapters[0].name:
            warnings.append(f"Primary data source unavailable - quote from {quote_result.provider}")

        quote = quote_result.quote
        average_volume = merge_field(
            [quote.average_volume] + [r.quote.average_volume if r.quote else None for r in results]
            + [r.average_volume for r in results]
        )
        if average_volume != quote.average_volume:
            quote = quote.model_copy(update={'average_volume': average_volume})

        fundamentals = merge_models(Fundamentals, [r.fundamentals for r in results])
        profile = merge_models(CompanyProfile, [r.profile for r in results]) or CompanyProfile()
        technicals = merge_models(TechnicalIndicators, [r.technicals for r in results]) or TechnicalIndicators()

        asset_type = resolve_asset_type(
            symbol,
            is_crypto,
            [r.asset_type for r in results],
            market_cap=fundamentals.market_cap if fundamentals else None,
        )

        sources = [r.provider for r in results if r.has_data()]
        news_counts = [r.news_count for r in results if r.news_count is not None]

        record = CompositeRecord(
            symbol=symbol,
            asset_type=asset_type,
            quote=quote,
            fundamentals=fundamentals,
            technicals=technicals,
            fragments=[f for r in results for f in r.fragments],
            headlines=merge_headlines(r.headlines for r in results),
            news_count=sum(news_counts),
            profile=profile,
            year_high=merge_field(r.year_high for r in results),
            year_low=merge_field(r.year_low for r in results),
            sources=sources,
            failed_sources=failed_sources,
            warnings=warnings,
        )
        logger.debug(f"{symbol}: merged from {', '.join(sources)}")
        return record

    def failure_warnings(self, results: Sequence[ProviderResult]) -> List[str]:
        """Warnings for a lookup that produced no record (used for NotFound)."""
        warnings = []
        for result in results:
            if result.failure is not None:
                warnings.append(failure_warning(result))
            warnings.extend(result.warnings)
        return warnings
