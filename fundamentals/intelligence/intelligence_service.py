"""
Intelligence Service - the single entry point for market intelligence.

get_intelligence(symbol) -> IntelligenceReport | NotFound

Flow:
1. Normalize the symbol and decide crypto vs equity (disjoint rosters)
2. Fan out the roster through its MarketDataAggregator
3. Run the ScoreSynthesizer over the composite record
4. Stamp the report with its generation time
"""

import time
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence, Union

from config.constants import DEFAULT_INTELLIGENCE_DEADLINE_SECONDS
from data_acquisition.market_data.aggregator import MarketDataAggregator
from data_acquisition.market_data.asset_classifier import normalize_symbol
from data_acquisition.market_data.base_adapter import ProviderAdapter
from fundamentals.market_scorers.score_synthesizer import ScoreSynthesizer
from utils.helpers import format_large_number
from utils.logger import setup_logger
from utils.unified_schema import CompositeRecord, IntelligenceReport, NotFound

logger = setup_logger('intelligence_service')


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='seconds')


class IntelligenceService:
    """
    Orchestrates aggregation and scoring for one symbol per call.

    Adapters are injected; the service owns no provider state of its own,
    so one instance can serve concurrent lookups (the shared rate limiters
    live in the adapters' clients).
    """

    def __init__(
        self,
        equity_adapters: Sequence[ProviderAdapter],
        crypto_adapters: Sequence[ProviderAdapter] = (),
        synthesizer: Optional[ScoreSynthesizer] = None,
        default_deadline: float = DEFAULT_INTELLIGENCE_DEADLINE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], str] = _utc_now_iso,
    ):
        self.equity = MarketDataAggregator(equity_adapters, clock=clock)
        self.crypto = MarketDataAggregator(crypto_adapters, clock=clock) if crypto_adapters else None
        self.synthesizer = synthesizer or ScoreSynthesizer()
        self.default_deadline = default_deadline
        self._clock = clock
        self._now = now

    def get_intelligence(
        self,
        symbol: str,
        deadline_seconds: Optional[float] = None,
    ) -> Union[IntelligenceReport, NotFound]:
        """
        Build the intelligence report for one symbol.

        Args:
            symbol: Ticker or crypto identifier, any casing ('aapl', 'BTC-USD')
            deadline_seconds: Budget for the whole call; propagated to every
                provider request (default: service default)

        Returns:
            IntelligenceReport, or NotFound when no provider produced a
            nonzero price (accompanying warnings say why)

        Raises:
            ValueError: if symbol is empty
        """
        normalized, is_crypto = normalize_symbol(symbol)
        budget = self.default_deadline if deadline_seconds is None else deadline_seconds
        deadline = self._clock() + budget

        if is_crypto and self.crypto is None:
            return NotFound(symbol=normalized, reason="No crypto data providers configured")

        aggregator = self.crypto if is_crypto else self.equity
        logger.info(f"Building intelligence for {normalized} ({'crypto' if is_crypto else 'equity'})")

        results = aggregator.collect(normalized, deadline)
        record = aggregator.merge(normalized, is_crypto, results)
        if record is None:
            return NotFound(
                symbol=normalized,
                reason="No price data available from primary or fallback sources",
                warnings=aggregator.failure_warnings(results),
            )

        return self.build_report(record)

    def build_report(self, record: CompositeRecord) -> IntelligenceReport:
        """Score a composite record and assemble the report."""
        scores = self.synthesizer.synthesize(record)
        report = IntelligenceReport(
            symbol=record.symbol,
            name=record.profile.name or record.symbol,
            asset_type=record.asset_type,
            sector=record.profile.sector,
            industry=record.profile.industry,
            quote=record.quote,
            fundamentals=record.fundamentals,
            technicals=record.technicals,
            technical_summary=scores.technical_summary,
            sentiment=scores.sentiment,
            risk=scores.risk,
            year_range=scores.year_range,
            data_quality=scores.data_quality,
            generated_at=self._now(),
        )
        market_cap = record.fundamentals.market_cap if record.fundamentals else None
        logger.info(
            f"{record.symbol} ({record.asset_type}, cap {format_large_number(market_cap)}): "
            f"risk {report.risk.overall_score} ({report.risk.risk_level}), "
            f"sentiment {report.sentiment.overall}, data quality {report.data_quality.score}"
        )
        return report
