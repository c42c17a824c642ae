"""
Risk Assessor - weighted five-factor risk score.

Factors (each normalized to 0-100 before weighting):
    volatility       min(10 x intraday range %, 100)
    liquidity        80 / 40 / 20 by volume relative to average volume
    market_cap       90 / 60 / 40 / 20 by capitalization tier
    news_volatility  min(|sentiment score|, 100)
    technical_risk   70 if RSI overbought, 50 if oversold, else 20

A factor whose input is absent contributes 0 and is reported as a gap; the
assessment never fails on partial data.
"""

from typing import Any, Dict, List, Optional, Tuple

from config.analysis_config import (
    RISK_LEVEL_BANDS, RISK_LEVEL_TOP, RISK_THRESHOLDS, RISK_WARNINGS, RISK_WEIGHTS,
)
from utils.logger import setup_logger
from utils.numeric_utils import clamp, round_half_up, safe_divide
from utils.unified_schema import CompositeRecord, RiskAssessment, RiskFactors

logger = setup_logger('risk_assessor')


def risk_level(score: float, bands=None, top: str = RISK_LEVEL_TOP) -> str:
    """Map a 0-100 score to its band; band bounds are inclusive (20 is LOW)."""
    for upper, level in (bands or RISK_LEVEL_BANDS):
        if score <= upper:
            return level
    return top


class RiskAssessor:
    """Computes RiskAssessment from a composite record and sentiment score."""

    def __init__(
        self,
        weights: Optional[Dict[str, float]] = None,
        thresholds: Optional[Dict[str, Any]] = None,
        warning_thresholds: Optional[Dict[str, Any]] = None,
        level_bands: Optional[List[Tuple[float, str]]] = None,
    ):
        self.weights = weights or RISK_WEIGHTS
        self.thresholds = thresholds or RISK_THRESHOLDS
        self.warning_thresholds = warning_thresholds or RISK_WARNINGS
        self.level_bands = level_bands or RISK_LEVEL_BANDS

        if abs(sum(self.weights.values()) - 1.0) > 1e-9:
            raise ValueError(f"Risk weights must sum to 1.0, got {sum(self.weights.values())}")

    # ------------------------------------------------------------------
    # Factors
    # ------------------------------------------------------------------

    @staticmethod
    def daily_range_percent(high: Optional[float], low: Optional[float]) -> Optional[float]:
        """Intraday range as a percent of the low; None without a usable range."""
        if high is None or low is None or low <= 0 or high < low:
            return None
        return (high - low) / low * 100

    def volatility_factor(self, range_pct: Optional[float]) -> Optional[float]:
        if range_pct is None:
            return None
        return min(self.thresholds['VOLATILITY_MULTIPLIER'] * range_pct, self.thresholds['FACTOR_CAP'])

    def liquidity_factor(self, volume_ratio: Optional[float]) -> Optional[float]:
        # Low relative volume = high risk; strict "<" so a ratio of exactly 0.5 is not < 0.5
        if volume_ratio is None:
            return None
        for upper, value in self.thresholds['LIQUIDITY_BANDS']:
            if volume_ratio < upper:
                return value
        return self.thresholds['LIQUIDITY_DEFAULT']

    def market_cap_factor(self, market_cap: Optional[float]) -> Optional[float]:
        if not market_cap:
            return None
        for upper, value in self.thresholds['MARKET_CAP_BANDS']:
            if market_cap < upper:
                return value
        return self.thresholds['MARKET_CAP_DEFAULT']

    def news_factor(self, sentiment_score: Optional[float]) -> Optional[float]:
        if sentiment_score is None:
            return None
        return min(abs(sentiment_score), self.thresholds['FACTOR_CAP'])

    def technical_factor(self, rsi: Optional[float]) -> Optional[float]:
        if rsi is None:
            return None
        if rsi > self.thresholds['RSI_OVERBOUGHT']:
            return self.thresholds['RSI_OVERBOUGHT_RISK']
        if rsi < self.thresholds['RSI_OVERSOLD']:
            return self.thresholds['RSI_OVERSOLD_RISK']
        return self.thresholds['RSI_NEUTRAL_RISK']

    # ------------------------------------------------------------------
    # Assessment
    # ------------------------------------------------------------------

    def assess(self, record: CompositeRecord, sentiment_score: Optional[float]) -> RiskAssessment:
        """
        Args:
            record: Merged market data
            sentiment_score: Composite sentiment score, None if no fragments

        Returns:
            RiskAssessment with score, band, factor breakdown, warnings, gaps
        """
        quote = record.quote
        market_cap = record.fundamentals.market_cap if record.fundamentals else None
        rsi = record.technicals.rsi

        range_pct = self.daily_range_percent(quote.high_price, quote.low_price)
        volume_ratio = None
        if quote.volume is not None:
            volume_ratio = safe_divide(quote.volume, quote.average_volume)

        raw = {
            'volatility': self.volatility_factor(range_pct),
            'liquidity': self.liquidity_factor(volume_ratio),
            'market_cap': self.market_cap_factor(market_cap),
            'news_volatility': self.news_factor(sentiment_score),
            'technical_risk': self.technical_factor(rsi),
        }
        gap_reasons = {
            'volatility': 'intraday high/low unavailable',
            'liquidity': 'volume or average volume unavailable',
            'market_cap': 'market cap unavailable',
            'news_volatility': 'no sentiment sources',
            'technical_risk': 'RSI unavailable',
        }

        gaps = [f"Risk factor '{name}' not scored: {gap_reasons[name]}" for name, value in raw.items() if value is None]
        factors = {name: (value if value is not None else 0.0) for name, value in raw.items()}

        weighted = sum(factors[name] * self.weights[name] for name in self.weights)
        overall = int(clamp(round_half_up(weighted), 0, 100))

        warnings = self._warnings(range_pct, volume_ratio, market_cap, record.news_count, rsi)
        if gaps:
            logger.debug(f"{record.symbol}: {len(gaps)} risk factor(s) without input")

        return RiskAssessment(
            overall_score=overall,
            risk_level=risk_level(overall, self.level_bands),
            factors=RiskFactors(**{name: round(value, 2) for name, value in factors.items()}),
            warnings=warnings,
            gaps=gaps,
        )

    def _warnings(
        self,
        range_pct: Optional[float],
        volume_ratio: Optional[float],
        market_cap: Optional[float],
        news_count: int,
        rsi: Optional[float],
    ) -> List[str]:
        """One warning per crossed threshold, in a fixed order."""
        limits = self.warning_thresholds
        warnings = []
        if range_pct is not None and range_pct > limits['HIGH_DAILY_RANGE_PCT']:
            warnings.append(f"High daily volatility ({range_pct:.1f}% intraday range)")
        if volume_ratio is not None and volume_ratio < limits['LOW_LIQUIDITY_RATIO']:
            warnings.append(f"Low liquidity (volume at {volume_ratio * 100:.0f}% of average)")
        if market_cap and market_cap < limits['MICRO_CAP_USD']:
            warnings.append("Micro-cap - high risk")
        if news_count > limits['HIGH_NEWS_COUNT']:
            warnings.append("High news volume - potential volatility")
        if rsi is not None and rsi > self.thresholds['RSI_OVERBOUGHT']:
            warnings.append(f"RSI overbought (>{self.thresholds['RSI_OVERBOUGHT']:.0f})")
        if rsi is not None and rsi < self.thresholds['RSI_OVERSOLD']:
            warnings.append(f"RSI oversold (<{self.thresholds['RSI_OVERSOLD']:.0f})")
        return warnings
