"""
Score Synthesizer - turns a CompositeRecord into the derived scores.

Pure and deterministic: no I/O, no clock. The same record always yields the
same scores.
"""

from typing import NamedTuple, Optional

from utils.numeric_utils import round_optional, safe_divide
from utils.unified_schema import (
    CompositeRecord, DataQuality, RiskAssessment, SentimentVerdict, TechnicalSummary, YearRange,
)
from .data_quality import assess_data_quality
from .risk_assessor import RiskAssessor
from .sentiment_synthesizer import synthesize_sentiment
from .technical_summary import summarize_technicals


class SynthesizedScores(NamedTuple):
    technical_summary: TechnicalSummary
    sentiment: SentimentVerdict
    risk: RiskAssessment
    year_range: YearRange
    data_quality: DataQuality


def year_range(record: CompositeRecord) -> YearRange:
    """
    52-week range with the current price's distance from each end, both
    positive inside the range: percent below the high, percent above the low.
    Falls back to the session high/low when no provider reported a
    52-week range.
    """
    quote = record.quote
    high = record.year_high if record.year_high is not None else quote.high_price
    low = record.year_low if record.year_low is not None else quote.low_price

    from_high = safe_divide(high - quote.current_price, high) if high is not None else None
    from_low = safe_divide(quote.current_price - low, low) if low is not None else None

    return YearRange(
        high=high,
        low=low,
        percent_from_high=round_optional(from_high * 100 if from_high is not None else None),
        percent_from_low=round_optional(from_low * 100 if from_low is not None else None),
    )


class ScoreSynthesizer:
    """
    Runs every scorer over one composite record.

    Args:
        risk_assessor: Custom assessor (weights/thresholds); defaults to the
            documented constants in config.analysis_config
        sentiment_thresholds: Label thresholds override
    """

    def __init__(self, risk_assessor: Optional[RiskAssessor] = None, sentiment_thresholds=None):
        self.risk_assessor = risk_assessor or RiskAssessor()
        self.sentiment_thresholds = sentiment_thresholds

    def synthesize(self, record: CompositeRecord) -> SynthesizedScores:
        sentiment = synthesize_sentiment(
            record.fragments,
            record.headlines,
            news_count=record.news_count,
            thresholds=self.sentiment_thresholds,
        )
        risk = self.risk_assessor.assess(
            record,
            sentiment.score if record.fragments else None,
        )
        quality = assess_data_quality(record.sources, list(record.warnings) + risk.gaps)

        return SynthesizedScores(
            technical_summary=summarize_technicals(record.technicals, record.quote.current_price),
            sentiment=sentiment,
            risk=risk,
            year_range=year_range(record),
            data_quality=quality,
        )
