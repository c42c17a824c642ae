"""
Sentiment Synthesizer - combine sentiment fragments into one verdict.

score = mean of the available fragment scores. A provider that was
unreachable contributed no fragment and is simply not in the mean; a
fragment with zero evidence is a genuine neutral reading and is included.
"""

from typing import Dict, List, Optional, Sequence

from config.analysis_config import MAX_TOP_HEADLINES, SENTIMENT_THRESHOLDS
from utils.numeric_utils import safe_mean
from utils.unified_schema import Headline, SentimentFragment, SentimentVerdict


def sentiment_label(score: float, thresholds: Optional[Dict[str, float]] = None) -> str:
    thresholds = thresholds or SENTIMENT_THRESHOLDS
    if score > thresholds['BULLISH_ABOVE']:
        return 'BULLISH'
    if score < thresholds['BEARISH_BELOW']:
        return 'BEARISH'
    return 'NEUTRAL'


def synthesize_sentiment(
    fragments: Sequence[SentimentFragment],
    headlines: Sequence[Headline] = (),
    news_count: int = 0,
    thresholds: Optional[Dict[str, float]] = None,
    max_headlines: int = MAX_TOP_HEADLINES,
) -> SentimentVerdict:
    """
    Args:
        fragments: All fragments from all providers (order irrelevant)
        headlines: Merged headlines, already sorted newest first
        news_count: Total articles reported by news providers
        thresholds: Label thresholds (defaults to SENTIMENT_THRESHOLDS)
        max_headlines: Cap on top_headlines

    Returns:
        SentimentVerdict; with no fragments the score is 0 and NEUTRAL
    """
    mean = safe_mean(f.score for f in fragments)

    by_source: Dict[str, List[float]] = {}
    evidence: Dict[str, int] = {}
    for fragment in fragments:
        by_source.setdefault(fragment.source, []).append(fragment.score)
        evidence[fragment.source] = evidence.get(fragment.source, 0) + fragment.evidence_count

    sources = {source: round(safe_mean(scores), 2) for source, scores in sorted(by_source.items())}

    return SentimentVerdict(
        # Label from the unrounded mean so rounding never flips a band
        overall=sentiment_label(mean, thresholds),
        score=round(mean, 2),
        sources=sources,
        evidence=dict(sorted(evidence.items())),
        news_count=news_count,
        positive_news=sum(1 for h in headlines if h.sentiment == 'positive'),
        negative_news=sum(1 for h in headlines if h.sentiment == 'negative'),
        top_headlines=list(headlines[:max_headlines]),
    )
