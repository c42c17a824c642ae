"""
Data Quality - completeness heuristic for a report.

score = min(points per contributing provider x providers, cap)

This counts sources. It says nothing about whether the numbers are right
and must not be read as a confidence interval.
"""

from typing import Iterable, Sequence

from config.analysis_config import DATA_QUALITY_MAX_SCORE, DATA_QUALITY_POINTS_PER_SOURCE
from utils.unified_schema import DataQuality


def data_quality_score(
    source_count: int,
    points_per_source: int = DATA_QUALITY_POINTS_PER_SOURCE,
    max_score: int = DATA_QUALITY_MAX_SCORE,
) -> int:
    return max(0, min(points_per_source * source_count, max_score))


def assess_data_quality(sources: Sequence[str], warnings: Iterable[str] = ()) -> DataQuality:
    """
    Args:
        sources: Contributing providers, priority order
        warnings: Provider failures and scoring gaps, in order of discovery

    Returns:
        DataQuality (duplicate warnings collapsed, first occurrence kept)
    """
    unique = list(dict.fromkeys(warnings))
    return DataQuality(
        score=data_quality_score(len(sources)),
        sources=list(sources),
        warnings=unique,
    )
