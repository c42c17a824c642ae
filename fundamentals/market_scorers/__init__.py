from .score_synthesizer import ScoreSynthesizer, SynthesizedScores, year_range
from .risk_assessor import RiskAssessor, risk_level
from .sentiment_synthesizer import synthesize_sentiment, sentiment_label
from .technical_summary import summarize_technicals
from .data_quality import assess_data_quality, data_quality_score

__all__ = [
    'ScoreSynthesizer',
    'SynthesizedScores',
    'year_range',
    'RiskAssessor',
    'risk_level',
    'synthesize_sentiment',
    'sentiment_label',
    'summarize_technicals',
    'assess_data_quality',
    'data_quality_score',
]
