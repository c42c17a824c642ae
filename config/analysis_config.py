"""
Analysis Configuration
Centralized configuration for risk, sentiment and data-quality scoring.

These are heuristics carried over as documented constants. None of them has
been tuned or validated against outcomes; treat them as configuration.
"""

from typing import Dict, Any

# --- Risk Factor Weights ---
# Must sum to 1.0
RISK_WEIGHTS: Dict[str, float] = {
    'volatility': 0.25,
    'liquidity': 0.20,
    'market_cap': 0.25,
    'news_volatility': 0.15,
    'technical_risk': 0.15,
}

# --- Risk Factor Thresholds ---
RISK_THRESHOLDS: Dict[str, Any] = {
    # volatility = min(multiplier * intraday range %, cap)
    'VOLATILITY_MULTIPLIER': 10.0,
    'FACTOR_CAP': 100.0,

    # Liquidity: (volume / average volume) ratio -> factor value
    # Checked in order, strict "<"
    'LIQUIDITY_BANDS': [
        (0.5, 80.0),
        (1.0, 40.0),
    ],
    'LIQUIDITY_DEFAULT': 20.0,

    # Market cap (USD) -> factor value, strict "<"
    'MARKET_CAP_BANDS': [
        (300_000_000, 90.0),     # Micro-cap
        (2_000_000_000, 60.0),   # Small cap
        (10_000_000_000, 40.0),  # Mid cap
    ],
    'MARKET_CAP_DEFAULT': 20.0,  # Large cap

    # RSI extremity
    'RSI_OVERBOUGHT': 70.0,
    'RSI_OVERSOLD': 30.0,
    'RSI_OVERBOUGHT_RISK': 70.0,
    'RSI_OVERSOLD_RISK': 50.0,
    'RSI_NEUTRAL_RISK': 20.0,
}

# --- Risk Warning Triggers ---
# One warning per crossed threshold
RISK_WARNINGS: Dict[str, Any] = {
    'HIGH_DAILY_RANGE_PCT': 5.0,       # intraday range % >
    'LOW_LIQUIDITY_RATIO': 0.3,        # volume / avg volume <
    'MICRO_CAP_USD': 300_000_000,      # market cap <
    'HIGH_NEWS_COUNT': 20,             # news articles >
}

# --- Risk Level Bands ---
# (inclusive upper bound, level); anything above the last bound is EXTREME
RISK_LEVEL_BANDS = [
    (20, 'LOW'),
    (40, 'MODERATE'),
    (60, 'HIGH'),
    (80, 'VERY_HIGH'),
]
RISK_LEVEL_TOP = 'EXTREME'

# --- Sentiment ---
SENTIMENT_THRESHOLDS: Dict[str, float] = {
    'BULLISH_ABOVE': 20.0,
    'BEARISH_BELOW': -20.0,
    # Per-article ticker sentiment (-1..1) classification
    'POSITIVE_ARTICLE': 0.1,
    'NEGATIVE_ARTICLE': -0.1,
}
MAX_TOP_HEADLINES = 10

# --- Data Quality ---
# Completeness heuristic: points per contributing provider, capped
DATA_QUALITY_POINTS_PER_SOURCE = 20
DATA_QUALITY_MAX_SCORE = 100

# --- Asset Classification ---
PENNY_STOCK_MARKET_CAP = 300_000_000
OTC_SYMBOL_MAX_LENGTH = 5
