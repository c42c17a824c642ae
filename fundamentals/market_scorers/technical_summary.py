"""
Technical Summary - qualitative signals from the latest indicator values.

Reads indicators already computed by the provider; no price history is
needed. Every signal is None when its inputs are absent.
"""

from typing import Optional

from config.analysis_config import RISK_THRESHOLDS
from utils.unified_schema import TechnicalIndicators, TechnicalSummary


def _rsi_signal(rsi: Optional[float]) -> Optional[str]:
    if rsi is None:
        return None
    if rsi < RISK_THRESHOLDS['RSI_OVERSOLD']:
        return 'OVERSOLD'
    if rsi > RISK_THRESHOLDS['RSI_OVERBOUGHT']:
        return 'OVERBOUGHT'
    return 'NEUTRAL'


def _relative(price: float, level: Optional[float]) -> Optional[str]:
    if level is None:
        return None
    return 'ABOVE' if price > level else 'BELOW'


def summarize_technicals(technicals: TechnicalIndicators, price: float) -> TechnicalSummary:
    """
    Build the technical summary.

    Signal votes:
        bullish - RSI oversold, MACD histogram > 0, price above SMA50 /
                  SMA200, golden cross (SMA50 > SMA200)
        bearish - the mirror images

    Args:
        technicals: Merged indicator values
        price: Current price

    Returns:
        TechnicalSummary with an overall BULLISH/BEARISH/NEUTRAL vote
    """
    rsi_signal = _rsi_signal(technicals.rsi)

    macd_trend = None
    if technicals.macd is not None:
        histogram = technicals.macd.histogram
        macd_trend = 'BULLISH' if histogram > 0 else 'BEARISH' if histogram < 0 else 'NEUTRAL'

    vs_sma50 = _relative(price, technicals.sma50)
    vs_sma200 = _relative(price, technicals.sma200)

    golden_cross = death_cross = False
    if technicals.sma50 is not None and technicals.sma200 is not None:
        golden_cross = technicals.sma50 > technicals.sma200
        death_cross = technicals.sma50 < technicals.sma200

    bollinger_position = None
    bands = technicals.bollinger
    if bands is not None:
        if price > bands.upper:
            bollinger_position = 'UPPER'
        elif price < bands.lower:
            bollinger_position = 'LOWER'
        else:
            bollinger_position = 'MIDDLE'

    bullish = sum((
        rsi_signal == 'OVERSOLD',
        macd_trend == 'BULLISH',
        vs_sma50 == 'ABOVE',
        vs_sma200 == 'ABOVE',
        golden_cross,
    ))
    bearish = sum((
        rsi_signal == 'OVERBOUGHT',
        macd_trend == 'BEARISH',
        vs_sma50 == 'BELOW',
        vs_sma200 == 'BELOW',
        death_cross,
    ))

    if bullish > bearish:
        overall = 'BULLISH'
    elif bearish > bullish:
        overall = 'BEARISH'
    else:
        overall = 'NEUTRAL'

    return TechnicalSummary(
        rsi=technicals.rsi,
        rsi_signal=rsi_signal,
        macd_trend=macd_trend,
        price_vs_sma50=vs_sma50,
        price_vs_sma200=vs_sma200,
        golden_cross=golden_cross,
        death_cross=death_cross,
        bollinger_position=bollinger_position,
        bullish_signals=bullish,
        bearish_signals=bearish,
        overall=overall,
    )
