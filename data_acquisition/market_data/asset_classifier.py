"""
Asset Classifier - symbol normalization and instrument classification.

Crypto and equities use disjoint provider rosters, so the decision has to be
made from the symbol alone before any request is issued. The finer equity
classes (PENNY_STOCK, ETF) are refined afterwards from provider hints.
"""

from typing import Iterable, Optional, Tuple

from config.analysis_config import OTC_SYMBOL_MAX_LENGTH, PENNY_STOCK_MARKET_CAP
from config.constants import CRYPTO_QUOTE_SUFFIXES, CRYPTO_SYMBOL_IDS

_KNOWN_COIN_IDS = frozenset(CRYPTO_SYMBOL_IDS.values())


def _strip_quote_suffix(symbol: str) -> Tuple[str, bool]:
    upper = symbol.upper()
    for suffix in CRYPTO_QUOTE_SUFFIXES:
        if upper.endswith(suffix) and len(upper) > len(suffix):
            return upper[:-len(suffix)], True
    return upper, False


def normalize_symbol(raw: str) -> Tuple[str, bool]:
    """
    Normalize user input into a provider-native identifier.

    Args:
        raw: Ticker or crypto identifier in any casing
            ('aapl', 'BTC', 'btc-usd', 'bitcoin')

    Returns:
        (symbol, is_crypto): CoinGecko id for crypto ('bitcoin'),
        uppercase ticker for equities ('AAPL')

    Raises:
        ValueError: if the input is empty
    """
    text = (raw or '').strip()
    if not text:
        raise ValueError("symbol must not be empty")

    if text.lower() in _KNOWN_COIN_IDS:
        return text.lower(), True

    base, had_suffix = _strip_quote_suffix(text)
    if base in CRYPTO_SYMBOL_IDS:
        return CRYPTO_SYMBOL_IDS[base], True
    if had_suffix:
        # Unknown coin quoted in USD; CoinGecko ids are lowercase
        return base.lower(), True

    return text.upper(), False


def is_otc_symbol(symbol: str) -> bool:
    """OTC / foreign listings: dotted tickers or more than five letters."""
    return '.' in symbol or len(symbol) > OTC_SYMBOL_MAX_LENGTH


def hint_from_market_cap(market_cap: Optional[float]) -> Optional[str]:
    """Advisory hint an adapter can attach when it knows the market cap."""
    if market_cap is not None and 0 < market_cap < PENNY_STOCK_MARKET_CAP:
        return 'PENNY_STOCK'
    return None


def resolve_asset_type(
    symbol: str,
    is_crypto: bool,
    hints: Iterable[Optional[str]],
    market_cap: Optional[float] = None,
) -> str:
    """
    Final classification for a symbol.

    Order: crypto by symbol; PENNY_STOCK by OTC pattern or merged market
    cap; then the first adapter hint in priority order; else STOCK.

    Args:
        symbol: Normalized symbol
        is_crypto: Result of normalize_symbol()
        hints: Adapter hints in roster priority order (None = no opinion)
        market_cap: Merged market cap, if any
    """
    if is_crypto:
        return 'CRYPTO'
    if is_otc_symbol(symbol) or hint_from_market_cap(market_cap):
        return 'PENNY_STOCK'
    for hint in hints:
        if hint and hint != 'CRYPTO':
            return hint
    return 'STOCK'
