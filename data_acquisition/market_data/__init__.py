from .base_adapter import ProviderAdapter
from .alphavantage_adapter import (
    AlphaVantageQuoteAdapter,
    AlphaVantageTechnicalsAdapter,
    AlphaVantageNewsAdapter,
    inspect_alphavantage_payload,
)
from .finnhub_adapter import FinnhubQuoteAdapter, FinnhubSentimentAdapter
from .coingecko_adapter import CoinGeckoMarketAdapter, CoinGeckoHistoryAdapter
from .aggregator import MarketDataAggregator
from .asset_classifier import normalize_symbol, resolve_asset_type

__all__ = [
    'ProviderAdapter',
    'AlphaVantageQuoteAdapter',
    'AlphaVantageTechnicalsAdapter',
    'AlphaVantageNewsAdapter',
    'inspect_alphavantage_payload',
    'FinnhubQuoteAdapter',
    'FinnhubSentimentAdapter',
    'CoinGeckoMarketAdapter',
    'CoinGeckoHistoryAdapter',
    'MarketDataAggregator',
    'normalize_symbol',
    'resolve_asset_type',
]
