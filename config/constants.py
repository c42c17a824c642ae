"""
Centralized constants for the application.
Stores API base URLs, timeouts, rate limits and other magic numbers.
"""

from typing import Dict

# --- API Configuration ---

# Alpha Vantage (primary quote, fundamentals, technicals, news sentiment)
# Free tier: 5 requests/minute, 500/day
ALPHAVANTAGE_BASE_URL = "https://www.alphavantage.co/query"
ALPHAVANTAGE_TIMEOUT_SECONDS = 10
ALPHAVANTAGE_MIN_REQUEST_INTERVAL = 12.0  # seconds
ALPHAVANTAGE_RETRIES = 3
ALPHAVANTAGE_RETRY_DELAY = 1.0
ALPHAVANTAGE_DAILY_QUOTA = 500

# Finnhub (fallback quote, social/insider/analyst sentiment)
# Free tier: 60 requests/minute
FINNHUB_BASE_URL = "https://finnhub.io/api/v1"
FINNHUB_TIMEOUT_SECONDS = 8
FINNHUB_MIN_REQUEST_INTERVAL = 1.0
FINNHUB_RETRIES = 3
FINNHUB_RETRY_DELAY = 1.0
FINNHUB_DAILY_QUOTA = 86400

# CoinGecko (crypto market data)
# Demo tier: 30 requests/minute
COINGECKO_BASE_URL = "https://api.coingecko.com/api/v3"
COINGECKO_TIMEOUT_SECONDS = 10
COINGECKO_MIN_REQUEST_INTERVAL = 2.0
COINGECKO_RETRIES = 3
COINGECKO_RETRY_DELAY = 1.0
COINGECKO_DAILY_QUOTA = 43200

# Whole-request ceiling for one get_intelligence() call. At the free-tier
# Alpha Vantage pace (12 s) the default equity roster issues 9 AV calls.
DEFAULT_INTELLIGENCE_DEADLINE_SECONDS = 120.0

# Upper bound on concurrent adapter calls per lookup
AGGREGATOR_MAX_WORKERS = 8

# --- API Endpoints ---

ALPHAVANTAGE_FUNCTIONS: Dict[str, str] = {
    'quote': 'GLOBAL_QUOTE',
    'overview': 'OVERVIEW',
    'news_sentiment': 'NEWS_SENTIMENT',
}

# Indicator key -> request parameters (besides symbol/apikey).
# Order here is the order requests are issued.
ALPHAVANTAGE_TECHNICALS: Dict[str, Dict[str, str]] = {
    'rsi': {'function': 'RSI', 'interval': 'daily', 'time_period': '14', 'series_type': 'close'},
    'macd': {'function': 'MACD', 'interval': 'daily', 'series_type': 'close'},
    'sma20': {'function': 'SMA', 'interval': 'daily', 'time_period': '20', 'series_type': 'close'},
    'sma50': {'function': 'SMA', 'interval': 'daily', 'time_period': '50', 'series_type': 'close'},
    'sma200': {'function': 'SMA', 'interval': 'daily', 'time_period': '200', 'series_type': 'close'},
    'ema12': {'function': 'EMA', 'interval': 'daily', 'time_period': '12', 'series_type': 'close'},
    'ema26': {'function': 'EMA', 'interval': 'daily', 'time_period': '26', 'series_type': 'close'},
    'bollinger': {'function': 'BBANDS', 'interval': 'daily', 'time_period': '20', 'series_type': 'close'},
    'stochastic': {'function': 'STOCH', 'interval': 'daily'},
    'adx': {'function': 'ADX', 'interval': 'daily', 'time_period': '14'},
    'obv': {'function': 'OBV', 'interval': 'daily'},
    'vwap': {'function': 'VWAP', 'interval': '60min'},
    'atr': {'function': 'ATR', 'interval': 'daily', 'time_period': '14'},
}

# Subset requested by default; the full set costs 13 calls per symbol on a
# 5/minute budget.
DEFAULT_TECHNICALS = ['rsi', 'macd', 'sma50', 'sma200', 'bollinger', 'adx']

FINNHUB_ENDPOINTS: Dict[str, str] = {
    'quote': 'quote',
    'profile': 'stock/profile2',
    'metric': 'stock/metric',
    'social_sentiment': 'stock/social-sentiment',
    'insider_transactions': 'stock/insider-transactions',
    'recommendation': 'stock/recommendation',
}

COINGECKO_ENDPOINTS: Dict[str, str] = {
    'coin': 'coins/{coin_id}',
    'market_chart': 'coins/{coin_id}/market_chart',
}

# --- News ---

NEWS_ARTICLE_LIMIT = 50

# --- Crypto identifiers ---

# Ticker -> CoinGecko coin id
CRYPTO_SYMBOL_IDS: Dict[str, str] = {
    'BTC': 'bitcoin',
    'ETH': 'ethereum',
    'SOL': 'solana',
    'XRP': 'ripple',
    'ADA': 'cardano',
    'DOGE': 'dogecoin',
    'DOT': 'polkadot',
    'AVAX': 'avalanche-2',
    'MATIC': 'matic-network',
    'LINK': 'chainlink',
    'LTC': 'litecoin',
    'BNB': 'binancecoin',
    'SHIB': 'shiba-inu',
    'TRX': 'tron',
    'ATOM': 'cosmos',
}

CRYPTO_QUOTE_SUFFIXES = ('-USD', '-USDT', '/USD')
