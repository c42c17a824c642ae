"""
Pytest configuration and shared fixtures.

Loaded automatically by pytest; fixtures are available to every test
without importing them. No test touches the network: provider payloads
below are trimmed copies of real responses.
"""

import os
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

# Keys must exist before config.settings is imported by the modules under test
os.environ.setdefault('ALPHAVANTAGE_API_KEY', 'test-alpha-key-0000')
os.environ.setdefault('FINNHUB_API_KEY', 'test-finnhub-key-0000')

from utils.result import FailureKind, ProviderFailure
from utils.unified_schema import (
    CompanyProfile, CompositeRecord, Fundamentals, ProviderResult, Quote, SentimentFragment, TechnicalIndicators,
)


# ============================================================================
# FAKE TIME / HTTP
# ============================================================================

class FakeClock:
    """Monotonic clock advanced only by sleep(); records every sleep."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def make_response(status: int = 200, payload: Any = None, bad_json: bool = False) -> MagicMock:
    """Mock requests.Response."""
    response = MagicMock()
    response.status_code = status
    if bad_json:
        response.json.side_effect = ValueError("Expecting ',' delimiter: line 1 column 42")
    else:
        response.json.return_value = payload if payload is not None else {}
    return response


class StubClient:
    """
    Stand-in for RateLimitedClient used by adapter tests.

    `routes` maps a key to a payload (or ProviderFailure); the key is the
    Alpha Vantage 'function' param when present, else the endpoint.
    """

    def __init__(self, provider: str, routes: Dict[str, Any]):
        self.provider = provider
        self.routes = routes
        self.calls: List[Dict[str, Any]] = []

    def call(self, endpoint: str = '', params: Optional[Dict[str, Any]] = None, deadline=None):
        params = params or {}
        self.calls.append({'endpoint': endpoint, 'params': params, 'deadline': deadline})
        key = params.get('function') or endpoint
        if key in self.routes:
            return self.routes[key]
        return ProviderFailure(self.provider, FailureKind.HTTP_ERROR, f"HTTP 404: {key}")


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def response_factory() -> Callable[..., MagicMock]:
    return make_response


@pytest.fixture
def stub_client_factory():
    return StubClient


@pytest.fixture
def failure():
    """Factory for ProviderFailure values."""
    def _make(provider: str = 'FINNHUB', kind: FailureKind = FailureKind.TRANSPORT,
              message: str = 'connection error') -> ProviderFailure:
        return ProviderFailure(provider, kind, message, attempts=4)
    return _make


@pytest.fixture
def failed_result(failure):
    def _make(provider_name: str, provider: str = 'FINNHUB') -> ProviderResult:
        return ProviderResult(provider=provider_name, failure=failure(provider))
    return _make


# ============================================================================
# ALPHA VANTAGE PAYLOADS
# ============================================================================

@pytest.fixture
def av_global_quote():
    return {
        "Global Quote": {
            "01. symbol": "ACME",
            "02. open": "98.5000",
            "03. high": "105.0000",
            "04. low": "95.0000",
            "05. price": "100.0000",
            "06. volume": "500000",
            "07. latest trading day": "2025-06-13",
            "08. previous close": "97.0000",
            "09. change": "3.0000",
            "10. change percent": "3.0928%",
        }
    }


@pytest.fixture
def av_overview():
    return {
        "Symbol": "ACME",
        "AssetType": "Common Stock",
        "Name": "Acme Robotics Inc",
        "Exchange": "NASDAQ",
        "Currency": "USD",
        "Sector": "TECHNOLOGY",
        "Industry": "INDUSTRIAL MACHINERY",
        "MarketCapitalization": "250000000",
        "PERatio": "18.4",
        "ForwardPE": "None",
        "EPS": "5.43",
        "DividendYield": "0.012",
        "Beta": "1.31",
        "ProfitMargin": "0.087",
        "OperatingMarginTTM": "0.112",
        "QuarterlyRevenueGrowthYOY": "0.054",
        "QuarterlyEarningsGrowthYOY": "-",
        "52WeekHigh": "130.00",
        "52WeekLow": "80.00",
    }


@pytest.fixture
def av_rsi():
    return {
        "Meta Data": {"1: Symbol": "ACME", "2: Indicator": "Relative Strength Index (RSI)"},
        "Technical Analysis: RSI": {
            "2025-06-12": {"RSI": "68.1000"},
            "2025-06-13": {"RSI": "75.0000"},
            "2025-06-11": {"RSI": "61.2000"},
        },
    }


@pytest.fixture
def av_macd():
    return {
        "Technical Analysis: MACD": {
            "2025-06-13": {"MACD": "1.2500", "MACD_Signal": "0.9000", "MACD_Hist": "0.3500"},
            "2025-06-12": {"MACD": "1.1000", "MACD_Signal": "0.8500", "MACD_Hist": "0.2500"},
        }
    }


@pytest.fixture
def av_sma50():
    return {"Technical Analysis: SMA": {"2025-06-13": {"SMA": "96.0000"}}}


@pytest.fixture
def av_bbands():
    return {
        "Technical Analysis: BBANDS": {
            "2025-06-13": {
                "Real Upper Band": "104.0000",
                "Real Middle Band": "99.0000",
                "Real Lower Band": "94.0000",
            }
        }
    }


@pytest.fixture
def av_news():
    return {
        "items": "3",
        "feed": [
            {
                "title": "Acme wins defense contract",
                "url": "https://news.example.com/acme-contract",
                "time_published": "20250613T143000",
                "source": "Wire",
                "ticker_sentiment": [
                    {"ticker": "ACME", "ticker_sentiment_score": "0.45"},
                    {"ticker": "OTHR", "ticker_sentiment_score": "-0.90"},
                ],
            },
            {
                "title": "Acme guidance trimmed",
                "url": "https://news.example.com/acme-guidance",
                "time_published": "20250612T090000",
                "source": "Daily",
                "ticker_sentiment": [{"ticker": "ACME", "ticker_sentiment_score": "-0.15"}],
            },
            {
                "title": "Sector roundup",
                "url": "https://news.example.com/roundup",
                "time_published": "20250611T120000",
                "source": "Daily",
                "ticker_sentiment": [{"ticker": "ACME", "ticker_sentiment_score": "0.0"}],
            },
        ],
    }


# ============================================================================
# FINNHUB PAYLOADS
# ============================================================================

@pytest.fixture
def finnhub_quote():
    return {"c": 101.5, "d": 1.5, "dp": 1.5, "h": 102.0, "l": 99.0, "o": 100.0, "pc": 100.0, "t": 1749830400}


@pytest.fixture
def finnhub_profile():
    return {
        "name": "Acme Robotics Inc",
        "finnhubIndustry": "Machinery",
        "exchange": "NASDAQ NMS - GLOBAL MARKET",
        "currency": "USD",
        "marketCapitalization": 251.3,
        "shareOutstanding": 2.5,
    }


@pytest.fixture
def finnhub_metric():
    return {
        "metric": {
            "10DayAverageTradingVolume": 1.0,
            "52WeekHigh": 131.0,
            "52WeekLow": 79.5,
            "peTTM": 18.9,
            "epsTTM": 5.4,
            "beta": 1.29,
            "netProfitMarginTTM": 8.7,
            "operatingMarginTTM": 11.2,
            "revenueGrowthTTMYoy": 5.1,
            "epsGrowthTTMYoy": 12.0,
            "currentDividendYieldTTM": 1.2,
        }
    }


@pytest.fixture
def finnhub_social():
    return {
        "symbol": "ACME",
        "reddit": [
            {"atTime": "2025-06-12 00:00:00", "mention": 10, "score": 0.1},
            {"atTime": "2025-06-13 00:00:00", "mention": 40, "score": 0.5},
        ],
        "twitter": [
            {"atTime": "2025-06-13 00:00:00", "mention": 60, "score": 0.1},
        ],
    }


@pytest.fixture
def finnhub_insider():
    return {
        "symbol": "ACME",
        "data": [
            {"name": "DOE JANE", "share": 1000, "change": 500, "transactionCode": "P"},
            {"name": "ROE RICH", "share": 2000, "change": -300, "transactionCode": "S"},
            {"name": "DOE JANE", "share": 1500, "change": 500, "transactionCode": "P"},
            {"name": "POE ANN", "share": 100, "change": 0, "transactionCode": "M"},
        ],
    }


@pytest.fixture
def finnhub_recommendation():
    return [
        {"period": "2025-05-01", "strongBuy": 0, "buy": 0, "hold": 10, "sell": 0, "strongSell": 0},
        {"period": "2025-06-01", "strongBuy": 5, "buy": 3, "hold": 2, "sell": 0, "strongSell": 0},
    ]


# ============================================================================
# COINGECKO PAYLOADS
# ============================================================================

@pytest.fixture
def coingecko_coin():
    return {
        "id": "bitcoin",
        "symbol": "btc",
        "name": "Bitcoin",
        "sentiment_votes_up_percentage": 70.0,
        "sentiment_votes_down_percentage": 30.0,
        "last_updated": "2025-06-13T12:00:00.000Z",
        "market_data": {
            "current_price": {"usd": 60000.0},
            "high_24h": {"usd": 61000.0},
            "low_24h": {"usd": 59000.0},
            "total_volume": {"usd": 30000000000.0},
            "market_cap": {"usd": 1200000000000.0},
            "price_change_24h": 1000.0,
        },
    }


@pytest.fixture
def coingecko_chart():
    prices = [[1700000000000 + i * 86400000, 40000.0 + i * 100] for i in range(365)]
    volumes = [[1700000000000 + i * 86400000, 20000000000.0] for i in range(335)]
    volumes += [[1700000000000 + i * 86400000, 25000000000.0] for i in range(335, 365)]
    return {"prices": prices, "total_volumes": volumes, "market_caps": []}


# ============================================================================
# COMPOSITE RECORDS
# ============================================================================

EQUITY_SOURCES = ['Alpha Vantage', 'Finnhub', 'Alpha Vantage Technicals', 'Alpha Vantage News', 'Finnhub Sentiment']


@pytest.fixture
def record_factory():
    """
    Factory for CompositeRecord.

    Defaults reproduce the documented worked example: intraday range 10.5%,
    volume at 50% of average, $250M market cap, sentiment mean 30, RSI 75.
    """
    def _make(**overrides) -> CompositeRecord:
        fields = dict(
            symbol='ACME',
            asset_type='PENNY_STOCK',
            quote=Quote(
                symbol='ACME',
                current_price=100.0,
                high_price=105.0,
                low_price=95.0,
                previous_close=97.0,
                volume=500_000,
                average_volume=1_000_000,
                source='Alpha Vantage',
            ),
            fundamentals=Fundamentals(market_cap=250_000_000),
            technicals=TechnicalIndicators(rsi=75.0),
            fragments=[
                SentimentFragment(source='news', provider='Alpha Vantage News', score=10.0, evidence_count=3),
                SentimentFragment(source='social', provider='Finnhub Sentiment', score=50.0, evidence_count=100),
            ],
            profile=CompanyProfile(name='Acme Robotics Inc', sector='TECHNOLOGY'),
            year_high=130.0,
            year_low=80.0,
            sources=list(EQUITY_SOURCES),
        )
        fields.update(overrides)
        return CompositeRecord(**fields)
    return _make
