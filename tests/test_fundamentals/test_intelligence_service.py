"""
End-to-end tests for IntelligenceService.

The production adapters run against stub clients serving the recorded
payloads from conftest, so the whole path from provider JSON to report is
exercised without network access.

Tests cover:
- Full equity report
- Partial provider failure and its effect on data quality
- NotFound when no quote is available
- Crypto dispatch
- Idempotence for identical provider responses
"""

import pytest

from data_acquisition.market_data import (
    AlphaVantageNewsAdapter, AlphaVantageQuoteAdapter, AlphaVantageTechnicalsAdapter,
    CoinGeckoHistoryAdapter, CoinGeckoMarketAdapter,
    FinnhubQuoteAdapter, FinnhubSentimentAdapter,
)
from fundamentals.intelligence import IntelligenceService
from utils.result import FailureKind, ProviderFailure
from utils.unified_schema import IntelligenceReport, NotFound

GENERATED_AT = '2025-06-13T16:00:00+00:00'


@pytest.fixture
def av_routes(av_global_quote, av_overview, av_rsi, av_macd, av_sma50, av_bbands, av_news):
    return {
        'GLOBAL_QUOTE': av_global_quote,
        'OVERVIEW': av_overview,
        'RSI': av_rsi,
        'MACD': av_macd,
        'SMA': av_sma50,
        'BBANDS': av_bbands,
        'NEWS_SENTIMENT': av_news,
    }


@pytest.fixture
def finnhub_routes(finnhub_quote, finnhub_profile, finnhub_metric, finnhub_social,
                   finnhub_insider, finnhub_recommendation):
    return {
        'quote': finnhub_quote,
        'stock/profile2': finnhub_profile,
        'stock/metric': finnhub_metric,
        'stock/social-sentiment': finnhub_social,
        'stock/insider-transactions': finnhub_insider,
        'stock/recommendation': finnhub_recommendation,
    }


@pytest.fixture
def coingecko_routes(coingecko_coin, coingecko_chart):
    return {'coins/bitcoin': coingecko_coin, 'coins/bitcoin/market_chart': coingecko_chart}


@pytest.fixture
def build_service(stub_client_factory, av_routes, finnhub_routes, coingecko_routes):
    """Service factory; route overrides replace individual provider responses."""
    def _build(av=None, finnhub=None, coingecko=None, with_crypto=True, **kwargs):
        alphavantage = stub_client_factory('ALPHAVANTAGE', {**av_routes, **(av or {})})
        finnhub_client = stub_client_factory('FINNHUB', {**finnhub_routes, **(finnhub or {})})
        coingecko_client = stub_client_factory('COINGECKO', {**coingecko_routes, **(coingecko or {})})

        equity = [
            AlphaVantageQuoteAdapter(alphavantage),
            FinnhubQuoteAdapter(finnhub_client),
            AlphaVantageTechnicalsAdapter(alphavantage, indicators=['rsi', 'macd', 'sma50', 'bollinger']),
            AlphaVantageNewsAdapter(alphavantage),
            FinnhubSentimentAdapter(finnhub_client),
        ]
        crypto = [CoinGeckoMarketAdapter(coingecko_client), CoinGeckoHistoryAdapter(coingecko_client)] if with_crypto else []
        service = IntelligenceService(equity, crypto, now=lambda: GENERATED_AT, **kwargs)
        service.clients = {'ALPHAVANTAGE': alphavantage, 'FINNHUB': finnhub_client, 'COINGECKO': coingecko_client}
        return service
    return _build


def connection_error(provider='FINNHUB'):
    return ProviderFailure(provider, FailureKind.TRANSPORT, 'connection error', attempts=4)


class TestEquityReport:
    """All five equity providers healthy."""

    def test_full_report(self, build_service):
        report = build_service().get_intelligence('acme')

        assert isinstance(report, IntelligenceReport)
        assert report.symbol == 'ACME'
        assert report.name == 'Acme Robotics Inc'
        assert report.asset_type == 'PENNY_STOCK'
        assert report.sector == 'TECHNOLOGY'
        assert report.generated_at == GENERATED_AT

        # Primary quote, average volume filled from the fallback
        assert report.quote.current_price == 100.0
        assert report.quote.source == 'Alpha Vantage'
        assert report.quote.average_volume == 1_000_000

        # Primary fundamentals, gaps filled by Finnhub
        assert report.fundamentals.market_cap == 250_000_000
        assert report.fundamentals.forward_pe is None
        assert report.fundamentals.earnings_growth == pytest.approx(0.12)

        assert report.technicals.rsi == 75.0
        assert report.technical_summary.rsi_signal == 'OVERBOUGHT'

    def test_scores(self, build_service):
        report = build_service().get_intelligence('ACME')

        # news 10, social 30, insider 33.33, analyst 65
        assert report.sentiment.score == pytest.approx(34.58)
        assert report.sentiment.overall == 'BULLISH'
        assert report.sentiment.news_count == 3
        assert report.sentiment.positive_news == 1
        assert report.sentiment.negative_news == 1

        assert report.risk.overall_score == 71
        assert report.risk.risk_level == 'VERY_HIGH'
        assert report.year_range.high == 130.0

        assert report.data_quality.score == 100
        assert report.data_quality.warnings == []
        assert report.data_quality.sources == [
            'Alpha Vantage', 'Finnhub', 'Alpha Vantage Technicals', 'Alpha Vantage News', 'Finnhub Sentiment',
        ]

    def test_idempotent_for_identical_responses(self, build_service):
        service = build_service()
        first = service.get_intelligence('ACME')
        second = service.get_intelligence('ACME')

        assert first.model_dump_json(exclude={'generated_at'}) == second.model_dump_json(exclude={'generated_at'})

    def test_deadline_propagated_to_every_request(self, build_service):
        service = build_service(clock=lambda: 500.0)
        service.get_intelligence('ACME', deadline_seconds=30)

        deadlines = {c['deadline'] for client in service.clients.values() for c in client.calls}
        assert deadlines == {530.0}

    def test_empty_symbol_rejected(self, build_service):
        with pytest.raises(ValueError):
            build_service().get_intelligence('  ')


class TestPartialFailure:
    """Provider outages degrade the report, never fail it."""

    def test_one_provider_down(self, build_service):
        down = connection_error()
        service = build_service(finnhub={'quote': down, 'stock/profile2': down, 'stock/metric': down})
        report = service.get_intelligence('ACME')

        assert report.data_quality.score == 80
        assert 'Finnhub' not in report.data_quality.sources
        assert 'Finnhub unavailable (transport): connection error' in report.data_quality.warnings
        assert report.quote.source == 'Alpha Vantage'

    def test_primary_down_uses_fallback_quote(self, build_service):
        throttled = ProviderFailure('ALPHAVANTAGE', FailureKind.RATE_LIMITED, 'HTTP 429', attempts=4)
        report = build_service(av={'GLOBAL_QUOTE': throttled}).get_intelligence('ACME')

        assert report.quote.current_price == 101.5
        assert report.quote.source == 'Finnhub'
        assert 'Primary data source unavailable - quote from Finnhub' in report.data_quality.warnings
        # Overview still answered, so Alpha Vantage keeps contributing fundamentals
        assert report.fundamentals.market_cap == 250_000_000

    def test_sentiment_providers_down(self, build_service):
        down = connection_error()
        report = build_service(
            av={'NEWS_SENTIMENT': connection_error('ALPHAVANTAGE')},
            finnhub={
                'stock/social-sentiment': down,
                'stock/insider-transactions': down,
                'stock/recommendation': down,
            },
        ).get_intelligence('ACME')

        assert report.sentiment.score == 0.0
        assert report.sentiment.overall == 'NEUTRAL'
        assert report.risk.factors.news_volatility == 0.0
        assert report.data_quality.score == 60


class TestNotFound:

    def test_no_quote_anywhere(self, build_service):
        av_down = connection_error('ALPHAVANTAGE')
        fh_down = connection_error()
        service = build_service(
            av={'GLOBAL_QUOTE': av_down, 'OVERVIEW': av_down},
            finnhub={'quote': fh_down, 'stock/profile2': fh_down, 'stock/metric': fh_down},
        )
        result = service.get_intelligence('ACME')

        assert isinstance(result, NotFound)
        assert result.symbol == 'ACME'
        assert result.reason == 'No price data available from primary or fallback sources'
        assert 'Alpha Vantage unavailable (transport): connection error' in result.warnings
        assert 'Finnhub unavailable (transport): connection error' in result.warnings

    def test_unknown_symbol(self, build_service):
        unknown_quote = {'c': 0, 'd': None, 'dp': None, 'h': 0, 'l': 0, 'o': 0, 'pc': 0, 't': 0}
        service = build_service(
            av={'GLOBAL_QUOTE': {'Global Quote': {}}, 'OVERVIEW': {}},
            finnhub={'quote': unknown_quote, 'stock/profile2': {}, 'stock/metric': {'metric': {}}},
        )

        assert isinstance(service.get_intelligence('ZZZZ'), NotFound)


class TestCrypto:

    def test_dispatched_to_crypto_roster(self, build_service):
        service = build_service()
        report = service.get_intelligence('BTC-USD')

        assert report.symbol == 'bitcoin'
        assert report.name == 'Bitcoin'
        assert report.asset_type == 'CRYPTO'
        assert report.quote.current_price == 60000.0
        assert report.quote.average_volume == 25_000_000_000
        assert report.data_quality.score == 40
        assert report.sentiment.sources == {'community': 40.0}
        assert service.clients['ALPHAVANTAGE'].calls == []
        assert service.clients['FINNHUB'].calls == []

    def test_no_crypto_roster(self, build_service):
        result = build_service(with_crypto=False).get_intelligence('ETH')

        assert isinstance(result, NotFound)
        assert result.reason == 'No crypto data providers configured'
