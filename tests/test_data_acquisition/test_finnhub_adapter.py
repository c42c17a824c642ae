"""
Tests for the Finnhub adapters.

Tests cover:
- Fallback quote with unit normalization (millions, whole percentages)
- Partial and total failure of the quote/profile/metric calls
- Social, insider and analyst sentiment fragments
"""

import pytest

from data_acquisition.market_data import FinnhubQuoteAdapter, FinnhubSentimentAdapter
from utils.result import FailureKind


@pytest.fixture
def quote_routes(finnhub_quote, finnhub_profile, finnhub_metric):
    return {'quote': finnhub_quote, 'stock/profile2': finnhub_profile, 'stock/metric': finnhub_metric}


@pytest.fixture
def sentiment_routes(finnhub_social, finnhub_insider, finnhub_recommendation):
    return {
        'stock/social-sentiment': finnhub_social,
        'stock/insider-transactions': finnhub_insider,
        'stock/recommendation': finnhub_recommendation,
    }


class TestQuoteAdapter:
    """quote + stock/profile2 + stock/metric."""

    def test_maps_quote(self, stub_client_factory, quote_routes):
        result = FinnhubQuoteAdapter(stub_client_factory('FINNHUB', quote_routes)).fetch('ACME')

        quote = result.quote
        assert quote.current_price == 101.5
        assert quote.previous_close == 100.0
        assert quote.change == 1.5
        assert quote.change_percent == 1.5
        assert quote.timestamp is not None
        assert quote.source == 'Finnhub'

    def test_units_normalized(self, stub_client_factory, quote_routes):
        result = FinnhubQuoteAdapter(stub_client_factory('FINNHUB', quote_routes)).fetch('ACME')

        assert result.average_volume == 1_000_000
        assert result.quote.average_volume == 1_000_000
        assert result.fundamentals.market_cap == pytest.approx(251_300_000)
        assert result.fundamentals.profit_margin == pytest.approx(0.087)
        assert result.fundamentals.dividend_yield == pytest.approx(0.012)
        assert result.fundamentals.pe_ratio == 18.9
        assert result.year_high == 131.0
        assert result.year_low == 79.5
        assert result.asset_type == 'PENNY_STOCK'

    def test_pe_falls_back_to_basic(self, stub_client_factory, quote_routes, finnhub_metric):
        metric = dict(finnhub_metric['metric'])
        del metric['peTTM']
        metric['peBasicExclExtraTTM'] = 17.2
        quote_routes['stock/metric'] = {'metric': metric}

        result = FinnhubQuoteAdapter(stub_client_factory('FINNHUB', quote_routes)).fetch('ACME')

        assert result.fundamentals.pe_ratio == 17.2

    def test_zero_quote_for_unknown_symbol(self, stub_client_factory):
        routes = {'quote': {'c': 0, 'd': None, 'dp': None, 'h': 0, 'l': 0, 'o': 0, 'pc': 0, 't': 0},
                  'stock/profile2': {}, 'stock/metric': {'metric': {}}}
        result = FinnhubQuoteAdapter(stub_client_factory('FINNHUB', routes)).fetch('ZZZZ')

        assert result.quote is None
        assert result.ok
        assert not result.has_data()

    def test_metric_failure_is_warning(self, stub_client_factory, failure, quote_routes):
        quote_routes['stock/metric'] = failure('FINNHUB', FailureKind.HTTP_ERROR, 'HTTP 403')
        result = FinnhubQuoteAdapter(stub_client_factory('FINNHUB', quote_routes)).fetch('ACME')

        assert result.quote.current_price == 101.5
        assert result.average_volume is None
        assert result.warnings == ['Finnhub: metrics unavailable (http_error: HTTP 403)']

    def test_all_failed(self, stub_client_factory, failure):
        down = failure('FINNHUB', FailureKind.TRANSPORT, 'connection error')
        routes = {'quote': down, 'stock/profile2': down, 'stock/metric': down}
        result = FinnhubQuoteAdapter(stub_client_factory('FINNHUB', routes)).fetch('ACME')

        assert result.failure.kind == FailureKind.TRANSPORT
        assert result.provider == 'Finnhub'


class TestSentimentAdapter:
    """Social, insider and analyst fragments."""

    def test_three_fragments(self, stub_client_factory, sentiment_routes):
        result = FinnhubSentimentAdapter(stub_client_factory('FINNHUB', sentiment_routes)).fetch('ACME')

        fragments = {f.source: f for f in result.fragments}
        assert set(fragments) == {'social', 'insider', 'analyst'}

        # latest reddit 0.5 and twitter 0.1
        assert fragments['social'].score == pytest.approx(30.0)
        assert fragments['social'].evidence_count == 100

        # 2 purchases, 1 sale; the option exercise is ignored
        assert fragments['insider'].score == pytest.approx(100 / 3)
        assert fragments['insider'].evidence_count == 3

        # latest period consensus 4.3 on the 1..5 scale
        assert fragments['analyst'].score == pytest.approx(65.0)
        assert fragments['analyst'].evidence_count == 10

    def test_empty_responses_are_neutral(self, stub_client_factory):
        routes = {
            'stock/social-sentiment': {'symbol': 'ACME', 'reddit': [], 'twitter': []},
            'stock/insider-transactions': {'symbol': 'ACME', 'data': []},
            'stock/recommendation': [],
        }
        result = FinnhubSentimentAdapter(stub_client_factory('FINNHUB', routes)).fetch('ACME')

        assert len(result.fragments) == 3
        assert all(f.score == 0.0 and f.evidence_count == 0 for f in result.fragments)

    @pytest.mark.parametrize('route, payload, what', [
        ('stock/social-sentiment', {'symbol': 'ACME'}, 'social sentiment'),
        ('stock/insider-transactions', {'symbol': 'ACME', 'data': 'none'}, 'insider transactions'),
        ('stock/recommendation', {'error': 'unexpected'}, 'analyst recommendations'),
    ])
    def test_malformed_response_contributes_no_fragment(self, stub_client_factory, sentiment_routes,
                                                        route, payload, what):
        sentiment_routes[route] = payload
        result = FinnhubSentimentAdapter(stub_client_factory('FINNHUB', sentiment_routes)).fetch('ACME')

        assert result.ok
        assert len(result.fragments) == 2
        assert result.warnings == [f'Finnhub Sentiment: {what} unavailable (parse: unexpected {what} response shape)']

    def test_all_malformed_is_parse_failure(self, stub_client_factory):
        routes = {
            'stock/social-sentiment': {},
            'stock/insider-transactions': {},
            'stock/recommendation': {},
        }
        result = FinnhubSentimentAdapter(stub_client_factory('FINNHUB', routes)).fetch('ACME')

        assert result.failure.kind == FailureKind.PARSE
        assert result.fragments == []

    def test_insider_window(self, stub_client_factory, sentiment_routes):
        recent_sales = [{'transactionCode': 'S'}] * FinnhubSentimentAdapter.INSIDER_WINDOW
        older_buys = [{'transactionCode': 'P'}] * 5
        sentiment_routes['stock/insider-transactions'] = {'data': recent_sales + older_buys}

        result = FinnhubSentimentAdapter(stub_client_factory('FINNHUB', sentiment_routes)).fetch('ACME')
        insider = next(f for f in result.fragments if f.source == 'insider')

        assert insider.score == -100.0
        assert insider.evidence_count == FinnhubSentimentAdapter.INSIDER_WINDOW

    def test_partial_failure(self, stub_client_factory, failure, sentiment_routes):
        sentiment_routes['stock/social-sentiment'] = failure('FINNHUB', FailureKind.HTTP_ERROR, 'HTTP 403')
        result = FinnhubSentimentAdapter(stub_client_factory('FINNHUB', sentiment_routes)).fetch('ACME')

        assert result.ok
        assert [f.source for f in result.fragments] == ['insider', 'analyst']
        assert 'social sentiment unavailable' in result.warnings[0]

    def test_all_failed(self, stub_client_factory, failure):
        down = failure('FINNHUB', FailureKind.RATE_LIMITED, 'HTTP 429')
        routes = {
            'stock/social-sentiment': down,
            'stock/insider-transactions': down,
            'stock/recommendation': down,
        }
        result = FinnhubSentimentAdapter(stub_client_factory('FINNHUB', routes)).fetch('ACME')

        assert result.failure.kind == FailureKind.RATE_LIMITED
        assert result.fragments == []
        assert len(result.warnings) == 3
