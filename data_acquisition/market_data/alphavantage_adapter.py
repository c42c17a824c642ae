"""
Alpha Vantage Adapters - primary quote, fundamentals, technicals and news.

API Functions:
- GLOBAL_QUOTE: Latest quote (15-min delayed on free tier)
- OVERVIEW: Company profile, fundamentals, 52-week range
- RSI / MACD / SMA / EMA / BBANDS / STOCH / ADX / OBV / VWAP / ATR
- NEWS_SENTIMENT: Articles with per-ticker sentiment scores (-1..1)

Rate Limits (Free Tier):
- 5 requests/minute, 500/day
- Throttled requests still return HTTP 200 with a 'Note' or
  'Information' body instead of data
"""

from typing import Any, Dict, List, Optional, Tuple

from config import constants
from config.analysis_config import SENTIMENT_THRESHOLDS
from utils.helpers import parse_timestamp
from utils.logger import setup_logger
from utils.result import FailureKind, ProviderFailure
from utils.unified_schema import (
    BollingerBands, CompanyProfile, Fundamentals, Headline, MACD,
    ProviderResult, Quote, SentimentFragment, Stochastic, TechnicalIndicators,
)
from .asset_classifier import hint_from_market_cap
from .base_adapter import ProviderAdapter

logger = setup_logger('alphavantage_adapter')


# Information bodies that are the per-second / per-minute throttle; anything
# else under Information (daily cap, premium endpoint, invalid input) is final
THROTTLE_MARKERS = ('call frequency', 'spreading out', 'per second', 'per minute')


def inspect_alphavantage_payload(payload: Any) -> Optional[Tuple[FailureKind, str]]:
    """
    Detect Alpha Vantage error bodies delivered with HTTP 200.

    'Note' is always the soft throttle. 'Information' is the throttle only
    when it talks about call frequency; the daily cap, premium-only
    endpoints and invalid inputs are not worth retrying.

    Returns:
        (kind, message) for throttle/error bodies, None for data
    """
    if not isinstance(payload, dict):
        return None
    if 'Error Message' in payload:
        return FailureKind.PROVIDER_ERROR, str(payload['Error Message'])
    if 'Note' in payload and len(payload) == 1:
        return FailureKind.RATE_LIMITED, str(payload['Note'])
    if 'Information' in payload and len(payload) == 1:
        message = str(payload['Information'])
        if any(marker in message.lower() for marker in THROTTLE_MARKERS):
            return FailureKind.RATE_LIMITED, message
        return FailureKind.PROVIDER_ERROR, message
    return None


class AlphaVantageQuoteAdapter(ProviderAdapter):
    """
    Primary quote provider: GLOBAL_QUOTE plus OVERVIEW.

    OVERVIEW failing only costs fundamentals; GLOBAL_QUOTE failing leaves the
    quote to the fallback provider while fundamentals are still contributed.
    """

    name = "Alpha Vantage"

    def _fetch(self, symbol: str, deadline: Optional[float]) -> ProviderResult:
        quote_payload = self._call(params={
            'function': constants.ALPHAVANTAGE_FUNCTIONS['quote'],
            'symbol': symbol,
        }, deadline=deadline)
        overview_payload = self._call(params={
            'function': constants.ALPHAVANTAGE_FUNCTIONS['overview'],
            'symbol': symbol,
        }, deadline=deadline)

        quote_failed = self._is_failure(quote_payload)
        overview_failed = self._is_failure(overview_payload)
        if quote_failed and overview_failed:
            return self._failed(quote_payload)

        warnings: List[str] = []
        quote = None
        if quote_failed:
            warnings.append(self._partial_warning('quote', quote_payload))
        else:
            quote = self._parse_quote(symbol, self._get(quote_payload, 'Global Quote'))
            if quote is None:
                warnings.append(f"{self.name}: no quote returned for {symbol}")

        overview: Dict[str, Any] = {}
        if overview_failed:
            warnings.append(self._partial_warning('company overview', overview_payload))
        elif self._get(overview_payload, 'Symbol'):
            overview = overview_payload

        fundamentals = self._parse_fundamentals(overview) if overview else None
        profile = self._parse_profile(overview) if overview else None
        average_volume = self._safe_price(overview.get('AverageVolume')) if overview else None

        asset_type = None
        if overview:
            if str(overview.get('AssetType', '')).upper() == 'ETF':
                asset_type = 'ETF'
            elif fundamentals is not None:
                asset_type = hint_from_market_cap(fundamentals.market_cap)

        if quote is not None and average_volume is not None:
            quote = quote.model_copy(update={'average_volume': average_volume})

        return ProviderResult(
            provider=self.name,
            quote=quote,
            fundamentals=fundamentals,
            profile=profile,
            year_high=self._safe_price(overview.get('52WeekHigh')) if overview else None,
            year_low=self._safe_price(overview.get('52WeekLow')) if overview else None,
            average_volume=average_volume,
            asset_type=asset_type,
            warnings=warnings,
        )

    def _parse_quote(self, symbol: str, raw: Any) -> Optional[Quote]:
        if not isinstance(raw, dict) or not raw:
            return None

        price = self._safe_price(raw.get('05. price'))
        if not price:
            return None

        return self._build(
            Quote,
            symbol=symbol,
            current_price=price,
            open_price=self._safe_price(raw.get('02. open')),
            high_price=self._safe_price(raw.get('03. high')),
            low_price=self._safe_price(raw.get('04. low')),
            previous_close=self._safe_price(raw.get('08. previous close')),
            volume=self._safe_price(raw.get('06. volume')),
            timestamp=parse_timestamp(raw.get('07. latest trading day')),
            source=self.name,
        )

    def _parse_fundamentals(self, overview: Dict[str, Any]) -> Optional[Fundamentals]:
        # OVERVIEW already reports ratios as decimal fractions
        values = {
            'market_cap': self._safe_price(overview.get('MarketCapitalization')),
            'pe_ratio': self._safe_float(overview.get('PERatio')),
            'forward_pe': self._safe_float(overview.get('ForwardPE')),
            'eps': self._safe_float(overview.get('EPS')),
            'dividend_yield': self._safe_float(overview.get('DividendYield')),
            'beta': self._safe_float(overview.get('Beta')),
            'profit_margin': self._safe_float(overview.get('ProfitMargin')),
            'operating_margin': self._safe_float(overview.get('OperatingMarginTTM')),
            'revenue_growth': self._safe_float(overview.get('QuarterlyRevenueGrowthYOY')),
            'earnings_growth': self._safe_float(overview.get('QuarterlyEarningsGrowthYOY')),
        }
        if self._all_none(**values):
            return None
        return Fundamentals(**values)

    def _parse_profile(self, overview: Dict[str, Any]) -> Optional[CompanyProfile]:
        values = {
            'name': self._text(overview.get('Name')),
            'sector': self._text(overview.get('Sector')),
            'industry': self._text(overview.get('Industry')),
            'exchange': self._text(overview.get('Exchange')),
            'currency': self._text(overview.get('Currency')),
        }
        if self._all_none(**values):
            return None
        return CompanyProfile(**values)


# Indicator key -> AV function; single-value series use it as the field name too
_SERIES_FUNCTIONS = {
    'rsi': 'RSI', 'macd': 'MACD', 'sma20': 'SMA', 'sma50': 'SMA', 'sma200': 'SMA',
    'ema12': 'EMA', 'ema26': 'EMA', 'bollinger': 'BBANDS', 'stochastic': 'STOCH',
    'adx': 'ADX', 'obv': 'OBV', 'vwap': 'VWAP', 'atr': 'ATR',
}


class AlphaVantageTechnicalsAdapter(ProviderAdapter):
    """One request per indicator; the latest data point of each series wins."""

    name = "Alpha Vantage Technicals"

    def __init__(self, client, indicators: Optional[List[str]] = None, timeout: Optional[float] = None):
        super().__init__(client, timeout)
        self.indicators = list(indicators or constants.DEFAULT_TECHNICALS)
        unknown = [key for key in self.indicators if key not in constants.ALPHAVANTAGE_TECHNICALS]
        if unknown:
            raise ValueError(f"Unknown technical indicator(s): {', '.join(unknown)}")

    @staticmethod
    def _latest_point(payload: Any, function: str) -> Optional[Dict[str, Any]]:
        series = payload.get(f"Technical Analysis: {function}") if isinstance(payload, dict) else None
        if not isinstance(series, dict) or not series:
            return None
        # Keys are ISO dates ('2025-01-02' or '2025-01-02 15:00'); max is newest
        point = series[max(series)]
        return point if isinstance(point, dict) else None

    def _parse_indicator(self, key: str, point: Dict[str, Any]) -> Dict[str, Any]:
        if key == 'macd':
            macd = self._build(
                MACD,
                value=self._safe_float(point.get('MACD')),
                signal=self._safe_float(point.get('MACD_Signal')),
                histogram=self._safe_float(point.get('MACD_Hist')),
            )
            return {'macd': macd}
        if key == 'bollinger':
            bands = self._build(
                BollingerBands,
                upper=self._safe_float(point.get('Real Upper Band')),
                middle=self._safe_float(point.get('Real Middle Band')),
                lower=self._safe_float(point.get('Real Lower Band')),
            )
            return {'bollinger': bands}
        if key == 'stochastic':
            stoch = self._build(
                Stochastic,
                k=self._safe_float(point.get('SlowK')),
                d=self._safe_float(point.get('SlowD')),
            )
            return {'stochastic': stoch}

        value = self._safe_float(point.get(_SERIES_FUNCTIONS[key]))
        if key == 'rsi' and value is not None and not 0 <= value <= 100:
            value = None
        return {key: value}

    def _fetch(self, symbol: str, deadline: Optional[float]) -> ProviderResult:
        values: Dict[str, Any] = {}
        failures: List[Tuple[str, ProviderFailure]] = []
        skipped: List[str] = []

        for index, key in enumerate(self.indicators):
            params = {**constants.ALPHAVANTAGE_TECHNICALS[key], 'symbol': symbol}
            payload = self._call(params=params, deadline=deadline)
            if self._is_failure(payload):
                failures.append((key, payload))
                if payload.kind == FailureKind.TIMEOUT:
                    # Deadline reached; the remaining requests would fail the same way
                    skipped = self.indicators[index + 1:]
                    break
                continue

            point = self._latest_point(payload, _SERIES_FUNCTIONS[key])
            if point is None:
                logger.debug(f"{self.name}: no {key} series for {symbol}")
                continue
            values.update(self._parse_indicator(key, point))

        values = {k: v for k, v in values.items() if v is not None}
        if not values and failures:
            return self._failed(failures[0][1])

        warnings = [self._partial_warning(key.upper(), failure) for key, failure in failures]
        if skipped:
            warnings.append(f"{self.name}: skipped {', '.join(k.upper() for k in skipped)} (deadline)")

        return ProviderResult(
            provider=self.name,
            technicals=TechnicalIndicators(**values) if values else None,
            warnings=warnings,
        )


class AlphaVantageNewsAdapter(ProviderAdapter):
    """
    NEWS_SENTIMENT -> one 'news' fragment plus headlines.

    Fragment score is the mean per-ticker sentiment over all returned
    articles scaled to -100..100; an article without an entry for the
    ticker counts as neutral (0).
    """

    name = "Alpha Vantage News"

    def __init__(self, client, limit: int = constants.NEWS_ARTICLE_LIMIT, timeout: Optional[float] = None):
        super().__init__(client, timeout)
        self.limit = limit

    @staticmethod
    def _label(score: float) -> str:
        if score > SENTIMENT_THRESHOLDS['POSITIVE_ARTICLE']:
            return 'positive'
        if score < SENTIMENT_THRESHOLDS['NEGATIVE_ARTICLE']:
            return 'negative'
        return 'neutral'

    def _ticker_score(self, article: Dict[str, Any], symbol: str) -> float:
        for entry in article.get('ticker_sentiment') or []:
            if isinstance(entry, dict) and str(entry.get('ticker', '')).upper() == symbol:
                score = self._safe_float(entry.get('ticker_sentiment_score'))
                return score if score is not None else 0.0
        return 0.0

    def _fetch(self, symbol: str, deadline: Optional[float]) -> ProviderResult:
        payload = self._call(params={
            'function': constants.ALPHAVANTAGE_FUNCTIONS['news_sentiment'],
            'tickers': symbol,
            'limit': str(self.limit),
        }, deadline=deadline)
        if self._is_failure(payload):
            return self._failed(payload)

        feed = self._get(payload, 'feed')
        if not isinstance(feed, list):
            return self._failed(ProviderFailure(
                self.client.provider, FailureKind.PARSE, "NEWS_SENTIMENT response has no 'feed' list"))
        articles = [a for a in feed if isinstance(a, dict)]
        articles = articles[:self.limit]

        scores: List[float] = []
        headlines: List[Headline] = []
        for article in articles:
            score = self._ticker_score(article, symbol)
            scores.append(score)
            title = self._text(article.get('title'))
            if title:
                headlines.append(Headline(
                    title=title,
                    sentiment=self._label(score),
                    source=self._text(article.get('source')),
                    url=self._text(article.get('url')),
                    published_at=parse_timestamp(article.get('time_published')),
                ))

        mean = sum(scores) / len(scores) if scores else 0.0
        fragment = SentimentFragment(
            source='news',
            provider=self.name,
            score=mean * 100,
            evidence_count=len(articles),
        )

        return ProviderResult(
            provider=self.name,
            fragments=[fragment],
            headlines=headlines,
            news_count=len(articles),
        )
