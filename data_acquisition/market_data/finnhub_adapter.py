"""
Finnhub Adapters - fallback quote and social / insider / analyst sentiment.

API Endpoints:
- quote: c (current), o, h, l, pc (previous close), t (epoch seconds)
- stock/profile2: name, industry, exchange; marketCapitalization in MILLIONS
- stock/metric?metric=all: 52-week range, 10-day average volume (MILLIONS),
  margins and growth as whole-number PERCENTAGES
- stock/social-sentiment, stock/insider-transactions, stock/recommendation

Rate Limits (Free Tier):
- 60 requests/minute
"""

from typing import Any, Dict, List, Optional

from config import constants
from utils.helpers import parse_timestamp, safe_int
from utils.logger import setup_logger
from utils.numeric_utils import clean_percent
from utils.result import FailureKind, ProviderFailure
from utils.unified_schema import CompanyProfile, Fundamentals, ProviderResult, Quote, SentimentFragment
from .asset_classifier import hint_from_market_cap
from .base_adapter import ProviderAdapter

logger = setup_logger('finnhub_adapter')

MILLION = 1_000_000


class FinnhubQuoteAdapter(ProviderAdapter):
    """
    Fallback quote provider.

    Also fills gaps the primary leaves open: average volume (Alpha Vantage
    has none), 52-week range and fundamentals.
    """

    name = "Finnhub"

    def _fetch(self, symbol: str, deadline: Optional[float]) -> ProviderResult:
        endpoints = constants.FINNHUB_ENDPOINTS
        quote_payload = self._call(endpoints['quote'], {'symbol': symbol}, deadline=deadline)
        profile_payload = self._call(endpoints['profile'], {'symbol': symbol}, deadline=deadline)
        metric_payload = self._call(endpoints['metric'], {'symbol': symbol, 'metric': 'all'}, deadline=deadline)

        payloads = (quote_payload, profile_payload, metric_payload)
        if all(self._is_failure(p) for p in payloads):
            return self._failed(quote_payload)

        warnings: List[str] = []
        for what, payload in zip(('quote', 'company profile', 'metrics'), payloads):
            if self._is_failure(payload):
                warnings.append(self._partial_warning(what, payload))

        profile_raw = {} if self._is_failure(profile_payload) else profile_payload
        metric_raw = {} if self._is_failure(metric_payload) else self._get(metric_payload, 'metric', {})
        if not isinstance(metric_raw, dict):
            metric_raw = {}

        average_volume = self._millions(metric_raw.get('10DayAverageTradingVolume'))

        quote = None
        if not self._is_failure(quote_payload):
            quote = self._parse_quote(symbol, quote_payload, average_volume)
            if quote is None:
                warnings.append(f"{self.name}: no quote returned for {symbol}")

        fundamentals = self._parse_fundamentals(profile_raw, metric_raw)
        profile = self._parse_profile(profile_raw)

        return ProviderResult(
            provider=self.name,
            quote=quote,
            fundamentals=fundamentals,
            profile=profile,
            year_high=self._safe_price(metric_raw.get('52WeekHigh')),
            year_low=self._safe_price(metric_raw.get('52WeekLow')),
            average_volume=average_volume,
            asset_type=hint_from_market_cap(fundamentals.market_cap) if fundamentals else None,
            warnings=warnings,
        )

    def _millions(self, value: Any) -> Optional[float]:
        cleaned = self._safe_price(value)
        return None if cleaned is None else cleaned * MILLION

    def _parse_quote(self, symbol: str, raw: Any, average_volume: Optional[float]) -> Optional[Quote]:
        if not isinstance(raw, dict):
            return None
        # Unknown symbols come back as all zeros
        price = self._safe_price(raw.get('c'))
        if not price:
            return None

        return self._build(
            Quote,
            symbol=symbol,
            current_price=price,
            open_price=self._safe_price(raw.get('o')) or None,
            high_price=self._safe_price(raw.get('h')) or None,
            low_price=self._safe_price(raw.get('l')) or None,
            previous_close=self._safe_price(raw.get('pc')) or None,
            average_volume=average_volume,
            timestamp=parse_timestamp(raw.get('t')),
            source=self.name,
        )

    def _parse_fundamentals(self, profile: Dict[str, Any], metric: Dict[str, Any]) -> Optional[Fundamentals]:
        market_cap = self._millions(profile.get('marketCapitalization'))
        if market_cap is None:
            market_cap = self._millions(metric.get('marketCapitalization'))

        pe = self._safe_float(metric.get('peTTM'))
        if pe is None:
            pe = self._safe_float(metric.get('peBasicExclExtraTTM'))

        values = {
            'market_cap': market_cap,
            'pe_ratio': pe,
            'eps': self._safe_float(metric.get('epsTTM')),
            'dividend_yield': clean_percent(metric.get('currentDividendYieldTTM')),
            'beta': self._safe_float(metric.get('beta')),
            'profit_margin': clean_percent(metric.get('netProfitMarginTTM')),
            'operating_margin': clean_percent(metric.get('operatingMarginTTM')),
            'revenue_growth': clean_percent(metric.get('revenueGrowthTTMYoy')),
            'earnings_growth': clean_percent(metric.get('epsGrowthTTMYoy')),
        }
        if self._all_none(**values):
            return None
        return Fundamentals(**values)

    def _parse_profile(self, profile: Dict[str, Any]) -> Optional[CompanyProfile]:
        values = {
            'name': self._text(profile.get('name')),
            'industry': self._text(profile.get('finnhubIndustry')),
            'exchange': self._text(profile.get('exchange')),
            'currency': self._text(profile.get('currency')),
        }
        if self._all_none(**values):
            return None
        return CompanyProfile(**values)


class FinnhubSentimentAdapter(ProviderAdapter):
    """
    Social, insider and analyst sentiment as three fragments.

    Each endpoint is independent: a failed or malformed one is a warning
    and contributes no fragment, while an empty but well-formed response
    yields a neutral fragment with zero evidence.
    """

    name = "Finnhub Sentiment"

    # Most recent insider filings considered
    INSIDER_WINDOW = 20

    def _fetch(self, symbol: str, deadline: Optional[float]) -> ProviderResult:
        endpoints = constants.FINNHUB_ENDPOINTS
        calls = (
            ('social sentiment', endpoints['social_sentiment'], self._social_fragment),
            ('insider transactions', endpoints['insider_transactions'], self._insider_fragment),
            ('analyst recommendations', endpoints['recommendation'], self._analyst_fragment),
        )

        fragments: List[SentimentFragment] = []
        failures = []
        warnings: List[str] = []
        for what, endpoint, mapper in calls:
            payload = self._call(endpoint, {'symbol': symbol}, deadline=deadline)
            if self._is_failure(payload):
                failures.append(payload)
                warnings.append(self._partial_warning(what, payload))
                continue
            fragment = mapper(payload)
            if fragment is None:
                malformed = ProviderFailure(
                    self.client.provider, FailureKind.PARSE, f"unexpected {what} response shape")
                failures.append(malformed)
                warnings.append(self._partial_warning(what, malformed))
                continue
            fragments.append(fragment)

        if not fragments:
            return self._failed(failures[0], warnings)

        return ProviderResult(provider=self.name, fragments=fragments, warnings=warnings)

    @staticmethod
    def _latest(entries: Any) -> Optional[Dict[str, Any]]:
        if not isinstance(entries, list) or not entries:
            return None
        last = entries[-1]
        return last if isinstance(last, dict) else None

    def _social_fragment(self, payload: Any) -> Optional[SentimentFragment]:
        """Mean of the latest Reddit/Twitter scores (-1..1), scaled to -100..100."""
        if not any(isinstance(self._get(payload, platform), list) for platform in ('reddit', 'twitter')):
            return None
        scores: List[float] = []
        mentions = 0
        for platform in ('reddit', 'twitter'):
            latest = self._latest(self._get(payload, platform))
            if latest is None:
                continue
            score = self._safe_float(latest.get('score'))
            if score is not None:
                scores.append(score)
            mentions += max(safe_int(latest.get('mention')), 0)

        mean = sum(scores) / len(scores) if scores else 0.0
        return SentimentFragment(source='social', provider=self.name, score=mean * 100, evidence_count=mentions)

    def _insider_fragment(self, payload: Any) -> Optional[SentimentFragment]:
        """Purchase vs sale balance over recent filings: (P - S) / (P + S)."""
        data = self._get(payload, 'data')
        if not isinstance(data, list):
            return None
        transactions = [t for t in data if isinstance(t, dict)]
        recent = transactions[:self.INSIDER_WINDOW]

        buys = sum(1 for t in recent if self._transaction_code(t) == 'P')
        sells = sum(1 for t in recent if self._transaction_code(t) == 'S')
        score = (buys - sells) / max(buys + sells, 1) * 100
        return SentimentFragment(source='insider', provider=self.name, score=score, evidence_count=buys + sells)

    @staticmethod
    def _transaction_code(transaction: Dict[str, Any]) -> str:
        code = transaction.get('transactionCode') or transaction.get('transactionType') or ''
        return str(code).strip().upper()

    def _analyst_fragment(self, payload: Any) -> Optional[SentimentFragment]:
        """
        Weighted consensus of the latest period on a 1 (strong sell) to
        5 (strong buy) scale, recentred so 3 (hold) maps to 0.
        """
        if not isinstance(payload, list):
            return None
        periods = [p for p in payload if isinstance(p, dict)]
        if not periods:
            return SentimentFragment(source='analyst', provider=self.name, score=0.0, evidence_count=0)

        latest = max(periods, key=lambda p: str(p.get('period', '')))
        weights = {'strongBuy': 5, 'buy': 4, 'hold': 3, 'sell': 2, 'strongSell': 1}
        counts = {key: max(safe_int(latest.get(key)), 0) for key in weights}
        total = sum(counts.values())
        if total == 0:
            return SentimentFragment(source='analyst', provider=self.name, score=0.0, evidence_count=0)

        consensus = sum(weights[key] * counts[key] for key in weights) / total
        return SentimentFragment(
            source='analyst',
            provider=self.name,
            score=(consensus - 3) / 2 * 100,
            evidence_count=total,
        )
