"""
CoinGecko Adapters - crypto market data.

API Endpoints:
- coins/{id}: current price, 24h high/low/volume, market cap, community votes
- coins/{id}/market_chart?days=365: daily prices and volumes

Rate Limits (Demo Tier):
- ~30 requests/minute
"""

from typing import Any, List, Optional

from config import constants
from utils.helpers import parse_timestamp
from utils.logger import setup_logger
from utils.unified_schema import CompanyProfile, Fundamentals, ProviderResult, Quote, SentimentFragment
from .base_adapter import ProviderAdapter

logger = setup_logger('coingecko_adapter')


class CoinGeckoMarketAdapter(ProviderAdapter):
    """Quote, market cap and community sentiment for one coin."""

    name = "CoinGecko"

    def _fetch(self, symbol: str, deadline: Optional[float]) -> ProviderResult:
        endpoint = constants.COINGECKO_ENDPOINTS['coin'].format(coin_id=symbol)
        payload = self._call(endpoint, {
            'localization': 'false',
            'tickers': 'false',
            'community_data': 'true',
            'developer_data': 'false',
        }, deadline=deadline)
        if self._is_failure(payload):
            return self._failed(payload)

        market = self._get(payload, 'market_data', {})
        if not isinstance(market, dict):
            market = {}

        quote = self._parse_quote(symbol, market, payload)
        market_cap = self._usd(market.get('market_cap'))
        name = self._text(self._get(payload, 'name'))

        fragments: List[SentimentFragment] = []
        up = self._safe_float(self._get(payload, 'sentiment_votes_up_percentage'))
        down = self._safe_float(self._get(payload, 'sentiment_votes_down_percentage'))
        if up is not None or down is not None:
            up = up or 0.0
            down = down if down is not None else 100.0 - up
            # Vote totals are not published; the percentages are the evidence
            fragments.append(SentimentFragment(
                source='community', provider=self.name, score=up - down, evidence_count=0,
            ))

        warnings = [] if quote is not None else [f"{self.name}: no price returned for {symbol}"]
        return ProviderResult(
            provider=self.name,
            quote=quote,
            fundamentals=Fundamentals(market_cap=market_cap) if market_cap is not None else None,
            fragments=fragments,
            profile=CompanyProfile(name=name, currency='USD') if name else None,
            asset_type='CRYPTO',
            warnings=warnings,
        )

    def _usd(self, value: Any) -> Optional[float]:
        if isinstance(value, dict):
            return self._safe_price(value.get('usd'))
        return None

    def _parse_quote(self, symbol: str, market: dict, payload: Any) -> Optional[Quote]:
        price = self._usd(market.get('current_price'))
        if not price:
            return None

        change = self._safe_float(market.get('price_change_24h'))
        previous_close = price - change if change is not None and price - change >= 0 else None

        return self._build(
            Quote,
            symbol=symbol,
            current_price=price,
            high_price=self._usd(market.get('high_24h')),
            low_price=self._usd(market.get('low_24h')),
            previous_close=previous_close,
            volume=self._usd(market.get('total_volume')),
            timestamp=parse_timestamp(self._get(payload, 'last_updated')),
            source=self.name,
        )


class CoinGeckoHistoryAdapter(ProviderAdapter):
    """52-week range and recent average volume from the daily chart."""

    name = "CoinGecko History"

    DAYS = 365
    AVERAGE_VOLUME_DAYS = 30

    @staticmethod
    def _series(payload: Any, key: str) -> List[float]:
        points = payload.get(key) if isinstance(payload, dict) else None
        if not isinstance(points, list):
            return []
        values = []
        for point in points:
            if isinstance(point, (list, tuple)) and len(point) >= 2:
                values.append(point[1])
        return values

    def _fetch(self, symbol: str, deadline: Optional[float]) -> ProviderResult:
        endpoint = constants.COINGECKO_ENDPOINTS['market_chart'].format(coin_id=symbol)
        payload = self._call(endpoint, {'vs_currency': 'usd', 'days': str(self.DAYS)}, deadline=deadline)
        if self._is_failure(payload):
            return self._failed(payload)

        prices = [p for p in (self._safe_price(v) for v in self._series(payload, 'prices')) if p]
        volumes = [v for v in (self._safe_price(v) for v in self._series(payload, 'total_volumes')) if v is not None]

        recent = volumes[-self.AVERAGE_VOLUME_DAYS:]
        average_volume = sum(recent) / len(recent) if recent else None

        if not prices and average_volume is None:
            return ProviderResult(provider=self.name, warnings=[f"{self.name}: empty chart for {symbol}"])

        return ProviderResult(
            provider=self.name,
            year_high=max(prices) if prices else None,
            year_low=min(prices) if prices else None,
            average_volume=average_volume,
        )
