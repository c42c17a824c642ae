"""
Service Factory - composition root for IntelligenceService.

Builds one RateLimitedClient per provider and hands the same client to
every adapter of that provider, so pacing and quota counting are shared.
"""

from typing import Dict, Optional

import requests

from config import constants
from config.settings import PROVIDER_KEY_ENV, Settings, settings as default_settings
from data_acquisition.market_data import (
    AlphaVantageNewsAdapter, AlphaVantageQuoteAdapter, AlphaVantageTechnicalsAdapter,
    CoinGeckoHistoryAdapter, CoinGeckoMarketAdapter,
    FinnhubQuoteAdapter, FinnhubSentimentAdapter,
    inspect_alphavantage_payload,
)
from fundamentals.intelligence.intelligence_service import IntelligenceService
from utils.http_utils import RateLimitedClient
from utils.logger import setup_logger

logger = setup_logger('service_factory')


def build_clients(settings: Settings, session: Optional[requests.Session] = None) -> Dict[str, RateLimitedClient]:
    """One client per provider, configured from settings and constants."""
    session = session or requests.Session()

    coingecko_headers = {}
    if settings.COINGECKO_API_KEY:
        coingecko_headers['x-cg-demo-api-key'] = settings.COINGECKO_API_KEY

    return {
        'ALPHAVANTAGE': RateLimitedClient(
            provider='ALPHAVANTAGE',
            base_url=settings.ALPHAVANTAGE_BASE_URL,
            min_interval=settings.ALPHAVANTAGE_MIN_INTERVAL,
            timeout=constants.ALPHAVANTAGE_TIMEOUT_SECONDS,
            max_retries=constants.ALPHAVANTAGE_RETRIES,
            retry_delay=constants.ALPHAVANTAGE_RETRY_DELAY,
            daily_quota=constants.ALPHAVANTAGE_DAILY_QUOTA,
            default_params={'apikey': settings.ALPHAVANTAGE_API_KEY},
            payload_inspector=inspect_alphavantage_payload,
            session=session,
        ),
        'FINNHUB': RateLimitedClient(
            provider='FINNHUB',
            base_url=settings.FINNHUB_BASE_URL,
            min_interval=settings.FINNHUB_MIN_INTERVAL,
            timeout=constants.FINNHUB_TIMEOUT_SECONDS,
            max_retries=constants.FINNHUB_RETRIES,
            retry_delay=constants.FINNHUB_RETRY_DELAY,
            daily_quota=constants.FINNHUB_DAILY_QUOTA,
            default_params={'token': settings.FINNHUB_API_KEY},
            session=session,
        ),
        'COINGECKO': RateLimitedClient(
            provider='COINGECKO',
            base_url=settings.COINGECKO_BASE_URL,
            min_interval=settings.COINGECKO_MIN_INTERVAL,
            timeout=constants.COINGECKO_TIMEOUT_SECONDS,
            max_retries=constants.COINGECKO_RETRIES,
            retry_delay=constants.COINGECKO_RETRY_DELAY,
            daily_quota=constants.COINGECKO_DAILY_QUOTA,
            headers=coingecko_headers,
            session=session,
        ),
    }


def build_intelligence_service(
    settings: Optional[Settings] = None,
    session: Optional[requests.Session] = None,
    technicals: Optional[list] = None,
) -> IntelligenceService:
    """
    Wire the production service.

    Args:
        settings: Settings instance (defaults to the global one)
        session: Shared requests.Session (one is created if omitted)
        technicals: Indicator keys to request (defaults to DEFAULT_TECHNICALS)

    Raises:
        ConfigurationError: if a required provider key is missing
    """
    settings = settings or default_settings
    settings.require_keys()

    clients = build_clients(settings, session)
    alphavantage, finnhub, coingecko = clients['ALPHAVANTAGE'], clients['FINNHUB'], clients['COINGECKO']

    # Order is merge priority: primary quote first, its fallback second
    equity_adapters = [
        AlphaVantageQuoteAdapter(alphavantage),
        FinnhubQuoteAdapter(finnhub),
        AlphaVantageTechnicalsAdapter(alphavantage, indicators=technicals),
        AlphaVantageNewsAdapter(alphavantage),
        FinnhubSentimentAdapter(finnhub),
    ]
    crypto_adapters = [
        CoinGeckoMarketAdapter(coingecko),
        CoinGeckoHistoryAdapter(coingecko),
    ]

    key_counts = ", ".join(
        f"{provider} x{settings.manager.key_count(provider)}" for provider in PROVIDER_KEY_ENV
    )
    logger.info(
        f"Intelligence service ready: {len(equity_adapters)} equity / "
        f"{len(crypto_adapters)} crypto providers (keys: {key_counts})"
    )
    return IntelligenceService(
        equity_adapters,
        crypto_adapters,
        default_deadline=settings.INTELLIGENCE_DEADLINE_SECONDS,
    )
