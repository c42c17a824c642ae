"""
Data Acquisition Module / 数据获取模块

该模块负责从外部行情API（Alpha Vantage, Finnhub, CoinGecko）获取数据，并将其标准化为统一格式。
This module fetches market data from external providers (Alpha Vantage, Finnhub, CoinGecko) and normalizes it into a unified format.

主要入口点 / Main Entry Point:
    - MarketDataAggregator: 并行获取并按优先级合并 / Parallel fan-out with priority merge

主要数据模型 / Main Data Models:
    - CompositeRecord: 合并后的行情记录 / Merged provider-agnostic record
    - ProviderResult: 单个数据源的部分记录 / One provider's partial record
"""

from .market_data import MarketDataAggregator
from utils.unified_schema import CompositeRecord, ProviderResult

__all__ = [
    'MarketDataAggregator',
    'CompositeRecord',
    'ProviderResult',
]
