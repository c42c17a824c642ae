"""
Fundamentals module - derived market metrics and the intelligence service.
Consumes CompositeRecord (from data_acquisition) to produce scores and reports.

基本面模块 - 衍生市场指标与情报服务。
消耗 CompositeRecord（来自数据获取模块）以生成评分和报告。
"""

from .market_scorers import ScoreSynthesizer, RiskAssessor
from .intelligence import IntelligenceService, build_intelligence_service

__all__ = [
    'ScoreSynthesizer',
    'RiskAssessor',
    'IntelligenceService',
    'build_intelligence_service',
]
