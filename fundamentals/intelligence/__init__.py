from .intelligence_service import IntelligenceService
from .service_factory import build_intelligence_service, build_clients

__all__ = [
    'IntelligenceService',
    'build_intelligence_service',
    'build_clients',
]
