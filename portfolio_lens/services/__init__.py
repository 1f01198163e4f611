"""
Service layer for the portfolio analytics system.
Provides configuration, metric orchestration and the analysis facade.
"""

from .configuration_service import ConfigurationService
from .risk_service import calculate_risk_metrics, handle_risk_request
from .performance_service import calculate_performance_metrics
from .risk_analysis_service import RiskAnalysisService

__all__ = [
    'ConfigurationService',
    'calculate_risk_metrics',
    'handle_risk_request',
    'calculate_performance_metrics',
    'RiskAnalysisService',
]
