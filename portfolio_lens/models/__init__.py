"""
Data models for portfolio risk analysis system.
Provides dataclasses for structured return types.
"""

from .data_models import (
    ComponentSummary,
    RiskContribution,
    CalculationStep,
    RiskDecomposition,
    RiskAnalysisResult,
    PerformanceSummary,
    RiskRequest,
    RiskResponse,
)

__all__ = [
    'ComponentSummary',
    'RiskContribution',
    'CalculationStep',
    'RiskDecomposition',
    'RiskAnalysisResult',
    'PerformanceSummary',
    'RiskRequest',
    'RiskResponse',
]
