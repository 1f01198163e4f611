"""
Risk metrics over monthly return series and their annualization.

The Euler decomposition lives in ``portfolio_lens.risk.decomposition``.
"""

from .metrics import (
    mean, volatility, variance, covariance, correlation,
    max_drawdown, value_at_risk, tracking_error
)
from .annualizer import RiskAnnualizer, annualized_volatility

__all__ = [
    'mean', 'volatility', 'variance', 'covariance', 'correlation',
    'max_drawdown', 'value_at_risk', 'tracking_error',
    'RiskAnnualizer', 'annualized_volatility',
]
