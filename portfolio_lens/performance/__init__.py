"""
Performance metrics engine: return aggregation and risk-adjusted ratios.
"""

from .returns import (
    cumulative_return, annualized_return, average_return,
    portfolio_returns, benchmark_returns, excess_returns, component_returns
)
from .ratios import alpha, beta, sharpe_ratio, information_ratio, sortino_ratio, treynor_ratio

__all__ = [
    'cumulative_return', 'annualized_return', 'average_return',
    'portfolio_returns', 'benchmark_returns', 'excess_returns', 'component_returns',
    'alpha', 'beta', 'sharpe_ratio', 'information_ratio', 'sortino_ratio', 'treynor_ratio',
]
