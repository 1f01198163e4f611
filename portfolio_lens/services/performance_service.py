"""
Performance summary of a snapshot against a benchmark.
"""

import logging

from ..models.data_models import PerformanceSummary
from ..performance.ratios import alpha, beta, information_ratio, sharpe_ratio
from ..performance.returns import (
    annualized_return, benchmark_returns, cumulative_return, portfolio_returns
)
from ..portfolio.snapshot import PortfolioSnapshot

logger = logging.getLogger(__name__)


def calculate_performance_metrics(snapshot: PortfolioSnapshot, benchmark_name: str = "Market",
                                  risk_free_rate: float = 0.001) -> PerformanceSummary:
    """
    Absolute, annualized, benchmark and excess return plus risk-adjusted ratios.

    Raises:
        NoReturnData: If no leaf in the snapshot carries returns
    """
    port = portfolio_returns(snapshot)
    bench = benchmark_returns(snapshot, benchmark_name)

    absolute = cumulative_return(port)
    benchmark_total = cumulative_return(bench)

    summary = PerformanceSummary(
        absolute_return=absolute,
        annualized_return=annualized_return(port),
        benchmark_return=benchmark_total,
        excess_return=absolute - benchmark_total,
        sharpe_ratio=sharpe_ratio(port, risk_free_rate),
        information_ratio=information_ratio(port, bench),
        alpha=alpha(port, bench, risk_free_rate),
        beta=beta(port, bench),
        benchmark_name=benchmark_name,
        periods=len(port),
    )
    logger.debug(f"Performance over {len(port)} periods vs {benchmark_name}: {absolute:.4%}")
    return summary
