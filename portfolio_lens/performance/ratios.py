"""Risk-adjusted performance ratios against a benchmark."""

from typing import Sequence
import logging
import math

import numpy as np

from ..risk.metrics import (
    _paired, as_array, covariance, mean, total_metric, tracking_error, variance, volatility
)

logger = logging.getLogger(__name__)


@total_metric()
def beta(portfolio: Sequence[float], benchmark: Sequence[float]) -> float:
    """cov(portfolio, benchmark) / var(benchmark); 0 when the benchmark has no variance."""
    paired = _paired(portfolio, benchmark)
    if paired is None:
        return 0.0
    bench_var = variance(paired[1])
    if bench_var == 0:
        return 0.0
    return covariance(*paired) / bench_var


@total_metric()
def alpha(portfolio: Sequence[float], benchmark: Sequence[float], risk_free_rate: float = 0.0) -> float:
    """Jensen's alpha: mean(p) - (rf + beta * (mean(b) - rf))."""
    paired = _paired(portfolio, benchmark)
    if paired is None:
        return 0.0
    port, bench = paired
    return mean(port) - (risk_free_rate + beta(port, bench) * (mean(bench) - risk_free_rate))


@total_metric()
def sharpe_ratio(returns: Sequence[float], risk_free_rate: float = 0.0) -> float:
    r = as_array(returns)
    if r.size == 0:
        return 0.0
    vol = volatility(r)
    if vol == 0:
        return 0.0
    return (mean(r) - risk_free_rate) / vol


@total_metric()
def information_ratio(portfolio: Sequence[float], benchmark: Sequence[float]) -> float:
    """Mean excess return over tracking error; 0 when tracking error is 0."""
    paired = _paired(portfolio, benchmark)
    if paired is None:
        return 0.0
    port, bench = paired
    te = tracking_error(port, bench)
    if te == 0:
        return 0.0
    return mean(port - bench) / te


@total_metric()
def sortino_ratio(returns: Sequence[float], target_return: float = 0.0) -> float:
    """
    Excess mean over downside deviation.

    The downside deviation is taken over the periods below ``target_return``
    only; a series with no such period has an infinite ratio.
    """
    r = as_array(returns)
    if r.size == 0:
        return 0.0
    downside = r[r < target_return]
    if downside.size == 0:
        return math.inf
    downside_deviation = float(np.sqrt(np.mean((downside - target_return) ** 2)))
    if downside_deviation == 0:
        return 0.0
    return (mean(r) - target_return) / downside_deviation


@total_metric()
def treynor_ratio(portfolio: Sequence[float], benchmark: Sequence[float], risk_free_rate: float = 0.0) -> float:
    paired = _paired(portfolio, benchmark)
    if paired is None:
        return 0.0
    b = beta(*paired)
    if b == 0:
        return 0.0
    return (mean(paired[0]) - risk_free_rate) / b
