"""
Risk metrics over monthly return vectors.

Every function here is total: empty, mismatched or malformed input yields
a neutral 0.0 and a log record instead of an exception, so a partially
populated portfolio never breaks the caller.
"""

from functools import wraps
from typing import Sequence
import logging
import math

import numpy as np

logger = logging.getLogger(__name__)

Returns = Sequence[float]


def total_metric(default=0.0):
    """Turn malformed-input exceptions of a metric into ``default`` plus an error log."""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except (TypeError, ValueError, FloatingPointError, IndexError) as e:
                logger.error(f"Error calculating {func.__name__}: {e}")
                return default

        return wrapper

    return decorator


def as_array(returns: Returns) -> np.ndarray:
    if returns is None:
        return np.empty(0)
    return np.asarray(returns, dtype=float).ravel()


def _paired(a: Returns, b: Returns):
    """Arrays for two series that must be non-empty and of equal length, else None."""
    x, y = as_array(a), as_array(b)
    if x.size == 0 or y.size == 0 or x.size != y.size:
        if x.size != y.size:
            logger.debug(f"Series length mismatch: {x.size} vs {y.size}")
        return None
    return x, y


def _finite(value: float) -> float:
    return float(value) if math.isfinite(value) else 0.0


@total_metric()
def mean(returns: Returns) -> float:
    r = as_array(returns)
    if r.size == 0:
        return 0.0
    return float(r.mean())


@total_metric()
def volatility(returns: Returns) -> float:
    """Sample standard deviation (divisor n - 1)."""
    r = as_array(returns)
    if r.size < 2:
        return 0.0
    return _finite(np.std(r, ddof=1))


@total_metric()
def variance(returns: Returns) -> float:
    """Sample variance (divisor n - 1)."""
    r = as_array(returns)
    if r.size < 2:
        return 0.0
    return _finite(np.var(r, ddof=1))


@total_metric()
def covariance(returns_a: Returns, returns_b: Returns) -> float:
    """Sample covariance sum((a - mean_a)(b - mean_b)) / (n - 1)."""
    paired = _paired(returns_a, returns_b)
    if paired is None or paired[0].size < 2:
        return 0.0
    a, b = paired
    return _finite(np.sum((a - a.mean()) * (b - b.mean())) / (a.size - 1))


@total_metric()
def correlation(returns_a: Returns, returns_b: Returns) -> float:
    vol_a = volatility(returns_a)
    vol_b = volatility(returns_b)
    if vol_a == 0 or vol_b == 0:
        return 0.0
    return covariance(returns_a, returns_b) / (vol_a * vol_b)


@total_metric()
def max_drawdown(returns: Returns) -> float:
    """
    Largest peak-to-trough decline of the wealth index.

    The wealth index starts at ``1 + r_0``; the drawdown at each step is
    ``(peak - value) / peak`` against the running peak.
    """
    r = as_array(returns)
    if r.size == 0:
        return 0.0
    wealth = np.cumprod(1.0 + r)
    peaks = np.maximum.accumulate(wealth)
    drawdowns = np.divide(peaks - wealth, peaks, out=np.zeros_like(wealth), where=peaks > 0)
    return _finite(max(0.0, float(drawdowns.max())))


@total_metric()
def value_at_risk(returns: Returns, confidence: float = 0.95) -> float:
    """Historical VaR: the negated return at index floor(n * (1 - confidence)) of the sorted series."""
    r = as_array(returns)
    if r.size == 0:
        return 0.0
    if not 0.0 < confidence < 1.0:
        logger.warning(f"VaR confidence must be within (0, 1), got {confidence}")
        return 0.0
    ordered = np.sort(r)
    index = min(int(math.floor(r.size * (1.0 - confidence))), r.size - 1)
    return float(-ordered[index])


@total_metric()
def tracking_error(portfolio_returns: Returns, benchmark_returns: Returns) -> float:
    """Volatility of the period-by-period excess return; 0 unless lengths match."""
    paired = _paired(portfolio_returns, benchmark_returns)
    if paired is None:
        return 0.0
    port, bench = paired
    return volatility(port - bench)
