"""
Return aggregation for portfolio snapshots.

Cumulative and annualized returns of monthly series, the weight-normalized
portfolio return series and benchmark/excess series lookups.
"""

from typing import Dict, List, Sequence, Tuple
import logging

import numpy as np

from ..errors import NoReturnData
from ..portfolio.components import Asset
from ..portfolio.snapshot import PortfolioSnapshot
from ..risk.metrics import as_array, mean, total_metric
from ..core.mappers import RETURN_FREQUENCY, frequency_to_multiplier

logger = logging.getLogger(__name__)


@total_metric()
def cumulative_return(returns: Sequence[float]) -> float:
    """Compounded return: prod(1 + r_i) - 1."""
    r = as_array(returns)
    if r.size == 0:
        return 0.0
    return float(np.prod(1.0 + r) - 1.0)


@total_metric()
def annualized_return(returns: Sequence[float], frequency: str = RETURN_FREQUENCY) -> float:
    """(1 + cumulative) ** (periods_per_year / n) - 1."""
    r = as_array(returns)
    if r.size == 0:
        return 0.0
    growth = 1.0 + cumulative_return(r)
    if growth <= 0:
        logger.warning(f"Cannot annualize a total loss (growth factor {growth:.4f})")
        return 0.0
    years = r.size / frequency_to_multiplier[frequency]
    return float(growth ** (1.0 / years) - 1.0)


def average_return(returns: Sequence[float]) -> float:
    return mean(returns)


def leaf_weights(snapshot: PortfolioSnapshot) -> List[Tuple[Asset, float]]:
    """Every leaf with its absolute weight, in tree order."""
    graph = snapshot.graph
    return [(leaf, graph.absolute_weight(leaf.component_id)) for leaf in graph.get_all_leaves()]


def weighted_returns(weighted_leaves: Sequence[Tuple[Asset, float]]) -> np.ndarray:
    """
    Weight-normalized average return per period.

    Period ``i`` is ``sum(w * r[i]) / sum(w)`` over the leaves that have an
    observation at ``i``; a period with no weight yields 0.

    Raises
    ------
    NoReturnData
        If no leaf carries a non-empty return series.
    """
    periods = max((leaf.periods for leaf, _ in weighted_leaves), default=0)
    if periods == 0:
        raise NoReturnData("No asset returns data available")

    weighted_sum = np.zeros(periods)
    total_weight = np.zeros(periods)
    for leaf, weight in weighted_leaves:
        n = leaf.periods
        if n == 0:
            continue
        weighted_sum[:n] += weight * np.asarray(leaf.returns, dtype=float)
        total_weight[:n] += weight

    return np.divide(weighted_sum, total_weight, out=np.zeros(periods), where=total_weight > 0)


def portfolio_returns(snapshot: PortfolioSnapshot) -> List[float]:
    """Weight-normalized portfolio return series of ``snapshot`` (see ``weighted_returns``)."""
    return weighted_returns(leaf_weights(snapshot)).tolist()


def benchmark_returns(snapshot: PortfolioSnapshot, benchmark_name: str) -> List[float]:
    """Returns of a named benchmark; empty when the snapshot does not carry it."""
    returns = snapshot.benchmark_returns(benchmark_name)
    if not returns:
        logger.debug(f"Benchmark '{benchmark_name}' not available in snapshot")
    return list(returns)


def excess_returns(portfolio: Sequence[float], benchmark: Sequence[float]) -> List[float]:
    """Period-by-period portfolio minus benchmark over their common length."""
    port, bench = as_array(portfolio), as_array(benchmark)
    n = min(port.size, bench.size)
    return (port[:n] - bench[:n]).tolist()


def component_returns(snapshot: PortfolioSnapshot) -> Dict[str, List[float]]:
    """Derived return series of every asset class, keyed by component ID."""
    graph = snapshot.graph
    result = {}
    for node in graph.get_all_nodes():
        series = graph.node_returns(node.component_id)
        result[node.component_id] = series.tolist() if series is not None else []
    return result
