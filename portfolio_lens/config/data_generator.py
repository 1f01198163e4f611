"""
Synthetic Portfolio Data Generator

Generates correlated monthly asset-class returns from capital market
assumptions, spreads them over named instruments with idiosyncratic noise
and assembles the fixed Whole of Portfolio hierarchy around them.
"""

from datetime import date
from typing import Any, Dict, Mapping, Optional, Union
import logging
import uuid

import numpy as np

from ..core.mappers import BENCHMARKS
from ..errors import NumericalError
from ..portfolio.allocation import (
    WHOLE_PORTFOLIO, PUBLIC, PRIVATE, EQUITIES, FIXED_INCOME,
    AUD_EQUITIES, FX_EQUITIES, SOVEREIGN_FI, NON_SOVEREIGN_FI,
    REAL_ESTATE, INFRASTRUCTURE, PRIVATE_EQUITY, category_allocations
)
from ..portfolio.components import Asset, AssetClass
from ..portfolio.snapshot import AllocationSettings, BenchmarkSeries, PortfolioSnapshot, Timeframe
from .market_assumptions import MarketAssumptions, load_market_assumptions

logger = logging.getLogger(__name__)

ROOT_ID = "whole-portfolio"
ROOT_NAME = "Whole of Portfolio"

# (category, id, name, children) of the asset-class levels above the
# instrument-bearing classes
HIERARCHY = (
    (PUBLIC, "public-assets", "Public (Listed) Assets", (
        (EQUITIES, "equities", "Equities", (AUD_EQUITIES, FX_EQUITIES)),
        (FIXED_INCOME, "fixed-income", "Fixed Income", (SOVEREIGN_FI, NON_SOVEREIGN_FI)),
    )),
    (PRIVATE, "private-assets", "Private (Unlisted) Assets", (
        REAL_ESTATE, INFRASTRUCTURE, PRIVATE_EQUITY,
    )),
)

# Relative tolerance for negative Cholesky pivots caused by rounding
PIVOT_TOLERANCE = 1e-12


def build_covariance(correlation: np.ndarray, volatilities: np.ndarray) -> np.ndarray:
    """Covariance matrix ``rho[i][j] * sigma_i * sigma_j``."""
    vols = np.asarray(volatilities, dtype=float)
    return np.asarray(correlation, dtype=float) * np.outer(vols, vols)


def cholesky_decomposition(matrix: np.ndarray) -> np.ndarray:
    """
    Lower-triangular ``L`` with ``L @ L.T == matrix``.

    Parameters
    ----------
    matrix : numpy.ndarray
        Symmetric positive semi-definite matrix

    Returns
    -------
    numpy.ndarray
        Lower-triangular factor

    Raises
    ------
    NumericalError
        If the matrix is not square or not positive semi-definite
    """
    a = np.asarray(matrix, dtype=float)
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise NumericalError(f"Cholesky decomposition needs a square matrix, got shape {a.shape}")
    if not np.all(np.isfinite(a)):
        raise NumericalError("Cholesky decomposition needs a finite matrix")

    try:
        return np.linalg.cholesky(a)
    except np.linalg.LinAlgError:
        logger.debug("Matrix is not positive definite, retrying with the semi-definite factorisation")
    return _semidefinite_cholesky(a)


def _semidefinite_cholesky(a: np.ndarray) -> np.ndarray:
    # Row-by-row factorisation; zero pivots give zero columns
    n = a.shape[0]
    scale = max(1.0, float(np.max(np.abs(np.diag(a))))) if n else 1.0
    lower = np.zeros_like(a)

    for i in range(n):
        for j in range(i + 1):
            s = float(np.dot(lower[i, :j], lower[j, :j]))
            if i == j:
                pivot = a[i, i] - s
                if pivot < -PIVOT_TOLERANCE * scale or not np.isfinite(pivot):
                    raise NumericalError(
                        f"Matrix is not positive semi-definite (pivot {pivot:.3e} at row {i})"
                    )
                lower[i, j] = np.sqrt(max(pivot, 0.0))
            elif lower[j, j] > 0:
                lower[i, j] = (a[i, j] - s) / lower[j, j]
            else:
                lower[i, j] = 0.0

    return lower


class PortfolioDataGenerator:
    """Generate synthetic portfolio and benchmark returns data."""

    def __init__(self, assumptions: Optional[MarketAssumptions] = None,
                 seed: Optional[int] = None, rng: Optional[np.random.Generator] = None):
        """
        Initialize the data generator.

        Parameters
        ----------
        assumptions : MarketAssumptions, optional
            Market assumptions; the packaged defaults when omitted
        seed : int, optional
            Random seed for reproducible results
        rng : numpy.random.Generator, optional
            Generator to draw from; takes precedence over ``seed``
        """
        self.assumptions = assumptions or load_market_assumptions()
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def generate_correlated_returns(self, months: int, scenario: str = "normal",
                                    volatility_level: str = "medium") -> np.ndarray:
        """
        Asset-class returns of shape ``(months, n_classes)``.

        Each month draws ``z ~ N(0, I)`` and returns ``means + L @ z``.
        """
        means, vols = self.assumptions.adjusted_params(scenario, volatility_level)
        lower = cholesky_decomposition(build_covariance(self.assumptions.correlation, vols))
        z = self.rng.standard_normal((months, len(means)))
        return means + z @ lower.T

    def generate_asset_returns(self, months: int, scenario: str = "normal",
                               volatility_level: str = "medium") -> Dict[str, np.ndarray]:
        """Instrument return series keyed by instrument ID."""
        class_returns = self.generate_correlated_returns(months, scenario, volatility_level)
        _, vols = self.assumptions.adjusted_params(scenario, volatility_level)

        asset_returns = {}
        for k, class_key in enumerate(self.assumptions.class_keys):
            for instrument in self.assumptions.instruments.get(class_key, []):
                noise = self.rng.normal(0.0, vols[k] * instrument.idiosyncratic_factor, months)
                asset_returns[instrument.instrument_id] = class_returns[:, k] + noise
        return asset_returns

    def generate_benchmark_returns(self, months: int, scenario: str = "normal",
                                   volatility_level: str = "medium") -> Dict[str, BenchmarkSeries]:
        """Independent normal draws for every configured benchmark."""
        benchmarks = {}
        for name, params in self.assumptions.adjusted_benchmarks(scenario, volatility_level).items():
            returns = self.rng.normal(params.mean_return, params.volatility, months)
            benchmarks[name] = BenchmarkSeries(name, tuple(returns))
        return benchmarks

    def build_tree(self, asset_returns: Mapping[str, np.ndarray],
                   allocations: AllocationSettings) -> AssetClass:
        """Assemble the portfolio hierarchy around generated instrument returns."""
        targets = category_allocations(allocations)

        def instrument_class(class_key: str, parent_id: str) -> AssetClass:
            node_id = class_key.replace('_', '-')
            params = self.assumptions.asset_classes[class_key]
            leaves = tuple(
                Asset(
                    component_id=spec.instrument_id,
                    name=spec.name,
                    allocation=spec.allocation,
                    parent_id=node_id,
                    category=class_key,
                    returns=tuple(asset_returns.get(spec.instrument_id, ())),
                )
                for spec in self.assumptions.instruments.get(class_key, [])
            )
            return AssetClass(
                component_id=node_id,
                name=params.name or class_key,
                allocation=targets[class_key],
                parent_id=parent_id,
                category=class_key,
                children=leaves,
            )

        def asset_class(entry, parent_id: str) -> AssetClass:
            if isinstance(entry, str):
                return instrument_class(entry, parent_id)
            category, node_id, name, children = entry
            return AssetClass(
                component_id=node_id,
                name=name,
                allocation=targets[category],
                parent_id=parent_id,
                category=category,
                children=tuple(asset_class(child, node_id) for child in children),
            )

        return AssetClass(
            component_id=ROOT_ID,
            name=ROOT_NAME,
            allocation=100.0,
            category=WHOLE_PORTFOLIO,
            children=tuple(asset_class(entry, ROOT_ID) for entry in HIERARCHY),
        )

    def generate(self, months: int = 60, scenario: str = "normal", volatility_level: str = "medium",
                 allocations: Optional[AllocationSettings] = None,
                 end_date: Optional[date] = None) -> PortfolioSnapshot:
        """
        Generate a complete portfolio snapshot.

        Raises
        ------
        ValueError
            If ``months`` is not positive or the scenario / level is unknown
        NumericalError
            If the adjusted covariance matrix is not positive semi-definite
        """
        if isinstance(months, bool) or not isinstance(months, (int, np.integer)) or months <= 0:
            raise ValueError(f"months must be a positive integer, got {months!r}")

        allocations = allocations or AllocationSettings()
        end_date = end_date or date.today()
        for issue in allocations.validate():
            logger.warning(issue)

        asset_returns = self.generate_asset_returns(months, scenario, volatility_level)
        benchmarks = self.generate_benchmark_returns(months, scenario, volatility_level)
        root = self.build_tree(asset_returns, allocations)

        snapshot = PortfolioSnapshot(
            root=root,
            benchmarks=benchmarks,
            timeframe=Timeframe.ending(end_date, months),
            snapshot_id=f"portfolio-{uuid.uuid4().hex[:12]}",
        )
        logger.info(
            f"Generated {len(asset_returns)} instrument series over {months} months "
            f"(scenario={scenario}, volatility={volatility_level})"
        )
        return snapshot


def empty_snapshot(end_date: Optional[date] = None) -> PortfolioSnapshot:
    """Minimal valid snapshot: a childless root and zero-length benchmark series."""
    end_date = end_date or date.today()
    root = AssetClass(component_id=ROOT_ID, name=ROOT_NAME, allocation=100.0, category=WHOLE_PORTFOLIO)
    benchmarks = {name: BenchmarkSeries(name) for name in BENCHMARKS if name != "Custom"}
    return PortfolioSnapshot(root=root, benchmarks=benchmarks, timeframe=Timeframe(end_date, end_date))


def generate_portfolio_data(months: int = 60, scenario: str = "normal", volatility_level: str = "medium",
                            allocations: Union[AllocationSettings, Dict[str, Any], None] = None,
                            seed: Optional[int] = None, rng: Optional[np.random.Generator] = None,
                            assumptions: Optional[MarketAssumptions] = None,
                            end_date: Optional[date] = None,
                            assumptions_path: Optional[str] = None) -> PortfolioSnapshot:
    """
    Generate a synthetic portfolio snapshot.

    Never raises: any failure is logged and the minimal empty snapshot is
    returned instead.

    Args:
        months: Number of monthly periods to generate
        scenario: One of ``normal``, ``bullish``, ``bearish``
        volatility_level: One of ``low``, ``medium``, ``high``
        allocations: AllocationSettings or their dictionary form
        seed: Random seed for reproducible results
        rng: Generator to draw from; takes precedence over ``seed``
        assumptions: Market assumptions; the packaged defaults when omitted
        end_date: Last month covered; today when omitted
        assumptions_path: YAML file to load assumptions from when
            ``assumptions`` is not given

    Returns:
        Generated PortfolioSnapshot
    """
    try:
        if isinstance(allocations, Mapping):
            allocations = AllocationSettings.from_dict(allocations)
        if assumptions is None and assumptions_path:
            assumptions = load_market_assumptions(assumptions_path)
        generator = PortfolioDataGenerator(assumptions=assumptions, seed=seed, rng=rng)
        return generator.generate(months, scenario, volatility_level, allocations, end_date)
    except Exception as e:
        logger.error(f"Error generating portfolio data: {e}", exc_info=True)
        return empty_snapshot(end_date)
