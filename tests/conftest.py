"""Shared pytest fixtures for portfolio_lens tests."""

from datetime import date

import numpy as np
import pytest

from portfolio_lens.config.data_generator import generate_portfolio_data
from portfolio_lens.portfolio.components import Asset, AssetClass
from portfolio_lens.portfolio.snapshot import BenchmarkSeries, PortfolioSnapshot, Timeframe

END_DATE = date(2024, 6, 30)


def single_class_snapshot(allocations, series, benchmark=None, end_date=END_DATE) -> PortfolioSnapshot:
    """Root -> one asset class -> one leaf per (allocation, series) pair."""
    leaves = tuple(
        Asset(
            component_id=f"leaf-{i}",
            name=f"Leaf {i}",
            allocation=allocation,
            parent_id="class",
            returns=tuple(returns),
        )
        for i, (allocation, returns) in enumerate(zip(allocations, series))
    )
    asset_class = AssetClass(component_id="class", name="Class", allocation=100.0, parent_id="root", children=leaves)
    root = AssetClass(component_id="root", name="Root", allocation=100.0, children=(asset_class,))
    months = max(len(s) for s in series)
    benchmarks = {}
    if benchmark is not None:
        benchmarks["Market"] = BenchmarkSeries("Market", tuple(benchmark))
    return PortfolioSnapshot(
        root=root,
        benchmarks=benchmarks,
        timeframe=Timeframe.ending(end_date, months),
        snapshot_id="test-snapshot",
    )


@pytest.fixture
def three_leaf_snapshot() -> PortfolioSnapshot:
    """Single-class portfolio weighted 50/30/20 over two months."""
    return single_class_snapshot(
        [50.0, 30.0, 20.0],
        [[0.01, 0.02], [0.00, 0.01], [-0.01, 0.03]],
        benchmark=[0.005, 0.015],
    )


@pytest.fixture
def random_snapshot() -> PortfolioSnapshot:
    """Four leaves with 36 months of seeded random returns and a benchmark."""
    rng = np.random.default_rng(seed=2024)
    series = rng.normal(0.006, 0.03, size=(4, 36))
    benchmark = rng.normal(0.005, 0.035, size=36)
    return single_class_snapshot([40.0, 30.0, 20.0, 10.0], series.tolist(), benchmark=benchmark.tolist())


@pytest.fixture(scope="session")
def generated_snapshot() -> PortfolioSnapshot:
    """Ten years of generated data for the full portfolio tree."""
    return generate_portfolio_data(months=120, seed=7, end_date=END_DATE)


@pytest.fixture
def make_snapshot():
    """Factory for single-class snapshots built from allocations and series."""
    return single_class_snapshot
