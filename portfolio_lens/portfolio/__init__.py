"""
Portfolio hierarchy: components, graph, visitors, snapshots and windowing.
"""

from .components import PortfolioComponent, AssetClass, Asset
from .visitors import (
    PortfolioVisitor, LeafCollectionVisitor, WeightVisitor,
    AllocationValidationVisitor, SubtreeReturnsVisitor
)
from .graph import PortfolioGraph, absolute_weight, collect_leaves, find_node
from .snapshot import AllocationSettings, BenchmarkSeries, PortfolioSnapshot, Timeframe
from .windowing import filter_to_window, filter_portfolio_data_by_time_period, months_for_period
from .allocation import apply_allocations, validate_allocations

__all__ = [
    'PortfolioComponent', 'AssetClass', 'Asset',
    'PortfolioVisitor', 'LeafCollectionVisitor', 'WeightVisitor',
    'AllocationValidationVisitor', 'SubtreeReturnsVisitor',
    'PortfolioGraph', 'absolute_weight', 'collect_leaves', 'find_node',
    'AllocationSettings', 'BenchmarkSeries', 'PortfolioSnapshot', 'Timeframe',
    'filter_to_window', 'filter_portfolio_data_by_time_period', 'months_for_period',
    'apply_allocations', 'validate_allocations',
]
