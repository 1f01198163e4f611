"""
Portfolio Visitor Pattern Implementation
========================================

Visitor classes for traversing portfolio hierarchies: collecting leaves,
resolving structural weights, validating allocation sums and aggregating
return series up the tree.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING
import logging

import numpy as np

if TYPE_CHECKING:
    from .components import Asset, AssetClass, PortfolioComponent

logger = logging.getLogger(__name__)

# Allowed drift of a sibling allocation sum away from 100%
ALLOCATION_TOLERANCE = 0.01


class PortfolioVisitor(ABC):
    """Abstract base class for portfolio hierarchy visitors"""

    @abstractmethod
    def visit_leaf(self, leaf: 'Asset') -> None:
        """Visit a portfolio leaf component"""
        pass

    @abstractmethod
    def visit_node(self, node: 'AssetClass') -> None:
        """Visit a portfolio node component"""
        pass

    def run_on(self, component: 'PortfolioComponent'):
        """Convenience method to run visitor on a component and return result"""
        component.accept(self)
        return self.result

    @property
    def result(self):
        return None


class LeafCollectionVisitor(PortfolioVisitor):
    """Pre-order collection of every Asset leaf.

    An AssetClass without children is a boundary: nothing below it is
    collected and it is not reported as a leaf either.
    """

    def __init__(self):
        self._leaves: List['Asset'] = []

    def visit_leaf(self, leaf: 'Asset') -> None:
        self._leaves.append(leaf)

    def visit_node(self, node: 'AssetClass') -> None:
        if not node.children:
            logger.debug(f"Asset class '{node.component_id}' has no children, skipping")
            return
        for child in node.children:
            child.accept(self)

    @property
    def result(self) -> List['Asset']:
        return list(self._leaves)


class WeightVisitor(PortfolioVisitor):
    """Resolve absolute weights for every component from the tree structure.

    The weight of a component is the product of the allocation ratios along
    its structural path from the visited root.
    """

    def __init__(self):
        self._weights: Dict[str, float] = {}
        self._levels: Dict[str, int] = {}
        self._paths: Dict[str, str] = {}
        self._multiplier_stack: List[Tuple[float, int, str]] = []

    def _record(self, component: 'PortfolioComponent') -> None:
        if self._multiplier_stack:
            parent_weight, parent_level, parent_path = self._multiplier_stack[-1]
        else:
            parent_weight, parent_level, parent_path = 1.0, -1, ""
        weight = parent_weight * component.allocation_ratio
        path = f"{parent_path}/{component.component_id}" if parent_path else component.component_id
        self._weights[component.component_id] = weight
        self._levels[component.component_id] = parent_level + 1
        self._paths[component.component_id] = path

    def visit_leaf(self, leaf: 'Asset') -> None:
        self._record(leaf)

    def visit_node(self, node: 'AssetClass') -> None:
        self._record(node)
        cid = node.component_id
        self._multiplier_stack.append((self._weights[cid], self._levels[cid], self._paths[cid]))
        for child in node.children:
            child.accept(self)
        self._multiplier_stack.pop()

    @property
    def result(self) -> Dict[str, float]:
        return dict(self._weights)

    @property
    def levels(self) -> Dict[str, int]:
        return dict(self._levels)

    @property
    def paths(self) -> Dict[str, str]:
        return dict(self._paths)


class AllocationValidationVisitor(PortfolioVisitor):
    """Check that every asset class's children allocations sum to 100%.

    Drift beyond ``tolerance`` is logged as a warning and reported; nothing
    is corrected.
    """

    def __init__(self, tolerance: float = ALLOCATION_TOLERANCE):
        self.tolerance = tolerance
        self._issues: List[str] = []

    def visit_leaf(self, leaf: 'Asset') -> None:
        if not 0.0 <= leaf.allocation <= 100.0:
            self._report(f"Allocation of '{leaf.component_id}' outside [0, 100]: {leaf.allocation}")

    def visit_node(self, node: 'AssetClass') -> None:
        if not 0.0 <= node.allocation <= 100.0:
            self._report(f"Allocation of '{node.component_id}' outside [0, 100]: {node.allocation}")
        if node.children:
            total = node.children_allocation
            if abs(total - 100.0) > self.tolerance:
                self._report(
                    f"Children of '{node.component_id}' allocate {total:.4f}% instead of 100%"
                )
        for child in node.children:
            child.accept(self)

    def _report(self, message: str) -> None:
        logger.warning(message)
        self._issues.append(message)

    @property
    def result(self) -> List[str]:
        return list(self._issues)


class SubtreeReturnsVisitor(PortfolioVisitor):
    """Aggregate leaf return series into allocation-weighted node series.

    Each node's series is the allocation-weighted average of its children
    per period. A child only contributes to the periods it has data for,
    so shorter series do not drag the average towards zero.
    """

    def __init__(self):
        self._result_stack: List[Optional[np.ndarray]] = []
        self._node_returns: Dict[str, np.ndarray] = {}

    def visit_leaf(self, leaf: 'Asset') -> None:
        series = np.asarray(leaf.returns, dtype=float)
        self._node_returns[leaf.component_id] = series
        self._result_stack.append(series)

    def visit_node(self, node: 'AssetClass') -> None:
        weighted_children = []
        for child in node.children:
            child.accept(self)
            child_series = self._result_stack.pop()
            if child_series is not None and child_series.size > 0:
                weighted_children.append((child.allocation_ratio, child_series))

        if not weighted_children:
            self._result_stack.append(None)
            return

        periods = max(series.size for _, series in weighted_children)
        weighted_sum = np.zeros(periods)
        total_weight = np.zeros(periods)
        for weight, series in weighted_children:
            weighted_sum[:series.size] += weight * series
            total_weight[:series.size] += weight

        aggregated = np.divide(
            weighted_sum, total_weight,
            out=np.zeros(periods), where=total_weight > 0
        )
        self._node_returns[node.component_id] = aggregated
        self._result_stack.append(aggregated)

    @property
    def result(self) -> Optional[np.ndarray]:
        return self._result_stack[-1] if self._result_stack else None

    def get_node_returns(self, component_id: str) -> Optional[np.ndarray]:
        return self._node_returns.get(component_id)
