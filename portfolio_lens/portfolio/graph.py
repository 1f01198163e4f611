"""
Portfolio Graph Implementation
==============================

Read-only index over a portfolio tree with lookup, weight resolution and
structural validation.
"""

from typing import Dict, List, Optional, Tuple
import logging

from ..errors import NotFound
from .components import Asset, AssetClass, PortfolioComponent
from .visitors import (
    ALLOCATION_TOLERANCE,
    AllocationValidationVisitor,
    LeafCollectionVisitor,
    SubtreeReturnsVisitor,
    WeightVisitor,
)
from ..models.data_models import ComponentSummary

logger = logging.getLogger(__name__)


class PortfolioGraph:
    """Main container for the portfolio hierarchy"""

    def __init__(self, root: AssetClass):
        self.root = root
        self.root_id = root.component_id
        self.components: Dict[str, PortfolioComponent] = {}
        self._structural_parent: Dict[str, Optional[str]] = {}
        self._duplicate_ids: List[str] = []
        self._index(root, None)

    def _index(self, component: PortfolioComponent, parent_id: Optional[str]) -> None:
        cid = component.component_id
        if cid in self.components:
            self._duplicate_ids.append(cid)
        else:
            self.components[cid] = component
            self._structural_parent[cid] = parent_id
        if isinstance(component, AssetClass):
            for child in component.children:
                self._index(child, cid)

    def __contains__(self, component_id: str) -> bool:
        return component_id in self.components

    def get_component(self, component_id: str) -> PortfolioComponent:
        """Get component by ID, raising NotFound if it does not exist"""
        try:
            return self.components[component_id]
        except KeyError:
            raise NotFound(component_id) from None

    def find_node(self, component_id: str) -> Optional[PortfolioComponent]:
        return self.components.get(component_id)

    def get_path_to_root(self, component_id: str) -> List[str]:
        """Get path from component to root following ``parent_id`` references"""
        if component_id not in self.components:
            return []

        path = []
        current = component_id
        visited = set()

        while current and current not in visited:
            path.append(current)
            visited.add(current)
            component = self.components.get(current)
            current = component.parent_id if component else None

        return path

    def absolute_weight(self, leaf_id: str) -> float:
        """
        Absolute portfolio weight of a component.

        Walks upward via ``parent_id`` multiplying ``allocation / 100`` at each
        level. A reference to an ancestor missing from the tree, or a cycle,
        breaks the chain and yields 0.0.
        """
        component = self.get_component(leaf_id)
        weight = component.allocation_ratio
        visited = {component.component_id}
        parent_id = component.parent_id

        while parent_id is not None:
            parent = self.components.get(parent_id)
            if parent is None or parent_id in visited:
                logger.warning(
                    f"Broken parent chain at '{parent_id}' while resolving weight of '{leaf_id}'"
                )
                return 0.0
            visited.add(parent_id)
            weight *= parent.allocation_ratio
            parent_id = parent.parent_id

        return weight

    def absolute_weights(self) -> Dict[str, float]:
        """Absolute weight of every leaf, keyed by component ID"""
        return {leaf.component_id: self.absolute_weight(leaf.component_id)
                for leaf in self.get_all_leaves()}

    def get_all_leaves(self) -> List[Asset]:
        return LeafCollectionVisitor().run_on(self.root)

    def get_all_nodes(self) -> List[AssetClass]:
        return [c for c in self.components.values() if isinstance(c, AssetClass)]

    def get_descendant_leaves(self, component_id: str) -> List[Asset]:
        return LeafCollectionVisitor().run_on(self.get_component(component_id))

    def node_returns(self, component_id: str):
        """Allocation-weighted return series of any component's subtree"""
        return SubtreeReturnsVisitor().run_on(self.get_component(component_id))

    def validate_structure(self, tolerance: float = ALLOCATION_TOLERANCE) -> Tuple[bool, List[str]]:
        """Validate graph structure and return any issues"""
        issues = []

        if self.root.parent_id is not None:
            issues.append(f"Root '{self.root_id}' has a parent reference: {self.root.parent_id}")
        if abs(self.root.allocation - 100.0) > tolerance:
            issues.append(f"Root '{self.root_id}' allocation is {self.root.allocation}, expected 100")

        for cid in self._duplicate_ids:
            issues.append(f"Duplicate component id: {cid}")

        for cid, component in self.components.items():
            if cid == self.root_id:
                continue
            structural_parent = self._structural_parent.get(cid)
            if component.parent_id is None:
                issues.append(f"Component '{cid}' has no parent reference")
            elif component.parent_id not in self.components:
                issues.append(f"Component '{cid}' references missing parent '{component.parent_id}'")
            elif component.parent_id != structural_parent:
                issues.append(
                    f"Component '{cid}' references parent '{component.parent_id}' "
                    f"but is nested under '{structural_parent}'"
                )

        issues.extend(AllocationValidationVisitor(tolerance).run_on(self.root))

        lengths = {leaf.periods for leaf in self.get_all_leaves()}
        if len(lengths) > 1:
            issues.append(f"Leaf return series have unequal lengths: {sorted(lengths)}")

        return len(issues) == 0, issues

    def summarize_nodes(self) -> List[ComponentSummary]:
        """Summary row per component in pre-order"""
        weight_visitor = WeightVisitor()
        weights = weight_visitor.run_on(self.root)
        levels = weight_visitor.levels
        paths = weight_visitor.paths

        summaries = []
        for cid, component in self.components.items():
            summaries.append(ComponentSummary(
                component_id=cid,
                name=component.name,
                component_type='leaf' if component.is_leaf() else ('root' if cid == self.root_id else 'node'),
                is_leaf=component.is_leaf(),
                children_count=len(component.get_all_children()),
                children_ids=component.get_all_children(),
                parent_id=component.parent_id,
                level=levels.get(cid, 0),
                path=paths.get(cid, cid),
                category=component.category,
                allocation=component.allocation,
                absolute_weight=weights.get(cid, 0.0),
            ))
        return summaries


def absolute_weight(tree: AssetClass, leaf_id: str) -> float:
    """Absolute weight of ``leaf_id`` within ``tree`` (see PortfolioGraph.absolute_weight)."""
    return PortfolioGraph(tree).absolute_weight(leaf_id)


def collect_leaves(tree: PortfolioComponent) -> List[Asset]:
    """Pre-order list of every Asset leaf below ``tree``."""
    return LeafCollectionVisitor().run_on(tree)


def find_node(tree: AssetClass, component_id: str) -> Optional[PortfolioComponent]:
    return PortfolioGraph(tree).find_node(component_id)
