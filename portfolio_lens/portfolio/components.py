"""
Portfolio Component Classes
===========================

Abstract base class and concrete implementations for portfolio hierarchy components.

Components are immutable values: an ``AssetClass`` owns its ordered children,
an ``Asset`` owns its monthly return series, and ``parent_id`` is a plain
back-reference used for weight resolution. Any edit produces a new component.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .visitors import PortfolioVisitor


@dataclass(frozen=True)
class PortfolioComponent(ABC):
    """Abstract base class for all portfolio components"""

    component_id: str
    name: str
    allocation: float = 100.0
    parent_id: Optional[str] = None
    category: Optional[str] = None

    @abstractmethod
    def get_all_children(self) -> List[str]:
        """Get all child component IDs"""
        pass

    @abstractmethod
    def is_leaf(self) -> bool:
        """Check if component is a leaf node"""
        pass

    @property
    def id(self) -> str:
        return self.component_id

    @property
    def allocation_ratio(self) -> float:
        """Allocation as a fraction of the immediate parent."""
        return self.allocation / 100.0

    def accept(self, visitor: 'PortfolioVisitor') -> None:
        """Accept a visitor for traversal (Visitor pattern)"""
        if self.is_leaf():
            visitor.visit_leaf(self)
        else:
            visitor.visit_node(self)

    def evolve(self, **changes) -> 'PortfolioComponent':
        """Return a copy of this component with ``changes`` applied."""
        return replace(self, **changes)


@dataclass(frozen=True)
class AssetClass(PortfolioComponent):
    """Aggregate node in the portfolio hierarchy"""

    children: Tuple[PortfolioComponent, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, 'children', tuple(self.children))

    def get_all_children(self) -> List[str]:
        return [child.component_id for child in self.children]

    def is_leaf(self) -> bool:
        return False

    def get_child(self, child_id: str) -> Optional[PortfolioComponent]:
        """Get a direct child by ID"""
        for child in self.children:
            if child.component_id == child_id:
                return child
        return None

    def with_children(self, children: Iterable[PortfolioComponent]) -> 'AssetClass':
        return replace(self, children=tuple(children))

    @property
    def children_allocation(self) -> float:
        """Sum of the direct children's allocation percentages."""
        return sum(child.allocation for child in self.children)


@dataclass(frozen=True)
class Asset(PortfolioComponent):
    """Terminal node representing an individual instrument"""

    returns: Tuple[float, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, 'returns', tuple(float(r) for r in self.returns))

    def get_all_children(self) -> List[str]:
        return []

    def is_leaf(self) -> bool:
        return True

    def with_returns(self, returns: Iterable[float]) -> 'Asset':
        return replace(self, returns=tuple(returns))

    @property
    def periods(self) -> int:
        return len(self.returns)
