"""
Applying and validating allocation settings on a portfolio tree.

Structural buckets are located through the ``category`` tag carried by
each asset class, never through display names. Allocation drift is
reported, not corrected.
"""

from typing import Dict, List
import logging

from .components import AssetClass, PortfolioComponent
from .snapshot import AllocationSettings, PortfolioSnapshot
from .visitors import ALLOCATION_TOLERANCE, AllocationValidationVisitor

logger = logging.getLogger(__name__)

# Asset class category tags used by the synthesized tree
WHOLE_PORTFOLIO = "whole_portfolio"
PUBLIC = "public"
PRIVATE = "private"
EQUITIES = "equities"
FIXED_INCOME = "fixed_income"
AUD_EQUITIES = "aud_equities"
FX_EQUITIES = "fx_equities"
SOVEREIGN_FI = "sovereign_fi"
NON_SOVEREIGN_FI = "non_sovereign_fi"
REAL_ESTATE = "real_estate"
INFRASTRUCTURE = "infrastructure"
PRIVATE_EQUITY = "private_equity"


def category_allocations(allocations: AllocationSettings) -> Dict[str, float]:
    """Allocation percentage of every asset-class category implied by ``allocations``."""
    return {
        WHOLE_PORTFOLIO: 100.0,
        PUBLIC: allocations.public_vs_private,
        PRIVATE: 100.0 - allocations.public_vs_private,
        EQUITIES: allocations.equities_vs_fixed_income,
        FIXED_INCOME: 100.0 - allocations.equities_vs_fixed_income,
        AUD_EQUITIES: allocations.aud_vs_fx,
        FX_EQUITIES: 100.0 - allocations.aud_vs_fx,
        SOVEREIGN_FI: allocations.sovereign_vs_non_sovereign,
        NON_SOVEREIGN_FI: 100.0 - allocations.sovereign_vs_non_sovereign,
        REAL_ESTATE: allocations.real_estate,
        INFRASTRUCTURE: allocations.infrastructure,
        PRIVATE_EQUITY: allocations.private_equity,
    }


def _reallocate(component: PortfolioComponent, targets: Dict[str, float]) -> PortfolioComponent:
    if not isinstance(component, AssetClass):
        return component
    children = [_reallocate(child, targets) for child in component.children]
    allocation = targets.get(component.category, component.allocation)
    return component.evolve(allocation=allocation, children=tuple(children))


def apply_allocations(snapshot: PortfolioSnapshot, allocations: AllocationSettings) -> PortfolioSnapshot:
    """
    New snapshot whose asset-class allocations follow ``allocations``.

    Leaf allocations and return series are unchanged; asset classes without
    a recognised category keep their allocation.
    """
    for issue in allocations.validate():
        logger.warning(issue)
    root = _reallocate(snapshot.root, category_allocations(allocations))
    return snapshot.with_root(root)


def validate_allocations(tree: AssetClass, tolerance: float = ALLOCATION_TOLERANCE) -> List[str]:
    """Allocation issues in ``tree``; each one is also logged as a warning."""
    return AllocationValidationVisitor(tolerance).run_on(tree)
