"""
Euler decomposition of portfolio volatility.

For portfolio returns ``P`` and leaf returns ``r_i`` with absolute weights
``w_i``::

    MCR_i = cov(r_i, P) / sigma_P
    RC_i  = w_i * MCR_i

``sum(RC_i)`` equals ``sigma_P`` when ``P`` is the weighted sum of the
leaves; the weight-normalized portfolio series keeps the identity within
a tight tolerance for a fully invested tree.
"""

from typing import List, Sequence, Tuple
import logging

from ..models.data_models import CalculationStep, RiskContribution, RiskDecomposition
from ..performance.returns import leaf_weights, weighted_returns
from ..portfolio.components import Asset
from ..portfolio.snapshot import PortfolioSnapshot
from .metrics import covariance, volatility

logger = logging.getLogger(__name__)


def decompose(weighted_leaves: Sequence[Tuple[Asset, float]]) -> RiskDecomposition:
    """
    Risk contributions of every leaf in ``weighted_leaves``.

    Leaves whose series length differs from the portfolio series get a
    zero covariance and therefore a zero contribution. Percentages are
    shares of the contribution total and stay 0 unless that total is
    positive. A portfolio without volatility still gets one zeroed step
    per leaf.

    Raises
    ------
    NoReturnData
        If no leaf carries returns.
    """
    port = weighted_returns(weighted_leaves)
    port_vol = volatility(port)

    if port_vol == 0:
        logger.warning("Portfolio volatility is zero; risk contributions are all zero")

    raw = []
    for leaf, weight in weighted_leaves:
        marginal = covariance(leaf.returns, port) / port_vol if port_vol > 0 else 0.0
        raw.append((leaf, weight, marginal, weight * marginal))

    total = sum(rc for _, _, _, rc in raw)
    contributions: List[RiskContribution] = []
    steps: List[CalculationStep] = []
    for leaf, weight, marginal, rc in raw:
        share = rc / total * 100.0 if total > 0 else 0.0
        contributions.append(RiskContribution(
            id=leaf.component_id,
            name=leaf.name,
            contribution=rc,
            contribution_percentage=share,
        ))
        steps.append(CalculationStep(
            asset_name=leaf.name,
            asset_id=leaf.component_id,
            weight=weight,
            individual_volatility=volatility(leaf.returns),
            marginal_contribution=marginal,
            contribution=rc,
            contribution_percentage=share,
            portfolio_volatility=port_vol,
        ))

    decomposition = RiskDecomposition(portfolio_volatility=port_vol, contributions=contributions, steps=steps)
    if not decomposition.is_valid:
        logger.warning(
            f"Euler identity off by {decomposition.euler_identity_check:.2%}: "
            f"sum(RC)={decomposition.total_contribution:.6f}, sigma={port_vol:.6f}"
        )
    return decomposition


def calculate_risk_contributions(snapshot: PortfolioSnapshot) -> RiskDecomposition:
    """Euler risk decomposition of ``snapshot`` across its leaf assets."""
    weighted = leaf_weights(snapshot)
    logger.debug(f"Decomposing risk across {len(weighted)} leaves")
    return decompose(weighted)
