"""
Data models for portfolio risk analysis system.
Dataclasses for structured return types and boundary message shapes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..portfolio.snapshot import PortfolioSnapshot

# Relative tolerance for the Euler identity sum(RC) == portfolio volatility
EULER_TOLERANCE = 0.01


@dataclass
class ComponentSummary:
    """Summary information for a portfolio component."""
    component_id: str
    name: Optional[str] = None
    component_type: str = "unknown"  # 'leaf', 'node', 'root'
    is_leaf: bool = False
    children_count: int = 0
    children_ids: List[str] = field(default_factory=list)
    parent_id: Optional[str] = None
    level: int = 0
    path: str = ""
    category: Optional[str] = None
    allocation: float = 0.0
    absolute_weight: float = 0.0


@dataclass
class RiskContribution:
    """Euler risk contribution of one leaf asset."""
    id: str
    name: str
    contribution: float
    contribution_percentage: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'contribution': self.contribution,
            'contributionPercentage': self.contribution_percentage,
        }


@dataclass
class CalculationStep:
    """Per-leaf audit trail of the risk contribution calculation."""
    asset_name: str
    asset_id: str
    weight: float
    individual_volatility: float
    marginal_contribution: float
    contribution: float
    contribution_percentage: float
    portfolio_volatility: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'assetName': self.asset_name,
            'assetId': self.asset_id,
            'weight': self.weight,
            'individualVolatility': self.individual_volatility,
            'marginalContribution': self.marginal_contribution,
            'contribution': self.contribution,
            'contributionPercentage': self.contribution_percentage,
            'portfolioVolatility': self.portfolio_volatility,
        }


@dataclass
class RiskDecomposition:
    """Euler decomposition of portfolio volatility across leaf assets."""
    portfolio_volatility: float
    contributions: List[RiskContribution] = field(default_factory=list)
    steps: List[CalculationStep] = field(default_factory=list)

    # Validation
    total_contribution: float = 0.0
    euler_identity_check: Optional[float] = None  # Relative error
    is_valid: bool = True

    def __post_init__(self):
        """Calculate derived fields after initialization."""
        self.total_contribution = sum(c.contribution for c in self.contributions)
        if self.portfolio_volatility > 0 and self.contributions:
            self.euler_identity_check = (
                abs(self.total_contribution - self.portfolio_volatility) / self.portfolio_volatility
            )
            self.is_valid = self.euler_identity_check < EULER_TOLERANCE


@dataclass
class RiskAnalysisResult:
    """Complete risk analysis for one snapshot against one benchmark."""
    portfolio_volatility: float
    benchmark_volatility: float
    max_drawdown: float
    value_at_risk: float
    tracking_error: float
    beta: float
    alpha: float
    sharpe_ratio: float
    information_ratio: float
    risk_contributions: List[RiskContribution] = field(default_factory=list)
    calculation_steps: List[CalculationStep] = field(default_factory=list)

    # Metadata
    benchmark_name: str = "Market"
    periods: int = 0
    euler_identity_check: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Boundary message shape consumed by the presentation layer."""
        return {
            'portfolioVolatility': self.portfolio_volatility,
            'benchmarkVolatility': self.benchmark_volatility,
            'maxDrawdown': self.max_drawdown,
            'valueAtRisk': self.value_at_risk,
            'trackingError': self.tracking_error,
            'beta': self.beta,
            'alpha': self.alpha,
            'sharpeRatio': self.sharpe_ratio,
            'informationRatio': self.information_ratio,
            'riskContributions': [c.to_dict() for c in self.risk_contributions],
            'calculationSteps': [s.to_dict() for s in self.calculation_steps],
        }


@dataclass
class PerformanceSummary:
    """Performance metrics for one snapshot against one benchmark."""
    absolute_return: float
    annualized_return: float
    benchmark_return: float
    excess_return: float
    sharpe_ratio: float
    information_ratio: float
    alpha: float
    beta: float
    benchmark_name: str = "Market"
    periods: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'absoluteReturn': self.absolute_return,
            'annualizedReturn': self.annualized_return,
            'benchmarkReturn': self.benchmark_return,
            'excessReturn': self.excess_return,
            'sharpeRatio': self.sharpe_ratio,
            'informationRatio': self.information_ratio,
            'alpha': self.alpha,
            'beta': self.beta,
        }


@dataclass
class RiskRequest:
    """Message posted to the risk worker."""
    snapshot: 'PortfolioSnapshot'
    benchmark_name: str = "Market"
    sequence: int = 0


@dataclass
class RiskResponse:
    """Message posted back by the risk worker: results or an error."""
    sequence: int = 0
    results: Optional[RiskAnalysisResult] = None
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.results is not None and self.error_message is None

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return self.results.to_dict()
        return {'errorMessage': self.error_message or "Unknown error"}
