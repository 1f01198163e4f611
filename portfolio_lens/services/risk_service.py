"""
Risk metrics orchestration.

Combines the weight resolver, the performance engine and the risk engine
into the full risk analysis of one snapshot against one benchmark, and
turns requests into success or failure responses at the worker boundary.
"""

import logging

from ..errors import ComputationFailed
from ..models.data_models import RiskAnalysisResult, RiskRequest, RiskResponse
from ..performance.ratios import alpha, beta, information_ratio, sharpe_ratio
from ..performance.returns import benchmark_returns, portfolio_returns
from ..portfolio.snapshot import PortfolioSnapshot
from ..risk.decomposition import calculate_risk_contributions
from ..risk.metrics import max_drawdown, tracking_error, value_at_risk, volatility

logger = logging.getLogger(__name__)

DEFAULT_RISK_FREE_RATE = 0.001
DEFAULT_VAR_CONFIDENCE = 0.95


def calculate_risk_metrics(snapshot: PortfolioSnapshot, benchmark_name: str = "Market",
                           risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
                           confidence: float = DEFAULT_VAR_CONFIDENCE) -> RiskAnalysisResult:
    """
    Full risk analysis of ``snapshot`` against ``benchmark_name``.

    Args:
        snapshot: Portfolio snapshot to analyse
        benchmark_name: Benchmark to compare against; a missing benchmark
            yields zero benchmark-relative metrics
        risk_free_rate: Monthly risk-free rate for alpha and Sharpe
        confidence: Historical VaR confidence level

    Returns:
        RiskAnalysisResult with metrics, contributions and step trace

    Raises:
        NoReturnData: If no leaf in the snapshot carries returns
    """
    port = portfolio_returns(snapshot)
    bench = benchmark_returns(snapshot, benchmark_name)
    decomposition = calculate_risk_contributions(snapshot)

    result = RiskAnalysisResult(
        portfolio_volatility=volatility(port),
        benchmark_volatility=volatility(bench),
        max_drawdown=max_drawdown(port),
        value_at_risk=value_at_risk(port, confidence),
        tracking_error=tracking_error(port, bench),
        beta=beta(port, bench),
        alpha=alpha(port, bench, risk_free_rate),
        sharpe_ratio=sharpe_ratio(port, risk_free_rate),
        information_ratio=information_ratio(port, bench),
        risk_contributions=decomposition.contributions,
        calculation_steps=decomposition.steps,
        benchmark_name=benchmark_name,
        periods=len(port),
        euler_identity_check=decomposition.euler_identity_check,
    )
    logger.debug(
        f"Risk metrics over {len(port)} periods vs {benchmark_name}: "
        f"vol={result.portfolio_volatility:.6f}, VaR={result.value_at_risk:.6f}"
    )
    return result


def handle_risk_request(request: RiskRequest, risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
                        confidence: float = DEFAULT_VAR_CONFIDENCE) -> RiskResponse:
    """
    Compute the response for one request; never raises.

    Any failure becomes a response whose ``error_message`` is the message
    of a ``ComputationFailed`` wrapping the original error.
    """
    try:
        results = calculate_risk_metrics(request.snapshot, request.benchmark_name, risk_free_rate, confidence)
        return RiskResponse(sequence=request.sequence, results=results)
    except Exception as e:
        failure = ComputationFailed(
            f"Error in risk calculation: {e}",
            user_message=getattr(e, 'user_message', None),
        )
        logger.error(f"Risk request {request.sequence} failed: {e}", exc_info=True)
        return RiskResponse(sequence=request.sequence, error_message=str(failure))
