"""
Risk Analysis Service - main orchestrator for the portfolio analytics system.
Coordinates configuration, data generation, windowing, the analytics
engines and the metrics cache behind a dictionary-returning interface.
"""

from datetime import datetime
from typing import Any, Dict, Optional
import logging

from ..computation.metrics_cache import MetricsCache, cache_key
from ..config.data_generator import generate_portfolio_data
from ..portfolio.allocation import apply_allocations
from ..portfolio.snapshot import AllocationSettings, PortfolioSnapshot
from ..portfolio.windowing import filter_to_window
from ..risk.annualizer import RiskAnnualizer
from .configuration_service import ConfigurationService
from .performance_service import calculate_performance_metrics
from .risk_service import calculate_risk_metrics

logger = logging.getLogger(__name__)


class RiskAnalysisService:
    """
    Main orchestrator for portfolio risk and performance analysis.

    Holds the current snapshot, derives windowed views of it on demand and
    caches results per (snapshot, period, benchmark, analysis settings).
    """

    def __init__(self, config_service: Optional[ConfigurationService] = None,
                 cache: Optional[MetricsCache] = None):
        """
        Initialize risk analysis service.

        Args:
            config_service: Configuration service instance (defaults when omitted)
            cache: Metrics cache shared with other services
        """
        self.config_service = config_service or ConfigurationService()
        self.cache = cache if cache is not None else MetricsCache()
        self._snapshot: Optional[PortfolioSnapshot] = None

        logger.info("Initialized RiskAnalysisService")

    @property
    def snapshot(self) -> Optional[PortfolioSnapshot]:
        return self._snapshot

    def set_snapshot(self, snapshot: PortfolioSnapshot) -> None:
        """Replace the analysed snapshot and drop cached results."""
        self._snapshot = snapshot
        self.cache.clear()
        logger.info(f"Snapshot set: {snapshot.snapshot_id} ({snapshot.horizon} months)")

    def generate_portfolio(self, **overrides) -> PortfolioSnapshot:
        """
        Generate a snapshot from the configured generation settings.

        Keyword arguments override ``generation`` settings (months,
        scenario, volatility_level, seed, assumptions_path) and may pass
        ``allocations``. An unreadable assumptions file yields the empty
        snapshot.
        """
        settings = self.config_service.get_generation_settings()
        settings.update(overrides)
        allocations = settings.pop('allocations', None) or self.config_service.get_allocation_settings()

        snapshot = generate_portfolio_data(
            months=settings.get('months', 60),
            scenario=settings.get('scenario', 'normal'),
            volatility_level=settings.get('volatility_level', 'medium'),
            allocations=allocations,
            seed=settings.get('seed'),
            assumptions_path=settings.get('assumptions_path'),
        )
        self.set_snapshot(snapshot)
        return snapshot

    def update_allocations(self, allocations: AllocationSettings) -> Dict[str, Any]:
        """Re-weight the current snapshot; returns the allocation issues found."""
        if self._snapshot is None:
            return self._create_error_result("No portfolio loaded")

        tolerance = self.config_service.get_setting("analysis.allocation_tolerance", 0.01)
        self.set_snapshot(apply_allocations(self._snapshot, allocations))
        valid, issues = self._snapshot.graph.validate_structure(tolerance)
        return {'success': True, 'valid': valid, 'issues': issues}

    def _windowed(self, period: Optional[str], analysis: Dict[str, Any]) -> PortfolioSnapshot:
        if not period:
            return self._snapshot
        return filter_to_window(self._snapshot, period, bool(analysis.get("exact_ytd", False)))

    @staticmethod
    def _key_params(analysis: Dict[str, Any]) -> tuple:
        # Settings that change a cached result
        return (
            analysis.get("risk_free_rate"),
            analysis.get("var_confidence"),
            bool(analysis.get("exact_ytd", False)),
        )

    def run_risk_analysis(self, period: Optional[str] = None, benchmark_name: Optional[str] = None,
                          annualized: bool = False, force_refresh: bool = False) -> Dict[str, Any]:
        """
        Run the risk analysis on the current snapshot.

        Args:
            period: Lookback period (configured default when None)
            benchmark_name: Benchmark (configured default when None)
            annualized: Scale volatility-like figures to a yearly horizon
            force_refresh: Ignore cached results

        Returns:
            Dictionary with ``success``, ``data`` (boundary result shape)
            and ``metadata``, or an error result
        """
        if self._snapshot is None:
            return self._create_error_result("No portfolio loaded")

        period = period or self.config_service.get_setting("analysis.default_period")
        benchmark_name = benchmark_name or self.config_service.default_benchmark
        analysis = self.config_service.get_analysis_settings()
        key = cache_key(self._snapshot.snapshot_id, period, benchmark_name, "risk", *self._key_params(analysis))

        if not force_refresh:
            cached = self.cache.get(key)
            if cached is not None:
                logger.info(f"Returning cached risk analysis for {key}")
                return self._package(cached, period, benchmark_name, annualized)

        try:
            result = calculate_risk_metrics(
                self._windowed(period, analysis),
                benchmark_name,
                risk_free_rate=float(analysis.get("risk_free_rate", 0.001)),
                confidence=float(analysis.get("var_confidence", 0.95)),
            )
        except Exception as e:
            error_msg = f"Risk analysis failed: {e}"
            logger.error(error_msg, exc_info=True)
            return self._create_error_result(error_msg)

        self.cache.set(key, result)
        logger.info(f"Risk analysis completed for {period} vs {benchmark_name}")
        return self._package(result, period, benchmark_name, annualized)

    def run_performance_analysis(self, period: Optional[str] = None,
                                 benchmark_name: Optional[str] = None) -> Dict[str, Any]:
        """Performance summary of the current snapshot; same shape as ``run_risk_analysis``."""
        if self._snapshot is None:
            return self._create_error_result("No portfolio loaded")

        period = period or self.config_service.get_setting("analysis.default_period")
        benchmark_name = benchmark_name or self.config_service.default_benchmark
        analysis = self.config_service.get_analysis_settings()
        key = cache_key(self._snapshot.snapshot_id, period, benchmark_name, "performance", *self._key_params(analysis))

        summary = self.cache.get(key)
        if summary is None:
            try:
                summary = calculate_performance_metrics(
                    self._windowed(period, analysis), benchmark_name,
                    float(analysis.get("risk_free_rate", 0.001))
                )
            except Exception as e:
                error_msg = f"Performance analysis failed: {e}"
                logger.error(error_msg, exc_info=True)
                return self._create_error_result(error_msg)
            self.cache.set(key, summary)

        return {
            'success': True,
            'data': summary.to_dict(),
            'metadata': {
                'period': period,
                'benchmark': benchmark_name,
                'periods': summary.periods,
                'snapshot_id': self._snapshot.snapshot_id,
            }
        }

    def _package(self, result, period: str, benchmark_name: str, annualized: bool) -> Dict[str, Any]:
        data = result.to_dict()
        if annualized:
            data = RiskAnnualizer.annualize_risk_results(data)
        return {
            'success': True,
            'data': data,
            'metadata': {
                'period': period,
                'benchmark': benchmark_name,
                'periods': result.periods,
                'annualized': annualized,
                'euler_identity_check': result.euler_identity_check,
                'snapshot_id': self._snapshot.snapshot_id,
                'analysis_timestamp': datetime.now().isoformat(),
            }
        }

    def _create_error_result(self, error_message: str) -> Dict[str, Any]:
        """Create standardized error result."""
        return {
            'success': False,
            'error': error_message,
            'timestamp': datetime.now().isoformat()
        }

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Risk analysis cache cleared")

    def get_service_status(self) -> Dict[str, Any]:
        """Get current service status."""
        return {
            'snapshot_loaded': self._snapshot is not None,
            'snapshot_id': self._snapshot.snapshot_id if self._snapshot else None,
            'horizon_months': self._snapshot.horizon if self._snapshot else 0,
            'leaf_count': len(self._snapshot.leaves()) if self._snapshot else 0,
            'cache_size': len(self.cache),
        }
