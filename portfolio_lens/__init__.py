"""
portfolio-lens: synthetic hierarchical portfolios and their performance
and risk analytics.
"""

from .logging_config import configure_logging, get_logger
from .errors import PortfolioLensError, NotFound, NoReturnData, NumericalError, ComputationFailed
from .portfolio import (
    AssetClass, Asset, PortfolioGraph, PortfolioSnapshot, AllocationSettings,
    absolute_weight, collect_leaves, filter_to_window, filter_portfolio_data_by_time_period
)
from .config.data_generator import PortfolioDataGenerator, generate_portfolio_data
from .risk.decomposition import calculate_risk_contributions
from .services import (
    ConfigurationService, RiskAnalysisService,
    calculate_risk_metrics, calculate_performance_metrics, handle_risk_request
)
from .computation import RiskWorker, MetricsCache

__version__ = "0.1.0"

__all__ = [
    'configure_logging', 'get_logger',
    'PortfolioLensError', 'NotFound', 'NoReturnData', 'NumericalError', 'ComputationFailed',
    'AssetClass', 'Asset', 'PortfolioGraph', 'PortfolioSnapshot', 'AllocationSettings',
    'absolute_weight', 'collect_leaves', 'filter_to_window', 'filter_portfolio_data_by_time_period',
    'PortfolioDataGenerator', 'generate_portfolio_data',
    'calculate_risk_contributions',
    'ConfigurationService', 'RiskAnalysisService',
    'calculate_risk_metrics', 'calculate_performance_metrics', 'handle_risk_request',
    'RiskWorker', 'MetricsCache',
]
