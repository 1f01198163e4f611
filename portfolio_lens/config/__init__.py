"""Market assumptions and synthetic portfolio generation."""

from .market_assumptions import (
    MarketAssumptions, ReturnParams, ScenarioMultipliers, InstrumentSpec,
    load_market_assumptions, DEFAULT_ASSUMPTIONS_PATH
)
from .data_generator import (
    PortfolioDataGenerator, build_covariance, cholesky_decomposition,
    empty_snapshot, generate_portfolio_data
)

__all__ = [
    'MarketAssumptions', 'ReturnParams', 'ScenarioMultipliers', 'InstrumentSpec',
    'load_market_assumptions', 'DEFAULT_ASSUMPTIONS_PATH',
    'PortfolioDataGenerator', 'build_covariance', 'cholesky_decomposition',
    'empty_snapshot', 'generate_portfolio_data',
]
