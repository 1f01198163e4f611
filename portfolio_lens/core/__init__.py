"""Shared lookup tables."""

from .mappers import (
    frequency_to_multiplier, period_to_months,
    TIME_PERIODS, BENCHMARKS, SCENARIOS, VOLATILITY_LEVELS, RETURN_FREQUENCY
)

__all__ = [
    'frequency_to_multiplier', 'period_to_months',
    'TIME_PERIODS', 'BENCHMARKS', 'SCENARIOS', 'VOLATILITY_LEVELS', 'RETURN_FREQUENCY'
]
