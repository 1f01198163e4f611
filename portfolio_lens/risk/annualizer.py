"""
Risk annualization utilities.

Core calculations return raw per-period (monthly) values; this utility
converts them to annualized form when needed for reporting.
"""

from typing import Any, Dict

import numpy as np

from ..core.mappers import RETURN_FREQUENCY, frequency_to_multiplier
from .metrics import volatility


class RiskAnnualizer:
    """
    Centralized utility for annualizing risk metrics.

    Volatility-like quantities scale with the square root of the number of
    periods per year, return-like quantities compound.
    """

    # Keys of RiskAnalysisResult.to_dict() holding volatility-like scalars
    VOLATILITY_KEYS = frozenset({
        'portfolioVolatility',
        'benchmarkVolatility',
        'trackingError',
    })

    @staticmethod
    def periods_per_year(frequency: str = RETURN_FREQUENCY) -> int:
        try:
            return frequency_to_multiplier[frequency.upper()]
        except KeyError:
            raise ValueError(f"Unsupported frequency: {frequency}") from None

    @staticmethod
    def annualize_volatility(volatility, frequency: str = RETURN_FREQUENCY):
        """
        Convert raw volatility to annualized form.

        Parameters
        ----------
        volatility : float or numpy.ndarray
            Raw (non-annualized) volatility
        frequency : str, default "M"
            Data frequency for annualization

        Returns
        -------
        float or numpy.ndarray
            Annualized volatility (same type as input)
        """
        multiplier = RiskAnnualizer.periods_per_year(frequency)
        if hasattr(volatility, '__iter__'):
            return np.asarray(volatility, dtype=float) * np.sqrt(multiplier)
        if volatility == 0:
            return 0.0
        return float(volatility) * float(np.sqrt(multiplier))

    @staticmethod
    def de_annualize_volatility(annualized_volatility: float, frequency: str = RETURN_FREQUENCY) -> float:
        """Convert annualized volatility back to raw per-period form."""
        if annualized_volatility == 0:
            return 0.0
        return float(annualized_volatility) / float(np.sqrt(RiskAnnualizer.periods_per_year(frequency)))

    @staticmethod
    def annualize_return(period_return: float, frequency: str = RETURN_FREQUENCY) -> float:
        """Compound a mean per-period return to a yearly one."""
        return float((1.0 + period_return) ** RiskAnnualizer.periods_per_year(frequency) - 1.0)

    @staticmethod
    def annualize_risk_results(results: Dict[str, Any], frequency: str = RETURN_FREQUENCY) -> Dict[str, Any]:
        """
        Annualized copy of a risk results dictionary.

        Volatility-like scalars and every ``contribution`` entry are scaled;
        percentages, ratios and weights are left as they are.
        """
        if not results:
            return results

        scale = float(np.sqrt(RiskAnnualizer.periods_per_year(frequency)))
        annualized = dict(results)

        for key in RiskAnnualizer.VOLATILITY_KEYS:
            if isinstance(annualized.get(key), (int, float)):
                annualized[key] = annualized[key] * scale

        annualized['riskContributions'] = [
            {**item, 'contribution': item['contribution'] * scale}
            for item in annualized.get('riskContributions', [])
        ]
        annualized['calculationSteps'] = [
            {
                **step,
                'individualVolatility': step['individualVolatility'] * scale,
                'marginalContribution': step['marginalContribution'] * scale,
                'contribution': step['contribution'] * scale,
                'portfolioVolatility': step['portfolioVolatility'] * scale,
            }
            for step in annualized.get('calculationSteps', [])
        ]

        annualized['annualized'] = True
        annualized['frequency'] = frequency
        return annualized


def annualized_volatility(returns, frequency: str = RETURN_FREQUENCY) -> float:
    """Sample volatility of ``returns`` scaled to a yearly horizon."""
    return RiskAnnualizer.annualize_volatility(volatility(returns), frequency)
