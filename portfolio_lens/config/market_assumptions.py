"""
Capital market assumptions used by the synthetic data generator.

Loads the per-class return/volatility table, the class correlation matrix,
scenario and volatility-level multipliers, benchmark parameters and the
instrument lists from a YAML file (``assumptions.yaml`` next to this module
by default).
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple
import logging

import numpy as np
import yaml

logger = logging.getLogger(__name__)

DEFAULT_ASSUMPTIONS_PATH = Path(__file__).with_name("assumptions.yaml")


@dataclass(frozen=True)
class ReturnParams:
    """Monthly mean return and volatility of a return-generating process."""
    mean_return: float
    volatility: float
    name: Optional[str] = None


@dataclass(frozen=True)
class ScenarioMultipliers:
    return_multiplier: float = 1.0
    volatility_multiplier: float = 1.0


@dataclass(frozen=True)
class InstrumentSpec:
    """One investable instrument inside an asset class."""
    instrument_id: str
    name: str
    allocation: float
    idiosyncratic_factor: float


@dataclass
class MarketAssumptions:
    """
    Static inputs of the correlated return generator.

    ``asset_classes`` is ordered; its order is the row/column order of
    ``correlation``.
    """
    asset_classes: Dict[str, ReturnParams]
    correlation: np.ndarray
    scenarios: Dict[str, ScenarioMultipliers]
    volatility_levels: Dict[str, float]
    benchmarks: Dict[str, ReturnParams]
    instruments: Dict[str, List[InstrumentSpec]] = field(default_factory=dict)

    def __post_init__(self):
        self.correlation = np.asarray(self.correlation, dtype=float)
        n = len(self.asset_classes)
        if self.correlation.shape != (n, n):
            raise ValueError(
                f"Correlation matrix shape {self.correlation.shape} does not match {n} asset classes"
            )
        if not np.allclose(self.correlation, self.correlation.T):
            raise ValueError("Correlation matrix must be symmetric")
        if not np.allclose(np.diag(self.correlation), 1.0):
            raise ValueError("Correlation matrix must have a unit diagonal")

    @property
    def class_keys(self) -> List[str]:
        return list(self.asset_classes)

    def scenario(self, scenario: str) -> ScenarioMultipliers:
        try:
            return self.scenarios[scenario]
        except KeyError:
            raise ValueError(
                f"Unknown scenario '{scenario}'. Expected one of: {', '.join(self.scenarios)}"
            ) from None

    def volatility_multiplier(self, volatility_level: str) -> float:
        try:
            return self.volatility_levels[volatility_level]
        except KeyError:
            raise ValueError(
                f"Unknown volatility level '{volatility_level}'. "
                f"Expected one of: {', '.join(self.volatility_levels)}"
            ) from None

    def adjust(self, params: ReturnParams, scenario: str, volatility_level: str) -> ReturnParams:
        """Apply scenario and volatility-level multipliers to one parameter pair."""
        multipliers = self.scenario(scenario)
        level = self.volatility_multiplier(volatility_level)
        return ReturnParams(
            mean_return=params.mean_return * multipliers.return_multiplier,
            volatility=params.volatility * multipliers.volatility_multiplier * level,
            name=params.name,
        )

    def adjusted_params(self, scenario: str, volatility_level: str) -> Tuple[np.ndarray, np.ndarray]:
        """Adjusted ``(means, volatilities)`` vectors in class order."""
        adjusted = [self.adjust(p, scenario, volatility_level) for p in self.asset_classes.values()]
        means = np.array([p.mean_return for p in adjusted])
        vols = np.array([p.volatility for p in adjusted])
        return means, vols

    def adjusted_benchmarks(self, scenario: str, volatility_level: str) -> Dict[str, ReturnParams]:
        return {
            name: self.adjust(params, scenario, volatility_level)
            for name, params in self.benchmarks.items()
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'MarketAssumptions':
        asset_classes = {
            key: ReturnParams(
                mean_return=float(spec['mean_return']),
                volatility=float(spec['volatility']),
                name=spec.get('name', key),
            )
            for key, spec in data['asset_classes'].items()
        }
        scenarios = {
            key: ScenarioMultipliers(
                return_multiplier=float(spec.get('return_multiplier', 1.0)),
                volatility_multiplier=float(spec.get('volatility_multiplier', 1.0)),
            )
            for key, spec in data['scenarios'].items()
        }
        benchmarks = {
            name: ReturnParams(float(spec['mean_return']), float(spec['volatility']), name=name)
            for name, spec in data.get('benchmarks', {}).items()
        }
        instruments = {
            key: [
                InstrumentSpec(
                    instrument_id=str(item['id']),
                    name=str(item['name']),
                    allocation=float(item['allocation']),
                    idiosyncratic_factor=float(item.get('idiosyncratic_factor', 0.0)),
                )
                for item in items
            ]
            for key, items in data.get('instruments', {}).items()
        }
        return cls(
            asset_classes=asset_classes,
            correlation=np.array(data['correlation'], dtype=float),
            scenarios=scenarios,
            volatility_levels={k: float(v) for k, v in data['volatility_levels'].items()},
            benchmarks=benchmarks,
            instruments=instruments,
        )


def load_market_assumptions(path: Optional[str] = None) -> MarketAssumptions:
    """
    Load market assumptions from YAML.

    Args:
        path: Assumptions file; the packaged ``assumptions.yaml`` when omitted

    Returns:
        Parsed and validated MarketAssumptions

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is malformed
    """
    assumptions_path = Path(path) if path else DEFAULT_ASSUMPTIONS_PATH
    with open(assumptions_path, 'r') as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Market assumptions file {assumptions_path} is empty or malformed")

    try:
        assumptions = MarketAssumptions.from_dict(data)
    except KeyError as e:
        raise ValueError(f"Market assumptions file {assumptions_path} is missing section {e}") from e

    logger.debug(
        f"Loaded market assumptions from {assumptions_path}: "
        f"{len(assumptions.asset_classes)} asset classes, {len(assumptions.benchmarks)} benchmarks"
    )
    return assumptions
