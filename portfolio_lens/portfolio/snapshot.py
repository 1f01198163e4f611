"""
Portfolio Snapshot Value Types
==============================

Immutable containers handed between the generator, the window filter and
the analytics engines: the benchmark series, the calendar timeframe, the
snapshot itself and the allocation settings used to synthesize a tree.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from .components import Asset, AssetClass
from .graph import PortfolioGraph, collect_leaves
from .visitors import ALLOCATION_TOLERANCE


def shift_months(when: date, months: int) -> date:
    """Move ``when`` back by ``months`` calendar months (clamped to month end)."""
    return (pd.Timestamp(when) - pd.DateOffset(months=months)).date()


@dataclass(frozen=True)
class BenchmarkSeries:
    """Named monthly benchmark return series."""
    name: str
    returns: Tuple[float, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, 'returns', tuple(float(r) for r in self.returns))

    def tail(self, months: int) -> 'BenchmarkSeries':
        return replace(self, returns=trailing(self.returns, months))


@dataclass(frozen=True)
class Timeframe:
    """Calendar window covered by a snapshot's return series."""
    start_date: date
    end_date: date

    @classmethod
    def ending(cls, end_date: date, months: int) -> 'Timeframe':
        return cls(start_date=shift_months(end_date, months), end_date=end_date)


def trailing(values: Tuple[float, ...], months: int) -> Tuple[float, ...]:
    """Last ``months`` entries of ``values``; the whole series if it is shorter."""
    if months <= 0:
        return ()
    return tuple(values[-months:])


@dataclass(frozen=True)
class PortfolioSnapshot:
    """A portfolio tree, its benchmarks and the window they cover."""
    root: AssetClass
    benchmarks: Mapping[str, BenchmarkSeries]
    timeframe: Timeframe
    snapshot_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'benchmarks', dict(self.benchmarks))

    @property
    def graph(self) -> PortfolioGraph:
        return PortfolioGraph(self.root)

    def leaves(self) -> List[Asset]:
        return collect_leaves(self.root)

    @property
    def horizon(self) -> int:
        """Number of monthly periods carried by the leaves."""
        lengths = [leaf.periods for leaf in self.leaves()]
        return max(lengths) if lengths else 0

    def benchmark_returns(self, name: str) -> Tuple[float, ...]:
        """Returns of benchmark ``name``, empty if the benchmark is absent."""
        series = self.benchmarks.get(name)
        return series.returns if series is not None else ()

    def with_benchmark(self, name: str, returns: Iterable[float]) -> 'PortfolioSnapshot':
        """New snapshot with ``name`` added or replaced (e.g. a Custom benchmark)."""
        series = BenchmarkSeries(name, tuple(returns))
        horizon = self.horizon
        if horizon and len(series.returns) != horizon:
            raise ValueError(
                f"Benchmark '{name}' has {len(series.returns)} periods, portfolio has {horizon}"
            )
        benchmarks = dict(self.benchmarks)
        benchmarks[name] = series
        return replace(self, benchmarks=benchmarks)

    def with_root(self, root: AssetClass) -> 'PortfolioSnapshot':
        return replace(self, root=root)

    def _period_index(self, periods: int) -> pd.PeriodIndex:
        return pd.period_range(end=pd.Period(self.timeframe.end_date, freq='M'), periods=periods, freq='M')

    def _frame(self, columns: Dict[str, Tuple[float, ...]]) -> pd.DataFrame:
        periods = max((len(v) for v in columns.values()), default=0)
        index = self._period_index(periods)
        data = {}
        for key, values in columns.items():
            # Align every series on its most recent period
            data[key] = pd.Series(values, index=index[periods - len(values):], dtype=float)
        return pd.DataFrame(data, index=index)

    def to_frame(self) -> pd.DataFrame:
        """Leaf returns as a DataFrame (monthly PeriodIndex, one column per leaf id)."""
        return self._frame({leaf.component_id: leaf.returns for leaf in self.leaves()})

    def benchmark_frame(self) -> pd.DataFrame:
        return self._frame({name: series.returns for name, series in self.benchmarks.items()})


@dataclass(frozen=True)
class AllocationSettings:
    """Split ratios, in percent, used to structure a synthesized tree."""
    public_vs_private: float = 70.0
    equities_vs_fixed_income: float = 60.0
    aud_vs_fx: float = 60.0
    sovereign_vs_non_sovereign: float = 60.0
    real_estate: float = 40.0
    infrastructure: float = 30.0
    private_equity: float = 30.0

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not np.isfinite(value) or not 0.0 <= value <= 100.0:
                raise ValueError(f"Allocation '{f.name}' must be within [0, 100], got {value}")

    @property
    def private_total(self) -> float:
        return self.real_estate + self.infrastructure + self.private_equity

    def validate(self, tolerance: float = ALLOCATION_TOLERANCE) -> List[str]:
        """Issues with the settings; the private triple must sum to 100%."""
        issues = []
        if abs(self.private_total - 100.0) > tolerance:
            issues.append(f"Private allocation does not sum to 100%: {self.private_total}%")
        return issues

    def to_dict(self) -> Dict[str, Any]:
        return {
            'public_vs_private': self.public_vs_private,
            'equities_vs_fixed_income': self.equities_vs_fixed_income,
            'aud_vs_fx': self.aud_vs_fx,
            'sovereign_vs_non_sovereign': self.sovereign_vs_non_sovereign,
            'private_allocation': {
                'real_estate': self.real_estate,
                'infrastructure': self.infrastructure,
                'private_equity': self.private_equity,
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'AllocationSettings':
        """Build settings from a nested dictionary as produced by ``to_dict``."""
        data = dict(data or {})
        private = dict(data.pop('private_allocation', {}) or {})
        defaults = cls()
        return cls(
            public_vs_private=float(data.get('public_vs_private', defaults.public_vs_private)),
            equities_vs_fixed_income=float(data.get('equities_vs_fixed_income', defaults.equities_vs_fixed_income)),
            aud_vs_fx=float(data.get('aud_vs_fx', defaults.aud_vs_fx)),
            sovereign_vs_non_sovereign=float(data.get('sovereign_vs_non_sovereign', defaults.sovereign_vs_non_sovereign)),
            real_estate=float(private.get('real_estate', data.get('real_estate', defaults.real_estate))),
            infrastructure=float(private.get('infrastructure', data.get('infrastructure', defaults.infrastructure))),
            private_equity=float(private.get('private_equity', data.get('private_equity', defaults.private_equity))),
        )
