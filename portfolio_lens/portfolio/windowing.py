"""
Time-window filtering of portfolio snapshots.

Truncates every leaf and benchmark series to the trailing months of a
lookback period and recomputes the snapshot's start date. The input
snapshot is never modified.
"""

from dataclasses import replace
from datetime import date
import logging

from ..core.mappers import period_to_months
from .components import AssetClass, PortfolioComponent
from .snapshot import PortfolioSnapshot, Timeframe, trailing

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30


def ytd_months(end_date: date, exact: bool = False) -> int:
    """
    Whole months elapsed between 1 January of ``end_date``'s year and ``end_date``.

    By default elapsed days are divided by 30; ``exact=True`` counts
    calendar months instead. At least one month is always returned so a
    January window still holds the current month.
    """
    start_of_year = date(end_date.year, 1, 1)
    if exact:
        months = end_date.month - 1
    else:
        months = (end_date - start_of_year).days // DAYS_PER_MONTH
    return max(1, months)


def months_for_period(period: str, end_date: date, exact_ytd: bool = False) -> int:
    """Map a symbolic lookback period to a month count."""
    key = period.upper()
    if key == "YTD":
        return ytd_months(end_date, exact=exact_ytd)
    try:
        return period_to_months[key]
    except KeyError:
        raise ValueError(f"Unknown time period: {period}") from None


def _truncate(component: PortfolioComponent, months: int) -> PortfolioComponent:
    if isinstance(component, AssetClass):
        return component.with_children(_truncate(child, months) for child in component.children)
    return component.with_returns(trailing(component.returns, months))


def filter_to_window(snapshot: PortfolioSnapshot, period: str, exact_ytd: bool = False) -> PortfolioSnapshot:
    """
    New snapshot restricted to the trailing months of ``period``.

    Parameters
    ----------
    snapshot : PortfolioSnapshot
        Source snapshot, left untouched
    period : str
        One of 1M, 3M, 6M, 1Y, 3Y, 5Y, 10Y, YTD
    exact_ytd : bool, default False
        Use calendar-month arithmetic for YTD instead of day-count / 30

    Returns
    -------
    PortfolioSnapshot
        Snapshot whose series are suffix slices of the originals; series
        shorter than the window are kept whole.
    """
    end_date = snapshot.timeframe.end_date
    months = months_for_period(period, end_date, exact_ytd=exact_ytd)

    root = _truncate(snapshot.root, months)
    benchmarks = {name: series.tail(months) for name, series in snapshot.benchmarks.items()}
    timeframe = Timeframe.ending(end_date, months)

    logger.debug(f"Filtered snapshot to {period} ({months} months) ending {end_date}")
    return replace(snapshot, root=root, benchmarks=benchmarks, timeframe=timeframe)


filter_portfolio_data_by_time_period = filter_to_window
