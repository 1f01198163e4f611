frequency_to_multiplier = {
    "D": 365,      # Daily
    "B": 252,      # Business day

    # Weekly
    "W": 52, "W-SUN": 52, "W-MON": 52, "W-FRI": 52,

    # Monthly
    "M": 12,       # Month end
    "MS": 12,      # Month start
    "ME": 12,      # Alias used in some packages

    # Quarterly
    "Q": 4,
    "QS": 4,
    "QE": 4,

    # Annual / Yearly
    "A": 1,
    "Y": 1,
    "YS": 1,
}

# Lookback periods selectable by callers, in months.
# YTD is resolved against the snapshot's end date, see portfolio.windowing.
period_to_months = {
    "1M": 1,
    "3M": 3,
    "6M": 6,
    "1Y": 12,
    "3Y": 36,
    "5Y": 60,
    "10Y": 120,
}

TIME_PERIODS = ("1M", "3M", "6M", "1Y", "3Y", "5Y", "10Y", "YTD")

BENCHMARKS = ("Market", "S&P500", "MSCI World", "Custom")

SCENARIOS = ("normal", "bullish", "bearish")

VOLATILITY_LEVELS = ("low", "medium", "high")

# Returns in this package are monthly
RETURN_FREQUENCY = "M"
