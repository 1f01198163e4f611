"""Exception taxonomy for the portfolio analytics core."""

from typing import Optional


class PortfolioLensError(RuntimeError):
    """Base class for library-level errors."""

    code = "PORTFOLIO_LENS_ERROR"

    def __init__(self, message: str, *, user_message: Optional[str] = None) -> None:
        super().__init__(message)
        self.user_message = user_message or message


class NotFound(PortfolioLensError, KeyError):
    """A node id could not be resolved in the portfolio tree."""

    code = "NOT_FOUND"

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Node '{node_id}' not found in portfolio tree")
        self.node_id = node_id

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class NoReturnData(PortfolioLensError):
    """No leaf in the portfolio carries a non-empty return series."""

    code = "NO_RETURN_DATA"


class NumericalError(PortfolioLensError):
    """A matrix operation failed, e.g. a covariance that is not positive semi-definite."""

    code = "NUMERICAL_ERROR"


class ComputationFailed(PortfolioLensError):
    """Caller-facing failure raised or reported at the worker boundary."""

    code = "COMPUTATION_FAILED"
