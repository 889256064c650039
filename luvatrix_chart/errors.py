from __future__ import annotations


class ChartContractError(ValueError):
    """Raised when a caller breaks a documented precondition."""


class ChartDataError(ValueError):
    """Raised when input cannot be turned into finite chart points."""
