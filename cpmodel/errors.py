"""
Exceptions raised by the changepoint search.

Every exception derives from ChangepointError, itself a ValueError, so callers
that treat ValueError as a user-correctable problem (the CLI does) handle the
whole family without special cases.
"""

from typing import Any, List, Optional


class ChangepointError(ValueError):
    """Base exception for changepoint fitting errors."""

    pass


class InsufficientDataError(ChangepointError):
    """Raised when the data cannot support the requested model shape."""

    def __init__(
        self,
        shape: str,
        required: Optional[int] = None,
        given: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> None:
        self.shape = shape
        self.required = required
        self.given = given

        if reason is None:
            reason = (
                f"at least {required} distinct x values are required, {given} given"
            )
        super().__init__(f"{shape}: {reason}")


class RegressionEngineError(ChangepointError):
    """Raised when the OLS engine cannot produce a usable fit."""

    pass


class FitCandidateError(ChangepointError):
    """Raised when a single grid candidate cannot be evaluated."""

    def __init__(self, shape: str, candidate: Any, cause: Exception) -> None:
        self.shape = shape
        self.candidate = candidate
        self.cause = cause
        super().__init__(f"{shape}: candidate {candidate!r} failed: {cause}")


class DegenerateFitError(ChangepointError):
    """Raised when a closed-form split has a zero or near-zero denominator."""

    def __init__(self, shape: str, split_index: int, detail: str) -> None:
        self.shape = shape
        self.split_index = split_index
        super().__init__(f"{shape}: split m={split_index} is degenerate ({detail})")


class NoViableCandidateError(ChangepointError):
    """Raised when every candidate of a search failed."""

    def __init__(self, shape: str, failures: List[ChangepointError]) -> None:
        self.shape = shape
        self.failures = list(failures)
        msg = f"{shape}: all {len(self.failures)} candidates failed"
        if self.failures:
            msg = f"{msg}; first failure: {self.failures[0]}"
        super().__init__(msg)
