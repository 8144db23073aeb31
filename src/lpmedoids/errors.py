from __future__ import annotations


class LPMedoidsError(Exception):
    """Base class for all errors raised by lpmedoids."""


class InvalidArgument(LPMedoidsError, ValueError):
    """Raised for malformed inputs: k out of range, bad matrix shapes, negative distances."""


class SolverFailure(LPMedoidsError, RuntimeError):
    """Raised when the LP relaxation could not be solved to optimality."""

    def __init__(self, status: str, message: str | None = None) -> None:
        self.status = status
        super().__init__(message or f"LP solver finished with status {status!r}.")


class InternalInvariantViolation(LPMedoidsError, AssertionError):
    """Raised when a rounding phase breaks one of its own postconditions."""


class SamplingNonconvergent(LPMedoidsError, RuntimeError):
    """Raised when the sampling phase exhausts its trial budget without opening exactly k facilities."""

    def __init__(self, trials: int, k: int) -> None:
        self.trials = trials
        self.k = k
        super().__init__(
            f"Could not open exactly k={k} facilities after {trials} sampling trials; "
            "retry with a different random_state or a larger max_trials."
        )
