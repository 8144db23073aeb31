"""
lpmedoids - LP-rounding approximation for k-medoids.

This package provides:
- the LP relaxation of k-median and its dependent randomized rounding
  (filtering, bundling, matching, sampling)
- rectangular Minkowski distances and synthetic instances
- experiment orchestration and analysis utilities
"""

from .algorithms import LPRoundingConfig, solve
from .errors import (
    InternalInvariantViolation,
    InvalidArgument,
    LPMedoidsError,
    SamplingNonconvergent,
    SolverFailure,
)

__all__ = [
    "InternalInvariantViolation",
    "InvalidArgument",
    "LPMedoidsError",
    "LPRoundingConfig",
    "SamplingNonconvergent",
    "SolverFailure",
    "solve",
]
