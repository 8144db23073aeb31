from ._shared import MedoidAlgorithm, assign_clients_to_medoids, clustering_cost
from .fractional import FractionalSolution, solve_fractional
from .lp_rounding import (
    LPRoundingConfig,
    LPRoundingResult,
    lp_rounding_k_medoids,
    lp_rounding_k_medoids_detailed,
    solve,
)

__all__ = [
    "FractionalSolution",
    "LPRoundingConfig",
    "LPRoundingResult",
    "MedoidAlgorithm",
    "assign_clients_to_medoids",
    "clustering_cost",
    "lp_rounding_k_medoids",
    "lp_rounding_k_medoids_detailed",
    "solve",
    "solve_fractional",
]
