from .instances import InstanceConfig, MedoidInstance, blob_instance, random_instance
from .minkowski import MinkowskiParams, pairwise_minkowski

__all__ = [
    "InstanceConfig",
    "MedoidInstance",
    "MinkowskiParams",
    "blob_instance",
    "pairwise_minkowski",
    "random_instance",
]
