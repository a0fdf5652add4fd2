"""
Cube metadata models.

Pydantic models describing the remote cube an adapter queries: the cube and
schema identity, its measures and its dimensions with their member
universes. Metadata are validated once at adapter construction.
"""

from .base import MetadataObject
from .cube import REQUIRED_API_METHODS, CubeMetadata, ValidationResult, validate_metadata
from .dimension import DimensionSpec, cross_product_size
from .utils import read_metadata

__all__ = [
    "MetadataObject",
    "DimensionSpec",
    "CubeMetadata",
    "ValidationResult",
    "validate_metadata",
    "read_metadata",
    "cross_product_size",
    "REQUIRED_API_METHODS",
]
