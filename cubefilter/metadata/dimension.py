"""
Pydantic dimension declaration for cubefilter metadata.

A dimension declares the hierarchy it is restricted and grouped on, the
level within that hierarchy and the complete universe of its members.
"""

from math import prod

from pydantic import Field, NonNegativeInt, field_validator

from ..errors import ArgumentError
from .base import MetadataObject


class DimensionSpec(MetadataObject):
    """Declared dimension of a remote cube."""

    hierarchy: str = Field(
        ..., min_length=1, description="Hierarchy identifier used by the engine"
    )
    level: NonNegativeInt = Field(..., description="Level index in the hierarchy")
    members: tuple[str, ...] = Field(
        ..., description="All member identifiers, the unfiltered universe"
    )

    @field_validator("members", mode="before")
    @classmethod
    def validate_members_sequence(cls, v):
        """Members must be given as a list, a bare string is not a list of
        members."""
        if isinstance(v, str | bytes) or not isinstance(v, list | tuple):
            raise ValueError("members must be a list of member identifiers")
        return v

    @field_validator("members")
    @classmethod
    def validate_unique_members(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        seen = set()
        for member in v:
            if member in seen:
                raise ValueError(f"duplicate member '{member}'")
            seen.add(member)
        return v

    @property
    def cardinality(self) -> int:
        """Number of declared members."""
        return len(self.members)

    def has_member(self, member: str) -> bool:
        return member in self.members

    def members_in_range(self, lower, upper) -> list[str]:
        """Return declared members ``m`` with ``lower <= m < upper`` in
        declaration order."""
        try:
            return [m for m in self.members if lower <= m < upper]
        except TypeError as e:
            raise ArgumentError(
                f"Members of dimension '{self.name}' can not be compared "
                f"with range [{lower!r}, {upper!r}): {e}"
            ) from e

    def __repr__(self):
        return (
            f"<DimensionSpec(name='{self.name}', hierarchy='{self.hierarchy}', "
            f"members={len(self.members)})>"
        )


def cross_product_size(dimensions) -> int:
    """Return the number of cells of the cross product of all dimension
    member universes."""
    return prod(len(dim.members) for dim in dimensions)
