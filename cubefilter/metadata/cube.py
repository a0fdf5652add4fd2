"""
Cube metadata document and its validation.

The metadata document describes the remote cube an adapter queries::

    {
        "api": <query engine object>,
        "schema": "<schema id>",
        "cube": "<cube id>",
        "measures": ["<default measure id>", "<measure id>", ...],
        "dimensions": {
            "<dimension id>": {
                "hierarchy": "<hierarchy id>",
                "level": <level index>,
                "members": ["<member id>", ...],
            },
            ...
        },
    }
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import Field, ValidationError, field_validator

from ..common import ALL_KEY
from ..errors import MalformedMetadata, UnknownDimension
from .base import MetadataObject
from .dimension import DimensionSpec, cross_product_size

__all__ = [
    "CubeMetadata",
    "ValidationResult",
    "validate_metadata",
    "REQUIRED_API_METHODS",
]

# Methods an engine object must provide to be usable as `api`
REQUIRED_API_METHODS = (
    "clear",
    "select_cube",
    "select_measure",
    "restrict",
    "group_by",
    "execute",
)


class CubeMetadata(MetadataObject):
    """Validated metadata of a remote cube."""

    api: Any = Field(..., description="Query engine implementing the contract")
    schema_name: str = Field(..., alias="schema", description="Schema identifier")
    cube: str = Field(..., description="Cube identifier")
    measures: list[str] = Field(..., min_length=1, description="Measure ids")
    dimensions: dict[str, DimensionSpec] = Field(
        ..., min_length=1, description="Declared dimensions by id"
    )

    @field_validator("api")
    @classmethod
    def validate_api(cls, v: Any) -> Any:
        if v is None or isinstance(v, str | int | float | bool | list | dict):
            raise ValueError("api must be a query engine object")

        missing = [
            name for name in REQUIRED_API_METHODS if not callable(getattr(v, name, None))
        ]
        if missing:
            raise ValueError(f"api is missing methods: {', '.join(missing)}")
        return v

    @field_validator("measures", mode="before")
    @classmethod
    def validate_measures_sequence(cls, v):
        if isinstance(v, str) or not isinstance(v, list | tuple):
            raise ValueError("measures must be a list of measure identifiers")
        return list(v)

    @field_validator("measures")
    @classmethod
    def validate_unique_measures(cls, v: list[str]) -> list[str]:
        if len(set(v)) != len(v):
            raise ValueError("measures must not contain duplicates")
        return v

    @field_validator("dimensions", mode="before")
    @classmethod
    def convert_dimensions(cls, v):
        """Name every dimension declaration after its key."""
        if not isinstance(v, Mapping):
            raise ValueError("dimensions must be a mapping of dimension id to declaration")

        result = {}
        for dim_id, spec in v.items():
            if dim_id == ALL_KEY:
                raise ValueError(f"dimension id '{ALL_KEY}' is reserved")
            if isinstance(spec, Mapping) and "name" not in spec:
                spec = dict(spec, name=dim_id)
            result[dim_id] = spec
        return result

    @property
    def schema_id(self) -> str:
        return self.schema_name

    @property
    def default_measure(self) -> str:
        """The first declared measure, used when a read names none."""
        return self.measures[0]

    @property
    def dimension_names(self) -> list[str]:
        """Dimension ids in declaration order."""
        return list(self.dimensions)

    def has_dimension(self, name: str) -> bool:
        return name in self.dimensions

    def dimension(self, name: str) -> DimensionSpec:
        """Return the declaration of dimension `name`. Raises
        `UnknownDimension` if it is not declared."""
        try:
            return self.dimensions[name]
        except (KeyError, TypeError):
            raise UnknownDimension(name) from None

    def size(self) -> int:
        """Cardinality of the cross product of all member universes."""
        return cross_product_size(self.dimensions.values())

    def to_dict(self, **options: Any) -> dict[str, Any]:
        """Serializable document without the engine object."""
        result = super().to_dict(exclude={"api"}, by_alias=True, **options)
        return result

    def __str__(self) -> str:
        return f"{self.schema_name}.{self.cube}"

    def __repr__(self) -> str:
        return (
            f"<CubeMetadata(schema='{self.schema_name}', cube='{self.cube}', "
            f"dimensions={len(self.dimensions)})>"
        )


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of metadata validation: either `metadata` is set or `errors`
    lists ``(field, message)`` for every invalid field."""

    metadata: CubeMetadata | None = None
    errors: list[tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.metadata is not None and not self.errors

    def unwrap(self) -> CubeMetadata:
        """Return the metadata or raise `MalformedMetadata`."""
        if not self.ok:
            fields = ", ".join(name for name, _ in self.errors)
            raise MalformedMetadata(
                f"Metadata are malformed: {fields}", errors=self.errors
            )
        return self.metadata


def _error_location(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "<document>"


def validate_metadata(document: Any) -> ValidationResult:
    """Validate a metadata document without raising.

    Accepts a mapping or an already validated `CubeMetadata`.
    """
    if isinstance(document, CubeMetadata):
        return ValidationResult(metadata=document)

    if not isinstance(document, Mapping):
        return ValidationResult(
            errors=[("<document>", f"metadata must be a mapping, not {type(document).__name__}")]
        )

    try:
        metadata = CubeMetadata.model_validate(dict(document))
    except ValidationError as e:
        errors = [(_error_location(err["loc"]), err["msg"]) for err in e.errors()]
        return ValidationResult(errors=errors)

    return ValidationResult(metadata=metadata)
