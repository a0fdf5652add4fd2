"""
Pydantic base class for cubefilter metadata models.

Metadata objects are validated once, when the adapter is constructed, and
are immutable afterwards.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MetadataObject(BaseModel):
    """
    Base class for cubefilter metadata objects.

    Instances are frozen: metadata never changes for the lifetime of an
    adapter.
    """

    model_config = ConfigDict(
        # Extra keys of the metadata document are kept, not rejected
        extra="allow",
        frozen=True,
        populate_by_name=True,
    )

    name: str | None = Field(None, description="Identifier of the object")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        """Validate that name is a non-empty string when provided."""
        if v is not None and (not isinstance(v, str) or not v.strip()):
            raise ValueError("name must be a non-empty string")
        return v

    def __str__(self) -> str:
        return self.name or f"<{self.__class__.__name__}>"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"

    def to_dict(self, **options: Any) -> dict[str, Any]:
        """Metadata document of the object, unset fields omitted."""
        return self.model_dump(exclude_none=True, **options)
