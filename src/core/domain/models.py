"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation of API payloads at the edge, with self-documenting Fields,
  without coupling the core to any I/O library.
- `extra="ignore"` keeps us tolerant of attributes the API adds over time.

Note:
- These models describe *what* a collection is, not *how* it is fetched.
- Items stay plain dicts: their shape is only known from the collection schema.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

RawItem = dict[str, Any]
PopulatedItem = dict[str, Any]


class FieldKind(str, Enum):
    """Resolution strategy derived from a field's wire type tag."""

    SCALAR = "Scalar"
    SINGLE_REFERENCE = "ItemRef"
    REFERENCE_SET = "ItemRefSet"
    OPTION = "Option"

    @classmethod
    def from_type(cls, type_tag: str | None) -> "FieldKind":
        """Map a wire type tag to its kind; unknown tags are scalars."""

        for kind in (cls.SINGLE_REFERENCE, cls.REFERENCE_SET, cls.OPTION):
            if type_tag == kind.value:
                return kind
        return cls.SCALAR


class OptionChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Option identifier stored in items.")
    name: str = Field(..., description="Human display name of the option.")


class FieldValidations(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    collection_id: str | None = Field(
        default=None,
        alias="collectionId",
        description="Target collection of ItemRef/ItemRefSet fields.",
    )
    options: list[OptionChoice] = Field(
        default_factory=list,
        description="Declared choices of Option fields, in order.",
    )


class FieldDefinition(BaseModel):
    """Schema-level description of one item attribute."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    slug: str = Field(..., min_length=1, description="Wire name of the field in raw items.")
    name: str = Field(default="", description="Human display name.")
    type: str = Field(default="PlainText", description="Wire type tag (ItemRef, Option, ...).")
    validations: FieldValidations = Field(
        default_factory=FieldValidations,
        description="Type-specific metadata (target collection, options).",
    )

    @property
    def kind(self) -> FieldKind:
        return FieldKind.from_type(self.type)

    @property
    def target_collection_id(self) -> str | None:
        return self.validations.collection_id

    def option_name(self, option_id: object) -> str | None:
        for option in self.validations.options:
            if option.id == option_id:
                return option.name
        return None


class CollectionSummary(BaseModel):
    """A collection as returned by "list collections" (no field list)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    id: str = Field(..., alias="_id", min_length=1, description="Collection identifier.")
    name: str = Field(..., description="Display name (plural, e.g. 'Blog Posts').")
    singular_name: str | None = Field(
        default=None,
        alias="singularName",
        description="Singular display name (e.g. 'Blog Post').",
    )
    slug: str | None = Field(default=None, description="URL slug of the collection.")

    def matches_name(self, name: str) -> bool:
        return name == self.name or name == self.singular_name


class Collection(CollectionSummary):
    """A collection schema: the summary plus its ordered field definitions."""

    fields: tuple[FieldDefinition, ...] = Field(
        default=(),
        description="Ordered field definitions of the collection.",
    )


@dataclass(frozen=True)
class FieldRule:
    """Move the value at `source` (dotted path) to `destination` (dotted path)."""

    source: str
    destination: str

    @classmethod
    def parse(cls, text: str) -> "FieldRule":
        """Parse `source=destination`."""

        source, sep, destination = text.partition("=")
        source = source.strip()
        destination = destination.strip()
        if not sep or not source or not destination:
            raise ValueError(f"Invalid field rule {text!r}; expected SOURCE=DESTINATION")
        return cls(source=source, destination=destination)


@dataclass
class PopulateOptions:
    """Output shaping applied after every item is populated."""

    rules: list[FieldRule] = field(default_factory=list)
    index: bool = False
    index_by: str = "id"
