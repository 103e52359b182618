"""
Schema field descriptors.

Each descriptor is an immutable pydantic model for one indexed field and knows
how to serialise itself into the tokens that follow `SCHEMA`:

    {name} [AS {alias}] TEXT [NOSTEM] [WEIGHT {w}] [PHONETIC {m}] [SORTABLE] [NOINDEX]
    {name} [AS {alias}] NUMERIC [SORTABLE] [NOINDEX]
    {name} [AS {alias}] GEO [SORTABLE] [NOINDEX]
    {name} [AS {alias}] TAG [SEPARATOR {sep}] [SORTABLE] [NOINDEX]
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from search_builder.core.arguments import ArgumentAssembler, Clause, Token, fixed, flag, keyword_value


class FieldType(str, Enum):
    """Field types understood by the engine."""
    TEXT = "TEXT"
    NUMERIC = "NUMERIC"
    GEO = "GEO"
    TAG = "TAG"


PHONETIC_MATCHERS = ("dm:en", "dm:fr", "dm:pt", "dm:es")


class BaseSchemaField(BaseModel):
    """Attributes shared by every field type."""

    model_config = ConfigDict(frozen=True)

    name: str
    alias: Optional[str] = None
    sortable: bool = False
    no_index: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Field name must not be empty")
        return value

    @field_validator("alias")
    @classmethod
    def validate_alias(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("Field alias must not be blank")
        return value

    @property
    def field_type(self) -> FieldType:
        return FieldType(self.type)  # type: ignore[attr-defined]

    @property
    def identifier(self) -> str:
        """Name the field is addressed by in queries (`@identifier`)."""
        return self.alias or self.name

    def _type_clauses(self) -> List[Clause]:
        """Type-specific modifier clauses, written right after the type keyword."""
        return []

    def _clauses(self) -> List[Clause]:
        return [
            fixed("name", self.name),
            keyword_value("AS", self.alias),
            fixed("type", self.field_type.value),
            *self._type_clauses(),
            flag("SORTABLE", self.sortable),
            flag("NOINDEX", self.no_index),
        ]

    @property
    def field_arguments(self) -> Tuple[Token, ...]:
        """Tokens this field contributes to the SCHEMA section."""
        return ArgumentAssembler.assemble(self._clauses())


class TextField(BaseSchemaField):
    """Full-text field."""

    type: Literal["TEXT"] = "TEXT"
    no_stem: bool = False
    weight: float = Field(default=1.0, gt=0)
    phonetic: Optional[str] = None

    @field_validator("phonetic")
    @classmethod
    def validate_phonetic(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in PHONETIC_MATCHERS:
            raise ValueError(
                f"Unknown phonetic matcher '{value}'. Valid matchers: {list(PHONETIC_MATCHERS)}"
            )
        return value

    def _type_clauses(self) -> List[Clause]:
        return [
            flag("NOSTEM", self.no_stem),
            keyword_value("WEIGHT", self.weight, present=self.weight != 1.0),
            keyword_value("PHONETIC", self.phonetic),
        ]


class NumericField(BaseSchemaField):
    """Numeric field, filterable by range."""

    type: Literal["NUMERIC"] = "NUMERIC"


class GeoField(BaseSchemaField):
    """Longitude/latitude field, filterable by radius."""

    type: Literal["GEO"] = "GEO"


class TagField(BaseSchemaField):
    """Exact-match tag field."""

    type: Literal["TAG"] = "TAG"
    separator: Optional[str] = None

    @field_validator("separator")
    @classmethod
    def validate_separator(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and len(value) != 1:
            raise ValueError(f"Tag separator must be a single character, got '{value}'")
        return value

    def _type_clauses(self) -> List[Clause]:
        return [keyword_value("SEPARATOR", self.separator)]


SchemaField = Annotated[
    Union[TextField, NumericField, GeoField, TagField],
    Field(discriminator="type"),
]
