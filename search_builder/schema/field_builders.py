"""
Per-structure schema field builders.

The structure an index is declared ON decides how fields are addressed:
hash-backed indexes name hash fields directly, JSON-backed indexes address
document values with JSONPath expressions and usually alias them.
"""

import logging
from enum import Enum
from typing import List, Optional, Type

from pydantic import BaseModel

from search_builder.core.errors import ConfigurationError
from search_builder.schema.fields import (
    BaseSchemaField,
    FieldType,
    GeoField,
    NumericField,
    TagField,
    TextField,
)
from search_builder.schema.type_mappings import TypeMapper

logger = logging.getLogger(__name__)


class FieldBuilder:
    """
    Creates schema field descriptors for one storage structure.

    Subclasses validate the field names that are legal for their structure.
    """

    def text(
        self,
        name: str,
        alias: Optional[str] = None,
        no_stem: bool = False,
        weight: float = 1.0,
        phonetic: Optional[str] = None,
        sortable: bool = False,
        no_index: bool = False,
    ) -> TextField:
        """Create a TEXT field."""
        self.validate_name(name)
        return TextField(
            name=name,
            alias=alias,
            no_stem=no_stem,
            weight=weight,
            phonetic=phonetic,
            sortable=sortable,
            no_index=no_index,
        )

    def numeric(
        self,
        name: str,
        alias: Optional[str] = None,
        sortable: bool = False,
        no_index: bool = False,
    ) -> NumericField:
        """Create a NUMERIC field."""
        self.validate_name(name)
        return NumericField(name=name, alias=alias, sortable=sortable, no_index=no_index)

    def geo(
        self,
        name: str,
        alias: Optional[str] = None,
        sortable: bool = False,
        no_index: bool = False,
    ) -> GeoField:
        """Create a GEO field."""
        self.validate_name(name)
        return GeoField(name=name, alias=alias, sortable=sortable, no_index=no_index)

    def tag(
        self,
        name: str,
        alias: Optional[str] = None,
        separator: Optional[str] = None,
        sortable: bool = False,
        no_index: bool = False,
    ) -> TagField:
        """Create a TAG field."""
        self.validate_name(name)
        return TagField(
            name=name,
            alias=alias,
            separator=separator,
            sortable=sortable,
            no_index=no_index,
        )

    def from_model(self, model: Type[BaseModel]) -> List[BaseSchemaField]:
        """
        Derive schema fields from a pydantic model's annotations.

        Fields whose annotation has no index equivalent (nested models, dicts)
        are skipped.

        Args:
            model: Pydantic model class describing the stored records

        Returns:
            One descriptor per indexable model field, in declaration order
        """
        fields: List[BaseSchemaField] = []

        for field_name, field_info in model.model_fields.items():
            field_type = TypeMapper.get_field_type(field_info.annotation)
            if field_type is None:
                logger.debug(
                    "Skipping %s.%s: no index type for %r",
                    model.__name__, field_name, field_info.annotation,
                )
                continue

            fields.append(self.field_for(field_name, field_type))

        return fields

    def field_for(self, attribute: str, field_type: FieldType) -> BaseSchemaField:
        """Create a field of the given type for a record attribute."""
        name, alias = self.address(attribute)
        if field_type is FieldType.TEXT:
            return self.text(name, alias=alias)
        elif field_type is FieldType.NUMERIC:
            return self.numeric(name, alias=alias)
        elif field_type is FieldType.GEO:
            return self.geo(name, alias=alias)
        return self.tag(name, alias=alias)

    def address(self, attribute: str):
        """Field name and alias used to index a record attribute."""
        return attribute, None

    def validate_name(self, name: str) -> None:
        """Raise ConfigurationError if `name` cannot address a value in this structure."""


class HashFieldBuilder(FieldBuilder):
    """Fields of hash-backed indexes are plain hash field names."""

    def validate_name(self, name: str) -> None:
        if name.startswith("$"):
            raise ConfigurationError(
                f"Hash fields are addressed by name, not JSONPath: '{name}'"
            )


class JsonFieldBuilder(FieldBuilder):
    """Fields of JSON-backed indexes are JSONPath expressions."""

    def address(self, attribute: str):
        return f"$.{attribute}", attribute

    def validate_name(self, name: str) -> None:
        if not name.startswith("$"):
            raise ConfigurationError(
                f"JSON fields must be JSONPath expressions starting with '$': '{name}'"
            )


class Structure(str, Enum):
    """Storage structures an index can be declared on."""
    HASH = "HASH"
    JSON = "JSON"

    @property
    def field_builder(self) -> FieldBuilder:
        """Field builder that validates names for this structure."""
        if self is Structure.JSON:
            return JsonFieldBuilder()
        return HashFieldBuilder()
