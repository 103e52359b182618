"""Schema field descriptors and per-structure field builders."""

from search_builder.schema.fields import (
    FieldType,
    BaseSchemaField,
    SchemaField,
    TextField,
    NumericField,
    GeoField,
    TagField,
)
from search_builder.schema.field_builders import (
    Structure,
    FieldBuilder,
    HashFieldBuilder,
    JsonFieldBuilder,
)
from search_builder.schema.type_mappings import TypeMapper

__all__ = [
    "FieldType",
    "BaseSchemaField",
    "SchemaField",
    "TextField",
    "NumericField",
    "GeoField",
    "TagField",
    "Structure",
    "FieldBuilder",
    "HashFieldBuilder",
    "JsonFieldBuilder",
    "TypeMapper",
]
