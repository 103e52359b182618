"""
Tests for schema field descriptors, field builders and type mapping.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import pytest
from pydantic import BaseModel, ValidationError

from search_builder.core.errors import ConfigurationError
from search_builder.schema import (
    FieldType,
    GeoField,
    HashFieldBuilder,
    JsonFieldBuilder,
    NumericField,
    Structure,
    TagField,
    TextField,
    TypeMapper,
)


class TestFieldArguments:
    """Tokens produced by each field type."""

    def test_text_field_with_all_modifiers(self):
        field = TextField(
            name="title", no_stem=True, weight=2.0, phonetic="dm:en", sortable=True, no_index=True
        )

        assert field.field_arguments == (
            "title", "TEXT", "NOSTEM", "WEIGHT", 2.0, "PHONETIC", "dm:en", "SORTABLE", "NOINDEX"
        )

    def test_text_field_default_weight_is_omitted(self):
        assert TextField(name="title").field_arguments == ("title", "TEXT")

    def test_numeric_field(self):
        assert NumericField(name="score", sortable=True).field_arguments == (
            "score", "NUMERIC", "SORTABLE"
        )

    def test_geo_field(self):
        assert GeoField(name="location", no_index=True).field_arguments == (
            "location", "GEO", "NOINDEX"
        )

    def test_tag_field_with_separator(self):
        assert TagField(name="tags", separator=";").field_arguments == (
            "tags", "TAG", "SEPARATOR", ";"
        )

    def test_alias_follows_name(self):
        field = TagField(name="$.tags[*]", alias="tags")

        assert field.field_arguments == ("$.tags[*]", "AS", "tags", "TAG")
        assert field.identifier == "tags"

    def test_field_type(self):
        assert TextField(name="a").field_type is FieldType.TEXT
        assert TagField(name="a").field_type is FieldType.TAG


class TestFieldValidation:
    """Invalid descriptor values are rejected at construction."""

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name(self, name):
        with pytest.raises(ValidationError, match="must not be empty"):
            NumericField(name=name)

    def test_non_positive_weight(self):
        with pytest.raises(ValidationError):
            TextField(name="title", weight=0)

    def test_unknown_phonetic_matcher(self):
        with pytest.raises(ValidationError, match="Unknown phonetic matcher"):
            TextField(name="title", phonetic="dm:xx")

    def test_multi_character_separator(self):
        with pytest.raises(ValidationError, match="single character"):
            TagField(name="tags", separator=",;")

    def test_fields_are_immutable(self):
        field = TextField(name="title")

        with pytest.raises(ValidationError):
            field.name = "other"


class TestFieldBuilders:
    """Structure-specific field builders."""

    def test_structure_resolves_builder(self):
        assert isinstance(Structure.HASH.field_builder, HashFieldBuilder)
        assert isinstance(Structure.JSON.field_builder, JsonFieldBuilder)

    def test_hash_builder_creates_fields(self):
        builder = HashFieldBuilder()

        assert builder.text("title", weight=1.5).field_arguments == ("title", "TEXT", "WEIGHT", 1.5)
        assert builder.tag("tags", separator="|").separator == "|"

    def test_hash_builder_rejects_json_path(self):
        with pytest.raises(ConfigurationError, match="not JSONPath"):
            HashFieldBuilder().numeric("$.score")

    def test_json_builder_requires_json_path(self):
        with pytest.raises(ConfigurationError, match="JSONPath"):
            JsonFieldBuilder().numeric("score")

    def test_json_builder_accepts_alias(self):
        field = JsonFieldBuilder().numeric("$.score", alias="score", sortable=True)

        assert field.field_arguments == ("$.score", "AS", "score", "NUMERIC", "SORTABLE")


class Color(str, Enum):
    RED = "red"
    BLUE = "blue"


class Document(BaseModel):
    title: str
    views: int
    rating: Optional[float] = None
    tags: List[str] = []
    published: bool = False
    color: Color = Color.RED
    metadata: Dict[str, Any] = {}


class TestSchemaFromModel:
    """Deriving schema fields from pydantic models."""

    def test_hash_schema_from_model(self):
        fields = HashFieldBuilder().from_model(Document)

        assert [(f.name, f.field_type) for f in fields] == [
            ("title", FieldType.TEXT),
            ("views", FieldType.NUMERIC),
            ("rating", FieldType.NUMERIC),
            ("tags", FieldType.TAG),
            ("published", FieldType.TAG),
            ("color", FieldType.TAG),
        ]

    def test_json_schema_from_model_uses_paths_and_aliases(self):
        fields = JsonFieldBuilder().from_model(Document)

        assert fields[0].field_arguments == ("$.title", "AS", "title", "TEXT")
        assert all(f.name.startswith("$.") for f in fields)


class TestTypeMapper:
    """Python annotation to field type mapping."""

    @pytest.mark.parametrize(
        "annotation, expected",
        [
            (str, FieldType.TEXT),
            (int, FieldType.NUMERIC),
            (float, FieldType.NUMERIC),
            (bool, FieldType.TAG),
            (Optional[int], FieldType.NUMERIC),
            (int | None, FieldType.NUMERIC),
            (List[str], FieldType.TAG),
            (Color, FieldType.TAG),
            (date, FieldType.TAG),
            (Optional[datetime], FieldType.TAG),
        ],
    )
    def test_mapped_types(self, annotation, expected):
        assert TypeMapper.get_field_type(annotation) is expected

    @pytest.mark.parametrize("annotation", [Dict[str, Any], List[int], list, bytes])
    def test_unmapped_types(self, annotation):
        assert TypeMapper.get_field_type(annotation) is None
