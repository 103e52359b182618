"""
Index definition builder.

Collects index-level options and a schema into an immutable `IndexConfig`,
then compiles it with `compile_index` into the `FT.CREATE` body:

    ON {structure}
    [PREFIX {count} {prefix} ...]
    [FILTER {filter}]
    [LANGUAGE {default_lang}]
    [LANGUAGE_FIELD {lang_field}]
    [SCORE {default_score}]
    [SCORE_FIELD {score_field}]
    [PAYLOAD_FIELD {payload_field}]
    [MAXTEXTFIELDS]
    [TEMPORARY {seconds}]
    [NOOFFSETS] [NOHL] [NOFIELDS] [NOFREQS]
    [STOPWORDS {count} {stopword} ...]
    [SKIPINITIALSCAN]
    SCHEMA {field} ...

Clauses are always emitted in this order, whatever order the builder
methods were called in.
"""

import logging
from typing import Any, Callable, List, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from search_builder.core.arguments import (
    ArgumentAssembler,
    Clause,
    counted,
    fixed,
    flag,
    keyword_value,
)
from search_builder.core.errors import (
    ConfigurationConflictError,
    MissingSchemaError,
)
from search_builder.index.definition import IndexDefinition
from search_builder.schema.field_builders import FieldBuilder, Structure
from search_builder.schema.fields import SchemaField

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 1.0

# Stemming languages supported by the engine
SUPPORTED_LANGUAGES = frozenset({
    "arabic", "armenian", "basque", "catalan", "chinese", "danish", "dutch",
    "english", "finnish", "french", "german", "greek", "hindi", "hungarian",
    "indonesian", "irish", "italian", "lithuanian", "nepali", "norwegian",
    "portuguese", "romanian", "russian", "serbian", "spanish", "swedish",
    "tamil", "turkish", "yiddish",
})

FieldSpec = Union[SchemaField, Callable[[FieldBuilder], SchemaField]]


class IndexConfig(BaseModel):
    """Every option of an index definition, as one immutable value."""

    model_config = ConfigDict(frozen=True)

    structure: Structure = Structure.HASH
    prefixes: Tuple[str, ...] = ()
    filter: Optional[str] = None
    language: Optional[str] = None
    language_field: Optional[str] = None
    score: float = Field(default=DEFAULT_SCORE, ge=0, le=1)
    score_field: Optional[str] = None
    payload_field: Optional[str] = None
    max_text_fields: bool = False
    temporary: Optional[int] = Field(default=None, gt=0)
    no_offsets: bool = False
    no_highlights: bool = False
    no_fields: bool = False
    no_frequencies: bool = False
    stopwords: Optional[Tuple[str, ...]] = None
    no_stopwords: bool = False
    skip_initial_scan: bool = False
    fields: Tuple[SchemaField, ...] = ()

    @field_validator("language")
    @classmethod
    def validate_language(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value.lower() not in SUPPORTED_LANGUAGES:
            raise ValueError(
                f"Unsupported language '{value}'. Supported: {sorted(SUPPORTED_LANGUAGES)}"
            )
        return value

    @property
    def overrides_stopwords(self) -> bool:
        """True when a STOPWORDS clause replaces the default list."""
        return self.stopwords is not None or self.no_stopwords

    def replace(self, **changes: Any) -> "IndexConfig":
        """Return a validated copy with `changes` applied."""
        return IndexConfig(**{**dict(self), **changes})


def _check_stopwords(config: IndexConfig) -> None:
    if config.stopwords and config.no_stopwords:
        raise ConfigurationConflictError(
            "Conflicting stopwords configuration: a stopword list and no-stopwords were both set"
        )


def index_clauses(config: IndexConfig) -> List[Clause]:
    """Clauses of an index definition in canonical order."""
    return [
        fixed("ON", "ON", config.structure.value),
        counted("PREFIX", config.prefixes),
        keyword_value("FILTER", config.filter),
        keyword_value("LANGUAGE", config.language),
        keyword_value("LANGUAGE_FIELD", config.language_field),
        keyword_value("SCORE", config.score, present=config.score != DEFAULT_SCORE),
        keyword_value("SCORE_FIELD", config.score_field),
        keyword_value("PAYLOAD_FIELD", config.payload_field),
        flag("MAXTEXTFIELDS", config.max_text_fields),
        keyword_value("TEMPORARY", config.temporary),
        flag("NOOFFSETS", config.no_offsets),
        flag("NOHL", config.no_highlights),
        flag("NOFIELDS", config.no_fields),
        flag("NOFREQS", config.no_frequencies),
        counted(
            "STOPWORDS",
            () if config.no_stopwords else (config.stopwords or ()),
            present=config.overrides_stopwords,
        ),
        flag("SKIPINITIALSCAN", config.skip_initial_scan),
        fixed("SCHEMA", "SCHEMA"),
        *(fixed(f"field '{f.name}'", *f.field_arguments) for f in config.fields),
    ]


def compile_index(config: IndexConfig) -> IndexDefinition:
    """
    Compile an index configuration into an index definition.

    Args:
        config: Complete index configuration

    Returns:
        Immutable IndexDefinition

    Raises:
        MissingSchemaError: No schema fields were configured
        ConfigurationConflictError: Stopwords and no-stopwords were both set
        ConfigurationError: A field name is not legal for the index structure
    """
    if not config.fields:
        raise MissingSchemaError(
            "It doesn't look like you've actually defined a schema"
        )
    _check_stopwords(config)

    validator = config.structure.field_builder
    for schema_field in config.fields:
        validator.validate_name(schema_field.name)

    definition = IndexDefinition(ArgumentAssembler.assemble(index_clauses(config)))
    logger.debug("Compiled index definition: %s", definition)
    return definition


class IndexBuilder:
    """
    Fluent builder for index definitions.

    Each method replaces the builder's configuration with an updated copy and
    returns the builder, so calls can be chained. Not safe for concurrent use.
    """

    def __init__(self, structure: Structure = Structure.HASH):
        """
        Initialize index builder.

        Args:
            structure: Storage structure the index is declared on
        """
        self._config = IndexConfig(structure=Structure(structure))

    @property
    def config(self) -> IndexConfig:
        """Configuration captured so far."""
        return self._config

    @property
    def field_builder(self) -> FieldBuilder:
        return self._config.structure.field_builder

    def _update(self, **changes: Any) -> "IndexBuilder":
        self._config = self._config.replace(**changes)
        return self

    def for_keys_with_prefix(self, prefix: str) -> "IndexBuilder":
        """Index only keys starting with `prefix`. May be called repeatedly."""
        return self._update(prefixes=self._config.prefixes + (prefix,))

    def using_filter(self, filter_expression: str) -> "IndexBuilder":
        """Index only keys matching a filter expression."""
        return self._update(filter=filter_expression)

    def using_language(self, language: str) -> "IndexBuilder":
        """Default stemming language, English when unset."""
        return self._update(language=language)

    def using_language_field(self, language_field: str) -> "IndexBuilder":
        """Field to source each document's language from."""
        return self._update(language_field=language_field)

    def set_score(self, score: float) -> "IndexBuilder":
        """Default document score between 0 and 1."""
        return self._update(score=score)

    def set_score_field(self, score_field: str) -> "IndexBuilder":
        return self._update(score_field=score_field)

    def set_payload_field(self, payload_field: str) -> "IndexBuilder":
        """Field used as the binary-safe document payload."""
        return self._update(payload_field=payload_field)

    def max_text_fields(self) -> "IndexBuilder":
        """
        Encode the index as if it had more than 32 text fields, so more text
        fields can be added later.
        """
        return self._update(max_text_fields=True)

    def temporary(self, lifespan_in_seconds: int) -> "IndexBuilder":
        """
        Make the index expire after `lifespan_in_seconds` of inactivity.

        Temporary indexes are usually paired with `skip_initial_scan()`.
        """
        return self._update(temporary=lifespan_in_seconds)

    def no_offsets(self) -> "IndexBuilder":
        """Do not store term offsets (no exact phrase search or highlighting)."""
        return self._update(no_offsets=True)

    def no_highlights(self) -> "IndexBuilder":
        return self._update(no_highlights=True)

    def no_fields(self) -> "IndexBuilder":
        """Do not store field bits per term (no filtering by field)."""
        return self._update(no_fields=True)

    def no_frequencies(self) -> "IndexBuilder":
        return self._update(no_frequencies=True)

    def with_stopwords(self, *stopwords: str) -> "IndexBuilder":
        """
        Replace the default stopword list.

        Calling with no words produces `STOPWORDS 0`.

        Raises:
            ConfigurationConflictError: `with_no_stopwords()` was already called
        """
        if self._config.no_stopwords and stopwords:
            raise ConfigurationConflictError(
                "Conflicting stopwords configuration: no-stopwords is already set"
            )
        return self._update(stopwords=(self._config.stopwords or ()) + stopwords)

    def with_no_stopwords(self) -> "IndexBuilder":
        """
        Disable stopwords entirely.

        Raises:
            ConfigurationConflictError: A stopword list was already set
        """
        if self._config.stopwords:
            raise ConfigurationConflictError(
                "Conflicting stopwords configuration: a stopword list is already set"
            )
        return self._update(no_stopwords=True)

    def skip_initial_scan(self) -> "IndexBuilder":
        """Do not index keys that already exist when the index is created."""
        return self._update(skip_initial_scan=True)

    def with_schema(self, *fields: FieldSpec) -> "IndexBuilder":
        """
        Define the schema, replacing any previous one.

        Each item is either a field descriptor or a callable receiving this
        structure's field builder, e.g. `lambda f: f.numeric("score")`.
        """
        resolved = tuple(
            spec(self.field_builder) if callable(spec) else spec
            for spec in fields
        )
        return self._update(fields=resolved)

    def with_schema_from_model(self, model: Type[BaseModel]) -> "IndexBuilder":
        """Define the schema from a pydantic model's annotations."""
        return self._update(fields=tuple(self.field_builder.from_model(model)))

    def build(self) -> IndexDefinition:
        """Compile the captured configuration."""
        return compile_index(self._config)


class SearchIndex:
    """Entry point for index definitions: `SearchIndex.on(Structure.HASH)`."""

    @staticmethod
    def on(structure: Union[Structure, str]) -> IndexBuilder:
        return IndexBuilder(Structure(structure))
