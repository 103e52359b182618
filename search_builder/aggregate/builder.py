"""
Aggregation pipeline builder.

Collects a query, an optional LOAD clause and an ordered list of stages into
an immutable `AggregateConfig`, then compiles it with `compile_aggregate`:

    {query} [VERBATIM] [LOAD {nargs} {property} ... | LOAD *] [TIMEOUT {ms}]
    {stage} ...

Stages are emitted exactly in the order they were added; they are never
reordered or deduplicated.
"""

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from search_builder.aggregate.reducers import Reducer
from search_builder.aggregate.stages import (
    ApplyStage,
    FilterStage,
    GroupByStage,
    LimitStage,
    SortByStage,
    SortKey,
    SortOrder,
    Stage,
)
from search_builder.core.arguments import (
    ArgumentAssembler,
    Clause,
    Token,
    counted,
    fixed,
    flag,
    keyword_value,
    render_command,
)
from search_builder.core.errors import ConfigurationConflictError

logger = logging.getLogger(__name__)

MATCH_ALL = "*"

SortSpec = Union[str, SortKey, Tuple[str, Union[str, SortOrder]]]


@dataclass(frozen=True)
class AggregateCommand:
    """
    Immutable `FT.AGGREGATE` command: index name plus every token after it.

    Safe to share and resend; nothing mutates it after `build()`.
    `str()` renders the tokens after the index name, `render()` the full command.
    """

    COMMAND: ClassVar[str] = "FT.AGGREGATE"

    index_name: str
    arguments: Tuple[Token, ...]

    def __len__(self) -> int:
        return len(self.arguments)

    def __iter__(self) -> Iterator[Token]:
        return iter(self.arguments)

    def __getitem__(self, index):
        return self.arguments[index]

    def to_command(self) -> List[Token]:
        """Full command including the command name and index name."""
        return [self.COMMAND, self.index_name, *self.arguments]

    def render(self) -> str:
        """Full command as a copy-pasteable command line."""
        return render_command(self.to_command())

    def __str__(self) -> str:
        return render_command(self.arguments)


def _load_property(name: str) -> str:
    if not name or not name.strip():
        raise ValueError("LOAD property must not be empty")
    # JSONPath expressions are loaded as-is
    if name.startswith(("@", "$")):
        return name
    return f"@{name}"


class AggregateConfig(BaseModel):
    """Every part of an aggregation, as one immutable value."""

    model_config = ConfigDict(frozen=True)

    index_name: str
    query: str = MATCH_ALL
    verbatim: bool = False
    load: Optional[Tuple[str, ...]] = None
    load_all: bool = False
    timeout: Optional[int] = Field(default=None, ge=0)
    stages: Tuple[Stage, ...] = ()

    @field_validator("index_name", "query")
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Value must not be empty")
        return value

    @field_validator("load")
    @classmethod
    def validate_load(cls, value: Optional[Tuple[str, ...]]) -> Optional[Tuple[str, ...]]:
        if value is None:
            return None
        return tuple(_load_property(name) for name in value)

    def replace(self, **changes: Any) -> "AggregateConfig":
        """Return a validated copy with `changes` applied."""
        return AggregateConfig(**{**dict(self), **changes})


def _load_clause(config: AggregateConfig) -> Clause:
    if config.load_all:
        return fixed("LOAD", "LOAD", "*")
    return counted("LOAD", config.load or ())


def aggregate_clauses(config: AggregateConfig) -> List[Clause]:
    """Clauses of an aggregation in emission order."""
    return [
        fixed("query", config.query),
        flag("VERBATIM", config.verbatim),
        _load_clause(config),
        keyword_value("TIMEOUT", config.timeout),
        *(stage.clause() for stage in config.stages),
    ]


def compile_aggregate(config: AggregateConfig) -> AggregateCommand:
    """
    Compile an aggregation configuration into a command.

    Raises:
        ConfigurationConflictError: Both a LOAD list and LOAD * were set
    """
    if config.load_all and config.load:
        raise ConfigurationConflictError(
            "Conflicting LOAD configuration: both a property list and load-all were set"
        )

    command = AggregateCommand(
        index_name=config.index_name,
        arguments=ArgumentAssembler.assemble(aggregate_clauses(config)),
    )
    logger.debug("Compiled aggregation: %s", command.render())
    return command


def _sort_key(spec: SortSpec) -> SortKey:
    if isinstance(spec, SortKey):
        return spec
    if isinstance(spec, str):
        return SortKey(property=spec)
    name, order = spec
    return SortKey(property=name, order=SortOrder(order.upper() if isinstance(order, str) else order))


class AggregateBuilder:
    """
    Fluent builder for aggregation commands.

    Stage methods append to the pipeline in call order. Not safe for
    concurrent use.
    """

    def __init__(self, index_name: str):
        """
        Initialize aggregation builder.

        Args:
            index_name: Name of the index to aggregate over
        """
        self._config = AggregateConfig(index_name=index_name)

    @property
    def config(self) -> AggregateConfig:
        """Configuration captured so far."""
        return self._config

    def _update(self, **changes: Any) -> "AggregateBuilder":
        self._config = self._config.replace(**changes)
        return self

    def _append(self, stage: BaseModel) -> "AggregateBuilder":
        return self._update(stages=self._config.stages + (stage,))

    def query(self, query: str) -> "AggregateBuilder":
        """Base query selecting the records to aggregate, `*` by default."""
        return self._update(query=query)

    def verbatim(self) -> "AggregateBuilder":
        """Do not expand query terms with stemming."""
        return self._update(verbatim=True)

    def load(self, *properties: str) -> "AggregateBuilder":
        """
        Load document properties that are not sortable index fields.

        Raises:
            ConfigurationConflictError: `load_all()` was already called
        """
        if self._config.load_all:
            raise ConfigurationConflictError("LOAD * is already set")
        return self._update(load=(self._config.load or ()) + properties)

    def load_all(self) -> "AggregateBuilder":
        """
        Load every document property (`LOAD *`).

        Raises:
            ConfigurationConflictError: Specific properties were already loaded
        """
        if self._config.load:
            raise ConfigurationConflictError("A LOAD property list is already set")
        return self._update(load_all=True)

    def timeout(self, milliseconds: int) -> "AggregateBuilder":
        return self._update(timeout=milliseconds)

    def group_by(self, *properties: str, reducers: Tuple[Reducer, ...] = ()) -> "AggregateBuilder":
        """
        Append a GROUPBY stage.

        Args:
            properties: Properties to group by, `@` is added when missing
            reducers: Reducers applied to each group, in order
        """
        return self._append(GroupByStage(properties=properties, reducers=tuple(reducers)))

    def sort_by(self, *keys: SortSpec, max: Optional[int] = None) -> "AggregateBuilder":
        """
        Append a SORTBY stage.

        Keys are property names (ascending), `(name, "DESC")` pairs or SortKey
        instances.
        """
        return self._append(SortByStage(keys=tuple(_sort_key(k) for k in keys), max=max))

    def apply(self, expression: str, alias: str) -> "AggregateBuilder":
        """Append an APPLY stage computing `alias` from `expression`."""
        return self._append(ApplyStage(expression=expression, alias=alias))

    def filter(self, expression: str) -> "AggregateBuilder":
        """Append a FILTER stage."""
        return self._append(FilterStage(expression=expression))

    def limit(self, offset: int, count: int) -> "AggregateBuilder":
        """Append a LIMIT stage."""
        return self._append(LimitStage(offset=offset, count=count))

    def build(self) -> AggregateCommand:
        """Compile the captured configuration."""
        return compile_aggregate(self._config)


class AggregateQuery:
    """Entry point for aggregations: `AggregateQuery.on("idx")`."""

    @staticmethod
    def on(index_name: str) -> AggregateBuilder:
        return AggregateBuilder(index_name)
