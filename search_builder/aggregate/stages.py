"""
Aggregation pipeline stages.

Each stage is an immutable pydantic model that compiles to one clause:

    GROUPBY {nargs} {property} ... [REDUCE ...] ...
    SORTBY {nargs} {property} {ASC|DESC} ... [MAX {num}]
    APPLY {expression} AS {alias}
    FILTER {expression}
    LIMIT {offset} {num}
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from search_builder.aggregate.reducers import Reducer, as_property
from search_builder.core.arguments import (
    ArgumentAssembler,
    Clause,
    Token,
    counted,
    fixed,
    keyword_value,
)


def _not_blank(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("Value must not be empty")
    return value


class SortOrder(str, Enum):
    """Sort direction of a SORTBY key."""
    ASC = "ASC"
    DESC = "DESC"


class SortKey(BaseModel):
    """One property and its sort direction."""

    model_config = ConfigDict(frozen=True)

    property: str
    order: SortOrder = SortOrder.ASC

    @field_validator("property")
    @classmethod
    def validate_property(cls, value: str) -> str:
        return as_property(value)


class PipelineStage(BaseModel):
    """Base class for pipeline stages."""

    model_config = ConfigDict(frozen=True)

    def _clauses(self) -> List[Clause]:
        raise NotImplementedError

    @property
    def arguments(self) -> Tuple[Token, ...]:
        """Tokens this stage contributes to the command."""
        return ArgumentAssembler.assemble(self._clauses())

    def clause(self) -> Clause:
        """The whole stage as a single clause of the aggregate command."""
        tokens = self.arguments
        return fixed(self.stage, *tokens)  # type: ignore[attr-defined]


class GroupByStage(PipelineStage):
    """Group records by properties and reduce each group."""

    stage: Literal["GROUPBY"] = "GROUPBY"
    properties: Tuple[str, ...] = ()
    reducers: Tuple[Reducer, ...] = ()

    @field_validator("properties")
    @classmethod
    def validate_properties(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(as_property(name) for name in value)

    def _clauses(self) -> List[Clause]:
        return [
            counted("GROUPBY", self.properties, present=True),
            *(fixed(f"reducer {r.function}", *r.reducer_arguments) for r in self.reducers),
        ]


class SortByStage(PipelineStage):
    """Sort records by one or more properties."""

    stage: Literal["SORTBY"] = "SORTBY"
    keys: Tuple[SortKey, ...]
    max: Optional[int] = Field(default=None, gt=0)

    @field_validator("keys")
    @classmethod
    def validate_keys(cls, value: Tuple[SortKey, ...]) -> Tuple[SortKey, ...]:
        if not value:
            raise ValueError("SORTBY needs at least one property")
        return value

    def _clauses(self) -> List[Clause]:
        pairs: List[Token] = []
        for key in self.keys:
            pairs.extend((key.property, key.order.value))
        return [
            counted("SORTBY", pairs),
            keyword_value("MAX", self.max),
        ]


class ApplyStage(PipelineStage):
    """Compute a new property from an expression."""

    stage: Literal["APPLY"] = "APPLY"
    expression: str
    alias: str

    @field_validator("expression", "alias")
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        return _not_blank(value)

    def _clauses(self) -> List[Clause]:
        return [fixed("APPLY", "APPLY", self.expression, "AS", self.alias)]


class FilterStage(PipelineStage):
    """Drop records that do not satisfy an expression."""

    stage: Literal["FILTER"] = "FILTER"
    expression: str

    @field_validator("expression")
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        return _not_blank(value)

    def _clauses(self) -> List[Clause]:
        return [fixed("FILTER", "FILTER", self.expression)]


class LimitStage(PipelineStage):
    """Keep `count` records starting at `offset`."""

    stage: Literal["LIMIT"] = "LIMIT"
    offset: int = Field(default=0, ge=0)
    count: int = Field(ge=0)

    def _clauses(self) -> List[Clause]:
        return [fixed("LIMIT", "LIMIT", self.offset, self.count)]


Stage = Annotated[
    Union[GroupByStage, SortByStage, ApplyStage, FilterStage, LimitStage],
    Field(discriminator="stage"),
]
