"""
Reducer descriptors for GROUPBY stages.

Each reducer compiles to:

    REDUCE {function} {nargs} {arg} ... [AS {alias}]
"""

from enum import Enum
from typing import Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from search_builder.core.arguments import ArgumentAssembler, Token, fixed, keyword_value


def as_property(name: str) -> str:
    """Reference a field as a pipeline property (`score` -> `@score`)."""
    if not name or not name.strip():
        raise ValueError("Property name must not be empty")
    return name if name.startswith("@") else f"@{name}"


class ReduceFunction(str, Enum):
    """Built-in reducer functions."""
    COUNT = "COUNT"
    COUNT_DISTINCT = "COUNT_DISTINCT"
    COUNT_DISTINCTISH = "COUNT_DISTINCTISH"
    SUM = "SUM"
    MIN = "MIN"
    MAX = "MAX"
    AVG = "AVG"
    STDDEV = "STDDEV"
    QUANTILE = "QUANTILE"
    TOLIST = "TOLIST"
    FIRST_VALUE = "FIRST_VALUE"
    RANDOM_SAMPLE = "RANDOM_SAMPLE"


# (min, max) argument counts of the built-in reducers
REDUCER_ARITY: Dict[ReduceFunction, Tuple[int, int]] = {
    ReduceFunction.COUNT: (0, 0),
    ReduceFunction.COUNT_DISTINCT: (1, 1),
    ReduceFunction.COUNT_DISTINCTISH: (1, 1),
    ReduceFunction.SUM: (1, 1),
    ReduceFunction.MIN: (1, 1),
    ReduceFunction.MAX: (1, 1),
    ReduceFunction.AVG: (1, 1),
    ReduceFunction.STDDEV: (1, 1),
    ReduceFunction.QUANTILE: (2, 2),
    ReduceFunction.TOLIST: (1, 1),
    # {property} [BY {property} [ASC|DESC]]
    ReduceFunction.FIRST_VALUE: (1, 4),
    ReduceFunction.RANDOM_SAMPLE: (2, 2),
}


class Reducer(BaseModel):
    """
    One aggregate function applied to each group.

    Built-in functions are checked against their argument count; any other
    function name is passed through unchecked.
    """

    model_config = ConfigDict(frozen=True)

    function: str
    arguments: Tuple[Union[int, float, str], ...] = ()
    alias: Optional[str] = None

    @field_validator("function", mode="before")
    @classmethod
    def validate_function(cls, value: Union[str, ReduceFunction]) -> str:
        if isinstance(value, ReduceFunction):
            value = value.value
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Reducer function must not be empty")
        return value.upper()

    @model_validator(mode="after")
    def validate_arity(self) -> "Reducer":
        try:
            function = ReduceFunction(self.function)
        except ValueError:
            return self

        low, high = REDUCER_ARITY[function]
        if not low <= len(self.arguments) <= high:
            expected = str(low) if low == high else f"{low}-{high}"
            raise ValueError(
                f"{function.value} takes {expected} argument(s), got {len(self.arguments)}"
            )
        return self

    def as_(self, alias: str) -> "Reducer":
        """Copy of this reducer with its output named `alias`."""
        return Reducer(function=self.function, arguments=self.arguments, alias=alias)

    @property
    def reducer_arguments(self) -> Tuple[Token, ...]:
        """Tokens this reducer contributes to its GROUPBY stage."""
        return ArgumentAssembler.assemble([
            fixed("REDUCE", "REDUCE", self.function, len(self.arguments)),
            fixed(f"{self.function} arguments", *self.arguments),
            keyword_value("AS", self.alias),
        ])

    @classmethod
    def _for_property(
        cls, function: ReduceFunction, property: str, alias: Optional[str], *extra: Token
    ) -> "Reducer":
        """Reducer whose first argument is a pipeline property."""
        return cls(function=function, arguments=(as_property(property), *extra), alias=alias)

    @classmethod
    def count(cls, alias: Optional[str] = None) -> "Reducer":
        return cls(function=ReduceFunction.COUNT, alias=alias)

    @classmethod
    def count_distinct(cls, property: str, alias: Optional[str] = None) -> "Reducer":
        return cls._for_property(ReduceFunction.COUNT_DISTINCT, property, alias)

    @classmethod
    def count_distinctish(cls, property: str, alias: Optional[str] = None) -> "Reducer":
        """Approximate distinct count."""
        return cls._for_property(ReduceFunction.COUNT_DISTINCTISH, property, alias)

    @classmethod
    def sum(cls, property: str, alias: Optional[str] = None) -> "Reducer":
        return cls._for_property(ReduceFunction.SUM, property, alias)

    @classmethod
    def min(cls, property: str, alias: Optional[str] = None) -> "Reducer":
        return cls._for_property(ReduceFunction.MIN, property, alias)

    @classmethod
    def max(cls, property: str, alias: Optional[str] = None) -> "Reducer":
        return cls._for_property(ReduceFunction.MAX, property, alias)

    @classmethod
    def avg(cls, property: str, alias: Optional[str] = None) -> "Reducer":
        return cls._for_property(ReduceFunction.AVG, property, alias)

    @classmethod
    def stddev(cls, property: str, alias: Optional[str] = None) -> "Reducer":
        return cls._for_property(ReduceFunction.STDDEV, property, alias)

    @classmethod
    def quantile(cls, property: str, quantile: float, alias: Optional[str] = None) -> "Reducer":
        if not 0 <= quantile <= 1:
            raise ValueError(f"Quantile must be between 0 and 1, got {quantile}")
        return cls._for_property(ReduceFunction.QUANTILE, property, alias, quantile)

    @classmethod
    def to_list(cls, property: str, alias: Optional[str] = None) -> "Reducer":
        """All distinct values of `property` in the group."""
        return cls._for_property(ReduceFunction.TOLIST, property, alias)

    @classmethod
    def first_value(
        cls,
        property: str,
        by: Optional[str] = None,
        descending: bool = False,
        alias: Optional[str] = None,
    ) -> "Reducer":
        """First value of `property`, optionally after ordering the group by `by`."""
        arguments: Tuple[Token, ...] = (as_property(property),)
        if by is not None:
            arguments += ("BY", as_property(by), "DESC" if descending else "ASC")
        return cls(function=ReduceFunction.FIRST_VALUE, arguments=arguments, alias=alias)

    @classmethod
    def random_sample(cls, property: str, size: int, alias: Optional[str] = None) -> "Reducer":
        if size <= 0:
            raise ValueError(f"Sample size must be positive, got {size}")
        return cls._for_property(ReduceFunction.RANDOM_SAMPLE, property, alias, size)
