"""
Tests for aggregation pipeline building, stages and reducers.
"""

import dataclasses

import pytest
from pydantic import ValidationError

from search_builder import AggregateQuery, Reducer, SortOrder
from search_builder.aggregate import GroupByStage, SortKey
from search_builder.core.errors import ConfigurationConflictError


def test_group_by_sum_matches_engine_grammar():
    """The document-type total aggregation compiles to the expected tokens."""
    command = (
        AggregateQuery.on("idx")
        .query("*")
        .load("@score")
        .group_by("@documentType", reducers=[Reducer.sum("@score").as_("total")])
        .build()
    )

    assert command.index_name == "idx"
    assert command.arguments == (
        "*",
        "LOAD", 1, "@score",
        "GROUPBY", 1, "@documentType",
        "REDUCE", "SUM", 1, "@score", "AS", "total",
    )


def test_query_defaults_to_match_all():
    assert AggregateQuery.on("idx").build().arguments == ("*",)


def test_stages_keep_declaration_order():
    """Stages are neither reordered nor deduplicated."""
    command = (
        AggregateQuery.on("idx")
        .query("@type:{demo}")
        .limit(0, 100)
        .apply("@score * 2", "double")
        .filter("@double > 4")
        .group_by("@type", reducers=[Reducer.count("n")])
        .sort_by(("@n", "DESC"))
        .group_by("@n")
        .limit(0, 5)
        .build()
    )

    assert command.arguments == (
        "@type:{demo}",
        "LIMIT", 0, 100,
        "APPLY", "@score * 2", "AS", "double",
        "FILTER", "@double > 4",
        "GROUPBY", 1, "@type", "REDUCE", "COUNT", 0, "AS", "n",
        "SORTBY", 2, "@n", "DESC",
        "GROUPBY", 1, "@n",
        "LIMIT", 0, 5,
    )


def test_sort_by_keys_and_max():
    command = (
        AggregateQuery.on("idx")
        .sort_by("@a", ("@b", "desc"), SortKey(property="c", order=SortOrder.ASC), max=10)
        .build()
    )

    assert command.arguments[1:] == (
        "SORTBY", 6, "@a", "ASC", "@b", "DESC", "@c", "ASC", "MAX", 10
    )


def test_properties_get_at_prefix():
    command = AggregateQuery.on("idx").group_by("documentType").build()

    assert command.arguments[1:] == ("GROUPBY", 1, "@documentType")


def test_group_by_with_no_properties_and_several_reducers():
    command = (
        AggregateQuery.on("idx")
        .group_by(reducers=[
            Reducer.count(alias="n"),
            Reducer.avg("@score", alias="mean"),
            Reducer.quantile("@score", 0.5, alias="median"),
        ])
        .build()
    )

    assert command.arguments[1:] == (
        "GROUPBY", 0,
        "REDUCE", "COUNT", 0, "AS", "n",
        "REDUCE", "AVG", 1, "@score", "AS", "mean",
        "REDUCE", "QUANTILE", 2, "@score", 0.5, "AS", "median",
    )


def test_query_options_follow_query():
    command = (
        AggregateQuery.on("idx")
        .query("@title:foo")
        .timeout(500)
        .load("a", "$.b")
        .verbatim()
        .build()
    )

    assert command.arguments == (
        "@title:foo", "VERBATIM", "LOAD", 2, "@a", "$.b", "TIMEOUT", 500
    )


def test_load_all():
    assert AggregateQuery.on("idx").load_all().build().arguments == ("*", "LOAD", "*")


def test_load_and_load_all_conflict_in_either_order():
    with pytest.raises(ConfigurationConflictError):
        AggregateQuery.on("idx").load("@a").load_all()

    with pytest.raises(ConfigurationConflictError):
        AggregateQuery.on("idx").load_all().load("@a")


def test_command_rendering():
    command = (
        AggregateQuery.on("idx")
        .query("@title:(hello world)")
        .group_by("@type", reducers=[Reducer.sum("@score", alias="total")])
        .build()
    )

    assert command.render() == (
        'FT.AGGREGATE idx "@title:(hello world)" GROUPBY 1 @type REDUCE SUM 1 @score AS total'
    )
    assert str(command) == '"@title:(hello world)" GROUPBY 1 @type REDUCE SUM 1 @score AS total'
    assert command.to_command()[:2] == ["FT.AGGREGATE", "idx"]


def test_command_is_frozen_and_reusable():
    builder = AggregateQuery.on("idx").limit(0, 10)
    first = builder.build()
    builder.limit(10, 10)

    with pytest.raises(dataclasses.FrozenInstanceError):
        first.arguments = ()
    assert first.arguments == ("*", "LIMIT", 0, 10)
    assert builder.build().arguments == ("*", "LIMIT", 0, 10, "LIMIT", 10, 10)


class TestStageValidation:
    """Invalid stage values are rejected."""

    def test_blank_index_name(self):
        with pytest.raises(ValidationError):
            AggregateQuery.on(" ")

    def test_blank_query(self):
        with pytest.raises(ValidationError):
            AggregateQuery.on("idx").query("")

    def test_sort_by_needs_keys(self):
        with pytest.raises(ValidationError):
            AggregateQuery.on("idx").sort_by()

    def test_negative_limit(self):
        with pytest.raises(ValidationError):
            AggregateQuery.on("idx").limit(-1, 10)

    def test_apply_needs_alias(self):
        with pytest.raises(ValidationError):
            AggregateQuery.on("idx").apply("@a + 1", "")

    def test_group_by_stage_arguments(self):
        stage = GroupByStage(properties=("a", "@b"))

        assert stage.arguments == ("GROUPBY", 2, "@a", "@b")


class TestReducers:
    """Reducer descriptors and their argument rules."""

    def test_reducer_tokens(self):
        assert Reducer.sum("@score").reducer_arguments == ("REDUCE", "SUM", 1, "@score")
        assert Reducer.count().as_("n").reducer_arguments == ("REDUCE", "COUNT", 0, "AS", "n")

    def test_as_returns_a_copy(self):
        reducer = Reducer.max("@score")
        aliased = reducer.as_("top")

        assert reducer.alias is None
        assert aliased.alias == "top"

    def test_first_value_by(self):
        reducer = Reducer.first_value("@title", by="@score", descending=True)

        assert reducer.reducer_arguments == (
            "REDUCE", "FIRST_VALUE", 4, "@title", "BY", "@score", "DESC"
        )

    def test_reducer_properties_get_at_prefix(self):
        command = (
            AggregateQuery.on("idx")
            .group_by("documentType", reducers=[Reducer.sum("score").as_("total")])
            .build()
        )

        assert command.arguments == (
            "*", "GROUPBY", 1, "@documentType", "REDUCE", "SUM", 1, "@score", "AS", "total"
        )

    def test_literal_reducer_arguments_are_kept(self):
        assert Reducer.quantile("score", 0.9).arguments == ("@score", 0.9)
        assert Reducer.random_sample("title", 2).arguments == ("@title", 2)
        assert Reducer.first_value("title", by="score").arguments == (
            "@title", "BY", "@score", "ASC"
        )

    def test_random_sample(self):
        assert Reducer.random_sample("@title", 3).arguments == ("@title", 3)

    def test_function_name_is_normalised(self):
        assert Reducer(function="sum", arguments=("@x",)).function == "SUM"

    def test_builtin_arity_is_checked(self):
        with pytest.raises(ValidationError, match="SUM takes 1 argument"):
            Reducer(function="SUM")

        with pytest.raises(ValidationError, match="COUNT takes 0"):
            Reducer(function="COUNT", arguments=("@x",))

    def test_custom_function_is_not_checked(self):
        reducer = Reducer(function="MY_REDUCER", arguments=("@a", "@b", 3))

        assert reducer.reducer_arguments == ("REDUCE", "MY_REDUCER", 3, "@a", "@b", 3)

    def test_invalid_quantile(self):
        with pytest.raises(ValueError):
            Reducer.quantile("@score", 1.5)

    def test_invalid_sample_size(self):
        with pytest.raises(ValueError):
            Reducer.random_sample("@title", 0)
