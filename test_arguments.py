"""
Tests for two-pass argument assembly.
"""

import pytest

from search_builder.core.arguments import (
    ArgumentAssembler,
    Clause,
    counted,
    fixed,
    flag,
    format_token,
    keyword_value,
    render_command,
)
from search_builder.core.errors import ArgumentAssemblyError


def _explode():
    raise AssertionError("absent clauses must not be emitted")


def test_assemble_writes_present_clauses_in_order():
    """Present clauses are written in the order given; absent ones are skipped."""
    clauses = [
        fixed("ON", "ON", "HASH"),
        counted("PREFIX", ["a:", "b:"]),
        keyword_value("FILTER", None),
        flag("NOOFFSETS", True),
        flag("NOHL", False),
        keyword_value("TEMPORARY", 30),
    ]

    tokens = ArgumentAssembler.assemble(clauses)

    assert tokens == ("ON", "HASH", "PREFIX", 2, "a:", "b:", "NOOFFSETS", "TEMPORARY", 30)
    assert len(tokens) == ArgumentAssembler.measure(clauses)


def test_absent_clauses_are_never_emitted():
    clauses = [Clause("never", False, 3, _explode), fixed("x", "X")]

    assert ArgumentAssembler.assemble(clauses) == ("X",)


def test_counted_clause_can_be_forced_with_no_items():
    """STOPWORDS 0 is a present clause with zero items."""
    assert ArgumentAssembler.assemble([counted("STOPWORDS", [], present=True)]) == ("STOPWORDS", 0)
    assert ArgumentAssembler.assemble([counted("STOPWORDS", [])]) == ()


def test_keyword_value_treats_empty_string_as_absent():
    assert ArgumentAssembler.assemble([keyword_value("FILTER", "")]) == ()
    assert ArgumentAssembler.assemble([keyword_value("SCORE", 0.5, present=False)]) == ()


def test_underfilled_clause_is_a_defect():
    clauses = [Clause("short", True, 2, lambda: ("ONLY",))]

    with pytest.raises(ArgumentAssemblyError, match="declared 2 tokens but wrote 1"):
        ArgumentAssembler.assemble(clauses)


def test_overfilled_clause_is_a_defect():
    clauses = [Clause("long", True, 1, lambda: ("A", "B"))]

    with pytest.raises(ArgumentAssemblyError, match="overflowed"):
        ArgumentAssembler.assemble(clauses)


def test_empty_token_is_a_defect():
    clauses = [Clause("hole", True, 1, lambda: (None,))]

    with pytest.raises(ArgumentAssemblyError, match="empty token"):
        ArgumentAssembler.assemble(clauses)


def test_format_token():
    assert format_token("SCHEMA") == "SCHEMA"
    assert format_token(3) == "3"
    assert format_token(2.0) == "2"
    assert format_token(0.25) == "0.25"


def test_render_command_quotes_tokens_with_spaces():
    rendered = render_command(["FT.AGGREGATE", "idx", "@title:(hello world)", "LIMIT", 0, 10])

    assert rendered == 'FT.AGGREGATE idx "@title:(hello world)" LIMIT 0 10'
