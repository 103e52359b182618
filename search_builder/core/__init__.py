"""Core interfaces, errors and argument assembly for the search builder."""

from search_builder.core.arguments import ArgumentAssembler, Clause, Token, render_command
from search_builder.core.errors import (
    SearchBuilderError,
    ConfigurationError,
    MissingSchemaError,
    ConfigurationConflictError,
    ReplyFormatError,
    ArgumentAssemblyError,
)
from search_builder.core.interfaces import ISearchTransport

__all__ = [
    "ArgumentAssembler",
    "Clause",
    "Token",
    "render_command",
    "SearchBuilderError",
    "ConfigurationError",
    "MissingSchemaError",
    "ConfigurationConflictError",
    "ReplyFormatError",
    "ArgumentAssemblyError",
    "ISearchTransport",
]
