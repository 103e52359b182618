"""
Exception hierarchy for the search command builder.

Every error raised here is local and synchronous. None of them is retryable:
they describe a caller mistake or an unexpected engine reply.
"""


class SearchBuilderError(Exception):
    """Base class for all search builder errors."""


class ConfigurationError(SearchBuilderError, ValueError):
    """A builder was configured in a way that cannot be compiled."""


class MissingSchemaError(ConfigurationError):
    """An index definition was built without any schema fields."""


class ConfigurationConflictError(ConfigurationError):
    """Two mutually exclusive options were set on the same builder."""


class ReplyFormatError(SearchBuilderError, ValueError):
    """An aggregation reply does not have the expected shape."""


class ArgumentAssemblyError(SearchBuilderError, RuntimeError):
    """
    The argument assembler wrote a different number of tokens than it sized for.

    This is a defect in a clause definition, never a user error.
    """
