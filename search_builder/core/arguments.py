"""
Argument assembly for positional search commands.

Clauses are sized first and written second. The total length is known before
anything is written, so the output list is allocated exactly once and every
clause lands at a fixed, monotonically advancing position.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from search_builder.core.errors import ArgumentAssemblyError

logger = logging.getLogger(__name__)

Token = Union[str, int, float]


@dataclass(frozen=True)
class Clause:
    """
    One optional piece of a command.

    Attributes:
        name: Label used in error messages
        present: Whether the clause contributes any tokens
        arity: Exact number of tokens the clause writes when present
        emit: Produces the tokens, called only when present
    """

    name: str
    present: bool
    arity: int
    emit: Callable[[], Iterable[Token]]


def fixed(name: str, *tokens: Token) -> Clause:
    """A clause that is always present and writes the given tokens."""
    return Clause(name, True, len(tokens), lambda: tokens)


def flag(keyword: str, enabled: bool) -> Clause:
    """A single keyword written only when enabled (e.g. NOOFFSETS)."""
    return Clause(keyword, enabled, 1, lambda: (keyword,))


def keyword_value(keyword: str, value: Optional[Token], present: Optional[bool] = None) -> Clause:
    """
    A keyword followed by one value (e.g. FILTER <expr>).

    Absent when the value is None or an empty string, unless `present` says otherwise.
    """
    if present is None:
        present = value is not None and value != ""
    return Clause(keyword, present, 2, lambda: (keyword, value))


def counted(keyword: str, items: Sequence[Token], present: Optional[bool] = None) -> Clause:
    """
    A keyword, an item count, then the items (e.g. PREFIX 2 a: b:).

    Absent when there are no items, unless `present` forces it (STOPWORDS 0).
    """
    items = tuple(items)
    if present is None:
        present = bool(items)

    def emit() -> Iterable[Token]:
        yield keyword
        yield len(items)
        yield from items

    return Clause(keyword, present, 2 + len(items), emit)


class ArgumentAssembler:
    """
    Two-pass assembler that turns clauses into one flat token tuple.

    The clause order given to `assemble` is the order tokens are emitted in;
    callers are responsible for passing clauses in the command's canonical order.
    """

    @staticmethod
    def measure(clauses: Sequence[Clause]) -> int:
        """Sum the arity of every present clause."""
        return sum(clause.arity for clause in clauses if clause.present)

    @classmethod
    def assemble(cls, clauses: Sequence[Clause]) -> Tuple[Token, ...]:
        """
        Size, allocate and fill the token sequence.

        Args:
            clauses: Clauses in canonical order

        Returns:
            Immutable tuple of tokens whose length equals `measure(clauses)`

        Raises:
            ArgumentAssemblyError: A clause wrote more or fewer tokens than its arity
        """
        length = cls.measure(clauses)
        result: List[Optional[Token]] = [None] * length
        position = 0

        for clause in clauses:
            if not clause.present:
                continue

            start = position
            for token in clause.emit():
                if position >= length:
                    raise ArgumentAssemblyError(
                        f"Clause '{clause.name}' overflowed the {length}-token command"
                    )
                if token is None:
                    raise ArgumentAssemblyError(
                        f"Clause '{clause.name}' emitted an empty token"
                    )
                result[position] = token
                position += 1

            written = position - start
            if written != clause.arity:
                raise ArgumentAssemblyError(
                    f"Clause '{clause.name}' declared {clause.arity} tokens but wrote {written}"
                )

        if position != length:
            raise ArgumentAssemblyError(
                f"Assembled {position} tokens into a {length}-token command"
            )

        logger.debug("Assembled %d tokens from %d clauses", length, len(clauses))
        return tuple(result)  # type: ignore[arg-type]


def render_command(tokens: Sequence[Token]) -> str:
    """
    Render tokens as a copy-pasteable command line.

    Tokens containing whitespace or quotes are double-quoted.
    """
    rendered = []
    for token in tokens:
        text = format_token(token)
        if text == "" or any(ch.isspace() for ch in text) or '"' in text:
            text = '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
        rendered.append(text)
    return " ".join(rendered)


def format_token(token: Token) -> str:
    """Format one token the way it goes over the wire."""
    if isinstance(token, bool):
        return str(int(token))
    if isinstance(token, float) and token.is_integer():
        return str(int(token))
    return str(token)
