"""
Compiled index definition.
"""

from dataclasses import dataclass
from typing import ClassVar, Iterator, List, Tuple

from search_builder.core.arguments import Token, render_command


@dataclass(frozen=True)
class IndexDefinition:
    """
    Immutable `FT.CREATE` body: every token after the index name.

    Safe to share and resend; nothing mutates it after `build()`.
    `str()` renders the tokens after the index name, `render(index_name)` the
    full command.
    """

    COMMAND: ClassVar[str] = "FT.CREATE"

    arguments: Tuple[Token, ...]

    def __len__(self) -> int:
        return len(self.arguments)

    def __iter__(self) -> Iterator[Token]:
        return iter(self.arguments)

    def __getitem__(self, index):
        return self.arguments[index]

    def to_command(self, index_name: str) -> List[Token]:
        """Full command including the command name and index name."""
        return [self.COMMAND, index_name, *self.arguments]

    def render(self, index_name: str) -> str:
        """Full command as a copy-pasteable command line."""
        return render_command(self.to_command(index_name))

    def __str__(self) -> str:
        return render_command(self.arguments)
