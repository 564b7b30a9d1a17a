"""
VM Source Reader
================

Turns raw VM source lines into classified Commands, one at a time.

Comments start with ``//`` and run to the end of the line. Lines that are
empty after removing the comment and surrounding whitespace are skipped.

Reader States
-------------
    EMPTY      no command read yet
    HOLDING    a command is available via ``command``
    EXHAUSTED  advance() found no further command; terminal

Example
-------
>>> reader = Reader("push constant 7  // seven\\npush constant 8\\nadd\\n")
>>> [str(cmd) for cmd in reader]
['push constant 7', 'push constant 8', 'add']
"""

from enum import Enum, auto
from pathlib import Path
from typing import Iterable, Iterator, Optional

from hackvm.errors import ContextError, SourceLocation
from hackvm.translator.commands import Command, CommandKind, classify


COMMENT_MARKER = "//"


class ReaderState(Enum):
    EMPTY = auto()
    HOLDING = auto()
    EXHAUSTED = auto()


class Reader:
    """
    Line-oriented reader over one VM module.

    Attributes:
        filename: Name used in error locations
        line_number: Number of source lines consumed so far
        command_number: Number of commands read so far
    """

    def __init__(self, source: str | Iterable[str], filename: str = "<input>"):
        """
        Initialize the reader.

        Args:
            source: Full source text, or an iterable of lines
            filename: Source filename for error messages
        """
        if isinstance(source, str):
            self._lines = source.splitlines()
        else:
            self._lines = [line.rstrip("\r\n") for line in source]
        self.filename = filename
        self.line_number = 0
        self.command_number = 0
        self._command: Optional[Command] = None
        self._state = ReaderState.EMPTY

    @classmethod
    def from_file(cls, filepath: str | Path) -> "Reader":
        """Create a reader over a .vm file. I/O errors propagate unchanged."""
        path = Path(filepath)
        return cls(path.read_text(encoding="utf-8"), str(path))

    # =========================================================================
    # Iteration
    # =========================================================================

    @property
    def state(self) -> ReaderState:
        return self._state

    def has_more(self) -> bool:
        """True while unconsumed source lines remain."""
        return self.line_number < len(self._lines)

    def advance(self) -> None:
        """
        Read the next command.

        Consumes lines until one is non-empty after comment stripping and
        classifies it. If the input runs out first, the reader becomes
        EXHAUSTED; further calls are no-ops.

        Raises:
            VMSyntaxError: If the line's operator is not a VM keyword
            ArityError: If the line carries surplus operands
        """
        if self._state is ReaderState.EXHAUSTED:
            return

        while self.has_more():
            raw = self._lines[self.line_number]
            self.line_number += 1

            code = raw.split(COMMENT_MARKER, 1)[0]
            text = code.strip()
            if not text:
                continue

            column = len(code) - len(code.lstrip()) + 1
            location = SourceLocation(self.filename, self.line_number, column)
            self._command = classify(text, location)
            self.command_number += 1
            self._state = ReaderState.HOLDING
            return

        self._command = None
        self._state = ReaderState.EXHAUSTED

    def __iter__(self) -> Iterator[Command]:
        """Yield every remaining command in source order."""
        while True:
            self.advance()
            if self._state is not ReaderState.HOLDING:
                return
            yield self._command

    # =========================================================================
    # Current Command Accessors
    # =========================================================================

    @property
    def command(self) -> Command:
        """
        The current command.

        Raises:
            ContextError: Before the first advance() or once exhausted
        """
        if self._command is None:
            if self._state is ReaderState.EMPTY:
                message = "no command has been read yet"
            else:
                message = "no command available: input is exhausted"
            raise ContextError(message, SourceLocation(self.filename, self.line_number, 0))
        return self._command

    @property
    def kind(self) -> Optional[CommandKind]:
        """Kind of the current command, or None when there is none."""
        return self._command.kind if self._command else None

    def operator(self) -> str:
        return self.command.operator()

    def symbol(self) -> str:
        return self.command.symbol()

    def count(self) -> int:
        return self.command.count()
