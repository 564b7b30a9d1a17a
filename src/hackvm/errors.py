"""
Hack VM Toolchain Error Hierarchy
=================================

This module defines the exception hierarchy for the entire toolchain.
All exceptions inherit from HackVMError, allowing callers to catch all
toolchain-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
HackVMError (base)
├── ConfigError - malformed option value, e.g. an environment flag
├── TranslationError (VM translator)
│   ├── VMSyntaxError - unrecognized operator or segment name
│   ├── ArityError - missing or non-numeric operand
│   └── ContextError - accessor invoked for an unsupported command kind
├── AssemblerError (Hack assembler)
│   ├── AssemblySyntaxError - malformed assembly line
│   └── DuplicateSymbolError - label declared twice
└── EmulatorError (Hack CPU)
    ├── InvalidInstructionError - undecodable instruction word
    └── ExecutionLimitError - program did not halt within the cycle budget

Design Philosophy
-----------------
Every translation or assembly error is fatal. Errors capture source
location information (filename, line, column) when applicable, so the
message identifies the offending command text and the violated contract.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class HackVMError(Exception):
    """
    Base exception for all toolchain errors.

    All exceptions in the package inherit from this class, allowing callers
    to catch every toolchain error with a single except clause:

        try:
            translator.translate_path("Prog")
        except HackVMError as e:
            print(f"Error: {e}")
    """
    pass


class ConfigError(HackVMError):
    """Invalid configuration value, such as HACKVM_BOOTSTRAP=maybe."""
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Located Error Base
# =============================================================================

class LocatedError(HackVMError):
    """
    Error carrying an optional source location, source line and hint.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            Main.vm:4:1: error: unknown segment 'lokal'
                push lokal 0
                ^
            hint: did you mean 'local'?
        """
        parts = []

        # Location prefix
        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        # Source context with caret pointer
        if self.source_line is not None:
            parts.append(f"    {self.source_line}")
            if self.location is not None and self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Translator Exceptions
# =============================================================================

class TranslationError(LocatedError):
    """
    Base exception for all VM translation errors.

    A translation error aborts the whole run: no partial output is
    written, because an incomplete instruction stream is worse than none.
    """
    pass


class VMSyntaxError(TranslationError):
    """
    Unrecognized operator or segment name in VM source.

    Examples:
        - push lokal 0      (unknown segment)
        - if LOOP           (the conditional jump is spelled 'if-goto')
        - pop constant 3    (constants are not addressable storage)
        - push temp 9       (index outside the segment)
    """
    pass


class ArityError(TranslationError):
    """
    Missing, surplus or non-numeric operand.

    Examples:
        - push local        (index missing)
        - function Foo.bar x  (count is not a non-negative integer)
        - add 1             (arithmetic takes no operands)
    """
    pass


class ContextError(TranslationError):
    """
    An accessor or operation used where it does not apply.

    Raised when an operand accessor is invoked for a command kind that
    does not carry that operand (count() on a label, symbol() on return),
    when a command is requested before any has been read, or when a
    static variable is referenced with no module context.
    """
    pass


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(LocatedError):
    """Base exception for all Hack assembler errors."""
    pass


class AssemblySyntaxError(AssemblerError):
    """
    Malformed Hack assembly line.

    Examples:
        - @                 (empty address)
        - D=Q               (unknown computation)
        - (LOOP             (unterminated label declaration)
    """
    pass


class DuplicateSymbolError(AssemblerError):
    """
    Label declared more than once.

    Includes the location of the original declaration when available.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.symbol = symbol
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{symbol}' was first declared at {original_location}"

        super().__init__(
            f"duplicate label '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


# =============================================================================
# Emulator Exceptions
# =============================================================================

class EmulatorError(HackVMError):
    """Base exception for Hack CPU execution errors."""
    pass


class InvalidInstructionError(EmulatorError):
    """Instruction word that does not decode to a valid Hack instruction."""

    def __init__(self, word: int, address: int):
        self.word = word
        self.address = address
        super().__init__(
            f"invalid instruction {word:016b} at ROM[{address}]"
        )


class ExecutionLimitError(EmulatorError):
    """Program did not reach its halt loop within the cycle budget."""

    def __init__(self, cycles: int, pc: int):
        self.cycles = cycles
        self.pc = pc
        super().__init__(
            f"program did not halt within {cycles} cycles (pc={pc})"
        )
