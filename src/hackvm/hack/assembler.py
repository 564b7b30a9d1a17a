"""
Hack Assembler
==============

Two-pass assembler converting Hack assembly into 16-bit machine words.

Assembly Process
----------------
1. **Parsing**: Each source line becomes a structured instruction record
   (see hackvm.hack.instructions). Comments and blank lines are dropped.

2. **Pass 1 - symbol collection**: Label declarations are bound to the
   ROM address of the next executable instruction.

3. **Pass 2 - encoding**: Address instructions are resolved against the
   predefined symbols, the collected labels, and finally variables, which
   are allocated consecutive RAM addresses starting at 16. Compute
   instructions are encoded from the comp/dest/jump tables.

Example Usage
-------------
>>> from hackvm.hack import HackAssembler
>>> asm = HackAssembler()
>>> words = asm.assemble("@2\\nD=A\\n@3\\nD=D+A\\n@0\\nM=D\\n")
>>> asm.to_hack_text()[:17]
'0000000000000010\\n'

The assembler also accepts instruction records directly, which is how
translated VM programs are loaded into the emulator without a round trip
through text.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional
import logging

from hackvm.errors import AssemblySyntaxError, DuplicateSymbolError, SourceLocation
from hackvm.hack.instructions import (
    AddressInstruction,
    Comment,
    ComputeInstruction,
    Instruction,
    JUMP_CODES,
    LabelDeclaration,
    comp_code,
    dest_code,
    is_valid_symbol,
)
from hackvm.hack.layout import MAX_ADDRESS_LITERAL, PREDEFINED_SYMBOLS, STATIC_BASE


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceLine:
    """
    A parsed assembly line.

    Attributes:
        instruction: The structured record
        location: Where the line came from (None for generated records)
        text: The trimmed source text (None for generated records)
    """
    instruction: Instruction
    location: Optional[SourceLocation] = None
    text: Optional[str] = None


# =============================================================================
# Line Parsing
# =============================================================================

def parse_line(text: str, location: Optional[SourceLocation] = None) -> Optional[Instruction]:
    """
    Parse one line of Hack assembly.

    Args:
        text: Raw source line
        location: Location for error reporting

    Returns:
        The instruction record, or None for blank and comment-only lines

    Raises:
        AssemblySyntaxError: If the line is malformed
    """
    code = text.split("//", 1)[0]
    # Whitespace is insignificant inside Hack instructions
    code = "".join(code.split())
    if not code:
        return None

    if code.startswith("@"):
        value = code[1:]
        if not value:
            raise AssemblySyntaxError("missing value after '@'", location, source_line=text.strip())
        if value.isascii() and value.isdigit():
            if int(value) > MAX_ADDRESS_LITERAL:
                raise AssemblySyntaxError(
                    f"address literal {value} exceeds {MAX_ADDRESS_LITERAL}",
                    location,
                    hint="load larger constants by computing them, e.g. negation",
                    source_line=text.strip(),
                )
            return AddressInstruction(str(int(value)))
        if not is_valid_symbol(value):
            raise AssemblySyntaxError(f"invalid symbol '{value}'", location, source_line=text.strip())
        return AddressInstruction(value)

    if code.startswith("("):
        if not code.endswith(")"):
            raise AssemblySyntaxError("unterminated label declaration", location, source_line=text.strip())
        symbol = code[1:-1]
        if not is_valid_symbol(symbol):
            raise AssemblySyntaxError(f"invalid label '{symbol}'", location, source_line=text.strip())
        return LabelDeclaration(symbol)

    dest = None
    jump = None
    comp = code
    if "=" in comp:
        dest, comp = comp.split("=", 1)
    if ";" in comp:
        comp, jump = comp.split(";", 1)

    if dest is not None and dest_code(dest) is None:
        raise AssemblySyntaxError(f"invalid destination '{dest}'", location, source_line=text.strip())
    if comp_code(comp) is None:
        raise AssemblySyntaxError(f"invalid computation '{comp}'", location, source_line=text.strip())
    if jump is not None and jump not in JUMP_CODES:
        raise AssemblySyntaxError(f"invalid jump '{jump}'", location, source_line=text.strip())

    return ComputeInstruction(comp=comp, dest=dest or None, jump=jump or None)


def parse_source(source: str, filename: str = "<input>") -> list[SourceLine]:
    """Parse assembly text into located instruction records."""
    lines = []
    for line_number, text in enumerate(source.splitlines(), start=1):
        column = len(text) - len(text.lstrip()) + 1
        location = SourceLocation(filename, line_number, column)
        inst = parse_line(text, location)
        if inst is not None:
            lines.append(SourceLine(inst, location, text.strip()))
    return lines


# =============================================================================
# Assembler
# =============================================================================

class HackAssembler:
    """
    Two-pass Hack assembler.

    Attributes:
        variable_base: First RAM address handed out to variables
    """

    def __init__(self, variable_base: int = STATIC_BASE):
        self.variable_base = variable_base
        self._symbols: dict[str, int] = {}
        self._label_locations: dict[str, Optional[SourceLocation]] = {}
        self._next_variable = variable_base
        self._words: list[int] = []

    # =========================================================================
    # Public Interface
    # =========================================================================

    def assemble(self, source: str, filename: str = "<input>") -> list[int]:
        """
        Assemble Hack assembly text.

        Args:
            source: Assembly source text
            filename: Source filename for error messages

        Returns:
            List of 16-bit machine words

        Raises:
            AssemblerError: On any syntax or symbol error
        """
        return self._assemble_lines(parse_source(source, filename))

    def assemble_instructions(self, instructions: Iterable[Instruction]) -> list[int]:
        """Assemble instruction records produced by the VM translator."""
        return self._assemble_lines([SourceLine(inst) for inst in instructions])

    def assemble_file(self, filepath: str | Path) -> list[int]:
        """Assemble a .asm file."""
        path = Path(filepath)
        logger.debug(f"Assembling {path}")
        return self.assemble(path.read_text(encoding="utf-8"), str(path))

    def get_symbols(self) -> dict[str, int]:
        """Return all resolved symbols (predefined, labels, variables)."""
        return dict(self._symbols)

    def get_code(self) -> list[int]:
        return list(self._words)

    def to_hack_text(self) -> str:
        """Render the last assembled program as .hack text."""
        return "".join(f"{word:016b}\n" for word in self._words)

    def write_hack(self, filepath: str | Path) -> None:
        Path(filepath).write_text(self.to_hack_text(), encoding="utf-8")

    # =========================================================================
    # Passes
    # =========================================================================

    def _assemble_lines(self, lines: list[SourceLine]) -> list[int]:
        self._symbols = dict(PREDEFINED_SYMBOLS)
        self._label_locations = {}
        self._next_variable = self.variable_base

        self._pass1(lines)
        self._words = self._pass2(lines)
        logger.debug(
            f"Assembled {len(self._words)} words, "
            f"{len(self._label_locations)} labels, "
            f"{self._next_variable - self.variable_base} variables"
        )
        return list(self._words)

    def _pass1(self, lines: list[SourceLine]) -> None:
        """Bind every label to the ROM address of the following instruction."""
        address = 0
        for line in lines:
            inst = line.instruction
            if isinstance(inst, LabelDeclaration):
                if inst.symbol in self._symbols:
                    raise DuplicateSymbolError(
                        inst.symbol,
                        location=line.location,
                        original_location=self._label_locations.get(inst.symbol),
                        source_line=line.text,
                    )
                self._symbols[inst.symbol] = address
                self._label_locations[inst.symbol] = line.location
            elif not isinstance(inst, Comment):
                address += 1

    def _pass2(self, lines: list[SourceLine]) -> list[int]:
        words = []
        for line in lines:
            inst = line.instruction
            if isinstance(inst, AddressInstruction):
                words.append(self._encode_address(inst, line))
            elif isinstance(inst, ComputeInstruction):
                words.append(self._encode_compute(inst, line))
        return words

    # =========================================================================
    # Encoding
    # =========================================================================

    def _encode_address(self, inst: AddressInstruction, line: SourceLine) -> int:
        if inst.is_literal:
            value = int(inst.value)
            if value > MAX_ADDRESS_LITERAL:
                raise AssemblySyntaxError(
                    f"address literal {value} exceeds {MAX_ADDRESS_LITERAL}",
                    line.location,
                    source_line=line.text,
                )
            return value

        if inst.value not in self._symbols:
            self._symbols[inst.value] = self._next_variable
            self._next_variable += 1
        return self._symbols[inst.value]

    def _encode_compute(self, inst: ComputeInstruction, line: SourceLine) -> int:
        comp = comp_code(inst.comp)
        dest = dest_code(inst.dest)
        if comp is None:
            raise AssemblySyntaxError(
                f"invalid computation '{inst.comp}'", line.location, source_line=line.text
            )
        if dest is None:
            raise AssemblySyntaxError(
                f"invalid destination '{inst.dest}'", line.location, source_line=line.text
            )
        if inst.jump not in JUMP_CODES:
            raise AssemblySyntaxError(
                f"invalid jump '{inst.jump}'", line.location, source_line=line.text
            )
        return 0b111 << 13 | comp << 6 | dest << 3 | JUMP_CODES[inst.jump]


def assemble(source: str, filename: str = "<input>") -> list[int]:
    """Convenience wrapper: assemble text with a fresh assembler."""
    return HackAssembler().assemble(source, filename)
