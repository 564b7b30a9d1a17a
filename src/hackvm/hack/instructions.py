"""
Structured Hack Instructions
============================

Hack assembly has exactly three kinds of line:

| Kind     | Syntax              | Record              |
|----------|---------------------|---------------------|
| Address  | @value              | AddressInstruction  |
| Compute  | dest=comp;jump      | ComputeInstruction  |
| Label    | (SYMBOL)            | LabelDeclaration    |

plus ``//`` comments, kept as Comment records so annotated output can be
rendered faithfully. The VM translator emits these records and the
assembler parses text back into them; text only appears at serialization.

Binary Encoding
---------------
    A-instruction:  0vvv vvvv vvvv vvvv
    C-instruction:  111a cccc ccdd djjj

The comp table maps each mnemonic to its 7 bits (a + c1..c6), where the
c bits drive the ALU control lines zx, nx, zy, ny, f, no.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Union
import re


# =============================================================================
# Instruction Records
# =============================================================================

@dataclass(frozen=True)
class AddressInstruction:
    """
    ``@value`` - load a literal or a symbol's address into A.

    Attributes:
        value: Decimal literal or symbol name
    """
    value: str

    @property
    def is_literal(self) -> bool:
        return self.value.isascii() and self.value.isdigit()

    def render(self) -> str:
        return f"@{self.value}"


@dataclass(frozen=True)
class ComputeInstruction:
    """
    ``dest=comp;jump`` - compute, optionally store, optionally jump.

    Attributes:
        comp: ALU computation mnemonic (e.g. "D+M", "!A", "0")
        dest: Destination registers (e.g. "M", "AM") or None
        jump: Jump condition (e.g. "JEQ", "JMP") or None
    """
    comp: str
    dest: Optional[str] = None
    jump: Optional[str] = None

    def render(self) -> str:
        text = self.comp
        if self.dest:
            text = f"{self.dest}={text}"
        if self.jump:
            text = f"{text};{self.jump}"
        return text


@dataclass(frozen=True)
class LabelDeclaration:
    """``(SYMBOL)`` - bind SYMBOL to the address of the next instruction."""
    symbol: str

    def render(self) -> str:
        return f"({self.symbol})"


@dataclass(frozen=True)
class Comment:
    """``// text`` - carried through to annotated output, never encoded."""
    text: str

    def render(self) -> str:
        return f"// {self.text}"


Instruction = Union[AddressInstruction, ComputeInstruction, LabelDeclaration, Comment]


def render_program(instructions: Iterable[Instruction]) -> str:
    """Serialize instruction records to assembly text, one per line."""
    lines = [inst.render() for inst in instructions]
    return "\n".join(lines) + "\n" if lines else ""


# =============================================================================
# Symbols
# =============================================================================

# Letters, digits, underscore, dot, dollar and colon; no leading digit.
SYMBOL_PATTERN = re.compile(r"[A-Za-z_.$:][A-Za-z0-9_.$:]*")


def is_valid_symbol(name: str) -> bool:
    return SYMBOL_PATTERN.fullmatch(name) is not None


# =============================================================================
# Encoding Tables
# =============================================================================

COMP_CODES = {
    # a=0
    "0":   0b0101010,
    "1":   0b0111111,
    "-1":  0b0111010,
    "D":   0b0001100,
    "A":   0b0110000,
    "!D":  0b0001101,
    "!A":  0b0110001,
    "-D":  0b0001111,
    "-A":  0b0110011,
    "D+1": 0b0011111,
    "A+1": 0b0110111,
    "D-1": 0b0001110,
    "A-1": 0b0110010,
    "D+A": 0b0000010,
    "D-A": 0b0010011,
    "A-D": 0b0000111,
    "D&A": 0b0000000,
    "D|A": 0b0010101,
    # a=1
    "M":   0b1110000,
    "!M":  0b1110001,
    "-M":  0b1110011,
    "M+1": 0b1110111,
    "M-1": 0b1110010,
    "D+M": 0b1000010,
    "D-M": 0b1010011,
    "M-D": 0b1000111,
    "D&M": 0b1000000,
    "D|M": 0b1010101,
}

# Commutative spellings accepted by the assembler.
COMP_ALIASES = {
    "A+D": "D+A",
    "M+D": "D+M",
    "A&D": "D&A",
    "M&D": "D&M",
    "A|D": "D|A",
    "M|D": "D|M",
    "1+D": "D+1",
    "1+A": "A+1",
    "1+M": "M+1",
}

JUMP_CODES = {
    None:  0b000,
    "JGT": 0b001,
    "JEQ": 0b010,
    "JGE": 0b011,
    "JLT": 0b100,
    "JNE": 0b101,
    "JLE": 0b110,
    "JMP": 0b111,
}

DEST_BITS = {"A": 0b100, "D": 0b010, "M": 0b001}


def dest_code(dest: Optional[str]) -> Optional[int]:
    """
    Encode a destination such as "AM" or "MD".

    Returns None if the destination is malformed (unknown or repeated
    register letters). Letter order is irrelevant.
    """
    if not dest:
        return 0
    if len(set(dest)) != len(dest):
        return None
    code = 0
    for letter in dest:
        if letter not in DEST_BITS:
            return None
        code |= DEST_BITS[letter]
    return code


def comp_code(comp: str) -> Optional[int]:
    """Encode a computation mnemonic, or None if unknown."""
    comp = COMP_ALIASES.get(comp, comp)
    return COMP_CODES.get(comp)
