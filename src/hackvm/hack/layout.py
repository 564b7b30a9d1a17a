"""
Hack Platform Memory Layout
===========================

Fixed physical layout shared by the VM translator, the assembler and the
CPU emulator.

RAM Map:
    0       SP      stack pointer
    1       LCL     local segment base
    2       ARG     argument segment base
    3       THIS    this segment base   (pointer 0)
    4       THAT    that segment base   (pointer 1)
    5-12            temp segment (8 words)
    13-15   R13-R15 translator scratch registers
    16-255          static variables (allocated by the assembler)
    256-2047        stack
    16384-24575     screen memory map
    24576           keyboard memory map

Scratch Registers:
    R13  right-hand arithmetic operand, destination address of a pop
    R14  left-hand arithmetic operand, return address during return
    R15  frame base during return (call/return protocol only)

None of the scratch registers is reachable through a VM segment, so
generated code never aliases storage the VM program can see.
"""

from types import MappingProxyType


# =============================================================================
# Control Registers
# =============================================================================

SP = 0
LCL = 1
ARG = 2
THIS = 3
THAT = 4

# =============================================================================
# Segments
# =============================================================================

TEMP_BASE = 5
TEMP_SIZE = 8

POINTER_BASE = THIS
POINTER_SIZE = 2

STATIC_BASE = 16
STACK_BASE = 256

SCREEN = 16384
KBD = 24576

# =============================================================================
# Scratch Registers
# =============================================================================

SCRATCH_RIGHT = "R13"
SCRATCH_LEFT = "R14"
FRAME_REGISTER = "R15"
RETURN_REGISTER = SCRATCH_LEFT

# =============================================================================
# Machine Limits
# =============================================================================

WORD_BITS = 16
WORD_MASK = 0xFFFF
MAX_ADDRESS_LITERAL = 0x7FFF
RAM_SIZE = 0x8000
ROM_SIZE = 0x8000


# Symbols every Hack assembler knows without a declaration.
PREDEFINED_SYMBOLS = MappingProxyType({
    "SP": SP,
    "LCL": LCL,
    "ARG": ARG,
    "THIS": THIS,
    "THAT": THAT,
    **{f"R{i}": i for i in range(16)},
    "SCREEN": SCREEN,
    "KBD": KBD,
})


def to_signed(value: int) -> int:
    """Interpret a 16-bit word as a two's complement integer."""
    value &= WORD_MASK
    return value - 0x10000 if value & 0x8000 else value


def to_word(value: int) -> int:
    """Truncate a Python integer to a 16-bit word."""
    return value & WORD_MASK
