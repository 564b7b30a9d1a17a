"""
Hack Platform Support
=====================

Everything the toolchain knows about the target machine:

- **layout**: Fixed RAM map, scratch registers and predefined symbols
- **instructions**: Structured instruction records and encoding tables
- **assembler**: Two-pass assembler producing 16-bit words (hackasm)
- **cpu**: Reference CPU used to execute translated programs

Example
-------
>>> from hackvm.hack import HackAssembler, HackCPU
>>> words = HackAssembler().assemble("@7\\nD=A\\n@0\\nM=D\\n(END)\\n@END\\n0;JMP\\n")
>>> cpu = HackCPU(words)
>>> _ = cpu.run()
>>> cpu.peek(0)
7
"""

from hackvm.hack.assembler import HackAssembler, SourceLine, assemble, parse_line, parse_source
from hackvm.hack.cpu import CPUState, HackCPU, alu
from hackvm.hack.instructions import (
    AddressInstruction,
    Comment,
    ComputeInstruction,
    Instruction,
    LabelDeclaration,
    render_program,
)
from hackvm.hack import layout

__all__ = [
    # Assembler
    "HackAssembler",
    "SourceLine",
    "assemble",
    "parse_line",
    "parse_source",
    # CPU
    "CPUState",
    "HackCPU",
    "alu",
    # Instructions
    "AddressInstruction",
    "Comment",
    "ComputeInstruction",
    "Instruction",
    "LabelDeclaration",
    "render_program",
    # Layout
    "layout",
]
