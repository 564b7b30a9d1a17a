"""
Hack VM Toolchain
=================

This package translates programs for a stack-based virtual machine into
assembly for the Hack computer, a minimal two-register machine with a
single shared address space, and provides the assembler and emulator
needed to run the result.

Main Components
---------------
- **translator**: VM translator (hackvm)
    Converts VM modules (.vm) into Hack assembly (.asm)

- **hack**: Target machine support (hackasm)
    Memory layout, instruction records, assembler, and CPU emulator

Quick Start
-----------
Translate a program directory:
    >>> from hackvm import VMTranslator
    >>> result = VMTranslator().translate_path("FibonacciElement")
    >>> result.write()

Translate and run a snippet:
    >>> from hackvm import VMTranslator, TranslatorOptions, HackAssembler, HackCPU
    >>> result = VMTranslator(TranslatorOptions(bootstrap=False)).translate_source(
    ...     "push constant 7\\npush constant 8\\nadd\\n")
    >>> cpu = HackCPU(HackAssembler().assemble(result.assembly))
    >>> cpu.poke(0, 256)
    >>> _ = cpu.run()
    >>> cpu.stack()
    [15]

Or use the command-line tools:
    $ hackvm FibonacciElement/
    $ hackasm FibonacciElement/FibonacciElement.asm

Version History
---------------
1.0.0 - Initial release with translator, assembler and emulator
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from hackvm.translator import (
    CodeGenerator,
    Command,
    CommandKind,
    Reader,
    TranslationResult,
    TranslationState,
    TranslatorOptions,
    VMTranslator,
)
from hackvm.hack import HackAssembler, HackCPU
from hackvm.errors import (
    HackVMError,
    ConfigError,
    SourceLocation,
    TranslationError,
    VMSyntaxError,
    ArityError,
    ContextError,
    AssemblerError,
    AssemblySyntaxError,
    DuplicateSymbolError,
    EmulatorError,
    ExecutionLimitError,
    InvalidInstructionError,
)

__all__ = [
    "__version__",
    # Translator
    "CodeGenerator",
    "Command",
    "CommandKind",
    "Reader",
    "TranslationResult",
    "TranslationState",
    "TranslatorOptions",
    "VMTranslator",
    # Hack platform
    "HackAssembler",
    "HackCPU",
    # Exception hierarchy
    "HackVMError",
    "ConfigError",
    "SourceLocation",
    "TranslationError",
    "VMSyntaxError",
    "ArityError",
    "ContextError",
    "AssemblerError",
    "AssemblySyntaxError",
    "DuplicateSymbolError",
    "EmulatorError",
    "ExecutionLimitError",
    "InvalidInstructionError",
]
