"""
VM Translator
=============

Translates programs for the stack-based VM into Hack assembly.

Main Components
---------------
- **commands**: Command kinds, the Command record and line classification
- **reader**: Reader, turning VM source lines into Commands
- **codegen**: CodeGenerator, turning Commands into Hack instructions
- **translator**: VMTranslator, the file and directory driver

Translation Process
-------------------
1. For each module (.vm file) the driver calls ``set_module(name)``.
2. A Reader over the module yields Commands in source order; each is
   passed to ``CodeGenerator.write``.
3. After the last module the driver calls ``close()`` once, which emits
   the halt loop.

Example Usage
-------------
>>> from hackvm.translator import VMTranslator, TranslatorOptions
>>> result = VMTranslator(TranslatorOptions(bootstrap=False)).translate_source(
...     "push constant 7\\npush constant 8\\nadd\\n", "Main")
>>> result.assembly.splitlines()[:2]
['@7', 'D=A']
"""

from hackvm.translator.codegen import (
    BOOTSTRAP_FUNCTION,
    CodeGenerator,
    DEFAULT_ENTRY_FUNCTION,
    HALT_LABEL,
    TranslationState,
)
from hackvm.translator.commands import Command, CommandKind, classify
from hackvm.translator.reader import Reader, ReaderState
from hackvm.translator.translator import (
    TranslationResult,
    TranslatorOptions,
    VMTranslator,
    discover_sources,
    output_path_for,
)

__all__ = [
    # Commands
    "Command",
    "CommandKind",
    "classify",
    # Reader
    "Reader",
    "ReaderState",
    # Code generator
    "CodeGenerator",
    "TranslationState",
    "BOOTSTRAP_FUNCTION",
    "DEFAULT_ENTRY_FUNCTION",
    "HALT_LABEL",
    # Driver
    "VMTranslator",
    "TranslatorOptions",
    "TranslationResult",
    "discover_sources",
    "output_path_for",
]
