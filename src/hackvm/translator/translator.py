"""
VM Translator Main Module
=========================

This module provides the main translator interface. It owns the I/O side
of translation and drives the core:

    .vm files → Reader → CodeGenerator → .asm

Usage
-----
Command line:
    $ hackvm Prog/          # writes Prog/Prog.asm
    $ hackvm Main.vm        # writes Main.asm

Programmatic:
    >>> from hackvm.translator import VMTranslator, TranslatorOptions
    >>> translator = VMTranslator(TranslatorOptions(bootstrap=False))
    >>> result = translator.translate_source("push constant 1\\n", "Main")
    >>> print(result.assembly)

Input Discovery
---------------
- A single ``.vm`` file is one module named after the file stem.
- A directory contributes every ``.vm`` file directly inside it, in
  sorted name order.

Output Paths
------------
- ``Dir/X.vm`` → ``Dir/X.asm``
- ``Dir/``     → ``Dir/Dir.asm``

Bootstrap
---------
With ``bootstrap=None`` (the default) the bootstrap is emitted when a
directory is translated and omitted for single files and raw sources,
which follows the usual convention that a directory is a whole program
with a ``Sys.init`` entry point.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional
import logging
import os

from hackvm.errors import ConfigError, TranslationError
from hackvm.hack.instructions import Instruction
from hackvm.hack.layout import STACK_BASE
from hackvm.translator.codegen import CodeGenerator, DEFAULT_ENTRY_FUNCTION
from hackvm.translator.reader import Reader


logger = logging.getLogger(__name__)


VM_SUFFIX = ".vm"
ASM_SUFFIX = ".asm"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


# =============================================================================
# Options and Result
# =============================================================================

@dataclass
class TranslatorOptions:
    """
    Translator configuration options.

    Attributes:
        bootstrap: Emit SP initialization and a call to entry_function.
            None means automatic: on for directories, off otherwise.
        entry_function: Function called by the bootstrap
        annotate: Emit each VM command as a comment in the assembly
        stack_base: Initial stack pointer set by the bootstrap
    """
    bootstrap: Optional[bool] = None
    entry_function: str = DEFAULT_ENTRY_FUNCTION
    annotate: bool = False
    stack_base: int = STACK_BASE

    @classmethod
    def from_env(cls) -> "TranslatorOptions":
        """
        Create options from environment variables.

        Environment variables (all optional):
            HACKVM_BOOTSTRAP: "1"/"0" (or true/false, yes/no, on/off)
            HACKVM_ENTRY: Entry function name
            HACKVM_ANNOTATE: "1"/"0"

        Returns:
            TranslatorOptions with values from environment variables

        Raises:
            ConfigError: If a flag variable holds an unrecognized value
        """
        options = cls()

        if bootstrap := os.environ.get("HACKVM_BOOTSTRAP"):
            options.bootstrap = _parse_flag("HACKVM_BOOTSTRAP", bootstrap)

        if entry := os.environ.get("HACKVM_ENTRY"):
            options.entry_function = entry

        if annotate := os.environ.get("HACKVM_ANNOTATE"):
            options.annotate = bool(_parse_flag("HACKVM_ANNOTATE", annotate))

        return options


def _parse_flag(name: str, value: str) -> Optional[bool]:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    if lowered == "auto":
        return None
    raise ConfigError(f"{name} must be a boolean flag, got {value!r}")


@dataclass
class TranslationResult:
    """
    Result of translating one program.

    Attributes:
        assembly: Hack assembly text
        instructions: Structured instruction records
        modules: Module names in translation order
        output_path: Where the assembly belongs (None for raw sources)
    """
    assembly: str = ""
    instructions: tuple[Instruction, ...] = ()
    modules: list[str] = field(default_factory=list)
    output_path: Optional[Path] = None

    def write(self, filepath: Optional[str | Path] = None) -> Path:
        """Write the assembly to filepath (default: output_path)."""
        target = Path(filepath) if filepath is not None else self.output_path
        if target is None:
            raise ValueError("no output path given for a translation of raw sources")
        target.write_text(self.assembly, encoding="utf-8")
        logger.debug(f"Wrote {len(self.assembly)} bytes to {target}")
        return target


# =============================================================================
# Input Discovery
# =============================================================================

def discover_sources(path: str | Path) -> list[Path]:
    """
    Find the .vm files making up a program.

    Args:
        path: A .vm file or a directory

    Returns:
        The .vm files, sorted by name for directories

    Raises:
        FileNotFoundError: If path does not exist
        TranslationError: If path is not a .vm file or has no .vm files
    """
    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"no such file or directory: {source}")

    if source.is_dir():
        files = sorted(
            p for p in source.iterdir()
            if p.is_file() and p.suffix == VM_SUFFIX
        )
        if not files:
            raise TranslationError(f"no {VM_SUFFIX} files in directory {source}")
        return files

    if source.suffix != VM_SUFFIX:
        raise TranslationError(f"input file {source} does not have a {VM_SUFFIX} extension")
    return [source]


def output_path_for(path: str | Path) -> Path:
    """Map an input file or directory to its .asm output path."""
    source = Path(path)
    if source.is_dir():
        return source / f"{source.resolve().name}{ASM_SUFFIX}"
    return source.with_suffix(ASM_SUFFIX)


# =============================================================================
# Translator
# =============================================================================

class VMTranslator:
    """
    VM-to-Hack translator.

    Example:
        translator = VMTranslator()
        result = translator.translate_path("FibonacciElement")
        result.write()

    Attributes:
        options: Translator configuration options
    """

    def __init__(self, options: Optional[TranslatorOptions] = None):
        self.options = options or TranslatorOptions()

    def translate_source(self, source: str, module: str = "Main") -> TranslationResult:
        """Translate a single module given as text."""
        return self.translate_sources([(module, source)])

    def translate_sources(
        self,
        modules: Iterable[tuple[str, str]],
        bootstrap: Optional[bool] = None,
    ) -> TranslationResult:
        """
        Translate (module name, source text) pairs as one program.

        Args:
            modules: Modules in translation order
            bootstrap: Fallback when options.bootstrap is automatic

        Returns:
            TranslationResult with the complete program

        Raises:
            TranslationError: On the first malformed command
        """
        readers = [(name, Reader(source, f"{name}{VM_SUFFIX}")) for name, source in modules]
        return self._translate(readers, bootstrap)

    def translate_path(self, path: str | Path) -> TranslationResult:
        """
        Translate a .vm file or a directory of .vm files.

        I/O errors propagate unchanged.
        """
        source = Path(path)
        files = discover_sources(source)
        logger.debug(f"Translating {len(files)} module(s) from {source}")

        readers = [(vm_file.stem, Reader.from_file(vm_file)) for vm_file in files]
        result = self._translate(readers, bootstrap=source.is_dir())
        result.output_path = output_path_for(source)
        return result

    def _translate(
        self,
        readers: list[tuple[str, Reader]],
        bootstrap: Optional[bool],
    ) -> TranslationResult:
        if self.options.bootstrap is not None:
            bootstrap = self.options.bootstrap

        generator = CodeGenerator(
            bootstrap=bool(bootstrap),
            entry_function=self.options.entry_function,
            annotate=self.options.annotate,
            stack_base=self.options.stack_base,
        )
        result = TranslationResult()

        for name, reader in readers:
            generator.set_module(name)
            for command in reader:
                generator.write(command)
            result.modules.append(name)

        generator.close()
        result.instructions = generator.instructions
        result.assembly = generator.to_text()
        logger.debug(
            f"Translated {len(result.modules)} module(s) into "
            f"{len(result.instructions)} instruction records"
        )
        return result
