"""
Shared Test Fixtures
====================

Fixtures for running translated VM programs on the Hack CPU emulator.

The ``run_vm`` fixture translates VM source, assembles the instruction
records, loads them into a fresh HackCPU with SP=256 and any requested
RAM presets, and runs the program until it reaches a halt loop.
"""

from dataclasses import dataclass
from typing import Optional

import pytest

from hackvm.hack import HackAssembler, HackCPU
from hackvm.hack.layout import SP, STACK_BASE
from hackvm.translator import TranslationResult, TranslatorOptions, VMTranslator


@dataclass
class VMRun:
    """Outcome of running a translated program."""
    cpu: HackCPU
    symbols: dict[str, int]
    result: TranslationResult

    def static(self, module: str, index: int) -> int:
        """Value of a module's static variable."""
        return self.cpu.peek(self.symbols[f"{module}.{index}"])


@pytest.fixture
def run_vm():
    """
    Fixture: translate and execute VM code.

    Usage:
        run = run_vm("push constant 1\\n")
        run = run_vm(modules=[("A", src_a), ("B", src_b)], bootstrap=True)
        run = run_vm(src, ram={1: 300})
    """
    def _run(
        source: Optional[str] = None,
        modules: Optional[list[tuple[str, str]]] = None,
        bootstrap: bool = False,
        ram: Optional[dict[int, int]] = None,
        max_cycles: int = 500_000,
    ) -> VMRun:
        if modules is None:
            modules = [("Main", source)]
        translator = VMTranslator(TranslatorOptions(bootstrap=bootstrap))
        result = translator.translate_sources(modules)

        asm = HackAssembler()
        cpu = HackCPU(asm.assemble_instructions(result.instructions))
        cpu.poke(SP, STACK_BASE)
        for address, value in (ram or {}).items():
            cpu.poke(address, value)
        cpu.run(max_cycles)
        return VMRun(cpu, asm.get_symbols(), result)

    return _run
