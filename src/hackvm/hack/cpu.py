"""
Hack CPU Emulator
=================

Reference executor for the Hack platform, used to check translated
programs by running them.

The Hack CPU has:
- 16-bit registers: A (address/data), D (data), PC (program counter)
- 32K words of instruction ROM and 32K words of data RAM
- M, the memory operand, is RAM[A]

Instruction Decoding
--------------------
    0vvvvvvvvvvvvvvv    A = v
    111accccccdddjjj    compute ALU(D, a ? M : A), store, jump

The six c bits drive the ALU control lines zx, nx, zy, ny, f, no exactly
as in the hardware ALU, so every comp mnemonic in the assembler's table
is executed by the same logic rather than a lookup.

Halting
-------
Hack has no halt instruction. Programs end in a tight loop:

    (END)
    @END
    0;JMP

The emulator recognizes an unconditional jump back to an address
instruction that loads its own address, and stops there.
"""

from dataclasses import dataclass
from typing import Callable, Optional
import logging

from hackvm.errors import EmulatorError, ExecutionLimitError, InvalidInstructionError
from hackvm.hack.layout import RAM_SIZE, ROM_SIZE, SP, STACK_BASE, WORD_MASK, to_signed, to_word


logger = logging.getLogger(__name__)


@dataclass
class CPUState:
    """
    Complete register state.

    All values are stored as unsigned 16-bit words.
    """
    a: int = 0
    d: int = 0
    pc: int = 0


def alu(x: int, y: int, control: int) -> int:
    """
    Hack ALU.

    Args:
        x: D register value
        y: A register or M value
        control: The six bits zx nx zy ny f no (zx is the most significant)

    Returns:
        16-bit result
    """
    zx, nx, zy, ny, f, no = ((control >> shift) & 1 for shift in range(5, -1, -1))
    if zx:
        x = 0
    if nx:
        x = ~x & WORD_MASK
    if zy:
        y = 0
    if ny:
        y = ~y & WORD_MASK
    out = (x + y) & WORD_MASK if f else x & y
    if no:
        out = ~out & WORD_MASK
    return out


def jump_taken(condition: int, value: int) -> bool:
    """Evaluate the j1 j2 j3 bits (lt, eq, gt) against a result word."""
    signed = to_signed(value)
    return bool(
        (condition & 0b100 and signed < 0)
        or (condition & 0b010 and signed == 0)
        or (condition & 0b001 and signed > 0)
    )


class HackCPU:
    """
    Hack CPU with ROM and RAM.

    Example:
        >>> cpu = HackCPU(words)
        >>> cpu.poke(SP, 256)
        >>> _ = cpu.run()
        >>> cpu.stack()
        [15]

    Attributes:
        rom: Loaded program words
        ram: Data memory, unsigned 16-bit words
        state: Register state
        cycles: Instructions executed since reset
        halted: True once the halt loop has been reached
    """

    def __init__(self, program: Optional[list[int]] = None):
        self.rom: list[int] = []
        self.ram: list[int] = [0] * RAM_SIZE
        self.state = CPUState()
        self.cycles = 0
        self.halted = False

        # on_instruction(pc, word) -> bool: return False to stop execution
        self.on_instruction: Optional[Callable[[int, int], bool]] = None

        if program is not None:
            self.load(program)

    # =========================================================================
    # Program and Memory Access
    # =========================================================================

    def load(self, program: list[int]) -> None:
        """Load program words into ROM and reset the registers."""
        if len(program) > ROM_SIZE:
            raise EmulatorError(f"program of {len(program)} words exceeds ROM size {ROM_SIZE}")
        self.rom = [word & WORD_MASK for word in program]
        self.reset()

    def reset(self) -> None:
        """Reset registers. RAM is left untouched, as on the real machine."""
        self.state = CPUState()
        self.cycles = 0
        self.halted = False

    def peek(self, address: int) -> int:
        """Read RAM as a signed integer."""
        return to_signed(self.ram[address])

    def poke(self, address: int, value: int) -> None:
        """Write a (possibly negative) integer to RAM."""
        self.ram[address] = to_word(value)

    @property
    def sp(self) -> int:
        return self.ram[SP]

    def stack(self) -> list[int]:
        """Signed values from the stack base up to (excluding) SP."""
        return [to_signed(word) for word in self.ram[STACK_BASE:self.sp]]

    # =========================================================================
    # Execution
    # =========================================================================

    def step(self) -> bool:
        """
        Execute one instruction.

        Returns:
            False if the CPU is halted (before or as a result of this step)
        """
        if self.halted:
            return False

        state = self.state
        pc = state.pc
        if pc >= len(self.rom):
            # Running off the end of the program is treated as a halt
            self.halted = True
            return False

        word = self.rom[pc]
        if self.on_instruction and self.on_instruction(pc, word) is False:
            return False

        self.cycles += 1

        if not word & 0x8000:
            state.a = word
            state.pc = pc + 1
            return True

        if word >> 13 != 0b111:
            raise InvalidInstructionError(word, pc)

        address = state.a
        uses_memory = (word >> 12) & 1
        y = self._read(address) if uses_memory else address
        out = alu(state.d, y, (word >> 6) & 0x3F)

        dest = (word >> 3) & 0b111
        jump = word & 0b111

        if dest & 0b001:
            self._write(address, out)
        if dest & 0b010:
            state.d = out
        if dest & 0b100:
            state.a = out

        if jump and jump_taken(jump, out):
            state.pc = address
            if jump == 0b111 and self._is_halt_loop(pc, address):
                self.halted = True
                logger.debug(f"Halted at ROM[{address}] after {self.cycles} cycles")
                return False
        else:
            state.pc = pc + 1
        return True

    def run(self, max_cycles: int = 1_000_000) -> int:
        """
        Run until the program halts.

        Args:
            max_cycles: Execution budget

        Returns:
            Number of instructions executed

        Raises:
            ExecutionLimitError: If the budget is exhausted first
        """
        while self.step():
            if self.cycles >= max_cycles:
                raise ExecutionLimitError(max_cycles, self.state.pc)
        return self.cycles

    def _is_halt_loop(self, pc: int, target: int) -> bool:
        # @target immediately followed by an unconditional jump to it
        return target == pc - 1 and self.rom[target] == target

    def _read(self, address: int) -> int:
        if address >= RAM_SIZE:
            raise EmulatorError(f"read from RAM[{address}] outside memory")
        return self.ram[address]

    def _write(self, address: int, value: int) -> None:
        if address >= RAM_SIZE:
            raise EmulatorError(f"write to RAM[{address}] outside memory")
        self.ram[address] = value
