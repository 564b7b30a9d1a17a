"""
Tests for the Hack CPU Emulator
===============================

Covers the ALU, jump conditions, instruction execution, halting and the
memory helpers used by the execution tests.
"""

import pytest

from hackvm.errors import EmulatorError, ExecutionLimitError, InvalidInstructionError
from hackvm.hack import HackCPU, alu, assemble
from hackvm.hack.cpu import jump_taken
from hackvm.hack.instructions import COMP_CODES
from hackvm.hack.layout import to_signed


def cpu_for(source: str) -> HackCPU:
    return HackCPU(assemble(source))


# =============================================================================
# ALU
# =============================================================================

class TestALU:
    """Every a=0 computation with D=5 and A=3."""

    @pytest.mark.parametrize("mnemonic, expected", [
        ("0", 0),
        ("1", 1),
        ("-1", -1),
        ("D", 5),
        ("A", 3),
        ("!D", -6),
        ("!A", -4),
        ("-D", -5),
        ("-A", -3),
        ("D+1", 6),
        ("A+1", 4),
        ("D-1", 4),
        ("A-1", 2),
        ("D+A", 8),
        ("D-A", 2),
        ("A-D", -2),
        ("D&A", 1),
        ("D|A", 7),
    ])
    def test_computation(self, mnemonic, expected):
        control = COMP_CODES[mnemonic] & 0x3F
        assert to_signed(alu(5, 3, control)) == expected

    def test_result_wraps(self):
        control = COMP_CODES["D+A"] & 0x3F
        assert alu(0x7FFF, 1, control) == 0x8000


class TestJumpConditions:
    """Tests for jump_taken()."""

    @pytest.mark.parametrize("condition, value, taken", [
        (0b001, 1, True),        # JGT
        (0b001, 0, False),
        (0b010, 0, True),        # JEQ
        (0b011, 0, True),        # JGE
        (0b100, 0xFFFF, True),   # JLT
        (0b100, 0, False),
        (0b101, 0, False),       # JNE
        (0b101, 0x8000, True),
        (0b110, 0x8000, True),   # JLE
        (0b111, 0, True),        # JMP
    ])
    def test_conditions(self, condition, value, taken):
        assert jump_taken(condition, value) is taken


# =============================================================================
# Execution
# =============================================================================

class TestExecution:
    """Tests for step() and run()."""

    def test_a_instruction(self):
        cpu = cpu_for("@1234\n")
        assert cpu.step()
        assert cpu.state.a == 1234
        assert cpu.state.pc == 1

    def test_memory_write(self):
        cpu = cpu_for("@7\nD=A\n@100\nM=D\n")
        cpu.run()
        assert cpu.peek(100) == 7

    def test_am_writes_through_old_address(self):
        cpu = cpu_for("@SP\nAM=M-1\nD=M\n")
        cpu.poke(0, 257)
        cpu.poke(256, 42)
        cpu.run()
        assert cpu.peek(0) == 256
        assert cpu.state.a == 256
        assert cpu.state.d == 42

    def test_jump_uses_old_address(self):
        # ROM: 0 @3, 1 A=1;JMP, 2 @99, 3 @100, 4 D=A
        cpu = cpu_for("@3\nA=1;JMP\n@99\n@100\nD=A\n")
        cpu.run(max_cycles=50)
        assert cpu.state.d == 100

    def test_conditional_jump_not_taken(self):
        cpu = cpu_for("@10\nD=A\n@SKIP\nD;JLT\nD=D+1\n(SKIP)\n")
        cpu.run()
        assert cpu.state.d == 11

    def test_halt_loop(self):
        cpu = cpu_for("@7\nD=A\n@0\nM=D\n(END)\n@END\n0;JMP\n")
        cycles = cpu.run()
        assert cpu.halted
        assert cycles == 6
        assert cpu.peek(0) == 7
        assert not cpu.step()

    def test_running_off_the_end_halts(self):
        cpu = cpu_for("@5\nD=A\n")
        assert cpu.run() == 2
        assert cpu.halted
        assert cpu.state.d == 5

    def test_jump_loop_is_not_a_halt(self):
        cpu = cpu_for("(A)\n@B\n0;JMP\n(B)\n@A\n0;JMP\n")
        with pytest.raises(ExecutionLimitError) as excinfo:
            cpu.run(max_cycles=100)
        assert excinfo.value.cycles == 100

    def test_invalid_instruction(self):
        cpu = HackCPU([0b1000000000000000])
        with pytest.raises(InvalidInstructionError) as excinfo:
            cpu.step()
        assert excinfo.value.address == 0

    def test_write_outside_ram(self):
        cpu = cpu_for("@32767\nA=A+1\nM=1\n")
        with pytest.raises(EmulatorError, match="outside memory"):
            cpu.run()

    def test_on_instruction_can_stop(self):
        cpu = cpu_for("@1\n@2\n@3\n@4\n")
        cpu.on_instruction = lambda pc, word: pc != 2
        assert cpu.run() == 2
        assert not cpu.halted
        assert cpu.state.a == 2


# =============================================================================
# Memory Helpers
# =============================================================================

class TestMemory:
    """Tests for peek/poke, stack() and reset."""

    def test_poke_negative(self):
        cpu = HackCPU()
        cpu.poke(100, -1)
        assert cpu.ram[100] == 0xFFFF
        assert cpu.peek(100) == -1

    def test_stack(self):
        cpu = HackCPU()
        cpu.poke(0, 259)
        cpu.poke(256, 1)
        cpu.poke(257, -2)
        cpu.poke(258, 3)
        assert cpu.sp == 259
        assert cpu.stack() == [1, -2, 3]

    def test_reset_keeps_ram(self):
        cpu = cpu_for("@9\nD=A\n@50\nM=D\n")
        cpu.run()
        cpu.reset()
        assert cpu.state.pc == 0
        assert cpu.cycles == 0
        assert not cpu.halted
        assert cpu.peek(50) == 9

    def test_program_too_large(self):
        with pytest.raises(EmulatorError, match="exceeds ROM size"):
            HackCPU([0] * 0x8001)
