"""
Hack Code Generator for VM Commands
===================================

This module translates classified VM commands into Hack instruction
records. It implements the code generation phase of the VM translator;
the records are rendered to assembly text only when the program is
serialized.

Code Generation Strategy
------------------------
Every command becomes one self-contained block of instructions that
preserves stack-machine semantics. Blocks never depend on register
contents left behind by a previous block.

Stack operations use the stack pointer at RAM[0]:

    push D:   @SP  A=M  M=D  @SP  M=M+1
    pop D:    @SP  AM=M-1  D=M

Register Usage
--------------
| Register | Usage                                          |
|----------|------------------------------------------------|
| D        | Value being moved, ALU results                 |
| A        | Addressing                                     |
| R13      | Right arithmetic operand, pop destination      |
| R14      | Left arithmetic operand, return address        |
| R15      | Frame base during return                       |

The temp segment (RAM[5..12]) is VM-visible storage and is never used as
a scratch pad.

Stack Frame Layout
------------------
``call f n`` leaves the following frame on the stack:

    +----------------+ <- ARG (first of n arguments)
    | arguments      |
    +----------------+
    | return address |  frame - 5
    | saved LCL      |  frame - 4
    | saved ARG      |  frame - 3
    | saved THIS     |  frame - 2
    | saved THAT     |  frame - 1
    +----------------+ <- LCL = frame base
    | locals         |  zeroed by 'function f k'
    +----------------+
    | working stack  |
    +----------------+ <- SP

``return`` copies the result into RAM[ARG], sets SP to ARG + 1 and
restores THAT, THIS, ARG, LCL from the frame in that order.

Symbol Scheme
-------------
| Use                  | Symbol                              |
|----------------------|-------------------------------------|
| static i             | {module}.{i}                        |
| label L              | {module}.{function}${L}             |
| function f           | f                                   |
| return address       | {function}$ret.{n}                  |
| comparison branches  | {function}$cmp.{n}.TRUE / .END      |
| halt loop            | Bootstrap$halt                      |

Function names are global, so the per-function counters make every
generated symbol unique across the whole program.

Usage
-----
>>> from hackvm.translator import CodeGenerator, Reader
>>> gen = CodeGenerator(bootstrap=False)
>>> gen.set_module("Main")
>>> for command in Reader("push constant 7\\npush constant 8\\nadd\\n"):
...     gen.write(command)
>>> gen.close()
>>> asm = gen.to_text()
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional
import logging
import re

from hackvm.errors import ContextError, TranslationError, VMSyntaxError
from hackvm.hack.instructions import (
    AddressInstruction,
    Comment,
    ComputeInstruction,
    Instruction,
    LabelDeclaration,
    is_valid_symbol,
    render_program,
)
from hackvm.hack.layout import (
    FRAME_REGISTER,
    MAX_ADDRESS_LITERAL,
    POINTER_SIZE,
    RETURN_REGISTER,
    SCRATCH_LEFT,
    SCRATCH_RIGHT,
    STACK_BASE,
    TEMP_BASE,
    TEMP_SIZE,
)
from hackvm.translator.commands import (
    BINARY_OPERATORS,
    COMPARISON_OPERATORS,
    Command,
    CommandKind,
    UNARY_OPERATORS,
)


logger = logging.getLogger(__name__)


BOOTSTRAP_FUNCTION = "Bootstrap"
HALT_LABEL = f"{BOOTSTRAP_FUNCTION}$halt"
DEFAULT_ENTRY_FUNCTION = "Sys.init"

# Label suffixes minted by call and comparison blocks
RESERVED_LABEL_PATTERN = re.compile(r"ret\.\d+|cmp\.\d+\.(TRUE|END)")

# Words pushed by the call protocol: return address + LCL, ARG, THIS, THAT
FRAME_SIZE = 5

SEGMENT_BASES = MappingProxyType({
    "local": "LCL",
    "argument": "ARG",
    "this": "THIS",
    "that": "THAT",
})

POINTER_REGISTERS = ("THIS", "THAT")

SEGMENTS = frozenset(SEGMENT_BASES) | {"constant", "temp", "pointer", "static"}

BINARY_COMPUTATIONS = {
    "add": "D+M",
    "sub": "D-M",
    "and": "D&M",
    "or": "D|M",
}

COMPARISON_JUMPS = {
    "eq": "JEQ",
    "gt": "JGT",
    "lt": "JLT",
}

UNARY_COMPUTATIONS = {
    "neg": "-D",
    "not": "!D",
}

# Caller registers restored by return, with their offset below the frame base
RESTORE_ORDER = (("THAT", 1), ("THIS", 2), ("ARG", 3), ("LCL", 4))


# =============================================================================
# Translation State
# =============================================================================

@dataclass
class TranslationState:
    """
    Cross-command state owned by one CodeGenerator.

    Attributes:
        current_module: Module being translated; qualifies static and
            label symbols
        current_function: Function whose body is being emitted
        call_site_counter: Calls emitted so far in the current function
        comparison_counter: Comparisons emitted so far in the current function
        segment_base_map: Base register of each indexed segment
    """
    current_module: Optional[str] = None
    current_function: str = BOOTSTRAP_FUNCTION
    call_site_counter: int = 0
    comparison_counter: int = 0
    segment_base_map: Mapping[str, str] = field(default_factory=lambda: SEGMENT_BASES)

    def enter_function(self, name: str) -> None:
        self.current_function = name
        self.call_site_counter = 0
        self.comparison_counter = 0

    def next_return_label(self) -> str:
        label = f"{self.current_function}$ret.{self.call_site_counter}"
        self.call_site_counter += 1
        return label

    def next_comparison_labels(self) -> tuple[str, str]:
        prefix = f"{self.current_function}$cmp.{self.comparison_counter}"
        self.comparison_counter += 1
        return f"{prefix}.TRUE", f"{prefix}.END"

    def scoped_label(self, name: str) -> str:
        if self.current_module:
            return f"{self.current_module}.{self.current_function}${name}"
        return f"{self.current_function}${name}"


# =============================================================================
# Instruction Helpers
# =============================================================================

def at(value: str | int) -> AddressInstruction:
    return AddressInstruction(str(value))


def comp(computation: str, dest: Optional[str] = None, jump: Optional[str] = None) -> ComputeInstruction:
    return ComputeInstruction(computation, dest, jump)


# =============================================================================
# Code Generator Class
# =============================================================================

class CodeGenerator:
    """
    Generates Hack instructions from VM commands.

    Commands must be written in program order; all commands of one module
    are written before the next module's set_module() call. close() must
    be called exactly once, after the last command.

    Attributes:
        state: The translation state
        annotate: Emit each VM command as a comment before its block
    """

    def __init__(
        self,
        bootstrap: bool = True,
        entry_function: str = DEFAULT_ENTRY_FUNCTION,
        annotate: bool = False,
        stack_base: int = STACK_BASE,
    ):
        """
        Initialize the code generator.

        Args:
            bootstrap: Emit the stack pointer initialization and the call
                to entry_function before any module code
            entry_function: Function called by the bootstrap
            annotate: Emit source commands as comments
            stack_base: Initial stack pointer set by the bootstrap
        """
        self.state = TranslationState()
        self.annotate = annotate
        self._output: list[Instruction] = []
        self._command: Optional[Command] = None
        self._closed = False

        if bootstrap:
            self._emit_bootstrap(entry_function, stack_base)

    # =========================================================================
    # Output
    # =========================================================================

    @property
    def instructions(self) -> tuple[Instruction, ...]:
        return tuple(self._output)

    @property
    def closed(self) -> bool:
        return self._closed

    def to_text(self) -> str:
        """Serialize everything emitted so far to Hack assembly text."""
        return render_program(self._output)

    def _emit(self, *instructions: Instruction) -> None:
        self._output.extend(instructions)

    # =========================================================================
    # Context
    # =========================================================================

    def set_module(self, name: str) -> None:
        """Start translating a new module (one .vm file)."""
        self._require_open()
        if not is_valid_symbol(name):
            raise VMSyntaxError(
                f"invalid module name '{name}'",
                hint="module names may contain letters, digits, '_', '.', '$' and ':' "
                     "and may not start with a digit",
            )
        self.state.current_module = name
        logger.debug(f"Translating module {name}")

    def write(self, command: Command) -> None:
        """
        Translate one command.

        Raises:
            TranslationError: If the command is malformed
        """
        self._require_open()
        self._command = command
        try:
            if self.annotate:
                self._emit(Comment(command.text))

            kind = command.kind
            if kind is CommandKind.ARITHMETIC:
                self.write_arithmetic(command.operator())
            elif kind is CommandKind.PUSH:
                self.write_push(command.symbol(), command.count())
            elif kind is CommandKind.POP:
                self.write_pop(command.symbol(), command.count())
            elif kind is CommandKind.LABEL:
                self.write_label(command.symbol())
            elif kind is CommandKind.GOTO:
                self.write_goto(command.symbol())
            elif kind is CommandKind.IF_GOTO:
                self.write_if_goto(command.symbol())
            elif kind is CommandKind.FUNCTION:
                self.write_function(command.symbol(), command.count())
            elif kind is CommandKind.CALL:
                self.write_call(command.symbol(), command.count())
            elif kind is CommandKind.RETURN:
                self.write_return()
        finally:
            self._command = None

    def close(self) -> None:
        """Emit the halt loop. No command may be written afterwards."""
        self._require_open()
        if self.annotate:
            self._emit(Comment("halt"))
        self._emit(
            LabelDeclaration(HALT_LABEL),
            at(HALT_LABEL),
            comp("0", jump="JMP"),
        )
        self._closed = True
        logger.debug(f"Closed translation: {len(self._output)} records")

    # =========================================================================
    # Bootstrap
    # =========================================================================

    def _emit_bootstrap(self, entry_function: str, stack_base: int) -> None:
        if self.annotate:
            self._emit(Comment(f"bootstrap: SP={stack_base}, call {entry_function} 0"))
        self._emit(
            at(stack_base),
            comp("A", "D"),
            at("SP"),
            comp("D", "M"),
        )
        self.write_call(entry_function, 0)
        # Returning from the entry function ends the program
        self._emit(at(HALT_LABEL), comp("0", jump="JMP"))

    # =========================================================================
    # Stack Primitives
    # =========================================================================

    def _push_d(self) -> None:
        self._emit(
            at("SP"),
            comp("M", "A"),
            comp("D", "M"),
            at("SP"),
            comp("M+1", "M"),
        )

    def _pop_d(self) -> None:
        self._emit(
            at("SP"),
            comp("M-1", "AM"),
            comp("M", "D"),
        )

    def _pop_into(self, register: str) -> None:
        self._pop_d()
        self._emit(at(register), comp("D", "M"))

    # =========================================================================
    # Arithmetic
    # =========================================================================

    def write_arithmetic(self, operator: str) -> None:
        """
        Translate an arithmetic or logical command.

        Binary and comparison operators pop the right operand into R13,
        then the left operand into R14, and compute left op right.
        """
        self._require_open()
        if operator in BINARY_OPERATORS:
            self._load_operands()
            self._emit(comp(BINARY_COMPUTATIONS[operator], "D"))
            self._push_d()
        elif operator in COMPARISON_OPERATORS:
            self._write_comparison(operator)
        elif operator in UNARY_OPERATORS:
            self._pop_d()
            self._emit(comp(UNARY_COMPUTATIONS[operator], "D"))
            self._push_d()
        else:
            raise self._error(VMSyntaxError, f"unknown arithmetic command '{operator}'")

    def _load_operands(self) -> None:
        # D = left, M = right
        self._pop_into(SCRATCH_RIGHT)
        self._pop_into(SCRATCH_LEFT)
        self._emit(
            at(SCRATCH_LEFT),
            comp("M", "D"),
            at(SCRATCH_RIGHT),
        )

    def _write_comparison(self, operator: str) -> None:
        true_label, end_label = self.state.next_comparison_labels()
        self._load_operands()
        self._emit(
            comp("D-M", "D"),
            at(true_label),
            comp("D", jump=COMPARISON_JUMPS[operator]),
            comp("0", "D"),
            at(end_label),
            comp("0", jump="JMP"),
            LabelDeclaration(true_label),
            comp("-1", "D"),
            LabelDeclaration(end_label),
        )
        self._push_d()

    # =========================================================================
    # Memory Access
    # =========================================================================

    def write_push(self, segment: str, index: int) -> None:
        """Push segment[index] onto the stack."""
        self._require_open()
        self._check_segment(segment)
        self._check_literal(index)

        if segment == "constant":
            self._emit(at(index), comp("A", "D"))
        elif segment in self.state.segment_base_map:
            base = self.state.segment_base_map[segment]
            self._emit(
                at(base),
                comp("M", "D"),
                at(index),
                comp("D+A", "A"),
                comp("M", "D"),
            )
        else:
            self._emit(at(self._direct_address(segment, index)), comp("M", "D"))
        self._push_d()

    def write_pop(self, segment: str, index: int) -> None:
        """Pop the top of the stack into segment[index]."""
        self._require_open()
        self._check_segment(segment)
        self._check_literal(index)

        if segment == "constant":
            raise self._error(
                VMSyntaxError,
                "cannot pop into the constant segment",
                hint="constants are not addressable storage",
            )

        if segment in self.state.segment_base_map:
            base = self.state.segment_base_map[segment]
            self._emit(
                at(base),
                comp("M", "D"),
                at(index),
                comp("D+A", "D"),
                at(SCRATCH_RIGHT),
                comp("D", "M"),
            )
            self._pop_d()
            self._emit(
                at(SCRATCH_RIGHT),
                comp("M", "A"),
                comp("D", "M"),
            )
        else:
            address = self._direct_address(segment, index)
            self._pop_d()
            self._emit(at(address), comp("D", "M"))

    def _direct_address(self, segment: str, index: int) -> str | int:
        """Address of a temp, pointer or static slot."""
        if segment == "temp":
            if index >= TEMP_SIZE:
                raise self._error(
                    VMSyntaxError,
                    f"temp index {index} out of range",
                    hint=f"the temp segment has {TEMP_SIZE} words (0-{TEMP_SIZE - 1})",
                )
            return TEMP_BASE + index

        if segment == "pointer":
            if index >= POINTER_SIZE:
                raise self._error(
                    VMSyntaxError,
                    f"pointer index {index} out of range",
                    hint="pointer 0 is THIS, pointer 1 is THAT",
                )
            return POINTER_REGISTERS[index]

        # static
        module = self.state.current_module
        if module is None:
            raise self._error(ContextError, "static variable referenced with no module set")
        return f"{module}.{index}"

    def _check_segment(self, segment: str) -> None:
        if segment not in SEGMENTS:
            raise self._error(
                VMSyntaxError,
                f"unknown segment '{segment}'",
                hint="segments are " + ", ".join(sorted(SEGMENTS)),
            )

    def _check_literal(self, value: int) -> None:
        if value > MAX_ADDRESS_LITERAL:
            raise self._error(
                VMSyntaxError,
                f"operand {value} out of range",
                hint=f"operands are limited to 0-{MAX_ADDRESS_LITERAL}",
            )

    # =========================================================================
    # Program Flow
    # =========================================================================

    def write_label(self, name: str) -> None:
        self._require_open()
        self._emit(LabelDeclaration(self._scoped(name)))

    def write_goto(self, name: str) -> None:
        self._require_open()
        self._emit(at(self._scoped(name)), comp("0", jump="JMP"))

    def write_if_goto(self, name: str) -> None:
        """Pop the top of the stack; jump if it is non-zero."""
        self._require_open()
        target = self._scoped(name)
        self._pop_d()
        self._emit(at(target), comp("D", jump="JNE"))

    def _scoped(self, name: str) -> str:
        if not is_valid_symbol(name):
            raise self._error(VMSyntaxError, f"invalid label name '{name}'")
        scoped = self.state.scoped_label(name)
        if RESERVED_LABEL_PATTERN.fullmatch(name) or scoped == HALT_LABEL:
            raise self._error(
                VMSyntaxError,
                f"label name '{name}' is reserved",
                hint="'ret.N' and 'cmp.N.TRUE'/'cmp.N.END' name generated branch targets",
            )
        return scoped

    # =========================================================================
    # Function Calling
    # =========================================================================

    def write_function(self, name: str, n_locals: int) -> None:
        """Declare a function entry point and zero its locals."""
        self._require_open()
        self._check_function_name(name)
        self.state.enter_function(name)
        logger.debug(f"Function {name} with {n_locals} locals")

        self._emit(LabelDeclaration(name))
        for _ in range(n_locals):
            self._emit(
                at("SP"),
                comp("M", "A"),
                comp("0", "M"),
                at("SP"),
                comp("M+1", "M"),
            )

    def write_call(self, name: str, n_args: int) -> None:
        """Save the caller's frame and jump to name."""
        self._require_open()
        self._check_function_name(name)
        self._check_literal(n_args + FRAME_SIZE)
        return_label = self.state.next_return_label()

        self._emit(at(return_label), comp("A", "D"))
        self._push_d()
        for register in ("LCL", "ARG", "THIS", "THAT"):
            self._emit(at(register), comp("M", "D"))
            self._push_d()

        # ARG = SP - 5 - n_args
        self._emit(
            at("SP"),
            comp("M", "D"),
            at(FRAME_SIZE + n_args),
            comp("D-A", "D"),
            at("ARG"),
            comp("D", "M"),
        )
        # LCL = SP
        self._emit(
            at("SP"),
            comp("M", "D"),
            at("LCL"),
            comp("D", "M"),
        )
        self._emit(
            at(name),
            comp("0", jump="JMP"),
            LabelDeclaration(return_label),
        )

    def write_return(self) -> None:
        """Return the top of the stack to the caller and restore its frame."""
        self._require_open()

        # frame = LCL
        self._emit(
            at("LCL"),
            comp("M", "D"),
            at(FRAME_REGISTER),
            comp("D", "M"),
        )
        # Return address is read before *ARG is overwritten: with no
        # arguments, ARG points at the return address slot.
        self._emit(
            at(FRAME_SIZE),
            comp("D-A", "A"),
            comp("M", "D"),
            at(RETURN_REGISTER),
            comp("D", "M"),
        )
        # *ARG = pop()
        self._pop_d()
        self._emit(
            at("ARG"),
            comp("M", "A"),
            comp("D", "M"),
        )
        # SP = ARG + 1
        self._emit(
            at("ARG"),
            comp("M+1", "D"),
            at("SP"),
            comp("D", "M"),
        )
        for register, offset in RESTORE_ORDER:
            self._emit(
                at(FRAME_REGISTER),
                comp("M", "D"),
                at(offset),
                comp("D-A", "A"),
                comp("M", "D"),
                at(register),
                comp("D", "M"),
            )
        self._emit(
            at(RETURN_REGISTER),
            comp("M", "A"),
            comp("0", jump="JMP"),
        )

    def _check_function_name(self, name: str) -> None:
        if not is_valid_symbol(name):
            raise self._error(VMSyntaxError, f"invalid function name '{name}'")
        if name == BOOTSTRAP_FUNCTION:
            raise self._error(
                VMSyntaxError,
                f"function name '{name}' is reserved",
                hint="it names the context of the bootstrap code",
            )

    # =========================================================================
    # Errors
    # =========================================================================

    def _require_open(self) -> None:
        if self._closed:
            raise ContextError("code generator is closed; no further output is accepted")

    def _error(
        self,
        error_class: type[TranslationError],
        message: str,
        hint: Optional[str] = None,
    ) -> TranslationError:
        """Build an error located at the command being translated."""
        command = self._command
        if command is None:
            return error_class(message, hint=hint)
        return error_class(
            message,
            command.location,
            hint=hint,
            source_line=command.text,
        )
