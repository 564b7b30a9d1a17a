"""
VM Command Model
================

A VM program is a sequence of one-line commands:

| Kind        | Syntax                          | Operands          |
|-------------|---------------------------------|-------------------|
| ARITHMETIC  | add sub neg eq gt lt and or not | none              |
| PUSH / POP  | push|pop <segment> <index>      | symbol, count     |
| LABEL       | label <name>                    | symbol            |
| GOTO        | goto <name>                     | symbol            |
| IF_GOTO     | if-goto <name>                  | symbol            |
| FUNCTION    | function <name> <nLocals>       | symbol, count     |
| CALL        | call <name> <nArgs>             | symbol, count     |
| RETURN      | return                          | none              |

Each line is classified exactly once, when the Command is created. The
kind is never re-derived from the text afterwards; the code generator
dispatches on ``Command.kind`` alone.

Keyword spelling is strict: the conditional jump is ``if-goto``. The bare
``if`` spelling is rejected rather than accepted as a synonym.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional
import difflib

from hackvm.errors import ArityError, ContextError, SourceLocation, VMSyntaxError


# =============================================================================
# Command Kinds
# =============================================================================

class CommandKind(Enum):
    """Closed set of VM command kinds."""
    ARITHMETIC = auto()
    PUSH = auto()
    POP = auto()
    LABEL = auto()
    GOTO = auto()
    IF_GOTO = auto()
    FUNCTION = auto()
    CALL = auto()
    RETURN = auto()


ARITHMETIC_OPERATORS = frozenset({
    "add", "sub", "neg",
    "eq", "gt", "lt",
    "and", "or", "not",
})

BINARY_OPERATORS = frozenset({"add", "sub", "and", "or"})
COMPARISON_OPERATORS = frozenset({"eq", "gt", "lt"})
UNARY_OPERATORS = frozenset({"neg", "not"})

KEYWORDS = {
    "push": CommandKind.PUSH,
    "pop": CommandKind.POP,
    "label": CommandKind.LABEL,
    "goto": CommandKind.GOTO,
    "if-goto": CommandKind.IF_GOTO,
    "function": CommandKind.FUNCTION,
    "call": CommandKind.CALL,
    "return": CommandKind.RETURN,
}

# Spellings seen in older VM dialects, rejected with a pointer to the real one
REJECTED_SPELLINGS = {
    "if": "if-goto",
}

# Number of operand tokens following the operator
OPERAND_COUNTS = {
    CommandKind.ARITHMETIC: 0,
    CommandKind.PUSH: 2,
    CommandKind.POP: 2,
    CommandKind.LABEL: 1,
    CommandKind.GOTO: 1,
    CommandKind.IF_GOTO: 1,
    CommandKind.FUNCTION: 2,
    CommandKind.CALL: 2,
    CommandKind.RETURN: 0,
}

SYMBOL_KINDS = frozenset(kind for kind, n in OPERAND_COUNTS.items() if n >= 1)
COUNT_KINDS = frozenset(kind for kind, n in OPERAND_COUNTS.items() if n == 2)


# =============================================================================
# Command
# =============================================================================

@dataclass(frozen=True)
class Command:
    """
    One classified VM command.

    Attributes:
        kind: The command kind, fixed at classification time
        text: The comment-stripped, trimmed source line
        location: Where the command was read (None for synthesized commands)
    """
    kind: CommandKind
    text: str
    location: Optional[SourceLocation] = field(default=None, compare=False)

    def __str__(self) -> str:
        return self.text

    @property
    def tokens(self) -> list[str]:
        return self.text.split()

    def operator(self) -> str:
        """First whitespace-delimited token."""
        return self.tokens[0]

    def symbol(self) -> str:
        """
        Second token: segment name, label name or function name.

        Raises:
            ContextError: If this command kind carries no symbol
            ArityError: If the token is missing
        """
        if self.kind not in SYMBOL_KINDS:
            raise ContextError(
                f"'{self.operator()}' command has no symbol operand",
                self.location,
                source_line=self.text,
            )
        tokens = self.tokens
        if len(tokens) < 2:
            raise ArityError(
                f"'{self.operator()}' requires a {_symbol_role(self.kind)}",
                self.location,
                source_line=self.text,
            )
        return tokens[1]

    def count(self) -> int:
        """
        Third token as a non-negative integer.

        Raises:
            ContextError: If this command kind carries no numeric operand
            ArityError: If the token is missing or not a non-negative integer
        """
        if self.kind not in COUNT_KINDS:
            raise ContextError(
                f"'{self.operator()}' command has no numeric operand",
                self.location,
                source_line=self.text,
            )
        tokens = self.tokens
        if len(tokens) < 3:
            raise ArityError(
                f"'{self.operator()}' requires a numeric {_count_role(self.kind)}",
                self.location,
                source_line=self.text,
            )
        operand = tokens[2]
        if not (operand.isascii() and operand.isdigit()):
            raise ArityError(
                f"'{operand}' is not a non-negative integer",
                self.location,
                hint=f"the {_count_role(self.kind)} of '{self.operator()}' must be written in decimal",
                source_line=self.text,
            )
        return int(operand)


def _symbol_role(kind: CommandKind) -> str:
    if kind in (CommandKind.PUSH, CommandKind.POP):
        return "segment name"
    if kind in (CommandKind.FUNCTION, CommandKind.CALL):
        return "function name"
    return "label name"


def _count_role(kind: CommandKind) -> str:
    return {
        CommandKind.PUSH: "index",
        CommandKind.POP: "index",
        CommandKind.FUNCTION: "local variable count",
        CommandKind.CALL: "argument count",
    }[kind]


# =============================================================================
# Classification
# =============================================================================

def classify(text: str, location: Optional[SourceLocation] = None) -> Command:
    """
    Classify a comment-stripped, trimmed, non-empty line.

    Args:
        text: The command text
        location: Source location for error reporting

    Returns:
        The classified Command

    Raises:
        VMSyntaxError: If the operator is not a VM keyword
        ArityError: If the line has more operands than its kind allows
    """
    tokens = text.split()
    operator = tokens[0]

    if operator in ARITHMETIC_OPERATORS:
        kind = CommandKind.ARITHMETIC
    elif operator in KEYWORDS:
        kind = KEYWORDS[operator]
    else:
        raise VMSyntaxError(
            f"unknown command '{operator}'",
            location,
            hint=_suggest_operator(operator),
            source_line=text,
        )

    expected = OPERAND_COUNTS[kind]
    if len(tokens) - 1 > expected:
        surplus = " ".join(tokens[expected + 1:])
        raise ArityError(
            f"unexpected operand '{surplus}' for '{operator}'",
            location,
            hint=f"'{operator}' takes {expected} operand{'s' if expected != 1 else ''}",
            source_line=text,
        )

    return Command(kind, text, location)


def _suggest_operator(operator: str) -> Optional[str]:
    if operator in REJECTED_SPELLINGS:
        return f"the conditional jump is spelled '{REJECTED_SPELLINGS[operator]}'"
    candidates = sorted(ARITHMETIC_OPERATORS | KEYWORDS.keys())
    similar = difflib.get_close_matches(operator, candidates, n=3)
    if similar:
        suggestions = ", ".join(f"'{s}'" for s in similar)
        return f"did you mean {suggestions}?"
    return None
