# =============================================================================
# test_commands.py - VM Command Model Unit Tests
# =============================================================================
# Tests for command classification and the operand accessors.
#
# Test coverage includes:
#   - Classification of every arithmetic operator and keyword
#   - Strict keyword spelling ('if' rejected, 'if-goto' accepted)
#   - operator(), symbol(), count() accessors and their failure modes
#   - Surplus operand detection
# =============================================================================

import dataclasses

import pytest

from hackvm.errors import ArityError, ContextError, SourceLocation, VMSyntaxError
from hackvm.translator.commands import (
    ARITHMETIC_OPERATORS,
    Command,
    CommandKind,
    classify,
)


# =============================================================================
# Classification
# =============================================================================

class TestClassification:
    """Test mapping of operator tokens to command kinds."""

    @pytest.mark.parametrize("operator", sorted(ARITHMETIC_OPERATORS))
    def test_arithmetic_operators(self, operator):
        """Every arithmetic keyword classifies as ARITHMETIC."""
        assert classify(operator).kind is CommandKind.ARITHMETIC

    @pytest.mark.parametrize("text, kind", [
        ("push local 1", CommandKind.PUSH),
        ("pop static 2", CommandKind.POP),
        ("label LOOP", CommandKind.LABEL),
        ("goto LOOP", CommandKind.GOTO),
        ("if-goto LOOP", CommandKind.IF_GOTO),
        ("function Main.main 2", CommandKind.FUNCTION),
        ("call Math.multiply 2", CommandKind.CALL),
        ("return", CommandKind.RETURN),
    ])
    def test_keywords(self, text, kind):
        assert classify(text).kind is kind

    def test_unknown_operator(self):
        with pytest.raises(VMSyntaxError, match="unknown command '\\?\\?\\?'"):
            classify("???")

    def test_bare_if_is_rejected(self):
        """The conditional jump is spelled if-goto; 'if' is not a synonym."""
        with pytest.raises(VMSyntaxError) as excinfo:
            classify("if LOOP")
        assert "if-goto" in str(excinfo.value)

    def test_keyword_prefix_is_not_enough(self):
        """An operator must equal a keyword, not merely start with one."""
        with pytest.raises(VMSyntaxError):
            classify("pushy local 0")

    def test_keywords_are_case_sensitive(self):
        with pytest.raises(VMSyntaxError):
            classify("Push constant 1")

    def test_typo_suggestion(self):
        with pytest.raises(VMSyntaxError) as excinfo:
            classify("retrun")
        assert "'return'" in excinfo.value.hint

    def test_error_reports_location(self):
        location = SourceLocation("Main.vm", 7, 3)
        with pytest.raises(VMSyntaxError) as excinfo:
            classify("jump END", location)
        message = str(excinfo.value)
        assert message.startswith("Main.vm:7:3: error:")
        assert "jump END" in message

    @pytest.mark.parametrize("text", [
        "add 1",
        "push local 0 1",
        "label A B",
        "return 0",
    ])
    def test_surplus_operands(self, text):
        with pytest.raises(ArityError, match="unexpected operand"):
            classify(text)


# =============================================================================
# Accessors
# =============================================================================

class TestAccessors:
    """Test operator(), symbol() and count()."""

    @pytest.mark.parametrize("text", [
        "add",
        "push constant 7",
        "if-goto END",
        "function Foo.bar 3",
        "call   Foo.bar\t1",
        "return",
    ])
    def test_operator_is_first_token(self, text):
        assert classify(text).operator() == text.split()[0]

    def test_push_operands(self):
        command = classify("push argument 3")
        assert command.symbol() == "argument"
        assert command.count() == 3

    def test_function_operands(self):
        command = classify("function Main.fib 0")
        assert command.symbol() == "Main.fib"
        assert command.count() == 0

    def test_label_symbol(self):
        assert classify("goto LOOP_START").symbol() == "LOOP_START"

    def test_symbol_on_return(self):
        with pytest.raises(ContextError):
            classify("return").symbol()

    def test_symbol_on_arithmetic(self):
        with pytest.raises(ContextError):
            classify("add").symbol()

    @pytest.mark.parametrize("text", ["label X", "goto X", "if-goto X", "return", "neg"])
    def test_count_unsupported(self, text):
        with pytest.raises(ContextError, match="no numeric operand"):
            classify(text).count()

    def test_count_missing(self):
        with pytest.raises(ArityError, match="requires a numeric index"):
            classify("push local").count()

    def test_symbol_missing(self):
        with pytest.raises(ArityError, match="requires a segment name"):
            classify("pop").symbol()

    @pytest.mark.parametrize("operand", ["x", "-1", "1.5", "0x10", "²", "¹", "٣"])
    def test_count_not_a_non_negative_integer(self, operand):
        with pytest.raises(ArityError, match="not a non-negative integer"):
            classify(f"call Foo.bar {operand}").count()

    def test_unicode_digit_reports_location(self):
        """Non-ASCII digits are rejected as operands, with the command's location."""
        location = SourceLocation("Main.vm", 4, 1)
        with pytest.raises(ArityError) as excinfo:
            classify("push local ¹", location).count()
        assert str(excinfo.value).startswith("Main.vm:4:1: error: '¹' is not a non-negative integer")


# =============================================================================
# Command Record
# =============================================================================

class TestCommandRecord:
    """Test Command immutability and equality."""

    def test_frozen(self):
        command = classify("add")
        with pytest.raises(dataclasses.FrozenInstanceError):
            command.kind = CommandKind.PUSH

    def test_equality_ignores_location(self):
        a = classify("add", SourceLocation("A.vm", 1, 1))
        b = classify("add", SourceLocation("B.vm", 9, 4))
        assert a == b

    def test_str_is_text(self):
        assert str(Command(CommandKind.RETURN, "return")) == "return"
