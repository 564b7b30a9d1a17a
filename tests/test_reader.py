"""
VM Reader Unit Tests
====================

Tests for the line-oriented Reader: comment and blank-line handling,
state transitions, position tracking and accessor failures.
"""

import pytest

from hackvm.errors import ArityError, ContextError, VMSyntaxError
from hackvm.translator.commands import CommandKind
from hackvm.translator.reader import Reader, ReaderState


# =============================================================================
# Comment and Whitespace Handling
# =============================================================================

class TestLineHandling:
    """Test comment stripping and blank line skipping."""

    def test_empty_source(self):
        reader = Reader("")
        assert not reader.has_more()
        assert reader.state is ReaderState.EMPTY
        assert list(reader) == []

    def test_skip_comment_lines(self):
        reader = Reader("add\n//comment1\npush local 1\n")
        reader.advance()
        assert reader.command.text == "add"
        reader.advance()
        assert reader.command.text == "push local 1"

    def test_inline_comment(self):
        reader = Reader("push constant 7 // the answer\n")
        reader.advance()
        assert reader.command.text == "push constant 7"
        assert reader.count() == 7

    def test_surrounding_whitespace(self):
        reader = Reader("   \t  neg   \n")
        reader.advance()
        assert reader.command.text == "neg"

    def test_blank_and_comment_only_lines(self):
        source = "\n   \n// header\n\t// indented comment\nreturn\n\n"
        assert [cmd.text for cmd in Reader(source)] == ["return"]

    def test_crlf_line_endings(self):
        source = "push constant 1\r\npush constant 2\r\nadd\r\n"
        assert [cmd.text for cmd in Reader(source)] == [
            "push constant 1", "push constant 2", "add",
        ]

    def test_lines_iterable(self):
        reader = Reader(["push constant 1\n", "not\n"])
        assert [cmd.kind for cmd in reader] == [CommandKind.PUSH, CommandKind.ARITHMETIC]


# =============================================================================
# State Machine
# =============================================================================

class TestReaderState:
    """Test EMPTY → HOLDING → EXHAUSTED transitions."""

    def test_transitions(self):
        reader = Reader("add\nsub\n")
        assert reader.state is ReaderState.EMPTY
        reader.advance()
        assert reader.state is ReaderState.HOLDING
        reader.advance()
        assert reader.state is ReaderState.HOLDING
        assert reader.command.text == "sub"
        reader.advance()
        assert reader.state is ReaderState.EXHAUSTED

    def test_trailing_comments_exhaust(self):
        reader = Reader("add\n// trailing\n\n")
        reader.advance()
        assert reader.has_more()
        reader.advance()
        assert reader.state is ReaderState.EXHAUSTED
        assert not reader.has_more()

    def test_exhausted_is_terminal(self):
        reader = Reader("add\n")
        reader.advance()
        reader.advance()
        reader.advance()
        assert reader.state is ReaderState.EXHAUSTED
        assert reader.kind is None

    def test_has_more_tracks_lines(self):
        reader = Reader("add\n//c\npush local 1\n")
        assert reader.has_more()
        reader.advance()
        assert reader.has_more()
        reader.advance()
        assert not reader.has_more()

    def test_positions(self):
        reader = Reader("add\n//comment1\npush local 1\n")
        assert (reader.command_number, reader.line_number) == (0, 0)
        reader.advance()
        assert (reader.command_number, reader.line_number) == (1, 1)
        reader.advance()
        assert (reader.command_number, reader.line_number) == (2, 3)

    def test_command_location(self):
        reader = Reader("\n\n    label LOOP\n", filename="Main.vm")
        reader.advance()
        location = reader.command.location
        assert (location.filename, location.line, location.column) == ("Main.vm", 3, 5)


# =============================================================================
# Accessor Failures
# =============================================================================

class TestReaderErrors:
    """Test errors raised through the reader."""

    def test_command_before_advance(self):
        with pytest.raises(ContextError, match="no command has been read yet"):
            Reader("add\n").command

    def test_symbol_before_advance(self):
        with pytest.raises(ContextError):
            Reader("push local 1\n").symbol()

    def test_count_after_exhaustion(self):
        reader = Reader("push local 1\n")
        reader.advance()
        reader.advance()
        with pytest.raises(ContextError, match="exhausted"):
            reader.count()

    def test_symbol_on_return(self):
        reader = Reader("return\n")
        reader.advance()
        assert reader.kind is CommandKind.RETURN
        with pytest.raises(ContextError):
            reader.symbol()

    def test_count_on_label(self):
        reader = Reader("label X\n")
        reader.advance()
        with pytest.raises(ContextError):
            reader.count()

    def test_missing_count(self):
        reader = Reader("function Main.main\n")
        reader.advance()
        with pytest.raises(ArityError):
            reader.count()

    def test_unknown_command_on_advance(self):
        reader = Reader("add\nfoo bar\n", filename="Bad.vm")
        reader.advance()
        with pytest.raises(VMSyntaxError) as excinfo:
            reader.advance()
        assert str(excinfo.value).startswith("Bad.vm:2:1: error: unknown command 'foo'")


# =============================================================================
# File Input
# =============================================================================

class TestFromFile:

    def test_from_file(self, tmp_path):
        path = tmp_path / "Main.vm"
        path.write_text("push constant 1\npop temp 0\n")
        reader = Reader.from_file(path)
        commands = list(reader)
        assert [c.kind for c in commands] == [CommandKind.PUSH, CommandKind.POP]
        assert commands[0].location.filename == str(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Reader.from_file(tmp_path / "Missing.vm")

    def test_utf8_source(self, tmp_path):
        """Files are decoded as UTF-8 whatever the locale."""
        path = tmp_path / "Café.vm"
        path.write_bytes("// café ² ünïcode\npush constant 1\n".encode("utf-8"))
        commands = list(Reader.from_file(path))
        assert len(commands) == 1
        assert commands[0].count() == 1
        assert commands[0].location.line == 2

    def test_unicode_digit_operand_in_file(self, tmp_path):
        path = tmp_path / "Main.vm"
        path.write_bytes("push constant 1\npush constant ²\n".encode("utf-8"))
        commands = list(Reader.from_file(path))
        with pytest.raises(ArityError) as excinfo:
            commands[1].count()
        assert str(excinfo.value).startswith(f"{path}:2:1: error: '²' is not a non-negative integer")
