import pytest

from proctrace.cli_args import (
    CommandParseError,
    TraceCommand,
    parse_trace_command,
    split_command_string,
)


def test_explicit_executable_and_args():
    command = parse_trace_command(None, ["ping", "-c", "3", "localhost"])
    assert command == TraceCommand(executable="ping", args=["-c", "3", "localhost"])
    assert command.argv == ["ping", "-c", "3", "localhost"]


def test_leading_double_dash_is_dropped():
    command = parse_trace_command(None, ["--", "ls", "-la"])
    assert command.argv == ["ls", "-la"]


def test_command_string_is_tokenized_like_a_shell():
    command = parse_trace_command('grep -n "two words" file.txt', [])
    assert command.argv == ["grep", "-n", "two words", "file.txt"]


def test_no_command_returns_none():
    assert parse_trace_command(None, []) is None
    assert parse_trace_command(None, ["--"]) is None


def test_unbalanced_quote_fails_fast():
    with pytest.raises(CommandParseError):
        parse_trace_command("echo 'unterminated", [])


def test_empty_command_string_is_rejected():
    with pytest.raises(CommandParseError):
        split_command_string("   ")


def test_string_and_positional_together_are_rejected():
    with pytest.raises(CommandParseError):
        parse_trace_command("ls", ["echo"])


def test_str_quotes_arguments():
    command = TraceCommand(executable="echo", args=["a b"])
    assert str(command) == "echo 'a b'"
