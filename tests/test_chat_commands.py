"""Tests for chat commands parser."""
import pytest
from customclaude_tui.chat.commands import (
    COMMANDS,
    format_command_list,
    format_help,
    is_known_command,
    parse_input,
)


class TestParseInput:
    def test_slash_help(self):
        result = parse_input("/help")
        assert result.kind == "command"
        assert result.name == "help"
        assert result.args == ""
        assert result.raw == "/help"

    def test_slash_model_with_args(self):
        result = parse_input("/model claude-opus-4  ")
        assert result.kind == "command"
        assert result.name == "model"
        assert result.args == "claude-opus-4"

    def test_slash_command_case_insensitive(self):
        result = parse_input("/NEW")
        assert result.name == "new"

    def test_slash_unknown_command(self):
        result = parse_input("/unknown")
        assert result.kind == "command"
        assert result.name == "unknown"
        assert not is_known_command(result)

    @pytest.mark.parametrize("alias, name", [("/q", "quit"), ("/h", "help")])
    def test_aliases(self, alias, name):
        assert parse_input(alias).name == name

    def test_slash_then_space_has_no_name(self):
        result = parse_input("/ foo")
        assert result.kind == "command"
        assert result.name == ""
        assert result.args == "foo"

    def test_bare_slash(self):
        result = parse_input("/")
        assert result.kind == "command"
        assert result.name == ""

    def test_plain_text_is_message(self):
        result = parse_input("explain this repo")
        assert result.kind == "message"
        assert result.name == ""
        assert result.raw == "explain this repo"

    def test_slash_inside_text_is_message(self):
        assert parse_input("what does a/b mean").kind == "message"


class TestHelp:
    def test_every_command_is_listed(self):
        usages = [usage for usage, _ in format_command_list()]
        assert len(usages) == len(COMMANDS)
        assert "/model [name]" in usages

    def test_format_help(self):
        text = format_help()
        assert text.startswith("Commands:")
        assert "/clear" in text
        assert "Start a new conversation" in text

    def test_known_commands(self):
        for name in COMMANDS:
            assert is_known_command(parse_input(f"/{name}"))
