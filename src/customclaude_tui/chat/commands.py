"""Slash command parser and registry for the prompt line."""
from dataclasses import dataclass


@dataclass
class ParsedInput:
    kind: str  # "command" or "message"
    name: str  # command name (lowercase) or empty
    args: str  # remaining args after command name
    raw: str   # original input


COMMANDS = {
    "help": "Show keys and commands",
    "new": "Start a new conversation",
    "model": "Show or set the model",
    "session": "Show the current session id",
    "clear": "Clear the conversation history",
    "settings": "Show settings",
    "exit": "Exit the app",
    "quit": "Exit the app",
}

ALIASES = {
    "q": "quit",
    "h": "help",
}

COMMAND_USAGE = {
    "help": "/help",
    "new": "/new",
    "model": "/model [name]",
    "session": "/session",
    "clear": "/clear",
    "settings": "/settings",
    "exit": "/exit",
    "quit": "/quit",
}


def parse_input(raw: str) -> ParsedInput:
    """Parse raw input into a structured ParsedInput.

    Args:
        raw: The raw prompt text, already stripped.

    Returns:
        ParsedInput with kind, name, args, and raw fields.
    """
    if not raw.startswith("/"):
        return ParsedInput(kind="message", name="", args="", raw=raw)

    content = raw[1:]
    # "/ foo" has no command name
    if content and content[0].isspace():
        return ParsedInput(kind="command", name="", args=content.lstrip(), raw=raw)

    parts = content.split(None, 1)
    name = parts[0].lower() if parts else ""
    name = ALIASES.get(name, name)
    args = parts[1].strip() if len(parts) > 1 else ""
    return ParsedInput(kind="command", name=name, args=args, raw=raw)


def is_known_command(parsed: ParsedInput) -> bool:
    return parsed.kind == "command" and parsed.name in COMMANDS


def format_command_list() -> list[tuple[str, str]]:
    """(usage, description) rows in registry order."""
    return [(COMMAND_USAGE[name], description) for name, description in COMMANDS.items()]


def format_help() -> str:
    """Plain-text command list for the line-mode prompt."""
    width = max(len(usage) for usage, _ in format_command_list())
    lines = ["Commands:"]
    for usage, description in format_command_list():
        lines.append(f"  {usage:<{width}}  {description}")
    return "\n".join(lines)
