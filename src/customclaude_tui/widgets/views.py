"""Full-screen Help and Settings views."""
from __future__ import annotations

from rich.markup import escape as escape_markup
from textual.widgets import Static

from ..chat.commands import format_command_list
from ..config import DashboardConfig
from ..models import SessionSnapshot

KEY_HELP: list[tuple[str, list[tuple[str, str]]]] = [
    (
        "Global",
        [
            ("Ctrl+C", "Quit (q when not typing)"),
            ("Ctrl+N", "New conversation"),
            ("F1 / F2 / F3", "Help / Settings / Main view"),
            ("Esc", "Back to the main view"),
        ],
    ),
    (
        "Conversation",
        [
            ("Enter", "Start typing a prompt"),
            ("↑ ↓ / k j", "Scroll one line"),
            ("PgUp PgDn", "Scroll one page"),
            ("Home / End", "Jump to top / bottom"),
        ],
    ),
    (
        "Normal mode",
        [
            ("i a A", "Insert at cursor / after cursor / at end"),
            ("x", "Delete character"),
            ("dd cc", "Delete / change the line"),
            ("dw cw", "Delete / change a word"),
            ("w b", "Next / previous word"),
            ("0 $", "Line start / end"),
            ("Esc", "Leave the prompt"),
        ],
    ),
    (
        "Insert mode",
        [
            ("Enter", "Send the prompt"),
            ("Esc", "Back to normal mode"),
        ],
    ),
]


def _section(title: str, rows: list[tuple[str, str]]) -> list[str]:
    width = max(len(key) for key, _ in rows)
    lines = [
        f"[bold #F5A623]{escape_markup(title)}[/]",
        "[dim #7B7F87]────────────────────────────────[/]",
    ]
    for key, description in rows:
        padded = escape_markup(key.ljust(width))
        lines.append(f"  [bold #FFF8E7]{padded}[/]  [#A8B5A2]{escape_markup(description)}[/]")
    lines.append("")
    return lines


def format_help_view() -> str:
    lines: list[str] = []
    for title, rows in KEY_HELP:
        lines.extend(_section(title, rows))
    lines.extend(_section("Commands", format_command_list()))
    return "\n".join(lines).rstrip()


def format_settings_view(config: DashboardConfig, session: SessionSnapshot) -> str:
    lines = _section("Configuration", config.describe())
    session_rows = [
        ("Session", session.session_id or "none"),
        ("Model", session.model or "default"),
        ("Sessions in chain", str(len(session.chain))),
        ("Started", f"{session.conversation_start:%Y-%m-%d %H:%M:%S}"),
    ]
    lines.extend(_section("Conversation", session_rows))
    lines.append("[dim #A8B5A2]Settings are read from ~/.customclaude/config.json and CUSTOMCLAUDE_* variables.[/]")
    return "\n".join(lines)


class HelpView(Static):
    DEFAULT_CSS = """
    HelpView {
        height: 1fr;
        border: round #2A2E3D;
        background: #16213E;
        padding: 1 2;
    }
    """

    def on_mount(self) -> None:
        self.update(format_help_view())


class SettingsView(Static):
    DEFAULT_CSS = """
    SettingsView {
        height: 1fr;
        border: round #2A2E3D;
        background: #16213E;
        padding: 1 2;
    }
    """

    def show(self, config: DashboardConfig, session: SessionSnapshot) -> None:
        self.update(format_settings_view(config, session))
