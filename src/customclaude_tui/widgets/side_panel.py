"""SidePanel — session info, token usage, recent errors and tool activity."""
from __future__ import annotations

from collections.abc import Iterable

from rich.text import Text
from textual.widgets import Static

from ..agent.events import ErrorOccurred
from ..models import (
    TOOL_STATUS_ICONS,
    TOOL_STATUS_STYLES,
    SessionSnapshot,
    ToolExecution,
    UsageStats,
    truncate,
)

_SESSION_ID_WIDTH = 18
_HEADING_STYLE = "bold #F5A623"
_LABEL_STYLE = "#A8B5A2"
_VALUE_STYLE = "#FFF8E7"
_MUTED_STYLE = "dim #7B7F87"


def _heading(text: Text, title: str) -> None:
    if text.plain:
        text.append("\n\n")
    text.append(title, style=_HEADING_STYLE)


def _row(text: Text, label: str, value: str) -> None:
    text.append("\n")
    text.append(f"{label}: ", style=_LABEL_STYLE)
    text.append(value, style=_VALUE_STYLE)


def render_side_panel(
    session: SessionSnapshot,
    stats: UsageStats,
    errors: Iterable[ErrorOccurred],
    tool_notices: Iterable[ToolExecution],
    width: int,
    height: int = 0,
) -> Text:
    """Build the side panel body; padded with blank lines up to ``height``."""
    width = max(8, width)
    text = Text(no_wrap=True, overflow="ellipsis")

    _heading(text, "Session Info")
    session_id = truncate(session.session_id, _SESSION_ID_WIDTH) if session.session_id else "none"
    _row(text, "ID", session_id)
    _row(text, "Model", session.short_model or "default")
    _row(text, "Turns", str(stats.turns))
    _row(text, "Cost", f"${stats.cost_usd:.4f}")
    if len(session.chain) > 1:
        _row(text, "Chain", f"{len(session.chain)} sessions")

    _heading(text, "Token Usage")
    _row(text, "Input", f"{stats.input_tokens:,}")
    _row(text, "Output", f"{stats.output_tokens:,}")
    _row(text, "Cache write", f"{stats.cache_creation_tokens:,}")
    _row(text, "Cache read", f"{stats.cache_read_tokens:,}")
    _row(text, "Total", f"{stats.total_tokens:,}")

    _heading(text, "Recent Errors")
    errors = list(errors)
    if not errors:
        text.append("\nnone", style=_MUTED_STYLE)
    for error in errors:
        text.append("\n")
        text.append(f"{error.timestamp:%H:%M:%S} ", style=_MUTED_STYLE)
        text.append(truncate(error.message, width - 9), style="#C67B5C")

    _heading(text, "Tool Activity")
    tool_notices = list(tool_notices)
    if not tool_notices:
        text.append("\nnone", style=_MUTED_STYLE)
    for execution in tool_notices:
        text.append("\n")
        text.append(f"{TOOL_STATUS_ICONS[execution.status]} ", style=TOOL_STATUS_STYLES[execution.status])
        text.append(truncate(execution.display, width - 2), style=_VALUE_STYLE)

    missing = height - len(text.plain.split("\n"))
    if missing > 0:
        text.append("\n" * missing)
    return text


class SidePanel(Static):
    DEFAULT_CSS = """
    SidePanel {
        width: 35;
        height: 1fr;
        border: round #2A2E3D;
        background: #16213E;
        padding: 0 1;
    }
    """

    def __init__(self, **kwargs: object) -> None:
        super().__init__("", **kwargs)
        self._display_text = ""

    def show(
        self,
        session: SessionSnapshot,
        stats: UsageStats,
        errors: Iterable[ErrorOccurred],
        tool_notices: Iterable[ToolExecution],
        width: int,
        height: int,
    ) -> None:
        body = render_side_panel(session, stats, errors, tool_notices, width, height)
        self._display_text = body.plain
        self.update(body)
