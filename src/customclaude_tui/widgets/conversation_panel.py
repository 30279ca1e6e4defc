"""ConversationPanel — the scrolled message history."""
from __future__ import annotations

from rich.text import Text
from textual.widgets import Static

from ..chat.viewport import Viewport

EMPTY_HINT = "No messages yet. Press Enter to start a conversation."


def render_conversation(viewport: Viewport, has_messages: bool) -> Text:
    """Viewport lines, a spacer and the scroll indicator line."""
    lines = list(viewport.lines)
    if not has_messages and lines:
        lines[0] = Text(EMPTY_HINT, style="dim #A8B5A2")
    lines.append(Text(""))
    lines.append(Text(viewport.indicator(), style="dim #A8B5A2"))
    return Text("\n", no_wrap=True, overflow="crop").join(lines)


class ConversationPanel(Static):
    DEFAULT_CSS = """
    ConversationPanel {
        width: 1fr;
        height: 1fr;
        border: round #2A2E3D;
        background: #16213E;
        padding: 0 1;
    }
    """

    def __init__(self, **kwargs: object) -> None:
        super().__init__("", **kwargs)
        self._display_text = ""

    def show(self, viewport: Viewport, has_messages: bool) -> None:
        body = render_conversation(viewport, has_messages)
        self._display_text = body.plain
        self.update(body)
