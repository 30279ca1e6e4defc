"""InputPanel — the single prompt line with its mode indicator."""
from __future__ import annotations

from rich.text import Text
from textual.widgets import Static

from ..chat.editor import ModalLineEditor

_MODE_STYLE = "bold #1A1A2E on #F5A623"
_HINT_STYLE = "dim #A8B5A2"


def render_input(
    editor: ModalLineEditor,
    active: bool,
    loading: bool = False,
    status: str | None = None,
) -> Text:
    text = Text(no_wrap=True, overflow="ellipsis")
    if loading:
        text.append("⏳ Processing... ", style="#FFD93D")
    if not active:
        text.append("Press Enter to type a prompt, q to quit", style=_HINT_STYLE)
        return text

    view = editor.cursor_view()
    text.append(f"[{view.mode_label}]", style=_MODE_STYLE)
    text.append(" > ", style="#F5A623")
    text.append(view.before, style="#FFF8E7")
    if view.block:
        text.append(view.at, style="reverse")
    else:
        text.append("│", style="bold #F5A623")
    text.append(view.after, style="#FFF8E7")
    if status:
        text.append(f"  {status}", style="#C67B5C")
    return text


class InputPanel(Static):
    DEFAULT_CSS = """
    InputPanel {
        height: 3;
        border: round #2A2E3D;
        background: #1A1A2E;
        padding: 0 1;
    }
    InputPanel.-active {
        border: round #F5A623;
    }
    """

    def __init__(self, **kwargs: object) -> None:
        super().__init__("", **kwargs)
        self._display_text = ""

    def show(
        self,
        editor: ModalLineEditor,
        active: bool,
        loading: bool = False,
        status: str | None = None,
    ) -> None:
        body = render_input(editor, active, loading, status)
        self._display_text = body.plain
        self.set_class(active, "-active")
        self.update(body)
