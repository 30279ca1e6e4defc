"""ApplicationState: everything the dashboard renders, and the key transitions.

The dashboard's update loop is the only writer. Nothing here touches
Textual, so every transition can be driven directly from tests.
"""
from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Union
from uuid import uuid4

from customclaude_tui.agent.events import ErrorKind, ErrorOccurred
from customclaude_tui.models import (
    ConversationMessage,
    MessageRole,
    SessionSnapshot,
    ToolExecution,
    UsageStats,
)

from .commands import ParsedInput, parse_input
from .editor import EditorAction, InputMode, ModalLineEditor
from .layout import LayoutManager, PanelDimensions
from .viewport import MessageFormatter, Viewport, clamp_offset, compute_visible, max_offset

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 500
ERROR_LIMIT = 5
TOOL_NOTICE_LIMIT = 10


class View(Enum):
    MAIN = "main"
    HELP = "help"
    SETTINGS = "settings"


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class NewConversation:
    pass


@dataclass(frozen=True)
class PromptSubmitted:
    prompt: str
    resume: bool = True


@dataclass(frozen=True)
class RunCommand:
    command: ParsedInput


Action = Union[Quit, NewConversation, PromptSubmitted, RunCommand]

_VIEW_KEYS = {
    "f1": View.HELP,
    "f2": View.SETTINGS,
    "f3": View.MAIN,
}


def _local_message_id() -> str:
    return f"local_{uuid4().hex[:12]}"


class ApplicationState:
    def __init__(
        self,
        *,
        formatter: MessageFormatter | None = None,
        history_limit: int = HISTORY_LIMIT,
        width: int = 80,
        height: int = 24,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._clock = clock
        self.formatter = formatter or MessageFormatter()
        self.view = View.MAIN
        self.width = width
        self.height = height
        self.editor = ModalLineEditor()
        self.input_active = False
        self.loading = False
        self.status: str | None = None
        self.messages: deque[ConversationMessage] = deque(maxlen=max(1, history_limit))
        self.errors: deque[ErrorOccurred] = deque(maxlen=ERROR_LIMIT)
        self.tool_notices: deque[ToolExecution] = deque(maxlen=TOOL_NOTICE_LIMIT)
        self.session = SessionSnapshot()
        self.stats = UsageStats()
        self.scroll_offset = 0

    # -- derived ------------------------------------------------------------

    @property
    def input_mode(self) -> InputMode:
        return self.editor.mode

    @property
    def dimensions(self) -> PanelDimensions:
        return LayoutManager(self.width, self.height).dimensions()

    @property
    def page_size(self) -> int:
        return max(1, self.dimensions.viewport_height)

    def max_scroll(self) -> int:
        dims = self.dimensions
        total = self.formatter.count_lines(self.messages, dims.content_width)
        return max_offset(total, dims.viewport_height)

    def viewport(self) -> Viewport:
        """Visible slice for the next frame; re-clamps the stored offset."""
        dims = self.dimensions
        view = compute_visible(
            self.messages,
            dims.content_width,
            dims.viewport_height,
            self.scroll_offset,
            self.formatter,
        )
        self.scroll_offset = view.offset
        return view

    # -- mutations ----------------------------------------------------------

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.scroll_offset = clamp_offset(self.scroll_offset, self.max_scroll())

    def append_message(self, message: ConversationMessage) -> None:
        # deque(maxlen) evicts from the front; the offset is recomputed, not shifted.
        self.messages.append(message)
        self.scroll_to_bottom()

    def append_local(self, role: MessageRole, content: str, *, is_error: bool = False) -> ConversationMessage:
        message = ConversationMessage(
            id=_local_message_id(),
            role=role,
            content=content,
            timestamp=self._clock(),
            is_error=is_error,
        )
        self.append_message(message)
        return message

    def add_error(self, error: ErrorOccurred) -> None:
        self.errors.append(error)
        if error.error_kind is ErrorKind.RESULT:
            self.append_local(MessageRole.ERROR, error.message, is_error=True)

    def add_tool_notice(self, execution: ToolExecution) -> None:
        self.tool_notices.append(execution)

    def clear_history(self) -> None:
        self.messages.clear()
        self.formatter.clear_cache()
        self.scroll_offset = 0

    def on_prompt_submitted(self, action: PromptSubmitted) -> None:
        """Optimistic echo of the operator's prompt."""
        self.append_local(MessageRole.USER, action.prompt)

    def finish_command(self) -> None:
        self.loading = False
        self.status = None

    # -- scrolling ------------------------------------------------------------

    def scroll_by(self, delta: int) -> None:
        self.scroll_offset = clamp_offset(self.scroll_offset + delta, self.max_scroll())

    def page_up(self) -> None:
        self.scroll_by(-self.page_size)

    def page_down(self) -> None:
        self.scroll_by(self.page_size)

    def scroll_to_top(self) -> None:
        self.scroll_offset = 0

    def scroll_to_bottom(self) -> None:
        # Always recomputed: history may have changed since the last frame.
        self.scroll_offset = self.max_scroll()

    # -- views and input --------------------------------------------------------

    def switch_view(self, view: View) -> None:
        self.view = view

    def start_input(self) -> None:
        if self.view is not View.MAIN or self.input_active:
            return
        self.input_active = True
        self.editor.activate()

    def leave_input(self) -> None:
        self.input_active = False
        self.editor.activate()

    # -- keys -----------------------------------------------------------------

    def handle_key(self, key: str, character: str | None = None) -> Action | None:
        """Apply one key press. Returns the action the app must carry out, if any."""
        if key == "ctrl+c":
            return Quit()
        if key == "ctrl+n":
            return NewConversation()
        if key in _VIEW_KEYS:
            self.switch_view(_VIEW_KEYS[key])
            return None
        if self.input_active:
            return self._handle_input_key(key, character)
        return self._handle_idle_key(key, character)

    def _handle_input_key(self, key: str, character: str | None) -> Action | None:
        result = self.editor.handle_key(key, character)
        if result is EditorAction.LEAVE:
            self.leave_input()
        elif result is EditorAction.SUBMIT:
            return self._submit()
        return None

    def _submit(self) -> Action | None:
        parsed = parse_input(self.editor.text.strip())
        if parsed.kind == "command":
            self.editor.take_prompt()
            self.input_active = False
            return RunCommand(parsed)
        if self.loading:
            self.status = "Agent is still responding; prompt kept"
            return None
        prompt = self.editor.take_prompt()
        self.input_active = False
        self.loading = True
        self.status = None
        return PromptSubmitted(prompt, resume=self.session.is_active)

    def _handle_idle_key(self, key: str, character: str | None) -> Action | None:
        token = character if character and character.isprintable() else key
        if token == "q":
            return Quit()
        if key == "escape":
            self.switch_view(View.MAIN)
            return None
        if self.view is not View.MAIN:
            return None
        if key == "enter":
            self.start_input()
        elif key == "up" or token == "k":
            self.scroll_by(-1)
        elif key == "down" or token == "j":
            self.scroll_by(1)
        elif key == "pageup":
            self.page_up()
        elif key == "pagedown":
            self.page_down()
        elif key == "home":
            self.scroll_to_top()
        elif key == "end":
            self.scroll_to_bottom()
        return None
