from __future__ import annotations

from datetime import datetime

import pytest

from customclaude_tui.agent.events import ErrorKind, ErrorOccurred
from customclaude_tui.chat.editor import InputMode
from customclaude_tui.chat.state import (
    ApplicationState,
    NewConversation,
    PromptSubmitted,
    Quit,
    RunCommand,
    View,
)
from customclaude_tui.models import ConversationMessage, MessageRole, SessionSnapshot

NOW = datetime(2025, 1, 1, 12, 0, 0)


def make_state(**kwargs) -> ApplicationState:
    kwargs.setdefault("width", 120)
    kwargs.setdefault("height", 40)
    return ApplicationState(clock=lambda: NOW, **kwargs)


def msg(index: int, role: MessageRole = MessageRole.ASSISTANT) -> ConversationMessage:
    return ConversationMessage(id=f"m{index}", role=role, content=f"reply {index}", timestamp=NOW)


def fill(state: ApplicationState, count: int) -> None:
    for index in range(count):
        state.append_message(msg(index))


def type_keys(state: ApplicationState, text: str):
    result = None
    for char in text:
        result = state.handle_key(char, char)
    return result


class TestHistory:
    def test_history_is_bounded_and_follows_bottom(self):
        state = make_state()
        for index in range(600):
            state.append_message(msg(index))
            assert state.scroll_offset == state.max_scroll()

        assert len(state.messages) == 500
        assert state.messages[0].id == "m100"
        assert state.messages[-1].id == "m599"

    def test_custom_history_limit(self):
        state = make_state(history_limit=3)
        fill(state, 5)
        assert [m.id for m in state.messages] == ["m2", "m3", "m4"]

    def test_clear_history(self):
        state = make_state()
        fill(state, 50)
        state.clear_history()
        assert len(state.messages) == 0
        assert state.scroll_offset == 0

    def test_errors_and_tool_notices_are_bounded(self):
        state = make_state()
        for index in range(8):
            state.add_error(ErrorOccurred(ErrorKind.PROCESS, f"e{index}"))
        assert [e.message for e in state.errors] == ["e3", "e4", "e5", "e6", "e7"]

    def test_result_error_is_also_a_conversation_message(self):
        state = make_state()
        state.add_error(ErrorOccurred(ErrorKind.RESULT, "Task failed: too many turns"))
        state.add_error(ErrorOccurred(ErrorKind.DECODE, "bad line"))

        assert len(state.messages) == 1
        assert state.messages[0].role is MessageRole.ERROR
        assert state.messages[0].is_error
        assert state.messages[0].id.startswith("local_")


class TestScrolling:
    def test_scroll_keys(self):
        state = make_state()
        fill(state, 40)
        bottom = state.max_scroll()
        assert bottom > 0

        state.handle_key("up")
        assert state.scroll_offset == bottom - 1
        state.handle_key("k", "k")
        assert state.scroll_offset == bottom - 2
        state.handle_key("j", "j")
        assert state.scroll_offset == bottom - 1
        state.handle_key("home")
        assert state.scroll_offset == 0
        state.handle_key("up")
        assert state.scroll_offset == 0
        state.handle_key("pagedown")
        assert state.scroll_offset == min(bottom, state.page_size)
        state.handle_key("end")
        assert state.scroll_offset == bottom
        state.handle_key("down")
        assert state.scroll_offset == bottom

    def test_end_recomputes_after_resize(self):
        state = make_state()
        fill(state, 40)
        state.resize(120, 20)
        state.handle_key("end")
        assert state.scroll_offset == state.max_scroll()

    def test_resize_clamps_offset(self):
        state = make_state()
        fill(state, 40)
        state.resize(120, 200)
        assert state.scroll_offset == state.max_scroll() == 0

    def test_viewport_has_viewport_height_lines(self):
        state = make_state()
        fill(state, 3)
        view = state.viewport()
        assert len(view.lines) == state.dimensions.viewport_height


class TestKeys:
    def test_global_keys(self):
        state = make_state()
        assert state.handle_key("ctrl+c") == Quit()
        assert state.handle_key("ctrl+n") == NewConversation()
        assert state.handle_key("q", "q") == Quit()

    def test_function_keys_switch_views(self):
        state = make_state()
        state.handle_key("f1")
        assert state.view is View.HELP
        state.handle_key("f2")
        assert state.view is View.SETTINGS
        state.handle_key("escape")
        assert state.view is View.MAIN

    def test_enter_only_starts_input_on_main_view(self):
        state = make_state()
        state.switch_view(View.HELP)
        state.handle_key("enter")
        assert not state.input_active

        state.switch_view(View.MAIN)
        state.handle_key("enter")
        assert state.input_active
        assert state.input_mode is InputMode.NORMAL

    def test_q_is_text_while_typing(self):
        state = make_state()
        state.handle_key("enter")
        state.handle_key("i", "i")
        assert type_keys(state, "quit") is None
        assert state.editor.text == "quit"

    def test_escape_twice_leaves_input_and_keeps_text(self):
        state = make_state()
        state.handle_key("enter")
        state.handle_key("i", "i")
        type_keys(state, "draft")
        state.handle_key("escape")
        assert state.input_active
        state.handle_key("escape")
        assert not state.input_active
        assert state.editor.text == "draft"

    def test_view_keys_work_while_typing(self):
        state = make_state()
        state.handle_key("enter")
        state.handle_key("f1")
        assert state.view is View.HELP


class TestSubmit:
    def start_typing(self, state: ApplicationState, text: str) -> None:
        state.handle_key("enter")
        state.handle_key("i", "i")
        type_keys(state, text)

    def test_prompt_submission(self):
        state = make_state()
        self.start_typing(state, "  explain  ")

        action = state.handle_key("enter")

        assert action == PromptSubmitted("explain", resume=False)
        assert state.loading
        assert not state.input_active
        assert state.editor.text == ""

    def test_resume_when_session_is_active(self):
        state = make_state()
        state.session = SessionSnapshot(session_id="sess-1")
        self.start_typing(state, "more")
        assert state.handle_key("enter") == PromptSubmitted("more", resume=True)

    def test_echo_appends_user_message(self):
        state = make_state()
        state.on_prompt_submitted(PromptSubmitted("hello"))
        assert state.messages[-1].role is MessageRole.USER
        assert state.messages[-1].content == "hello"
        assert state.messages[-1].timestamp == NOW

    def test_prompt_is_kept_while_loading(self):
        state = make_state()
        state.loading = True
        self.start_typing(state, "second")

        assert state.handle_key("enter") is None
        assert state.editor.text == "second"
        assert state.input_active
        assert state.status

    def test_command_is_returned_even_while_loading(self):
        state = make_state()
        state.loading = True
        self.start_typing(state, "/model claude-opus-4")

        action = state.handle_key("enter")

        assert isinstance(action, RunCommand)
        assert action.command.name == "model"
        assert action.command.args == "claude-opus-4"
        assert not state.input_active

    def test_finish_command_clears_loading(self):
        state = make_state()
        state.loading = True
        state.status = "x"
        state.finish_command()
        assert not state.loading
        assert state.status is None

    @pytest.mark.parametrize("text", ["", "   "])
    def test_blank_prompt_is_not_submitted(self, text):
        state = make_state()
        self.start_typing(state, text)
        assert state.handle_key("enter") is None
        assert not state.loading
