"""Tests for DashboardApp (smoke tests + composition + key flow)."""
from __future__ import annotations

import json
from datetime import datetime

import pytest
from textual.widgets import Footer, Header

from customclaude_tui.agent import MessageReceived, ProcessError, SessionAccumulator
from customclaude_tui.app import DashboardApp
from customclaude_tui.bus import EventBus
from customclaude_tui.chat import View
from customclaude_tui.chat.editor import InputMode
from customclaude_tui.config import DashboardConfig
from customclaude_tui.models import ConversationMessage, MessageRole
from customclaude_tui.widgets import ConversationPanel, HelpView, InputPanel, SettingsView, SidePanel


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

TURN = [
    json.dumps({"type": "system", "subtype": "init", "session_id": "A", "model": "claude-sonnet-4-20250514",
                "cwd": "/work", "tools": ["Bash"]}),
    json.dumps({"type": "assistant", "message": {"content": [{"type": "text", "text": "hi there"}]}}),
    json.dumps({"type": "result", "subtype": "success", "session_id": "B", "num_turns": 1,
                "total_cost_usd": 0.01, "usage": {"input_tokens": 12, "output_tokens": 3}}),
]


class FakeRunner:
    """Stands in for AgentRunner: replays canned stream lines onto the bus."""

    def __init__(self, accumulator: SessionAccumulator, bus: EventBus, lines=(), fail: str | None = None) -> None:
        self.accumulator = accumulator
        self.bus = bus
        self.lines = list(lines)
        self.fail = fail
        self.calls: list[tuple[str, bool]] = []

    async def execute_command(self, prompt: str, resume: bool = True) -> None:
        self.calls.append((prompt, resume))
        for line in self.lines:
            for event in self.accumulator.ingest(line):
                self.bus.publish(event)
        if self.fail:
            raise ProcessError(self.fail)


def make_app(lines=(), fail: str | None = None) -> tuple[DashboardApp, FakeRunner]:
    accumulator = SessionAccumulator()
    bus = EventBus()
    runner = FakeRunner(accumulator, bus, lines, fail)
    app = DashboardApp(DashboardConfig(), accumulator=accumulator, runner=runner, bus=bus)
    return app, runner


async def submit(app: DashboardApp, pilot, text: str) -> None:
    await pilot.press("enter", "i", *text, "enter")
    await app.workers.wait_for_complete()
    await pilot.pause()
    await pilot.pause()


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_app_composes_panels() -> None:
    app, _ = make_app()
    async with app.run_test(size=(120, 40)):
        assert app.query_one(Header) is not None
        assert app.query_one(Footer) is not None
        assert app.query_one("#conversation", ConversationPanel) is not None
        assert app.query_one("#side-panel", SidePanel) is not None
        assert app.query_one("#input-panel", InputPanel) is not None


@pytest.mark.asyncio
async def test_initial_frame_shows_hint_and_empty_stats() -> None:
    app, _ = make_app()
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        conversation = app.query_one(ConversationPanel)
        side = app.query_one(SidePanel)
        assert "No messages yet" in conversation._display_text
        assert "Session Info" in side._display_text
        assert "Turns: 0" in side._display_text
        assert not app.query_one(HelpView).display


@pytest.mark.asyncio
async def test_default_app_renders_first_frame() -> None:
    app = DashboardApp(DashboardConfig())
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.pause()
        assert app._panels_ready
        assert "No messages yet" in app.query_one(ConversationPanel)._display_text
        assert "Turns: 0" in app.query_one(SidePanel)._display_text


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_enter_insert_type_escape() -> None:
    app, _ = make_app()
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.press("enter")
        assert app.state.input_active
        assert app.state.input_mode is InputMode.NORMAL

        await pilot.press("i", "h", "e", "y")
        assert app.state.editor.text == "hey"
        assert "[INSERT] > hey" in app.query_one(InputPanel)._display_text

        await pilot.press("escape")
        assert app.state.input_mode is InputMode.NORMAL
        await pilot.press("escape")
        assert not app.state.input_active
        assert app.state.editor.text == "hey"


@pytest.mark.asyncio
async def test_function_keys_switch_views() -> None:
    app, _ = make_app()
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.press("f1")
        await pilot.pause()
        assert app.state.view is View.HELP
        assert app.query_one(HelpView).display
        assert not app.query_one("#main-view").display

        await pilot.press("f2")
        await pilot.pause()
        assert app.query_one(SettingsView).display

        await pilot.press("escape")
        await pilot.pause()
        assert app.state.view is View.MAIN
        assert app.query_one("#main-view").display


@pytest.mark.asyncio
async def test_q_exits_when_not_typing() -> None:
    app, _ = make_app()
    async with app.run_test(size=(120, 40)) as pilot:
        await pilot.press("q")
        assert app.return_code == 0


# ---------------------------------------------------------------------------
# Prompt round trip
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_prompt_round_trip_updates_state() -> None:
    app, runner = make_app(TURN)
    async with app.run_test(size=(120, 40)) as pilot:
        await submit(app, pilot, "hello")

        assert runner.calls == [("hello", False)]
        roles = [message.role for message in app.state.messages]
        assert roles[0] is MessageRole.USER
        assert MessageRole.ASSISTANT in roles
        assert app.state.session.session_id == "B"
        assert app.state.stats.turns == 1
        assert not app.state.loading
        assert "Turns: 1" in app.query_one(SidePanel)._display_text
        assert "hi there" in app.query_one(ConversationPanel)._display_text


@pytest.mark.asyncio
async def test_second_prompt_resumes_session() -> None:
    app, runner = make_app(TURN)
    async with app.run_test(size=(120, 40)) as pilot:
        await submit(app, pilot, "one")
        await submit(app, pilot, "two")
        assert runner.calls[-1] == ("two", True)


@pytest.mark.asyncio
async def test_process_failure_is_shown_and_loading_cleared() -> None:
    app, _ = make_app(fail="command failed: exit status 2")
    async with app.run_test(size=(120, 40)) as pilot:
        await submit(app, pilot, "hello")

        assert not app.state.loading
        assert app.state.errors[-1].message == "command failed: exit status 2"
        assert "command failed" in app.query_one(SidePanel)._display_text


@pytest.mark.asyncio
async def test_published_message_reaches_conversation_panel() -> None:
    app, _ = make_app()
    async with app.run_test(size=(120, 40)) as pilot:
        message = ConversationMessage("m1", MessageRole.ASSISTANT, "from the bus", datetime.now())
        app.bus.publish(MessageReceived(message))
        await pilot.pause()

        assert app.state.messages[-1] == message
        assert "from the bus" in app.query_one(ConversationPanel)._display_text


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_model_command_sets_model() -> None:
    app, runner = make_app()
    async with app.run_test(size=(120, 40)) as pilot:
        await submit(app, pilot, "/model claude-haiku")

        assert app.accumulator.model == "claude-haiku"
        assert app.state.messages[-1].content == "Model changed to claude-haiku"
        assert runner.calls == []


@pytest.mark.asyncio
async def test_unknown_command_is_reported() -> None:
    app, _ = make_app()
    async with app.run_test(size=(120, 40)) as pilot:
        await submit(app, pilot, "/bogus")
        assert app.state.messages[-1].content == "Unknown command: /bogus. Type /help for commands."


@pytest.mark.asyncio
async def test_ctrl_n_starts_new_conversation() -> None:
    app, _ = make_app(TURN)
    async with app.run_test(size=(120, 40)) as pilot:
        await submit(app, pilot, "hello")
        await pilot.press("ctrl+n")
        await pilot.pause()

        assert app.accumulator.session_chain == ()
        assert app.state.stats.turns == 0
        assert app.state.messages[-1].role is MessageRole.SYSTEM


@pytest.mark.asyncio
async def test_bare_slash_is_unknown_command() -> None:
    app, runner = make_app()
    async with app.run_test(size=(120, 40)) as pilot:
        await submit(app, pilot, "/ help")
        assert app.state.messages[-1].content == "Unknown command: / help. Type /help for commands."
        assert app.state.view is View.MAIN
        assert runner.calls == []
