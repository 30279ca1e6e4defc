"""DashboardApp — the Textual TUI driving the agent CLI."""
from __future__ import annotations

import logging
from functools import partial

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.message import Message
from textual.theme import Theme
from textual.widgets import Footer, Header

from .agent import (
    AgentRunner,
    DomainEvent,
    ErrorKind,
    ErrorOccurred,
    EventKind,
    ProcessError,
    SessionAccumulator,
)
from .bus import EventBus
from .chat import (
    ApplicationState,
    DomainEventProcessor,
    NewConversation,
    PromptSubmitted,
    Quit,
    RunCommand,
    View,
)
from .chat.commands import ParsedInput, is_known_command
from .chat.viewport import MessageFormatter
from .config import DashboardConfig
from .models import MessageRole
from .render import MarkdownRenderer
from .widgets import ConversationPanel, HelpView, InputPanel, SettingsView, SidePanel

logger = logging.getLogger(__name__)

AGENT_WORKER_GROUP = "agent_command"


class AgentEvent(Message):
    """A domain event handed from the bus to the UI loop."""

    def __init__(self, event: DomainEvent) -> None:
        super().__init__()
        self.event = event


class CommandFinished(Message):
    """The agent process for the last prompt has exited."""


class DashboardApp(App[None]):
    """Main TUI application.

    Owns ApplicationState and is its only writer: key presses and bus
    events are applied on the app's message loop, each followed by a
    redraw of the visible panels.
    """

    TITLE = "🤖 customclaude"
    ENABLE_COMMAND_PALETTE = False
    BINDINGS = [
        Binding("ctrl+c", "quit_dashboard", "Quit", priority=True),
        Binding("ctrl+n", "new_conversation", "New", priority=True),
        Binding("f1", "show_view('help')", "Help", priority=True),
        Binding("f2", "show_view('settings')", "Settings", priority=True),
        Binding("f3", "show_view('main')", "Main", priority=True),
    ]

    CSS = """
Screen {
    background: #1A1A2E;
    color: #FFF8E7;
}
Header {
    background: #1A1A2E;
    color: #F5A623;
    text-style: bold;
}
#main-view {
    height: 1fr;
}
Footer {
    background: #1A1A2E;
    color: #A8B5A2;
}
"""

    def __init__(
        self,
        config: DashboardConfig | None = None,
        *,
        renderer: MarkdownRenderer | None = None,
        accumulator: SessionAccumulator | None = None,
        runner: AgentRunner | None = None,
        bus: EventBus | None = None,
    ) -> None:
        super().__init__()
        self._config = config or DashboardConfig()
        self.bus = bus or EventBus()
        self.accumulator = accumulator or SessionAccumulator(model=self._config.model)
        self.state = ApplicationState(
            formatter=MessageFormatter(renderer),
            history_limit=self._config.history_limit,
        )
        self._processor = DomainEventProcessor(self.state)
        self._runner = runner or AgentRunner(self.accumulator, self.bus.publish, self._config)
        self._panels_ready = False

    def compose(self) -> ComposeResult:
        """Layout: Header → Horizontal(ConversationPanel + SidePanel) | Help | Settings → InputPanel → Footer."""
        yield Header()
        with Horizontal(id="main-view"):
            yield ConversationPanel(id="conversation")
            yield SidePanel(id="side-panel")
        yield HelpView(id="help-view")
        yield SettingsView(id="settings-view")
        yield InputPanel(id="input-panel")
        yield Footer()

    def on_mount(self) -> None:
        logger.info("DashboardApp mounted (cli=%s)", self._config.cli_path)
        self.register_theme(Theme(
            name="hearth",
            primary="#F5A623",
            background="#1A1A2E",
            surface="#16213E",
            accent="#F5A623",
            warning="#FFD93D",
            error="#C67B5C",
            success="#4ADE80",
            secondary="#4A90D9",
            foreground="#FFF8E7",
            panel="#16213E",
        ))
        self.theme = "hearth"
        self.bus.attach_sink(self._deliver_to_ui)
        for kind in EventKind:
            self.bus.consume(kind, self._log_event)
        self._panels_ready = True
        self.state.resize(self.size.width, self.size.height)
        self._refresh_view()

    def on_unmount(self) -> None:
        self._panels_ready = False
        self.workers.cancel_group(self, AGENT_WORKER_GROUP)
        self.bus.shutdown()

    # -- event plumbing ---------------------------------------------------------

    def _deliver_to_ui(self, event: DomainEvent) -> None:
        self.post_message(AgentEvent(event))

    @staticmethod
    def _log_event(event: DomainEvent) -> None:
        if isinstance(event, ErrorOccurred):
            logger.warning("Agent error (%s): %s", event.error_kind.value, event.message)
        else:
            logger.debug("Event %s", event.kind.value)

    def on_agent_event(self, message: AgentEvent) -> None:
        self._processor.apply(message.event)
        self._refresh_view()

    def on_command_finished(self, message: CommandFinished) -> None:
        self.state.finish_command()
        self._refresh_view()

    def on_resize(self, event: events.Resize) -> None:
        self.state.resize(event.size.width, event.size.height)
        self._refresh_view()

    def on_key(self, event: events.Key) -> None:
        action = self.state.handle_key(event.key, event.character)
        event.prevent_default()
        event.stop()
        self._dispatch(action)
        self._refresh_view()

    # -- actions -----------------------------------------------------------------

    def action_quit_dashboard(self) -> None:
        logger.info("Quit requested")
        self.exit()

    def action_new_conversation(self) -> None:
        self._start_new_conversation()
        self._refresh_view()

    def action_show_view(self, name: str) -> None:
        self.state.switch_view(View(name))
        self._refresh_view()

    def _dispatch(self, action: object) -> None:
        if action is None:
            return
        if isinstance(action, Quit):
            self.action_quit_dashboard()
        elif isinstance(action, NewConversation):
            self._start_new_conversation()
        elif isinstance(action, PromptSubmitted):
            self.state.on_prompt_submitted(action)
            self.run_worker(
                partial(self._execute_prompt, action),
                exclusive=True,
                group=AGENT_WORKER_GROUP,
            )
        elif isinstance(action, RunCommand):
            self._run_command(action.command)

    async def _execute_prompt(self, action: PromptSubmitted) -> None:
        try:
            await self._runner.execute_command(action.prompt, resume=action.resume)
        except ProcessError as exc:
            self.bus.publish(ErrorOccurred(ErrorKind.PROCESS, str(exc)))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Agent command failed")
            self.bus.publish(ErrorOccurred(ErrorKind.PROCESS, f"command failed: {exc}"))
        finally:
            self.post_message(CommandFinished())

    def _start_new_conversation(self) -> None:
        self.workers.cancel_group(self, AGENT_WORKER_GROUP)
        self.state.finish_command()
        for event in self.accumulator.start_new_conversation():
            self.bus.publish(event)

    def _run_command(self, command: ParsedInput) -> None:
        if not is_known_command(command):
            self.state.append_local(
                MessageRole.SYSTEM,
                f"Unknown command: {command.raw}. Type /help for commands.",
            )
            return

        name = command.name
        if name == "help":
            self.state.switch_view(View.HELP)
        elif name == "settings":
            self.state.switch_view(View.SETTINGS)
        elif name == "new":
            self._start_new_conversation()
        elif name == "clear":
            self.state.clear_history()
        elif name in ("exit", "quit"):
            self.action_quit_dashboard()
        elif name == "model":
            if command.args:
                for event in self.accumulator.set_model(command.args):
                    self.bus.publish(event)
            else:
                current = self.accumulator.model or "agent default"
                self.state.append_local(MessageRole.SYSTEM, f"Model: {current}")
        elif name == "session":
            session_id = self.accumulator.current_session_id
            text = f"Current session: {session_id}" if session_id else "No active session"
            self.state.append_local(MessageRole.SYSTEM, text)

    # -- rendering ---------------------------------------------------------------

    def _refresh_view(self) -> None:
        """Redraw every visible panel from the current state snapshot."""
        if not self._panels_ready:
            return
        state = self.state
        if (state.width, state.height) != (self.size.width, self.size.height):
            state.resize(self.size.width, self.size.height)

        main = state.view is View.MAIN
        self.query_one("#main-view").display = main
        self.query_one("#input-panel", InputPanel).display = main
        self.query_one("#help-view", HelpView).display = state.view is View.HELP
        settings = self.query_one("#settings-view", SettingsView)
        settings.display = state.view is View.SETTINGS

        if main:
            dims = state.dimensions
            viewport = state.viewport()
            self.query_one("#conversation", ConversationPanel).show(viewport, bool(state.messages))
            self.query_one("#side-panel", SidePanel).show(
                state.session,
                state.stats,
                state.errors,
                state.tool_notices,
                width=dims.sidebar_width - 4,
                height=dims.inner_height,
            )
            self.query_one("#input-panel", InputPanel).show(
                state.editor,
                state.input_active,
                loading=state.loading,
                status=state.status,
            )
        elif state.view is View.SETTINGS:
            settings.show(self._config, self.accumulator.session_snapshot())

        session = state.session
        parts = [session.short_model or self.accumulator.model or "default model"]
        if session.session_id:
            parts.append(session.session_id[:8])
        self.sub_title = " · ".join(parts)

        for fault in state.formatter.drain_faults():
            self.bus.publish(ErrorOccurred(ErrorKind.RENDER, fault))
