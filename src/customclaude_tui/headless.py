"""Line-mode front end: read a prompt, stream the answer, repeat.

Runs without Textual. Shares the accumulator and process runner with the
dashboard; output goes straight to a rich Console.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from rich.console import Console
from rich.markdown import Markdown
from rich.text import Text

from .agent import (
    AgentRunner,
    DomainEvent,
    ErrorKind,
    ErrorOccurred,
    MessageReceived,
    ProcessError,
    SessionAccumulator,
    SessionInitialized,
    SessionUpdated,
    ToolActivity,
)
from .chat.commands import format_help, is_known_command, parse_input
from .config import DashboardConfig
from .models import MessageRole, ToolStatus
from .render import DEFAULT_CODE_THEME
from .summary import render_summary

logger = logging.getLogger(__name__)

_SYSTEM_STYLE = "bold #4A90D9"
_VALUE_STYLE = "#FFF8E7"
_ERROR_STYLE = "bold #C67B5C"
_MUTED_STYLE = "dim #A8B5A2"


class HeadlessSession:
    def __init__(
        self,
        config: DashboardConfig,
        *,
        console: Console | None = None,
        accumulator: SessionAccumulator | None = None,
        runner: AgentRunner | None = None,
        code_theme: str = DEFAULT_CODE_THEME,
    ) -> None:
        self.console = console or Console()
        self._config = config
        self.accumulator = accumulator or SessionAccumulator(model=config.model)
        self._runner = runner or AgentRunner(self.accumulator, self.show_event, config)
        self._code_theme = code_theme
        self.finished = False

    # -- output -----------------------------------------------------------------

    def print_banner(self) -> None:
        self.console.print("Claude CLI Integration", style="bold #F5A623")
        self.console.print("Interactive agent CLI with session management", style=_MUTED_STYLE)
        self.console.rule(style="#2A2E3D")
        self.console.print(format_help(), style=_MUTED_STYLE, markup=False, highlight=False)
        self.console.rule(style="#2A2E3D")
        self.console.print("Type your prompt and press Enter to send it.", style=_MUTED_STYLE)
        self.console.print()

    def _system(self, label: str, value: str) -> None:
        self.console.print(Text.assemble((label, _SYSTEM_STYLE), " ", (value, _VALUE_STYLE)))

    def _error(self, message: str) -> None:
        self.console.print(Text.assemble(("❌ [Error]", _ERROR_STYLE), " ", message))

    def show_event(self, event: DomainEvent) -> None:
        if isinstance(event, SessionInitialized):
            self.console.print()
            self._system("⚡ Session initialized:", event.session_id)
            self._system("🤖 Model:", event.model)
            self._system("📁 Working directory:", event.cwd)
            self._system("🛠 Available tools:", str(len(event.tools)))
            self.console.print()
        elif isinstance(event, MessageReceived):
            message = event.message
            if message.role is MessageRole.TOOL_USE:
                self.console.print()
                self.console.print(f"🔧 [Tool: {message.tool_name}]", style="italic #A78BFA", markup=False)
            else:
                self.console.print(Markdown(message.content, code_theme=self._code_theme))
        elif isinstance(event, ToolActivity):
            if event.execution.status is not ToolStatus.STARTING:
                self.console.print("•", style="#F5A623", end="")
        elif isinstance(event, SessionUpdated):
            if event.notice:
                self._system("🆕 [System]", f"{event.notice.capitalize()}...")
            else:
                self.console.print(" ✓", style="bold green")
        elif isinstance(event, ErrorOccurred):
            if event.error_kind is ErrorKind.DECODE:
                self.console.print(f"[parse error] {event.raw}", markup=False, highlight=False)
            else:
                self.console.print()
                self._error(event.message)

    def show_summary(self) -> None:
        self.console.print()
        self.console.print(render_summary(self.accumulator.session_snapshot(), self.accumulator.stats))

    # -- input --------------------------------------------------------------------

    async def execute(self, prompt: str) -> None:
        resume = bool(self.accumulator.current_session_id)
        try:
            await self._runner.execute_command(prompt, resume=resume)
        except ProcessError as exc:
            self._error(str(exc))

    async def handle_line(self, line: str) -> None:
        """Run one line of operator input: a slash command or a prompt."""
        text = line.strip()
        if not text:
            return
        parsed = parse_input(text)
        if parsed.kind == "message":
            await self.execute(text)
            return

        if not is_known_command(parsed):
            self._error(f"Unknown command: {text}")
            return

        name = parsed.name
        if name in ("exit", "quit"):
            if self.accumulator.session_chain:
                self.show_summary()
            self.console.print("Goodbye!", style=_MUTED_STYLE)
            self.finished = True
        elif name == "new":
            if self.accumulator.session_chain:
                self.show_summary()
            for event in self.accumulator.start_new_conversation():
                self.show_event(event)
        elif name == "session":
            session_id = self.accumulator.current_session_id
            if session_id:
                self._system("Current session:", session_id)
            else:
                self.console.print("No active session", style=_MUTED_STYLE)
        elif name == "model":
            if parsed.args:
                self.accumulator.set_model(parsed.args)
                self._system("Model set to:", self.accumulator.model)
            else:
                self._system("Model:", self.accumulator.model or "agent default")
        elif name == "help":
            self.console.print(format_help(), markup=False, highlight=False)
        elif name == "settings":
            for label, value in self._config.describe():
                self._system(f"{label}:", value)
        elif name == "clear":
            # Line mode keeps no history.
            self.console.print("Nothing to clear in line mode", style=_MUTED_STYLE)

    def run(self, read_line: Callable[[str], str] = input) -> int:
        self.print_banner()
        while not self.finished:
            try:
                line = read_line("> ")
            except EOFError:
                if self.accumulator.session_chain:
                    self.show_summary()
                break
            except KeyboardInterrupt:
                self.console.print()
                if self.accumulator.session_chain:
                    self.show_summary()
                break
            try:
                asyncio.run(self.handle_line(line))
            except KeyboardInterrupt:
                # Ctrl+C while the agent runs: the runner terminated the process.
                self.console.print()
                self._error("interrupted")
        logger.info("Headless session finished")
        return 0
