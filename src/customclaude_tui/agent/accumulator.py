from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from uuid import uuid4

from customclaude_tui.models import (
    ConversationMessage,
    MessageRole,
    SessionSnapshot,
    UsageStats,
)

from .events import (
    DomainEvent,
    ErrorKind,
    ErrorOccurred,
    MessageReceived,
    SessionInitialized,
    SessionUpdated,
    StatsUpdated,
    ToolActivity,
)
from .protocol import (
    AssistantRecord,
    DecodeError,
    ProtocolError,
    ResultRecord,
    SystemRecord,
    TextBlock,
    ToolUseBlock,
    UnknownRecord,
    UserRecord,
    decode_line,
    describe_tool_use,
)
from .tools import ToolTracker

logger = logging.getLogger(__name__)


def _new_message_id() -> str:
    return f"msg_{uuid4().hex[:12]}"


class SessionAccumulator:
    """Single writer of session identity and cumulative usage.

    Fed one stream line at a time through :meth:`ingest`; every mutation is
    published to the UI as an immutable snapshot inside the returned events.
    """

    def __init__(
        self,
        *,
        model: str = "",
        clock: Callable[[], datetime] = datetime.now,
        tools: ToolTracker | None = None,
        message_id_factory: Callable[[], str] = _new_message_id,
    ) -> None:
        self._clock = clock
        self._new_message_id = message_id_factory
        self._tools = tools or ToolTracker(clock=clock)
        self._model = model
        self._session_id = ""
        self._chain: list[str] = []
        self._stats = UsageStats()
        self._conversation_start = clock()
        self._init_announced = False

    @property
    def current_session_id(self) -> str:
        return self._session_id

    @property
    def model(self) -> str:
        return self._model

    @property
    def session_chain(self) -> tuple[str, ...]:
        return tuple(self._chain)

    @property
    def stats(self) -> UsageStats:
        return self._stats

    @property
    def conversation_start(self) -> datetime:
        return self._conversation_start

    @property
    def tools(self) -> ToolTracker:
        return self._tools

    def session_snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self._session_id,
            model=self._model,
            chain=tuple(self._chain),
            conversation_start=self._conversation_start,
            turns=self._stats.turns,
            cost_usd=self._stats.cost_usd,
        )

    def _stats_event(self) -> StatsUpdated:
        return StatsUpdated(stats=self._stats, conversation_start=self._conversation_start)

    # -- stream ---------------------------------------------------------

    def ingest(self, line: str) -> list[DomainEvent]:
        """Decode one stream line and return the events it produces."""
        if not line.strip():
            return []

        try:
            record = decode_line(line)
        except DecodeError as exc:
            logger.warning("Undecodable stream line skipped (%d chars)", len(line))
            return [ErrorOccurred(ErrorKind.DECODE, str(exc), raw=line)]
        except ProtocolError as exc:
            logger.warning("Unexpected stream shape: %s", exc)
            return [ErrorOccurred(ErrorKind.PROTOCOL, str(exc), raw=line)]

        if isinstance(record, SystemRecord):
            return self._on_system(record)
        if isinstance(record, AssistantRecord):
            return self._on_assistant(record)
        if isinstance(record, UserRecord):
            return self._on_user(record)
        if isinstance(record, ResultRecord):
            return self._on_result(record)
        if isinstance(record, UnknownRecord):
            logger.debug("Ignoring stream record of type %r", record.type)
        return []

    def _on_system(self, record: SystemRecord) -> list[DomainEvent]:
        if record.subtype != "init":
            return []
        self._session_id = record.session_id
        if record.model:
            self._model = record.model
        if self._init_announced:
            return []
        self._init_announced = True
        logger.info("Session initialized: %s (%s)", record.session_id, record.model)
        return [
            SessionInitialized(
                session_id=record.session_id,
                model=record.model,
                cwd=record.cwd,
                tools=record.tools,
            )
        ]

    def _on_assistant(self, record: AssistantRecord) -> list[DomainEvent]:
        events: list[DomainEvent] = []
        for block in record.blocks:
            if isinstance(block, TextBlock):
                if not block.text:
                    continue
                events.append(MessageReceived(self._message(MessageRole.ASSISTANT, block.text)))
            elif isinstance(block, ToolUseBlock):
                description = describe_tool_use(block)
                execution = self._tools.start(block.name, description)
                events.append(ToolActivity(execution))
                events.append(
                    MessageReceived(
                        self._message(MessageRole.TOOL_USE, description, tool_name=block.name)
                    )
                )
        return events

    def _on_user(self, record: UserRecord) -> list[DomainEvent]:
        updated = self._tools.resolve(record.is_error)
        if updated is None:
            return []
        return [ToolActivity(updated)]

    def _on_result(self, record: ResultRecord) -> list[DomainEvent]:
        if record.subtype == "success":
            # The agent hands out a fresh id on every run, resumed or not.
            if record.session_id:
                self._session_id = record.session_id
                self._chain.append(record.session_id)
            else:
                logger.warning("Successful result without a session id")
            self._stats = self._stats.plus(record.usage)
            return [SessionUpdated(self.session_snapshot()), self._stats_event()]
        if record.is_error:
            detail = record.result or record.subtype or "unknown error"
            return [ErrorOccurred(ErrorKind.RESULT, f"result error: {detail}")]
        return []

    def _message(
        self,
        role: MessageRole,
        content: str,
        *,
        tool_name: str | None = None,
    ) -> ConversationMessage:
        return ConversationMessage(
            id=self._new_message_id(),
            role=role,
            content=content,
            timestamp=self._clock(),
            tool_name=tool_name,
        )

    # -- operator actions -------------------------------------------------

    def start_new_conversation(self) -> list[DomainEvent]:
        """Reset identity and counters together; the model choice survives."""
        had_sessions = bool(self._chain)
        self._session_id = ""
        self._chain = []
        self._stats = UsageStats()
        self._conversation_start = self._clock()
        self._init_announced = False
        self._tools.reset()
        notice = "conversation ended, new conversation started" if had_sessions else "new conversation started"
        logger.info("Started new conversation")
        return [SessionUpdated(self.session_snapshot(), notice=notice), self._stats_event()]

    def set_model(self, model: str) -> list[DomainEvent]:
        self._model = model.strip()
        return [SessionUpdated(self.session_snapshot(), notice=f"model changed to {self._model}")]
