"""Typed domain events emitted by the session accumulator."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Union

from customclaude_tui.models import (
    ConversationMessage,
    SessionSnapshot,
    ToolExecution,
    UsageStats,
)


class EventKind(Enum):
    SESSION_INIT = "session_init"
    SESSION_UPDATE = "session_update"
    MESSAGE_RECEIVED = "message_received"
    TOOL_ACTIVITY = "tool_activity"
    ERROR = "error"
    STATS_UPDATE = "stats_update"


class ErrorKind(Enum):
    DECODE = "decode"      # line is not JSON
    PROTOCOL = "protocol"  # JSON, but not the shape we expect
    PROCESS = "process"    # spawn/pipe/wait failures and stderr output
    RESULT = "result"      # the agent reported a failed task
    RENDER = "render"      # markdown styling failed


@dataclass(frozen=True)
class SessionInitialized:
    session_id: str
    model: str
    cwd: str = ""
    tools: tuple[str, ...] = ()
    timestamp: datetime = field(default_factory=datetime.now)

    kind = EventKind.SESSION_INIT


@dataclass(frozen=True)
class SessionUpdated:
    session: SessionSnapshot
    notice: str | None = None  # e.g. "conversation ended", "model changed"
    timestamp: datetime = field(default_factory=datetime.now)

    kind = EventKind.SESSION_UPDATE


@dataclass(frozen=True)
class MessageReceived:
    message: ConversationMessage
    timestamp: datetime = field(default_factory=datetime.now)

    kind = EventKind.MESSAGE_RECEIVED


@dataclass(frozen=True)
class ToolActivity:
    execution: ToolExecution
    timestamp: datetime = field(default_factory=datetime.now)

    kind = EventKind.TOOL_ACTIVITY


@dataclass(frozen=True)
class ErrorOccurred:
    error_kind: ErrorKind
    message: str
    raw: str | None = None  # offending stream line, when there is one
    timestamp: datetime = field(default_factory=datetime.now)

    kind = EventKind.ERROR

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class StatsUpdated:
    stats: UsageStats
    conversation_start: datetime
    timestamp: datetime = field(default_factory=datetime.now)

    kind = EventKind.STATS_UPDATE


DomainEvent = Union[
    SessionInitialized,
    SessionUpdated,
    MessageReceived,
    ToolActivity,
    ErrorOccurred,
    StatsUpdated,
]
