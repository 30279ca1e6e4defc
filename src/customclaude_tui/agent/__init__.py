"""Agent CLI integration: stream decoding, session accounting, process runner."""

from .accumulator import SessionAccumulator
from .events import (
    DomainEvent,
    ErrorKind,
    ErrorOccurred,
    EventKind,
    MessageReceived,
    SessionInitialized,
    SessionUpdated,
    StatsUpdated,
    ToolActivity,
)
from .process import AgentRunner, ProcessError, build_agent_argv

__all__ = [
    "AgentRunner",
    "DomainEvent",
    "ErrorKind",
    "ErrorOccurred",
    "EventKind",
    "MessageReceived",
    "ProcessError",
    "SessionAccumulator",
    "SessionInitialized",
    "SessionUpdated",
    "StatsUpdated",
    "ToolActivity",
    "build_agent_argv",
]
