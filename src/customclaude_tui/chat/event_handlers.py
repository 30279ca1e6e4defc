from __future__ import annotations

import logging

from customclaude_tui.agent.events import (
    DomainEvent,
    ErrorOccurred,
    MessageReceived,
    SessionInitialized,
    SessionUpdated,
    StatsUpdated,
    ToolActivity,
)
from customclaude_tui.models import MessageRole

from .state import ApplicationState

logger = logging.getLogger(__name__)


def describe_session_init(event: SessionInitialized) -> str:
    parts = [f"Session started with {event.model or 'default model'}"]
    if event.cwd:
        parts.append(f"in {event.cwd}")
    if event.tools:
        parts.append(f"({len(event.tools)} tools)")
    return " ".join(parts)


class DomainEventProcessor:
    """Applies domain events to ApplicationState. Called on the UI loop only."""

    def __init__(self, state: ApplicationState) -> None:
        self._state = state

    @property
    def state(self) -> ApplicationState:
        return self._state

    def apply(self, event: DomainEvent) -> None:
        state = self._state
        if isinstance(event, MessageReceived):
            state.append_message(event.message)
        elif isinstance(event, ToolActivity):
            state.add_tool_notice(event.execution)
        elif isinstance(event, ErrorOccurred):
            state.add_error(event)
        elif isinstance(event, StatsUpdated):
            state.stats = event.stats
        elif isinstance(event, SessionUpdated):
            state.session = event.session
            if event.notice:
                state.append_local(MessageRole.SYSTEM, event.notice.capitalize())
        elif isinstance(event, SessionInitialized):
            state.append_local(MessageRole.SYSTEM, describe_session_init(event))
        else:
            logger.warning("Unhandled event type %s", type(event).__name__)
