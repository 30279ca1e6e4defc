from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from uuid import uuid4

from customclaude_tui.models import ToolExecution, ToolStatus

logger = logging.getLogger(__name__)


def _new_tool_id() -> str:
    return f"tool_{uuid4().hex[:12]}"


class ToolTracker:
    """Lifecycle of in-flight tool executions.

    ``starting -> running -> completed | failed``. Each tool result echoed by
    the agent advances the most recently started active tool by one step.
    Results are not matched by tool-use id: when several tools are issued in
    one turn and resolve out of order a result can land on the wrong tool.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = _new_tool_id,
    ) -> None:
        self._clock = clock
        self._id_factory = id_factory
        self._active: list[ToolExecution] = []

    @property
    def active(self) -> tuple[ToolExecution, ...]:
        return tuple(self._active)

    def start(self, name: str, description: str) -> ToolExecution:
        execution = ToolExecution(
            id=self._id_factory(),
            name=name,
            description=description,
            started_at=self._clock(),
        )
        self._active.append(execution)
        return execution

    def resolve(self, is_error: bool) -> ToolExecution | None:
        """Advance the latest active tool. Returns None when nothing is active."""
        if not self._active:
            logger.debug("Tool result with no active tool ignored")
            return None

        # Latest start wins; equal timestamps fall back to insertion order.
        index = max(
            range(len(self._active)),
            key=lambda i: (self._active[i].started_at, i),
        )
        current = self._active[index]

        if current.status is ToolStatus.STARTING:
            updated = replace(current, status=ToolStatus.RUNNING)
            self._active[index] = updated
            return updated

        status = ToolStatus.FAILED if is_error else ToolStatus.COMPLETED
        updated = replace(current, status=status, ended_at=self._clock())
        del self._active[index]
        return updated

    def reset(self) -> None:
        self._active.clear()
