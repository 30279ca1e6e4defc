from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class MessageRole(Enum):
    USER = "user"
    ASSISTANT = "assistant"
    TOOL_USE = "tool_use"
    SYSTEM = "system"
    ERROR = "error"


ROLE_ICONS: dict[MessageRole, str] = {
    MessageRole.USER: "👤",
    MessageRole.ASSISTANT: "🤖",
    MessageRole.TOOL_USE: "🔧",
    MessageRole.SYSTEM: "ℹ",
    MessageRole.ERROR: "❌",
}

ROLE_STYLES: dict[MessageRole, str] = {
    MessageRole.USER: "bold #F5A623",
    MessageRole.ASSISTANT: "#FFF8E7",
    MessageRole.TOOL_USE: "italic #A78BFA",
    MessageRole.SYSTEM: "dim #A8B5A2",
    MessageRole.ERROR: "bold #C67B5C",
}


@dataclass(frozen=True)
class ConversationMessage:
    """One renderable unit of dialogue. Never edited once created."""

    id: str
    role: MessageRole
    content: str
    timestamp: datetime
    tool_name: str | None = None  # for tool_use messages
    is_error: bool = False


class ToolStatus(Enum):
    STARTING = "starting"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ToolStatus.COMPLETED, ToolStatus.FAILED)


TOOL_STATUS_ICONS: dict[ToolStatus, str] = {
    ToolStatus.STARTING: "○",
    ToolStatus.RUNNING: "●",
    ToolStatus.COMPLETED: "✓",
    ToolStatus.FAILED: "⚠",
}

TOOL_STATUS_STYLES: dict[ToolStatus, str] = {
    ToolStatus.STARTING: "dim",
    ToolStatus.RUNNING: "#F5A623",
    ToolStatus.COMPLETED: "green",
    ToolStatus.FAILED: "#C67B5C",
}


@dataclass(frozen=True)
class ToolExecution:
    id: str
    name: str
    description: str
    started_at: datetime
    status: ToolStatus = ToolStatus.STARTING
    ended_at: datetime | None = None

    def duration_ms(self, now: datetime | None = None) -> int:
        end = self.ended_at or now or datetime.now()
        return max(0, int((end - self.started_at).total_seconds() * 1000))

    @property
    def display(self) -> str:
        """'Bash: Executing: ls' plus the final runtime once finished."""
        text = f"{self.name}: {self.description}"
        if self.status.is_terminal:
            text = f"{text} ({format_runtime(self.duration_ms())})"
        return text


@dataclass(frozen=True)
class UsageStats:
    """Cumulative counters for one conversation. Only ever grows."""

    input_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0
    output_tokens: int = 0
    duration_ms: int = 0
    turns: int = 0
    cost_usd: float = 0.0

    def plus(self, other: UsageStats) -> UsageStats:
        return UsageStats(
            input_tokens=self.input_tokens + other.input_tokens,
            cache_creation_tokens=self.cache_creation_tokens + other.cache_creation_tokens,
            cache_read_tokens=self.cache_read_tokens + other.cache_read_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            duration_ms=self.duration_ms + other.duration_ms,
            turns=self.turns + other.turns,
            cost_usd=self.cost_usd + other.cost_usd,
        )

    @property
    def total_tokens(self) -> int:
        return (
            self.input_tokens
            + self.cache_creation_tokens
            + self.cache_read_tokens
            + self.output_tokens
        )


@dataclass(frozen=True)
class SessionSnapshot:
    session_id: str = ""
    model: str = ""
    chain: tuple[str, ...] = ()
    conversation_start: datetime = field(default_factory=datetime.now)
    turns: int = 0
    cost_usd: float = 0.0

    @property
    def is_active(self) -> bool:
        return bool(self.session_id)

    @property
    def short_model(self) -> str:
        name = self.model.replace("claude-", "")
        parts = name.rsplit("-", 1)
        if len(parts) == 2 and parts[1].isdigit() and len(parts[1]) == 8:
            name = parts[0]
        return name


def format_runtime(ms: int) -> str:
    """Format runtime in ms to human-readable. 1000→'1s', 61000→'1m1s', 3661000→'1h1m'"""
    if ms <= 0:
        return "0s"
    if ms < 1_000:
        return f"{ms}ms"

    total_seconds = (ms + 999) // 1_000

    hours = total_seconds // 3_600
    remainder = total_seconds % 3_600
    minutes = remainder // 60
    seconds = remainder % 60

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    # Seconds are hidden once the runtime reaches an hour
    if seconds > 0 and hours == 0:
        parts.append(f"{seconds}s")

    return "".join(parts)


def truncate(text: str, max_len: int) -> str:
    if max_len <= 3:
        return text[:max(0, max_len)]
    if len(text) <= max_len:
        return text
    return f"{text[: max_len - 3]}..."
