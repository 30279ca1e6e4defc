"""Decoding of the agent CLI's newline-delimited JSON stream.

Each stdout line is one JSON object with a ``type`` of ``system``,
``assistant``, ``user`` or ``result``. ``decode_line`` turns it into one of
the record dataclasses below or raises:

- ``DecodeError`` when the line is not JSON at all
- ``ProtocolError`` when it is JSON but not a shape we understand

Unknown top-level types decode to ``UnknownRecord`` so newer CLI versions
do not flood the error panel.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Union

from customclaude_tui.models import UsageStats


class DecodeError(ValueError):
    def __init__(self, line: str) -> None:
        super().__init__(f"parse error: {line}")
        self.line = line


class ProtocolError(ValueError):
    def __init__(self, detail: str, line: str) -> None:
        super().__init__(detail)
        self.line = line


@dataclass(frozen=True)
class SystemRecord:
    subtype: str
    session_id: str = ""
    model: str = ""
    cwd: str = ""
    tools: tuple[str, ...] = ()


@dataclass(frozen=True)
class TextBlock:
    text: str


@dataclass(frozen=True)
class ToolUseBlock:
    name: str
    input: dict[str, Any] = field(default_factory=dict)
    id: str = ""


@dataclass(frozen=True)
class AssistantRecord:
    message_id: str
    blocks: tuple[TextBlock | ToolUseBlock, ...]
    stop_reason: str | None = None


@dataclass(frozen=True)
class UserRecord:
    """A tool result echoed back by the agent, not operator input."""

    is_error: bool = False


@dataclass(frozen=True)
class ResultRecord:
    subtype: str
    session_id: str = ""
    is_error: bool = False
    result: str = ""
    usage: UsageStats = field(default_factory=UsageStats)


@dataclass(frozen=True)
class UnknownRecord:
    type: str


StreamRecord = Union[SystemRecord, AssistantRecord, UserRecord, ResultRecord, UnknownRecord]


def _str(value: object) -> str:
    return value if isinstance(value, str) else ""


def _int(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, float):
        return max(0, int(value))
    return 0


def _float(value: object) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return max(0.0, float(value))
    return 0.0


def _decode_usage(raw: dict[str, Any]) -> UsageStats:
    usage = raw.get("usage")
    if not isinstance(usage, dict):
        usage = {}
    return UsageStats(
        input_tokens=_int(usage.get("input_tokens")),
        cache_creation_tokens=_int(usage.get("cache_creation_input_tokens")),
        cache_read_tokens=_int(usage.get("cache_read_input_tokens")),
        output_tokens=_int(usage.get("output_tokens")),
        duration_ms=_int(raw.get("duration_ms")),
        turns=_int(raw.get("num_turns")),
        cost_usd=_float(raw.get("total_cost_usd")),
    )


def _decode_block(item: object) -> TextBlock | ToolUseBlock | None:
    if not isinstance(item, dict):
        return None
    kind = item.get("type")
    if kind == "text":
        text = item.get("text")
        return TextBlock(text=text) if isinstance(text, str) else None
    if kind == "tool_use":
        name = item.get("name")
        if not isinstance(name, str) or not name:
            return None
        tool_input = item.get("input")
        return ToolUseBlock(
            name=name,
            input=tool_input if isinstance(tool_input, dict) else {},
            id=_str(item.get("id")),
        )
    # thinking and other block kinds are not rendered
    return None


def _decode_assistant(raw: dict[str, Any], line: str) -> AssistantRecord:
    message = raw.get("message")
    if not isinstance(message, dict):
        raise ProtocolError("failed to parse assistant message: missing message object", line)
    content = message.get("content")
    if isinstance(content, str):
        blocks: list[TextBlock | ToolUseBlock] = [TextBlock(text=content)]
    elif isinstance(content, list):
        blocks = [block for block in (_decode_block(item) for item in content) if block is not None]
    else:
        raise ProtocolError("failed to parse assistant message: content is not a list", line)
    stop_reason = message.get("stop_reason")
    return AssistantRecord(
        message_id=_str(message.get("id")),
        blocks=tuple(blocks),
        stop_reason=stop_reason if isinstance(stop_reason, str) else None,
    )


def _decode_user(raw: dict[str, Any]) -> UserRecord:
    if raw.get("is_error") is True:
        return UserRecord(is_error=True)
    message = raw.get("message")
    content = message.get("content") if isinstance(message, dict) else None
    if isinstance(content, list):
        for item in content:
            if isinstance(item, dict) and item.get("is_error") is True:
                return UserRecord(is_error=True)
    return UserRecord(is_error=False)


def decode_line(line: str) -> StreamRecord:
    """Decode one stream line into a typed record."""
    try:
        raw = json.loads(line)
    except json.JSONDecodeError as exc:
        raise DecodeError(line) from exc

    if not isinstance(raw, dict):
        raise ProtocolError("stream line is not a JSON object", line)

    kind = raw.get("type")
    if not isinstance(kind, str):
        raise ProtocolError("stream line has no type", line)

    if kind == "system":
        tools = raw.get("tools")
        return SystemRecord(
            subtype=_str(raw.get("subtype")),
            session_id=_str(raw.get("session_id")),
            model=_str(raw.get("model")),
            cwd=_str(raw.get("cwd")),
            tools=tuple(t for t in tools if isinstance(t, str)) if isinstance(tools, list) else (),
        )
    if kind == "assistant":
        return _decode_assistant(raw, line)
    if kind == "user":
        return _decode_user(raw)
    if kind == "result":
        return ResultRecord(
            subtype=_str(raw.get("subtype")),
            session_id=_str(raw.get("session_id")),
            is_error=raw.get("is_error") is True,
            result=_str(raw.get("result")),
            usage=_decode_usage(raw),
        )
    return UnknownRecord(type=kind)


def describe_tool_use(block: ToolUseBlock) -> str:
    """Human description for a tool call, from the first field present."""
    tool_input = block.input
    description = tool_input.get("description")
    if isinstance(description, str) and description.strip():
        return description.strip()
    for key, prefix in (("command", "Executing"), ("file_path", "Processing"), ("pattern", "Searching")):
        value = tool_input.get(key)
        if isinstance(value, str) and value.strip():
            return f"{prefix}: {value.strip()}"
    return f"Using tool: {block.name}"
