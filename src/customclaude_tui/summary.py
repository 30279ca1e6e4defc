"""Cumulative conversation summary printed on exit and on /new."""
from __future__ import annotations

from datetime import datetime

from rich.panel import Panel
from rich.text import Text

from .models import SessionSnapshot, UsageStats, format_runtime

_METRIC_STYLE = "#A8B5A2"
_VALUE_STYLE = "bold #FFF8E7"
_SECTION_STYLE = "bold #F5A623"


def summary_text(session: SessionSnapshot, stats: UsageStats, now: datetime | None = None) -> Text:
    now = now or datetime.now()
    elapsed_ms = int((now - session.conversation_start).total_seconds() * 1000)
    text = Text()

    def metric(label: str, value: str, indent: str = "") -> None:
        text.append(f"{indent}{label} ", style=_METRIC_STYLE)
        text.append(value, style=_VALUE_STYLE)
        text.append("\n")

    metric("Duration:", format_runtime(max(0, elapsed_ms)))
    metric("Sessions:", str(len(session.chain)))
    metric("Total Turns:", str(stats.turns))
    metric("Total Cost:", f"${stats.cost_usd:.6f}")
    text.append("\n")
    text.append("Token Usage:\n", style=_SECTION_STYLE)
    metric("Input Tokens:", str(stats.input_tokens), "  ")
    metric("Cache Creation:", str(stats.cache_creation_tokens), "  ")
    metric("Cache Read:", str(stats.cache_read_tokens), "  ")
    metric("Output Tokens:", str(stats.output_tokens), "  ")
    metric("Total Tokens:", str(stats.total_tokens), "  ")

    if len(session.chain) > 1:
        text.append("\n")
        text.append("Session Chain:\n", style=_SECTION_STYLE)
        for index, session_id in enumerate(session.chain, start=1):
            metric(f"{index}.", session_id, "  ")

    text.rstrip()
    return text


def render_summary(session: SessionSnapshot, stats: UsageStats, now: datetime | None = None) -> Panel:
    return Panel(
        summary_text(session, stats, now),
        title="CONVERSATION SUMMARY",
        title_align="left",
        border_style="#F5A623",
        expand=False,
        padding=(0, 2),
    )
