from __future__ import annotations

import io
from datetime import datetime, timedelta

from rich.console import Console

from customclaude_tui.models import SessionSnapshot, UsageStats
from customclaude_tui.summary import render_summary, summary_text

START = datetime(2025, 1, 1, 12, 0, 0)


def test_summary_metrics():
    session = SessionSnapshot(session_id="B", chain=("B",), conversation_start=START)
    stats = UsageStats(input_tokens=10, cache_creation_tokens=2, cache_read_tokens=3, output_tokens=5,
                       turns=2, cost_usd=0.0125)

    text = summary_text(session, stats, now=START + timedelta(seconds=61)).plain

    assert "Duration: 1m1s" in text
    assert "Sessions: 1" in text
    assert "Total Turns: 2" in text
    assert "Total Cost: $0.012500" in text
    assert "Cache Creation: 2" in text
    assert "Total Tokens: 20" in text
    assert "Session Chain:" not in text


def test_chain_is_listed_when_identity_changed():
    session = SessionSnapshot(session_id="C", chain=("B", "C"), conversation_start=START)

    text = summary_text(session, UsageStats(), now=START).plain

    assert "Session Chain:" in text
    assert "1. B" in text
    assert "2. C" in text


def test_rendered_panel_has_title():
    console = Console(file=io.StringIO(), width=80, color_system=None)
    console.print(render_summary(SessionSnapshot(conversation_start=START), UsageStats(), now=START))
    output = console.file.getvalue()
    assert "CONVERSATION SUMMARY" in output
    assert "Duration: 0s" in output
