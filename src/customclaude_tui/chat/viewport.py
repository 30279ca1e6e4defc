"""Scroll/viewport engine for the conversation panel.

Messages are flattened into display lines (one blank separator between
messages) and a fixed-height window is cut out of them. ``compute_visible``
always returns exactly ``viewport_height`` lines.
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from collections.abc import Sequence
from dataclasses import dataclass

from rich.cells import cell_len, chop_cells
from rich.text import Text

from customclaude_tui.models import ROLE_ICONS, ROLE_STYLES, ConversationMessage, MessageRole
from customclaude_tui.render import MarkdownRenderer, RenderError

logger = logging.getLogger(__name__)

_CACHE_LIMIT = 2048


def word_wrap(text: str, width: int) -> list[str]:
    """Greedy wrap on whitespace; words wider than ``width`` are split.

    Each source line wraps on its own, so explicit newlines survive.
    """
    width = max(1, width)
    lines: list[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = ""
        for word in words:
            if cell_len(word) > width:
                if current:
                    lines.append(current)
                    current = ""
                chunks = chop_cells(word, width)
                lines.extend(chunks[:-1])
                word = chunks[-1]
            if not current:
                current = word
            elif cell_len(current) + 1 + cell_len(word) <= width:
                current = f"{current} {word}"
            else:
                lines.append(current)
                current = word
        if current:
            lines.append(current)
    return lines


def max_offset(total_lines: int, viewport_height: int) -> int:
    return max(0, total_lines - max(0, viewport_height))


def clamp_offset(offset: int, maximum: int) -> int:
    return max(0, min(offset, max(0, maximum)))


class MessageFormatter:
    """Formats messages into display lines, cached per (message, width).

    Assistant text goes through the markdown renderer when one is set. A
    render failure falls back to plain wrapping and is recorded once; collect
    it with :meth:`drain_faults`.
    """

    def __init__(self, renderer: MarkdownRenderer | None = None) -> None:
        self._renderer = renderer
        self._cache: OrderedDict[tuple[ConversationMessage, int], tuple[Text, ...]] = OrderedDict()
        self._faults: list[str] = []

    def drain_faults(self) -> list[str]:
        faults, self._faults = self._faults, []
        return faults

    def clear_cache(self) -> None:
        self._cache.clear()

    def format(self, message: ConversationMessage, width: int) -> tuple[Text, ...]:
        key = (message, width)
        cached = self._cache.get(key)
        if cached is not None:
            self._cache.move_to_end(key)
            return cached
        lines = tuple(self._format(message, width))
        self._cache[key] = lines
        if len(self._cache) > _CACHE_LIMIT:
            self._cache.popitem(last=False)
        return lines

    def _format(self, message: ConversationMessage, width: int) -> list[Text]:
        prefix = f"{ROLE_ICONS[message.role]} "
        indent = " " * cell_len(prefix)
        body_width = max(1, width - cell_len(prefix))
        style = ROLE_STYLES[message.role]

        body: list[Text] = []
        if message.role is MessageRole.ASSISTANT and self._renderer is not None:
            try:
                body = self._renderer.render(message.content, body_width)
            except RenderError as exc:
                logger.warning("Markdown render failed for %s: %s", message.id, exc)
                self._faults.append(str(exc))
                body = []
        if not body:
            body = [Text(line, style=style) for line in word_wrap(message.content, body_width)]
        if not body:
            body = [Text("")]

        lines = []
        for index, line in enumerate(body):
            lead = Text(prefix if index == 0 else indent, style=style)
            lines.append(Text.assemble(lead, line))
        return lines

    def layout(self, messages: Sequence[ConversationMessage], width: int) -> list[Text]:
        lines: list[Text] = []
        for index, message in enumerate(messages):
            if index:
                lines.append(Text(""))
            lines.extend(self.format(message, width))
        return lines

    def count_lines(self, messages: Sequence[ConversationMessage], width: int) -> int:
        if not messages:
            return 0
        separators = len(messages) - 1
        return separators + sum(len(self.format(message, width)) for message in messages)


@dataclass(frozen=True)
class Viewport:
    lines: tuple[Text, ...]
    offset: int
    max_offset: int
    needs_indicator: bool
    total_lines: int

    def indicator(self) -> str:
        if not self.needs_indicator:
            return ""
        first = self.offset + 1
        last = min(self.offset + len(self.lines), self.total_lines)
        info = f"[Lines {first}-{last} of {self.total_lines}] "
        if self.offset == 0:
            return info + "↓ scroll down"
        if self.offset >= self.max_offset:
            return info + "↑ scroll up"
        return info + "↑↓ scroll"


def compute_visible(
    messages: Sequence[ConversationMessage],
    content_width: int,
    viewport_height: int,
    requested_offset: int,
    formatter: MessageFormatter | None = None,
) -> Viewport:
    formatter = formatter or MessageFormatter()
    height = max(0, viewport_height)
    lines = formatter.layout(messages, content_width)
    total = len(lines)
    maximum = max_offset(total, height)
    offset = clamp_offset(requested_offset, maximum)

    if total <= height:
        visible = list(lines)
        needs_indicator = False
    else:
        visible = lines[offset: offset + height]
        needs_indicator = True
    visible.extend(Text("") for _ in range(height - len(visible)))
    return Viewport(
        lines=tuple(visible),
        offset=offset,
        max_offset=maximum,
        needs_indicator=needs_indicator,
        total_lines=total,
    )
