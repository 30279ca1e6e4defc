"""Markdown render service for assistant messages.

``MarkdownRenderer.render`` turns markdown into a list of styled rich
``Text`` lines that fit ``width`` cells. Any failure inside rich surfaces as
``RenderError`` so callers can fall back to plain text.
"""
from __future__ import annotations

import io
import logging

from rich.console import Console
from rich.markdown import Markdown
from rich.text import Text

logger = logging.getLogger(__name__)

DEFAULT_CODE_THEME = "monokai"


class RenderError(RuntimeError):
    """Markdown could not be styled."""


class MarkdownRenderer:
    def __init__(self, code_theme: str = DEFAULT_CODE_THEME, hyperlinks: bool = False) -> None:
        if not code_theme:
            raise RenderError("a code theme is required")
        self.code_theme = code_theme
        self.hyperlinks = hyperlinks
        try:
            # Off-screen console: output is captured as segments, never printed.
            self._console = Console(
                file=io.StringIO(),
                force_terminal=True,
                color_system="truecolor",
                width=80,
                legacy_windows=False,
            )
        except Exception as exc:  # noqa: BLE001
            raise RenderError(f"failed to create console: {exc}") from exc

    def render(self, text: str, width: int) -> list[Text]:
        width = max(1, width)
        try:
            markdown = Markdown(text, code_theme=self.code_theme, hyperlinks=self.hyperlinks)
            options = self._console.options.update(width=width)
            rendered = self._console.render_lines(markdown, options, pad=False)
        except Exception as exc:  # noqa: BLE001  rich and pygments raise many types
            raise RenderError(f"markdown render failed: {exc}") from exc

        lines: list[Text] = []
        for segments in rendered:
            line = Text(no_wrap=True, overflow="crop")
            for segment in segments:
                if segment.control:
                    continue
                line.append(segment.text, segment.style)
            line.rstrip()
            lines.append(line)

        # Markdown blocks leave blank margins; trim them like a stripped string.
        while lines and not lines[0].plain:
            lines.pop(0)
        while lines and not lines[-1].plain:
            lines.pop()
        return lines
