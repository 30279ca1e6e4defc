"""Panel dimensions derived from the terminal size.

The numbers here must agree with the dashboard CSS: the conversation panel
and the side panel share the width, the header, footer and input panel
take fixed rows.
"""
from __future__ import annotations

from dataclasses import dataclass

SIDEBAR_WIDTH = 35
HEADER_FOOTER_LINES = 2
INPUT_PANEL_LINES = 3
PANEL_BORDER = 2
PANEL_PADDING = 2
SCROLL_INDICATOR_LINES = 2


@dataclass(frozen=True)
class PanelDimensions:
    conversation_width: int
    conversation_height: int
    sidebar_width: int
    sidebar_height: int
    content_width: int
    inner_height: int
    viewport_height: int


class LayoutManager:
    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def dimensions(self) -> PanelDimensions:
        panel_height = max(1, self.height - HEADER_FOOTER_LINES - INPUT_PANEL_LINES)
        conversation_width = max(1, self.width - SIDEBAR_WIDTH)
        inner_height = max(1, panel_height - PANEL_BORDER)
        return PanelDimensions(
            conversation_width=conversation_width,
            conversation_height=panel_height,
            sidebar_width=SIDEBAR_WIDTH,
            sidebar_height=panel_height,
            content_width=max(1, conversation_width - PANEL_BORDER - PANEL_PADDING),
            inner_height=inner_height,
            # Room for the scroll indicator is kept even when it is hidden.
            viewport_height=max(1, inner_height - SCROLL_INDICATOR_LINES),
        )
