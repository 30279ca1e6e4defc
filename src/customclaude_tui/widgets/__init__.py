"""Textual widgets for the customclaude dashboard."""
from __future__ import annotations

from .conversation_panel import ConversationPanel
from .input_panel import InputPanel
from .side_panel import SidePanel
from .views import HelpView, SettingsView

__all__ = ["ConversationPanel", "HelpView", "InputPanel", "SettingsView", "SidePanel"]
