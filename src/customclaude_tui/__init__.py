"""Terminal dashboard for a streaming AI agent CLI."""

__version__ = "0.1.0"
