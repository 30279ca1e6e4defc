"""Entry point: python -m customclaude_tui"""
from __future__ import annotations

import argparse
import logging
import sys

from rich.console import Console

from . import __version__
from .config import load_config
from .logging_setup import setup_logging
from .render import MarkdownRenderer, RenderError
from .summary import render_summary

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="customclaude-tui",
        description="Interactive dashboard for a streaming agent CLI.",
    )
    parser.add_argument("--model", help="model passed to the agent CLI")
    parser.add_argument("--config", help="path to config.json (default: ~/.customclaude/config.json)")
    parser.add_argument("--cli", help="agent CLI executable (default: claude)")
    parser.add_argument(
        "--headless",
        action="store_true",
        help="plain line-mode prompt instead of the dashboard",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Launch the dashboard, or the line-mode prompt with --headless."""
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    if args.model:
        config.model = args.model
    if args.cli:
        config.cli_path = args.cli
    setup_logging(config.log_file)

    try:
        renderer = MarkdownRenderer()
    except RenderError as exc:
        print(f"customclaude-tui: cannot start: {exc}", file=sys.stderr)
        return 1

    if args.headless:
        from .headless import HeadlessSession

        return HeadlessSession(config, code_theme=renderer.code_theme).run()

    from .app import DashboardApp

    app = DashboardApp(config, renderer=renderer)
    app.run()
    Console().print(render_summary(app.accumulator.session_snapshot(), app.accumulator.stats))
    logger.info("Dashboard exited")
    return 0


if __name__ == "__main__":
    sys.exit(main())
