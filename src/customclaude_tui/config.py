from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

_DEFAULT_CLI_PATH = "claude"
_DEFAULT_MCP_CONFIG = "config.json"
_DEFAULT_PERMISSION_TOOL = "mcp__permission__approval_prompt"
_DEFAULT_HISTORY_LIMIT = 500
_DEFAULT_CONFIG_PATH = Path.home() / ".customclaude" / "config.json"


@dataclass
class DashboardConfig:
    cli_path: str = _DEFAULT_CLI_PATH
    mcp_config: str = _DEFAULT_MCP_CONFIG
    permission_tool: str = _DEFAULT_PERMISSION_TOOL
    model: str = ""
    log_file: str | None = None
    history_limit: int = _DEFAULT_HISTORY_LIMIT

    def describe(self) -> list[tuple[str, str]]:
        """(label, value) rows for the settings view."""
        return [
            ("Agent CLI", self.cli_path),
            ("MCP config", self.mcp_config or "(none)"),
            ("Permission tool", self.permission_tool or "(none)"),
            ("Model override", self.model or "(agent default)"),
            ("Log file", self.log_file or "(disabled)"),
            ("History limit", f"{self.history_limit} messages"),
        ]


def _opt_str(section: dict, key: str, default: str) -> str:
    value = section.get(key, default)
    return value if isinstance(value, str) else default


def _opt_positive_int(section: dict, key: str, default: int) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return default
    return value


def load_config(config_path: str | None = None) -> DashboardConfig:
    """Load config from ~/.customclaude/config.json, falling back to env vars.

    Config file fields:
    - agent.cli (str, default "claude")
    - agent.mcp_config (str, default "config.json")
    - agent.permission_tool (str)
    - agent.model (str, optional)
    - logging.file (str, optional)
    - ui.history_limit (int, default 500)

    Env var overrides:
    - CUSTOMCLAUDE_CLI
    - CUSTOMCLAUDE_MCP_CONFIG
    - CUSTOMCLAUDE_PERMISSION_TOOL
    - CUSTOMCLAUDE_MODEL
    - CUSTOMCLAUDE_LOG_FILE

    Returns DashboardConfig. Never raises — uses defaults if config missing.
    """
    path = Path(config_path) if config_path is not None else _DEFAULT_CONFIG_PATH
    config = DashboardConfig()

    if path.exists():
        try:
            data = json.loads(path.read_text())
            agent_section = data.get("agent", {})
            if not isinstance(agent_section, dict):
                raise ValueError("'agent' section must be an object")
            logging_section = data.get("logging", {})
            if not isinstance(logging_section, dict):
                raise ValueError("'logging' section must be an object")
            ui_section = data.get("ui", {})
            if not isinstance(ui_section, dict):
                raise ValueError("'ui' section must be an object")
            config = DashboardConfig(
                cli_path=_opt_str(agent_section, "cli", _DEFAULT_CLI_PATH),
                mcp_config=_opt_str(agent_section, "mcp_config", _DEFAULT_MCP_CONFIG),
                permission_tool=_opt_str(agent_section, "permission_tool", _DEFAULT_PERMISSION_TOOL),
                model=_opt_str(agent_section, "model", ""),
                log_file=_opt_str(logging_section, "file", "") or None,
                history_limit=_opt_positive_int(ui_section, "history_limit", _DEFAULT_HISTORY_LIMIT),
            )
        except Exception as exc:
            logger.warning("Failed to parse config file %s: %s — using defaults", path, exc)
            config = DashboardConfig()
    else:
        logger.info("Config file not found at %s — using defaults", path)

    # Env var overrides
    env_cli = os.environ.get("CUSTOMCLAUDE_CLI")
    if env_cli:
        config.cli_path = env_cli

    env_mcp = os.environ.get("CUSTOMCLAUDE_MCP_CONFIG")
    if env_mcp is not None:
        config.mcp_config = env_mcp

    env_tool = os.environ.get("CUSTOMCLAUDE_PERMISSION_TOOL")
    if env_tool is not None:
        config.permission_tool = env_tool

    env_model = os.environ.get("CUSTOMCLAUDE_MODEL")
    if env_model is not None:
        config.model = env_model

    env_log = os.environ.get("CUSTOMCLAUDE_LOG_FILE")
    if env_log is not None:
        config.log_file = env_log or None

    return config
