from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from customclaude_tui.config import DashboardConfig

from .accumulator import SessionAccumulator
from .events import DomainEvent, ErrorKind, ErrorOccurred

logger = logging.getLogger(__name__)

# Tool results can carry whole files on one line.
STREAM_LINE_LIMIT = 16 * 1024 * 1024
TERMINATE_GRACE_S = 3.0


class ProcessError(RuntimeError):
    """Spawning, reading from or waiting on the agent process failed."""


def build_agent_argv(
    config: DashboardConfig,
    prompt: str,
    *,
    model: str = "",
    resume_session_id: str = "",
) -> list[str]:
    """Command line for one agent invocation. The prompt always goes last."""
    argv = [
        config.cli_path,
        "--output-format", "stream-json",
        "--verbose",  # stream-json emits nothing without it
        "-p",
    ]
    if config.permission_tool:
        argv.extend(["--permission-prompt-tool", config.permission_tool])
    if config.mcp_config:
        argv.extend(["--mcp-config", config.mcp_config])
    if model:
        argv.extend(["--model", model])
    if resume_session_id:
        argv.extend(["--resume", resume_session_id])
    argv.append(prompt)
    return argv


class AgentRunner:
    """Runs the agent CLI and feeds its stdout through the accumulator.

    Events are handed to ``publish`` in exactly the order they were decoded.
    """

    def __init__(
        self,
        accumulator: SessionAccumulator,
        publish: Callable[[DomainEvent], None],
        config: DashboardConfig,
    ) -> None:
        self._accumulator = accumulator
        self._publish = publish
        self._config = config

    async def execute_command(self, prompt: str, resume: bool = True) -> None:
        """Run one prompt to completion.

        ``resume`` continues the context of the current session; the agent
        answers with a new session id either way. Raises ProcessError after
        every buffered event has been published.
        """
        resume_id = self._accumulator.current_session_id if resume else ""
        argv = build_agent_argv(
            self._config,
            prompt,
            model=self._accumulator.model,
            resume_session_id=resume_id,
        )
        logger.info("Starting agent process %s (resume=%s)", argv[0], bool(resume_id))

        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=STREAM_LINE_LIMIT,
            )
        except OSError as exc:
            raise ProcessError(f"failed to start command: {exc}") from exc

        stderr_task = asyncio.create_task(self._forward_stderr(proc.stderr))
        read_error: Exception | None = None
        try:
            try:
                await self._pump_stdout(proc.stdout)
            except (ValueError, OSError) as exc:
                read_error = exc
                logger.warning("Agent stdout read failed: %s", exc)
                await self._terminate(proc)
            returncode = await proc.wait()
            await stderr_task
        except asyncio.CancelledError:
            logger.info("Agent process cancelled; terminating")
            stderr_task.cancel()
            await self._terminate(proc)
            raise

        if read_error is not None:
            raise ProcessError(f"failed to process stream: {read_error}") from read_error
        if returncode != 0:
            raise ProcessError(f"command failed: exit status {returncode}")
        logger.info("Agent process finished")

    async def _pump_stdout(self, stdout: asyncio.StreamReader) -> None:
        async for raw in stdout:
            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            for event in self._accumulator.ingest(line):
                self._publish(event)

    async def _forward_stderr(self, stderr: asyncio.StreamReader) -> None:
        try:
            async for raw in stderr:
                text = raw.decode("utf-8", errors="replace").rstrip()
                if text:
                    self._publish(ErrorOccurred(ErrorKind.PROCESS, f"stderr: {text}"))
        except (ValueError, OSError) as exc:
            logger.warning("Agent stderr read failed: %s", exc)

    @staticmethod
    async def _terminate(proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is not None:
            return
        try:
            proc.terminate()
            try:
                await asyncio.wait_for(proc.wait(), timeout=TERMINATE_GRACE_S)
            except asyncio.TimeoutError:
                proc.kill()
                await proc.wait()
        except ProcessLookupError:
            pass
