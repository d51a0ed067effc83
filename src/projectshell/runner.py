"""
Subprocess execution for every component.

Runs one external process per call with asyncio.subprocess and always
resolves to an ExecutionResult, so callers never need try/except around a
run. Only task cancellation propagates.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from pathlib import Path
from typing import Sequence

from projectshell._types import ExecutionResult, Outcome
from projectshell.config import DEFAULT_COMMAND_TIMEOUT, DEFAULT_MAX_OUTPUT_CHARS
from projectshell.platform import HostPlatform, detect_platform

logger = logging.getLogger(__name__)

# Sentinel so None can mean "no deadline"
_DEFAULT = object()


class CommandRunner:
    """
    Spawns external processes and collects their output.

    Features:
    - Non-zero exits and launch failures become annotated results, never exceptions
    - Deadline per call, killing the whole process tree on expiry
    - Cancelling the awaiting task kills the process tree as well
    - Output truncation to prevent memory exhaustion

    Example:
        >>> runner = CommandRunner()
        >>> result = await runner.run("python", ["--version"], ".")
        >>> print(result.stdout)
    """

    def __init__(
        self,
        host: HostPlatform | None = None,
        *,
        timeout: float | None = DEFAULT_COMMAND_TIMEOUT,
        max_output_chars: int = DEFAULT_MAX_OUTPUT_CHARS,
        env: dict[str, str] | None = None,
    ) -> None:
        """
        Initialize a runner.

        Args:
            host: Platform capabilities. Detected when omitted.
            timeout: Default deadline in seconds, None for no deadline.
            max_output_chars: Maximum characters kept per stream.
            env: Environment for children. Inherits the parent's when None.
        """
        self.host = host or detect_platform()
        self.timeout = timeout
        self._max_output_chars = max_output_chars
        self._env = env

    async def run(
        self,
        command: str,
        args: Sequence[str] = (),
        cwd: str | Path | None = None,
        *,
        timeout: float | None | object = _DEFAULT,
    ) -> ExecutionResult:
        """
        Run a command to completion.

        Args:
            command: Executable name or path. Bare names are looked up on PATH.
            args: Arguments passed verbatim, without a shell.
            cwd: Working directory.
            timeout: Seconds before the process tree is killed. Defaults to the
                runner's deadline; None waits indefinitely.

        Returns:
            ExecutionResult tagged OK, FAILED, LAUNCH_ERROR or TIMED_OUT.
        """
        deadline = self.timeout if timeout is _DEFAULT else timeout
        executable = self._resolve(command)
        logger.debug(f"Running {executable} {' '.join(args)} in {cwd or os.getcwd()}")

        try:
            proc = await asyncio.create_subprocess_exec(
                executable,
                *args,
                cwd=cwd,
                env=self._env,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                **self.host.popen_kwargs(),
            )
        except OSError as e:
            logger.error(f"Spawn error for {command}: {e}")
            return ExecutionResult(
                stdout="",
                stderr=f"\nFailed to start command: {e}",
                outcome=Outcome.LAUNCH_ERROR,
                exit_code=None,
            )

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(proc.communicate(), timeout=deadline)
        except asyncio.TimeoutError:
            logger.warning(f"{command} timed out after {deadline}s, killing process tree")
            await self.host.kill_tree(proc)
            return ExecutionResult(
                stdout="",
                stderr=f"\nProcess timed out after {deadline}s",
                outcome=Outcome.TIMED_OUT,
                exit_code=None,
            )
        except asyncio.CancelledError:
            logger.info(f"Run of {command} cancelled, killing process tree")
            await self.host.kill_tree(proc)
            raise

        stdout, stdout_truncated = self._decode_and_truncate(stdout_bytes)
        stderr, stderr_truncated = self._decode_and_truncate(stderr_bytes)
        exit_code = proc.returncode if proc.returncode is not None else 0

        outcome = Outcome.OK
        if exit_code != 0:
            outcome = Outcome.FAILED
            stderr += f"\nProcess exited with non-zero code: {exit_code}"
            logger.info(f"{command} exited with code {exit_code}")

        return ExecutionResult(
            stdout=stdout,
            stderr=stderr,
            outcome=outcome,
            exit_code=exit_code,
            truncated=stdout_truncated or stderr_truncated,
        )

    async def run_in_external_console(self, command_line: str, cwd: str | Path) -> ExecutionResult:
        """
        Start a command in a new interactive console window.

        The window's output cannot be captured, so a successful start only
        reports that the console was opened.
        """
        if not self.host.supports_external_console:
            msg = f"External console only implemented for Windows. Cannot run on {self.host.name}."
            logger.info(msg)
            return ExecutionResult.not_run(msg)

        shell_command = self.host.external_console_command(command_line)
        try:
            proc = await asyncio.create_subprocess_shell(
                shell_command,
                cwd=cwd,
                env=self._env,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error(f"Spawn error for external console: {e}")
            return ExecutionResult(
                stdout="",
                stderr=f"Failed to start external console: {e}",
                outcome=Outcome.LAUNCH_ERROR,
                exit_code=None,
            )

        _, stderr_bytes = await proc.communicate()
        stderr, _ = self._decode_and_truncate(stderr_bytes)
        if proc.returncode == 0:
            return ExecutionResult(
                stdout="Process started in a new console window.",
                stderr=stderr,
                exit_code=0,
            )

        msg = f"Command to start external console exited with code {proc.returncode}. Stderr: {stderr}"
        logger.error(msg)
        return ExecutionResult(stdout="", stderr=msg, outcome=Outcome.FAILED, exit_code=proc.returncode)

    def _resolve(self, command: str) -> str:
        """Look bare command names up on PATH (honours PATHEXT on Windows)."""
        if os.sep in command or (os.altsep and os.altsep in command):
            return command
        search_path = self._env.get("PATH") if self._env is not None else None
        return shutil.which(command, path=search_path) or command

    def _decode_and_truncate(self, data: bytes) -> tuple[str, bool]:
        """Decode bytes and truncate if too large."""
        text = data.decode("utf-8", errors="replace")
        if len(text) > self._max_output_chars:
            truncated_count = len(text) - self._max_output_chars
            text = text[: self._max_output_chars]
            text += f"\n\n[Truncated: {truncated_count} characters removed]"
            return text, True
        return text, False
