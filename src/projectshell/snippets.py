"""
One-shot execution of code snippets through temporary files.

Every temporary script is removed on all exit paths, exceptions included.
HTML snippets are the exception: the browser opens them asynchronously, so
their files are left for the OS temp-directory cleanup.
"""

from __future__ import annotations

import logging
import secrets
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from projectshell._types import CodeProject, ExecutionResult, Outcome, ProjectType

if TYPE_CHECKING:
    from projectshell.config import Settings
    from projectshell.runner import CommandRunner
    from projectshell.security.policy import PathGuard

logger = logging.getLogger(__name__)

SNIPPET_LANGUAGES = ("python", "nodejs", "html")


def temp_script_name(prefix: str, extension: str) -> str:
    """Collision-resistant file name such as ``pyscript_3f9a0c1b22d4.py``."""
    return f"{prefix}_{secrets.token_hex(6)}.{extension}"


class SnippetExecutor:
    """
    Runs ad hoc code with the configured interpreters or inside a project.

    Example:
        >>> executor = SnippetExecutor(settings, runner, guard)
        >>> result = await executor.run_python("print(2 + 2)")
        >>> result.stdout
        '4\\n'
    """

    def __init__(
        self,
        settings: Settings,
        runner: CommandRunner,
        guard: PathGuard,
        *,
        temp_dir: Path | str | None = None,
    ) -> None:
        self._settings = settings
        self._runner = runner
        self._host = runner.host
        self._guard = guard
        self._temp_dir = Path(temp_dir) if temp_dir else Path(tempfile.gettempdir())

    async def run_snippet(self, language: str, code: str) -> ExecutionResult:
        """Dispatch to the runner for ``python``, ``nodejs`` or ``html``."""
        if language == "python":
            return await self.run_python(code)
        if language == "nodejs":
            return await self.run_nodejs(code)
        if language == "html":
            return await self.run_html(code)
        raise ValueError(f"Unsupported snippet language: {language}. Use one of {SNIPPET_LANGUAGES}.")

    async def run_python(self, code: str) -> ExecutionResult:
        command = self._settings.python_command
        logger.info(f"Executing python script with command: {command}")
        result = await self._run_script(command, code, self._temp_dir, "pyscript", "py")
        if result.outcome is Outcome.LAUNCH_ERROR:
            return ExecutionResult(
                stdout=result.stdout,
                stderr=(
                    f"Failed to execute script with command \"{command}\": {result.stderr.strip()}. "
                    "Please check the Python Command in Settings."
                ),
                outcome=result.outcome,
                exit_code=result.exit_code,
            )
        return result

    async def run_nodejs(self, code: str) -> ExecutionResult:
        command = self._settings.node_command
        logger.info(f"Executing node script with command: {command}")
        return await self._run_script(command, code, self._temp_dir, "nodescript", "js")

    async def run_html(self, code: str) -> ExecutionResult:
        """Write the snippet to a temp file and open it in the browser. The file is kept."""
        temp_path = self._temp_dir / temp_script_name("html_snippet", "html")
        try:
            temp_path.write_text(code, encoding="utf-8")
            await self._host.open_in_browser(temp_path)
        except OSError as e:
            msg = f"Failed to open HTML snippet: {e}"
            logger.error(msg)
            return ExecutionResult.not_run(msg)
        return ExecutionResult.message(
            f"Successfully opened HTML snippet in default browser. Path: {temp_path}"
        )

    async def run_in_project(self, project: CodeProject, code: str) -> ExecutionResult:
        """
        Run a snippet with a project's own toolchain, from inside the project directory.

        Raises:
            AccessDenied: If the project path is outside the configured roots.
        """
        project_path = self._guard.check(project.path)
        ptype = project.project_type

        if ptype is ProjectType.PYTHON:
            command = str(self._host.venv_python(project_path / "venv"))
            extension = "py"
        elif ptype is ProjectType.NODEJS:
            command = self._settings.node_command
            extension = "js"
        else:
            return ExecutionResult.not_run(
                f"Running standalone scripts is not supported for project type: {project.to_dict()['type']}"
            )

        return await self._run_script(command, code, project_path, "script", extension)

    async def _run_script(
        self, command: str, code: str, directory: Path, prefix: str, extension: str
    ) -> ExecutionResult:
        temp_path = directory / temp_script_name(prefix, extension)
        try:
            temp_path.write_text(code, encoding="utf-8")
            return await self._runner.run(command, [str(temp_path)], directory)
        finally:
            temp_path.unlink(missing_ok=True)
