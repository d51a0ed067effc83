"""
Python project launcher.
"""

from __future__ import annotations

import logging
from pathlib import Path

from projectshell._types import CodeProject, ExecutionResult, ProjectType
from projectshell.launchers._base import Launcher

logger = logging.getLogger(__name__)

ENTRY_POINTS: tuple[str, ...] = ("main.py", "app.py")


class PythonLauncher(Launcher):
    """
    Runs the first conventional entry file with the project's virtualenv.

    On hosts with an external console (Windows) the script runs in a new
    interactive window after activating the venv, so its output is not
    captured. Elsewhere it runs through the venv interpreter directly.
    """

    project_type = ProjectType.PYTHON

    async def launch(self, project: CodeProject) -> ExecutionResult:
        project_path = Path(project.path)
        entry_file = self.find_first(project_path, ENTRY_POINTS)
        if entry_file is None:
            return ExecutionResult.not_run(
                f"Could not find an entry point (e.g., {', '.join(ENTRY_POINTS)}) in project."
            )

        if self.host.supports_external_console:
            command_line = self.host.venv_activation_command(entry_file)
            return await self.runner.run_in_external_console(command_line, project_path)

        python = self.host.venv_python(project_path / "venv")
        logger.info(f"Running {entry_file} for {project.name} with {python}")
        return await self.runner.run(str(python), [entry_file], project_path)
