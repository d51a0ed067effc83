"""
Project launchers and the dispatcher that picks one per project type.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from projectshell._types import CodeProject, ExecutionResult, ProjectType
from projectshell.launchers._base import Launcher
from projectshell.launchers.delphi import DelphiLauncher
from projectshell.launchers.java import JavaLauncher
from projectshell.launchers.nodejs import NodeLauncher
from projectshell.launchers.python import PythonLauncher
from projectshell.launchers.webapp import WebAppLauncher

if TYPE_CHECKING:
    from projectshell.config import Settings
    from projectshell.runner import CommandRunner
    from projectshell.security.policy import PathGuard

logger = logging.getLogger(__name__)

LAUNCHERS: tuple[type[Launcher], ...] = (
    PythonLauncher,
    NodeLauncher,
    JavaLauncher,
    DelphiLauncher,
    WebAppLauncher,
)


class ProjectRunner:
    """
    Runs a project with the launcher for its type.

    The project path is checked against the PathGuard first; a rejected
    path or an unknown type yields an explanatory NOT_RUN result.
    """

    def __init__(self, settings: Settings, runner: CommandRunner, guard: PathGuard) -> None:
        self._guard = guard
        self._launchers: dict[ProjectType, Launcher] = {
            cls.project_type: cls(settings, runner) for cls in LAUNCHERS
        }

    def launcher_for(self, project_type: ProjectType | str) -> Launcher | None:
        try:
            return self._launchers.get(ProjectType(project_type))
        except ValueError:
            return None

    async def run(self, project: CodeProject) -> ExecutionResult:
        if not self._guard.is_allowed(project.path):
            logger.warning(f"Execution denied for {project.path}")
            return ExecutionResult.not_run(
                "Execution denied: project path is not in an allowed base directory."
            )

        launcher = self.launcher_for(project.type)
        if launcher is None:
            return ExecutionResult.not_run(f'Project type "{project.to_dict()["type"]}" cannot be run.')

        logger.info(f"Running {project.to_dict()['type']} project {project.name}")
        return await launcher.launch(project)


__all__ = [
    "DelphiLauncher",
    "JavaLauncher",
    "LAUNCHERS",
    "Launcher",
    "NodeLauncher",
    "ProjectRunner",
    "PythonLauncher",
    "WebAppLauncher",
]
