"""
Java project launcher.
"""

from __future__ import annotations

from projectshell._types import CodeProject, ExecutionResult, ProjectType
from projectshell.launchers._base import Launcher

MAVEN_GOALS: tuple[str, ...] = ("compile", "exec:java")


class JavaLauncher(Launcher):
    """Compiles and runs through Maven. ``mvn`` must be on the host PATH."""

    project_type = ProjectType.JAVA

    async def launch(self, project: CodeProject) -> ExecutionResult:
        return await self.runner.run("mvn", list(MAVEN_GOALS), project.path)
