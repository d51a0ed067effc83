"""
Static web app launcher.
"""

from __future__ import annotations

import logging
from pathlib import Path

from projectshell._types import CodeProject, ExecutionResult, ProjectType
from projectshell.launchers._base import Launcher

logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"


class WebAppLauncher(Launcher):
    """Opens the project's index.html in the default browser."""

    project_type = ProjectType.WEBAPP

    async def launch(self, project: CodeProject) -> ExecutionResult:
        index_path = Path(project.path) / INDEX_FILE
        if not index_path.is_file():
            return ExecutionResult.not_run(f"Could not find {INDEX_FILE} in {project.path}")

        await self.host.open_in_browser(index_path)
        logger.info(f"Opened {index_path} in browser")
        return ExecutionResult.message(f"Successfully opened {index_path} in the default browser.")
