"""
Node.js project launcher.

Resolution order:
1. ``npm start`` when package.json declares a start script
2. package.json ``main``, else a conventional entry file (TypeScript first)
3. index.html, opened in the browser
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from projectshell._types import CodeProject, ExecutionResult, ProjectType
from projectshell.launchers._base import Launcher
from projectshell.security.policy import PathGuard

logger = logging.getLogger(__name__)

SCRIPT_ENTRY_POINTS: tuple[str, ...] = (
    "index.ts",
    "main.ts",
    "app.ts",
    "server.ts",
    "index.js",
    "main.js",
    "app.js",
    "server.js",
)


class NodeLauncher(Launcher):
    """Runs Node.js projects through npm, ts-node or node."""

    project_type = ProjectType.NODEJS

    async def launch(self, project: CodeProject) -> ExecutionResult:
        project_path = Path(project.path)
        package_json = project_path / "package.json"

        manifest: dict[str, Any] | None = None
        if package_json.is_file():
            try:
                manifest = json.loads(package_json.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                return ExecutionResult.not_run(f"Error reading package.json: {e}")
            if not isinstance(manifest, dict):
                return ExecutionResult.not_run("Error reading package.json: expected a JSON object")

            scripts = manifest.get("scripts")
            if isinstance(scripts, dict) and scripts.get("start"):
                logger.info(f"Found 'start' script in package.json. Running 'npm start' for {project.name}")
                npm = self.host.sibling_tool(self.settings.selected_node_path, "npm")
                return await self.runner.run(npm, ["start"], project_path)

        entry_file = self._declared_main(manifest, project_path) or self.find_first(project_path, SCRIPT_ENTRY_POINTS)
        if entry_file:
            if entry_file.endswith(".ts"):
                logger.info(f"Found TypeScript entry file: {entry_file}. Running with 'npx ts-node'.")
                npx = self.host.sibling_tool(self.settings.selected_node_path, "npx")
                return await self.runner.run(npx, ["ts-node", entry_file], project_path)
            logger.info(f"Found JavaScript entry file: {entry_file}. Running with 'node'.")
            return await self.runner.run(self.settings.node_command, [entry_file], project_path)

        index_path = project_path / "index.html"
        if index_path.is_file():
            logger.info(f"No script entry point for {project.name}, opening index.html instead")
            await self.host.open_in_browser(index_path)
            return ExecutionResult.message(f"No script found. Opened {index_path} in the default browser.")

        return ExecutionResult.not_run(
            "Could not find an entry point. Looked for: 'npm start' script, package.json 'main', "
            f"common script files ({', '.join(SCRIPT_ENTRY_POINTS)}), or an index.html file."
        )

    @staticmethod
    def _declared_main(manifest: dict[str, Any] | None, project_path: Path) -> str | None:
        """package.json `main`, if it names a file inside the project."""
        if not manifest:
            return None
        main = manifest.get("main")
        if not isinstance(main, str) or not main:
            return None
        target = project_path / main
        if not PathGuard.of([project_path]).is_allowed(target) or not target.is_file():
            logger.warning(f"Ignoring package.json main outside the project or missing: {main}")
            return None
        return main
