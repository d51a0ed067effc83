"""
Delphi project launcher.
"""

from __future__ import annotations

import logging
from pathlib import Path

from projectshell._types import CodeProject, ExecutionResult, ProjectType
from projectshell.launchers._base import Launcher

logger = logging.getLogger(__name__)

COMPILER_FLAGS: tuple[str, ...] = ("-B", "-Q")


class DelphiLauncher(Launcher):
    """
    Builds ``<name>.dpr`` with the configured RAD Studio command-line compiler.

    The compiler root must be selected in settings; it is never discovered here.
    """

    project_type = ProjectType.DELPHI

    async def launch(self, project: CodeProject) -> ExecutionResult:
        root = self.settings.selected_delphi_path
        if not root:
            return ExecutionResult.not_run(
                "Delphi compiler path not set. Please configure it in Settings > Advanced > Toolchains."
            )

        compiler = self.host.delphi_compiler(root)
        if not compiler.is_file():
            return ExecutionResult.not_run(f"Delphi compiler not found at expected path: {compiler}")

        dpr_file = f"{project.name}.dpr"
        dpr_path = Path(project.path) / dpr_file
        if not dpr_path.is_file():
            return ExecutionResult.not_run(f"Project file not found: {dpr_path}")

        logger.info(f"Compiling Delphi project: {dpr_file} with compiler {compiler}")
        return await self.runner.run(str(compiler), [*COMPILER_FLAGS, dpr_file], project.path)
