"""
Abstract base class for all project launchers.

Each project type (python, nodejs, java, delphi, webapp) has one launcher
that knows how to find the entry point and start it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from projectshell._types import CodeProject, ExecutionResult, ProjectType
    from projectshell.config import Settings
    from projectshell.runner import CommandRunner


class Launcher(ABC):
    """
    Runs one kind of project.

    Launchers assume the project path has already passed the PathGuard.
    Missing prerequisites are reported as NOT_RUN results, never raised.
    """

    project_type: ClassVar[ProjectType]

    def __init__(self, settings: Settings, runner: CommandRunner) -> None:
        self.settings = settings
        self.runner = runner
        self.host = runner.host

    @abstractmethod
    async def launch(self, project: CodeProject) -> ExecutionResult:
        """
        Start the project.

        Args:
            project: The project to run.

        Returns:
            ExecutionResult with captured output, or an explanatory NOT_RUN result.
        """
        ...

    @staticmethod
    def find_first(directory: Path, candidates: tuple[str, ...]) -> str | None:
        """Return the first candidate file name present in directory."""
        for name in candidates:
            if (directory / name).is_file():
                return name
        return None
