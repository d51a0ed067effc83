"""
Exception hierarchy for projectshell.

Only conditions the caller must react to are raised. Launch failures,
non-zero exits and missing prerequisites are reported through
ExecutionResult instead.
"""

from __future__ import annotations

from pathlib import Path


class ProjectShellError(Exception):
    """Base class for all projectshell errors."""


class ConfigurationError(ProjectShellError):
    """Raised when the settings document cannot be read or is malformed."""


class AccessDenied(ProjectShellError):
    """
    Raised when a path lies outside every configured project root.

    Attributes:
        path: The path that was rejected.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        super().__init__(f"Access denied to path: {self.path}")


class ProjectExistsError(ProjectShellError):
    """Raised when a project directory already exists."""

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        super().__init__(f"Project directory already exists: {self.path}")


class ScaffoldError(ProjectShellError):
    """Raised when scaffolding a new project fails. The directory is rolled back first."""


class CommandError(ProjectShellError):
    """Raised by ExecutionResult.raise_for_status for unsuccessful runs."""
