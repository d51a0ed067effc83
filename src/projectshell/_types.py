"""
Core type definitions for projectshell.

Uses dataclasses and enums for lightweight, typed abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from projectshell.errors import CommandError


class ProjectType(str, Enum):
    """Kinds of code project the engine can scaffold and run."""

    PYTHON = "python"
    NODEJS = "nodejs"
    JAVA = "java"
    DELPHI = "delphi"
    WEBAPP = "webapp"


class Outcome(Enum):
    """How an execution ended."""

    OK = "ok"  # Exit code 0
    FAILED = "failed"  # Non-zero exit code
    LAUNCH_ERROR = "launch_error"  # Process could not be spawned
    TIMED_OUT = "timed_out"  # Deadline exceeded, process tree killed
    NOT_RUN = "not_run"  # Nothing spawned: missing prerequisite, denied, not applicable


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """
    Immutable result of running something on behalf of the UI.

    stdout and stderr are always strings. For compatibility with callers that
    only inspect stderr, failures are also annotated there.
    """

    stdout: str
    stderr: str
    outcome: Outcome = Outcome.OK
    exit_code: int | None = 0
    truncated: bool = False

    @property
    def success(self) -> bool:
        """Return True if the process ran and exited with code 0."""
        return self.outcome is Outcome.OK

    def raise_for_status(self) -> None:
        """Raise CommandError unless the outcome is OK."""
        if not self.success:
            raise CommandError(
                f"Execution {self.outcome.value} (exit code {self.exit_code}): "
                f"{self.stderr.strip() or self.stdout.strip()}"
            )

    @classmethod
    def not_run(cls, message: str, stdout: str = "") -> ExecutionResult:
        """Explanatory result for an execution that never started."""
        return cls(stdout=stdout, stderr=message, outcome=Outcome.NOT_RUN, exit_code=None)

    @classmethod
    def message(cls, stdout: str, stderr: str = "") -> ExecutionResult:
        """Informational success that did not involve a captured process."""
        return cls(stdout=stdout, stderr=stderr, outcome=Outcome.OK, exit_code=None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "stdout": self.stdout,
            "stderr": self.stderr,
            "outcome": self.outcome.value,
            "exitCode": self.exit_code,
            "truncated": self.truncated,
        }


@dataclass(frozen=True, slots=True)
class Toolchain:
    """A discovered, versioned interpreter or compiler installation."""

    path: str
    version: str
    name: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "version": self.version, "name": self.name}


@dataclass(frozen=True, slots=True)
class ToolchainStatus:
    """Snapshot of one probing cycle, grouped by language family."""

    python: tuple[Toolchain, ...] = ()
    java: tuple[Toolchain, ...] = ()
    nodejs: tuple[Toolchain, ...] = ()
    delphi: tuple[Toolchain, ...] = ()

    def to_dict(self) -> dict[str, list[dict[str, str]]]:
        return {
            "python": [t.to_dict() for t in self.python],
            "java": [t.to_dict() for t in self.java],
            "nodejs": [t.to_dict() for t in self.nodejs],
            "delphi": [t.to_dict() for t in self.delphi],
        }


@dataclass(frozen=True, slots=True)
class CodeProject:
    """
    A scaffolded project on disk.

    Attributes:
        id: Random token, independent of name and path.
        name: Display name (also the directory name at creation time).
        type: Project type, fixed at creation.
        path: Absolute project directory.
    """

    id: str
    name: str
    type: ProjectType | str
    path: str

    @property
    def project_type(self) -> ProjectType | None:
        """The type as a ProjectType, or None for unknown types."""
        try:
            return ProjectType(self.type)
        except ValueError:
            return None

    def to_dict(self) -> dict[str, str]:
        type_value = self.type.value if isinstance(self.type, ProjectType) else str(self.type)
        return {"id": self.id, "name": self.name, "type": type_value, "path": self.path}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CodeProject:
        return cls(
            id=str(data.get("id", "")),
            name=str(data["name"]),
            type=str(data["type"]),
            path=str(data["path"]),
        )


@dataclass(frozen=True, slots=True)
class FileNode:
    """One entry of a directory listing."""

    name: str
    path: str
    is_directory: bool

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "path": self.path, "isDirectory": self.is_directory}


@dataclass(frozen=True, slots=True)
class FileEntry:
    """One file of a flattened recursive listing."""

    name: str
    path: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "path": self.path}


@dataclass
class ProbeCandidates:
    """Candidate binaries collected for one language family before verification."""

    family: str
    paths: list[str] = field(default_factory=list)

    def add(self, path: str) -> None:
        path = path.strip()
        if path and path not in self.paths:
            self.paths.append(path)
