"""Pytest configuration and fixtures for projectshell tests."""

from __future__ import annotations

import sys
import tempfile
from pathlib import Path
from typing import AsyncGenerator, Callable, Generator, Sequence

import pytest
import pytest_asyncio

from projectshell import (
    CodeProject,
    CommandRunner,
    Engine,
    ExecutionResult,
    HostPlatform,
    PathGuard,
    PosixPlatform,
    ProjectType,
    Settings,
    create_engine,
)


class RecordingHost(PosixPlatform):
    """POSIX host that records desktop integration calls instead of opening windows."""

    def __init__(self) -> None:
        self.opened: list[Path] = []
        self.browsed: list[Path] = []

    async def open_path(self, path: str | Path) -> None:
        self.opened.append(Path(path))

    async def open_in_browser(self, path: str | Path) -> None:
        self.browsed.append(Path(path))


Responder = Callable[[str, list[str], "str | Path | None"], ExecutionResult]


class RecordingRunner(CommandRunner):
    """
    CommandRunner that records calls and answers from a responder.

    Used for tools that may be missing on the test host (npm, mvn, dcc32).
    """

    def __init__(self, host: HostPlatform | None = None, responder: Responder | None = None) -> None:
        super().__init__(host or RecordingHost(), timeout=5.0)
        self.calls: list[tuple[str, list[str], str | None]] = []
        self.console_calls: list[tuple[str, str]] = []
        self.responder = responder

    async def run(self, command: str, args: Sequence[str] = (), cwd=None, *, timeout=None) -> ExecutionResult:
        self.calls.append((command, list(args), str(cwd) if cwd is not None else None))
        if self.responder is not None:
            return self.responder(command, list(args), cwd)
        return ExecutionResult(stdout="ok\n", stderr="")

    async def run_in_external_console(self, command_line: str, cwd) -> ExecutionResult:
        self.console_calls.append((command_line, str(cwd)))
        return ExecutionResult.message("Process started in a new console window.")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory(prefix="projectshell_test_") as tmp:
        yield Path(tmp).resolve()


@pytest.fixture
def roots(temp_dir: Path) -> dict[ProjectType, Path]:
    """One project root per project type."""
    paths = {
        ProjectType.PYTHON: temp_dir / "python",
        ProjectType.NODEJS: temp_dir / "nodejs",
        ProjectType.WEBAPP: temp_dir / "webapps",
        ProjectType.JAVA: temp_dir / "java",
        ProjectType.DELPHI: temp_dir / "delphi",
    }
    for path in paths.values():
        path.mkdir()
    return paths


@pytest.fixture
def settings(roots: dict[ProjectType, Path]) -> Settings:
    """Settings with every root configured and the test interpreter selected."""
    return Settings(
        python_projects_path=str(roots[ProjectType.PYTHON]),
        nodejs_projects_path=str(roots[ProjectType.NODEJS]),
        webapps_path=str(roots[ProjectType.WEBAPP]),
        java_projects_path=str(roots[ProjectType.JAVA]),
        delphi_projects_path=str(roots[ProjectType.DELPHI]),
        selected_python_path=sys.executable,
        command_timeout=30.0,
    )


@pytest.fixture
def guard(settings: Settings) -> PathGuard:
    return PathGuard.from_settings(settings)


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def recording_runner(host: RecordingHost) -> RecordingRunner:
    return RecordingRunner(host)


@pytest.fixture
def make_project(roots: dict[ProjectType, Path]) -> Callable[..., CodeProject]:
    """Build a CodeProject directory under the matching root, with optional files."""

    def _make(project_type: ProjectType, name: str = "demo", files: dict[str, str] | None = None) -> CodeProject:
        path = roots[project_type] / name
        path.mkdir(parents=True, exist_ok=True)
        for rel, content in (files or {}).items():
            target = path / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        return CodeProject(id="test", name=name, type=project_type, path=str(path))

    return _make


@pytest_asyncio.fixture
async def engine(temp_dir: Path, settings: Settings, host: RecordingHost) -> AsyncGenerator[Engine, None]:
    """Create an Engine over the temp roots with a recording host."""
    engine = create_engine(temp_dir / "config" / "settings.json", settings=settings, host=host)
    try:
        yield engine
    finally:
        await engine.close()
