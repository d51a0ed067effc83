"""
Main entry point: the Engine facade and the create_engine factory.

The Engine is the request surface offered to the UI: one call, one
structured result. Settings are loaded once and handed to every component
at construction; save_settings and reload_settings rebuild them.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from projectshell._types import (
    CodeProject,
    ExecutionResult,
    FileEntry,
    FileNode,
    ProjectType,
    ToolchainStatus,
)
from projectshell.config import Settings, SettingsStore
from projectshell.discovery import ToolchainProber
from projectshell.files import ProjectFiles
from projectshell.launchers import ProjectRunner
from projectshell.logs import disable_file_logging, enable_file_logging
from projectshell.platform import HostPlatform, detect_platform
from projectshell.projects import ProjectManager
from projectshell.runner import CommandRunner
from projectshell.security.policy import PathGuard
from projectshell.snippets import SnippetExecutor

logger = logging.getLogger(__name__)


class Engine:
    """
    Toolchain and project execution engine.

    Attributes:
        settings: The settings currently in effect.
        host: Platform capabilities in use.

    Example:
        >>> async with create_engine() as engine:
        ...     status = await engine.detect_toolchains()
        ...     project = await engine.create_project("webapp", "demo", "/home/me/webapps")
        ...     result = await engine.run_project(project)
    """

    def __init__(
        self,
        store: SettingsStore,
        *,
        settings: Settings | None = None,
        host: HostPlatform | None = None,
    ) -> None:
        self._store = store
        self.host = host or detect_platform()
        self._apply(settings if settings is not None else store.load())

    def _apply(self, settings: Settings) -> None:
        """Build every component from one settings snapshot."""
        self.settings = settings
        self.guard = PathGuard.from_settings(settings)
        self.runner = CommandRunner(
            self.host,
            timeout=settings.command_timeout,
            max_output_chars=settings.max_output_chars,
        )
        self.prober = ToolchainProber(self.runner, timeout=settings.probe_timeout)
        self.projects = ProjectManager(settings, self.runner, self.guard)
        self.project_runner = ProjectRunner(settings, self.runner, self.guard)
        self.snippets = SnippetExecutor(settings, self.runner, self.guard)
        self.files = ProjectFiles(self.guard)

        if settings.log_to_file:
            log_path = enable_file_logging(self._store.path.parent / "logs")
            logger.info(f"Logging to file {log_path}")
        else:
            disable_file_logging()

    # Settings

    def reload_settings(self) -> Settings:
        """Re-read the settings document and rebuild all components."""
        self._apply(self._store.load())
        logger.info("Settings reloaded")
        return self.settings

    def save_settings(self, settings: Settings) -> None:
        """Persist settings wholesale and start using them."""
        self._store.save(settings)
        self._apply(settings)

    # Toolchains

    async def detect_toolchains(self) -> ToolchainStatus:
        return await self.prober.detect_all()

    # Projects

    async def create_project(
        self, project_type: ProjectType | str, name: str, base_path: str | Path | None = None
    ) -> CodeProject:
        """Create a project. base_path defaults to the configured root for the type."""
        base = base_path or self.settings.root_for(project_type)
        if not base:
            raise ValueError(f"No base directory configured for {project_type} projects")
        return await self.projects.create(project_type, name, base)

    async def delete_project(self, path: str | Path) -> None:
        await self.projects.delete(path)

    async def open_folder(self, path: str | Path) -> None:
        await self.projects.open_folder(path)

    async def open_webapp(self, path: str | Path) -> None:
        await self.projects.open_webapp(path)

    async def install_dependencies(self, project: CodeProject) -> ExecutionResult:
        return await self.projects.install_dependencies(project)

    async def run_project(self, project: CodeProject) -> ExecutionResult:
        return await self.project_runner.run(project)

    async def run_script(self, project: CodeProject, code: str) -> ExecutionResult:
        return await self.snippets.run_in_project(project, code)

    # Snippets

    async def run_python(self, code: str) -> ExecutionResult:
        return await self.snippets.run_python(code)

    async def run_nodejs(self, code: str) -> ExecutionResult:
        return await self.snippets.run_nodejs(code)

    async def run_html(self, code: str) -> ExecutionResult:
        return await self.snippets.run_html(code)

    # Filesystem

    async def select_directory(self) -> str | None:
        return await self.host.select_directory()

    async def read_dir(self, path: str | Path) -> list[FileNode]:
        return await self.files.list_directory(path)

    async def read_file(self, path: str | Path) -> str:
        return await self.files.read_file(path)

    async def write_file(self, path: str | Path, content: str) -> None:
        await self.files.write_file(path, content)

    async def add_file_from_path(self, source_path: str | Path, target_dir: str | Path) -> Path:
        return await self.files.copy_into(source_path, target_dir)

    async def get_all_files(self, path: str | Path) -> list[FileEntry]:
        return await self.files.list_all_files(path)

    async def get_file_tree(self, path: str | Path) -> str:
        return await self.files.render_tree(path)

    async def find_file(self, project_path: str | Path, file_name: str) -> Path | None:
        return await self.files.find_file(project_path, file_name)

    async def close(self) -> None:
        """Release the log file handler. Safe to call multiple times."""
        disable_file_logging()

    async def __aenter__(self) -> Engine:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


def create_engine(
    settings_path: Path | str | None = None,
    *,
    settings: Settings | None = None,
    host: HostPlatform | None = None,
    **overrides: Any,
) -> Engine:
    """
    Create an Engine backed by a settings document.

    Args:
        settings_path: Settings JSON file. Defaults to ~/.projectshell/settings.json.
        settings: Use these settings instead of loading the file.
        host: Platform capabilities. Detected when omitted.
        **overrides: Settings fields to override on top of the loaded values.

    Returns:
        A ready Engine.

    Example:
        >>> engine = create_engine(webapps_path="/home/me/webapps")
    """
    store = SettingsStore(settings_path)
    resolved = settings if settings is not None else store.load()
    for key, value in overrides.items():
        if not hasattr(resolved, key) or key == "extra":
            raise ValueError(f"Unknown setting: {key}")
        setattr(resolved, key, value)
    return Engine(store, settings=resolved, host=host)


class ProjectToolkit:
    """
    One project's files and runners packaged as tools for an LLM agent.

    Relative paths resolve against the project directory and may not leave it.

    Attributes:
        engine: The engine doing the work.
        project: The project the tools are bound to.
        tool_prompt: Description of the project for the agent's prompt.
    """

    def __init__(self, engine: Engine, project: CodeProject, tool_prompt: str = "") -> None:
        self.engine = engine
        self.project = project
        self.tool_prompt = tool_prompt
        self._scope = PathGuard.of([project.path])

    def resolve(self, path: str | Path) -> Path:
        """Project-relative path to absolute path, confined to the project."""
        return self._scope.check(Path(self.project.path) / path)

    async def read_file(self, path: str) -> str:
        return await self.engine.read_file(self.resolve(path))

    async def write_file(self, path: str, content: str) -> None:
        await self.engine.write_file(self.resolve(path), content)

    async def list_files(self) -> list[str]:
        root = Path(self.project.path)
        entries = await self.engine.get_all_files(root)
        return [Path(entry.path).relative_to(root).as_posix() for entry in entries]

    async def file_tree(self) -> str:
        return await self.engine.get_file_tree(self.project.path)

    async def run(self) -> ExecutionResult:
        return await self.engine.run_project(self.project)

    async def run_script(self, code: str) -> ExecutionResult:
        return await self.engine.run_script(self.project, code)

    async def install_dependencies(self) -> ExecutionResult:
        return await self.engine.install_dependencies(self.project)


async def create_project_toolkit(
    engine: Engine,
    project: CodeProject,
    *,
    extra_instructions: str | None = None,
) -> ProjectToolkit:
    """
    Bind agent tools to one project.

    The generated prompt names the project and includes its file tree.

    Raises:
        AccessDenied: If the project is outside the configured roots.
    """
    tree = await engine.get_file_tree(project.path)
    lines = [
        f"You are working in the {project.to_dict()['type']} project '{project.name}'.",
        "Paths are relative to the project root. Current files:",
        tree.rstrip("\n"),
    ]
    if extra_instructions:
        lines.append("")
        lines.append(extra_instructions)
    return ProjectToolkit(engine, project, "\n".join(lines))
