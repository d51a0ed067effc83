"""
Top-level facade for projectshell.

Toolchain discovery, multi-language project scaffolding and execution, and
a path-confined filesystem view for a desktop coding assistant.
"""

from projectshell._types import (
    CodeProject,
    ExecutionResult,
    FileEntry,
    FileNode,
    Outcome,
    ProjectType,
    Toolchain,
    ToolchainStatus,
)
from projectshell.api import Engine, ProjectToolkit, create_engine, create_project_toolkit
from projectshell.config import Settings, SettingsStore
from projectshell.discovery import ToolchainProber
from projectshell.errors import (
    AccessDenied,
    CommandError,
    ConfigurationError,
    ProjectExistsError,
    ProjectShellError,
    ScaffoldError,
)
from projectshell.files import ProjectFiles
from projectshell.launchers import ProjectRunner
from projectshell.platform import HostPlatform, PosixPlatform, WindowsPlatform, detect_platform
from projectshell.projects import ProjectManager
from projectshell.runner import CommandRunner
from projectshell.security.policy import PathGuard
from projectshell.snippets import SnippetExecutor

__all__ = [
    "AccessDenied",
    "CodeProject",
    "CommandError",
    "CommandRunner",
    "ConfigurationError",
    "Engine",
    "ExecutionResult",
    "FileEntry",
    "FileNode",
    "HostPlatform",
    "Outcome",
    "PathGuard",
    "PosixPlatform",
    "ProjectExistsError",
    "ProjectFiles",
    "ProjectManager",
    "ProjectRunner",
    "ProjectShellError",
    "ProjectToolkit",
    "ProjectType",
    "ScaffoldError",
    "Settings",
    "SettingsStore",
    "SnippetExecutor",
    "Toolchain",
    "ToolchainProber",
    "ToolchainStatus",
    "WindowsPlatform",
    "create_engine",
    "create_project_toolkit",
    "detect_platform",
]
