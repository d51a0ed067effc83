"""
Host platform capabilities.

Everything that differs between Windows and POSIX hosts lives here:
discovery commands, interpreter layout, external consoles, opening files,
and killing process trees. Components receive a HostPlatform instead of
branching on the OS themselves.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import signal
import subprocess
import sys
import webbrowser
from abc import ABC, abstractmethod
from enum import Enum, auto
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class PlatformKind(Enum):
    """Supported host families."""

    POSIX = auto()
    WINDOWS = auto()


class HostPlatform(ABC):
    """OS-specific command construction and process control."""

    kind: PlatformKind

    @property
    def name(self) -> str:
        return sys.platform

    # Toolchain discovery

    @property
    @abstractmethod
    def python_discovery_commands(self) -> list[list[str]]: ...

    @property
    @abstractmethod
    def java_discovery_commands(self) -> list[list[str]]: ...

    @property
    @abstractmethod
    def node_discovery_commands(self) -> list[list[str]]: ...

    def parse_discovery_output(self, argv: list[str], output: str) -> list[str]:
        """Extract candidate binary paths from a discovery command's stdout."""
        return [line.strip() for line in output.splitlines() if line.strip()]

    def delphi_registry_query(self) -> list[str] | None:
        """Command listing RAD Studio installs, or None where there is no registry."""
        return None

    # Toolchain layout

    @abstractmethod
    def venv_python(self, venv: Path) -> Path: ...

    @abstractmethod
    def java_runtime_for(self, javac: str) -> str: ...

    @abstractmethod
    def sibling_tool(self, selected_node: str | None, name: str) -> str: ...

    def delphi_compiler(self, root: str | Path) -> Path:
        return Path(root) / "bin" / "dcc32.exe"

    # External console

    supports_external_console: bool = False

    def external_console_command(self, command_line: str) -> str:
        raise NotImplementedError(f"External console is not available on {self.name}")

    def venv_activation_command(self, entry_file: str) -> str:
        raise NotImplementedError(f"Venv activation scripts are not used on {self.name}")

    # Process control

    @abstractmethod
    def popen_kwargs(self) -> dict[str, Any]:
        """Extra keyword arguments so a child can be killed with its descendants."""
        ...

    @abstractmethod
    async def kill_tree(self, proc: asyncio.subprocess.Process) -> None:
        """Terminate a process and everything it spawned, then reap it."""
        ...

    # Desktop integration

    @abstractmethod
    async def open_path(self, path: str | Path) -> None:
        """Open a file or folder with the desktop's default application."""
        ...

    async def open_in_browser(self, path: str | Path) -> None:
        """Open a local file in the default web browser."""
        uri = Path(path).resolve().as_uri()
        opened = await asyncio.to_thread(webbrowser.open, uri)
        if not opened:
            logger.warning(f"No browser accepted {uri}, falling back to the default application")
            await self.open_path(path)

    async def select_directory(self) -> str | None:
        """Show the host folder picker. Returns None when cancelled or unavailable."""
        return await asyncio.to_thread(_ask_directory)


class PosixPlatform(HostPlatform):
    """Linux, macOS and other POSIX hosts."""

    kind = PlatformKind.POSIX

    @property
    def python_discovery_commands(self) -> list[list[str]]:
        return [["which", "-a", "python3"], ["which", "-a", "python"]]

    @property
    def java_discovery_commands(self) -> list[list[str]]:
        return [["which", "-a", "javac"]]

    @property
    def node_discovery_commands(self) -> list[list[str]]:
        return [["which", "-a", "node"]]

    def venv_python(self, venv: Path) -> Path:
        return Path(venv) / "bin" / "python"

    def java_runtime_for(self, javac: str) -> str:
        return javac.replace("/bin/javac", "/bin/java")

    def sibling_tool(self, selected_node: str | None, name: str) -> str:
        if not selected_node:
            return name
        return str(Path(selected_node).parent / name)

    def popen_kwargs(self) -> dict[str, Any]:
        return {"start_new_session": True}

    async def kill_tree(self, proc: asyncio.subprocess.Process) -> None:
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        except PermissionError:
            proc.kill()
        await proc.wait()

    async def open_path(self, path: str | Path) -> None:
        opener = "open" if sys.platform == "darwin" else "xdg-open"
        proc = await asyncio.create_subprocess_exec(
            opener,
            str(path),
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        await proc.wait()


class WindowsPlatform(HostPlatform):
    """Windows hosts."""

    kind = PlatformKind.WINDOWS
    supports_external_console = True

    _PY_LAUNCHER_LINE = re.compile(r"([A-Za-z]:\\.*?\.exe)\s*$", re.IGNORECASE)
    _BDS_KEY = r"HKCU\Software\Embarcadero\BDS"

    @property
    def name(self) -> str:
        return "win32"

    @property
    def python_discovery_commands(self) -> list[list[str]]:
        return [["py", "-0p"], ["where", "python"], ["where", "python3"]]

    @property
    def java_discovery_commands(self) -> list[list[str]]:
        return [["where", "javac"]]

    @property
    def node_discovery_commands(self) -> list[list[str]]:
        return [["where", "node"]]

    def parse_discovery_output(self, argv: list[str], output: str) -> list[str]:
        if argv[:2] == ["py", "-0p"]:
            # Lines look like " -V:3.12 *        C:\Python312\python.exe"
            found = []
            for line in output.splitlines():
                match = self._PY_LAUNCHER_LINE.search(line.strip())
                if match:
                    found.append(match.group(1).strip())
            return found
        return super().parse_discovery_output(argv, output)

    def delphi_registry_query(self) -> list[str] | None:
        return ["reg", "query", self._BDS_KEY, "/s", "/v", "RootDir"]

    def venv_python(self, venv: Path) -> Path:
        return Path(venv) / "Scripts" / "python.exe"

    def java_runtime_for(self, javac: str) -> str:
        return re.sub(r"javac\.exe$", "java.exe", javac, flags=re.IGNORECASE)

    def sibling_tool(self, selected_node: str | None, name: str) -> str:
        if not selected_node:
            return name
        return str(Path(selected_node).parent / f"{name}.cmd")

    def external_console_command(self, command_line: str) -> str:
        # The quoted title keeps `start` from treating a quoted path as the window title
        return f'start "Python Runner" cmd.exe /k {command_line}'

    def venv_activation_command(self, entry_file: str) -> str:
        activate = os.path.join("venv", "Scripts", "activate.bat")
        return f'"{activate}" && python {entry_file}'

    def popen_kwargs(self) -> dict[str, Any]:
        return {"creationflags": getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0)}

    async def kill_tree(self, proc: asyncio.subprocess.Process) -> None:
        try:
            killer = await asyncio.create_subprocess_exec(
                "taskkill",
                "/PID",
                str(proc.pid),
                "/T",
                "/F",
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
            await killer.wait()
        except OSError as e:
            logger.warning(f"taskkill failed for pid {proc.pid}: {e}")
            proc.kill()
        await proc.wait()

    async def open_path(self, path: str | Path) -> None:
        await asyncio.to_thread(os.startfile, str(path))  # type: ignore[attr-defined]


def _ask_directory() -> str | None:
    try:
        import tkinter
        from tkinter import filedialog
    except ImportError:
        logger.warning("tkinter is not available, cannot show a directory picker")
        return None

    try:
        root = tkinter.Tk()
    except tkinter.TclError as e:
        logger.warning(f"Cannot open a directory picker: {e}")
        return None
    try:
        root.withdraw()
        root.attributes("-topmost", True)
        selected = filedialog.askdirectory(parent=root, mustexist=True)
    finally:
        root.destroy()
    return selected or None


def detect_platform() -> HostPlatform:
    """Pick the capabilities implementation for the running host."""
    if sys.platform == "win32":
        return WindowsPlatform()
    return PosixPlatform()
