"""
Path-confined filesystem view over project directories.

Every operation passes its target through the PathGuard before touching the
disk. Listings skip version-control, dependency-cache and build-output
directories.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

from projectshell._types import FileEntry, FileNode

if TYPE_CHECKING:
    from projectshell.security.policy import PathGuard

logger = logging.getLogger(__name__)

IGNORED_NAMES: frozenset[str] = frozenset(
    {".git", "node_modules", "venv", "target", ".DS_Store", "dist", "release", "__pycache__"}
)

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "


def _sort_key(entry: os.DirEntry[str]) -> tuple[bool, str, str]:
    return (not entry.is_dir(), entry.name.casefold(), entry.name)


def _scan(directory: str | Path) -> list[os.DirEntry[str]]:
    """One sorted, noise-filtered directory level."""
    with os.scandir(directory) as it:
        entries = [entry for entry in it if entry.name not in IGNORED_NAMES]
    entries.sort(key=_sort_key)
    return entries


class ProjectFiles:
    """
    Read, write and list files inside configured project roots.

    Raises:
        AccessDenied: From every method, when the target is outside the roots.
    """

    def __init__(self, guard: PathGuard) -> None:
        self._guard = guard

    async def list_directory(self, path: str | Path) -> list[FileNode]:
        """List one directory level, directories first. Links leaving the roots are hidden."""
        directory = self._guard.check(path)
        entries = await asyncio.to_thread(self._scan_confined, directory)
        return [
            FileNode(name=entry.name, path=str(directory / entry.name), is_directory=entry.is_dir())
            for entry in entries
        ]

    async def read_file(self, path: str | Path) -> str:
        """
        Read a text file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
        """
        file_path = self._guard.check(path)
        return file_path.read_text(encoding="utf-8")

    async def write_file(self, path: str | Path, content: str) -> None:
        """Write a text file, creating parent directories if needed."""
        file_path = self._guard.check(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")

    async def copy_into(self, source_path: str | Path, target_dir: str | Path) -> Path:
        """
        Copy an external file into a project directory under the same base name.

        Returns:
            Path of the new copy.
        """
        directory = self._guard.check(target_dir)
        # An existing link under the same name must not redirect the write
        target = self._guard.check(directory / Path(source_path).name)
        await asyncio.to_thread(shutil.copyfile, source_path, target)
        logger.info(f"Copied {source_path} to {target}")
        return target

    async def list_all_files(self, path: str | Path) -> list[FileEntry]:
        """
        Flatten a project into a list of files, depth-first.

        Subdirectories that cannot be read are logged and skipped.
        """
        root = self._guard.check(path)
        return await asyncio.to_thread(lambda: list(self._walk_files(root)))

    async def find_file(self, project_path: str | Path, file_name: str) -> Path | None:
        """Return the first file named file_name in the project, or None."""
        for entry in await self.list_all_files(project_path):
            if entry.name == file_name:
                return Path(entry.path)
        return None

    async def render_tree(self, path: str | Path) -> str:
        """
        Render an ASCII tree of a project for display.

        Example:
            demo/
            ├── b
            │   └── c.txt
            └── a.txt
        """
        root = self._guard.check(path)
        body = await asyncio.to_thread(self._tree_lines, root, "")
        return f"{root.name}/\n{body}"

    def _walk_files(self, directory: Path) -> Iterator[FileEntry]:
        try:
            entries = self._scan_confined(directory)
        except OSError as e:
            logger.error(f"Error getting all files for {directory}: {e}")
            return
        for entry in entries:
            full_path = directory / entry.name
            if entry.is_dir(follow_symlinks=False):
                yield from self._walk_files(full_path)
            elif entry.is_dir():
                # Linked directories are not followed
                continue
            else:
                yield FileEntry(name=entry.name, path=str(full_path))

    def _tree_lines(self, directory: Path, prefix: str) -> str:
        try:
            entries = [entry for entry in self._scan_confined(directory) if not entry.name.startswith(".")]
        except OSError as e:
            logger.error(f"Error generating file tree for {directory}: {e}")
            return f"[Error reading directory: {directory}]\n"

        lines: list[str] = []
        for i, entry in enumerate(entries):
            is_last = i == len(entries) - 1
            lines.append(f"{prefix}{LAST_BRANCH if is_last else BRANCH}{entry.name}\n")
            if entry.is_dir(follow_symlinks=False):
                lines.append(self._tree_lines(directory / entry.name, prefix + (SPACE if is_last else PIPE)))
        return "".join(lines)

    def _scan_confined(self, directory: Path) -> list[os.DirEntry[str]]:
        """_scan without entries that resolve outside the roots, such as escaping symlinks."""
        return [entry for entry in _scan(directory) if self._guard.is_allowed(directory / entry.name)]
