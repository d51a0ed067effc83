"""
Path confinement for everything the UI asks the engine to touch.

This is the core security layer: a path is usable only when it is one of the
configured project roots or lies beneath one of them.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from projectshell.errors import AccessDenied

if TYPE_CHECKING:
    from projectshell.config import Settings

logger = logging.getLogger(__name__)


def normalize_path(path: str | Path) -> str:
    """Absolute, symlink-resolved, case-normalised form of a path for the host OS."""
    return os.path.normcase(os.path.realpath(os.path.expanduser(os.fspath(path))))


@dataclass
class PathGuard:
    """
    Decides whether a path lies inside one of the allowed roots.

    Matching is separator-bounded: with root ``/projects`` the path
    ``/projects/app`` is allowed, ``/projects-old`` is not.
    """

    roots: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._normalized = [normalize_path(root) for root in self.roots if root]

    @classmethod
    def from_settings(cls, settings: Settings) -> PathGuard:
        """Build a guard over every project root configured in settings."""
        return cls(roots=settings.project_roots())

    @classmethod
    def of(cls, roots: Iterable[str | Path]) -> PathGuard:
        return cls(roots=[os.fspath(root) for root in roots])

    def is_allowed(self, path: str | Path) -> bool:
        """
        Check a path against the allowed roots.

        Args:
            path: Candidate path. Need not exist.

        Returns:
            True if the path equals a root or is a descendant of one.
        """
        if not path or not self._normalized:
            return False

        candidate = normalize_path(path)
        for root in self._normalized:
            try:
                if os.path.commonpath([root, candidate]) == root:
                    return True
            except ValueError:
                # Different drives on Windows
                continue
        return False

    def is_root(self, path: str | Path) -> bool:
        """True if the path is one of the allowed roots itself."""
        return bool(path) and normalize_path(path) in self._normalized

    def check(self, path: str | Path) -> Path:
        """
        Validate a path before any side effect.

        Returns:
            The path as a Path object.

        Raises:
            AccessDenied: If the path is outside every allowed root.
        """
        if not self.is_allowed(path):
            logger.warning(f"Access denied to path: {path}")
            raise AccessDenied(path)
        return Path(path)
