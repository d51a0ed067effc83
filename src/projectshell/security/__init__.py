"""Security module for projectshell."""

from projectshell.errors import AccessDenied
from projectshell.security.policy import PathGuard, normalize_path

__all__ = ["AccessDenied", "PathGuard", "normalize_path"]
