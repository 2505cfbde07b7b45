"""Workspace path resolution and boundary enforcement.

Resolution is pure path algebra: nothing here checks whether a path exists,
so callers can tell "does not exist" apart from "outside the workspace".
"""

import os
from pathlib import Path

import structlog

from shellbound.exceptions import OutsideWorkspaceError, PathTraversalError

logger = structlog.get_logger()

HOME_MARKER = "~"


def _is_home_relative(path: str) -> bool:
    return path == HOME_MARKER or path.startswith(HOME_MARKER + "/")


def _normalize(path: str) -> str:
    cleaned = os.path.normpath(path)
    # normpath keeps a leading "//" (implementation-defined on POSIX)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def clean(path: str) -> str:
    """Lexically clean *path* without touching the filesystem.

    A leading ``~`` segment keeps its workspace-home meaning. When cleaning a
    plain relative path yields something that would read as ``~``, it is kept
    relative (``./~``) so the result resolves to the same place.
    """
    if not path:
        return "."
    if _is_home_relative(path):
        rest = path[1:].lstrip("/")
        return HOME_MARKER if not rest else f"{HOME_MARKER}/{_normalize(rest)}"
    cleaned = _normalize(path)
    if _is_home_relative(cleaned):
        return f"./{cleaned}"
    return cleaned


class WorkspaceResolver:
    """Canonicalizes path expressions against a fixed workspace root."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).expanduser().resolve()
        self._root_str = str(self._root)

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, base: str | Path, target: str) -> Path:
        """Resolve *target* against *base*, rejecting anything outside the root.

        ``~`` is the workspace root and ``~/rest`` is joined onto it. Absolute
        targets are accepted only when they land inside the root.
        """
        if "\x00" in target:
            logger.debug("path_invalid", reason="nul_byte")
            raise PathTraversalError("Invalid path: contains a NUL byte")

        base_str = str(base)
        if not os.path.isabs(base_str):
            base_str = os.path.join(self._root_str, base_str)

        if _is_home_relative(target):
            rest = target[1:].lstrip("/")
            joined = os.path.join(self._root_str, rest) if rest else self._root_str
        elif os.path.isabs(target):
            joined = target
        elif target:
            joined = os.path.join(base_str, target)
        else:
            joined = base_str

        candidate = _normalize(joined)
        if not self._is_within(candidate):
            logger.debug("path_outside_workspace", target=target)
            raise OutsideWorkspaceError(
                f"Path '{target}' is outside the workspace boundary"
            )
        return Path(candidate)

    def contains(self, path: str | Path) -> bool:
        """Lexical containment check of an absolute path."""
        path_str = str(path)
        if not os.path.isabs(path_str):
            return False
        return self._is_within(_normalize(path_str))

    def contains_real(self, path: str | Path) -> bool:
        """Containment check after following symlinks."""
        try:
            real = Path(path).resolve()
        except (OSError, ValueError, RuntimeError) as e:
            logger.debug("path_resolve_failed", error=str(e))
            return False
        return self._is_within(str(real))

    def relative(self, path: str | Path) -> str:
        """Display form of *path* relative to the root ("." for the root itself)."""
        return os.path.relpath(str(path), self._root_str)

    def _is_within(self, path: str) -> bool:
        rel = os.path.relpath(path, self._root_str)
        return rel != os.pardir and not rel.startswith(os.pardir + os.sep)
