"""The virtual working directory, the only mutable state of the sandbox."""

from __future__ import annotations

import stat
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from shellbound.core.models import NavigationResult
from shellbound.core.safety.paths import HOME_MARKER
from shellbound.exceptions import (
    NavigationSyntaxError,
    OutsideWorkspaceError,
    SandboxError,
    WorkingDirectoryNotADirectoryError,
    WorkingDirectoryNotFoundError,
)

if TYPE_CHECKING:
    from shellbound.core.safety.paths import WorkspaceResolver

logger = structlog.get_logger()


class DirectoryNavigator:
    """Tracks the current virtual directory, changed only by validated moves.

    The navigator does no locking of its own; the executor that owns it
    serializes access.
    """

    def __init__(self, resolver: WorkspaceResolver) -> None:
        self._resolver = resolver
        self._current: Path = resolver.root

    @property
    def current_dir(self) -> Path:
        return self._current

    def change(self, target: str) -> tuple[Path, Path]:
        """Move to *target*, returning ``(old, new)``.

        Raises a SandboxError and leaves the current directory untouched when
        the target is outside the workspace, missing, or not a directory.
        """
        old = self._current
        candidate = self._resolver.resolve(old, target)

        try:
            info = candidate.stat()
        except OSError as e:
            logger.debug("directory_stat_failed", target=target, error=str(e))
            raise WorkingDirectoryNotFoundError(
                f"cd: {target}: No such file or directory"
            ) from None
        if not stat.S_ISDIR(info.st_mode):
            raise WorkingDirectoryNotADirectoryError(f"cd: {target}: Not a directory")
        if not self._resolver.contains_real(candidate):
            raise OutsideWorkspaceError(
                f"cd: {target}: access denied - cannot navigate outside "
                "the allowed workspace boundary"
            )

        self._current = candidate
        logger.info(
            "directory_changed",
            old=self._resolver.relative(old),
            new=self._resolver.relative(candidate),
        )
        return old, candidate

    def navigate(self, arguments: list[str]) -> NavigationResult:
        """``cd`` semantics: no argument means home, more than one is an error."""
        before = self._resolver.relative(self._current)
        try:
            if len(arguments) > 1:
                raise NavigationSyntaxError("cd: too many arguments")
            target = arguments[0] if arguments else HOME_MARKER
            old, new = self.change(target)
        except SandboxError as e:
            logger.info("navigation_rejected", kind=e.kind.value, error=e.message)
            return NavigationResult(
                new_work_dir=before,
                old_work_dir=before,
                error=e.message,
                error_kind=e.kind,
            )
        return NavigationResult(
            new_work_dir=self._resolver.relative(new),
            old_work_dir=self._resolver.relative(old),
        )
