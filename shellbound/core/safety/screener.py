"""Argument screening for shell metacharacters and workspace escapes."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

import structlog

from shellbound.exceptions import (
    DangerousArgumentError,
    OutsideWorkspaceError,
    PathTraversalError,
)

if TYPE_CHECKING:
    from shellbound.core.safety.paths import WorkspaceResolver

logger = structlog.get_logger()


# Blocklist: a match anywhere in an argument rejects the whole request.
_DANGEROUS_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\$\("), "command substitution $(...)"),
    (re.compile(r"`"), "command substitution `...`"),
    (re.compile(r"&&"), "command chaining &&"),
    (re.compile(r"\|\|"), "command chaining ||"),
    (re.compile(r";"), "command separator ;"),
    (re.compile(r"\|"), "pipe |"),
    (re.compile(r">>"), "append redirection >>"),
    (re.compile(r">"), "redirection >"),
    (re.compile(r"<"), "redirection <"),
    (re.compile(r"&"), "background execution &"),
    (re.compile(r"\$\{"), "variable expansion ${...}"),
    (re.compile(r"\$[A-Za-z_][A-Za-z0-9_]*"), "environment variable expansion $VAR"),
    (re.compile(r"\$[0-9?#@*!$-]"), "special parameter expansion"),
]

_OPTION_VALUE_RE = re.compile(r"^--?[A-Za-z0-9][A-Za-z0-9_-]*=(?P<value>.*)$", re.S)


class ArgumentScreener:
    """Rejects arguments that could escape the workspace or reach a shell.

    Pure: screening never mutates anything, and the first rejection wins.
    """

    def __init__(self, resolver: WorkspaceResolver) -> None:
        self._resolver = resolver

    def screen(self, arg: str) -> None:
        if "\x00" in arg:
            logger.debug("argument_rejected", reason="nul byte")
            raise DangerousArgumentError("Argument contains a NUL byte")

        for candidate in _path_candidates(arg):
            if not os.path.isabs(candidate):
                continue
            # Raises OutsideWorkspaceError for /etc/passwd and friends
            resolved = self._resolver.resolve(self._resolver.root, candidate)
            if not self._resolver.contains_real(resolved):
                logger.debug("argument_rejected", reason="symlink escape")
                raise OutsideWorkspaceError(
                    f"Path '{candidate}' is outside the workspace boundary"
                )

        for pattern, description in _DANGEROUS_PATTERNS:
            if pattern.search(arg):
                logger.debug(
                    "argument_rejected", pattern=pattern.pattern, reason=description
                )
                raise DangerousArgumentError(
                    f"Argument '{arg}' contains dangerous pattern: {description}"
                )

        if ".." in arg:
            logger.debug("argument_rejected", reason="path traversal")
            raise PathTraversalError(f"Argument '{arg}': path traversal detected")

    def screen_all(self, args: Iterable[str]) -> None:
        for arg in args:
            self.screen(arg)


def _path_candidates(arg: str) -> list[str]:
    """The argument itself, plus the value of a ``--option=value`` form."""
    candidates = [arg]
    match = _OPTION_VALUE_RE.match(arg)
    if match:
        candidates.append(match.group("value"))
    return candidates
