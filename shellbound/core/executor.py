"""Command executor: validation gates, then a restricted process spawn."""

from __future__ import annotations

import asyncio
import os
import stat
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from shellbound.core.config import (
    DEFAULT_ENV_PASSTHROUGH,
    MAX_OUTPUT_LIMIT,
    ShellboundConfig,
)
from shellbound.core.models import (
    CommandRequest,
    CommandResult,
    NavigationResult,
    ProcessOutput,
)
from shellbound.core.navigator import DirectoryNavigator
from shellbound.core.runner import SubprocessRunner
from shellbound.core.safety.paths import WorkspaceResolver
from shellbound.core.safety.screener import ArgumentScreener
from shellbound.exceptions import (
    CommandNotAllowedError,
    ConfigError,
    EmptyCommandError,
    ErrorKind,
    OutsideWorkspaceError,
    SandboxError,
    WorkingDirectoryNotADirectoryError,
    WorkingDirectoryNotFoundError,
)

if TYPE_CHECKING:
    from shellbound.core.runner import ProcessRunner
    from shellbound.core.safety.audit import AuditLogger

logger = structlog.get_logger()

NAVIGATION_COMMAND = "cd"
TIMEOUT_EXIT_CODE = 124
NAVIGATION_FAILED_EXIT_CODE = 1

DEFAULT_SAFE_COMMANDS: frozenset[str] = frozenset(
    {
        "ls", "cat", "head", "tail", "grep", "find", "wc", "sort", "uniq", "cd",
        "echo", "pwd", "date", "whoami", "id", "uname", "df", "du", "ps",
        "git", "npm", "yarn", "go", "python", "python3", "node", "java",
        "make", "cmake", "curl", "wget", "ping", "nslookup", "dig",
    }
)  # fmt: skip


class CommandExecutor:
    """Owns the sandbox state and serializes every call that touches it.

    Validation failures raise a SandboxError before anything is spawned.
    Once a process has run, the outcome is always a CommandResult, whatever
    its exit code.
    """

    def __init__(
        self,
        resolver: WorkspaceResolver,
        *,
        allowed_commands: Iterable[str] | None = None,
        timeout: float = 30.0,
        max_output_bytes: int = 1_048_576,
        env_passthrough: Iterable[str] = DEFAULT_ENV_PASSTHROUGH,
        runner: ProcessRunner | None = None,
        audit: AuditLogger | None = None,
    ) -> None:
        if not resolver.root.is_dir():
            raise ConfigError(f"workspace root is not a directory: {resolver.root}")
        if timeout <= 0:
            raise ConfigError("timeout must be positive")
        if max_output_bytes <= 0:
            raise ConfigError("max output size must be positive")
        if max_output_bytes > MAX_OUTPUT_LIMIT:
            raise ConfigError("max output size cannot exceed 100MB")

        self._resolver = resolver
        self._screener = ArgumentScreener(resolver)
        self._navigator = DirectoryNavigator(resolver)
        self._allowed = frozenset(allowed_commands or ()) or DEFAULT_SAFE_COMMANDS
        self._timeout = timeout
        self._max_output_bytes = max_output_bytes
        self._env_passthrough = tuple(env_passthrough)
        self._runner: ProcessRunner = runner or SubprocessRunner()
        self._audit = audit
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(
        cls,
        config: ShellboundConfig,
        *,
        runner: ProcessRunner | None = None,
        audit: AuditLogger | None = None,
    ) -> CommandExecutor:
        return cls(
            WorkspaceResolver(config.workspace_root),
            allowed_commands=config.allowed_commands,
            timeout=config.timeout_seconds,
            max_output_bytes=config.max_output_bytes,
            env_passthrough=config.env_passthrough,
            runner=runner,
            audit=audit,
        )

    @property
    def workspace_root(self) -> Path:
        return self._resolver.root

    @property
    def current_dir(self) -> Path:
        return self._navigator.current_dir

    @property
    def allowed_commands(self) -> frozenset[str]:
        return self._allowed

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def max_output_bytes(self) -> int:
        return self._max_output_bytes

    def display_dir(self) -> str:
        """The current directory relative to the workspace root."""
        return self._resolver.relative(self._navigator.current_dir)

    def is_allowed(self, command: str) -> bool:
        return command in self._allowed

    async def execute(self, request: CommandRequest) -> CommandResult:
        async with self._lock:
            try:
                return await self._execute(request)
            except SandboxError as e:
                logger.info(
                    "command_rejected",
                    command=request.command,
                    kind=e.kind.value,
                    error=e.message,
                )
                if self._audit:
                    self._audit.log_command_rejected(
                        request.command, list(request.arguments), e.kind, e.message
                    )
                raise

    async def change_directory(self, path: str) -> NavigationResult:
        async with self._lock:
            return self._navigate([path])

    async def _execute(self, request: CommandRequest) -> CommandResult:
        command = request.command
        arguments = list(request.arguments)

        if not command.strip():
            raise EmptyCommandError("command cannot be empty")
        if not self.is_allowed(command):
            allowed = ", ".join(sorted(self._allowed))
            raise CommandNotAllowedError(
                f"command '{command}' is not allowed. Allowed commands: {allowed}"
            )

        work_dir = self._navigator.current_dir
        if request.work_dir:
            try:
                work_dir = self._resolver.resolve(work_dir, request.work_dir)
            except SandboxError as e:
                raise type(e)(f"invalid work directory: {e.message}") from e

        if command == NAVIGATION_COMMAND:
            nav = self._navigate(arguments)
            if nav.ok:
                return CommandResult(exit_code=0, work_dir=nav.new_work_dir)
            return CommandResult(
                stderr=nav.error or "",
                exit_code=NAVIGATION_FAILED_EXIT_CODE,
                work_dir=nav.new_work_dir,
                error=nav.error,
                error_kind=nav.error_kind,
            )

        self._screener.screen_all(arguments)
        self._check_work_dir(work_dir, request.work_dir)

        output = await self._runner.run(
            [command, *arguments],
            cwd=work_dir,
            env=self._build_env(work_dir),
            timeout=self._timeout,
            max_output_bytes=self._max_output_bytes,
        )
        return self._to_result(command, arguments, work_dir, output)

    def _navigate(self, arguments: list[str]) -> NavigationResult:
        result = self._navigator.navigate(arguments)
        if self._audit:
            target = arguments[0] if len(arguments) == 1 else " ".join(arguments)
            self._audit.log_navigation(
                target, result.old_work_dir, result.new_work_dir, result.error_kind
            )
        return result

    def _check_work_dir(self, work_dir: Path, requested: str | None) -> None:
        shown = requested or self._resolver.relative(work_dir)
        try:
            info = work_dir.stat()
        except OSError as e:
            logger.debug("work_dir_stat_failed", work_dir=shown, error=str(e))
            raise WorkingDirectoryNotFoundError(
                f"working directory does not exist: {shown}"
            ) from None
        if not stat.S_ISDIR(info.st_mode):
            raise WorkingDirectoryNotADirectoryError(
                f"working directory is not a directory: {shown}"
            )
        if not (
            self._resolver.contains(work_dir) and self._resolver.contains_real(work_dir)
        ):
            raise OutsideWorkspaceError(
                f"working directory is outside the workspace boundary: {shown}"
            )

    def _build_env(self, work_dir: Path) -> dict[str, str]:
        env = {
            name: os.environ[name]
            for name in self._env_passthrough
            if name in os.environ
        }
        env["HOME"] = str(self._resolver.root)
        env["PWD"] = str(work_dir)
        return env

    def _to_result(
        self,
        command: str,
        arguments: list[str],
        work_dir: Path,
        output: ProcessOutput,
    ) -> CommandResult:
        truncated = output.stdout_truncated or output.stderr_truncated
        shown = self._resolver.relative(work_dir)
        exit_code = TIMEOUT_EXIT_CODE if output.timed_out else output.exit_code

        if self._audit:
            self._audit.log_command_executed(
                command,
                arguments,
                shown,
                exit_code,
                timed_out=output.timed_out,
                truncated=truncated,
            )

        error = None
        error_kind = None
        if output.timed_out:
            error = f"command '{command}' timed out after {self._timeout:g}s"
            error_kind = ErrorKind.EXECUTION_TIMEOUT
            logger.warning("command_timeout", command=command, timeout=self._timeout)
        else:
            logger.info(
                "command_executed",
                command=command,
                work_dir=shown,
                exit_code=exit_code,
                truncated=truncated,
            )

        return CommandResult(
            stdout=_decode(output.stdout, output.stdout_truncated),
            stderr=_decode(output.stderr, output.stderr_truncated),
            exit_code=exit_code,
            work_dir=shown,
            error=error,
            error_kind=error_kind,
            truncated=truncated,
        )


def _decode(data: bytes, truncated: bool) -> str:
    text = data.decode("utf-8", errors="replace")
    if truncated:
        text += "\n...[truncated]"
    return text
