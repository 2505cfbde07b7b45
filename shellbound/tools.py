"""Callable tool surface for agent frameworks: execute_command and change_directory."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import BaseModel, ConfigDict

from shellbound.core.models import (
    ChangeDirectoryRequest,
    CommandRequest,
    CommandResult,
    NavigationResult,
)
from shellbound.exceptions import SandboxError, ShellboundError

if TYPE_CHECKING:
    from shellbound.core.executor import CommandExecutor

logger = structlog.get_logger()

EXECUTE_COMMAND = "execute_command"
CHANGE_DIRECTORY = "change_directory"

_EXECUTE_DESCRIPTION = (
    "Execute a command with optional arguments. Only allowed commands can be "
    "executed, and only inside the workspace. Returns stdout, stderr, exit code "
    "and error information."
)
_CHANGE_DIRECTORY_DESCRIPTION = (
    "Change the current working directory. Only directories within the "
    "workspace are allowed. Supports relative paths, '.', '..', and '~' for "
    "the workspace root."
)


_Handler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


class ToolDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    input_schema: dict[str, Any]
    output_schema: dict[str, Any]


class ShellToolset:
    """Exposes a CommandExecutor as two schema-described async tools.

    Sandbox errors come back as result payloads (``error``/``error_kind``) so
    the caller can show them to the model verbatim.
    """

    def __init__(self, executor: CommandExecutor, *, enabled: bool = True) -> None:
        self._executor = executor
        self._enabled = enabled
        self._handlers: dict[str, _Handler] = {}
        if enabled:
            self._handlers = {
                EXECUTE_COMMAND: self._call_execute,
                CHANGE_DIRECTORY: self._call_change_directory,
            }

    @property
    def executor(self) -> CommandExecutor:
        return self._executor

    def tools(self) -> list[ToolDefinition]:
        if not self._enabled:
            return []
        return [
            ToolDefinition(
                name=EXECUTE_COMMAND,
                description=_EXECUTE_DESCRIPTION,
                input_schema=CommandRequest.model_json_schema(),
                output_schema=CommandResult.model_json_schema(),
            ),
            ToolDefinition(
                name=CHANGE_DIRECTORY,
                description=_CHANGE_DIRECTORY_DESCRIPTION,
                input_schema=ChangeDirectoryRequest.model_json_schema(),
                output_schema=NavigationResult.model_json_schema(),
            ),
        ]

    async def call(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """Validate raw *arguments* against the tool's schema and dispatch.

        Raises pydantic.ValidationError for malformed input and
        ShellboundError for unknown or disabled tools.
        """
        handler = self._handlers.get(name)
        if handler is None:
            logger.warning("tool_unknown", tool_name=name, enabled=self._enabled)
            raise ShellboundError(f"Unknown tool: {name}")
        return await handler(arguments)

    async def execute_command(
        self,
        command: str,
        arguments: list[str] | None = None,
        work_dir: str | None = None,
    ) -> dict[str, Any]:
        request = CommandRequest(
            command=command, arguments=arguments or [], work_dir=work_dir
        )
        return await self._run(request)

    async def change_directory(self, path: str) -> dict[str, Any]:
        result = await self._executor.change_directory(path)
        return result.model_dump(mode="json")

    async def close(self) -> None:
        pass

    async def _call_execute(self, arguments: dict[str, Any]) -> dict[str, Any]:
        return await self._run(CommandRequest.model_validate(arguments))

    async def _call_change_directory(self, arguments: dict[str, Any]) -> dict[str, Any]:
        request = ChangeDirectoryRequest.model_validate(arguments)
        return await self.change_directory(request.path)

    async def _run(self, request: CommandRequest) -> dict[str, Any]:
        try:
            result = await self._executor.execute(request)
        except SandboxError as e:
            result = CommandResult(
                work_dir=self._executor.display_dir(),
                error=e.message,
                error_kind=e.kind,
            )
        return result.model_dump(mode="json")
