"""CLI entry point for shellbound — an interactive prompt over the two tools."""

import asyncio
import shlex
import sys
from typing import Any

import structlog

from shellbound.app import build_toolset
from shellbound.core.config import ShellboundConfig
from shellbound.core.executor import NAVIGATION_COMMAND
from shellbound.tools import ShellToolset

logger = structlog.get_logger()


def _format_result(result: dict[str, Any]) -> str:
    lines: list[str] = []
    if result.get("stdout"):
        lines.append(result["stdout"].rstrip("\n"))
    if result.get("stderr"):
        lines.append(result["stderr"].rstrip("\n"))
    if result.get("error"):
        lines.append(f"[{result.get('error_kind')}] {result['error']}")
    if result.get("exit_code") not in (None, 0):
        lines.append(f"(exit {result['exit_code']})")
    return "\n".join(lines)


async def handle_line(toolset: ShellToolset, line: str) -> str:
    try:
        tokens = shlex.split(line)
    except ValueError as e:
        return f"Parse error: {e}"
    if not tokens:
        return ""

    command, *arguments = tokens
    if command == NAVIGATION_COMMAND and len(arguments) <= 1:
        result = await toolset.change_directory(arguments[0] if arguments else "~")
        if result.get("error"):
            return f"[{result.get('error_kind')}] {result['error']}"
        return ""
    return _format_result(await toolset.execute_command(command, arguments))


async def _run_cli(config: ShellboundConfig) -> None:
    toolset = build_toolset(config)
    executor = toolset.executor

    logger.info("cli_starting", workspace_root=str(executor.workspace_root))
    print(f"shellbound ready — workspace {executor.workspace_root}")
    print("Enter a command (Ctrl+D to exit):\n")

    try:
        while True:
            try:
                line = input(f"{executor.display_dir()}$ ")
            except EOFError:
                break

            if not line.strip():
                continue

            output = await handle_line(toolset, line)
            if output:
                print(output)
    except KeyboardInterrupt:
        pass
    finally:
        logger.info("cli_shutting_down")
        await toolset.close()
        print("\nBye.")


async def main() -> None:
    try:
        config = ShellboundConfig()  # type: ignore[call-arg]  # pydantic-settings loads from env
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        print("Set SHELLBOUND_WORKSPACE_ROOT or create a .env file.", file=sys.stderr)
        sys.exit(1)

    await _run_cli(config)


def run() -> None:
    asyncio.run(main())
