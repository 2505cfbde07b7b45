"""Tests for the ShellToolset tool surface."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from shellbound.core.executor import CommandExecutor
from shellbound.exceptions import ShellboundError
from shellbound.tools import CHANGE_DIRECTORY, EXECUTE_COMMAND, ShellToolset


@pytest.fixture
def toolset(executor):
    return ShellToolset(executor)


class TestDefinitions:
    def test_two_tools_exposed(self, toolset):
        names = [t.name for t in toolset.tools()]
        assert names == [EXECUTE_COMMAND, CHANGE_DIRECTORY]

    def test_execute_schema(self, toolset):
        execute = toolset.tools()[0]
        props = execute.input_schema["properties"]
        assert set(props) == {"command", "arguments", "work_dir"}
        assert execute.input_schema["required"] == ["command"]
        assert "exit_code" in execute.output_schema["properties"]

    def test_change_directory_schema(self, toolset):
        change = toolset.tools()[1]
        assert change.input_schema["required"] == ["path"]
        assert "new_work_dir" in change.output_schema["properties"]

    def test_disabled_toolset_exposes_nothing(self, executor):
        toolset = ShellToolset(executor, enabled=False)
        assert toolset.tools() == []

    def test_executor_property(self, toolset, executor):
        assert toolset.executor is executor


class TestExecuteCommand:
    async def test_success_payload(self, toolset, fake_runner):
        result = await toolset.execute_command("ls", ["-la"])
        assert result["stdout"] == "ok\n"
        assert result["exit_code"] == 0
        assert result["work_dir"] == "."
        assert result["error"] is None
        assert fake_runner.calls[0]["argv"] == ["ls", "-la"]

    async def test_rejection_becomes_payload(self, toolset, fake_runner):
        result = await toolset.execute_command("rm", ["-rf", "src"])
        assert result["exit_code"] is None
        assert result["error_kind"] == "CommandNotAllowed"
        assert "not allowed" in result["error"]
        assert fake_runner.calls == []

    async def test_nul_byte_argument_payload(self, toolset, fake_runner):
        result = await toolset.execute_command("echo", ["a\x00b"])
        assert result["error_kind"] == "DangerousArgumentPattern"
        assert result["exit_code"] is None
        assert fake_runner.calls == []

    async def test_dangerous_argument_payload(self, toolset):
        result = await toolset.execute_command("echo", ["$(whoami)"])
        assert result["error_kind"] == "DangerousArgumentPattern"

    async def test_work_dir_is_passed_through(self, toolset, fake_runner, workspace):
        result = await toolset.execute_command("ls", work_dir="docs")
        assert result["work_dir"] == "docs"
        assert fake_runner.calls[0]["cwd"] == workspace / "docs"

    async def test_rejection_reports_current_dir(self, toolset):
        await toolset.change_directory("docs")
        result = await toolset.execute_command("cat", ["/etc/passwd"])
        assert result["error_kind"] == "OutsideWorkspaceBoundary"
        assert result["work_dir"] == "docs"


class TestChangeDirectory:
    async def test_overlong_name_is_a_result(self, toolset):
        result = await toolset.change_directory("a" * 300)
        assert result["error_kind"] == "WorkingDirectoryNotFound"
        assert result["new_work_dir"] == "."

    async def test_success(self, toolset):
        result = await toolset.change_directory("docs/nested")
        assert result == {
            "new_work_dir": "docs/nested",
            "old_work_dir": ".",
            "error": None,
            "error_kind": None,
        }

    async def test_failure_payload(self, toolset):
        result = await toolset.change_directory("..")
        assert result["error_kind"] == "OutsideWorkspaceBoundary"
        assert result["new_work_dir"] == "."


class TestCall:
    async def test_dispatch_execute(self, toolset, fake_runner):
        result = await toolset.call(
            EXECUTE_COMMAND, {"command": "pwd", "arguments": []}
        )
        assert result["exit_code"] == 0
        assert fake_runner.calls[0]["argv"] == ["pwd"]

    async def test_dispatch_change_directory(self, toolset):
        result = await toolset.call(CHANGE_DIRECTORY, {"path": "src"})
        assert result["new_work_dir"] == "src"

    async def test_unknown_tool(self, toolset):
        with pytest.raises(ShellboundError, match="Unknown tool"):
            await toolset.call("rm_rf", {})

    async def test_disabled_tool_is_unknown(self, executor):
        toolset = ShellToolset(executor, enabled=False)
        with pytest.raises(ShellboundError, match="Unknown tool"):
            await toolset.call(EXECUTE_COMMAND, {"command": "ls"})

    async def test_invalid_arguments(self, toolset):
        with pytest.raises(ValidationError):
            await toolset.call(EXECUTE_COMMAND, {"arguments": ["-la"]})

    async def test_close_is_safe(self, toolset):
        await toolset.close()
        assert isinstance(toolset.executor, CommandExecutor)
