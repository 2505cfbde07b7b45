"""Shared fixtures: env isolation, a workspace tree and a recording fake runner."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from pathlib import Path

import pytest

from shellbound.core.config import ShellboundConfig
from shellbound.core.executor import CommandExecutor
from shellbound.core.models import ProcessOutput
from shellbound.core.safety.paths import WorkspaceResolver


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Prevent .env file and shell env from leaking into tests."""
    monkeypatch.setitem(ShellboundConfig.model_config, "env_file", None)
    for key in list(os.environ):
        if key.startswith("SHELLBOUND_"):
            monkeypatch.delenv(key, raising=False)


class FakeRunner:
    """In-memory ProcessRunner that records every spawn request."""

    def __init__(self, output: ProcessOutput | None = None) -> None:
        self.output = output or ProcessOutput(exit_code=0, stdout=b"ok\n")
        self.calls: list[dict] = []
        self.error: Exception | None = None

    async def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
        timeout: float,
        max_output_bytes: int,
    ) -> ProcessOutput:
        self.calls.append(
            {
                "argv": list(argv),
                "cwd": cwd,
                "env": dict(env),
                "timeout": timeout,
                "max_output_bytes": max_output_bytes,
            }
        )
        if self.error is not None:
            raise self.error
        return self.output


@pytest.fixture
def workspace(tmp_path):
    """A workspace root with docs/, docs/nested/, src/ and a README file."""
    root = tmp_path / "ws"
    (root / "docs" / "nested").mkdir(parents=True)
    (root / "src").mkdir()
    (root / "README.md").write_text("hello\n")
    return root.resolve()


@pytest.fixture
def resolver(workspace):
    return WorkspaceResolver(workspace)


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def executor(resolver, fake_runner):
    return CommandExecutor(resolver, runner=fake_runner)
