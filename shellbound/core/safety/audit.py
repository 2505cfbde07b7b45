"""Append-only audit trail of sandbox decisions — JSON lines format."""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog

from shellbound.exceptions import ErrorKind

logger = structlog.get_logger()

_MAX_VALUE_LENGTH = 500


class AuditLogger:
    def __init__(self, log_path: Path | str) -> None:
        self._path = Path(log_path)
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def _write(self, entry: dict[str, Any]) -> None:
        entry["timestamp"] = datetime.now(UTC).isoformat()
        try:
            with open(self._path, "a") as f:
                f.write(json.dumps(entry, default=str) + "\n")
        except OSError as e:
            logger.error("audit_write_failed", error=str(e))

    def log_command_executed(
        self,
        command: str,
        arguments: list[str],
        work_dir: str,
        exit_code: int,
        *,
        timed_out: bool = False,
        truncated: bool = False,
    ) -> None:
        self._write(
            {
                "event": "command_executed",
                "command": command,
                "arguments": _truncate_all(arguments),
                "work_dir": work_dir,
                "exit_code": exit_code,
                "timed_out": timed_out,
                "truncated": truncated,
            }
        )

    def log_command_rejected(
        self,
        command: str,
        arguments: list[str],
        kind: ErrorKind,
        reason: str,
    ) -> None:
        self._write(
            {
                "event": "command_rejected",
                "command": _truncate(command),
                "arguments": _truncate_all(arguments),
                "error_kind": kind.value,
                "reason": _truncate(reason),
            }
        )

    def log_navigation(
        self,
        target: str,
        old_work_dir: str,
        new_work_dir: str,
        kind: ErrorKind | None = None,
    ) -> None:
        entry: dict[str, Any] = {
            "event": "navigation",
            "target": _truncate(target),
            "old_work_dir": old_work_dir,
            "new_work_dir": new_work_dir,
            "changed": kind is None and old_work_dir != new_work_dir,
        }
        if kind is not None:
            entry["error_kind"] = kind.value
        self._write(entry)


def _truncate(value: str) -> str:
    if len(value) > _MAX_VALUE_LENGTH:
        return value[:_MAX_VALUE_LENGTH] + "...[truncated]"
    return value


def _truncate_all(values: list[str]) -> list[str]:
    return [_truncate(v) for v in values]
