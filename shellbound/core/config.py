"""Unified configuration via pydantic-settings."""

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

MAX_OUTPUT_LIMIT = 100 * 1024 * 1024

DEFAULT_ENV_PASSTHROUGH: tuple[str, ...] = ("PATH", "LANG", "LC_ALL", "LC_CTYPE", "TERM")


def _split_csv(v: object) -> object:
    if isinstance(v, str):
        return [p.strip() for p in v.split(",") if p.strip()]
    return v


class ShellboundConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SHELLBOUND_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Required
    workspace_root: Path

    # Execution settings
    allowed_commands: Annotated[list[str], NoDecode] = []
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_output_bytes: int = Field(default=1_048_576, gt=0, le=MAX_OUTPUT_LIMIT)
    env_passthrough: Annotated[list[str], NoDecode] = list(DEFAULT_ENV_PASSTHROUGH)
    execute_enabled: bool = True

    # Logging
    log_level: str = "INFO"
    log_dir: Path | None = None
    log_max_bytes: int = 10_485_760
    log_backup_count: int = 5
    audit_log_path: Path | None = None

    @field_validator("workspace_root")
    @classmethod
    def resolve_workspace_root(cls, v: Path) -> Path:
        resolved = v.expanduser().resolve()
        if not resolved.exists():
            raise ValueError(f"workspace root does not exist: {resolved}")
        if not resolved.is_dir():
            raise ValueError(f"workspace root is not a directory: {resolved}")
        return resolved

    @field_validator("allowed_commands", "env_passthrough", mode="before")
    @classmethod
    def parse_csv_list(cls, v: list[str] | str) -> list[str]:
        return _split_csv(v)  # type: ignore[return-value]

    @field_validator("allowed_commands")
    @classmethod
    def strip_allowed_commands(cls, v: list[str]) -> list[str]:
        return [c.strip() for c in v if c.strip()]
