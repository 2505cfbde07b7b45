"""Bootstrap: wires logging, the sandbox executor and the tool surface together."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

import structlog

from shellbound.core.config import ShellboundConfig
from shellbound.core.executor import CommandExecutor
from shellbound.core.safety.audit import AuditLogger
from shellbound.tools import ShellToolset

logger = structlog.get_logger()


def configure_logging(config: ShellboundConfig, *, log_dir: Path | None = None) -> None:
    """Set up structlog with console output and optional rotating JSON file handler."""
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    root_logger = logging.getLogger()
    root_logger.setLevel(config.log_level)
    root_logger.handlers.clear()

    # Console goes to stderr so command output on stdout stays clean
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(),
        )
    )
    root_logger.addHandler(console_handler)

    log_dir = log_dir or config.log_dir
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / "shellbound.log",
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
        )
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
            )
        )
        root_logger.addHandler(file_handler)

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_toolset(
    config: ShellboundConfig, *, setup_logging: bool = True
) -> ShellToolset:
    if setup_logging:
        configure_logging(config)

    audit = AuditLogger(config.audit_log_path) if config.audit_log_path else None
    executor = CommandExecutor.from_config(config, audit=audit)
    toolset = ShellToolset(executor, enabled=config.execute_enabled)

    logger.info(
        "sandbox_ready",
        workspace_root=str(executor.workspace_root),
        allowed_commands=sorted(executor.allowed_commands),
        timeout=executor.timeout,
        max_output_bytes=executor.max_output_bytes,
        execute_enabled=config.execute_enabled,
    )
    return toolset
