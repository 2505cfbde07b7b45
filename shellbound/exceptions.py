"""Shared exception types for shellbound."""

from enum import Enum


class ErrorKind(Enum):
    EMPTY_COMMAND = "EmptyCommand"
    COMMAND_NOT_ALLOWED = "CommandNotAllowed"
    DANGEROUS_ARGUMENT = "DangerousArgumentPattern"
    PATH_TRAVERSAL = "PathTraversalDetected"
    OUTSIDE_WORKSPACE = "OutsideWorkspaceBoundary"
    WORKDIR_NOT_FOUND = "WorkingDirectoryNotFound"
    WORKDIR_NOT_A_DIRECTORY = "WorkingDirectoryNotADirectory"
    NAVIGATION_SYNTAX = "NavigationSyntax"
    EXECUTION_TIMEOUT = "ExecutionTimeout"
    SPAWN_FAILURE = "SpawnFailure"


class ShellboundError(Exception):
    """Base exception for all shellbound errors."""


class ConfigError(ShellboundError):
    """Configuration is invalid or missing."""


class SandboxError(ShellboundError):
    """A request was refused or could not be carried out by the sandbox."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class EmptyCommandError(SandboxError):
    kind = ErrorKind.EMPTY_COMMAND


class CommandNotAllowedError(SandboxError):
    kind = ErrorKind.COMMAND_NOT_ALLOWED


class DangerousArgumentError(SandboxError):
    kind = ErrorKind.DANGEROUS_ARGUMENT


class PathTraversalError(SandboxError):
    kind = ErrorKind.PATH_TRAVERSAL


class OutsideWorkspaceError(SandboxError):
    kind = ErrorKind.OUTSIDE_WORKSPACE


class WorkingDirectoryNotFoundError(SandboxError):
    kind = ErrorKind.WORKDIR_NOT_FOUND


class WorkingDirectoryNotADirectoryError(SandboxError):
    kind = ErrorKind.WORKDIR_NOT_A_DIRECTORY


class NavigationSyntaxError(SandboxError):
    kind = ErrorKind.NAVIGATION_SYNTAX


class ExecutionTimeoutError(SandboxError):
    kind = ErrorKind.EXECUTION_TIMEOUT


class SpawnFailureError(SandboxError):
    kind = ErrorKind.SPAWN_FAILURE
