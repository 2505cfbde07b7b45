"""Request and result models shared by the executor, navigator and tool surface."""

from pydantic import BaseModel, ConfigDict, Field

from shellbound.exceptions import ErrorKind


class CommandRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    command: str = Field(
        description="The command to execute (must be in the allowed commands list)"
    )
    arguments: list[str] = Field(
        default_factory=list, description="Arguments to pass to the command"
    )
    work_dir: str | None = Field(
        default=None,
        description="Working directory, relative to the current directory, "
        "'~'-prefixed, or an absolute path inside the workspace",
    )


class CommandResult(BaseModel):
    """Outcome of an execute_command call.

    ``exit_code`` is None when the request was rejected before a process ran.
    """

    model_config = ConfigDict(frozen=True)

    stdout: str = Field(default="", description="Standard output from the command")
    stderr: str = Field(default="", description="Standard error from the command")
    exit_code: int | None = Field(
        default=None, description="Exit code of the command, null if it never ran"
    )
    work_dir: str = Field(
        description="Working directory relative to the workspace root"
    )
    error: str | None = Field(
        default=None, description="Error message if the request failed"
    )
    error_kind: ErrorKind | None = None
    truncated: bool = Field(
        default=False, description="Whether output was cut at the size limit"
    )


class ChangeDirectoryRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str = Field(
        description="Directory to change to, relative to the current directory. "
        "Supports '.', '..', '~' and '~/sub'"
    )


class NavigationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    new_work_dir: str = Field(description="The current directory after the call")
    old_work_dir: str = Field(description="The directory before the call")
    error: str | None = Field(
        default=None, description="Error message if the directory did not change"
    )
    error_kind: ErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ProcessOutput(BaseModel):
    """Raw output of a spawned process, as reported by a ProcessRunner."""

    model_config = ConfigDict(frozen=True)

    exit_code: int
    stdout: bytes = b""
    stderr: bytes = b""
    stdout_truncated: bool = False
    stderr_truncated: bool = False
    timed_out: bool = False
