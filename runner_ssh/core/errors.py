"""
Error taxonomy — every failure the setup pipeline can surface.

Low-level process failures are raised by the command runner, wrapped
once per stage by the OS executors (ConfigurationFailure), and once
more by the orchestrator (ExecutionFailure). Nothing is swallowed:
each layer adds context and re-raises with ``from``.

    SetupError
    ├── ProcessError
    │   ├── ProcessSpawnFailure
    │   ├── ProcessExitFailure
    │   ├── ElevationUnavailable
    │   └── ElevationRequiresInteraction
    ├── ConfigurationFailure
    ├── ExecutionFailure
    ├── UnsupportedPlatform
    └── ConfigError
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from runner_ssh.core.models.result import ExecutionResult


class SetupError(Exception):
    """Base class for all runner-add-ssh errors."""

    hint: str = ""

    @property
    def privilege_related(self) -> bool:
        """Whether the failure comes down to missing privileges."""
        return False


# ── Process layer ───────────────────────────────────────────────


class ProcessError(SetupError):
    """A child process could not be run to a successful exit."""

    def __init__(
        self,
        message: str,
        *,
        command: str = "",
        args: Sequence[str] = (),
        exit_code: int | None = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = command
        self.args_list = list(args)
        self.exit_code = exit_code
        self.stderr = stderr

    @property
    def command_line(self) -> str:
        return " ".join([self.command, *self.args_list]).strip()


class ProcessSpawnFailure(ProcessError):
    """The command could not be started at all (missing binary, EACCES...)."""

    def __init__(
        self,
        command: str,
        args: Sequence[str],
        reason: str,
        *,
        errno_name: str = "",
    ):
        detail = f"{errno_name} {reason}".strip()
        super().__init__(
            f"Failed to spawn {command}: {detail}",
            command=command,
            args=args,
        )
        self.reason = reason
        self.errno_name = errno_name


class ProcessExitFailure(ProcessError):
    """The command ran but exited non-zero."""

    def __init__(
        self,
        command: str,
        args: Sequence[str],
        exit_code: int,
        stderr: str = "",
    ):
        cmdline = " ".join([command, *args])
        super().__init__(
            f"Command failed: {cmdline}\nExit code: {exit_code}\nStderr: {stderr.strip()}",
            command=command,
            args=args,
            exit_code=exit_code,
            stderr=stderr,
        )


class ElevationUnavailable(ProcessError):
    """Permission was denied and no way to elevate exists."""

    hint = "Run as root, or install and configure sudo."

    @property
    def privilege_related(self) -> bool:
        return True


class ElevationRequiresInteraction(ProcessError):
    """Elevation needs a password or a terminal that this session lacks."""

    hint = "Re-run with passwordless sudo, from an interactive terminal, or as root."

    @property
    def privilege_related(self) -> bool:
        return True


# ── Stage / pipeline layer ──────────────────────────────────────


class ConfigurationFailure(SetupError):
    """An OS executor stage failed. Wraps the underlying cause."""

    def __init__(self, stage: str, os_name: str, cause: BaseException | str):
        super().__init__(f"[{os_name}] {stage} failed: {cause}")
        self.cause = cause if isinstance(cause, BaseException) else None
        self.stage = stage
        self.os_name = os_name

    @property
    def privilege_related(self) -> bool:
        return isinstance(self.cause, SetupError) and self.cause.privilege_related

    @property
    def hint(self) -> str:  # type: ignore[override]
        if isinstance(self.cause, SetupError):
            return self.cause.hint
        return ""


class ExecutionFailure(SetupError):
    """Top-level failure of ``execute()``, wrapping the first failing stage."""

    def __init__(
        self,
        cause: BaseException,
        *,
        stage: str,
        result: ExecutionResult | None = None,
    ):
        super().__init__(f"Execution failed: {cause}")
        self.cause = cause
        self.stage = stage
        self.result = result

    @property
    def completed_steps(self) -> list[str]:
        return list(self.result.steps) if self.result else []

    @property
    def privilege_related(self) -> bool:
        return isinstance(self.cause, SetupError) and self.cause.privilege_related

    @property
    def hint(self) -> str:  # type: ignore[override]
        if isinstance(self.cause, SetupError):
            return self.cause.hint
        return ""

    @property
    def process_error(self) -> ProcessError | None:
        """The innermost process failure in the cause chain, if any."""
        current: BaseException | None = self.cause
        while current is not None:
            if isinstance(current, ProcessError):
                return current
            current = getattr(current, "cause", None) or current.__cause__
        return None


class UnsupportedPlatform(SetupError):
    """The host operating system has no executor."""


class ConfigError(SetupError):
    """Raised when setup configuration is invalid or missing."""

    def __init__(self, message: str, errors: Sequence[str] = ()):
        super().__init__(message)
        self.errors = list(errors)
