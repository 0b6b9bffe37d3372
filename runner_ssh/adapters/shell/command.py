"""
Shell command adapter — run commands, escalating with sudo on demand.

The SINGLE PLACE where ``subprocess.run`` is called. Every stage of
the setup pipeline goes through ``CommandRunner.run``, which owns
the privilege-fallback state machine:

    direct run
      └─ permission denied? (non-Windows only)
           ├─ no sudo on PATH          → ElevationUnavailable
           └─ sudo -n <cmd>
                └─ needs password/tty?
                     ├─ no terminal    → ElevationRequiresInteraction
                     └─ sudo <cmd>     (interactive, output not captured)

Any other failure is re-raised untouched. There is no timeout: a
stuck installer or an unanswered sudo prompt blocks the run.
"""

from __future__ import annotations

import errno
import logging
import shutil
import subprocess
from typing import Sequence

from runner_ssh.adapters.platform import HostContext
from runner_ssh.core.errors import (
    ElevationRequiresInteraction,
    ElevationUnavailable,
    ProcessError,
    ProcessExitFailure,
    ProcessSpawnFailure,
)
from runner_ssh.core.models.result import CommandResult

logger = logging.getLogger(__name__)

ELEVATION_HELPER = "sudo"
NON_INTERACTIVE_FLAG = "-n"

# Substrings that mean "you are not allowed to do this"
PERMISSION_SIGNATURES = (
    "EACCES",
    "EPERM",
    "Permission denied",
    "Operation not permitted",
    "Access denied",
    "are you root",
    "must be root",
    "Interactive authentication required",
)

# Substrings (lower-cased) that mean sudo wants a password or a terminal
INTERACTION_SIGNATURES = (
    "password",
    "terminal is required",
    "no tty",
)


def is_permission_error(error: ProcessError) -> bool:
    """Whether a failure matches a permission-denied signature."""
    text = f"{error}\n{error.stderr}"
    return any(sig in text for sig in PERMISSION_SIGNATURES)


def requires_interaction(error: ProcessError) -> bool:
    """Whether a ``sudo -n`` failure was caused by a password/tty prompt."""
    text = f"{error}\n{error.stderr}".lower()
    return any(sig in text for sig in INTERACTION_SIGNATURES)


class CommandRunner:
    """Run external commands on behalf of the setup pipeline.

    Args:
        host: Platform/privilege context. Defaults to the current process.
    """

    def __init__(self, host: HostContext | None = None):
        self.host = host or HostContext.current()

    # ── Plain execution ─────────────────────────────────────────

    def spawn(
        self,
        command: str,
        args: Sequence[str] = (),
        *,
        capture_output: bool = True,
        warn_on_stderr: bool = True,
        cwd: str | None = None,
    ) -> CommandResult:
        """Run one command once, without any escalation.

        Raises:
            ProcessSpawnFailure: The command could not be started.
            ProcessExitFailure: The command exited non-zero.
        """
        args = list(args)
        logger.debug("Spawning: %s %s", command, " ".join(args))

        try:
            proc = subprocess.run(
                [command, *args],
                capture_output=capture_output,
                text=True,
                errors="replace",
                cwd=cwd,
            )
        except OSError as e:
            raise ProcessSpawnFailure(
                command,
                args,
                e.strerror or str(e),
                errno_name=errno.errorcode.get(e.errno or 0, ""),
            ) from e

        stdout = proc.stdout or ""
        stderr = proc.stderr or ""

        if proc.returncode != 0:
            raise ProcessExitFailure(command, args, proc.returncode, stderr)

        if warn_on_stderr and stderr.strip():
            logger.warning("Command produced stderr output: %s", stderr.strip())

        return CommandResult(stdout=stdout, stderr=stderr, exit_code=0)

    # ── Privilege-aware execution ───────────────────────────────

    def run(
        self,
        command: str,
        args: Sequence[str] = (),
        *,
        cwd: str | None = None,
    ) -> CommandResult:
        """Run a command, retrying under sudo if permission is denied.

        Raises:
            ElevationUnavailable: Permission denied and sudo is missing.
            ElevationRequiresInteraction: sudo needs a password but there
                is no terminal to ask on.
            ProcessError: Any other failure, unchanged.
        """
        args = list(args)
        logger.debug("Executing: %s %s", command, " ".join(args))

        try:
            return self.spawn(command, args, cwd=cwd)
        except ProcessError as e:
            if not is_permission_error(e):
                raise
            if self.host.is_windows:
                # No elevation mechanism on Windows: surface as-is
                raise
            original = e

        logger.debug("Permission denied, retrying with %s...", ELEVATION_HELPER)

        if not self.command_exists(ELEVATION_HELPER):
            raise ElevationUnavailable(
                "Command requires elevated privileges, but sudo is not available. "
                "Run as root or install/configure sudo.",
                command=command,
                args=args,
                exit_code=original.exit_code,
                stderr=original.stderr,
            ) from original

        try:
            return self.spawn(
                ELEVATION_HELPER, [NON_INTERACTIVE_FLAG, command, *args], cwd=cwd,
            )
        except ProcessError as sudo_error:
            if not requires_interaction(sudo_error):
                raise
            if not self.host.stdin_is_tty:
                raise ElevationRequiresInteraction(
                    "Command requires sudo privileges, but non-interactive sudo "
                    "is not available. Re-run with passwordless sudo or as root.",
                    command=command,
                    args=args,
                    exit_code=sudo_error.exit_code,
                    stderr=sudo_error.stderr,
                ) from sudo_error

        logger.debug("Sudo requires a password, trying interactive sudo...")
        return self.spawn(
            ELEVATION_HELPER,
            [command, *args],
            capture_output=False,
            warn_on_stderr=False,
            cwd=cwd,
        )

    # ── Capability queries ──────────────────────────────────────

    def command_exists(self, name: str) -> bool:
        """Whether ``name`` resolves on PATH."""
        return shutil.which(name) is not None

    def is_privileged(self) -> bool:
        return is_privileged(self.host)

    def has_elevation_access(self) -> bool:
        return has_elevation_access(self.host, self)


def is_privileged(host: HostContext) -> bool:
    """Whether the process already runs as root / elevated administrator.

    Best-effort diagnostic. Never raises.
    """
    if host.is_windows:
        return host.is_admin
    return host.euid == 0


def has_elevation_access(host: HostContext, runner: CommandRunner) -> bool:
    """Whether privileged commands can run without prompting.

    True when already privileged, or when sudo exists and a
    non-interactive check (``sudo -n -v``) succeeds. Never raises.
    """
    if is_privileged(host):
        return True
    if host.is_windows:
        return False

    try:
        if not runner.command_exists(ELEVATION_HELPER):
            return False
        runner.spawn(ELEVATION_HELPER, [NON_INTERACTIVE_FLAG, "-v"], warn_on_stderr=False)
        return True
    except ProcessError as e:
        logger.debug("Elevation check failed: %s", e)
        return False
