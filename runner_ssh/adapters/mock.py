"""
Mock command runner — test double for every external command.

Records each command it is asked to run and answers from scripted
responses, so executors and the orchestrator can be exercised
without touching the host. Unscripted commands succeed with empty
output.
"""

from __future__ import annotations

from typing import Sequence

from runner_ssh.adapters.platform import HostContext
from runner_ssh.adapters.shell.command import CommandRunner
from runner_ssh.core.errors import ProcessError, ProcessExitFailure
from runner_ssh.core.models.result import CommandResult


class MockCommandRunner(CommandRunner):
    """Scriptable stand-in for ``CommandRunner``.

    Responses are keyed by an argv prefix: ``set_response("systemctl",
    "is-active")`` matches ``systemctl is-active ssh``. The most recently
    registered matching prefix wins.
    """

    def __init__(
        self,
        host: HostContext | None = None,
        *,
        available: Sequence[str] = ("sudo", "systemctl", "apt-get"),
        elevation_access: bool = True,
    ):
        super().__init__(host or HostContext(system="linux", euid=0))
        self._available = set(available)
        self._elevation_access = elevation_access
        self._responses: list[tuple[tuple[str, ...], CommandResult | ProcessError]] = []
        self._call_log: list[list[str]] = []

    @property
    def call_log(self) -> list[list[str]]:
        """Every argv this mock has received, in order."""
        return self._call_log

    @property
    def commands(self) -> list[str]:
        """Call log as space-joined command lines."""
        return [" ".join(argv) for argv in self._call_log]

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def set_response(self, *prefix: str, stdout: str = "", stderr: str = "") -> None:
        """Return this output for commands starting with ``prefix``."""
        self._responses.append((prefix, CommandResult(stdout=stdout, stderr=stderr)))

    def set_failure(
        self,
        *prefix: str,
        error: ProcessError | None = None,
        stderr: str = "mock failure",
    ) -> None:
        """Raise for commands starting with ``prefix``.

        Defaults to a ``ProcessExitFailure`` with exit code 1.
        """
        if error is None:
            error = ProcessExitFailure(prefix[0], list(prefix[1:]), 1, stderr)
        self._responses.append((prefix, error))

    def set_available(self, *names: str) -> None:
        self._available = set(names)

    def _answer(self, command: str, args: Sequence[str]) -> CommandResult:
        argv = [command, *args]
        self._call_log.append(argv)
        for prefix, response in reversed(self._responses):
            if tuple(argv[: len(prefix)]) == prefix:
                if isinstance(response, ProcessError):
                    raise response
                return response
        return CommandResult()

    def spawn(self, command, args=(), *, capture_output=True, warn_on_stderr=True, cwd=None):
        return self._answer(command, args)

    def run(self, command, args=(), *, cwd=None):
        return self._answer(command, args)

    def command_exists(self, name: str) -> bool:
        return name in self._available

    def has_elevation_access(self) -> bool:
        return self._elevation_access

    def reset(self) -> None:
        """Clear call log and scripted responses."""
        self._call_log.clear()
        self._responses.clear()
