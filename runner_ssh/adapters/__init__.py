"""Adapters — host bindings for process execution.

Public re-exports for convenient access.
"""

from runner_ssh.adapters.mock import MockCommandRunner
from runner_ssh.adapters.platform import HostContext
from runner_ssh.adapters.shell.command import CommandRunner

__all__ = [
    "CommandRunner",
    "HostContext",
    "MockCommandRunner",
]
