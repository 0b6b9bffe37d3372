"""
SSH provisioning services — per-OS executors and shared helpers.

    EXECUTORS[plan.os](runner) → an SSHExecutor for that OS family
"""

from runner_ssh.adapters.shell.command import CommandRunner
from runner_ssh.core.errors import UnsupportedPlatform
from runner_ssh.core.services.ssh.base import SSHExecutor
from runner_ssh.core.services.ssh.keys import setup_authorized_keys
from runner_ssh.core.services.ssh.linux import LinuxExecutor
from runner_ssh.core.services.ssh.windows import WindowsExecutor

EXECUTORS = {
    "linux": LinuxExecutor,
    "windows": WindowsExecutor,
}


def get_executor(os_name: str, runner: CommandRunner) -> SSHExecutor:
    """Instantiate the executor for ``os_name``."""
    try:
        factory = EXECUTORS[os_name]
    except KeyError:
        raise UnsupportedPlatform(
            f"Unsupported OS: {os_name} (supported: {', '.join(EXECUTORS)})"
        ) from None
    return factory(runner)


__all__ = [
    "EXECUTORS",
    "LinuxExecutor",
    "SSHExecutor",
    "WindowsExecutor",
    "get_executor",
    "setup_authorized_keys",
]
