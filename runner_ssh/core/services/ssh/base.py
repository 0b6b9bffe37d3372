"""
OS executor contract — the capability set every OS variant provides.

Variants are plain classes that satisfy this protocol; the orchestrator
picks one from EXECUTORS by ``Plan.os``. No shared base class.
"""

from __future__ import annotations

from typing import Protocol

from runner_ssh.core.models.config import SetupConfig
from runner_ssh.core.models.plan import STEP_CONFIGURE, STEP_INSTALL, STEP_START

# Stage labels on ConfigurationFailure are the plan step names
STAGE_INSTALL = STEP_INSTALL
STAGE_CONFIGURE = STEP_CONFIGURE
STAGE_START = STEP_START


class SSHExecutor(Protocol):
    """Install, configure and start OpenSSH on one OS family.

    Every operation raises ConfigurationFailure on error, wrapping
    the underlying cause. Operations are safe to re-run.
    """

    os_name: str

    def is_installed(self) -> bool:
        """Whether an OpenSSH server is already present."""
        ...

    def install_ssh(self, config: SetupConfig) -> None:
        ...

    def configure_ssh(self, config: SetupConfig) -> None:
        ...

    def start_ssh(self, config: SetupConfig) -> None:
        ...
