"""
Setup use case — plan and execute SSH provisioning for this host.

The full vertical slice from validated config to a started sshd.
Config loading and reporting stay in the CLI layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from runner_ssh.adapters.shell.command import CommandRunner
from runner_ssh.core.engine.executor import execute
from runner_ssh.core.engine.planner import create_plan
from runner_ssh.core.models.config import SetupConfig
from runner_ssh.core.models.plan import Plan
from runner_ssh.core.models.result import ExecutionResult
from runner_ssh.core.services.ssh.sshd_config import (
    LINUX_SSHD_CONFIG_PATH,
    WINDOWS_SSHD_CONFIG_PATH,
)

logger = logging.getLogger(__name__)


@dataclass
class SetupOutcome:
    """What a successful setup run did."""

    config: SetupConfig
    plan: Plan
    result: ExecutionResult

    @property
    def sshd_config_path(self) -> str:
        if self.plan.os == "windows":
            return WINDOWS_SSHD_CONFIG_PATH
        return LINUX_SSHD_CONFIG_PATH

    def to_dict(self) -> dict:
        return {
            "os": self.plan.os,
            "port": self.config.port,
            "allow_users": self.config.users,
            "default_cwd": self.config.default_cwd,
            "force_cwd": self.config.force_cwd,
            "sshd_config": self.sshd_config_path,
            "result": self.result.to_dict(),
        }


@dataclass
class HostInspection:
    """Read-only view of what a setup run would do."""

    plan: Plan
    privileged: bool
    elevation_access: bool

    def to_dict(self) -> dict:
        return {
            "plan": self.plan.model_dump(),
            "privileged": self.privileged,
            "elevation_access": self.elevation_access,
        }


def inspect_host(runner: CommandRunner | None = None) -> HostInspection:
    """Plan the run and report privilege diagnostics. No side effects."""
    runner = runner or CommandRunner()
    return HostInspection(
        plan=create_plan(runner),
        privileged=runner.is_privileged(),
        elevation_access=runner.has_elevation_access(),
    )


def run_setup(config: SetupConfig, runner: CommandRunner | None = None) -> SetupOutcome:
    """Plan and execute provisioning.

    Raises:
        UnsupportedPlatform: The host OS has no executor.
        ExecutionFailure: A stage failed (partial steps attached).
    """
    runner = runner or CommandRunner()

    plan = create_plan(runner)
    logger.info("📋 Execution plan created for OS: %s", plan.os)

    result = execute(plan, config, runner=runner)
    logger.info("✅ SSH setup completed successfully")
    return SetupOutcome(config=config, plan=plan, result=result)
