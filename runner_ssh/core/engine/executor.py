"""
Engine executor — the staged provisioning loop.

Takes a Plan and a SetupConfig, picks the OS executor, and runs the
stages strictly in order:

    [install] → configure → keys → start

Each stage is recorded in the ExecutionResult only after it fully
completes. The first failure aborts the run and is raised as an
ExecutionFailure carrying the partial result. Completed stages are
not rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from runner_ssh.adapters.shell.command import CommandRunner
from runner_ssh.core.errors import ElevationUnavailable, ExecutionFailure, SetupError
from runner_ssh.core.models.config import SetupConfig
from runner_ssh.core.models.plan import (
    STEP_CONFIGURE,
    STEP_INSTALL,
    STEP_SETUP_KEYS,
    STEP_START,
    Plan,
)
from runner_ssh.core.models.result import (
    STAGE_CONFIGURED,
    STAGE_INSTALLED,
    STAGE_KEYS_SETUP,
    STAGE_SERVICE_STARTED,
    ExecutionResult,
)
from runner_ssh.core.services.ssh import SSHExecutor, get_executor, setup_authorized_keys

logger = logging.getLogger(__name__)

PREFLIGHT = "preflight"

KeySetup = Callable[[SetupConfig, CommandRunner], object]


@dataclass
class Stage:
    """One step of the run: what to call and what to record."""

    name: str                       # plan step name
    completed: str                  # ExecutionResult step name
    banner: str
    done: str
    action: Callable[[], object]


def build_stages(
    plan: Plan,
    config: SetupConfig,
    executor: SSHExecutor,
    runner: CommandRunner,
    key_setup: KeySetup = setup_authorized_keys,
) -> list[Stage]:
    """Ordered stages for ``plan``. Install is left out entirely when not needed."""
    stages: list[Stage] = []

    if plan.needs_install:
        stages.append(Stage(
            STEP_INSTALL, STAGE_INSTALLED,
            "📦 Installing OpenSSH Server...", "✅ Installation complete",
            lambda: executor.install_ssh(config),
        ))

    stages += [
        Stage(
            STEP_CONFIGURE, STAGE_CONFIGURED,
            "⚙️  Configuring SSH Server...", "✅ Configuration complete",
            lambda: executor.configure_ssh(config),
        ),
        Stage(
            STEP_SETUP_KEYS, STAGE_KEYS_SETUP,
            "🔑 Setting up SSH keys...", "✅ SSH keys setup complete",
            lambda: key_setup(config, runner),
        ),
        Stage(
            STEP_START, STAGE_SERVICE_STARTED,
            "🚀 Starting SSH service...", "✅ SSH service started",
            lambda: executor.start_ssh(config),
        ),
    ]
    return stages


def execute(
    plan: Plan,
    config: SetupConfig,
    *,
    runner: CommandRunner | None = None,
    executor: SSHExecutor | None = None,
    key_setup: KeySetup = setup_authorized_keys,
) -> ExecutionResult:
    """Run every stage of ``plan`` in order.

    Args:
        plan: Which OS and stages to run.
        config: Validated setup configuration.
        runner: Command runner (default: one bound to the current host).
        executor: OS executor override (default: picked by ``plan.os``).
        key_setup: Authorized-keys routine.

    Returns:
        Fully populated ExecutionResult with ``success=True``.

    Raises:
        ExecutionFailure: On the first failing stage, or before any stage
            when a Linux host has no usable elevation.
    """
    runner = runner or CommandRunner()
    result = ExecutionResult()
    stage_name = PREFLIGHT

    try:
        logger.info("🔧 Executing plan for OS: %s", plan.os)
        logger.info("   Steps: %s", " → ".join(plan.steps))

        if plan.os == "linux" and not runner.has_elevation_access():
            raise ElevationUnavailable(
                "Insufficient privileges to configure SSH. "
                "Run as root or configure passwordless sudo."
            )

        executor = executor or get_executor(plan.os, runner)

        for stage in build_stages(plan, config, executor, runner, key_setup):
            stage_name = stage.name
            logger.info(stage.banner)
            stage.action()
            result.record(stage.completed)
            logger.info(stage.done)

    except (SetupError, OSError) as e:
        logger.error("Execution failed at %s: %s", stage_name, e)
        if result.steps:
            logger.error("Completed before failure: %s", ", ".join(result.steps))
        raise ExecutionFailure(e, stage=stage_name, result=result) from e

    result.success = True
    return result
