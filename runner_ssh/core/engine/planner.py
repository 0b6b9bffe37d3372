"""
Planner — decide which OS executor runs and whether install is needed.

Read-only: the only commands issued are install-state queries.
"""

from __future__ import annotations

import logging

from runner_ssh.adapters.shell.command import CommandRunner
from runner_ssh.core.errors import ProcessError, UnsupportedPlatform
from runner_ssh.core.models.plan import Plan
from runner_ssh.core.services.ssh import EXECUTORS, get_executor

logger = logging.getLogger(__name__)


def create_plan(runner: CommandRunner) -> Plan:
    """Build the Plan for the host the runner is bound to.

    Raises:
        UnsupportedPlatform: The host OS has no executor (e.g. macOS).
    """
    os_name = runner.host.system
    if os_name not in EXECUTORS:
        raise UnsupportedPlatform(
            f"Unsupported OS: {os_name}. runner-add-ssh supports Linux and Windows."
        )

    executor = get_executor(os_name, runner)
    try:
        installed = executor.is_installed()
    except ProcessError as e:
        # Install stage re-checks; assume missing so it gets the chance
        logger.warning("Could not determine OpenSSH install state: %s", e)
        installed = False

    plan = Plan.for_host(os_name, needs_install=not installed)  # type: ignore[arg-type]
    logger.debug("Plan: %s", plan.model_dump())
    return plan
