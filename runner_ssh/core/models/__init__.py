"""
Domain models — Pydantic types for the setup pipeline.

All models are re-exported here for convenient access:

    from runner_ssh.core.models import SetupConfig, Plan, ExecutionResult
"""

from runner_ssh.core.models.config import SetupConfig
from runner_ssh.core.models.plan import Plan
from runner_ssh.core.models.result import CommandResult, ExecutionResult

__all__ = [
    # result.py
    "CommandResult",
    "ExecutionResult",
    # plan.py
    "Plan",
    # config.py
    "SetupConfig",
]
