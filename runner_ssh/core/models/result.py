"""
Result models — what a command produced and what a run achieved.

CommandResult is ephemeral: it lives only as long as the caller that
consumes it. ExecutionResult is the orchestrator's accumulator: it
grows by one step per fully completed stage and is returned on
success or attached to the ExecutionFailure on error.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel

# Completed-stage names, in the only order they may be recorded
STAGE_INSTALLED = "installed"
STAGE_CONFIGURED = "configured"
STAGE_KEYS_SETUP = "keys-setup"
STAGE_SERVICE_STARTED = "service-started"

STAGE_ORDER = (
    STAGE_INSTALLED,
    STAGE_CONFIGURED,
    STAGE_KEYS_SETUP,
    STAGE_SERVICE_STARTED,
)

_STAGE_FLAGS = {
    STAGE_INSTALLED: "installed",
    STAGE_CONFIGURED: "configured",
    STAGE_KEYS_SETUP: "keys_setup",
    STAGE_SERVICE_STARTED: "service_started",
}


class CommandResult(BaseModel):
    """Captured output of one successful child process."""

    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0

    @property
    def output(self) -> str:
        """stdout and stderr joined, for pattern checks on either stream."""
        return "\n".join([self.stdout, self.stderr])


@dataclass
class ExecutionResult:
    """Outcome of executing a plan."""

    installed: bool = False
    configured: bool = False
    keys_setup: bool = False
    service_started: bool = False
    steps: list[str] = field(default_factory=list)
    success: bool = False

    def record(self, stage: str) -> None:
        """Mark ``stage`` as fully completed.

        Stages must be recorded once each and in STAGE_ORDER.
        """
        if stage not in _STAGE_FLAGS:
            raise ValueError(f"Unknown stage: {stage}")
        if stage in self.steps:
            raise ValueError(f"Stage already recorded: {stage}")
        if self.steps and STAGE_ORDER.index(stage) < STAGE_ORDER.index(self.steps[-1]):
            raise ValueError(f"Stage {stage} recorded out of order")
        setattr(self, _STAGE_FLAGS[stage], True)
        self.steps.append(stage)

    def to_dict(self) -> dict:
        return {
            "installed": self.installed,
            "configured": self.configured,
            "keys_setup": self.keys_setup,
            "service_started": self.service_started,
            "steps": list(self.steps),
            "success": self.success,
        }
