"""
Plan model — which OS variant and which stages a run will execute.

Produced once per run by the planner, read-only afterwards.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Plan step names, in execution order
STEP_INSTALL = "install"
STEP_CONFIGURE = "configure"
STEP_SETUP_KEYS = "setup-keys"
STEP_START = "start"


class Plan(BaseModel):
    """Precomputed decision of what to run on this host."""

    model_config = ConfigDict(frozen=True)

    os: Literal["linux", "windows"]
    needs_install: bool = False
    steps: list[str] = Field(default_factory=list)

    @classmethod
    def for_host(cls, os_name: Literal["linux", "windows"], needs_install: bool) -> Plan:
        """Build a plan with the canonical step list for ``needs_install``."""
        steps = [STEP_INSTALL] if needs_install else []
        steps += [STEP_CONFIGURE, STEP_SETUP_KEYS, STEP_START]
        return cls(os=os_name, needs_install=needs_install, steps=steps)
