"""
Host context — the ambient process state the runner depends on.

Platform, privilege level, and terminal attachment are read ONCE by
``HostContext.current()`` and passed explicitly to the command runner
and capability queries. Tests build fake contexts directly.
"""

from __future__ import annotations

import ctypes
import logging
import os
import platform
import sys
from dataclasses import dataclass

logger = logging.getLogger(__name__)


def _detect_system() -> str:
    """Normalised OS name: 'linux', 'windows', 'darwin', ..."""
    return platform.system().lower()


def _windows_is_admin() -> bool:
    try:
        return bool(ctypes.windll.shell32.IsUserAnAdmin())  # type: ignore[attr-defined]
    except (AttributeError, OSError):
        return False


def _stdin_is_tty() -> bool:
    try:
        return sys.stdin is not None and sys.stdin.isatty()
    except (AttributeError, ValueError):
        # Closed or replaced stdin
        return False


@dataclass(frozen=True)
class HostContext:
    """Snapshot of the invoking process's platform and privileges."""

    system: str
    euid: int | None = None         # None where the platform has no uids
    is_admin: bool = False          # Windows elevated token
    stdin_is_tty: bool = False

    @property
    def is_windows(self) -> bool:
        return self.system == "windows"

    @property
    def is_linux(self) -> bool:
        return self.system == "linux"

    @classmethod
    def current(cls) -> HostContext:
        """Read the context of the running process."""
        system = _detect_system()
        ctx = cls(
            system=system,
            euid=os.geteuid() if hasattr(os, "geteuid") else None,
            is_admin=_windows_is_admin() if system == "windows" else False,
            stdin_is_tty=_stdin_is_tty(),
        )
        logger.debug("Host context: %s", ctx)
        return ctx
