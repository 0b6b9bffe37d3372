"""
Filesystem adapter — local writes under the run's data directory.

Only unprivileged writes happen here. Placing a file somewhere that
needs root goes through the command runner (cp / mv / Copy-Item).
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DATA_DIR_NAME = ".runner-data"


def data_dir(cwd: str | Path) -> Path:
    """``<cwd>/.runner-data`` — logs, temp files, optional ssh.yml."""
    return Path(cwd) / DATA_DIR_NAME


def staging_path(cwd: str | Path, name: str) -> Path:
    """Path for a temp file under ``<cwd>/.runner-data/tmp``."""
    return data_dir(cwd) / "tmp" / name


def write_staging_file(path: Path, content: str) -> Path:
    """Write ``content`` to ``path`` with LF line endings, creating parents."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8", newline="\n")
    logger.debug("Wrote %d bytes to %s", len(content.encode("utf-8")), path)
    return path
