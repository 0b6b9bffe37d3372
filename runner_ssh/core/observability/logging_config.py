"""
Logging configuration — central setup for the CLI entrypoint.

Called once at startup by main.py. Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Levels are resolved in precedence order:
    CLI flag  >  RUNNER_SSH_LOG_LEVEL env var  >  INFO (default)

A per-day log file under ``<cwd>/.runner-data/logs/`` always receives
full detail. Public keys and secrets are masked on every handler.
"""

from __future__ import annotations

import logging
import re
import sys
from datetime import date
from pathlib import Path

from runner_ssh.adapters.shell.filesystem import data_dir

# ── Format strings ──────────────────────────────────────────────

# INFO level: progress lines only
_FMT_MINIMAL = "%(message)s"

# DEBUG level: full diagnostic with file:line
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

# File output: always full detail
_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

# ── Masking ─────────────────────────────────────────────────────

# "<type> <base64 body>" for any OpenSSH public key
_PUBLIC_KEY = re.compile(
    r"((?:ssh-(?:ed25519|rsa|dss)|ecdsa-sha2-\S+|sk-\S+@openssh\.com)\s+)([A-Za-z0-9+/=]{16,})"
)
# key=value / key: value pairs whose key looks sensitive
_SECRET_PAIR = re.compile(
    r"(\b\w*(?:key|token|secret|password|auth)\w*\s*[=:]\s*)(['\"]?)([^\s'\",]+)",
    re.IGNORECASE,
)


def mask_sensitive(value: str) -> str:
    """Keep the first and last 4 characters, star the rest."""
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}{'*' * 8}{value[-4:]}"


def mask_text(text: str) -> str:
    """Mask public-key bodies and sensitive key=value pairs in ``text``."""
    text = _PUBLIC_KEY.sub(lambda m: m.group(1) + mask_sensitive(m.group(2)), text)
    return _SECRET_PAIR.sub(
        lambda m: m.group(1) + m.group(2) + mask_sensitive(m.group(3)), text,
    )


class SensitiveDataFilter(logging.Filter):
    """Rewrite each record's message with secrets masked."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = mask_text(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def default_log_file(cwd: str | Path, today: date | None = None) -> Path:
    """``<cwd>/.runner-data/logs/ssh-setup-YYYY-MM-DD.log``"""
    day = (today or date.today()).isoformat()
    return data_dir(cwd) / "logs" / f"ssh-setup-{day}.log"


def setup_logging(
    level: str = "INFO",
    log_file: str | Path | None = None,
    log_file_level: str | None = "DEBUG",
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Console log level name (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional path to a log file. Parent dirs are created.
        log_file_level: Level for the log file (default DEBUG).
    """
    numeric_level = _parse_level(level)
    masking = SensitiveDataFilter()

    # ── Console handler (stderr) ────────────────────────────────
    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_DEBUG
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    console.addFilter(masking)

    # ── Root logger ─────────────────────────────────────────────
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    effective_level = numeric_level

    # ── File handler (optional) ─────────────────────────────────
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        path = Path(log_file)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(path, encoding="utf-8")
        except OSError as e:
            root.warning("Cannot open log file %s: %s", path, e)
        else:
            fh.setLevel(file_level)
            fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
            fh.addFilter(masking)
            root.addHandler(fh)

    root.setLevel(effective_level)

    # Don't propagate exceptions from logging itself
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.INFO
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.INFO
    return numeric
