"""
Configuration loader — merges every settings source into a SetupConfig.

Precedence, highest first:

    CLI options  >  SSH_* environment variables  >  ssh.yml  >  defaults

The optional YAML file lives at ``<cwd>/.runner-data/ssh.yml`` unless
``--config`` points elsewhere. Its keys are the SetupConfig field names.
"""

from __future__ import annotations

import getpass
import logging
import os
import re
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from runner_ssh.adapters.shell.filesystem import data_dir
from runner_ssh.core.errors import ConfigError
from runner_ssh.core.models.config import SetupConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "ssh.yml"

# field name → environment variable
ENV_VARS = {
    "public_key": "SSH_RUNNER_PUBLIC_KEY",
    "port": "SSH_PORT",
    "mode": "SSH_MODE",
    "allow_users": "SSH_ALLOW_USERS",
    "default_cwd": "SSH_DEFAULT_CWD",
    "disable_force_cwd": "SSH_DISABLE_FORCE_CWD",
}

_USER_SEPARATORS = re.compile(r"[,\s]+")


def split_users(value: str | list[str]) -> list[str]:
    """Accept 'alice bob', 'alice,bob' or a list."""
    if isinstance(value, list):
        return [str(v) for v in value]
    return _USER_SEPARATORS.split(value.strip()) if value.strip() else []


def find_config_file(cwd: str | Path) -> Path | None:
    """``<cwd>/.runner-data/ssh.yml`` if it exists."""
    candidate = data_dir(cwd) / CONFIG_FILE_NAME
    return candidate if candidate.is_file() else None


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML settings file.

    Raises:
        ConfigError: If the file is missing, unreadable, or not a mapping.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading SSH settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # Allow both flat keys and an "ssh:" wrapper
    if "ssh" in data:
        section = data["ssh"] or {}
        if not isinstance(section, dict):
            raise ConfigError(f"Expected a mapping under 'ssh:' in {path}")
        return dict(section)
    return dict(data)


def read_env(env: Mapping[str, str]) -> dict[str, Any]:
    """Settings present in the environment. Empty values are ignored."""
    values: dict[str, Any] = {}
    for field, var in ENV_VARS.items():
        raw = env.get(var, "")
        if raw.strip():
            values[field] = raw.strip()
    return values


def parse_input(
    cli_options: Mapping[str, Any],
    *,
    env: Mapping[str, str] | None = None,
    config_path: Path | None = None,
) -> dict[str, Any]:
    """Merge all sources into one raw settings dict (not yet validated)."""
    env = os.environ if env is None else env
    cwd = str(cli_options.get("cwd") or os.getcwd())

    path = config_path or find_config_file(cwd)
    file_values = load_config_file(path) if path else {}

    merged: dict[str, Any] = {
        "port": 22,
        "mode": "auto",
        "allow_users": [getpass.getuser()],
        "default_cwd": cwd,
        "disable_force_cwd": False,
    }
    merged.update({k: v for k, v in file_values.items() if v is not None})
    merged.update(read_env(env))
    merged.update({
        k: v for k, v in cli_options.items()
        if k in ENV_VARS and v is not None and v != ""
    })
    merged["cwd"] = cwd

    if "allow_users" in merged:
        merged["allow_users"] = split_users(merged["allow_users"])

    return merged


def load_config(
    cli_options: Mapping[str, Any],
    *,
    env: Mapping[str, str] | None = None,
    config_path: Path | None = None,
) -> SetupConfig:
    """Merge and validate settings.

    Raises:
        ConfigError: With one message per invalid field.
    """
    raw = parse_input(cli_options, env=env, config_path=config_path)
    try:
        config = SetupConfig.model_validate(raw)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        ]
        raise ConfigError("Invalid SSH configuration", errors) from e

    logger.debug(
        "Configuration: port=%d mode=%s users=%s default_cwd=%s force_cwd=%s",
        config.port, config.mode, " ".join(config.users),
        config.default_cwd, config.force_cwd,
    )
    return config
