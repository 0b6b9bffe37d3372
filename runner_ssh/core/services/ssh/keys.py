"""
Authorized keys — install the runner's public key for the target account.

Shared by both OS executors. The key is appended only when the exact
line is not already present, so re-running is harmless.

Target account by mode:
    root        → root's home (Linux); the current user on Windows
    user, auto  → the invoking user (SUDO_USER when run under sudo)
"""

from __future__ import annotations

import getpass
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from runner_ssh.adapters.platform import HostContext
from runner_ssh.adapters.shell.command import CommandRunner
from runner_ssh.core.errors import ConfigurationFailure, SetupError
from runner_ssh.core.models.config import SetupConfig
from runner_ssh.core.models.plan import STEP_SETUP_KEYS

logger = logging.getLogger(__name__)

STAGE_KEYS = STEP_SETUP_KEYS

# $1 = key line, $2 = authorized_keys path
_APPEND_SCRIPT = (
    'touch "$2" && if ! grep -qxF "$1" "$2"; then '
    'if [ -s "$2" ] && [ -n "$(tail -c1 "$2")" ]; then echo >> "$2"; fi; '
    'printf "%s\\n" "$1" >> "$2"; fi'
)


@dataclass(frozen=True)
class KeyTarget:
    """Whose authorized_keys file to write, and whether we are that user."""

    user: str
    home: Path
    is_current_user: bool

    @property
    def ssh_dir(self) -> Path:
        return self.home / ".ssh"

    @property
    def authorized_keys(self) -> Path:
        return self.ssh_dir / "authorized_keys"


def _home_of(user: str) -> Path:
    import pwd  # POSIX only

    return Path(pwd.getpwnam(user).pw_dir)


def _root_home() -> Path:
    """root's home from the passwd database, not $HOME."""
    try:
        return _home_of("root")
    except KeyError:
        return Path("/root")


def resolve_key_target(
    config: SetupConfig,
    host: HostContext,
    *,
    env: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> KeyTarget:
    """Pick the account whose authorized_keys receives the key."""
    env = os.environ if env is None else env
    current = KeyTarget(getpass.getuser(), home or Path.home(), True)

    if host.is_windows:
        return current

    if config.mode == "root":
        return KeyTarget("root", _root_home(), host.euid == 0)

    sudo_user = env.get("SUDO_USER", "")
    if host.euid == 0 and sudo_user and sudo_user != "root":
        return KeyTarget(sudo_user, _home_of(sudo_user), False)

    return current


def _append_key_locally(target: KeyTarget, key: str, posix: bool) -> bool:
    """Write the key as the current user. Returns True if it was added."""
    target.ssh_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
    path = target.authorized_keys

    existing = path.read_text(encoding="utf-8") if path.exists() else ""
    if key in (line.strip() for line in existing.splitlines()):
        return False

    prefix = "" if not existing or existing.endswith("\n") else "\n"
    with path.open("a", encoding="utf-8", newline="\n") as f:
        f.write(f"{prefix}{key}\n")

    if posix:
        target.ssh_dir.chmod(0o700)
        path.chmod(0o600)
    return True


def _append_key_privileged(runner: CommandRunner, target: KeyTarget, key: str) -> None:
    """Write the key into another account's home through the runner."""
    ssh_dir = str(target.ssh_dir)
    auth = str(target.authorized_keys)
    runner.run("mkdir", ["-p", ssh_dir])
    runner.run("sh", ["-c", _APPEND_SCRIPT, "sh", key, auth])
    runner.run("chmod", ["700", ssh_dir])
    runner.run("chmod", ["600", auth])
    runner.run("chown", ["-R", f"{target.user}:", ssh_dir])


def setup_authorized_keys(
    config: SetupConfig,
    runner: CommandRunner,
    *,
    env: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> KeyTarget:
    """Authorize ``config.public_key`` for the target account.

    Raises:
        ConfigurationFailure: The key could not be written.
    """
    host = runner.host
    try:
        target = resolve_key_target(config, host, env=env, home=home)
        logger.debug("Authorizing key for %s in %s", target.user, target.authorized_keys)

        if target.is_current_user:
            added = _append_key_locally(target, config.public_key, posix=not host.is_windows)
            if not added:
                logger.info("   Public key already authorized for %s", target.user)
        else:
            _append_key_privileged(runner, target, config.public_key)
    except (SetupError, OSError, KeyError) as e:
        # KeyError: unknown SUDO_USER in the passwd database
        raise ConfigurationFailure(STAGE_KEYS, host.system, e) from e

    return target
