"""
Linux executor — OpenSSH via the distro package manager and init system.

Supports apt, dnf/yum, zypper, apk and pacman for installation, and
systemd or SysV ``service`` for service management. Every command
goes through ``CommandRunner.run`` so permission failures escalate
through sudo.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Callable

from runner_ssh.adapters.shell.command import CommandRunner
from runner_ssh.adapters.shell.filesystem import staging_path, write_staging_file
from runner_ssh.core.errors import ConfigurationFailure, ProcessError, SetupError
from runner_ssh.core.models.config import SetupConfig
from runner_ssh.core.services.ssh.base import STAGE_CONFIGURE, STAGE_INSTALL, STAGE_START
from runner_ssh.core.services.ssh.sshd_config import (
    LINUX_SSHD_CONFIG_PATH,
    render_linux_config,
)

logger = logging.getLogger(__name__)

SSHD_BINARIES = ("/usr/sbin/sshd", "/usr/bin/sshd")

# Debian/Ubuntu name the unit "ssh"; everyone else uses "sshd"
DEBIAN_SERVICE_MARKERS = (
    "/lib/systemd/system/ssh.service",
    "/usr/lib/systemd/system/ssh.service",
    "/etc/init.d/ssh",
)

# Checked in order; the first one on PATH wins
INSTALL_COMMANDS: dict[str, list[list[str]]] = {
    "apt-get": [
        ["apt-get", "update"],
        ["env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "install", "-y", "openssh-server"],
    ],
    "dnf": [["dnf", "install", "-y", "openssh-server"]],
    "yum": [["yum", "install", "-y", "openssh-server"]],
    "zypper": [["zypper", "--non-interactive", "install", "openssh"]],
    "apk": [["apk", "add", "--no-cache", "openssh-server"]],
    "pacman": [["pacman", "-S", "--noconfirm", "--needed", "openssh"]],
}


class LinuxExecutor:
    """SSH provisioning stages for Linux hosts."""

    os_name = "linux"

    def __init__(
        self,
        runner: CommandRunner,
        *,
        file_exists: Callable[[str], bool] = os.path.exists,
    ):
        self.runner = runner
        self._file_exists = file_exists

    # ── Detection ───────────────────────────────────────────────

    def is_installed(self) -> bool:
        if self.runner.command_exists("sshd"):
            return True
        return any(self._file_exists(p) for p in SSHD_BINARIES)

    def package_manager(self) -> str | None:
        for name in INSTALL_COMMANDS:
            if self.runner.command_exists(name):
                return name
        return None

    def service_name(self) -> str:
        if any(self._file_exists(p) for p in DEBIAN_SERVICE_MARKERS):
            return "ssh"
        return "sshd"

    # ── Stages ──────────────────────────────────────────────────

    def install_ssh(self, config: SetupConfig) -> None:
        """Install openssh-server unless sshd is already present."""
        logger.debug("Checking OpenSSH Server installation status...")
        if self.is_installed():
            logger.info("   OpenSSH Server already installed")
            return

        manager = self.package_manager()
        if manager is None:
            raise ConfigurationFailure(
                STAGE_INSTALL,
                self.os_name,
                "no supported package manager found "
                f"(tried: {', '.join(INSTALL_COMMANDS)})",
            )

        logger.debug("Installing OpenSSH Server with %s...", manager)
        try:
            for argv in INSTALL_COMMANDS[manager]:
                self.runner.run(argv[0], argv[1:])
        except (SetupError, OSError) as e:
            raise ConfigurationFailure(STAGE_INSTALL, self.os_name, e) from e

        logger.debug("OpenSSH Server installed successfully")

    def configure_ssh(self, config: SetupConfig) -> None:
        """Render sshd_config and swap it into /etc/ssh in one rename."""
        target = LINUX_SSHD_CONFIG_PATH
        staged = f"{target}.runner-add-ssh.tmp"

        try:
            temp_path = write_staging_file(
                staging_path(config.cwd, "sshd_config"),
                render_linux_config(config),
            )
            # cp into /etc/ssh keeps the source mode
            temp_path.chmod(0o644)

            self.runner.run("mkdir", ["-p", os.path.dirname(target)])
            self._backup_existing(target)

            logger.debug("Writing sshd_config to %s...", target)
            self.runner.run("cp", [str(temp_path), staged])
            self.runner.run("chmod", ["644", staged])
            self.runner.run("mv", ["-f", staged, target])
        except (SetupError, OSError) as e:
            raise ConfigurationFailure(STAGE_CONFIGURE, self.os_name, e) from e

        logger.debug("SSH configuration applied successfully")

    def start_ssh(self, config: SetupConfig) -> None:
        """Enable sshd at boot, (re)start it, and check it is running once."""
        service = self.service_name()
        systemd = self.runner.command_exists("systemctl")

        try:
            if systemd:
                logger.debug("Enabling %s at boot...", service)
                self.runner.run("systemctl", ["enable", service])
                # restart so a running daemon picks up the new config
                logger.debug("Starting %s...", service)
                self.runner.run("systemctl", ["restart", service])
            else:
                logger.debug("Starting %s via service...", service)
                self.runner.run("service", [service, "restart"])
        except (SetupError, OSError) as e:
            raise ConfigurationFailure(STAGE_START, self.os_name, e) from e

        logger.debug("Verifying SSH service status...")
        try:
            if systemd:
                status = self.runner.run("systemctl", ["is-active", service])
                running = status.stdout.strip() == "active"
            else:
                self.runner.run("service", [service, "status"])
                running = True
        except ProcessError as e:
            raise ConfigurationFailure(
                STAGE_START, self.os_name, f"SSH service {service} failed to start: {e}",
            ) from e

        if not running:
            raise ConfigurationFailure(
                STAGE_START, self.os_name, f"SSH service {service} failed to start",
            )

        logger.debug("SSH service is running")

    # ── Helpers ─────────────────────────────────────────────────

    def _backup_existing(self, target: str) -> None:
        if not self._file_exists(target):
            return
        backup = f"{target}.bak.{time.strftime('%Y%m%d_%H%M%S')}"
        try:
            self.runner.run("cp", ["-p", target, backup])
            logger.debug("Backed up %s to %s", target, backup)
        except ProcessError as e:
            logger.warning("sshd_config backup failed for %s: %s", target, e)
