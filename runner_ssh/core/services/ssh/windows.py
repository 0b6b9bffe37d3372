"""
Windows executor — the OpenSSH.Server optional capability.

All actions are PowerShell one-liners. Windows has no elevation
helper, so a permission failure here surfaces immediately.
"""

from __future__ import annotations

import logging
import re

from runner_ssh.adapters.shell.command import CommandRunner
from runner_ssh.adapters.shell.filesystem import staging_path, write_staging_file
from runner_ssh.core.errors import ConfigurationFailure, SetupError
from runner_ssh.core.models.config import SetupConfig
from runner_ssh.core.models.result import CommandResult
from runner_ssh.core.services.ssh.base import STAGE_CONFIGURE, STAGE_INSTALL, STAGE_START
from runner_ssh.core.services.ssh.sshd_config import (
    WINDOWS_SSHD_CONFIG_PATH,
    WINDOWS_SSHD_DIR,
    render_windows_config,
)

logger = logging.getLogger(__name__)

CAPABILITY_NAME = "OpenSSH.Server~~~~0.0.1.0"
FIREWALL_RULE_PREFIX = "OpenSSH-Server-In-TCP"

CHECK_CAPABILITY_SCRIPT = "Get-WindowsCapability -Online | Where-Object Name -like 'OpenSSH.Server*'"
SERVICE_STATUS_SCRIPT = "Get-Service sshd | Select-Object -ExpandProperty Status"

_INSTALLED_STATE = re.compile(r"State\s*:\s*Installed")


def powershell_args(script: str) -> list[str]:
    return ["-NoProfile", "-NonInteractive", "-Command", script]


class WindowsExecutor:
    """SSH provisioning stages for Windows hosts."""

    os_name = "windows"

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def _powershell(self, script: str) -> CommandResult:
        return self.runner.run("powershell", powershell_args(script))

    def is_installed(self) -> bool:
        result = self._powershell(CHECK_CAPABILITY_SCRIPT)
        return bool(_INSTALLED_STATE.search(result.output))

    def install_ssh(self, config: SetupConfig) -> None:
        try:
            logger.debug("Checking OpenSSH Server installation status...")
            if self.is_installed():
                logger.info("   OpenSSH Server already installed")
                return

            logger.debug("Installing OpenSSH Server...")
            self._powershell(f"Add-WindowsCapability -Online -Name {CAPABILITY_NAME}")
        except (SetupError, OSError) as e:
            raise ConfigurationFailure(STAGE_INSTALL, self.os_name, e) from e

        logger.debug("OpenSSH Server installed successfully")

    def configure_ssh(self, config: SetupConfig) -> None:
        try:
            self._powershell(
                f'New-Item -ItemType Directory -Force -Path "{WINDOWS_SSHD_DIR}"'
            )

            temp_path = write_staging_file(
                staging_path(config.cwd, "sshd_config_win"),
                render_windows_config(config),
            )

            logger.debug("Writing sshd_config to %s...", WINDOWS_SSHD_CONFIG_PATH)
            source = str(temp_path).replace("/", "\\")
            self._powershell(
                f'Copy-Item -Path "{source}" -Destination "{WINDOWS_SSHD_CONFIG_PATH}" -Force'
            )

            logger.debug("Configuring firewall for port %d...", config.port)
            self._powershell(
                f'New-NetFirewallRule -Name "{FIREWALL_RULE_PREFIX}-{config.port}" '
                f'-DisplayName "OpenSSH Server (sshd) port {config.port}" '
                "-Enabled True -Direction Inbound -Protocol TCP -Action Allow "
                f"-LocalPort {config.port} -ErrorAction SilentlyContinue"
            )
        except (SetupError, OSError) as e:
            raise ConfigurationFailure(STAGE_CONFIGURE, self.os_name, e) from e

        logger.debug("SSH configuration applied successfully")

    def start_ssh(self, config: SetupConfig) -> None:
        try:
            logger.debug("Setting SSH service to automatic start...")
            self._powershell("Set-Service -Name sshd -StartupType Automatic")

            # Restart-Service starts a stopped service and reloads a running one
            logger.debug("Starting SSH service...")
            self._powershell("Restart-Service sshd -Force")

            logger.debug("Verifying SSH service status...")
            status = self._powershell(SERVICE_STATUS_SCRIPT)
        except (SetupError, OSError) as e:
            raise ConfigurationFailure(STAGE_START, self.os_name, e) from e

        if "Running" not in status.output:
            raise ConfigurationFailure(
                STAGE_START, self.os_name, "SSH service failed to start",
            )

        logger.debug("SSH service is running")
