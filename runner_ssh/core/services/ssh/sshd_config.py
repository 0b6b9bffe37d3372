"""
sshd_config rendering — pure text generation, no I/O.

The output depends only on the SetupConfig, so rendering the same
config twice gives byte-identical text.
"""

from __future__ import annotations

import shlex

from runner_ssh.core.models.config import SetupConfig

HEADER = "# SSH Server Configuration - Generated by runner-add-ssh"

LINUX_SSHD_CONFIG_PATH = "/etc/ssh/sshd_config"
WINDOWS_SSHD_DIR = "C:\\ProgramData\\ssh"
WINDOWS_SSHD_CONFIG_PATH = WINDOWS_SSHD_DIR + "\\sshd_config"


def allow_users_line(config: SetupConfig) -> str:
    """``AllowUsers`` directive with blank entries dropped, order kept."""
    return "AllowUsers " + " ".join(config.users)


# Where distros ship the standalone sftp-server binary
SFTP_SERVER_PATHS = (
    "/usr/lib/openssh/sftp-server",
    "/usr/libexec/openssh/sftp-server",
    "/usr/lib/ssh/sftp-server",
    "/usr/libexec/sftp-server",
)


def linux_force_command(default_cwd: str) -> str:
    """Enter ``default_cwd``, then run the client's command or a login shell.

    An sftp subsystem request arrives as ``internal-sftp``, which only
    sshd itself can run, so it is handed to the sftp-server binary.
    """
    servers = " ".join(SFTP_SERVER_PATHS)
    return (
        f"ForceCommand cd {shlex.quote(default_cwd)} && "
        'case "$SSH_ORIGINAL_COMMAND" in '
        f'internal-sftp) for s in {servers}; do [ -x "$s" ] && exec "$s"; done; exit 1 ;; '
        '"") exec "$SHELL" -l ;; '
        '*) eval "$SSH_ORIGINAL_COMMAND" ;; '
        "esac"
    )


def windows_force_command(default_cwd: str) -> str:
    """``cmd /c "cd /d <dir> && cmd"`` with backslashes escaped for sshd."""
    path = default_cwd.replace("/", "\\").replace("\\", "\\\\")
    return f'ForceCommand cmd /c "cd /d {path} && cmd"'


def _render(
    config: SetupConfig,
    *,
    interactive_auth_line: str,
    platform_label: str,
    platform_lines: list[str],
    force_command: str,
) -> str:
    lines = [
        HEADER,
        "# Port",
        f"Port {config.port}",
        "",
        "# Authentication",
        "PubkeyAuthentication yes",
        "PasswordAuthentication no",
        interactive_auth_line,
        "",
        "# Security",
        "PermitRootLogin no",
        "StrictModes yes",
        "MaxAuthTries 3",
        "MaxSessions 10",
        "",
        "# Allowed users",
        allow_users_line(config),
        "",
        f"# {platform_label}",
        *platform_lines,
        "",
        "# Logging",
        "SyslogFacility AUTH",
        "LogLevel INFO",
        "",
        "# Default working directory",
        force_command if config.force_cwd else "",
        "",
        "# Performance",
        "UseDNS no",
    ]
    return "\n".join(lines) + "\n"


def render_linux_config(config: SetupConfig) -> str:
    """sshd_config for OpenSSH on Linux."""
    return _render(
        config,
        interactive_auth_line="KbdInteractiveAuthentication no",
        platform_label="Linux-specific",
        platform_lines=[
            "UsePAM yes",
            "AuthorizedKeysFile .ssh/authorized_keys",
            "Subsystem sftp internal-sftp",
        ],
        force_command=linux_force_command(config.default_cwd),
    )


def render_windows_config(config: SetupConfig) -> str:
    """sshd_config for the Windows OpenSSH.Server capability."""
    return _render(
        config,
        interactive_auth_line="ChallengeResponseAuthentication no",
        platform_label="Windows-specific",
        platform_lines=["Subsystem sftp sftp-server.exe"],
        force_command=windows_force_command(config.default_cwd),
    )
