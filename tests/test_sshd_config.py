"""
Tests for sshd_config rendering — directives, users, ForceCommand, determinism.
"""

from runner_ssh.core.services.ssh.sshd_config import (
    SFTP_SERVER_PATHS,
    allow_users_line,
    linux_force_command,
    render_linux_config,
    render_windows_config,
    windows_force_command,
)

REQUIRED_DIRECTIVES = [
    "Port 2222",
    "PubkeyAuthentication yes",
    "PasswordAuthentication no",
    "PermitRootLogin no",
    "MaxAuthTries 3",
    "MaxSessions 10",
    "AllowUsers ci",
]


class TestAllowUsers:
    def test_blank_entries_dropped_order_kept(self, make_config):
        config = make_config(allow_users=["alice", "", " ", "bob"])
        assert allow_users_line(config) == "AllowUsers alice bob"

    def test_rendered_line(self, make_config):
        config = make_config(allow_users=["alice", "", " ", "bob"])
        lines = render_linux_config(config).splitlines()
        assert "AllowUsers alice bob" in lines


class TestLinuxConfig:
    def test_required_directives(self, make_config):
        lines = render_linux_config(make_config()).splitlines()
        for directive in REQUIRED_DIRECTIVES:
            assert directive in lines

    def test_linux_specific_lines(self, make_config):
        text = render_linux_config(make_config())
        assert "Subsystem sftp internal-sftp" in text
        assert "KbdInteractiveAuthentication no" in text
        assert "SyslogFacility AUTH" in text
        assert "LogLevel INFO" in text

    def test_deterministic(self, make_config):
        assert render_linux_config(make_config()) == render_linux_config(make_config())

    def test_force_command_present(self, make_config):
        text = render_linux_config(make_config(default_cwd="/workspace"))
        assert "ForceCommand cd /workspace && " in text
        assert '"$SSH_ORIGINAL_COMMAND"' in text

    def test_force_command_disabled(self, make_config):
        text = render_linux_config(make_config(disable_force_cwd=True))
        assert "ForceCommand" not in text

    def test_force_command_quotes_path(self):
        assert linux_force_command("/srv/my work").startswith("ForceCommand cd '/srv/my work' && ")

    def test_force_command_hands_sftp_to_sftp_server(self):
        line = linux_force_command("/workspace")
        assert 'case "$SSH_ORIGINAL_COMMAND" in' in line
        assert "internal-sftp) for s in " in line
        for path in SFTP_SERVER_PATHS:
            assert path in line
        assert '"") exec "$SHELL" -l' in line
        assert '*) eval "$SSH_ORIGINAL_COMMAND"' in line
        assert line.endswith("esac")

    def test_ends_with_newline(self, make_config):
        assert render_linux_config(make_config()).endswith("UseDNS no\n")


class TestWindowsConfig:
    def test_required_directives(self, make_config):
        lines = render_windows_config(make_config()).splitlines()
        for directive in REQUIRED_DIRECTIVES:
            assert directive in lines
        assert "Subsystem sftp sftp-server.exe" in lines

    def test_force_command_escapes_backslashes(self):
        assert windows_force_command("C:/work/repo") == (
            'ForceCommand cmd /c "cd /d C:\\\\work\\\\repo && cmd"'
        )
        assert windows_force_command("C:\\work") == 'ForceCommand cmd /c "cd /d C:\\\\work && cmd"'

    def test_force_command_disabled(self, make_config):
        text = render_windows_config(make_config(disable_force_cwd=True))
        assert "ForceCommand" not in text

    def test_deterministic(self, make_config):
        config = make_config(default_cwd="C:/work")
        assert render_windows_config(config) == render_windows_config(config)
