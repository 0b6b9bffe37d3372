"""
Tests for the Windows executor — PowerShell capability, config, service.
"""

import pytest

from runner_ssh.adapters.mock import MockCommandRunner
from runner_ssh.core.errors import ConfigurationFailure, ProcessExitFailure
from runner_ssh.core.services.ssh.sshd_config import render_windows_config
from runner_ssh.core.services.ssh.windows import (
    CHECK_CAPABILITY_SCRIPT,
    SERVICE_STATUS_SCRIPT,
    WindowsExecutor,
    powershell_args,
)

CAPABILITY_INSTALLED = "Name  : OpenSSH.Server~~~~0.0.1.0\nState        : Installed\n"
CAPABILITY_MISSING = "Name  : OpenSSH.Server~~~~0.0.1.0\nState        : NotPresent\n"


@pytest.fixture
def runner(windows_host):
    return MockCommandRunner(windows_host, available=())


def _scripts(runner):
    """The -Command argument of each PowerShell call."""
    return [argv[-1] for argv in runner.call_log]


class TestInstall:
    def test_is_installed(self, runner):
        runner.set_response("powershell", *powershell_args(CHECK_CAPABILITY_SCRIPT), stdout=CAPABILITY_INSTALLED)
        assert WindowsExecutor(runner).is_installed()

    def test_skips_when_installed(self, runner, make_config):
        runner.set_response("powershell", *powershell_args(CHECK_CAPABILITY_SCRIPT), stdout=CAPABILITY_INSTALLED)
        WindowsExecutor(runner).install_ssh(make_config())
        assert _scripts(runner) == [CHECK_CAPABILITY_SCRIPT]

    def test_adds_capability(self, runner, make_config):
        runner.set_response("powershell", *powershell_args(CHECK_CAPABILITY_SCRIPT), stdout=CAPABILITY_MISSING)
        WindowsExecutor(runner).install_ssh(make_config())
        scripts = _scripts(runner)
        assert len(scripts) == 2
        assert scripts[1] == "Add-WindowsCapability -Online -Name OpenSSH.Server~~~~0.0.1.0"
        assert runner.call_log[1][:4] == ["powershell", "-NoProfile", "-NonInteractive", "-Command"]

    def test_install_failure_wrapped(self, runner, make_config):
        runner.set_failure("powershell", stderr="Access is denied")
        with pytest.raises(ConfigurationFailure) as exc_info:
            WindowsExecutor(runner).install_ssh(make_config())
        assert exc_info.value.os_name == "windows"
        assert exc_info.value.stage == "install"
        assert isinstance(exc_info.value.cause, ProcessExitFailure)


class TestConfigure:
    def test_copies_config_and_opens_firewall(self, runner, make_config, tmp_path):
        config = make_config(default_cwd="C:/work")
        WindowsExecutor(runner).configure_ssh(config)

        staged = tmp_path / ".runner-data" / "tmp" / "sshd_config_win"
        assert staged.read_text(encoding="utf-8") == render_windows_config(config)

        scripts = _scripts(runner)
        assert scripts[0] == 'New-Item -ItemType Directory -Force -Path "C:\\ProgramData\\ssh"'
        assert scripts[1].startswith("Copy-Item -Path ")
        assert 'Destination "C:\\ProgramData\\ssh\\sshd_config" -Force' in scripts[1]
        assert "New-NetFirewallRule" in scripts[2]
        assert "-LocalPort 2222" in scripts[2]
        assert '-Name "OpenSSH-Server-In-TCP-2222"' in scripts[2]

    def test_first_failure_aborts(self, runner, make_config):
        runner.set_failure("powershell")
        with pytest.raises(ConfigurationFailure) as exc_info:
            WindowsExecutor(runner).configure_ssh(make_config())
        assert exc_info.value.stage == "configure"
        assert runner.call_count == 1


class TestStart:
    def test_running(self, runner, make_config):
        runner.set_response("powershell", *powershell_args(SERVICE_STATUS_SCRIPT), stdout="Running\r\n")
        WindowsExecutor(runner).start_ssh(make_config())
        assert _scripts(runner) == [
            "Set-Service -Name sshd -StartupType Automatic",
            "Restart-Service sshd -Force",
            SERVICE_STATUS_SCRIPT,
        ]

    def test_not_running(self, runner, make_config):
        runner.set_response("powershell", *powershell_args(SERVICE_STATUS_SCRIPT), stdout="Stopped\r\n")
        with pytest.raises(ConfigurationFailure) as exc_info:
            WindowsExecutor(runner).start_ssh(make_config())
        assert "SSH service failed to start" in str(exc_info.value)
        assert _scripts(runner).count(SERVICE_STATUS_SCRIPT) == 1
