"""
Shared test fixtures and configuration.
"""

import logging
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from runner_ssh.adapters.mock import MockCommandRunner
from runner_ssh.adapters.platform import HostContext
from runner_ssh.core.models.config import SetupConfig

PUBLIC_KEY = (
    "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIGq1n7QxJ0vR3rB9cK2mZp8sT4uW6yX0aD5fH7jL9nE ci@runner"
)


@pytest.fixture
def public_key() -> str:
    return PUBLIC_KEY


@pytest.fixture
def make_config(tmp_path: Path):
    """Factory for a valid SetupConfig rooted in tmp_path."""

    def _make(**overrides) -> SetupConfig:
        values = {
            "public_key": PUBLIC_KEY,
            "port": 2222,
            "mode": "auto",
            "allow_users": ["ci"],
            "default_cwd": "/workspace",
            "disable_force_cwd": False,
            "cwd": str(tmp_path),
        }
        values.update(overrides)
        return SetupConfig(**values)

    return _make


@pytest.fixture
def linux_root() -> HostContext:
    return HostContext(system="linux", euid=0)


@pytest.fixture
def linux_user() -> HostContext:
    return HostContext(system="linux", euid=1000, stdin_is_tty=False)


@pytest.fixture
def windows_host() -> HostContext:
    return HostContext(system="windows", is_admin=True)


@pytest.fixture
def mock_runner(linux_root: HostContext) -> MockCommandRunner:
    return MockCommandRunner(linux_root)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """setup_logging() replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


# Messages coreutils prints when an unprivileged user touches root-owned paths
UNPRIVILEGED_STDERR = {
    "mkdir": "mkdir: cannot create directory '{path}': Permission denied",
    "cp": "cp: cannot create regular file '{path}': Permission denied",
    "mv": "mv: cannot move '{path}': Permission denied",
    "chmod": "chmod: changing permissions of '{path}': Operation not permitted",
    "chown": "chown: changing ownership of '{path}': Operation not permitted",
    "sh": "sh: 1: cannot create {path}: Permission denied",
}


@pytest.fixture
def unprivileged_shell():
    """Patch subprocess so plain commands are refused and ``sudo`` succeeds.

    Yields the ``subprocess.run`` mock; each call's argv is
    ``mock.call_args_list[i].args[0]``.
    """

    def _run(argv, **kwargs):
        if argv[0] == "sudo":
            return subprocess.CompletedProcess(argv, 0, stdout="", stderr="")
        template = UNPRIVILEGED_STDERR.get(argv[0])
        if template is None:
            return subprocess.CompletedProcess(argv, 0, stdout="", stderr="")
        return subprocess.CompletedProcess(argv, 1, stdout="", stderr=template.format(path=argv[-1]))

    with patch("runner_ssh.adapters.shell.command.subprocess.run", side_effect=_run) as mock_run, \
         patch("runner_ssh.adapters.shell.command.shutil.which", return_value="/usr/bin/sudo"):
        yield mock_run
