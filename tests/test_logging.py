"""
Tests for logging setup — levels, masking, and the per-day log file.
"""

import logging
from datetime import date

from runner_ssh.core.observability.logging_config import (
    SensitiveDataFilter,
    default_log_file,
    mask_sensitive,
    mask_text,
    setup_logging,
)

KEY_BODY = "AAAAC3NzaC1lZDI1NTE5AAAAIGq1n7QxJ0vR3rB9cK2mZp8sT4uW6yX0aD5fH7jL9nE"


class TestMasking:
    def test_long_value(self):
        assert mask_sensitive("abcdefghijkl") == "abcd********ijkl"

    def test_short_value(self):
        assert mask_sensitive("secret") == "******"

    def test_public_key_body(self):
        masked = mask_text(f"Authorizing ssh-ed25519 {KEY_BODY} ci@runner")
        assert KEY_BODY not in masked
        assert masked == "Authorizing ssh-ed25519 AAAA********L9nE ci@runner"

    def test_secret_pairs(self):
        masked = mask_text("token=ghp_0123456789abcdef password: hunter2")
        assert "ghp_0123456789abcdef" not in masked
        assert "hunter2" not in masked
        assert "token=ghp_" in masked

    def test_plain_text_untouched(self):
        assert mask_text("Starting ssh on port 2222") == "Starting ssh on port 2222"

    def test_filter_rewrites_record(self):
        record = logging.LogRecord(
            "test", logging.INFO, __file__, 1, "key %s", (f"ssh-rsa {KEY_BODY}",), None,
        )
        assert SensitiveDataFilter().filter(record)
        assert KEY_BODY not in record.getMessage()
        assert record.args is None


class TestLogFile:
    def test_default_path(self, tmp_path):
        path = default_log_file(tmp_path, today=date(2024, 3, 9))
        assert path == tmp_path / ".runner-data" / "logs" / "ssh-setup-2024-03-09.log"

    def test_file_gets_debug_detail(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        setup_logging(level="INFO", log_file=log_file)

        logging.getLogger("runner_ssh.test").debug("detail line")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert "detail line" in content
        assert "runner_ssh.test" in content

    def test_file_is_masked(self, tmp_path):
        log_file = tmp_path / "run.log"
        setup_logging(level="ERROR", log_file=log_file)

        logging.getLogger("runner_ssh.test").info("key: ssh-ed25519 %s", KEY_BODY)
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert KEY_BODY not in log_file.read_text(encoding="utf-8")


class TestLevels:
    def test_console_level(self):
        setup_logging(level="WARNING")
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert root.handlers[0].level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        setup_logging(level="CHATTY")
        assert logging.getLogger().level == logging.INFO

    def test_file_level_lowers_root(self, tmp_path):
        setup_logging(level="ERROR", log_file=tmp_path / "x.log")
        assert logging.getLogger().level == logging.DEBUG
