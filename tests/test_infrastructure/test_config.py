"""Tests for configuration."""

from hostbus.infrastructure.config import (
    INJECT_MAX_BODY_BYTES,
    IPC_DIR,
    IPC_ERRORS_DIR_NAME,
    IPC_POLL_INTERVAL,
    TIMEZONE,
    read_env_file,
)


class TestReadEnvFile:
    def test_reads_env_values(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("KEY1=value1\nKEY2=value2\n")
        monkeypatch.chdir(tmp_path)

        assert read_env_file(["KEY1", "KEY2"]) == {"KEY1": "value1", "KEY2": "value2"}

    def test_strips_quotes(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text('KEY1="quoted"\nKEY2=\'single\'\n')
        monkeypatch.chdir(tmp_path)

        result = read_env_file(["KEY1", "KEY2"])
        assert result["KEY1"] == "quoted"
        assert result["KEY2"] == "single"

    def test_skips_comments_and_blank_lines(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("# comment\n\nKEY1=value1\n\n")
        monkeypatch.chdir(tmp_path)

        assert read_env_file(["KEY1"]) == {"KEY1": "value1"}

    def test_value_may_contain_equals(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("INJECT_SECRET=abc=def\n")
        monkeypatch.chdir(tmp_path)

        assert read_env_file(["INJECT_SECRET"]) == {"INJECT_SECRET": "abc=def"}

    def test_only_requested_keys(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("KEY1=value1\nKEY2=value2\n")
        monkeypatch.chdir(tmp_path)

        assert "KEY2" not in read_env_file(["KEY1"])

    def test_missing_file_returns_empty(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert read_env_file(["KEY1"]) == {}

    def test_empty_values_skipped(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("KEY1=\n")
        monkeypatch.chdir(tmp_path)

        assert "KEY1" not in read_env_file(["KEY1"])


class TestDefaults:
    def test_ipc_layout(self):
        assert IPC_DIR.name == "ipc"
        assert IPC_ERRORS_DIR_NAME == "errors"

    def test_poll_interval(self):
        assert IPC_POLL_INTERVAL == 1.0

    def test_inject_body_limit(self):
        assert INJECT_MAX_BODY_BYTES == 64 * 1024

    def test_timezone_is_resolvable(self):
        from zoneinfo import ZoneInfo

        assert ZoneInfo(TIMEZONE) is not None
