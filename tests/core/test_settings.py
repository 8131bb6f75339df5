"""Tests for RunnerSettings."""

from pathlib import Path

from binrunner.core.settings import RunnerSettings, clear_settings_cache, get_settings


class TestRunnerSettings:
    """Test defaults and environment overrides."""

    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)  # no stray .env
        settings = RunnerSettings()

        assert settings.interval_ms == 120000
        assert settings.script_name is None
        assert settings.bin_dir is None
        assert settings.slow_run_threshold_ms == 10000
        assert settings.log_level == "INFO"
        assert settings.log_format == "console"

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("BINRUNNER_INTERVAL_MS", "5000")
        monkeypatch.setenv("BINRUNNER_SCRIPT_NAME", "backup.sh")
        monkeypatch.setenv("BINRUNNER_BIN_DIR", "/opt/scripts")
        monkeypatch.setenv("BINRUNNER_SLOW_RUN_THRESHOLD_MS", "30000")

        settings = RunnerSettings()

        assert settings.interval_ms == 5000
        assert settings.script_name == "backup.sh"
        assert settings.bin_dir == Path("/opt/scripts")
        assert settings.slow_run_threshold_ms == 30000

    def test_env_file(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text("BINRUNNER_SCRIPT_NAME=from-env-file.sh\n")

        assert RunnerSettings().script_name == "from-env-file.sh"

    def test_bin_dir_defaults_to_home_bin(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert RunnerSettings().resolve_bin_dir() == tmp_path / "bin"

    def test_bin_dir_override(self, tmp_path):
        assert RunnerSettings(bin_dir=tmp_path).resolve_bin_dir() == tmp_path


class TestGetSettings:
    """Test the cached factory."""

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_force_reload(self):
        first = get_settings()
        assert get_settings(_force_reload=True) is not first

    def test_clear_cache(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("BINRUNNER_INTERVAL_MS", "777")
        clear_settings_cache()

        second = get_settings()
        assert second is not first
        assert second.interval_ms == 777
