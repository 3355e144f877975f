"""Tests for progress_reporter settings module."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from progress_reporter.settings import (
    ApplicationSettings,
    EstimatorSettings,
    LoggingSettings,
    SettingsManager,
    get_settings,
    get_settings_manager,
    load_settings,
    reset_settings,
    save_settings,
)


class TestEstimatorSettings:
    def test_defaults(self):
        s = EstimatorSettings()
        assert s.time_per_increment_s == 0.5
        assert s.increment_batch_size == 1

    def test_custom_values(self):
        s = EstimatorSettings(time_per_increment_s=1.5, increment_batch_size=8)
        assert s.time_per_increment_s == 1.5
        assert s.increment_batch_size == 8

    @pytest.mark.parametrize(
        "field,value",
        [("time_per_increment_s", 0), ("time_per_increment_s", -1.0), ("increment_batch_size", 0)],
    )
    def test_rejects_non_positive(self, field, value):
        with pytest.raises(ValidationError):
            EstimatorSettings(**{field: value})

    def test_validates_assignment(self):
        s = EstimatorSettings()
        with pytest.raises(ValidationError):
            s.increment_batch_size = -3


class TestLoggingSettings:
    def test_defaults(self):
        s = LoggingSettings()
        assert s.level == "INFO"
        assert s.log_file is None

    def test_level_case_insensitive(self):
        assert LoggingSettings(level="debug").level == "DEBUG"

    def test_unknown_level(self):
        with pytest.raises(ValidationError):
            LoggingSettings(level="CHATTY")


class TestApplicationSettings:
    def test_all_sections_present(self):
        s = ApplicationSettings()
        assert isinstance(s.estimator, EstimatorSettings)
        assert isinstance(s.logging, LoggingSettings)

    def test_to_dict(self):
        d = ApplicationSettings().to_dict()
        assert d["estimator"]["time_per_increment_s"] == 0.5
        assert "log_file" not in d["logging"]

    def test_from_dict_partial(self):
        s = ApplicationSettings.from_dict({"estimator": {"increment_batch_size": 4}})
        assert s.estimator.increment_batch_size == 4
        assert s.estimator.time_per_increment_s == 0.5

    def test_from_dict_rejects_unknown(self):
        with pytest.raises(ValidationError):
            ApplicationSettings.from_dict({"scheduler": {}})


class TestSettingsManager:
    def test_singleton(self):
        assert SettingsManager() is SettingsManager()
        assert get_settings_manager() is SettingsManager()

    def test_update_dotted_key(self):
        manager = get_settings_manager()
        manager.update(**{"estimator.increment_batch_size": 6, "logging.level": "WARNING"})
        assert get_settings().estimator.increment_batch_size == 6
        assert get_settings().logging.level == "WARNING"

    def test_update_unknown_key(self):
        manager = get_settings_manager()
        with pytest.raises(KeyError):
            manager.update(**{"estimator.speed": 1})
        with pytest.raises(KeyError):
            manager.update(**{"scheduler.kind": "qt"})

    def test_update_invalid_value(self):
        with pytest.raises(ValidationError):
            get_settings_manager().update(**{"estimator.time_per_increment_s": -1})

    def test_reset(self):
        get_settings_manager().update(**{"estimator.increment_batch_size": 6})
        s = reset_settings()
        assert s.estimator.increment_batch_size == 1
        assert get_settings_manager().path is None


class TestSettingsFiles:
    def test_toml_round_trip(self, tmp_path):
        get_settings_manager().update(**{"estimator.time_per_increment_s": 1.25})
        path = save_settings(tmp_path / "settings.toml")
        assert path.exists()

        reset_settings()
        s = load_settings(path)
        assert s.estimator.time_per_increment_s == 1.25
        assert get_settings_manager().path == path

    def test_json_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"estimator": {"increment_batch_size": 3}}))
        assert load_settings(path).estimator.increment_batch_size == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.toml")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("estimator: {}")
        with pytest.raises(ValueError):
            load_settings(path)
        with pytest.raises(ValueError):
            save_settings(path)

    def test_save_default_path(self, tmp_path, monkeypatch):
        target = tmp_path / "nested" / "settings.toml"
        monkeypatch.setenv("PROGRESS_REPORTER_SETTINGS_PATH", str(target))
        assert save_settings() == target
        assert target.exists()


class TestEnvironmentSettings:
    def test_load_from_env(self, monkeypatch):
        monkeypatch.setenv("PROGRESS_REPORTER_ESTIMATOR__TIME_PER_INCREMENT_S", "0.25")
        monkeypatch.setenv("PROGRESS_REPORTER_ESTIMATOR__INCREMENT_BATCH_SIZE", "4")
        monkeypatch.setenv("PROGRESS_REPORTER_LOGGING__SHOW_TIME", "false")

        assert get_settings_manager().load_from_env() == 3
        s = get_settings()
        assert s.estimator.time_per_increment_s == 0.25
        assert s.estimator.increment_batch_size == 4
        assert s.logging.show_time is False

    def test_invalid_and_unknown_skipped(self, monkeypatch):
        monkeypatch.setenv("PROGRESS_REPORTER_ESTIMATOR__INCREMENT_BATCH_SIZE", "zero")
        monkeypatch.setenv("PROGRESS_REPORTER_NOPE__FIELD", "1")

        assert get_settings_manager().load_from_env() == 0
        assert get_settings().estimator.increment_batch_size == 1

    def test_auto_load_from_env_path(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.toml"
        path.write_text("[estimator]\nincrement_batch_size = 5\n")
        monkeypatch.setenv("PROGRESS_REPORTER_SETTINGS_PATH", str(path))

        assert get_settings_manager().auto_load() is True
        assert get_settings().estimator.increment_batch_size == 5

    def test_auto_load_local_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        Path("progress_reporter_settings.toml").write_text("[logging]\nlevel = \"DEBUG\"\n")

        assert get_settings_manager().auto_load() is True
        assert get_settings().logging.level == "DEBUG"

    def test_auto_load_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        monkeypatch.setenv("PROGRESS_REPORTER_ESTIMATOR__INCREMENT_BATCH_SIZE", "2")

        assert get_settings_manager().auto_load() is False
        assert get_settings().estimator.increment_batch_size == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
