from pathlib import Path

import pytest

from ordercore.infrastructure.persistence.locks import DEFAULT_LOCK_TIMEOUT
from ordercore.infrastructure.settings import DEFAULT_DATA_DIR, Settings, parse_log_level


class TestSettings:

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.data_dir == DEFAULT_DATA_DIR
        assert settings.lock_timeout == DEFAULT_LOCK_TIMEOUT
        assert settings.log_level == "WARNING"

    def test_overrides(self, tmp_path):
        settings = Settings.from_env(
            {
                "ORDERCORE_DATA_DIR": str(tmp_path),
                "ORDERCORE_LOCK_TIMEOUT": "0.5",
                "ORDERCORE_LOG_LEVEL": "debug",
            }
        )
        assert settings.data_dir == Path(tmp_path)
        assert settings.lock_timeout == 0.5
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize(
        "env",
        [
            {"ORDERCORE_LOCK_TIMEOUT": "soon"},
            {"ORDERCORE_LOCK_TIMEOUT": "-1"},
            {"ORDERCORE_LOG_LEVEL": "LOUD"},
        ],
    )
    def test_bad_values_rejected(self, env):
        with pytest.raises(ValueError):
            Settings.from_env(env)

    def test_bad_log_level_names_the_variable(self):
        with pytest.raises(ValueError, match="ORDERCORE_LOG_LEVEL: Unknown log level 'LOUD'"):
            Settings.from_env({"ORDERCORE_LOG_LEVEL": "LOUD"})


class TestParseLogLevel:

    @pytest.mark.parametrize("raw, expected", [("debug", "DEBUG"), (" Info ", "INFO")])
    def test_normalises_known_levels(self, raw, expected):
        assert parse_log_level(raw) == expected

    @pytest.mark.parametrize("raw", ["bogus", "", "10"])
    def test_unknown_levels_rejected(self, raw):
        with pytest.raises(ValueError, match="Unknown log level"):
            parse_log_level(raw)
