"""Tests for Settings."""

import pytest
from pydantic import ValidationError

from adwarn.config import Settings


class TestSettings:
    def test_monitored_icao_list(self):
        config = Settings(monitored_icaos=" sbmq, SBBE ,,sbgr ")
        assert config.monitored_icao_list == ["SBMQ", "SBBE", "SBGR"]

    def test_empty_monitored_icaos(self):
        assert Settings(monitored_icaos="").monitored_icao_list == []

    def test_env_file_configured(self):
        assert Settings.model_config["env_file"] == ".env"

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("REDEMET_API_KEY", "from-env")
        monkeypatch.setenv("CHECK_INTERVAL_SECONDS", "120")

        config = Settings()

        assert config.redemet_api_key == "from-env"
        assert config.check_interval_seconds == 120

    @pytest.mark.parametrize("interval", [59, 3601])
    def test_check_interval_bounds(self, interval):
        with pytest.raises(ValidationError):
            Settings(check_interval_seconds=interval)
