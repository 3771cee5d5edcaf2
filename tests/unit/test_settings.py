"""Unit tests for MonitorSettings."""

import pytest
from pydantic import ValidationError

from jsonprobe.config.settings import MonitorSettings


_REQUIRED_ENV = {
    "JSONPROBE_SOURCE_URL": "https://lists.example/urls.txt",
    "JSONPROBE_CORS_PROXY": "https://cors.example",
}


class TestMonitorSettings:
    def test_loads_with_required_env_vars(self, monkeypatch: pytest.MonkeyPatch):
        for k, v in _REQUIRED_ENV.items():
            monkeypatch.setenv(k, v)

        settings = MonitorSettings()

        assert settings.source_url == "https://lists.example/urls.txt"
        assert settings.cors_proxy == "https://cors.example"

    def test_defaults_are_correct(self, monkeypatch: pytest.MonkeyPatch):
        for k, v in _REQUIRED_ENV.items():
            monkeypatch.setenv(k, v)

        settings = MonitorSettings()

        assert settings.port == 3000
        assert settings.log_level == "INFO"
        assert settings.start_scheduler is True
        assert settings.pool_width == 20
        assert settings.request_timeout_seconds == 20.0
        assert settings.user_agent == "Mozilla/5.0"
        assert settings.max_body_bytes == 5_000_000
        assert settings.batch_pause_seconds == 1.0
        assert settings.empty_list_retry_seconds == 5.0
        assert settings.history_cap == 1000

    def test_env_prefix_is_jsonprobe(self, monkeypatch: pytest.MonkeyPatch):
        for k, v in _REQUIRED_ENV.items():
            monkeypatch.setenv(k, v)
        monkeypatch.setenv("JSONPROBE_POOL_WIDTH", "7")
        monkeypatch.setenv("JSONPROBE_HISTORY_CAP", "25")

        settings = MonitorSettings()
        assert settings.pool_width == 7
        assert settings.history_cap == 25

    def test_missing_required_field_raises(self, monkeypatch: pytest.MonkeyPatch):
        for k in _REQUIRED_ENV:
            monkeypatch.delenv(k, raising=False)

        with pytest.raises(ValidationError):
            MonitorSettings()

    @pytest.mark.parametrize("width", [0, -1, 201])
    def test_pool_width_bounds(self, width: int):
        with pytest.raises(ValidationError):
            MonitorSettings(
                source_url="https://s.test", cors_proxy="https://p.test", pool_width=width
            )

    def test_history_cap_must_be_positive(self):
        with pytest.raises(ValidationError):
            MonitorSettings(
                source_url="https://s.test", cors_proxy="https://p.test", history_cap=0
            )
