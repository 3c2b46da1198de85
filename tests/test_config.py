import pytest
from pydantic import ValidationError

from api_mock_engine.config import load_generate_config, load_server_config


class TestServerConfig:
    def test_defaults(self, monkeypatch):
        for key in ("HOST", "PORT", "GRACE_PERIOD", "SEED", "LOG_LEVEL", "SERVER_NAME"):
            monkeypatch.delenv(f"MOCK_ENGINE_{key}", raising=False)
        cfg = load_server_config()
        assert cfg.port == 8080
        assert cfg.host == "127.0.0.1"
        assert cfg.grace_period == 5.0
        assert cfg.seed is None
        assert cfg.server_name == "api-mock-engine"

    def test_environment_overrides_defaults(self, monkeypatch):
        monkeypatch.setenv("MOCK_ENGINE_PORT", "9000")
        monkeypatch.setenv("MOCK_ENGINE_SEED", "12")
        monkeypatch.setenv("MOCK_ENGINE_LOG_LEVEL", "debug")
        cfg = load_server_config()
        assert cfg.port == 9000
        assert cfg.seed == 12
        assert cfg.log_level == "DEBUG"

    def test_explicit_overrides_win(self, monkeypatch):
        monkeypatch.setenv("MOCK_ENGINE_PORT", "9000")
        assert load_server_config(port=7000, host=None).port == 7000

    def test_invalid_port(self, monkeypatch):
        monkeypatch.delenv("MOCK_ENGINE_PORT", raising=False)
        with pytest.raises(ValidationError):
            load_server_config(port=70000)

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            load_server_config(log_level="chatty")


class TestGenerateConfig:
    def test_default_seed_is_time_derived(self):
        a = load_generate_config()
        assert a.count == 1
        assert a.seed > 0

    def test_explicit_values(self):
        cfg = load_generate_config(seed=42, count=3)
        assert (cfg.seed, cfg.count) == (42, 3)

    def test_zero_count_rejected(self):
        with pytest.raises(ValidationError):
            load_generate_config(count=0)
