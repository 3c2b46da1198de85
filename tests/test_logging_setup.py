import logging

from api_mock_engine.logging_setup import _dict_config, configure_logging


class TestLoggingSetup:
    def test_uvicorn_loggers_share_console_handler(self):
        config = _dict_config("WARNING")
        assert config["root"] == {"level": "WARNING", "handlers": ["console"]}
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
            assert config["loggers"][name]["handlers"] == ["console"]
            assert config["loggers"][name]["propagate"] is False

    def test_existing_handlers_only_adjust_level(self):
        root = logging.getLogger()
        handler = logging.NullHandler()
        root.addHandler(handler)
        previous_level = root.level
        try:
            before = list(root.handlers)
            configure_logging("DEBUG")
            assert root.handlers == before
            assert root.level == logging.DEBUG
        finally:
            root.removeHandler(handler)
            root.setLevel(previous_level)
