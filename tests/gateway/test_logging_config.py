"""日志配置测试 -- token 脱敏 + 级别解析"""

import logging

import pytest
from levelup.gateway.middleware.logging_config import redact_bot_token, setup_logging


class TestRedactBotToken:
    def test_token_in_url_redacted(self):
        event = {
            "event": "telegram_request_failed",
            "url": "https://api.telegram.org/bot123456:AAH-x_yZ/sendMessage",
        }

        result = redact_bot_token(None, "error", event)

        assert result["url"] == "https://api.telegram.org/bot<redacted>/sendMessage"

    def test_other_fields_untouched(self):
        event = {"event": "task_reminders_completed", "reminders_sent": 3, "note": "robot"}

        assert redact_bot_token(None, "info", dict(event)) == event


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    @pytest.mark.parametrize(("value", "expected"), [("debug", logging.DEBUG), ("LOUD", logging.INFO)])
    def test_level_from_env(self, monkeypatch, value, expected):
        monkeypatch.setenv("LEVELUP_LOG_LEVEL", value)

        setup_logging()

        assert logging.getLogger().level == expected
        assert logging.getLogger("httpx").level >= logging.WARNING

    def test_json_format_single_handler(self, monkeypatch):
        monkeypatch.setenv("LEVELUP_LOG_FORMAT", "json")

        setup_logging()
        setup_logging()

        assert len(logging.getLogger().handlers) == 1
