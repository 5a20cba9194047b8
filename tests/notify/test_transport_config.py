"""TransportConfig + load_transport_config 单元测试

验证环境变量映射、默认值、非法值回退。
"""

import pytest
from levelup.notify import (
    LogTransport,
    TelegramTransport,
    TransportConfig,
    create_transport,
    load_transport_config,
)
from pydantic import SecretStr, ValidationError

_ENV_VARS = (
    "LEVELUP_TRANSPORT_MODE",
    "LEVELUP_BOT_TOKEN",
    "LEVELUP_TELEGRAM_API_URL",
    "LEVELUP_TRANSPORT_TIMEOUT_S",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestTransportConfig:
    """TransportConfig 数据模型测试"""

    def test_default_values(self):
        config = TransportConfig()
        assert config.mode == "log"
        assert config.bot_token.get_secret_value() == ""
        assert config.api_url == "https://api.telegram.org"
        assert config.timeout_s == 10.0

    def test_token_hidden_in_repr(self):
        config = TransportConfig(bot_token=SecretStr("123:secret"))
        assert "123:secret" not in repr(config)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            TransportConfig(timeout_s=0)


class TestLoadTransportConfig:
    """load_transport_config() 环境变量映射测试"""

    def test_default_when_no_env(self, clean_env):
        config = load_transport_config()
        assert config.mode == "log"

    def test_telegram_from_env(self, clean_env):
        clean_env.setenv("LEVELUP_TRANSPORT_MODE", "telegram")
        clean_env.setenv("LEVELUP_BOT_TOKEN", "123:abc")
        clean_env.setenv("LEVELUP_TELEGRAM_API_URL", "http://bot-api:8081")
        clean_env.setenv("LEVELUP_TRANSPORT_TIMEOUT_S", "3.5")

        config = load_transport_config()
        assert config.mode == "telegram"
        assert config.bot_token.get_secret_value() == "123:abc"
        assert config.api_url == "http://bot-api:8081"
        assert config.timeout_s == 3.5

    def test_invalid_mode_falls_back(self, clean_env):
        clean_env.setenv("LEVELUP_TRANSPORT_MODE", "carrier-pigeon")
        assert load_transport_config().mode == "log"

    @pytest.mark.parametrize("value", ["abc", "0", "-2"])
    def test_invalid_timeout_falls_back(self, clean_env, value):
        clean_env.setenv("LEVELUP_TRANSPORT_TIMEOUT_S", value)
        assert load_transport_config().timeout_s == 10.0


class TestCreateTransport:
    def test_log_mode(self):
        assert isinstance(create_transport(TransportConfig()), LogTransport)

    async def test_telegram_mode(self):
        transport = create_transport(
            TransportConfig(mode="telegram", bot_token=SecretStr("123:abc"))
        )
        assert isinstance(transport, TelegramTransport)
        await transport.aclose()
