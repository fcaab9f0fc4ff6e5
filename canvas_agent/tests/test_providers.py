import pytest

from canvas_agent.providers import create_provider
from canvas_agent.providers.chat_completions import ChatCompletionsClient
from canvas_agent.providers.registry import get_provider_config


def test_create_provider_default(monkeypatch):
    class DummySettings:
        default_provider = "openai"
        openai_api_key = "sk-0123456789"
        openai_base_url = "https://api.openai.com/v1"
        http_timeout = 1.0

    monkeypatch.setattr("canvas_agent.providers.settings", DummySettings())
    provider = create_provider()
    assert isinstance(provider, ChatCompletionsClient)
    assert provider.name == "openai"
    assert provider.function_style == "functions"


def test_create_provider_explicit(monkeypatch):
    class DummySettings:
        default_provider = "openai"
        kimi_api_key = "k-0123456789"
        http_timeout = 1.0
        kimi_base_url = "https://api.moonshot.cn/v1"

    monkeypatch.setattr("canvas_agent.providers.settings", DummySettings())
    provider = create_provider("KIMI")
    assert provider.name == "kimi"
    assert provider.function_style == "tools"


def test_unknown_provider():
    with pytest.raises(KeyError):
        create_provider("nope")


def test_provider_models():
    assert get_provider_config("openai").models["assistant-chat"].provider_model == "gpt-4o-mini"
    assert get_provider_config("glm").models["assistant-chat"].provider_model == "glm-4.6"
    assert get_provider_config("GLM").function_style == "tools"
