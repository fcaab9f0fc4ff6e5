"""LLM Provider 集成层。

该包下的模块负责：
- 定义补全服务抽象接口 (base)。
- 维护 Provider 与模型配置 (registry)。
- 提供 OpenAI 兼容接口的具体实现 (chat_completions)。
"""

from typing import Literal, Optional

from canvas_agent.config.settings import settings
from canvas_agent.providers.base import CompletionClient
from canvas_agent.providers.chat_completions import ChatCompletionsClient
from canvas_agent.providers.registry import get_provider_config


def create_provider(name: Optional[str] = None) -> CompletionClient:
    """根据名称创建 Provider 实例，默认取配置中的 provider。

    Raises:
        KeyError: 未登记的 Provider 名称。
    """

    provider_name = (name or getattr(settings, "default_provider", "openai")).lower()
    return ChatCompletionsClient(settings, get_provider_config(provider_name))


DefaultProviderName = Literal["openai", "kimi", "glm"]
