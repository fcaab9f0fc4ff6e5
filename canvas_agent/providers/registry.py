"""Provider 与模型配置。

本模块将“逻辑模型名”与“具体厂商模型名”解耦：

- 逻辑名（logical_name）：在代码里使用的统一名称，例如 "assistant-chat"。
- provider_model：厂商实际提供的模型 ID，例如 "gpt-4o-mini"。

function_style 决定函数调用在请求体里的写法：
- "functions": 旧版 functions / function_call 字段，结果以 role="function" 回传。
- "tools": 新版 tools / tool_calls 字段，结果以 role="tool" 回传。
"""

from dataclasses import dataclass
from typing import Dict, Literal, Mapping


FunctionStyle = Literal["functions", "tools"]

ASSISTANT_CHAT = "assistant-chat"


@dataclass
class ModelConfig:
    """单个逻辑模型的配置。"""

    logical_name: str
    provider_model: str
    max_tokens: int
    default_temperature: float


@dataclass
class ProviderConfig:
    """某个 Provider 的整体配置。"""

    name: str
    base_url: str
    function_style: FunctionStyle
    models: Dict[str, ModelConfig]


OPENAI_CONFIG = ProviderConfig(
    name="openai",
    base_url="https://api.openai.com/v1",
    function_style="functions",
    models={
        ASSISTANT_CHAT: ModelConfig(
            logical_name=ASSISTANT_CHAT,
            provider_model="gpt-4o-mini",
            max_tokens=2000,
            default_temperature=0.7,
        )
    },
)

KIMI_CONFIG = ProviderConfig(
    name="kimi",
    base_url="https://api.moonshot.cn/v1",
    function_style="tools",
    models={
        ASSISTANT_CHAT: ModelConfig(
            logical_name=ASSISTANT_CHAT,
            provider_model="kimi-k2-turbo-preview",
            max_tokens=8192,
            default_temperature=0.7,
        )
    },
)

GLM_CONFIG = ProviderConfig(
    name="glm",
    base_url="https://open.bigmodel.cn/api/paas/v4",
    function_style="tools",
    models={
        ASSISTANT_CHAT: ModelConfig(
            logical_name=ASSISTANT_CHAT,
            provider_model="glm-4.6",
            max_tokens=8192,
            default_temperature=0.7,
        )
    },
)


PROVIDER_REGISTRY: Mapping[str, ProviderConfig] = {
    "openai": OPENAI_CONFIG,
    "kimi": KIMI_CONFIG,
    "glm": GLM_CONFIG,
}


def get_provider_config(name: str) -> ProviderConfig:
    """根据名称获取 ProviderConfig，名称不区分大小写。"""

    key = name.lower()
    for k, cfg in PROVIDER_REGISTRY.items():
        if k.lower() == key:
            return cfg
    raise KeyError(f"Unknown provider: {name!r}")
