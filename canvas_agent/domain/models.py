"""统一的对话与结果数据模型。

本模块定义了 Agent 内部在不同 Provider 之间共享的标准数据结构：

- ChatMessage: 一条对话消息（system/user/assistant/function/tool）。
- ChatRequest: 发给底层 LLM Provider 的完整请求。
- ChatResult: 从 Provider 解析后的统一响应结果。
- TurnResult: 一轮 send_message 返回给 UI 的结果（文本 + 可选动作）。

所有 Provider 适配器都必须只依赖这些模型，
并负责在各自的 API JSON 和这些模型之间做转换。
"""

from dataclasses import dataclass, field
from typing import Literal, Optional, Any, Dict, List, TYPE_CHECKING

if TYPE_CHECKING:
    # 仅在类型检查时导入，避免运行时循环依赖
    from canvas_agent.tools.definitions import ToolCall, ToolDef


# LLM 消息角色类型（function 为旧版函数调用结果，tool 为新版 tool_calls 结果）
Role = Literal["system", "user", "assistant", "function", "tool"]


@dataclass
class ChatMessage:
    """一条对话消息，既可用于请求，也可用于响应。

    - role: 消息角色，如 system/user/assistant。
    - content: 纯文本内容；模型发起函数调用时可以为 None。
    - meta: 附加元数据，不直接发给 Provider，主要用于日志。
    - tool_calls: 当 role 为 "assistant" 且模型触发函数调用时，
      这里保存模型发起的调用列表。
    - tool_call_id: 当 role 为 "tool" 时，用于关联某一次工具调用。
    - name: 当 role 为 "function" 时，对应被调用的函数名。
    """

    role: Role
    content: Optional[str]
    meta: Dict[str, Any] = field(default_factory=dict)
    tool_calls: Optional[List["ToolCall"]] = None
    tool_call_id: Optional[str] = None
    name: Optional[str] = None


@dataclass
class ChatRequest:
    """一次完整的补全请求。

    Provider 适配层负责把本结构转换成各家 API 的 JSON 请求体。
    """

    provider: str  # 逻辑 Provider 名，如 "openai"
    model: str  # 逻辑模型名，如 "assistant-chat"（再由 registry 映射为真实模型名）
    messages: List[ChatMessage]
    temperature: float = 0.7
    top_p: float = 1.0
    max_tokens: Optional[int] = None
    # 可调用函数的 schema 列表，由 Provider 转成 functions 或 tools 字段
    tools: Optional[List["ToolDef"]] = None
    # 函数调用是否可选；编排层始终使用 "auto"
    tool_choice: Literal["auto", "none", "required"] = "auto"


@dataclass
class ChatUsage:
    """Provider 返回的 token 统计信息（统一格式）。"""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass
class ChatChoice:
    """单个候选回答（目前只用 index=0 的一条）。"""

    index: int
    message: ChatMessage
    finish_reason: Optional[str] = None


@dataclass
class ChatResult:
    """一次补全调用的最终结果。

    - provider: 逻辑 Provider 名。
    - model: 逻辑模型名。
    - choices: 一个或多个候选回答。
    - usage: 可选的 token 使用统计。
    - raw: 原始响应 JSON，用于调试或日志记录。
    """

    provider: str
    model: str
    choices: List[ChatChoice]
    usage: Optional[ChatUsage] = None
    raw: Optional[dict] = None


@dataclass
class TurnResult:
    """一轮对话交给 UI 的结果。

    action 在 Canvas 模式下为 {tool, name, endpoint, data}，
    在工作区模式下为 {type, content?, language?}；本轮结束后核心不再持有。
    """

    message: str
    action: Optional[Dict[str, Any]] = None
    fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"message": self.message}
        if self.action is not None:
            payload["action"] = self.action
        return payload
