"""对话编排核心模块。

一轮 send_message 的流程（由 flows.graph 中的 LangGraph 状态图驱动）：

1. 用户消息写入对话记录。
2. 组装请求：system prompt + 最近的对话记录 + 根据当前上下文重新生成的 system 消息。
3. 调用补全服务；若模型发起函数调用，交给 ToolResolver 处理，
   再带着函数结果做第二次补全调用，得到最终自然语言回复。
4. 对话记录只保存用户消息与助手的纯文本回复，函数调用的中间消息不进入记录。

补全服务失败时退回本地关键词兜底回复，保证每轮都有文本返回。
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from uuid import uuid4

from canvas_agent.config.settings import settings
from canvas_agent.domain.models import ChatMessage, TurnResult
from canvas_agent.flows.graph import build_turn_graph
from canvas_agent.flows.resolvers import ToolResolver
from canvas_agent.flows.state import TurnPhase, TurnState
from canvas_agent.infrastructure.logging.logger import logger
from canvas_agent.providers.base import CompletionClient


DEFAULT_REPLY = "Sorry, I could not generate a response."

HistoryItem = Union[ChatMessage, Dict[str, Any]]


@dataclass
class AgentConfig:
    agent_type: str
    provider: str
    model: str
    temperature: float = 0.7
    max_tokens: Optional[int] = None
    max_context_messages: int = 40


class ConversationOrchestrator:
    """一次一轮的工具调用往返状态机，具体技能由 ToolResolver 决定。

    子类负责：
    - _system_messages(): 放在对话记录之前的 system 消息。
    - _context_messages(): 放在对话记录之后、每轮重新生成的上下文消息。
    - _fallback_reply(user_text): 补全服务不可用时的本地回复。
    """

    def __init__(
        self,
        provider_client: CompletionClient,
        resolver: ToolResolver,
        config: AgentConfig,
    ):
        self._provider_client = provider_client
        self._resolver = resolver
        self._config = config
        self._messages: List[ChatMessage] = []
        self._phase: TurnPhase = "idle"
        self._graph = build_turn_graph(
            provider_client,
            resolver,
            self._fallback_reply,
            on_phase=self._set_phase,
        )

    @property
    def phase(self) -> TurnPhase:
        return self._phase

    @property
    def config(self) -> AgentConfig:
        return self._config

    def _set_phase(self, phase: TurnPhase) -> None:
        self._phase = phase

    # ---- session lifecycle ----

    def hydrate_messages(self, history: Optional[Iterable[HistoryItem]]) -> None:
        """用外部保存的对话记录替换当前记录，只保留 user / assistant 消息。"""

        restored: List[ChatMessage] = []
        for item in history or []:
            if isinstance(item, ChatMessage):
                role, content = item.role, item.content
            elif isinstance(item, Mapping):
                role, content = item.get("role"), item.get("content")
            else:
                continue
            if role in ("user", "assistant") and isinstance(content, str):
                restored.append(ChatMessage(role=role, content=content))
        self._messages = restored

    def clear_chat(self) -> None:
        self._messages = []

    def history(self) -> List[Dict[str, str]]:
        return [{"role": m.role, "content": m.content or ""} for m in self._messages]

    # ---- turn ----

    def send_message(self, user_text: str) -> TurnResult:
        log_ctx = {"agent_type": self._config.agent_type, "turn_id": f"t-{uuid4().hex}"}
        self._messages.append(ChatMessage(role="user", content=user_text))
        self._log(logging.INFO, "Turn started", log_ctx, transcript_size=len(self._messages))

        state: TurnState = {
            "provider": self._config.provider,
            "model": self._config.model,
            "temperature": self._config.temperature,
            "max_tokens": self._config.max_tokens,
            "user_text": user_text,
            "messages": self._build_request_messages(),
            "tools": self._resolver.function_specs(),
            "completions": 0,
            "failed": False,
            "terminal": False,
            "fallback": False,
        }
        try:
            final: TurnState = self._graph.invoke(state)
        finally:
            self._phase = "idle"

        action = final.get("action")
        if final.get("fallback"):
            self._log(logging.WARNING, "Turn answered by fallback", log_ctx, completions=final.get("completions"))
            return TurnResult(message=final.get("reply") or DEFAULT_REPLY, action=action, fallback=True)

        if final.get("terminal"):
            message = final.get("reply") or DEFAULT_REPLY
            self._messages.append(ChatMessage(role="assistant", content=message))
            self._log(logging.INFO, "Turn ended before tool execution", log_ctx)
            return TurnResult(message=message)

        message = (final.get("reply") or "").strip() or self._default_reply(action)
        self._messages.append(ChatMessage(role="assistant", content=self._transcript_text(message, action)))
        self._log(
            logging.INFO,
            "Turn finished",
            log_ctx,
            completions=final.get("completions"),
            action=(action or {}).get("type") or (action or {}).get("tool"),
        )
        return TurnResult(message=message, action=action)

    def _build_request_messages(self) -> List[ChatMessage]:
        messages = [ChatMessage(role="system", content=text) for text in self._system_messages()]
        messages.extend(
            ChatMessage(role=m.role, content=m.content)
            for m in self._messages[-self._config.max_context_messages:]
        )
        messages.extend(ChatMessage(role="system", content=text) for text in self._context_messages())
        return messages

    # ---- hooks ----

    def _system_messages(self) -> List[str]:
        return []

    def _context_messages(self) -> List[str]:
        return []

    def _fallback_reply(self, user_text: str) -> str:
        return DEFAULT_REPLY

    def _default_reply(self, action: Optional[Dict[str, Any]]) -> str:
        return DEFAULT_REPLY

    def _transcript_text(self, message: str, action: Optional[Dict[str, Any]]) -> str:
        return message

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})


def default_config(agent_type: str, provider: Optional[str], max_tokens: int) -> AgentConfig:
    return AgentConfig(
        agent_type=agent_type,
        provider=(provider or settings.default_provider).lower(),
        model=settings.default_model,
        temperature=settings.temperature,
        max_tokens=max_tokens,
        max_context_messages=settings.max_context_messages,
    )
