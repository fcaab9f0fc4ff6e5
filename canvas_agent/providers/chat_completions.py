"""OpenAI 兼容的 /chat/completions 适配器。

本模块负责：

1. 接收统一的 ChatRequest。
2. 按 Provider 的 function_style 将其转换为 HTTP 请求体
   （旧版 functions/function_call 或新版 tools/tool_calls）。
3. 调用 HTTP 接口并处理网络/API 异常。
4. 将响应 JSON 解析为统一的 ChatResult / ChatMessage 结构（含函数调用）。

OpenAI、Kimi、GLM 的接口形状一致，只是地址、模型名和函数调用字段不同，
因此共用这一个客户端，由 ProviderConfig 区分。
"""

import json
from typing import Any, Dict, List, Optional

import httpx

from canvas_agent.domain.exceptions import ApiError, NetworkError, RateLimitError, ValidationError
from canvas_agent.domain.models import ChatChoice, ChatMessage, ChatRequest, ChatResult, ChatUsage
from canvas_agent.infrastructure.logging.logger import logger
from canvas_agent.providers.registry import ModelConfig, ProviderConfig
from canvas_agent.tools.definitions import ToolCall, ToolDef


class ChatCompletionsClient:
    """OpenAI 兼容补全服务的客户端实现。

    - name: Provider 名称（供日志/调试使用）。
    - chat: 对外统一调用入口，返回 ChatResult。
    """

    def __init__(self, settings, config: ProviderConfig):
        # Settings 里包含各 Provider 的 api_key、base_url 和超时配置
        self._settings = settings
        self._config = config
        self.name = config.name

    @property
    def function_style(self) -> str:
        return self._config.function_style

    def _api_key(self) -> Optional[str]:
        return getattr(self._settings, f"{self.name}_api_key", None)

    def _base_url(self) -> str:
        base = getattr(self._settings, f"{self.name}_base_url", None) or self._config.base_url
        return base.rstrip("/")

    def _model_config(self, logical_name: str) -> ModelConfig:
        cfg = self._config.models.get(logical_name)
        if cfg is not None:
            return cfg
        # 未登记的模型名原样透传给厂商
        return ModelConfig(
            logical_name=logical_name,
            provider_model=logical_name,
            max_tokens=2000,
            default_temperature=0.7,
        )

    def chat(self, req: ChatRequest) -> ChatResult:
        """执行一次非流式对话调用。

        步骤：
        1. 读取模型配置（logical model -> provider model）。
        2. 构造 HTTP 请求 payload。
        3. 发送请求并捕获网络错误/限流/服务端错误。
        4. 使用统一的解析函数构造 ChatResult。
        """

        api_key = self._api_key()
        if not api_key:
            # 配置缺失走 ValidationError，方便上层统一处理
            raise ValidationError(code="MISSING_API_KEY", message=f"{self.name.upper()}_API_KEY not set")
        model_cfg = self._model_config(req.model)
        payload = self._build_payload(req, model_cfg)
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = client.post(
                    f"{self._base_url()}/chat/completions",
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {api_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e))
        if resp.status_code == 429:
            raise RateLimitError(code="RATE_LIMIT", message=f"{self.name} rate limit", http_status=429)
        if resp.status_code >= 400:
            # 其他 HTTP 错误统一包装为 ApiError
            raise ApiError(code="API_ERROR", message=resp.text, http_status=resp.status_code)
        try:
            data = resp.json()
        except ValueError:
            raise ApiError(code="API_ERROR", message="Completion service returned a non-JSON body", http_status=502)
        result = self._parse_response(data, req)
        logger.info(
            "Completion finished",
            extra={
                "extra": {
                    "provider": self.name,
                    "model": model_cfg.provider_model,
                    "total_tokens": result.usage.total_tokens if result.usage else None,
                }
            },
        )
        return result

    def _build_payload(self, req: ChatRequest, model_cfg: ModelConfig) -> dict:
        """将 ChatRequest 转成 chat/completions 的请求 JSON。"""

        msgs = [self._message_to_payload(m) for m in req.messages]
        payload: Dict[str, Any] = {
            "model": model_cfg.provider_model,
            "messages": msgs,
            "temperature": req.temperature if req.temperature is not None else model_cfg.default_temperature,
            "max_tokens": req.max_tokens or model_cfg.max_tokens,
            "top_p": req.top_p,
        }
        if req.tools:
            if self.function_style == "functions":
                payload["functions"] = [self._serialize_function(tool) for tool in req.tools]
                payload["function_call"] = "none" if req.tool_choice == "none" else "auto"
            else:
                payload["tools"] = [
                    {"type": "function", "function": self._serialize_function(tool)} for tool in req.tools
                ]
                payload["tool_choice"] = req.tool_choice
        return payload

    def _parse_response(self, data: dict, req: ChatRequest) -> ChatResult:
        """将原始响应 JSON 解析为统一的 ChatResult。"""

        if not isinstance(data, dict):
            raise ApiError(code="API_ERROR", message="Unexpected completion payload", http_status=502)
        choices: List[ChatChoice] = []
        for i, ch in enumerate(data.get("choices") or []):
            msg = ch.get("message") or {}
            cm = self._build_chat_message(msg)
            choices.append(ChatChoice(index=i, message=cm, finish_reason=ch.get("finish_reason")))
        usage_raw = data.get("usage") or {}
        usage = ChatUsage(
            prompt_tokens=usage_raw.get("prompt_tokens", 0),
            completion_tokens=usage_raw.get("completion_tokens", 0),
            total_tokens=usage_raw.get("total_tokens", 0),
        )
        return ChatResult(provider=self.name, model=req.model, choices=choices, usage=usage, raw=data)

    @staticmethod
    def _serialize_function(tool: ToolDef) -> Dict[str, Any]:
        """把内部的 ToolDef 转成 function 描述（JSON Schema 参数）。"""

        properties: Dict[str, Any] = {}
        required: List[str] = []
        for name, param in tool.params.items():
            properties[name] = param.schema or {"type": "string"}
            if param.description:
                properties[name] = {
                    **properties[name],
                    "description": param.description,
                }
            if param.required:
                required.append(name)
        return {
            "name": tool.name,
            "description": tool.description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        }

    def _build_chat_message(self, payload: Dict[str, Any]) -> ChatMessage:
        """将单条厂商 message 转换为 ChatMessage。

        tool_calls（新版）与 function_call（旧版）都会被解析为统一的 ToolCall 列表。
        """

        tool_calls: List[ToolCall] = []
        for idx, call in enumerate(payload.get("tool_calls") or []):
            func = call.get("function") or {}
            tool_calls.append(
                ToolCall(
                    id=call.get("id") or f"tool_call_{idx}",
                    name=func.get("name") or call.get("name") or "",
                    arguments=self._parse_arguments(func.get("arguments")),
                )
            )

        function_call = payload.get("function_call")
        if function_call:
            tool_calls.append(
                ToolCall(
                    id=function_call.get("id") or "function_call",
                    name=function_call.get("name") or "",
                    arguments=self._parse_arguments(function_call.get("arguments")),
                )
            )
        return ChatMessage(
            role=payload.get("role") or "assistant",
            content=payload.get("content"),
            tool_calls=tool_calls or None,
            tool_call_id=payload.get("tool_call_id"),
        )

    @staticmethod
    def _parse_arguments(raw: Any) -> Dict[str, Any]:
        """解析函数调用的 arguments 字段。

        厂商会把 arguments 作为 JSON 字符串返回，这里做一层 json.loads，
        失败时保留原始字符串到 `_raw`，交给参数绑定阶段丢弃。
        """

        if isinstance(raw, dict):
            return raw
        if isinstance(raw, str):
            if not raw.strip():
                return {}
            try:
                decoded = json.loads(raw)
            except json.JSONDecodeError:
                return {"_raw": raw}
            return decoded if isinstance(decoded, dict) else {"_raw": raw}
        return {}

    def _message_to_payload(self, message: ChatMessage) -> Dict[str, Any]:
        role = message.role
        if role in ("function", "tool"):
            if self.function_style == "functions":
                return {"role": "function", "name": message.name or "", "content": message.content}
            return {"role": "tool", "tool_call_id": message.tool_call_id or "", "content": message.content}

        payload: Dict[str, Any] = {"role": role, "content": message.content}
        if message.tool_calls:
            if self.function_style == "functions":
                call = message.tool_calls[0]
                payload["function_call"] = {
                    "name": call.name,
                    "arguments": json.dumps(call.arguments, ensure_ascii=False),
                }
            else:
                payload["tool_calls"] = [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {
                            "name": call.name,
                            "arguments": json.dumps(call.arguments, ensure_ascii=False),
                        },
                    }
                    for call in message.tool_calls
                ]
        return payload
