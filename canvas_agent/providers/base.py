"""Provider 抽象接口。

编排层不直接依赖具体厂商的 HTTP 接口，而是依赖此协议：

- 每个 OpenAI 兼容的补全服务都通过 CompletionClient 接入。
- 负责：将 ChatRequest 转成具体 API 请求，并把响应 JSON 解析为 ChatResult。

测试中可以用任意实现了 chat() 的假对象替换真实 Provider。
"""

from typing import Protocol

from canvas_agent.domain.models import ChatRequest, ChatResult


class CompletionClient(Protocol):
    """LLM 补全服务客户端协议。

    实现者需要提供：
    - name: Provider 名称，用于日志。
    - chat(req): 执行一次非流式调用，失败时抛出 CompletionServiceError 的子类。
    """

    name: str

    def chat(self, req: ChatRequest) -> ChatResult:
        ...
