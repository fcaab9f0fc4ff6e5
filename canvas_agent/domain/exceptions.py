"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在编排层或 API 层做统一捕获与用户提示。

错误分类与传播策略：
- UnknownToolError / MissingRequiredParameterError：本轮终止，
  在任何网络调用之前直接给用户一条澄清回复。
- ExecutionError：Canvas 调用失败，由执行器作为返回值交出，
  编排层把错误喂给第二次补全调用，让模型用自然语言解释。
- CompletionServiceError：LLM 调用本身失败，编排层退回本地兜底回复。
"""

from typing import Any, Optional


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "UNKNOWN_TOOL"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 tool_id、endpoint 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class ValidationError(BusinessError):
    """参数或配置校验失败。"""


class UnknownToolError(BusinessError):
    """注册表中不存在该工具 id。"""

    def __init__(self, tool_id: str):
        super().__init__(
            code="UNKNOWN_TOOL",
            message=f"Unknown tool: {tool_id}",
            http_status=404,
            tool_id=tool_id,
        )
        self.tool_id = tool_id


class MissingRequiredParameterError(BusinessError):
    """必填参数缺失或取值非法，必须在网络调用前中止。"""

    def __init__(self, tool_id: str, parameter: str, description: str = "", reason: str = "missing"):
        super().__init__(
            code="MISSING_PARAMETER",
            message=f"Missing required parameter: {parameter}",
            tool_id=tool_id,
            parameter=parameter,
            reason=reason,
        )
        self.tool_id = tool_id
        self.parameter = parameter
        self.description = description
        self.reason = reason


class ExecutionError(BusinessError):
    """Canvas API 调用失败。

    - transport=True: 网络层失败（DNS、超时、连接拒绝），没有 status。
    - transport=False: 服务端返回了非 2xx，status/raw_body 为原始响应。
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        raw_body: Optional[Any] = None,
        transport: bool = False,
    ):
        super().__init__(
            code="EXECUTION_ERROR",
            message=message,
            http_status=status or 502,
            status=status,
            transport=transport,
        )
        self.status = status
        self.raw_body = raw_body
        self.transport = transport


class CompletionServiceError(BusinessError):
    """LLM 补全服务调用失败的基类。"""


class NetworkError(CompletionServiceError):
    """网络层错误，例如连接失败、超时等。"""


class ApiError(CompletionServiceError):
    """第三方 API 返回非 2xx/429 错误时抛出。"""


class RateLimitError(CompletionServiceError):
    """Provider 限流错误，本项目不做重试，由编排层直接走兜底回复。"""
