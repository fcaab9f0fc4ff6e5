"""Canvas REST 调用执行器。

执行器从不向外抛异常：URL 非法、网络失败或非 2xx 响应都会被包装成
ToolResult(ok=False, error=ExecutionError(...)) 交给编排层，
由编排层把错误喂给第二次补全调用，让模型用自然语言解释。
"""

from typing import Any, Optional

import httpx

from canvas_agent.config.settings import settings
from canvas_agent.domain.exceptions import ExecutionError
from canvas_agent.infrastructure.logging.logger import logger
from .definitions import BoundRequest, ToolResult


def canvas_base_url(domain: str) -> str:
    """把 "school.instructure.com" / "https://school.instructure.com/" 统一成 API 前缀。"""

    host = (domain or "").strip()
    for scheme in ("https://", "http://"):
        if host.lower().startswith(scheme):
            host = host[len(scheme):]
    host = host.rstrip("/")
    return f"https://{host}/api/v1"


def _error_message(resp: httpx.Response, body: Any) -> str:
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            first = errors[0]
            if isinstance(first, dict) and first.get("message"):
                return str(first["message"])
        if isinstance(body.get("message"), str) and body["message"]:
            return body["message"]
    return resp.text or f"Canvas API request failed with status {resp.status_code}"


def _decode_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


class CanvasExecutor:
    """对 BoundRequest 发起一次带 Bearer Token 的 HTTP 调用。"""

    def __init__(self, timeout: Optional[float] = None):
        self._timeout = timeout or settings.http_timeout

    def execute(self, bound: BoundRequest, token: str) -> ToolResult:
        headers = dict(bound.headers)
        headers["Accept"] = "application/json"
        headers["Authorization"] = f"Bearer {token}"
        try:
            with httpx.Client(timeout=self._timeout, trust_env=False) as client:
                resp = client.request(bound.method, bound.url, headers=headers)
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            # InvalidURL: 超长 URL 或域名含控制字符，请求根本没有发出
            logger.error(
                "Canvas request failed",
                extra={"extra": {"method": bound.method, "endpoint": bound.url, "error": str(exc)}},
            )
            return ToolResult(ok=False, error=ExecutionError(message=str(exc) or "Network error", transport=True))

        body = _decode_body(resp)
        if 200 <= resp.status_code < 300:
            logger.info(
                "Canvas request succeeded",
                extra={"extra": {"method": bound.method, "endpoint": bound.url, "status": resp.status_code}},
            )
            return ToolResult(ok=True, status=resp.status_code, data=body)

        message = _error_message(resp, body)
        logger.warning(
            "Canvas request returned error",
            extra={"extra": {"method": bound.method, "endpoint": bound.url, "status": resp.status_code}},
        )
        return ToolResult(
            ok=False,
            status=resp.status_code,
            error=ExecutionError(message=message, status=resp.status_code, raw_body=body),
        )
