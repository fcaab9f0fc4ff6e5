"""对外 API 服务模块。

提供简化的函数接口供 Web 层调用：工具建议、目录列表、直接执行 Canvas 工具，
以及创建两种对话助手。
"""

from typing import Any, Dict, List, Optional

from canvas_agent.agents.canvas_assistant import CanvasAssistant
from canvas_agent.agents.workspace_assistant import WorkspaceAssistant
from canvas_agent.config.settings import settings
from canvas_agent.domain.exceptions import BusinessError
from canvas_agent.flows.resolvers import CanvasToolResolver
from canvas_agent.infrastructure.logging.logger import logger
from canvas_agent.tools.definitions import ToolDefinition
from canvas_agent.tools.executor import CanvasExecutor, canvas_base_url
from canvas_agent.tools.matcher import find_relevant_tools
from canvas_agent.tools.registry import default_registry


def _tool_summary(tool: ToolDefinition) -> Dict[str, Any]:
    return {"id": tool.id, "name": tool.name, "description": tool.description}


def _tool_detail(tool: ToolDefinition) -> Dict[str, Any]:
    payload = _tool_summary(tool)
    payload.update(
        {
            "endpoint": tool.endpoint,
            "method": tool.method,
            "parameters": [
                {"name": p.name, "type": p.type, "required": p.required, "description": p.description}
                for p in tool.parameters
            ],
            "examples": list(tool.examples),
        }
    )
    return payload


def suggest_tools(query: str) -> List[Dict[str, Any]]:
    """按关键词给出最多 5 个候选工具（不调用 LLM，不访问网络）。"""

    return [_tool_detail(match.tool) for match in find_relevant_tools(query)]


def list_tools() -> List[Dict[str, Any]]:
    """列出整个 Canvas 工具目录。"""

    return [_tool_summary(tool) for tool in default_registry().list_tools()]


def run_canvas_tool(
    tool_id: str,
    arguments: Optional[Dict[str, Any]] = None,
    token: Optional[str] = None,
    domain: Optional[str] = None,
) -> Dict[str, Any]:
    """直接执行一个 Canvas 工具。

    Returns:
        成功时 {success, tool, name, endpoint, data}；
        失败时 {success: False, tool, error, code?/status?}。
    """

    domain = domain or settings.canvas_domain
    token = token or settings.canvas_api_token
    if not domain or not token:
        return {"success": False, "tool": tool_id, "error": "Canvas token and domain are required"}
    resolver = CanvasToolResolver(
        executor=CanvasExecutor(),
        base_url=canvas_base_url(domain),
        token=token,
    )
    try:
        return resolver.run_tool(tool_id, arguments)
    except BusinessError as e:
        logger.warning(
            f"Canvas tool rejected: {e.message}",
            extra={"extra": {"tool_id": tool_id, "code": e.code}},
        )
        return {"success": False, "tool": tool_id, "error": e.message, "code": e.code}


def create_canvas_assistant(
    token: Optional[str] = None,
    domain: Optional[str] = None,
    provider_name: Optional[str] = None,
) -> CanvasAssistant:
    """为一个浏览器会话创建 Canvas 助手（会话之间不共享状态）。"""

    return CanvasAssistant(token=token, domain=domain, provider_name=provider_name)


def create_workspace_assistant(provider_name: Optional[str] = None) -> WorkspaceAssistant:
    return WorkspaceAssistant(provider_name=provider_name)
