"""Tool resolvers plugged into the turn graph.

A resolver owns one conversation skill: it advertises the function schemas
sent with every completion call and turns a model function call into a
``Resolution`` for the second completion pass.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from canvas_agent.domain.exceptions import MissingRequiredParameterError, UnknownToolError
from canvas_agent.infrastructure.logging.logger import logger
from canvas_agent.tools.binder import bind_request
from canvas_agent.tools.definitions import ToolCall, ToolDef, ToolDefinition
from canvas_agent.tools.executor import CanvasExecutor
from canvas_agent.tools.registry import ToolRegistry, default_registry


@dataclass
class Resolution:
    """Outcome of resolving one function call.

    ``content`` is the function-role message fed to the second completion
    call. When ``reply`` is set the turn ends immediately with that text and
    no further completion call is made.
    """

    content: str
    action: Optional[Dict[str, Any]] = None
    reply: Optional[str] = None

    @property
    def terminal(self) -> bool:
        return self.reply is not None


class ToolResolver(Protocol):
    name: str

    def function_specs(self) -> List[ToolDef]:
        ...

    def resolve(self, call: ToolCall) -> Resolution:
        ...


def unknown_tool_reply(name: str) -> str:
    return f"Sorry, I don't know how to use the tool '{name}'."


def missing_parameter_reply(tool: ToolDefinition, exc: MissingRequiredParameterError) -> str:
    label = f"{exc.parameter} ({exc.description})" if exc.description else exc.parameter
    if exc.reason == "invalid":
        return f"The value given for {label} is not valid for {tool.name}. Could you provide it again?"
    return f"I need the {label} to use {tool.name}. Could you provide it?"


class CanvasToolResolver:
    """External-tools skill: Canvas catalog functions executed over HTTP."""

    name = "canvas"

    def __init__(
        self,
        registry: Optional[ToolRegistry] = None,
        executor: Optional[CanvasExecutor] = None,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
    ):
        self._registry = registry or default_registry()
        self._executor = executor or CanvasExecutor()
        self._base_url = base_url
        self._token = token

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def connected(self) -> bool:
        return bool(self._base_url and self._token)

    def function_specs(self) -> List[ToolDef]:
        # without credentials the model must answer from context alone
        if not self.connected:
            return []
        return self._registry.tool_defs()

    def resolve(self, call: ToolCall) -> Resolution:
        try:
            tool = self._registry.find_by_id(call.name)
        except UnknownToolError as exc:
            logger.warning("Unknown tool requested", extra={"extra": {"tool_id": exc.tool_id}})
            return Resolution(content="", reply=unknown_tool_reply(call.name))

        if not self.connected:
            logger.warning("Canvas tool requested without credentials", extra={"extra": {"tool_id": tool.id}})
            return Resolution(
                content="",
                reply="Please connect your Canvas account so I can look that up for you.",
            )

        try:
            bound = bind_request(tool, call.arguments, self._base_url or "")
        except MissingRequiredParameterError as exc:
            logger.info(
                "Tool call missing parameter",
                extra={"extra": {"tool_id": tool.id, "parameter": exc.parameter, "reason": exc.reason}},
            )
            return Resolution(content="", reply=missing_parameter_reply(tool, exc))

        result = self._executor.execute(bound, self._token or "")
        if not result.ok:
            message = result.error.message if result.error else "Failed to fetch Canvas data"
            logger.warning(
                "Canvas tool failed",
                extra={"extra": {"tool_id": tool.id, "endpoint": bound.url, "status": result.status}},
            )
            return Resolution(content=json.dumps({"error": message}, ensure_ascii=False))

        action = {"tool": tool.id, "name": tool.name, "endpoint": bound.url, "data": result.data}
        return Resolution(content=json.dumps(result.data, ensure_ascii=False, default=str), action=action)

    def run_tool(self, tool_id: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Execute a catalog tool directly, without any completion call.

        Raises:
            UnknownToolError / MissingRequiredParameterError: before any request is sent.
        """

        tool = self._registry.find_by_id(tool_id)
        if not self.connected:
            return {"success": False, "tool": tool.id, "error": "Canvas credentials are not configured"}
        bound = bind_request(tool, arguments, self._base_url or "")
        result = self._executor.execute(bound, self._token or "")
        if not result.ok:
            payload: Dict[str, Any] = {
                "success": False,
                "tool": tool.id,
                "endpoint": bound.url,
                "error": result.error.message if result.error else "Canvas request failed",
            }
            if result.status is not None:
                payload["status"] = result.status
            return payload
        return {
            "success": True,
            "tool": tool.id,
            "name": tool.name,
            "endpoint": bound.url,
            "data": result.data,
        }
