"""作业工作区的本地编辑器动作。

四个固定函数直接映射成 UI 动作 {type, content?, language?}，不发起任何网络请求：

- write_document(content)
- write_code(content, language?)
- switch_to_document()
- switch_to_code(language?)
"""

import json
from typing import Any, Callable, Dict, List, Optional

from canvas_agent.domain.context import WorkspaceContext
from canvas_agent.flows.resolvers import Resolution
from canvas_agent.infrastructure.logging.logger import logger
from .definitions import ToolCall, ToolDef, ToolParam


DEFAULT_LANGUAGE = "javascript"

_LANGUAGE_SCHEMA = {
    "type": "string",
    "enum": ["javascript", "python", "cpp"],
}

WORKSPACE_ACTIONS: List[ToolDef] = [
    ToolDef(
        name="write_document",
        description=(
            "Write actual text content directly into the document editor. Use this when the user asks you "
            "to write an essay, paper, paragraph, introduction, or any text content."
        ),
        params={
            "content": ToolParam(
                name="content",
                description="The full text content to write into the document editor",
                required=True,
                schema={"type": "string"},
            ),
        },
    ),
    ToolDef(
        name="write_code",
        description=(
            "Write complete, working code directly into the code editor. Use this when the user asks you "
            "to write, implement or code something. Switches to code mode if needed."
        ),
        params={
            "content": ToolParam(
                name="content",
                description="The code to write into the code editor",
                required=True,
                schema={"type": "string"},
            ),
            "language": ToolParam(
                name="language",
                description="Programming language: javascript (for TypeScript/React/JS), python, or cpp",
                required=False,
                schema=dict(_LANGUAGE_SCHEMA),
            ),
        },
    ),
    ToolDef(
        name="switch_to_document",
        description="Switch the editor to document mode for writing essays and papers.",
        params={},
    ),
    ToolDef(
        name="switch_to_code",
        description="Switch the editor to code mode for writing code. Optionally specify the programming language.",
        params={
            "language": ToolParam(
                name="language",
                description="The programming language to use in the code editor",
                required=False,
                schema=dict(_LANGUAGE_SCHEMA),
            ),
        },
    ),
]


def _text_arg(arguments: Dict[str, Any], name: str) -> Optional[str]:
    value = arguments.get(name)
    if isinstance(value, str) and value.strip():
        return value
    return None


class LocalActionDispatcher:
    """工作区技能的 ToolResolver 实现。

    context_provider 每次返回当前的 WorkspaceContext，用于默认编程语言。
    """

    name = "workspace"

    def __init__(self, context_provider: Callable[[], WorkspaceContext]):
        self._context_provider = context_provider

    def function_specs(self) -> List[ToolDef]:
        return list(WORKSPACE_ACTIONS)

    def _language(self, arguments: Dict[str, Any]) -> str:
        return _text_arg(arguments, "language") or self._context_provider().current_language or DEFAULT_LANGUAGE

    def build_action(self, call: ToolCall) -> Optional[Dict[str, Any]]:
        """把函数调用映射成 UI 动作；未知函数返回 None。

        Raises:
            ValueError: write_document / write_code 缺少 content。
        """

        arguments = call.arguments or {}
        if call.name == "write_document":
            content = _text_arg(arguments, "content")
            if content is None:
                raise ValueError("content")
            return {"type": "write_document", "content": content}
        if call.name == "write_code":
            content = _text_arg(arguments, "content")
            if content is None:
                raise ValueError("content")
            return {"type": "write_code", "content": content, "language": self._language(arguments)}
        if call.name == "switch_to_document":
            return {"type": "switch_to_document"}
        if call.name == "switch_to_code":
            return {"type": "switch_to_code", "language": self._language(arguments)}
        return None

    def resolve(self, call: ToolCall) -> Resolution:
        try:
            action = self.build_action(call)
        except ValueError:
            logger.info("Workspace action missing content", extra={"extra": {"action": call.name}})
            target = "document" if call.name == "write_document" else "code"
            return Resolution(
                content="",
                reply=f"I need the content you want written to the {target} editor. Could you tell me what to write?",
            )

        if action is None:
            logger.warning("Unknown workspace action", extra={"extra": {"action": call.name}})
            return Resolution(
                content=json.dumps({"success": False, "error": f"Unknown action: {call.name}"}, ensure_ascii=False)
            )

        logger.info("Workspace action resolved", extra={"extra": {"action": action["type"]}})
        return Resolution(content=json.dumps({"success": True, "action": action}, ensure_ascii=False), action=action)


def confirmation_suffix(action: Optional[Dict[str, Any]]) -> str:
    """工作区对话记录里追加在助手回复后的确认文字。"""

    if not action:
        return ""
    kind = action.get("type")
    if kind == "write_document":
        return "✅ I've written the content into your document editor!"
    if kind == "write_code":
        return f"✅ I've written the code into your {action.get('language') or DEFAULT_LANGUAGE} editor!"
    if kind == "switch_to_document":
        return "✅ Switched to document editor!"
    if kind == "switch_to_code":
        return f"✅ Switched to {action.get('language') or DEFAULT_LANGUAGE} code editor!"
    return ""
