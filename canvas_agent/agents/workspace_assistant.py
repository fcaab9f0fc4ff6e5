"""作业工作区助手：把函数调用映射为编辑器动作的对话 Agent。"""

from typing import Any, Dict, List, Optional, Union

from canvas_agent.agents.context_render import workspace_system_message
from canvas_agent.agents.orchestrator import ConversationOrchestrator, default_config
from canvas_agent.config.settings import settings
from canvas_agent.domain.context import WorkspaceContext
from canvas_agent.prompts import load_system_prompt
from canvas_agent.providers import create_provider
from canvas_agent.providers.base import CompletionClient
from canvas_agent.tools.actions import LocalActionDispatcher, confirmation_suffix


AGENT_TYPE = "workspace-assistant"

_ACTION_REPLY = "Done!"


class WorkspaceAssistant(ConversationOrchestrator):
    """工作区技能：write_document / write_code / switch_to_document / switch_to_code。

    动作只返回给 UI 执行，本身不发任何网络请求；
    对话记录中的助手回复会追加一行确认文字（如 "✅ Switched to document editor!"）。
    """

    def __init__(
        self,
        provider_client: Optional[CompletionClient] = None,
        provider_name: Optional[str] = None,
    ):
        config = default_config(AGENT_TYPE, provider_name, settings.workspace_max_tokens)
        self._context = WorkspaceContext()
        self._system_prompt = load_system_prompt(AGENT_TYPE)
        dispatcher = LocalActionDispatcher(lambda: self._context)
        super().__init__(provider_client or create_provider(config.provider), dispatcher, config)

    @property
    def context(self) -> WorkspaceContext:
        return self._context

    def set_context(self, ctx: Union[WorkspaceContext, Dict[str, Any], None]) -> None:
        """整体替换上下文，不做合并。"""

        self._context = ctx if isinstance(ctx, WorkspaceContext) else WorkspaceContext.from_dict(ctx)

    def _system_messages(self) -> List[str]:
        return [
            workspace_system_message(
                self._system_prompt,
                self._context,
                work_limit=settings.work_in_progress_max_chars,
            )
        ]

    def _default_reply(self, action: Optional[Dict[str, Any]]) -> str:
        if action:
            return _ACTION_REPLY
        return super()._default_reply(action)

    def _transcript_text(self, message: str, action: Optional[Dict[str, Any]]) -> str:
        suffix = confirmation_suffix(action)
        return f"{message}\n\n{suffix}" if suffix else message

    def _fallback_reply(self, user_text: str) -> str:
        message = (user_text or "").lower()
        assignment = self._context.assignment

        if any(key in message for key in ("what is", "assignment", "describe", "tell me about")):
            if assignment is None:
                return (
                    "I don't have information about the current assignment. "
                    "Please make sure you're working on an assignment."
                )
            reply = f'The assignment is "{assignment.name}" from {assignment.course}.'
            if assignment.description:
                reply += f"\n\nDescription: {assignment.description}"
            if assignment.due_date:
                reply += f"\n\nDue Date: {assignment.due_date}"
            if assignment.points is not None:
                reply += f"\n\nPoints: {assignment.points:g}"
            return reply

        if "write" in message or "create" in message:
            if any(key in message for key in ("code", "function", "program")):
                return (
                    "I can help you write code, but I couldn't reach the assistant service just now, "
                    "so nothing was written to your editor. Please try again in a moment."
                )
            return (
                "I can help you write, but I couldn't reach the assistant service just now, "
                "so nothing was written to your document. Please try again in a moment."
            )

        if assignment is not None:
            return (
                f'I\'m ready to help you with "{assignment.name}". Based on the assignment description, '
                "I can write the code or content you need. What would you like me to start with?"
            )
        return "I'm ready to help! What would you like me to write or work on?"
