"""Canvas 学习助手：可调用 Canvas REST 工具的对话 Agent。"""

import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from canvas_agent.agents.context_render import academic_context_messages
from canvas_agent.agents.orchestrator import ConversationOrchestrator, default_config
from canvas_agent.config.settings import settings
from canvas_agent.domain.context import AcademicContext, AssignmentInfo
from canvas_agent.flows.resolvers import CanvasToolResolver
from canvas_agent.prompts import load_system_prompt
from canvas_agent.providers import create_provider
from canvas_agent.providers.base import CompletionClient
from canvas_agent.tools.definitions import ToolDefinition
from canvas_agent.tools.executor import canvas_base_url
from canvas_agent.tools.matcher import find_relevant_tools


AGENT_TYPE = "canvas-assistant"

_TEST_RE = re.compile(r"quiz|exam|test", re.IGNORECASE)


def _due_label(assignment: AssignmentInfo) -> str:
    due = assignment.due_at
    return due.date().isoformat() if due else "TBA"


class CanvasAssistant(ConversationOrchestrator):
    """外部工具技能：模型可调用 Canvas 目录中的任意一个工具。

    没有配置 Canvas 凭据时不向模型暴露任何函数，只根据上下文回答。
    """

    def __init__(
        self,
        provider_client: Optional[CompletionClient] = None,
        resolver: Optional[CanvasToolResolver] = None,
        token: Optional[str] = None,
        domain: Optional[str] = None,
        provider_name: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if resolver is None:
            domain = domain or settings.canvas_domain
            resolver = CanvasToolResolver(
                base_url=canvas_base_url(domain) if domain else None,
                token=token or settings.canvas_api_token,
            )
        config = default_config(AGENT_TYPE, provider_name, settings.chat_max_tokens)
        self._context = AcademicContext()
        self._system_prompt = load_system_prompt(AGENT_TYPE)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        super().__init__(provider_client or create_provider(config.provider), resolver, config)
        self._canvas = resolver

    @property
    def context(self) -> AcademicContext:
        return self._context

    def set_context(self, ctx: Union[AcademicContext, Dict[str, Any], None]) -> None:
        """整体替换上下文，不做合并。"""

        self._context = ctx if isinstance(ctx, AcademicContext) else AcademicContext.from_dict(ctx)

    def suggest_tools(self, query: str) -> List[ToolDefinition]:
        return [match.tool for match in find_relevant_tools(query, self._canvas.registry)]

    def run_tool(self, tool_id: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._canvas.run_tool(tool_id, arguments)

    def _system_messages(self) -> List[str]:
        return [self._system_prompt]

    def _context_messages(self) -> List[str]:
        return academic_context_messages(
            self._context,
            upcoming_limit=settings.upcoming_assignment_limit,
            work_limit=settings.work_in_progress_max_chars,
            document_limit=settings.reference_document_max_chars,
        )

    def _fallback_reply(self, user_text: str) -> str:
        message = (user_text or "").lower()
        ctx = self._context

        if "course" in message or "class" in message:
            if not ctx.courses:
                return "I can't see your course list right now. Once your Canvas courses are loaded I can tell you about them."
            lines = "\n".join(f"• {c.name} ({c.course_code})" for c in ctx.courses)
            return (
                f"You're enrolled in these courses this semester:\n\n{lines}\n\n"
                "You can ask me about upcoming assignments or tests for any course."
            )

        if "test" in message or "exam" in message or "quiz" in message:
            tests = [a for a in ctx.assignments if _TEST_RE.search(a.name) or _TEST_RE.search(a.description or "")]
            if not tests:
                return "I don't see any upcoming tests right now. Try asking about assignments or due dates."
            lines = "\n".join(f"• {t.name} ({t.course}) - due {_due_label(t)}" for t in tests[:5])
            return f"Here are your upcoming tests/exams:\n\n{lines}"

        if "assignment" in message or "due" in message:
            now = self._clock()
            upcoming = sorted(
                (a for a in ctx.assignments if a.due_at is not None and a.due_at >= now),
                key=lambda a: a.due_at,
            )
            if not upcoming:
                return "I don't see any upcoming assignments with due dates right now."
            lines = "\n".join(f"• {a.name} ({a.course}): Due {_due_label(a)}" for a in upcoming[:3])
            return (
                f"Here are your upcoming assignments:\n\n{lines}\n\n"
                "You can click on any assignment in your calendar to view details and start working on it."
            )

        if ctx.current_assignment is not None:
            ca = ctx.current_assignment
            reply = f"You're working on: {ca.name} ({ca.course})."
            if ca.due_at is not None:
                reply += f" Due {_due_label(ca)}."
            if (ctx.work_in_progress or "").strip():
                reply += "\n\nI also see your current work-in-progress. I can help review it or suggest improvements."
            if ctx.reference_document_text:
                name = ctx.reference_document_name or "document"
                reply += (
                    f"\n\nI also see a reference document attached ({name}). "
                    "I can use it to provide more specific help."
                )
            return reply

        if ctx.reference_document_text:
            return "You can ask me questions about your assignment and the attached document. I'll use both to assist you."

        return (
            "How can I help with your coursework today? You can ask about assignments, tests, study planning, "
            "or get help with the work you're currently writing/coding."
        )
