"""State definition for the LangGraph turn graph."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, TypedDict

from canvas_agent.domain.models import ChatMessage
from canvas_agent.flows.resolvers import Resolution
from canvas_agent.tools.definitions import ToolCall, ToolDef


TurnPhase = Literal["idle", "awaiting_completion", "function_call_pending", "resolving"]


class TurnState(TypedDict, total=False):
    """State shared across the nodes of one send_message turn."""

    provider: str
    model: str
    temperature: float
    max_tokens: Optional[int]
    user_text: str
    # outgoing request: system prompt, replayed transcript, context messages
    messages: List[ChatMessage]
    tools: List[ToolDef]
    first_message: Optional[ChatMessage]
    call: Optional[ToolCall]
    resolution: Optional[Resolution]
    action: Optional[Dict[str, Any]]
    reply: Optional[str]
    terminal: bool
    failed: bool
    fallback: bool
    completions: int
