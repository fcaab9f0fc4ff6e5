"""LangGraph construction and node implementations for one conversation turn.

complete -> END                  plain answer
complete -> resolve -> END       unknown tool / missing parameter
complete -> resolve -> narrate   tool result or action fed back to the model
complete | narrate -> fallback   completion service failed
"""

from __future__ import annotations

from typing import Callable, List, Optional

from langgraph.graph import END, StateGraph
from langgraph.graph.state import CompiledStateGraph

from canvas_agent.domain.models import ChatMessage, ChatRequest, ChatResult
from canvas_agent.flows.resolvers import ToolResolver
from canvas_agent.flows.state import TurnPhase, TurnState
from canvas_agent.infrastructure.logging.logger import logger
from canvas_agent.providers.base import CompletionClient


PhaseListener = Callable[[TurnPhase], None]
FallbackResponder = Callable[[str], str]


def _request(state: TurnState, messages: List[ChatMessage]) -> ChatRequest:
    tools = state.get("tools") or None
    return ChatRequest(
        provider=state["provider"],
        model=state["model"],
        messages=messages,
        temperature=state.get("temperature", 0.7),
        max_tokens=state.get("max_tokens"),
        tools=tools,
        tool_choice="auto",
    )


def _call(client: CompletionClient, state: TurnState, messages: List[ChatMessage]) -> Optional[ChatResult]:
    state["completions"] = state.get("completions", 0) + 1
    try:
        return client.chat(_request(state, messages))
    except Exception as exc:
        logger.error(
            "Completion call failed",
            extra={
                "extra": {
                    "provider": state["provider"],
                    "pass": state["completions"],
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                }
            },
        )
        state["failed"] = True
        return None


def _first_message(result: ChatResult) -> Optional[ChatMessage]:
    if not result.choices:
        return None
    return result.choices[0].message


def complete_node(state: TurnState, client: CompletionClient, on_phase: PhaseListener) -> TurnState:
    on_phase("awaiting_completion")
    result = _call(client, state, state["messages"])
    if result is None:
        return state
    message = _first_message(result)
    if message is not None and message.tool_calls:
        if len(message.tool_calls) > 1:
            logger.info(
                "Ignoring extra function calls",
                extra={"extra": {"ignored": [c.name for c in message.tool_calls[1:]]}},
            )
        state["first_message"] = message
        state["call"] = message.tool_calls[0]
        on_phase("function_call_pending")
        logger.info("Function call requested", extra={"extra": {"function": state["call"].name}})
        return state
    state["reply"] = message.content if message is not None else None
    return state


def resolve_node(state: TurnState, resolver: ToolResolver, on_phase: PhaseListener) -> TurnState:
    on_phase("resolving")
    call = state["call"]
    resolution = resolver.resolve(call)
    state["resolution"] = resolution
    state["action"] = resolution.action
    if resolution.terminal:
        state["reply"] = resolution.reply
        state["terminal"] = True
    return state


def narrate_node(state: TurnState, client: CompletionClient, on_phase: PhaseListener) -> TurnState:
    on_phase("awaiting_completion")
    call = state["call"]
    first = state.get("first_message")
    resolution = state["resolution"]
    scaffolding = [
        ChatMessage(role="assistant", content=first.content if first else None, tool_calls=[call]),
        ChatMessage(role="tool", content=resolution.content, tool_call_id=call.id, name=call.name),
    ]
    result = _call(client, state, list(state["messages"]) + scaffolding)
    if result is None:
        return state
    message = _first_message(result)
    if message is not None and message.tool_calls:
        # one function call per turn; a second request is not executed
        logger.info("Ignoring function call in second pass", extra={"extra": {"function": message.tool_calls[0].name}})
    state["reply"] = message.content if message is not None else None
    return state


def fallback_node(state: TurnState, responder: FallbackResponder) -> TurnState:
    state["reply"] = responder(state.get("user_text", ""))
    state["fallback"] = True
    return state


def route_after_complete(state: TurnState) -> str:
    if state.get("failed"):
        return "fallback"
    if state.get("call") is not None:
        return "resolve"
    return "end"


def route_after_resolve(state: TurnState) -> str:
    if state.get("terminal"):
        return "end"
    return "narrate"


def route_after_narrate(state: TurnState) -> str:
    if state.get("failed"):
        return "fallback"
    return "end"


def build_turn_graph(
    client: CompletionClient,
    resolver: ToolResolver,
    responder: FallbackResponder,
    on_phase: Optional[PhaseListener] = None,
) -> CompiledStateGraph:
    listener: PhaseListener = on_phase or (lambda phase: None)
    graph = StateGraph(TurnState)
    graph.add_node("complete", lambda s: complete_node(s, client, listener))
    graph.add_node("resolve", lambda s: resolve_node(s, resolver, listener))
    graph.add_node("narrate", lambda s: narrate_node(s, client, listener))
    graph.add_node("fallback", lambda s: fallback_node(s, responder))
    graph.set_entry_point("complete")
    graph.add_conditional_edges(
        "complete", route_after_complete, {"resolve": "resolve", "fallback": "fallback", "end": END}
    )
    graph.add_conditional_edges("resolve", route_after_resolve, {"narrate": "narrate", "end": END})
    graph.add_conditional_edges("narrate", route_after_narrate, {"fallback": "fallback", "end": END})
    graph.add_edge("fallback", END)
    return graph.compile()
