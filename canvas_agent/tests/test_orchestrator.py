import json

import httpx

from canvas_agent.agents.canvas_assistant import CanvasAssistant
from canvas_agent.domain.exceptions import ExecutionError
from canvas_agent.domain.models import ChatChoice, ChatMessage, ChatResult
from canvas_agent.flows.resolvers import CanvasToolResolver
from canvas_agent.tools.definitions import ToolCall, ToolResult
from canvas_agent.tools.executor import CanvasExecutor


BASE = "https://canvas.test/api/v1"


class ScriptedProvider:
    """Returns the queued messages in order and records every request."""

    name = "fake"

    def __init__(self, *replies, on_chat=None):
        self._replies = list(replies)
        self._on_chat = on_chat
        self.requests = []

    def chat(self, req):
        self.requests.append(req)
        if self._on_chat:
            self._on_chat()
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return ChatResult(provider="fake", model=req.model, choices=[ChatChoice(index=0, message=reply)])


class FakeExecutor:
    def __init__(self, result=None, on_execute=None):
        self.result = result or ToolResult(ok=True, status=200, data=[{"id": 55, "name": "Biology"}])
        self.calls = []
        self._on_execute = on_execute

    def execute(self, bound, token):
        self.calls.append((bound, token))
        if self._on_execute:
            self._on_execute()
        return self.result


def text(content):
    return ChatMessage(role="assistant", content=content)


def function_call(name, arguments, call_id="call_1"):
    return ChatMessage(role="assistant", content=None, tool_calls=[ToolCall(id=call_id, name=name, arguments=arguments)])


def make_assistant(provider, executor=None, connected=True):
    resolver = CanvasToolResolver(
        executor=executor or FakeExecutor(),
        base_url=BASE if connected else None,
        token="tok" if connected else None,
    )
    return CanvasAssistant(provider_client=provider, resolver=resolver)


def test_plain_answer():
    provider = ScriptedProvider(text("Hello there"))
    assistant = make_assistant(provider)
    result = assistant.send_message("hi")
    assert result.message == "Hello there"
    assert result.action is None
    assert assistant.history() == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "Hello there"},
    ]
    req = provider.requests[0]
    assert req.tool_choice == "auto"
    assert len(req.tools) == 23
    assert req.messages[0].role == "system"
    assert req.messages[1].role == "user"


def test_tool_round_trip():
    executor = FakeExecutor()
    provider = ScriptedProvider(
        function_call("get_course", {"course_id": 55, "include": ["term", "syllabus_body"]}),
        text("Your course is Biology."),
    )
    assistant = make_assistant(provider, executor)
    result = assistant.send_message("tell me about course 55")

    assert result.message == "Your course is Biology."
    assert result.action == {
        "tool": "get_course",
        "name": "Get Course Details",
        "endpoint": f"{BASE}/courses/55?include[]=term&include[]=syllabus_body",
        "data": [{"id": 55, "name": "Biology"}],
    }
    assert len(executor.calls) == 1
    bound, token = executor.calls[0]
    assert token == "tok"
    assert bound.url.endswith("include[]=term&include[]=syllabus_body")

    history = assistant.history()
    assert [m["role"] for m in history] == ["user", "assistant"]
    assert history[1]["content"] == "Your course is Biology."

    assert len(provider.requests) == 2
    second = provider.requests[1]
    assert second.tools == provider.requests[0].tools
    assert second.tool_choice == "auto"
    scaffold_call, scaffold_result = second.messages[-2], second.messages[-1]
    assert scaffold_call.role == "assistant"
    assert scaffold_call.tool_calls[0].name == "get_course"
    assert scaffold_result.role == "tool"
    assert scaffold_result.name == "get_course"
    assert scaffold_result.tool_call_id == "call_1"
    assert json.loads(scaffold_result.content) == [{"id": 55, "name": "Biology"}]
    assert assistant.phase == "idle"


def test_missing_parameter_short_circuits():
    executor = FakeExecutor()
    provider = ScriptedProvider(function_call("get_assignment", {"assignment_id": 9}))
    assistant = make_assistant(provider, executor)
    result = assistant.send_message("show assignment 9")

    assert executor.calls == []
    assert len(provider.requests) == 1
    assert "course_id" in result.message
    assert "Get Assignment Details" in result.message
    assert result.action is None
    assert [m["role"] for m in assistant.history()] == ["user", "assistant"]


def test_unknown_tool_short_circuits():
    executor = FakeExecutor()
    provider = ScriptedProvider(function_call("delete_course", {"course_id": 1}))
    assistant = make_assistant(provider, executor)
    result = assistant.send_message("delete my course")

    assert executor.calls == []
    assert len(provider.requests) == 1
    assert "delete_course" in result.message


def test_execution_error_is_narrated():
    executor = FakeExecutor(
        ToolResult(ok=False, status=401, error=ExecutionError("Invalid access token.", status=401))
    )
    provider = ScriptedProvider(
        function_call("list_courses", {}),
        text("Sorry, your Canvas token seems to be invalid."),
    )
    assistant = make_assistant(provider, executor)
    result = assistant.send_message("list my courses")

    assert result.message == "Sorry, your Canvas token seems to be invalid."
    assert result.action is None
    assert json.loads(provider.requests[1].messages[-1].content) == {"error": "Invalid access token."}


def test_only_first_function_call_is_executed():
    executor = FakeExecutor()
    first = ChatMessage(
        role="assistant",
        content=None,
        tool_calls=[
            ToolCall(id="a", name="list_courses", arguments={}),
            ToolCall(id="b", name="get_user", arguments={}),
        ],
    )
    provider = ScriptedProvider(first, function_call("get_user", {}, call_id="c"))
    assistant = make_assistant(provider, executor)
    result = assistant.send_message("courses and profile")

    assert len(executor.calls) == 1
    assert executor.calls[0][0].url == f"{BASE}/courses"
    assert len(provider.requests) == 2
    # the second response asked for another call; it is not chained
    assert result.message == "Sorry, I could not generate a response."


def test_no_credentials_means_no_tools():
    provider = ScriptedProvider(text("I can't see Canvas data yet."))
    assistant = make_assistant(provider, connected=False)
    assistant.send_message("what are my grades")
    assert provider.requests[0].tools is None


def test_context_messages_follow_transcript_and_are_rebuilt():
    provider = ScriptedProvider(text("one"), text("two"))
    assistant = make_assistant(provider)
    assistant.set_context(
        {
            "courses": [{"id": 1, "name": "Biology", "course_code": "BIO 101"}],
            "assignments": [
                {"name": "Essay", "course": "Biology", "dueDate": "2030-03-01T00:00:00Z"},
                {"name": "Lab", "course": "Biology", "dueDate": "2030-02-01T00:00:00Z"},
                {"name": "Reading", "course": "Biology"},
            ],
        }
    )
    assistant.send_message("first")
    assistant.send_message("second")

    roles = [m.role for m in provider.requests[1].messages]
    assert roles == ["system", "user", "assistant", "user", "system"]
    context = provider.requests[1].messages[-1].content
    assert context.startswith("Courses: Biology (BIO 101).")
    assert "Upcoming assignments: Lab in Biology due 2030-02-01T00:00:00Z; Essay in Biology" in context
    assert "Reading" not in context
    assert assistant.history()[-1] == {"role": "assistant", "content": "two"}


def test_set_context_replaces_wholesale():
    provider = ScriptedProvider(text("ok"))
    assistant = make_assistant(provider)
    assistant.set_context({"courses": [{"id": 1, "name": "Biology", "course_code": "BIO"}], "workInProgress": "draft"})
    assistant.set_context({"referenceDocumentText": "notes"})
    assistant.send_message("hi")
    contents = [m.content for m in provider.requests[0].messages if m.role == "system"][1:]
    assert contents == ["Reference document (reference document) content:\nnotes"]


def test_hydrate_and_window():
    provider = ScriptedProvider(text("ok"))
    assistant = make_assistant(provider)
    assistant.config.max_context_messages = 3
    assistant.hydrate_messages(
        [
            {"role": "system", "content": "old system prompt"},
            {"role": "user", "content": "u1"},
            {"role": "assistant", "content": "a1"},
            {"role": "user", "content": "u2"},
            {"role": "assistant", "content": "a2"},
            {"role": "function", "content": "{}"},
        ]
    )
    assert len(assistant.history()) == 4
    assistant.send_message("u3")
    sent = [m.content for m in provider.requests[0].messages]
    assert "old system prompt" not in sent
    assert sent[1:] == ["u2", "a2", "u3"]


def test_clear_chat():
    provider = ScriptedProvider(text("ok"))
    assistant = make_assistant(provider)
    assistant.send_message("hi")
    assistant.clear_chat()
    assert assistant.history() == []


def test_phases_during_turn():
    seen = []
    executor = FakeExecutor(on_execute=lambda: seen.append(("execute", assistant.phase)))
    provider = ScriptedProvider(
        function_call("list_courses", {}),
        text("done"),
        on_chat=lambda: seen.append(("chat", assistant.phase)),
    )
    assistant = make_assistant(provider, executor)
    assert assistant.phase == "idle"
    assistant.send_message("courses")
    assert seen == [
        ("chat", "awaiting_completion"),
        ("execute", "resolving"),
        ("chat", "awaiting_completion"),
    ]
    assert assistant.phase == "idle"


def test_suggest_tools_without_network():
    assistant = make_assistant(ScriptedProvider(), connected=False)
    tools = assistant.suggest_tools("syllabus")
    assert tools[0].id == "get_course_syllabus"


def test_run_tool_directly():
    executor = FakeExecutor()
    assistant = make_assistant(ScriptedProvider(), executor)
    result = assistant.run_tool("get_course", {"course_id": 55})
    assert result["success"] is True
    assert result["endpoint"] == f"{BASE}/courses/55"
    assert result["data"] == [{"id": 55, "name": "Biology"}]


def test_oversized_url_is_narrated_as_error(monkeypatch):
    class Client:
        def __init__(self, *a, **kw):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *a):
            return False

        def request(self, method, url, headers=None, **_):
            if len(url) > 65536:
                raise httpx.InvalidURL("URL too long")
            raise AssertionError("request should have been rejected")

    monkeypatch.setattr("httpx.Client", Client)
    provider = ScriptedProvider(
        function_call("list_course_files", {"course_id": 1, "search_term": "x" * 70000}),
        text("That search was too long for Canvas. Could you shorten it?"),
    )
    assistant = make_assistant(provider, CanvasExecutor(timeout=5))
    result = assistant.send_message("find my files")

    assert result.message == "That search was too long for Canvas. Could you shorten it?"
    assert result.action is None
    assert result.fallback is False
    assert json.loads(provider.requests[1].messages[-1].content) == {"error": "URL too long"}
    assert assistant.phase == "idle"


def test_hydrate_skips_non_mapping_entries():
    assistant = make_assistant(ScriptedProvider())
    assistant.hydrate_messages(
        [
            "stray text",
            None,
            ("user", "tuple"),
            {"role": "user", "content": "u1"},
            ChatMessage(role="assistant", content="a1"),
        ]
    )
    assert assistant.history() == [
        {"role": "user", "content": "u1"},
        {"role": "assistant", "content": "a1"},
    ]
