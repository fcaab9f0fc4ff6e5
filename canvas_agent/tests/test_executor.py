import httpx

from canvas_agent.tools.definitions import BoundRequest
from canvas_agent.tools.executor import CanvasExecutor, canvas_base_url


class Resp:
    def __init__(self, status_code, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("not json")
        return self._body


def _client_returning(resp, captured):
    class Client:
        def __init__(self, *a, **kw):
            captured["init"] = kw

        def __enter__(self):
            return self

        def __exit__(self, *a):
            return False

        def request(self, method, url, headers=None, **_):
            captured["method"] = method
            captured["url"] = url
            captured["headers"] = headers
            return resp

    return Client


BOUND = BoundRequest(method="GET", url="https://canvas.test/api/v1/courses", headers={"Accept": "application/json"})


def test_success_sends_bearer_token(monkeypatch):
    captured = {}
    monkeypatch.setattr("httpx.Client", _client_returning(Resp(200, [{"id": 1}]), captured))
    result = CanvasExecutor(timeout=5).execute(BOUND, "secret-token")
    assert result.ok
    assert result.status == 200
    assert result.data == [{"id": 1}]
    assert captured["method"] == "GET"
    assert captured["url"] == BOUND.url
    assert captured["headers"]["Authorization"] == "Bearer secret-token"
    assert captured["headers"]["Accept"] == "application/json"
    assert captured["init"]["timeout"] == 5


def test_canvas_error_message_is_extracted(monkeypatch):
    body = {"errors": [{"message": "The specified resource does not exist."}]}
    monkeypatch.setattr("httpx.Client", _client_returning(Resp(404, body, text="{...}"), {}))
    result = CanvasExecutor(timeout=5).execute(BOUND, "t")
    assert not result.ok
    assert result.status == 404
    assert result.error.message == "The specified resource does not exist."
    assert result.error.status == 404
    assert result.error.raw_body == body
    assert result.error.transport is False


def test_non_json_error_uses_body_text(monkeypatch):
    monkeypatch.setattr("httpx.Client", _client_returning(Resp(502, None, text="Bad Gateway"), {}))
    result = CanvasExecutor(timeout=5).execute(BOUND, "t")
    assert not result.ok
    assert result.error.message == "Bad Gateway"


def test_transport_failure_is_returned_not_raised(monkeypatch):
    class Client:
        def __init__(self, *a, **kw):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *a):
            return False

        def request(self, *a, **kw):
            raise httpx.ConnectError("connection refused")

    monkeypatch.setattr("httpx.Client", Client)
    result = CanvasExecutor(timeout=5).execute(BOUND, "t")
    assert not result.ok
    assert result.status is None
    assert result.error.transport is True
    assert "connection refused" in result.error.message


def test_canvas_base_url():
    assert canvas_base_url("school.instructure.com") == "https://school.instructure.com/api/v1"
    assert canvas_base_url("https://school.instructure.com/") == "https://school.instructure.com/api/v1"
    assert canvas_base_url(" http://canvas.test ") == "https://canvas.test/api/v1"


def test_invalid_url_is_returned_not_raised(monkeypatch):
    class Client:
        def __init__(self, *a, **kw):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *a):
            return False

        def request(self, *a, **kw):
            raise httpx.InvalidURL("URL too long")

    monkeypatch.setattr("httpx.Client", Client)
    result = CanvasExecutor(timeout=5).execute(BOUND, "t")
    assert not result.ok
    assert result.status is None
    assert result.error.transport is True
    assert result.error.message == "URL too long"
