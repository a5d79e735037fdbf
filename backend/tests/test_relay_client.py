import pytest

from app.clients.relay_client import RelayClient, RelayClientError, main


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body
        self.text = str(body)

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, json=None, timeout=None):
        self.calls.append((method, url, json, timeout))
        return self.responses.pop(0)


def test_send_posts_payload():
    session = FakeSession(FakeResponse(200, {"id": 1, "code": "AbC1234", "expiresAt": "x"}))
    client = RelayClient("http://relay/", timeout=3, session=session)

    result = client.send("t", "a", "hello")

    assert result["code"] == "AbC1234"
    assert session.calls == [
        ("POST", "http://relay/send", {"topic": "t", "author": "a", "message": "hello"}, 3),
    ]


def test_receive_error_carries_server_message():
    session = FakeSession(FakeResponse(404, {"error": "Invalid or expired code"}))
    client = RelayClient("http://relay", session=session)

    with pytest.raises(RelayClientError) as exc:
        client.receive("NOPE123")

    assert exc.value.status_code == 404
    assert exc.value.message == "Invalid or expired code"


def test_rate_limit_warning_is_surfaced():
    session = FakeSession(FakeResponse(429, {"success": False, "warning": "slow down"}))
    client = RelayClient("http://relay", session=session)

    with pytest.raises(RelayClientError) as exc:
        client.receive("NOPE123")
    assert exc.value.message == "slow down"


def test_health():
    client = RelayClient("http://relay", session=FakeSession(FakeResponse(200, {"ok": True})))
    assert client.health() is True


def test_cli_receive_failure_exit_code(monkeypatch, capsys):
    session = FakeSession(FakeResponse(404, {"error": "Invalid or expired code"}))
    monkeypatch.setattr("app.clients.relay_client.requests.Session", lambda: session)

    assert main(["--url", "http://relay", "receive", "NOPE123"]) == 1
    assert "Invalid or expired code" in capsys.readouterr().err


@pytest.mark.parametrize("body", [["unexpected"], "plain string", None])
def test_non_object_error_body_still_raises_client_error(body):
    response = FakeResponse(502, body)
    response.text = "Bad Gateway"
    client = RelayClient("http://relay", session=FakeSession(response))

    with pytest.raises(RelayClientError) as exc:
        client.receive("NOPE123")

    assert exc.value.status_code == 502
    assert exc.value.message == "Bad Gateway"
