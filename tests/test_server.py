import json

from fastapi.testclient import TestClient

from conftest import model_reply
from yojana_assistant.llm import LLMResponseError
from yojana_assistant.tools import RemoteSchemeSource
from yojana_assistant.tools.links import LOGIN_LINK


def test_health(client):
    for _ in range(3):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"ok": True}


def test_missing_message_is_400(client):
    response = client.post("/api/chat", json={"context": {"userId": "u1"}})
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid request"
    assert body["errors"]
    assert body["links"] == []
    assert body["yojanas"] == []


def test_blank_message_is_400(client):
    for message in ("", "   "):
        response = client.post("/api/chat", json={"message": message})
        assert response.status_code == 400


def test_non_string_message_is_400(client):
    assert client.post("/api/chat", json={"message": 42}).status_code == 400


def test_malformed_body_is_400(client):
    response = client.post(
        "/api/chat",
        content="{not json",
        headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400


def test_login_returns_only_login_link(client, llm):
    response = client.post("/api/chat", json={"message": "login", "context": {"locale": "en-IN"}})
    assert response.status_code == 200
    body = response.json()
    assert body["links"] == [{"label": LOGIN_LINK.label, "url": LOGIN_LINK.url}]
    assert body["yojanas"] == []
    assert llm.call_count == 0


def test_scheme_scenario_respects_bounds(client, llm):
    llm.replies = [model_reply("Matching yojanas", yojanas=["1", "2", "4"])]
    response = client.post("/api/chat", json={
        "message": "Age: 25, Disability: hearing impairment, Percentage: 60",
        "context": {"userId": "web-1", "locale": "en-IN", "app": "portal"}
    })
    assert response.status_code == 200
    yojanas = response.json()["yojanas"]
    assert [y["id"] for y in yojanas] == ["1", "2"]
    for yojana in yojanas:
        assert yojana["minAge"] <= 25 <= yojana["maxAge"]
        assert yojana["requiredDisabilityPercentage"] <= 60


def test_scheme_source_failure_still_200(client, agent, llm, monkeypatch):
    source = RemoteSchemeSource("http://schemes.invalid/list")

    async def down():
        raise ConnectionError("unreachable")

    monkeypatch.setattr(source, "_get_json", down)
    agent.scheme_source = source
    llm.replies = [model_reply("I could not load yojanas right now.")]

    response = client.post("/api/chat", json={"message": "yojana list"})
    assert response.status_code == 200
    assert response.json()["yojanas"] == []


def test_prose_reply_is_wrapped(client, llm):
    llm.replies = ["Plain text answer"]
    response = client.post("/api/chat", json={"message": "tell me about schemes"})
    assert response.status_code == 200
    assert response.json() == {"message": "Plain text answer", "links": [], "yojanas": []}


def test_model_failure_is_500_with_apology(client, llm):
    llm.replies = [LLMResponseError("quota", status=429)]
    response = client.post("/api/chat", json={
        "message": "yojana", "context": {"locale": "en-IN"}
    })
    assert response.status_code == 500
    assert response.json() == {
        "message": "Sorry, something went wrong.",
        "links": [],
        "yojanas": []
    }


def test_extra_context_fields_are_accepted(client):
    response = client.post("/api/chat", json={
        "message": "login",
        "context": {"userId": "u9", "screen": "home"}
    })
    assert response.status_code == 200


def test_nan_in_scheme_listing_still_200(client, agent, llm, monkeypatch):
    source = RemoteSchemeSource("http://schemes.invalid/list")

    async def listing():
        return json.loads('[{"YojanaId": 1, "YojanaName": "X", "Start_Age": NaN, "UpTo_Age": Infinity}]')

    monkeypatch.setattr(source, "_get_json", listing)
    agent.scheme_source = source
    llm.replies = [model_reply("Here you go.", yojanas=["1"])]

    response = client.post("/api/chat", json={"message": "yojana list"})
    assert response.status_code == 200
    assert [y["id"] for y in response.json()["yojanas"]] == ["1"]


class ExplodingAgent:
    async def handle(self, request):
        raise RuntimeError("secret database password")


def test_unexpected_agent_error_is_500_without_details():
    import server

    server.app.dependency_overrides[server.get_agent] = lambda: ExplodingAgent()
    try:
        with TestClient(server.app) as test_client:
            response = test_client.post("/api/chat", json={"message": "yojana"})
    finally:
        server.app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error", "links": [], "yojanas": []}
    assert "secret" not in response.text


def test_error_outside_route_uses_global_handler():
    import server

    def broken_agent():
        raise RuntimeError("secret config value")

    server.app.dependency_overrides[server.get_agent] = broken_agent
    try:
        with TestClient(server.app, raise_server_exceptions=False) as test_client:
            response = test_client.post("/api/chat", json={"message": "yojana"})
    finally:
        server.app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error", "links": [], "yojanas": []}
    assert "secret" not in response.text
