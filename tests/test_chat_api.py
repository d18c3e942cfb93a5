import pytest
from httpx import ASGITransport, AsyncClient

from explorabot.main import app
from explorabot.services.intent_service import default_intents
from explorabot.services.metrics_service import metrics

GREETINGS = set(default_intents()[0].responses)


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_chat_returns_greeting(client):
    response = await client.post("/api/chat", json={"message": "hello"})

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["response"] in GREETINGS
    assert data["intent"] == "greeting"
    assert data["session_id"]
    assert data["html"]
    assert data["requestId"] == response.headers["X-Request-ID"]
    assert response.headers["X-Request-ID"].startswith("req_")


@pytest.mark.asyncio
async def test_chat_renders_markup(client):
    response = await client.post("/api/chat", json={"message": "deploy with docker"})

    data = response.json()
    assert data["intent"] == "deploy"
    assert "Docker" in data["response"]
    assert "<strong>Deployment Options:</strong>" in data["html"]


@pytest.mark.asyncio
async def test_session_history_round(client):
    first = (await client.post("/api/chat", json={"message": "hello"})).json()
    session_id = first["session_id"]
    await client.post("/api/chat", json={"message": "asdkjalksdj", "session_id": session_id})

    history = (await client.get(f"/api/chat/{session_id}/history")).json()
    assert history["session_id"] == session_id
    assert history["last_intent"] == "fallback"
    assert [t["role"] for t in history["turns"]] == ["user", "assistant", "user", "assistant"]
    assert history["turns"][2]["content"] == "asdkjalksdj"

    cleared = await client.delete(f"/api/chat/{session_id}/history")
    assert cleared.json() == {"status": "cleared", "session_id": session_id}

    history = (await client.get(f"/api/chat/{session_id}/history")).json()
    assert history["turns"] == []
    assert history["last_intent"] is None


@pytest.mark.asyncio
async def test_sessions_are_isolated(client):
    a = (await client.post("/api/chat", json={"message": "hello"})).json()["session_id"]
    b = (await client.post("/api/chat", json={"message": "deploy"})).json()["session_id"]
    assert a != b

    history = (await client.get(f"/api/chat/{a}/history")).json()
    assert len(history["turns"]) == 2


@pytest.mark.asyncio
async def test_unknown_session_history(client):
    response = await client.get("/api/chat/missing/history")

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Session not found"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload, detail", [
    ({"message": "   "}, "message cannot be empty"),
    ({"message": "x" * 10001}, "message too long"),
    ({"message": 42}, "message"),
    ({}, "message"),
])
async def test_invalid_message_rejected(client, payload, detail):
    response = await client.post("/api/chat", json=payload)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["message"] == "Invalid request"
    assert error["code"] == 400
    assert detail in error["details"]
    assert error["requestId"] == response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_max_length_message_accepted(client):
    response = await client.post("/api/chat", json={"message": "x" * 10000})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_invalid_json(client):
    response = await client.post(
        "/api/chat", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Invalid JSON"


@pytest.mark.asyncio
async def test_non_json_content_type(client):
    response = await client.post(
        "/api/chat", content=b"message=hello", headers={"Content-Type": "text/plain"}
    )

    assert response.status_code == 415
    error = response.json()["error"]
    assert error["message"] == "Unsupported Media Type"
    assert error["details"] == "Content-Type must be application/json"


@pytest.mark.asyncio
async def test_body_too_large(client):
    body = b'{"message": "' + b"x" * (1024 * 1024) + b'"}'
    response = await client.post(
        "/api/chat", content=body, headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 413
    assert response.json()["error"]["message"] == "Request body too large"


@pytest.mark.asyncio
async def test_wrong_method(client):
    response = await client.get("/api/chat")

    assert response.status_code == 405
    assert "GET not supported" in response.json()["error"]["details"]


@pytest.mark.asyncio
async def test_errors_are_counted(client):
    before = metrics.error_count
    await client.post("/api/chat", json={"message": ""})
    await client.get("/nowhere")
    assert metrics.error_count == before + 2


@pytest.mark.asyncio
async def test_client_request_id_is_echoed(client):
    response = await client.post(
        "/api/chat", json={"message": "hi"}, headers={"X-Request-ID": "trace-123"}
    )
    assert response.headers["X-Request-ID"] == "trace-123"
    assert response.json()["requestId"] == "trace-123"
