import pytest
from httpx import ASGITransport, AsyncClient

from explorabot.config import settings
from explorabot.main import app
from explorabot.services.session_service import sessions


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_health_endpoint(client):
    sessions.get_or_create("abc")

    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["bot"] == settings.APP_NAME
    assert data["version"] == settings.APP_VERSION
    assert data["uptime"].endswith("s")
    assert data["metrics"]["requestCount"] == 1
    assert data["metrics"]["activeWebSocketConnections"] == 0
    assert data["metrics"]["activeSessions"] == 1
    assert "pythonVersion" in data["debug"]


@pytest.mark.asyncio
async def test_health_hides_debug_in_production(client, monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    monkeypatch.setattr(settings, "DEBUG", False)

    data = (await client.get("/health")).json()

    assert data["environment"] == "production"
    assert "debug" not in data


@pytest.mark.asyncio
async def test_debug_endpoint(client):
    await client.post("/api/chat", json={"message": "hello"})

    response = await client.get("/api/debug")

    assert response.status_code == 200
    data = response.json()
    assert data["environment"]["DEBUG_MODE"] is True
    assert data["engineStatus"] == {"sessions": 1, "historyLength": 2}


@pytest.mark.asyncio
async def test_debug_endpoint_hidden_in_production(client, monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    monkeypatch.setattr(settings, "DEBUG", False)

    response = await client.get("/api/debug")

    assert response.status_code == 404
    error = response.json()["error"]
    assert error["code"] == 404
    assert "details" not in error


@pytest.mark.asyncio
async def test_chat_ui_page(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert f"<title>{settings.APP_NAME} - AI Assistant</title>" in response.text
    assert "/ws" in response.text
    assert "{{APP_NAME}}" not in response.text


@pytest.mark.asyncio
async def test_unknown_route(client):
    response = await client.get("/nope")

    assert response.status_code == 404
    error = response.json()["error"]
    assert error["message"] == "Not Found"
    assert error["details"] == "Route /nope not found"
    assert error["timestamp"]


@pytest.mark.asyncio
async def test_cors_preflight(client):
    response = await client.options(
        "/api/chat",
        headers={
            "Origin": "http://example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
async def test_unhandled_exception_becomes_500(client, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(sessions, "get_or_create", boom)

    response = await client.post("/api/chat", json={"message": "hello"})

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["message"] == "Internal server error"
    assert error["details"] == "RuntimeError: kaboom"
