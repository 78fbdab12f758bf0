"""Tests for the local API used by the UI."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from samwise.app import Samwise
from samwise.config import ConfigStore
from samwise.constants import VERSION
from samwise.events import EventBus
from samwise.llm.base import DispatchResult
from samwise.prompts import BUILTIN_PROMPTS
from samwise.web.server import create_app
from samwise.window import WindowController

from test_window import FakeHotkeyBackend


@pytest.fixture
def controller(event_bus: EventBus) -> WindowController:
    controller = WindowController(event_bus, FakeHotkeyBackend(taken={"Ctrl+Alt+T"}), debounce=0)
    controller.start("CmdOrCtrl+Shift+Space")
    return controller


@pytest.fixture
def core(config_store: ConfigStore, event_bus: EventBus, controller: WindowController) -> Samwise:
    return Samwise(
        store=config_store,
        bus=event_bus,
        controller=controller,
        prompts=list(BUILTIN_PROMPTS),
        cli_probe=lambda: False,
    )


@pytest.fixture
def client(core: Samwise) -> TestClient:
    return TestClient(create_app(core))


class TestReadRoutes:
    def test_status(self, client: TestClient) -> None:
        data = client.get("/api/status").json()
        assert data["version"] == VERSION
        assert data["window"] == "hidden"
        assert data["hotkey"] == "CmdOrCtrl+Shift+Space"

    def test_prompts(self, client: TestClient) -> None:
        prompts = client.get("/api/prompts").json()["prompts"]
        assert [p["id"] for p in prompts][:2] == ["fix_grammar", "improve_text"]
        assert prompts[0]["icon"] == "✓"

    def test_models(self, client: TestClient) -> None:
        data = client.get("/api/models").json()
        active = [m["id"] for m in data["models"] if m["active"]]
        assert active == [data["selected_model"]]

    def test_cli(self, client: TestClient) -> None:
        assert client.get("/api/cli").json() == {"available": False}


class TestConfigRoutes:
    def test_update_merges_llm_section(self, client: TestClient, config_store: ConfigStore) -> None:
        resp = client.put("/api/config", json={"llm": {"openai_api_key": "sk-test"}})
        assert resp.json()["status"] == "ok"

        config = client.get("/api/config").json()
        assert config["llm"]["openai_api_key"] == "sk-test"
        assert config["llm"]["use_claude_cli"] is True
        assert config_store.load().llm.openai_api_key == "sk-test"

    def test_numeric_string_is_coerced(self, client: TestClient) -> None:
        resp = client.put("/api/config", json={"llm": {"request_timeout": "30"}})
        assert resp.status_code == 200
        assert client.get("/api/config").json()["llm"]["request_timeout"] == 30.0

    def test_unusable_value_rejected(self, client: TestClient, config_store: ConfigStore) -> None:
        resp = client.put("/api/config", json={"llm": {"request_timeout": "later", "openai_api_key": "sk"}})
        assert resp.status_code == 422
        assert "request_timeout" in resp.json()["detail"]
        assert not config_store.path.exists()

    def test_select_model(self, client: TestClient) -> None:
        resp = client.put("/api/models/selected", json={"model": "gpt-4"})
        assert resp.status_code == 200
        assert client.get("/api/models").json()["selected_model"] == "gpt-4"

    def test_select_empty_model_rejected(self, client: TestClient) -> None:
        assert client.put("/api/models/selected", json={"model": " "}).status_code == 422


class TestApplyRoutes:
    def test_apply_success(self, client: TestClient) -> None:
        with patch("samwise.app.dispatch", AsyncMock(return_value=DispatchResult.success("Hello world."))):
            resp = client.post("/api/apply", json={"prompt_id": "fix_grammar", "text": "helo wrld"})
        assert resp.json() == {"ok": True, "text": "Hello world."}

    def test_apply_not_configured(self, client: TestClient) -> None:
        client.put("/api/models/selected", json={"model": "gpt-4"})
        data = client.post("/api/apply", json={"prompt_id": "summarize", "text": "abc"}).json()

        assert data["ok"] is False
        assert data["kind"] == "not_configured"
        assert "Original text:\nabc" in data["message"]

    def test_apply_unknown_prompt(self, client: TestClient) -> None:
        data = client.post("/api/apply", json={"prompt_id": "nope", "text": "abc"}).json()
        assert data["ok"] is False
        assert data["kind"] == "prompt_not_found"

    def test_cancel_nothing_in_flight(self, client: TestClient) -> None:
        assert client.post("/api/cancel", json={}).json() == {"status": "ok", "cancelled": 0}


class TestHotkeyRoutes:
    def test_update(self, client: TestClient, config_store: ConfigStore) -> None:
        resp = client.put("/api/hotkey", json={"hotkey": "Ctrl+Alt+K"})
        assert resp.status_code == 200
        assert config_store.load().global_hotkey == "Ctrl+Alt+K"
        assert client.get("/api/hotkey").json()["registered"] == "Ctrl+Alt+K"

    def test_conflict_returns_409(self, client: TestClient) -> None:
        resp = client.put("/api/hotkey", json={"hotkey": "Ctrl+Alt+T"})
        assert resp.status_code == 409
        assert client.get("/api/hotkey").json()["registered"] == "CmdOrCtrl+Shift+Space"


class TestWindowRoutes:
    def test_show_then_hide(self, client: TestClient) -> None:
        assert client.post("/api/window/show").json()["changed"] is True
        assert client.post("/api/window/show").json()["changed"] is False
        assert client.get("/api/status").json()["window"] == "visible"
        assert client.post("/api/window/hide").json()["changed"] is True

    def test_quit(self, client: TestClient, controller: WindowController) -> None:
        client.post("/api/window/quit")
        assert client.get("/api/status").json()["window"] == "quit"

    def test_clipboard_unavailable(self, client: TestClient) -> None:
        assert client.post("/api/clipboard", json={"text": "x"}).status_code == 500


class TestEventStream:
    def test_forwards_notifications(self, client: TestClient) -> None:
        with client.websocket_connect("/api/events") as ws:
            client.post("/api/settings")
            assert ws.receive_json() == {"event": "settings.requested", "data": {}}

            client.post("/api/window/show")
            assert ws.receive_json() == {"event": "window.shown", "data": {}}
