"""HTTP 入口测试（FastAPI TestClient，投递器为假实现）。"""
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

import app as app_module
from app import create_app
from opsgenie_forwarder.core.models import DispatchOutcome, DispatchResult
from opsgenie_forwarder.services.alert_service import AlertService


@pytest.fixture
def dispatcher():
    mock = MagicMock()
    mock.send.return_value = DispatchResult(outcome=DispatchOutcome.SUCCESS, attempts=1, status_code=202)
    return mock


@pytest.fixture
def client(config, dispatcher):
    service = AlertService(config, dispatcher=dispatcher)
    with TestClient(create_app(config=config, service=service)) as c:
        yield c


class TestEventsEndpoint:
    def test_single_event(self, client, dispatcher):
        resp = client.post("/events", json={"opsgenieAction": "create", "message": "m"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["ok"] is True
        assert body["results"][0]["outcome"] == "success"
        dispatcher.send.assert_called_once()

    def test_batch(self, client, dispatcher):
        resp = client.post("/events", json={"events": [
            {"opsgenieAction": "close", "alias": "a"},
            {"message": "no action"},
        ]})
        body = resp.json()
        assert [r["status"] for r in body["results"]] == ["processed", "skipped"]
        assert dispatcher.send.call_count == 1

    def test_invalid_json(self, client, dispatcher):
        resp = client.post("/events", content=b"{not json", headers={"Content-Type": "application/json"})
        assert resp.json()["ok"] is False
        dispatcher.send.assert_not_called()

    def test_unclassified_error_reported(self, client, dispatcher):
        dispatcher.send.side_effect = RuntimeError("boom")
        resp = client.post("/events", json={"opsgenieAction": "create", "message": "m"})
        body = resp.json()
        assert body["ok"] is False
        assert "boom" in body["error"]

    def test_health_reports_stats(self, client):
        client.post("/events", json={"opsgenieAction": "create", "message": "m"})
        client.post("/events", json={"opsgenieAction": "nope"})
        stats = client.get("/health").json()["stats"]
        assert stats["success"] == 1
        assert stats["discarded"] == 1


class TestModuleLevelApp:
    @pytest.fixture
    def loader(self, config, monkeypatch):
        calls = []

        def fake_load_config():
            calls.append(1)
            return {"logging": {}}, config

        monkeypatch.setattr(app_module, "_app", None)
        monkeypatch.setattr(app_module, "load_config", fake_load_config)
        monkeypatch.setattr(app_module, "setup_logging", lambda **kwargs: None)
        return calls

    def test_built_on_first_access(self, loader):
        assert loader == []
        first = app_module.app
        second = app_module.app
        assert isinstance(first, FastAPI)
        assert first is second
        assert loader == [1]

    def test_serves_requests(self, loader):
        with TestClient(app_module.app) as c:
            assert c.get("/health").json()["ok"] is True

    def test_unknown_attribute(self):
        with pytest.raises(AttributeError):
            app_module.no_such_attribute
