"""Unit tests for the results and health routers."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from jsonprobe import main as app_module
from jsonprobe.config.settings import MonitorSettings
from jsonprobe.main import create_app
from jsonprobe.middleware.error_handler import register_error_handlers
from jsonprobe.models.outcomes import SuccessMethod, UrlStatus
from jsonprobe.proxy.cors import CorsProxy
from jsonprobe.routers.health import create_health_router
from jsonprobe.routers.results import create_results_router
from jsonprobe.services.result_store import ResultStore

_FAIL = {"directError": "Not JSON", "directCaptcha": False,
         "proxyError": "Not JSON", "proxyCaptcha": False}


def _seeded_store() -> ResultStore:
    store = ResultStore(history_cap=10)
    store.record_outcome("http://a.test", UrlStatus.SUCCESS, method=SuccessMethod.DIRECT, size=8)
    store.record_outcome("http://b.test", UrlStatus.SUCCESS, method=SuccessMethod.PROXY, size=4)
    store.record_outcome("http://c.test", UrlStatus.FAILED, details=_FAIL)
    return store


@pytest.fixture
def store() -> ResultStore:
    return _seeded_store()


@pytest.fixture
def client(store: ResultStore) -> TestClient:
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(create_results_router(store=store))
    return TestClient(app, raise_server_exceptions=False)


class TestResults:
    def test_results_payload(self, client: TestClient):
        resp = client.get("/results")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert [r["url"] for r in data["results"]] == [
            "http://c.test", "http://b.test", "http://a.test",
        ]
        assert data["stats"]["success_count"] == 2
        assert data["stats"]["success_rate"] == 66.67
        assert data["counts"]["failed"] == 1

    def test_stats(self, client: TestClient):
        data = client.get("/stats").json()["data"]
        assert data["direct_count"] == 1
        assert data["proxy_count"] == 1
        assert data["unique_urls"] == 3
        assert data["total_processed"] == 3

    def test_history_filter_and_limit(self, client: TestClient):
        data = client.get("/history", params={"status": "success", "limit": 1}).json()["data"]
        assert data["count"] == 1
        assert data["results"][0]["url"] == "http://b.test"

    def test_history_bad_filter(self, client: TestClient):
        resp = client.get("/history", params={"status": "bogus"})
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_history_negative_limit_rejected(self, client: TestClient):
        assert client.get("/history", params={"limit": -1}).status_code == 422

    @pytest.mark.parametrize(
        "category,expected",
        [
            ("success", ["http://a.test", "http://b.test"]),
            ("direct", ["http://a.test"]),
            ("proxy", ["http://b.test"]),
            ("failed", ["http://c.test"]),
            ("pending", []),
            ("all", ["http://a.test", "http://b.test", "http://c.test"]),
        ],
    )
    def test_urls_by_category(self, client: TestClient, category: str, expected: list[str]):
        data = client.get(f"/urls/{category}").json()["data"]
        assert data["urls"] == expected
        assert data["count"] == len(expected)

    def test_unknown_category(self, client: TestClient):
        assert client.get("/urls/bogus").status_code == 400

    def test_lookup(self, client: TestClient):
        data = client.get("/urls/lookup", params={"url": "http://c.test"}).json()["data"]
        assert data["status"] == "failed"
        assert data["method"] is None
        assert data["details"] == _FAIL

    def test_lookup_unknown_url(self, client: TestClient):
        resp = client.get("/urls/lookup", params={"url": "http://zzz.test"})
        assert resp.status_code == 404

    def test_reset(self, client: TestClient, store: ResultStore):
        resp = client.post("/reset")
        assert resp.status_code == 200
        assert resp.json()["data"]["unique_urls"] == 0
        assert resp.json()["data"]["success_rate"] == 0.0
        assert store.urls("all") == []


class TestHealth:
    def test_health_and_config(self, settings: MonitorSettings):
        scheduler_stats = {"running": False, "pool_width": 3}

        class _Scheduler:
            def get_stats(self) -> dict:
                return scheduler_stats

        app = FastAPI()
        app.include_router(
            create_health_router(
                settings=settings, scheduler=_Scheduler(), proxy=CorsProxy(settings.cors_proxy)
            )
        )
        client = TestClient(app)

        health = client.get("/health").json()["data"]
        assert health["status"] == "healthy"
        assert health["scheduler"] == scheduler_stats
        assert health["proxy"]["base_url"] == settings.cors_proxy

        config = client.get("/config").json()["data"]
        assert config["source_url"] == settings.source_url
        assert config["cors_proxy"] == settings.cors_proxy
        assert config["workers"] == 3


class TestApp:
    def test_create_app_serves_without_scheduler(self, settings: MonitorSettings):
        app = create_app(settings)
        with patch("jsonprobe.main.configure_logging"), TestClient(app) as client:
            resp = client.get("/stats", headers={"X-Request-ID": "req-123"})
            assert resp.status_code == 200
            assert resp.headers["X-Request-ID"] == "req-123"
            assert client.get("/health").json()["data"]["scheduler"]["running"] is False

    def test_module_app_is_built_once(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(app_module, "_app", None)
        first = app_module.app
        assert app_module.app is first
        assert isinstance(first, FastAPI)
