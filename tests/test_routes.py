# PerfBoard/tests/test_routes.py
# @ai-rules:
# 1. [Pattern]: Uses the real app (create_app) with a SQLite store via the `client` fixture -- full request path.
# 2. [Pattern]: `offline_client` starts the app against an unreachable store to cover the 503 paths.
# 3. [Pattern]: Store error mapping uses app.dependency_overrides[get_repository]; the fixture clears it.
"""HTTP tests: /commit, /show, /plot, /generateTestData, /health, /info."""
from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from perfboard.charts.renderer import PNG_SIGNATURE, ChartRenderer
from perfboard.dependencies import get_repository, set_renderer
from perfboard.errors import RenderError, StatementError, StoreTimeoutError
from perfboard.main import create_app
from perfboard.samples import SAMPLE_COUNT, SAMPLE_MAX_MS, SAMPLE_MIN_MS, SAMPLE_NAME
from perfboard.state.database import DatabaseClient

SCHEMA_FILE = Path(__file__).parent.parent / "CreateDatabase.sql"


class TestCommitAndShow:
    def test_commit_then_show(self, client: TestClient):
        resp = client.get("/commit/svc-bench/main/1/100")
        assert resp.status_code == 200
        assert resp.text == "inserting was successful"

        resp = client.get("/show")
        assert resp.status_code == 200
        assert resp.json() == [
            {"name": "svc-bench", "branch": "main", "build_number": 1, "time": 100}
        ]

    def test_show_empty(self, client: TestClient):
        resp = client.get("/show")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_commit_accepts_any_method(self, client: TestClient):
        assert client.post("/commit/svc-bench/main/1/100").status_code == 200
        assert client.put("/commit/svc-bench/main/2/100").status_code == 200
        assert len(client.get("/show").json()) == 2

    def test_blank_name_rejected_and_not_persisted(self, client: TestClient):
        resp = client.get("/commit/%20/main/1/100")
        assert resp.status_code == 400
        assert resp.text.startswith("fail")
        assert "name must not be empty" in resp.text
        assert client.get("/show").json() == []

    def test_negative_time_rejected(self, client: TestClient):
        resp = client.get("/commit/svc-bench/main/1/-5")
        assert resp.status_code == 400
        assert client.get("/show").json() == []

    def test_non_integer_build_number_is_422(self, client: TestClient):
        assert client.get("/commit/svc-bench/main/abc/100").status_code == 422


class TestPlot:
    def test_plot_returns_png(self, client: TestClient):
        client.get("/commit/svc-bench/main/1/100")
        client.get("/commit/svc-bench/main/2/150")
        resp = client.get("/plot/svc-bench/1/1")
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "image/png"
        assert resp.content.startswith(PNG_SIGNATURE)

    def test_plot_with_no_data_returns_placeholder(self, client: TestClient):
        resp = client.get("/plot/unknown/1/10")
        assert resp.status_code == 200
        assert resp.content.startswith(PNG_SIGNATURE)

    def test_plot_clamps_large_build_count(self, client: TestClient):
        client.get("/commit/svc-bench/main/1/100")
        resp = client.get("/plot/svc-bench/1/100000")
        assert resp.status_code == 200

    def test_render_failure_is_500(self, client: TestClient):
        class FailingRenderer:
            async def render_async(self, title, pairs):
                raise RenderError("no canvas")

        set_renderer(FailingRenderer())
        try:
            resp = client.get("/plot/svc-bench/1/10")
        finally:
            set_renderer(ChartRenderer())
        assert resp.status_code == 500
        assert resp.json()["detail"] == "Chart rendering failed"


class TestGenerateTestData:
    def test_generates_fixed_batch_in_range(self, client: TestClient):
        resp = client.get("/generateTestData")
        assert resp.status_code == 200
        assert resp.text.startswith("generating test data was successful")

        rows = client.get("/show").json()
        assert len(rows) == SAMPLE_COUNT
        assert all(row["name"] == SAMPLE_NAME for row in rows)
        assert [row["build_number"] for row in rows] == list(range(1, SAMPLE_COUNT + 1))
        assert all(SAMPLE_MIN_MS <= row["time"] < SAMPLE_MAX_MS for row in rows)


class TestServiceRoutes:
    def test_health_online(self, client: TestClient):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "store_online"}

    def test_info_lists_endpoints(self, client: TestClient):
        endpoints = client.get("/info").json()["endpoints"]
        assert "plot" in endpoints
        assert "generate_test_data" in endpoints


class TestStoreUnavailable:
    def test_health_is_503(self, offline_client: TestClient):
        assert offline_client.get("/health").status_code == 503

    def test_show_is_503(self, offline_client: TestClient):
        resp = offline_client.get("/show")
        assert resp.status_code == 503
        assert resp.json() == {"detail": "Measurement store unavailable"}

    def test_commit_is_503(self, offline_client: TestClient):
        assert offline_client.get("/commit/svc-bench/main/1/100").status_code == 503

    def test_plot_is_503(self, offline_client: TestClient):
        assert offline_client.get("/plot/svc-bench/1/10").status_code == 503

    def test_invalid_commit_never_reaches_store(self, offline_client: TestClient):
        assert offline_client.get("/commit/svc-bench/main/1/-1").status_code == 400


class StubRepository:
    """Raises a scripted store error from every read."""

    def __init__(self, error: Exception):
        self._error = error

    async def record(self, measurement):
        raise self._error

    async def list_all(self):
        raise self._error

    async def list_range(self, name, from_build, window):
        raise self._error


class TestStoreErrorMapping:
    @pytest.fixture
    def failing_store(self, client: TestClient):
        def install(error: Exception) -> TestClient:
            client.app.dependency_overrides[get_repository] = lambda: StubRepository(error)
            return client

        yield install
        client.app.dependency_overrides.clear()

    def test_timeout_is_503_with_retry_after(self, failing_store):
        client = failing_store(StoreTimeoutError("statement 42 exceeded 10s on db-primary"))
        resp = client.get("/show")
        assert resp.status_code == 503
        assert resp.headers["Retry-After"] == "1"
        assert resp.json() == {"detail": "Measurement store timed out, retry later"}
        assert "db-primary" not in resp.text

    def test_timeout_during_commit_is_503(self, failing_store):
        client = failing_store(StoreTimeoutError("statement exceeded 10s"))
        resp = client.get("/commit/svc-bench/main/1/100")
        assert resp.status_code == 503
        assert resp.headers["Retry-After"] == "1"

    def test_statement_error_outside_record_is_generic_500(self, failing_store):
        client = failing_store(StatementError('relation "default_tests" does not exist'))
        for path in ("/show", "/plot/svc-bench/1/10"):
            resp = client.get(path)
            assert resp.status_code == 500
            assert resp.json() == {"detail": "Measurement store rejected the query"}
            assert "default_tests" not in resp.text


class TestStoreComesUpLate:
    def test_schema_applied_once_database_appears(self, tmp_path: Path):
        late = tmp_path / "late"
        db = DatabaseClient(
            url=f"sqlite+aiosqlite:///{late / 'perf.db'}",
            retry_attempts=1,
            retry_delay=0.0,
            statement_timeout=5.0,
        )
        with TestClient(create_app(database=db, schema_path="")) as client:
            assert client.get("/health").status_code == 503
            assert client.get("/show").status_code == 503

            late.mkdir()

            assert client.get("/health").status_code == 200
            resp = client.get("/commit/svc-bench/main/1/100")
            assert resp.status_code == 200
            assert resp.text == "inserting was successful"
            assert client.get("/show").json() == [
                {"name": "svc-bench", "branch": "main", "build_number": 1, "time": 100}
            ]

    def test_schema_file_applied_once_database_appears(self, tmp_path: Path):
        late = tmp_path / "late"
        db = DatabaseClient(
            url=f"sqlite+aiosqlite:///{late / 'perf.db'}",
            retry_attempts=1,
            retry_delay=0.0,
        )
        with TestClient(create_app(database=db, schema_path=str(SCHEMA_FILE))) as client:
            assert client.get("/commit/svc-bench/main/1/100").status_code == 503
            late.mkdir()
            assert client.get("/commit/svc-bench/main/1/100").status_code == 200
            assert len(client.get("/show").json()) == 1
