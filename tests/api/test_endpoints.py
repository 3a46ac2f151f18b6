"""
API endpoint tests
"""

import httpx
import pytest
from fastapi.testclient import TestClient
from api.main import app
from api.dependencies import get_exporter, get_fetcher, get_runner
from ingestion.base import AcquisitionStrategy
from ingestion.cache.memory_cache import ContactSnapshotCache
from ingestion.exporters.csv_exporter import ContactExporter
from ingestion.runner import ContactIngestionRunner
from schemas.contact import AcquisitionStage


class StaticFeedSource(AcquisitionStrategy):
    stage = AcquisitionStage.PRIMARY
    name = "static feed"

    def __init__(self, csv_text):
        self.csv_text = csv_text
        self.calls = 0

    async def acquire(self) -> str:
        self.calls += 1
        return self.csv_text


@pytest.fixture
def source(feed_csv):
    return StaticFeedSource(feed_csv)


@pytest.fixture
def runner(source, make_fetcher, make_cache_store):
    store = make_cache_store(make_fetcher(lambda request: httpx.Response(503)))
    return ContactIngestionRunner(
        strategies=[source],
        snapshot_cache=ContactSnapshotCache(ttl_seconds=300),
        cache_store=store,
        use_local_csv=False
    )


@pytest.fixture
def client(runner, tmp_path):
    """Create test client with runner and exporter overrides"""
    app.dependency_overrides[get_runner] = lambda: runner
    app.dependency_overrides[get_exporter] = lambda: ContactExporter(export_dir=str(tmp_path / "exports"))

    yield TestClient(app)

    app.dependency_overrides.clear()


def test_root_endpoint(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["endpoints"]["contacts"] == "/contacts"


def test_health_before_first_load(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["connection_status"] == "connecting"
    assert data["last_stage"] is None
    assert data["snapshot_size"] == 0
    assert data["cache"] is None


def test_list_contacts(client, source):
    response = client.get("/contacts")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert data["connection_status"] == "connected"
    assert data["stage"] == "primary"
    assert response.headers["X-Connection-Status"] == "connected"
    assert [item["name"] for item in data["items"]] == ["Alice Walker", "Bob Stone", "Carol King"]
    assert "original" not in data["items"][0]
    assert "_original" not in data["items"][0]
    assert data["items"][0]["zip"] == "02134"

    client.get("/contacts")
    assert source.calls == 1


def test_list_contacts_with_filters(client):
    data = client.get("/contacts", params={"filter_by": "company"}).json()
    assert data["total"] == 2
    assert data["filters_applied"] == {"filter_by": "company"}

    data = client.get("/contacts", params={"search": "CAROL"}).json()
    assert [item["name"] for item in data["items"]] == ["Carol King"]


def test_invalid_filter_is_rejected(client):
    response = client.get("/contacts", params={"filter_by": "balance"})

    assert response.status_code == 422


def test_refresh_forces_reacquisition(client, source):
    client.get("/contacts")
    response = client.post("/contacts/refresh")

    assert response.status_code == 200
    assert response.json()["total"] == 3
    assert source.calls == 2


def test_export_endpoint(client):
    response = client.get("/contacts/export", params={"filter_by": "location"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="contacts_location_' in response.headers["content-disposition"]

    lines = response.text.splitlines()
    assert lines[0] == "name,company,email,phone,address,city,state,country,zip,balance"
    assert len(lines) == 4


def test_cached_csv_endpoint(client, runner, feed_csv):
    assert client.get("/contacts/cache").status_code == 404

    runner.cache_store.write(feed_csv)
    response = client.get("/contacts/cache")

    assert response.status_code == 200
    assert response.text == feed_csv

    health = client.get("/health").json()
    assert health["cache"]["size"] == str(len(feed_csv.encode("utf-8")))


def test_clear_cache(client, runner, source, feed_csv):
    client.get("/contacts")
    runner.cache_store.write(feed_csv)

    response = client.delete("/cache")

    assert response.status_code == 200
    assert response.json()["message"] == "Cache cleared"
    assert runner.cache_store.read_cached() is None
    assert runner.snapshot_cache.snapshot is None

    client.get("/contacts")
    assert source.calls == 2


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert "X-API-Latency-ms" in response.headers


@pytest.mark.parametrize("status_code, reachable", [(200, True), (503, False)])
def test_health_reachability_check(client, make_fetcher, status_code, reachable):
    methods = []

    def handler(request):
        methods.append(request.method)
        return httpx.Response(status_code)

    app.dependency_overrides[get_fetcher] = lambda: make_fetcher(handler)

    assert client.get("/health").json()["source_reachable"] is None
    assert methods == []

    data = client.get("/health", params={"check": "true"}).json()
    assert data["source_reachable"] is reachable
    assert methods == ["HEAD"]
