from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from roxiler_stats.api import create_app
from roxiler_stats.errors import StoreUnavailable
from roxiler_stats.store.memory import InMemoryTransactionStore


class _FakeResponse:
    def __init__(self, status_code: int, payload=None, text: str = "") -> None:
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class _UnreachableStore(InMemoryTransactionStore):
    def count_matching(self, predicate):
        raise StoreUnavailable("mongodb://secret-host:27017 timed out")

    def sum_matching(self, predicate, field):
        raise StoreUnavailable("mongodb://secret-host:27017 timed out")

    def group_count_by(self, predicate, field):
        raise StoreUnavailable("mongodb://secret-host:27017 timed out")

    def search_paginated(self, text_query=None, page=1, per_page=10):
        raise StoreUnavailable("mongodb://secret-host:27017 timed out")

    def ping(self) -> None:
        raise StoreUnavailable("down")


@pytest.fixture
def client(settings, store) -> TestClient:
    return TestClient(create_app(settings=settings, store=store))


def test_root_greets_in_plain_text(client: TestClient) -> None:
    r = client.get("/")
    assert r.status_code == 200
    assert r.text == "Welcome to Roxiler API!"
    assert r.headers["content-type"].startswith("text/plain")


@pytest.mark.parametrize("path", ["/statistics", "/bar-chart", "/pie-chart", "/combined"])
@pytest.mark.parametrize("query", ["", "?month=", "?month=%20"])
def test_month_is_required(client: TestClient, path: str, query: str) -> None:
    r = client.get(path + query)
    assert r.status_code == 400
    assert r.text == "Month is required"


def test_unknown_month_is_bad_request(client: TestClient) -> None:
    r = client.get("/bar-chart", params={"month": "Smarch"})
    assert r.status_code == 400
    assert r.text == "Invalid month"


def test_statistics(client: TestClient) -> None:
    r = client.get("/statistics", params={"month": "March"})
    assert r.status_code == 200
    body = r.json()
    assert set(body) == {"totalSaleAmount", "totalSoldItems", "totalNotSoldItems"}
    assert body["totalSoldItems"] == 4
    assert body["totalNotSoldItems"] == 2
    assert body["totalSaleAmount"] == pytest.approx(2361.44)


def test_bar_chart_has_ten_buckets(client: TestClient) -> None:
    r = client.get("/bar-chart", params={"month": "3"})
    assert r.status_code == 200
    body = r.json()
    assert len(body) == 10
    assert body[0] == {"range": "0-100", "count": 1}
    assert body[-1] == {"range": "901-above", "count": 2}


def test_pie_chart(client: TestClient) -> None:
    r = client.get("/pie-chart", params={"month": "jan"})
    assert r.status_code == 200
    assert sorted(r.json(), key=lambda x: x["category"]) == [
        {"category": "jewelery", "count": 1},
        {"category": "women's clothing", "count": 1},
    ]


def test_combined_matches_individual_endpoints(client: TestClient) -> None:
    params = {"month": "March"}
    combined = client.get("/combined", params=params).json()

    assert combined == {
        "statistics": client.get("/statistics", params=params).json(),
        "barChart": client.get("/bar-chart", params=params).json(),
        "pieChart": client.get("/pie-chart", params=params).json(),
    }


def test_transactions_defaults(client: TestClient) -> None:
    r = client.get("/transactions")
    assert r.status_code == 200
    body = r.json()
    assert body["total"] == 12
    assert len(body["transactions"]) == 10
    first = body["transactions"][0]
    assert set(first) == {"id", "title", "description", "price", "category", "image", "sold", "dateOfSale"}
    assert first["title"] == "Phone case"
    assert first["dateOfSale"].startswith("2022-03-15T10:30:00")


def test_transactions_pagination_and_search(client: TestClient) -> None:
    all_titles = [t["title"] for t in client.get("/transactions", params={"perPage": 100}).json()["transactions"]]

    page = client.get("/transactions", params={"page": 2, "perPage": 5}).json()
    assert page["total"] == 12
    assert [t["title"] for t in page["transactions"]] == all_titles[5:10]

    found = client.get("/transactions", params={"search": "SHIRT"}).json()
    assert found["total"] == 2

    by_price = client.get("/transactions", params={"search": "999.99"}).json()
    assert [t["title"] for t in by_price["transactions"]] == ["Monitor"]


@pytest.mark.parametrize("params", [{"page": 0}, {"perPage": 0}, {"page": "abc"}])
def test_transactions_rejects_bad_paging(client: TestClient, params) -> None:
    r = client.get("/transactions", params=params)
    assert r.status_code == 400
    assert r.headers["content-type"].startswith("text/plain")


@pytest.mark.parametrize(
    ("path", "message"),
    [
        ("/statistics?month=March", "Error fetching statistics"),
        ("/bar-chart?month=March", "Error fetching bar chart data"),
        ("/pie-chart?month=March", "Error fetching pie chart data"),
        ("/combined?month=March", "Error fetching combined data"),
        ("/transactions", "Error fetching transactions"),
    ],
)
def test_store_failures_are_500_without_details(settings, path: str, message: str, caplog) -> None:
    client = TestClient(create_app(settings=settings, store=_UnreachableStore()))

    with caplog.at_level(logging.ERROR):
        r = client.get(path)

    assert r.status_code == 500
    assert r.text == message
    assert "secret-host" not in r.text
    assert "secret-host" in caplog.text


def test_health(settings, client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}

    down = TestClient(create_app(settings=settings, store=_UnreachableStore()))
    assert down.get("/health").json() == {"status": "degraded"}


SEED = [
    {
        "id": 1,
        "title": "Fjallraven Backpack",
        "price": 329.85,
        "description": "Your perfect pack for everyday use",
        "category": "men's clothing",
        "image": "https://example.test/1.jpg",
        "sold": False,
        "dateOfSale": "2021-11-27T20:29:54+05:30",
    },
    {
        "id": 2,
        "title": "Slim Fit T-Shirt",
        "price": 22.3,
        "description": "Slim-fitting style",
        "category": "men's clothing",
        "image": "https://example.test/2.jpg",
        "sold": True,
        "dateOfSale": "2022-01-01T02:00:00+05:30",
    },
]


def test_initialize_replaces_dataset(client: TestClient, store, monkeypatch) -> None:
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return _FakeResponse(200, SEED)

    monkeypatch.setattr("requests.get", fake_get)

    r = client.get("/initialize")

    assert r.status_code == 200
    assert r.text == "Database initialized with seed data"
    assert calls == [("https://seed.example.test/product_transaction.json", 5.0)]
    assert client.get("/transactions").json()["total"] == 2
    # 02:00 at +05:30 on Jan 1st is still December 31st in UTC
    assert client.get("/statistics", params={"month": "December"}).json()["totalSoldItems"] == 1
    assert client.get("/statistics", params={"month": "November"}).json()["totalNotSoldItems"] == 1


def test_initialize_upstream_failure(client: TestClient, monkeypatch, caplog) -> None:
    monkeypatch.setattr("requests.get", lambda url, timeout: _FakeResponse(503, text="SlowDown: try later"))

    with caplog.at_level(logging.ERROR):
        r = client.get("/initialize")

    assert r.status_code == 500
    assert r.text == "Error initializing database"
    assert "SlowDown: try later" in caplog.text
    assert client.get("/transactions").json()["total"] == 12


def test_initialize_rejects_invalid_records(client: TestClient, monkeypatch) -> None:
    broken = [dict(SEED[0]), {"title": "no price", "sold": True}]
    monkeypatch.setattr("requests.get", lambda url, timeout: _FakeResponse(200, broken))

    r = client.get("/initialize")

    assert r.status_code == 500
    assert client.get("/transactions").json()["total"] == 12


def test_lifespan_builds_and_closes_store(settings, monkeypatch) -> None:
    built = []

    class _TrackedStore(InMemoryTransactionStore):
        closed = False

        def close(self) -> None:
            self.closed = True

    def fake_build_store(s):
        built.append(_TrackedStore())
        return built[-1]

    monkeypatch.setattr("roxiler_stats.api.build_store", fake_build_store)

    with TestClient(create_app(settings=settings)) as client:
        assert client.get("/transactions").json() == {"transactions": [], "total": 0}

    assert len(built) == 1
    assert built[0].closed is True
