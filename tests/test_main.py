import pytest
import requests
from fastapi.testclient import TestClient

from dashboard import main, proxy
from dashboard.proxy import DatasetFetchError


def _record(txn_id, *, title, price, sold, date, description="plain"):
    return {
        "id": txn_id,
        "title": title,
        "price": price,
        "description": description,
        "category": "electronics",
        "image": f"https://example.test/{txn_id}.jpg",
        "sold": sold,
        "dateOfSale": date,
    }


DATASET = [
    _record(1, title="Phone", price=50, sold=True, date="2022-01-05T10:00:00+05:30"),
    _record(2, title="Tablet", price=150, sold=False, date="2022-03-05T10:00:00+05:30"),
    _record(3, title="Laptop", price=950.25, sold=True, date="2022-03-09T10:00:00+05:30"),
    _record(4, title="Charger", price=12.5, sold=True, date="2022-03-19T10:00:00+05:30"),
    _record(5, title="Cable", price=5, sold=False, date="2022-03-21T10:00:00+05:30"),
    _record(6, title="Case", price=20, sold=True, date="2022-03-30T10:00:00+05:30", description="Fits the phone"),
]


@pytest.fixture
def client(monkeypatch):
    calls = []

    def fake_fetch(url, *, timeout=None):
        calls.append(url)
        return DATASET

    monkeypatch.setattr(main, "fetch_dataset", fake_fetch)
    monkeypatch.setattr(main.app.state, "transactions", None)
    test_client = TestClient(main.app)
    test_client.fetch_calls = calls
    return test_client


@pytest.fixture
def failing_client(monkeypatch):
    def fake_fetch(url, *, timeout=None):
        raise DatasetFetchError("connection refused")

    monkeypatch.setattr(main, "fetch_dataset", fake_fetch)
    monkeypatch.setattr(main.app.state, "transactions", None)
    return TestClient(main.app)


def test_getdata_passes_body_through(client):
    response = client.get("/api/getdata")
    assert response.status_code == 200
    assert response.json() == DATASET


def test_getdata_refetches_every_call(client):
    client.get("/api/getdata")
    client.get("/api/getdata")
    assert client.fetch_calls == [main.settings.upstream_url] * 2


def test_getdata_upstream_failure_returns_500(failing_client):
    response = failing_client.get("/api/getdata")
    assert response.status_code == 500
    payload = response.json()
    assert payload["message"] == "Error fetching data"
    assert payload["error"] == "connection refused"


def test_getdata_allows_any_origin(client):
    response = client.get(
        "/api/getdata", headers={"Origin": "http://localhost:3000"}
    )
    assert response.headers["access-control-allow-origin"] == "*"


def test_view_json_filters_and_paginates(client):
    response = client.get("/api/view", params={"month": "March"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["total_pages"] == 1
    assert [item["id"] for item in payload["items"]] == [2, 3, 4, 5, 6]
    assert payload["statistics"] == {
        "total_sales": 982.75,
        "sold_count": 3,
        "not_sold_count": 2,
    }
    assert payload["price_buckets"]["0-100"] == 3
    assert payload["price_buckets"]["901+"] == 1


def test_view_json_search_matches_description(client):
    payload = client.get("/api/view", params={"q": "PHONE"}).json()
    assert payload["search_term"] == "phone"
    assert [item["id"] for item in payload["items"]] == [1, 6]


def test_view_json_clamps_page(client):
    payload = client.get("/api/view", params={"page": 42}).json()
    assert payload["total_pages"] == 2
    assert payload["current_page"] == 2
    assert [item["id"] for item in payload["items"]] == [6]


def test_invalid_month_is_bad_request(client):
    response = client.get("/api/view", params={"month": "march"})
    assert response.status_code == 400


def test_dataset_is_fetched_once_for_dashboard_views(client):
    client.get("/")
    client.get("/api/view", params={"q": "phone"})
    client.get("/partials/dashboard", params={"page": 2})
    assert len(client.fetch_calls) == 1


def test_index_renders_dashboard(client):
    response = client.get("/")
    assert response.status_code == 200
    body = response.text
    assert "Total Sales" in body
    assert "$1032.75" in body
    assert "Phone" in body
    assert "Case" not in body
    assert 'id="price-chart"' in body


def test_index_htmx_request_returns_partial(client):
    response = client.get(
        "/", params={"q": "case"}, headers={"HX-Request": "true"}
    )
    assert response.status_code == 200
    assert "<html" not in response.text
    assert "Case" in response.text
    assert "Tablet" not in response.text


def test_partial_second_page(client):
    response = client.get("/partials/dashboard", params={"page": 2})
    assert response.status_code == 200
    assert "Case" in response.text
    assert "Phone" not in response.text


def test_dashboard_survives_upstream_failure(failing_client):
    response = failing_client.get("/")
    assert response.status_code == 200
    assert "No data available" in response.text
    assert "$0.00" in response.text

    payload = failing_client.get("/api/view").json()
    assert payload["items"] == []
    assert payload["statistics"]["sold_count"] == 0


def test_failed_fetch_is_retried_on_next_view(monkeypatch):
    outcomes = [DatasetFetchError("timeout"), DATASET]

    def fake_fetch(url, *, timeout=None):
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(main, "fetch_dataset", fake_fetch)
    monkeypatch.setattr(main.app.state, "transactions", None)
    client = TestClient(main.app)

    assert client.get("/api/view").json()["items"] == []
    assert len(client.get("/api/view").json()["items"]) == 5


def test_chart_endpoint(client):
    payload = client.get("/api/chart", params={"month": "January"}).json()
    assert payload["labels"][0] == "0-100"
    assert payload["datasets"][0]["data"][0] == 1
    assert sum(payload["datasets"][0]["data"]) == 1


def test_export_csv_contains_filtered_rows(client):
    response = client.get("/export.csv", params={"month": "March"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="transactions-march.csv"' in response.headers[
        "content-disposition"
    ]
    lines = response.content.decode("utf-8-sig").splitlines()
    assert lines[0] == "id,title,description,price,category,sold,dateOfSale"
    assert len(lines) == 6
    assert lines[2].startswith("3,Laptop,plain,950.25,electronics,yes,")


def test_getdata_non_finite_upstream_body_returns_message(monkeypatch):
    upstream = requests.Response()
    upstream.status_code = 200
    upstream._content = b'[{"id": 1, "price": NaN, "sold": true}]'

    monkeypatch.setattr(proxy.requests, "get", lambda url, timeout=None: upstream)
    client = TestClient(main.app)

    response = client.get("/api/getdata")
    assert response.status_code == 500
    assert response.json()["message"] == "Error fetching data"
