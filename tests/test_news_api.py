from __future__ import annotations

from fastapi.testclient import TestClient

from realty_briefing.api.news import URL_PATTERN


def _create(client: TestClient, title: str, publish_date: str, **extra) -> dict:
    body = {"title": title, "publish_date": publish_date, "link_url": "https://news.example.com/a", **extra}
    r = client.post("/api/news", json=body)
    assert r.status_code == 201, r.text
    return r.json()["data"]


def test_url_pattern() -> None:
    assert URL_PATTERN.match("https://www.example.co.kr/news/123")
    assert URL_PATTERN.match("example.com")
    assert not URL_PATTERN.match("not a url")
    assert not URL_PATTERN.match("ftp://example.com")


def test_create_and_get(client: TestClient) -> None:
    created = _create(client, "  Rates fall  ", "2026-10-01T09:00:00", subtitle="Mortgage news")
    assert created["title"] == "Rates fall"
    assert created["subtitle"] == "Mortgage news"
    assert created["is_active"] is True

    r = client.get(f"/api/news/{created['id']}")
    assert r.status_code == 200
    assert r.json()["data"]["link_url"] == "https://news.example.com/a"


def test_create_validates_required_fields_and_url(client: TestClient) -> None:
    r = client.post("/api/news", json={"title": "No date", "link_url": "https://example.com"})
    assert r.status_code == 400
    assert r.json()["success"] is False

    r = client.post(
        "/api/news",
        json={"title": "Bad url", "publish_date": "2026-10-01T09:00:00", "link_url": "not a url"},
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid URL format."


def test_list_paginates_searches_and_filters(client: TestClient) -> None:
    _create(client, "Seoul apartment prices", "2026-09-01T09:00:00")
    _create(client, "Busan market report", "2026-09-15T09:00:00", subtitle="Apartment supply")
    _create(client, "Interest rate decision", "2026-10-01T09:00:00")

    r = client.get("/api/news", params={"limit": 2})
    body = r.json()
    assert [n["title"] for n in body["data"]] == ["Interest rate decision", "Busan market report"]
    assert body["pagination"] == {
        "current_page": 1,
        "total_pages": 2,
        "total_items": 3,
        "items_per_page": 2,
    }

    r = client.get("/api/news", params={"search": "APARTMENT", "sort_order": "asc"})
    assert [n["title"] for n in r.json()["data"]] == ["Seoul apartment prices", "Busan market report"]

    r = client.get(
        "/api/news",
        params={"start_date": "2026-09-10T00:00:00", "end_date": "2026-09-30T23:59:59"},
    )
    assert [n["title"] for n in r.json()["data"]] == ["Busan market report"]


def test_update_is_partial(client: TestClient) -> None:
    created = _create(client, "Original", "2026-10-01T09:00:00", subtitle="keep me")

    r = client.put(f"/api/news/{created['id']}", json={"title": "Renamed"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["title"] == "Renamed"
    assert data["subtitle"] == "keep me"
    assert data["updated_at"] >= created["updated_at"]

    r = client.put(f"/api/news/{created['id']}", json={"link_url": "nope"})
    assert r.status_code == 400
    assert client.put("/api/news/9999", json={"title": "x"}).status_code == 404


def test_soft_delete_hides_from_lists(client: TestClient) -> None:
    keep = _create(client, "Keep", "2026-10-01T09:00:00")
    gone = _create(client, "Gone", "2026-10-02T09:00:00")

    assert client.delete(f"/api/news/{gone['id']}").status_code == 200

    assert [n["title"] for n in client.get("/api/news").json()["data"]] == ["Keep"]
    assert [n["title"] for n in client.get("/api/news/latest").json()["data"]] == ["Keep"]
    assert client.get(f"/api/news/{gone['id']}").json()["data"]["is_active"] is False
    assert keep["is_active"] is True


def test_hard_delete(client: TestClient) -> None:
    created = _create(client, "Temporary", "2026-10-01T09:00:00")

    assert client.delete(f"/api/news/{created['id']}/hard").status_code == 200
    assert client.get(f"/api/news/{created['id']}").status_code == 404
    assert client.delete(f"/api/news/{created['id']}/hard").status_code == 404


def test_latest_respects_limit(client: TestClient) -> None:
    for day in range(1, 8):
        _create(client, f"Day {day}", f"2026-10-0{day}T09:00:00")

    r = client.get("/api/news/latest")
    assert [n["title"] for n in r.json()["data"]] == ["Day 7", "Day 6", "Day 5", "Day 4", "Day 3"]
    assert len(client.get("/api/news/latest", params={"limit": 2}).json()["data"]) == 2


def test_writes_require_authentication(app) -> None:  # noqa: ANN001
    with TestClient(app) as c:
        r = c.post("/api/news", json={"title": "x", "publish_date": "2026-10-01T09:00:00", "link_url": "https://a.com"})
        assert r.status_code == 401
        assert c.get("/api/news").status_code == 200
