from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from flashdeck import server
from flashdeck.consts import VERSION
from flashdeck.domain.constants import SESSION_COOKIE_NAME
from flashdeck.server import app, get_services

AUTH = {"Authorization": "Bearer test-token"}


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock(t0, monkeypatch):
    c = Clock(t0)
    monkeypatch.setattr(server, "utcnow", c)
    return c


@pytest.fixture
def client(services, clock):
    app.dependency_overrides[get_services] = lambda: services
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def deck(client):
    response = client.post("/collections", json={"name": "Deck"}, headers=AUTH)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def card(client, deck):
    response = client.post(
        "/cards", json={"collectionId": deck["id"], "front": "Q", "back": "A"}, headers=AUTH
    )
    assert response.status_code == 201
    return response.json()


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == VERSION


def test_get_version(client):
    response = client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": VERSION}


# --- Auth ---


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/cards"),
        ("post", "/cards"),
        ("get", "/cards/card_x"),
        ("get", "/cards/card_x/review"),
        ("post", "/cards/card_x/review"),
        ("get", "/collections"),
        ("get", "/stats"),
    ],
)
def test_endpoints_require_auth(client, method, path):
    response = getattr(client, method)(path)
    assert response.status_code == 401
    assert response.json() == {"detail": "Unauthorized"}


def test_wrong_bearer_token(client):
    response = client.get("/cards", headers={"Authorization": "Bearer wrong"})
    assert response.status_code == 401


def test_malformed_authorization_header(client):
    response = client.get("/cards", headers={"Authorization": "Token"})
    assert response.status_code == 401


def test_login_sets_session_cookie(client):
    response = client.post("/auth", json={"username": "admin", "password": "secret"})

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert SESSION_COOKIE_NAME in response.cookies
    assert client.get("/cards").status_code == 200


def test_login_rejects_bad_credentials(client):
    response = client.post("/auth", json={"username": "admin", "password": "nope"})
    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid credentials"}


def test_expired_session_rejected(client, clock):
    client.post("/auth", json={"username": "admin", "password": "secret"})
    clock.advance(days=8)
    assert client.get("/cards").status_code == 401


def test_logout(client):
    client.post("/auth", json={"username": "admin", "password": "secret"})
    response = client.delete("/auth")

    assert response.status_code == 200
    assert client.get("/cards").status_code == 401


# --- Collections ---


def test_collection_crud(client, deck):
    assert deck["name"] == "Deck"
    assert deck["createdAt"] == "2024-03-01T12:00:00.000Z"

    listed = client.get("/collections", headers=AUTH).json()
    assert [c["id"] for c in listed] == [deck["id"]]

    response = client.put(
        f"/collections/{deck['id']}", json={"description": "Mixed"}, headers=AUTH
    )
    assert response.status_code == 200
    assert response.json()["description"] == "Mixed"

    assert client.get(f"/collections/{deck['id']}", headers=AUTH).json()["description"] == "Mixed"

    assert client.delete(f"/collections/{deck['id']}", headers=AUTH).json() == {"success": True}
    assert client.get(f"/collections/{deck['id']}", headers=AUTH).status_code == 404


def test_create_collection_requires_name(client):
    response = client.post("/collections", json={}, headers=AUTH)
    assert response.status_code == 400


def test_delete_collection_removes_cards(client, deck, card):
    client.delete(f"/collections/{deck['id']}", headers=AUTH)
    assert client.get(f"/cards/{card['id']}", headers=AUTH).status_code == 404


# --- Cards ---


def test_create_card_response(card, deck):
    assert card["id"].startswith("card_")
    assert card["collectionId"] == deck["id"]
    assert card["state"] == 0
    assert card["reps"] == 0
    assert card["due"] == "2024-03-01T12:00:00.000Z"
    assert card["noteId"] is None
    assert "lastReview" not in card


def test_create_card_by_collection_name(client, deck):
    response = client.post(
        "/cards", json={"collection": "Deck", "front": "Q", "back": "A"}, headers=AUTH
    )
    assert response.status_code == 201
    assert response.json()["collectionId"] == deck["id"]


def test_create_card_errors(client, deck):
    missing = client.post("/cards", json={"collectionId": deck["id"], "front": "Q"}, headers=AUTH)
    assert missing.status_code == 400
    assert missing.json() == {"detail": "collectionId (or collection), front, and back are required"}

    unknown = client.post(
        "/cards", json={"collection": "Nope", "front": "Q", "back": "A"}, headers=AUTH
    )
    assert unknown.status_code == 404
    assert unknown.json() == {"detail": 'Collection "Nope" not found'}

    body = {"collectionId": deck["id"], "front": "Q", "back": "A", "noteId": "n-1"}
    assert client.post("/cards", json=body, headers=AUTH).status_code == 201
    duplicate = client.post("/cards", json=body, headers=AUTH)
    assert duplicate.status_code == 409


def test_list_cards_filters(client, deck, card, clock):
    other = client.post(
        "/cards", json={"collectionId": deck["id"], "front": "Q2", "back": "A2"}, headers=AUTH
    ).json()
    client.post(f"/cards/{card['id']}/review", json={"rating": 4}, headers=AUTH)
    clock.advance(hours=1)

    assert len(client.get("/cards", headers=AUTH).json()) == 2
    due = client.get("/cards", params={"due": "true"}, headers=AUTH).json()
    assert [c["id"] for c in due] == [other["id"]]
    new = client.get("/cards", params={"new": "true"}, headers=AUTH).json()
    assert [c["id"] for c in new] == [other["id"]]
    scoped = client.get("/cards", params={"collectionId": "col_other"}, headers=AUTH).json()
    assert scoped == []


def test_update_card(client, card, clock):
    clock.advance(minutes=1)
    response = client.put(f"/cards/{card['id']}", json={"back": "B", "state": 2}, headers=AUTH)

    assert response.status_code == 200
    data = response.json()
    assert data["back"] == "B"
    assert data["front"] == "Q"
    assert data["state"] == 0
    assert data["updatedAt"] == "2024-03-01T12:01:00.000Z"


def test_delete_card(client, card):
    assert client.delete(f"/cards/{card['id']}", headers=AUTH).json() == {"success": True}
    assert client.delete(f"/cards/{card['id']}", headers=AUTH).status_code == 404


# --- Review ---


def test_review_options(client, card):
    response = client.get(f"/cards/{card['id']}/review", headers=AUTH)

    assert response.status_code == 200
    assert response.json() == [
        {"rating": 1, "interval": "1m"},
        {"rating": 2, "interval": "6m"},
        {"rating": 3, "interval": "10m"},
        {"rating": 4, "interval": "6d"},
    ]


def test_submit_review(client, card, clock):
    clock.advance(seconds=5)
    response = client.post(f"/cards/{card['id']}/review", json={"rating": 3}, headers=AUTH)

    assert response.status_code == 200
    data = response.json()
    assert data["state"] == 1
    assert data["learningSteps"] == 1
    assert data["reps"] == 1
    assert data["lastReview"] == "2024-03-01T12:00:05.000Z"
    assert data["due"] == "2024-03-01T12:10:05.000Z"
    assert data["front"] == "Q"
    assert client.get(f"/cards/{card['id']}", headers=AUTH).json() == data


@pytest.mark.parametrize("rating", [0, 5, "abc", None, True, "²"])
def test_submit_review_invalid_rating(client, card, rating):
    response = client.post(f"/cards/{card['id']}/review", json={"rating": rating}, headers=AUTH)

    assert response.status_code == 400
    assert "1 (Again)" in response.json()["detail"]


def test_review_unknown_card(client):
    assert client.get("/cards/card_x/review", headers=AUTH).status_code == 404
    response = client.post("/cards/card_x/review", json={"rating": 3}, headers=AUTH)
    assert response.status_code == 404
    assert response.json() == {"detail": "Card not found"}


def test_invalid_rating_wins_over_missing_card(client):
    response = client.post("/cards/card_x/review", json={"rating": 9}, headers=AUTH)
    assert response.status_code == 400


# --- Stats ---


def test_stats(client, deck, card):
    response = client.get("/stats", headers=AUTH)

    assert response.status_code == 200
    assert response.json() == {
        "totalCollections": 1,
        "totalCards": 1,
        "dueCards": 1,
        "newCards": 1,
        "collections": [
            {"id": deck["id"], "name": "Deck", "totalCards": 1, "dueCards": 1, "newCards": 1}
        ],
    }


# --- Store failures ---


def test_store_failure_hides_internals(client, config):
    (config.data_dir / "cards.json").write_text("{broken")

    response = client.get("/cards", headers=AUTH)

    assert response.status_code == 500
    assert response.json() == {"detail": "Storage operation failed"}
