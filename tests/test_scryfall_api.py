"""Tests for the /api/scryfall proxy endpoints."""
from manavault.models import Card
from manavault.utils.scryfall import ScryfallError
from tests.conftest import scryfall_card


def test_requires_login(client):
    assert client.get("/api/scryfall/search?q=bolt").status_code == 401


def test_search_returns_normalized_cards(client, login, scryfall):
    login()
    scryfall.add(scryfall_card("c1", name="Lightning Bolt"))
    scryfall.add(scryfall_card("c2", name="Counterspell"))

    resp = client.get("/api/scryfall/search?q=bolt")

    assert resp.status_code == 200
    data = resp.get_json()
    assert [c["scryfall_id"] for c in data["cards"]] == ["c1"]
    assert data["cards"][0]["set_code"] == "M11"
    assert data["total"] == 1
    assert data["has_more"] is False
    assert data["page"] == 1


def test_search_without_matches_is_empty(client, login):
    login()
    data = client.get("/api/scryfall/search?q=nothing").get_json()
    assert data["cards"] == []
    assert data["total"] == 0


def test_search_requires_query(client, login):
    login()
    assert client.get("/api/scryfall/search").status_code == 400


def test_search_upstream_error(client, login, scryfall):
    login()
    scryfall.errors["bolt"] = ScryfallError("Scryfall returned 503", status_code=503)
    assert client.get("/api/scryfall/search?q=bolt").status_code == 502


def test_autocomplete(client, login, scryfall):
    login()
    scryfall.add(scryfall_card("c1", name="Lightning Bolt"))
    scryfall.add(scryfall_card("c2", name="Lightning Helix"))

    resp = client.get("/api/scryfall/autocomplete?q=light")

    assert resp.status_code == 200
    assert resp.get_json() == ["Lightning Bolt", "Lightning Helix"]


def test_autocomplete_short_query_skips_scryfall(client, login, scryfall):
    login()
    assert client.get("/api/scryfall/autocomplete?q=l").get_json() == []
    assert scryfall.calls == []


def test_card_lookup_caches_card(client, login, scryfall):
    login()
    scryfall.add(scryfall_card("c1", name="Lightning Bolt"))

    first = client.get("/api/scryfall/cards/c1")
    second = client.get("/api/scryfall/cards/c1")

    assert first.status_code == 200
    assert first.get_json()["card"]["name"] == "Lightning Bolt"
    assert second.get_json() == first.get_json()
    assert scryfall.card_fetches("c1") == 1
    assert Card.query.count() == 1


def test_card_lookup_unknown(client, login):
    login()
    assert client.get("/api/scryfall/cards/nope").status_code == 404
