"""
Shared fixtures.

Every test gets a fresh app on an in-memory SQLite database and a
FakeScryfall client in place of the real HTTP one, so nothing here
touches the network.
"""
from datetime import datetime, timezone

import pytest

from manavault import create_app
from manavault.extensions import db
from manavault.models import User, Card, Collection, CollectionCard, Deck, DeckCard
from manavault.utils.scryfall import ScryfallError

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def scryfall_card(card_id, name="Lightning Bolt", eur=None, usd=None,
                  lang="en", oracle_id="oracle-bolt", **extra):
    """Minimal raw Scryfall card object."""
    data = {
        "object":           "card",
        "id":               card_id,
        "oracle_id":        oracle_id,
        "name":             name,
        "lang":             lang,
        "set":              "m11",
        "set_name":         "Magic 2011",
        "collector_number": "149",
        "rarity":           "common",
        "type_line":        "Instant",
        "mana_cost":        "{R}",
        "image_uris":       {"normal": f"https://cards.scryfall.io/normal/{card_id}.jpg"},
        "prices":           {"eur": eur, "usd": usd, "eur_foil": None, "usd_foil": None},
    }
    data.update(extra)
    return data


class FakeScryfall:
    """Stands in for ScryfallClient; records every call it receives."""

    def __init__(self):
        self.cards = {}
        self.english = {}
        self.errors = {}
        self.calls = []

    def init_app(self, app):
        app.extensions["scryfall"] = self

    def add(self, card: dict) -> dict:
        self.cards[card["id"]] = card
        return card

    def set_prices(self, card_id, eur=None, usd=None):
        self.cards[card_id]["prices"] = {"eur": eur, "usd": usd}

    def get_card_by_id(self, scryfall_id):
        self.calls.append(("card", scryfall_id))
        if scryfall_id in self.errors:
            raise self.errors[scryfall_id]
        if scryfall_id not in self.cards:
            raise ScryfallError("Card not found", status_code=404, not_found=True)
        return self.cards[scryfall_id]

    def search_page(self, query, **params):
        self.calls.append(("search", query))
        if query in self.errors:
            raise self.errors[query]
        found = [c for c in self.cards.values() if query.lower() in c["name"].lower()]
        return {"object": "list", "data": found, "total_cards": len(found), "has_more": False}

    def search_cards(self, query, **params):
        return self.search_page(query, **params)["data"]

    def autocomplete(self, query):
        self.calls.append(("autocomplete", query))
        if query in self.errors:
            raise self.errors[query]
        return sorted({c["name"] for c in self.cards.values()
                       if c["name"].lower().startswith(query.lower())})

    def find_english_printing(self, oracle_id):
        self.calls.append(("english", oracle_id))
        if oracle_id in self.errors:
            raise self.errors[oracle_id]
        return self.english.get(oracle_id)

    def card_fetches(self, card_id=None) -> int:
        return sum(1 for kind, arg in self.calls
                   if kind == "card" and (card_id is None or arg == card_id))


@pytest.fixture
def scryfall():
    return FakeScryfall()


@pytest.fixture
def app(scryfall):
    flask_app = create_app("testing", scryfall=scryfall)
    with flask_app.app_context():
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make_user(username="alice", password="password123"):
        user = User(username=username, email=f"{username}@example.com")
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture
def make_card(app, scryfall):
    """Cache a Card row and register the same card with the fake Scryfall."""
    def _make_card(card_id="c1", **kwargs):
        data = scryfall.add(scryfall_card(card_id, **kwargs))
        card = Card(
            scryfall_id=card_id,
            oracle_id=data["oracle_id"],
            name=data["name"],
            lang=data["lang"],
            set_code=data["set"].upper(),
        )
        db.session.add(card)
        db.session.commit()
        return card
    return _make_card


@pytest.fixture
def own_in_collection(app):
    def _own(user, card, name="Modern", quantity=1, foil=False):
        collection = Collection.query.filter_by(user_id=user.id, name=name).first()
        if collection is None:
            collection = Collection(user_id=user.id, name=name)
            db.session.add(collection)
            db.session.flush()
        entry = CollectionCard(
            collection_id=collection.id, card_id=card.scryfall_id,
            quantity=quantity, foil=foil,
        )
        db.session.add(entry)
        db.session.commit()
        return entry
    return _own


@pytest.fixture
def own_in_deck(app):
    def _own(user, card, name="Burn", quantity=1):
        deck = Deck.query.filter_by(user_id=user.id, name=name).first()
        if deck is None:
            deck = Deck(user_id=user.id, name=name, format="Modern")
            db.session.add(deck)
            db.session.flush()
        entry = DeckCard(deck_id=deck.id, card_id=card.scryfall_id, quantity=quantity)
        db.session.add(entry)
        db.session.commit()
        return entry
    return _own


@pytest.fixture
def login(client, make_user):
    """Create a user and log the test client in as them."""
    def _login(username="alice", password="password123"):
        user = make_user(username, password)
        resp = client.post("/auth/login", json={"login": username, "password": password})
        assert resp.status_code == 200
        return user
    return _login
