"""
Card service layer: bridges Scryfall with the database.

This module owns all logic for:
  - Fetching cards from Scryfall and caching them in the Card table
  - Adding cards to a user's collections and decks (merging duplicates)

Blueprints never touch the Scryfall client directly for card data; they go
through this module so caching and error handling stay consistent.
"""
import logging
from datetime import datetime, timezone

from manavault.extensions import db
from manavault.models.card import Card
from manavault.models.collection import CollectionCard, CardCondition
from manavault.models.deck import DeckCard
from manavault.utils.scryfall import get_scryfall, normalize_card

log = logging.getLogger(__name__)

MAX_QUANTITY = 999


def get_or_create_card(scryfall_id: str) -> Card:
    """Return the cached Card for *scryfall_id*, fetching it from Scryfall on a miss.

    Raises:
        ScryfallError: the card is unknown to Scryfall or the API failed.
    """
    card = db.session.get(Card, scryfall_id)
    if card is not None:
        return card

    data = normalize_card(get_scryfall().get_card_by_id(scryfall_id))
    card = Card(**data)
    db.session.add(card)
    db.session.flush()
    log.info("Cached card %s (%s) from Scryfall.", card.name, card.scryfall_id)
    return card


def add_to_collection(collection, card: Card, quantity: int = 1, foil: bool = False,
                      condition: CardCondition = None, notes: str = None) -> tuple[CollectionCard, bool]:
    """Add *quantity* copies of *card* to *collection*.

    Merges into the existing entry for the card when there is one; the
    entry keeps its own foil flag.
    Returns (entry, created). Caller is responsible for db.session.commit().
    """
    entry = CollectionCard.query.filter_by(
        collection_id=collection.id, card_id=card.scryfall_id,
    ).first()

    if entry is not None:
        entry.quantity = min(entry.quantity + quantity, MAX_QUANTITY)
        if condition is not None:
            entry.condition = condition
        if notes:
            entry.notes = notes
        created = False
    else:
        entry = CollectionCard(
            collection_id=collection.id,
            card_id=card.scryfall_id,
            quantity=quantity,
            foil=foil,
            condition=condition or CardCondition.NM,
            notes=notes or None,
        )
        db.session.add(entry)
        created = True

    collection.updated_at = datetime.now(timezone.utc)
    return entry, created


def add_to_deck(deck, card: Card, quantity: int = 1,
                is_sideboard: bool = False) -> tuple[DeckCard, bool]:
    """Add *quantity* copies of *card* to *deck*. Same merge rules as add_to_collection."""
    entry = DeckCard.query.filter_by(deck_id=deck.id, card_id=card.scryfall_id).first()

    if entry is not None:
        entry.quantity = min(entry.quantity + quantity, MAX_QUANTITY)
        entry.is_sideboard = is_sideboard
        created = False
    else:
        entry = DeckCard(
            deck_id=deck.id,
            card_id=card.scryfall_id,
            quantity=quantity,
            is_sideboard=is_sideboard,
        )
        db.session.add(entry)
        created = True

    deck.updated_at = datetime.now(timezone.utc)
    return entry, created
