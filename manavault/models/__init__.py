# Import all models so SQLAlchemy can discover them for db.create_all()
# Order matters: FK targets must be imported before dependents.
from manavault.models.user import User
from manavault.models.card import Card
from manavault.models.collection import Collection, CollectionCard, CardCondition
from manavault.models.deck import Deck, DeckCard, MTG_FORMATS
from manavault.models.card_price_history import CardPriceHistory

__all__ = [
    "User",
    "Card",
    "Collection", "CollectionCard", "CardCondition",
    "Deck", "DeckCard", "MTG_FORMATS",
    "CardPriceHistory",
]
