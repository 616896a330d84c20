from datetime import datetime, timezone
from manavault.extensions import db
from manavault.models.price_cache import PriceCacheMixin

# Valid MTG formats, stored as plain strings
MTG_FORMATS = [
    "Commander",
    "Standard",
    "Pioneer",
    "Modern",
    "Legacy",
    "Vintage",
    "Pauper",
    "Casual",
    "Other",
]


class Deck(db.Model):
    """A named deck belonging to a user.

    Deck entries are independent of collection entries: the same card can be
    recorded in a collection and in any number of decks.
    """
    __tablename__ = "decks"

    id          = db.Column(db.Integer, primary_key=True)
    user_id     = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name        = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    format      = db.Column(db.String(30), default="Casual")
    created_at  = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at  = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships ────────────────────────────────────────────────────────
    user  = db.relationship("User", back_populates="decks")
    cards = db.relationship(
        "DeckCard", back_populates="deck", lazy="dynamic",
        cascade="all, delete-orphan",
    )

    @property
    def total_quantity(self) -> int:
        from sqlalchemy import func
        result = (
            db.session.query(func.sum(DeckCard.quantity))
            .filter(DeckCard.deck_id == self.id)
            .scalar()
        )
        return result or 0

    def to_dict(self, with_cards: bool = False) -> dict:
        data = {
            "id":             self.id,
            "name":           self.name,
            "description":    self.description,
            "format":         self.format,
            "total_quantity": self.total_quantity,
            "created_at":     self.created_at.isoformat() if self.created_at else None,
        }
        if with_cards:
            data["cards"] = [entry.to_dict() for entry in self.cards.all()]
        return data

    def __repr__(self) -> str:
        return f"<Deck {self.name!r} (user={self.user_id})>"


class DeckCard(PriceCacheMixin, db.Model):
    """N copies of one card printing slotted into a deck."""
    __tablename__ = "deck_cards"
    __table_args__ = (
        db.UniqueConstraint("deck_id", "card_id", name="uq_deck_cards_deck_card"),
    )

    id           = db.Column(db.Integer, primary_key=True)
    deck_id      = db.Column(
        db.Integer, db.ForeignKey("decks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    card_id      = db.Column(
        db.String(40), db.ForeignKey("cards.scryfall_id"), nullable=False, index=True
    )
    quantity     = db.Column(db.Integer, default=1, nullable=False)
    is_sideboard = db.Column(db.Boolean, default=False, nullable=False)

    # ── Relationships ────────────────────────────────────────────────────────
    deck = db.relationship("Deck", back_populates="cards")
    card = db.relationship("Card", back_populates="deck_entries")

    def to_dict(self) -> dict:
        data = {
            "id":           self.id,
            "card_id":      self.card_id,
            "name":         self.card.name if self.card else None,
            "quantity":     self.quantity,
            "is_sideboard": self.is_sideboard,
        }
        data.update(self.price_cache_dict())
        return data

    def __repr__(self) -> str:
        return f"<DeckCard {self.quantity}x {self.card_id} [deck={self.deck_id}]>"
