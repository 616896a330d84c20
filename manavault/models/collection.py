import enum
from datetime import datetime, timezone
from manavault.extensions import db
from manavault.models.price_cache import PriceCacheMixin


class CardCondition(enum.Enum):
    NM = "NM"   # Near Mint
    EX = "EX"   # Excellent
    GD = "GD"   # Good
    LP = "LP"   # Lightly Played
    PL = "PL"   # Played
    PO = "PO"   # Poor

    @property
    def label(self) -> str:
        labels = {
            "NM": "Near Mint",
            "EX": "Excellent",
            "GD": "Good",
            "LP": "Lightly Played",
            "PL": "Played",
            "PO": "Poor",
        }
        return labels[self.value]


class Collection(db.Model):
    """A named card collection (binder, box, shoebox…) belonging to a user."""
    __tablename__ = "collections"

    id          = db.Column(db.Integer, primary_key=True)
    user_id     = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name        = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    created_at  = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at  = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships ────────────────────────────────────────────────────────
    user  = db.relationship("User", back_populates="collections")
    cards = db.relationship(
        "CollectionCard", back_populates="collection", lazy="dynamic",
        cascade="all, delete-orphan",
    )

    @property
    def total_quantity(self) -> int:
        """Sum of all card quantities (4x Lightning Bolt counts as 4)."""
        from sqlalchemy import func
        result = (
            db.session.query(func.sum(CollectionCard.quantity))
            .filter(CollectionCard.collection_id == self.id)
            .scalar()
        )
        return result or 0

    def to_dict(self, with_cards: bool = False) -> dict:
        data = {
            "id":             self.id,
            "name":           self.name,
            "description":    self.description,
            "total_quantity": self.total_quantity,
            "created_at":     self.created_at.isoformat() if self.created_at else None,
        }
        if with_cards:
            data["cards"] = [entry.to_dict() for entry in self.cards.all()]
        return data

    def __repr__(self) -> str:
        return f"<Collection {self.name!r} (user={self.user_id})>"


class CollectionCard(PriceCacheMixin, db.Model):
    """N copies of one card printing held in a collection.

    One row per (collection, card); adding the same card again bumps quantity.
    """
    __tablename__ = "collection_cards"
    __table_args__ = (
        db.UniqueConstraint("collection_id", "card_id", name="uq_collection_cards_collection_card"),
    )

    id            = db.Column(db.Integer, primary_key=True)
    collection_id = db.Column(
        db.Integer, db.ForeignKey("collections.id", ondelete="CASCADE"), nullable=False, index=True
    )
    card_id       = db.Column(
        db.String(40), db.ForeignKey("cards.scryfall_id"), nullable=False, index=True
    )
    quantity      = db.Column(db.Integer, default=1, nullable=False)
    foil          = db.Column(db.Boolean, default=False, nullable=False)
    condition     = db.Column(
        db.Enum(CardCondition), default=CardCondition.NM, nullable=False
    )
    notes         = db.Column(db.String(500))

    # ── Relationships ────────────────────────────────────────────────────────
    collection = db.relationship("Collection", back_populates="cards")
    card       = db.relationship("Card", back_populates="collection_entries")

    def to_dict(self) -> dict:
        data = {
            "id":        self.id,
            "card_id":   self.card_id,
            "name":      self.card.name if self.card else None,
            "quantity":  self.quantity,
            "foil":      self.foil,
            "condition": self.condition.value if self.condition else None,
            "notes":     self.notes,
        }
        data.update(self.price_cache_dict())
        return data

    def __repr__(self) -> str:
        return f"<CollectionCard {self.quantity}x {self.card_id} [collection={self.collection_id}]>"
