from datetime import datetime, timezone
from manavault.extensions import db


class Card(db.Model):
    """Cached Scryfall card data.

    Each row is one specific printing (scryfall_id is unique per edition and
    per language). Cards sharing the same oracle_id are different printings
    of the same card. Prices are not stored here; they live on the owned
    collection/deck entries and in CardPriceHistory.
    """
    __tablename__ = "cards"

    scryfall_id      = db.Column(db.String(40), primary_key=True)
    oracle_id        = db.Column(db.String(40), index=True)
    name             = db.Column(db.String(200), nullable=False, index=True)
    lang             = db.Column(db.String(10), default="en")
    set_code         = db.Column(db.String(10))
    set_name         = db.Column(db.String(100))
    collector_number = db.Column(db.String(20))
    rarity           = db.Column(db.String(20))   # common/uncommon/rare/mythic
    type_line        = db.Column(db.String(200))
    mana_cost        = db.Column(db.String(100))
    image_normal     = db.Column(db.String(400))  # Scryfall CDN URL

    last_updated     = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships ────────────────────────────────────────────────────────
    collection_entries = db.relationship(
        "CollectionCard", back_populates="card", lazy="dynamic"
    )
    deck_entries = db.relationship(
        "DeckCard", back_populates="card", lazy="dynamic"
    )

    def to_dict(self) -> dict:
        return {
            "id":               self.scryfall_id,
            "oracle_id":        self.oracle_id,
            "name":             self.name,
            "lang":             self.lang,
            "set_code":         self.set_code,
            "set_name":         self.set_name,
            "collector_number": self.collector_number,
            "rarity":           self.rarity,
            "type_line":        self.type_line,
            "mana_cost":        self.mana_cost,
            "image_normal":     self.image_normal,
        }

    def __repr__(self) -> str:
        return f"<Card {self.name} [{self.set_code}]>"
