"""
CardPriceHistory model.

Per-user, per-card price snapshots. A row is appended each time the price
service refreshes a card's price from Scryfall, unless the newest row is
still fresh and carries the same price. Rows are never updated or deleted.
"""
from datetime import datetime, timezone
from manavault.extensions import db


class CardPriceHistory(db.Model):
    __tablename__ = "card_price_history"
    __table_args__ = (
        db.Index("ix_card_price_history_user_card_checked", "user_id", "card_id", "checked_at"),
    )

    id         = db.Column(db.Integer, primary_key=True)
    user_id    = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    card_id    = db.Column(
        db.String(40),
        db.ForeignKey("cards.scryfall_id", ondelete="CASCADE"),
        nullable=False,
    )
    price      = db.Column(db.Float, nullable=False)
    price_foil = db.Column(db.Float, nullable=True)   # reserved, never written
    currency   = db.Column(db.String(3), nullable=False)
    checked_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    @property
    def checked_at_utc(self) -> datetime:
        if self.checked_at.tzinfo is None:
            return self.checked_at.replace(tzinfo=timezone.utc)
        return self.checked_at.astimezone(timezone.utc)

    def to_dict(self) -> dict:
        return {
            "checkedAt": self.checked_at_utc.isoformat(),
            "price":     self.price,
            "currency":  self.currency,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<CardPriceHistory user={self.user_id} {self.card_id} @{self.checked_at}>"
