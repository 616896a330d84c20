from datetime import timezone
from manavault.extensions import db


class PriceCacheMixin:
    """Denormalized price cache carried by every owned-card entry.

    The fields start out NULL and are written only by the price service,
    which updates every entry for a (user, card) pair together.
    """
    last_price          = db.Column(db.Float, nullable=True)
    last_price_currency = db.Column(db.String(3), nullable=True)
    last_price_check    = db.Column(db.DateTime, nullable=True)

    @property
    def last_price_check_utc(self):
        """last_price_check as an aware UTC datetime (SQLite drops the tzinfo)."""
        if self.last_price_check is None:
            return None
        if self.last_price_check.tzinfo is None:
            return self.last_price_check.replace(tzinfo=timezone.utc)
        return self.last_price_check.astimezone(timezone.utc)

    def price_cache_dict(self) -> dict:
        checked = self.last_price_check_utc
        return {
            "last_price":          self.last_price,
            "last_price_currency": self.last_price_currency,
            "last_price_check":    checked.isoformat() if checked else None,
        }
