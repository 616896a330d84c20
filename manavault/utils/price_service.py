"""
Price service: per-user price tracking for owned cards.

Public API:
  get_price(user_id, card_id, force_refresh=False, now=None) -> PriceView
      Serve the cached price while it is fresh, otherwise refetch it from
      Scryfall, append a CardPriceHistory row and fan the new price out to
      every collection/deck entry the user holds for that card.

  get_price_history(user_id, card_id, days=90) -> list[dict]
      Return the user's price snapshots for the card, oldest-first.

  classify_change(percent) -> "up" | "down" | "stable"
      Trend label with a ±2 % dead-band.

Price tracking is only available for cards the user has recorded in at least
one collection or deck (NotOwnedError otherwise). Upstream problems never
fail the request: the service falls back to the cached price, or to a
"no price available" view.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from manavault.extensions import db
from manavault.models.card_price_history import CardPriceHistory
from manavault.models.collection import Collection, CollectionCard
from manavault.models.deck import Deck, DeckCard
from manavault.utils.scryfall import ScryfallError, get_scryfall

log = logging.getLogger(__name__)

DEFAULT_CURRENCY = "EUR"
TREND_DEAD_BAND = 2.0   # percent

# Scryfall price keys in preference order
_PRICE_KEYS = (("eur", "EUR"), ("usd", "USD"))


class PriceServiceError(Exception):
    def __init__(self, card_id: str, message: str):
        super().__init__(message)
        self.card_id = card_id


class NotOwnedError(PriceServiceError):
    """The user has no collection or deck entry for this card."""
    def __init__(self, card_id: str):
        super().__init__(card_id, "Card not found in your collections or decks")


class CardNotFoundError(PriceServiceError):
    """Scryfall does not know this card id."""
    def __init__(self, card_id: str):
        super().__init__(card_id, "Card not found on Scryfall")


# ── Data classes ──────────────────────────────────────────────────────────────

@dataclass
class PriceQuote:
    """A single-currency price read from a Scryfall card object.

    amount is None when the printing carries no usable price; `fallback`
    marks a quote borrowed from the English printing.
    """
    amount: float | None = None
    currency: str | None = None
    source_id: str | None = None
    fallback: bool = False

    @property
    def available(self) -> bool:
        return self.amount is not None


@dataclass
class OwnedRecords:
    """Every collection and deck entry a user holds for one card."""
    collection_entries: list = field(default_factory=list)
    deck_entries: list = field(default_factory=list)

    @property
    def entries(self) -> list:
        return self.collection_entries + self.deck_entries

    @property
    def is_empty(self) -> bool:
        return not self.collection_entries and not self.deck_entries

    def freshest_cached(self, since: datetime = None):
        """Most recently checked entry holding a cached price, optionally newer than *since*."""
        candidates = [
            e for e in self.entries
            if e.last_price is not None
            and e.last_price_check is not None
            and (since is None or e.last_price_check_utc > since)
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda e: e.last_price_check_utc)

    def in_sync(self, quote: PriceQuote) -> bool:
        """True when every entry already caches *quote* with the same check time."""
        checks = {e.last_price_check_utc for e in self.entries}
        return (
            len(checks) == 1
            and None not in checks
            and all(e.last_price == quote.amount and e.last_price_currency == quote.currency
                    for e in self.entries)
        )

    def last_checked(self) -> datetime | None:
        checks = [e.last_price_check_utc for e in self.entries if e.last_price_check is not None]
        return max(checks) if checks else None

    def owned_in(self) -> dict:
        return {
            "collections": [
                {
                    "id":       e.collection.id,
                    "name":     e.collection.name,
                    "quantity": e.quantity,
                    "foil":     e.foil,
                }
                for e in self.collection_entries
            ],
            "decks": [
                {
                    "id":       e.deck.id,
                    "name":     e.deck.name,
                    "quantity": e.quantity,
                }
                for e in self.deck_entries
            ],
        }


@dataclass
class PriceView:
    card_id: str
    price: float | None
    currency: str
    price_change: str | None
    price_change_percent: float | None
    last_checked: datetime
    no_price_available: bool
    owned_in: dict
    cached: bool = False
    price_foil: float | None = None   # reserved

    def to_dict(self) -> dict:
        data = {
            "cardId":             self.card_id,
            "price":              self.price,
            "priceFoil":          self.price_foil,
            "currency":           self.currency,
            "priceChange":        self.price_change,
            "priceChangePercent": self.price_change_percent,
            "lastChecked":        self.last_checked.isoformat(),
            "noPriceAvailable":   self.no_price_available,
            "ownedIn":            self.owned_in,
        }
        if self.cached:
            data["cached"] = True
        return data


# ── Trend helpers ─────────────────────────────────────────────────────────────

def classify_change(percent) -> str:
    """Label a percentage move; anything within ±2 % is noise."""
    if percent > TREND_DEAD_BAND:
        return "up"
    if percent < -TREND_DEAD_BAND:
        return "down"
    return "stable"


def compute_trend(current: float | None, prior: float | None) -> tuple[str | None, float | None]:
    """Return (label, percent rounded to 0.1) or (None, None) without a usable baseline.

    Prices are cent strings on Scryfall, so the move is computed in Decimal:
    1.50 -> 1.53 is exactly +2 % and stays inside the dead-band.
    """
    if current is None or prior is None or prior <= 0:
        return None, None
    current, prior = Decimal(str(current)), Decimal(str(prior))
    percent = (current - prior) / prior * 100
    return classify_change(percent), round(float(percent), 1)


# ── Quote extraction ──────────────────────────────────────────────────────────

def extract_quote(card: dict | None, fallback: bool = False) -> PriceQuote:
    """Read the preferred price (EUR, then USD) from a raw Scryfall card."""
    if not card:
        return PriceQuote(fallback=fallback)
    prices = card.get("prices")
    if not isinstance(prices, dict):
        return PriceQuote(source_id=card.get("id"), fallback=fallback)
    for key, currency in _PRICE_KEYS:
        amount = _to_price(prices.get(key))
        if amount is not None:
            return PriceQuote(amount, currency, card.get("id"), fallback)
    return PriceQuote(source_id=card.get("id"), fallback=fallback)


def resolve_quote(card: dict) -> PriceQuote:
    """Quote for *card*, borrowing the English printing's price when it has none.

    Non-English printings usually carry no prices on Scryfall.
    """
    quote = extract_quote(card)
    if quote.available or not card.get("oracle_id"):
        return quote

    try:
        english = get_scryfall().find_english_printing(card["oracle_id"])
    except ScryfallError as exc:
        log.warning("Price lookup: English printing search failed for oracle %s: %s",
                    card["oracle_id"], exc)
        return quote
    return extract_quote(english, fallback=True)


# ── Main operation ────────────────────────────────────────────────────────────

def get_price(user_id: int, card_id: str, force_refresh: bool = False,
              now: datetime = None) -> PriceView:
    """Return an up-to-date price view for a card the user owns.

    Raises:
        NotOwnedError:     the user has no entry for this card (nothing fetched).
        CardNotFoundError: Scryfall answered 404 for this card id.
    """
    now = _as_utc(now) if now else datetime.now(timezone.utc)
    stale_cutoff = now - stale_window()

    owned = find_owned_records(user_id, card_id)
    if owned.is_empty:
        raise NotOwnedError(card_id)

    if not force_refresh:
        fresh = owned.freshest_cached(since=stale_cutoff)
        if fresh is not None:
            log.debug("Price lookup: cache hit for %s (user %s)", card_id, user_id)
            return _cached_view(user_id, card_id, fresh, owned, stale_cutoff)

    try:
        card = get_scryfall().get_card_by_id(card_id)
    except ScryfallError as exc:
        if exc.not_found:
            raise CardNotFoundError(card_id) from exc
        log.warning("Price lookup: Scryfall unavailable for %s (%s), serving cached data.",
                    card_id, exc)
        cached = owned.freshest_cached()
        if cached is not None:
            return _cached_view(user_id, card_id, cached, owned, stale_cutoff)
        return _no_price_view(card_id, owned, now)

    quote = resolve_quote(card)
    if not quote.available:
        return _no_price_view(card_id, owned, now)

    last_checked = now
    latest = (
        CardPriceHistory.query
        .filter_by(user_id=user_id, card_id=card_id)
        .order_by(CardPriceHistory.checked_at.desc(), CardPriceHistory.id.desc())
        .first()
    )
    unchanged = (
        latest is not None
        and latest.checked_at_utc > stale_cutoff
        and latest.price == quote.amount
    )
    if not unchanged:
        _record_price(user_id, card_id, quote, owned, now)
    elif owned.in_sync(quote):
        last_checked = owned.last_checked()
    else:
        # Entries added since the last snapshot still hold an old or empty cache.
        _record_price(user_id, card_id, quote, owned, now, with_history=False)

    change, percent = _trend(user_id, card_id, quote.amount, stale_cutoff)
    return PriceView(
        card_id=card_id,
        price=quote.amount,
        currency=quote.currency,
        price_change=change,
        price_change_percent=percent,
        last_checked=last_checked,
        no_price_available=False,
        owned_in=owned.owned_in(),
    )


def find_owned_records(user_id: int, card_id: str) -> OwnedRecords:
    collection_entries = (
        CollectionCard.query
        .join(Collection, CollectionCard.collection_id == Collection.id)
        .filter(Collection.user_id == user_id, CollectionCard.card_id == card_id)
        .order_by(CollectionCard.id)
        .all()
    )
    deck_entries = (
        DeckCard.query
        .join(Deck, DeckCard.deck_id == Deck.id)
        .filter(Deck.user_id == user_id, DeckCard.card_id == card_id)
        .order_by(DeckCard.id)
        .all()
    )
    return OwnedRecords(collection_entries, deck_entries)


def get_price_history(user_id: int, card_id: str, days: int = 90,
                      now: datetime = None) -> list[dict]:
    """Return the user's snapshots for the last *days* days, oldest-first.

    Each item: {"checkedAt": iso8601, "price": float, "currency": "EUR"|"USD"}
    """
    if find_owned_records(user_id, card_id).is_empty:
        raise NotOwnedError(card_id)

    now = _as_utc(now) if now else datetime.now(timezone.utc)
    rows = (
        CardPriceHistory.query
        .filter(
            CardPriceHistory.user_id == user_id,
            CardPriceHistory.card_id == card_id,
            CardPriceHistory.checked_at >= now - timedelta(days=days),
        )
        .order_by(CardPriceHistory.checked_at.asc(), CardPriceHistory.id.asc())
        .all()
    )
    return [r.to_dict() for r in rows]


def stale_window() -> timedelta:
    return timedelta(hours=current_app.config.get("PRICE_STALE_HOURS", 24))


# ── Internal helpers ──────────────────────────────────────────────────────────

def _record_price(user_id: int, card_id: str, quote: PriceQuote,
                  owned: OwnedRecords, now: datetime, with_history: bool = True) -> bool:
    """Append a history row (unless *with_history* is False) and fan the
    price out to every owned entry, in a single commit.

    The entries are a cache: a failed write is logged and rolled back, and
    the next lookup reconciles them.
    """
    try:
        if with_history:
            _append_history(user_id, card_id, quote, now)
        _fan_out(owned, quote, now)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        log.exception("Price refresh: could not persist price for %s (user %s)", card_id, user_id)
        return False

    log.info("Price refresh: %s = %.2f %s for user %s (%d entries updated%s%s).",
             card_id, quote.amount, quote.currency, user_id, len(owned.entries),
             "" if with_history else ", cache only",
             ", English printing" if quote.fallback else "")
    return True


def _append_history(user_id: int, card_id: str, quote: PriceQuote, now: datetime) -> None:
    db.session.add(CardPriceHistory(
        user_id=user_id,
        card_id=card_id,
        price=quote.amount,
        currency=quote.currency,
        checked_at=now,
    ))


def _fan_out(owned: OwnedRecords, quote: PriceQuote, now: datetime) -> None:
    """Batch-update the price cache of every collection and deck entry."""
    values = {
        "last_price":          quote.amount,
        "last_price_currency": quote.currency,
        "last_price_check":    now,
    }
    for model, entries in ((CollectionCard, owned.collection_entries),
                           (DeckCard, owned.deck_entries)):
        ids = [e.id for e in entries]
        if ids:
            model.query.filter(model.id.in_(ids)).update(
                values, synchronize_session="fetch"
            )


def _trend(user_id: int, card_id: str, current: float | None,
           stale_cutoff: datetime) -> tuple[str | None, float | None]:
    """Compare against the newest positive snapshot older than the staleness cutoff."""
    prior = (
        CardPriceHistory.query
        .filter(
            CardPriceHistory.user_id == user_id,
            CardPriceHistory.card_id == card_id,
            CardPriceHistory.checked_at < stale_cutoff,
            CardPriceHistory.price > 0,
        )
        .order_by(CardPriceHistory.checked_at.desc(), CardPriceHistory.id.desc())
        .first()
    )
    return compute_trend(current, prior.price if prior else None)


def _cached_view(user_id: int, card_id: str, entry, owned: OwnedRecords,
                 stale_cutoff: datetime) -> PriceView:
    change, percent = _trend(user_id, card_id, entry.last_price, stale_cutoff)
    return PriceView(
        card_id=card_id,
        price=entry.last_price,
        currency=entry.last_price_currency or DEFAULT_CURRENCY,
        price_change=change,
        price_change_percent=percent,
        last_checked=entry.last_price_check_utc,
        no_price_available=False,
        owned_in=owned.owned_in(),
        cached=True,
    )


def _no_price_view(card_id: str, owned: OwnedRecords, now: datetime) -> PriceView:
    return PriceView(
        card_id=card_id,
        price=None,
        currency=DEFAULT_CURRENCY,
        price_change=None,
        price_change_percent=None,
        last_checked=owned.last_checked() or now,
        no_price_available=True,
        owned_in=owned.owned_in(),
    )


def _to_price(val) -> float | None:
    """Convert a Scryfall price string ('1.23', None) to a positive float or None."""
    try:
        amount = float(val) if val is not None else None
    except (TypeError, ValueError):
        return None
    if amount is None or not math.isfinite(amount) or amount <= 0:
        return None
    return amount


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
