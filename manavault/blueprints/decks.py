"""
Decks blueprint.

URLs:
  GET    /api/decks                        – list own decks
  POST   /api/decks                        – create a deck
  GET    /api/decks/<id>                   – deck with its cards
  PUT    /api/decks/<id>                   – edit name / format / description
  DELETE /api/decks/<id>                   – delete with all its entries
  POST   /api/decks/<id>/cards             – add a Scryfall card
  DELETE /api/decks/<id>/cards/<entry_id>  – remove an entry
"""
import logging

from flask import Blueprint, jsonify, abort
from flask_login import login_required, current_user

from manavault.extensions import db
from manavault.forms.decks import DeckForm, AddDeckCardForm
from manavault.models.deck import Deck, DeckCard
from manavault.utils.card_service import get_or_create_card, add_to_deck
from manavault.utils.scryfall import ScryfallError

log = logging.getLogger(__name__)
decks_bp = Blueprint("decks", __name__, url_prefix="/api/decks")


def _get_own_deck(deck_id: int) -> Deck:
    """Return the deck if it belongs to the current user, else 404."""
    deck = db.session.get(Deck, deck_id)
    if deck is None or deck.user_id != current_user.id:
        abort(404)
    return deck


@decks_bp.route("")
@login_required
def index():
    decks = (
        Deck.query
        .filter_by(user_id=current_user.id)
        .order_by(Deck.updated_at.desc())
        .all()
    )
    return jsonify(decks=[d.to_dict() for d in decks])


@decks_bp.route("", methods=["POST"])
@login_required
def create():
    form = DeckForm()
    if not form.validate_on_submit():
        return jsonify(error="Invalid deck data", fields=form.errors), 400

    deck = Deck(
        user_id=current_user.id,
        name=form.name.data.strip(),
        format=form.format.data or "Casual",
        description=(form.description.data or "").strip() or None,
    )
    db.session.add(deck)
    db.session.commit()
    return jsonify(deck=deck.to_dict()), 201


@decks_bp.route("/<int:deck_id>")
@login_required
def detail(deck_id):
    deck = _get_own_deck(deck_id)
    return jsonify(deck=deck.to_dict(with_cards=True))


@decks_bp.route("/<int:deck_id>", methods=["PUT"])
@login_required
def edit(deck_id):
    deck = _get_own_deck(deck_id)
    form = DeckForm()
    if not form.validate_on_submit():
        return jsonify(error="Invalid deck data", fields=form.errors), 400

    deck.name = form.name.data.strip()
    deck.format = form.format.data or deck.format
    deck.description = (form.description.data or "").strip() or None
    db.session.commit()
    return jsonify(deck=deck.to_dict())


@decks_bp.route("/<int:deck_id>", methods=["DELETE"])
@login_required
def delete(deck_id):
    deck = _get_own_deck(deck_id)
    db.session.delete(deck)
    db.session.commit()
    return jsonify(success=True)


@decks_bp.route("/<int:deck_id>/cards", methods=["POST"])
@login_required
def add_card(deck_id):
    deck = _get_own_deck(deck_id)
    form = AddDeckCardForm()
    if not form.validate_on_submit():
        return jsonify(error="Invalid card data", fields=form.errors), 400

    try:
        card = get_or_create_card(form.card_id.data.strip())
    except ScryfallError as exc:
        db.session.rollback()
        status = 404 if exc.not_found else 502
        return jsonify(error=f"Could not load card: {exc}"), status

    entry, created = add_to_deck(
        deck, card,
        quantity=form.quantity.data or 1,
        is_sideboard=form.is_sideboard.data,
    )
    db.session.commit()
    return jsonify(entry=entry.to_dict(), created=created), 201 if created else 200


@decks_bp.route("/<int:deck_id>/cards/<int:entry_id>", methods=["DELETE"])
@login_required
def remove_card(deck_id, entry_id):
    deck = _get_own_deck(deck_id)
    entry = DeckCard.query.filter_by(id=entry_id, deck_id=deck.id).first_or_404()
    db.session.delete(entry)
    db.session.commit()
    return jsonify(success=True)
