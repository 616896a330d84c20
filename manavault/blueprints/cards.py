"""
Cards blueprint: price tracking for owned cards.

URLs:
  GET /api/cards/<card_id>/price           – current price + trend (?refresh=true forces Scryfall)
  GET /api/cards/<card_id>/price/history   – own snapshots for the card (?days=90)
"""
import logging

from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user

from manavault.utils.price_service import (
    CardNotFoundError,
    NotOwnedError,
    get_price,
    get_price_history,
)

log = logging.getLogger(__name__)
cards_bp = Blueprint("cards", __name__, url_prefix="/api/cards")

_TRUTHY = {"1", "true", "yes", "on"}


@cards_bp.route("/<card_id>/price")
@login_required
def price(card_id):
    force_refresh = request.args.get("refresh", "").lower() in _TRUTHY
    try:
        view = get_price(current_user.id, card_id, force_refresh=force_refresh)
    except NotOwnedError as exc:
        return jsonify(error=str(exc)), 404
    except CardNotFoundError as exc:
        return jsonify(error=str(exc), noPriceAvailable=True), 404
    return jsonify(view.to_dict())


@cards_bp.route("/<card_id>/price/history")
@login_required
def price_history(card_id):
    days = request.args.get("days", 90, type=int)
    days = max(1, min(days, 3650))
    try:
        history = get_price_history(current_user.id, card_id, days=days)
    except NotOwnedError as exc:
        return jsonify(error=str(exc)), 404
    return jsonify(cardId=card_id, days=days, history=history)
