"""
Scryfall blueprint: card lookup proxied through the shared, rate-limited client.

Clients use these to find the Scryfall ids they add to collections and decks.

URLs:
  GET /api/scryfall/search              – one page of a Scryfall search (?q=, page, unique, order, dir)
  GET /api/scryfall/autocomplete        – card-name suggestions (?q=, at least 2 characters)
  GET /api/scryfall/cards/<scryfall_id> – a single printing, cached in the Card table
"""
import logging

from flask import Blueprint, request, jsonify
from flask_login import login_required

from manavault.extensions import db
from manavault.utils.card_service import get_or_create_card
from manavault.utils.scryfall import ScryfallError, get_scryfall, normalize_card

log = logging.getLogger(__name__)
scryfall_bp = Blueprint("scryfall", __name__, url_prefix="/api/scryfall")

# Search options forwarded to Scryfall as-is
_SEARCH_OPTIONS = ("unique", "order", "dir")


@scryfall_bp.route("/search")
@login_required
def search():
    q = request.args.get("q", "").strip()
    if not q:
        return jsonify(error="Query parameter 'q' is required"), 400

    params = {k: request.args[k] for k in _SEARCH_OPTIONS if request.args.get(k)}
    params["page"] = max(1, request.args.get("page", 1, type=int))
    try:
        page = get_scryfall().search_page(q, **params)
    except ScryfallError as e:
        log.warning("Scryfall search failed for %r: %s", q, e)
        return jsonify(error=str(e)), 502

    return jsonify({
        "cards":    [normalize_card(c) for c in page.get("data", [])],
        "total":    page.get("total_cards", 0),
        "has_more": page.get("has_more", False),
        "page":     params["page"],
    })


@scryfall_bp.route("/autocomplete")
@login_required
def autocomplete():
    q = request.args.get("q", "").strip()
    if len(q) < 2:
        return jsonify([])

    try:
        names = get_scryfall().autocomplete(q)
    except ScryfallError as e:
        return jsonify(error=str(e)), 502

    resp = jsonify(names)
    resp.headers["Cache-Control"] = "private, max-age=300"
    return resp


@scryfall_bp.route("/cards/<scryfall_id>")
@login_required
def card(scryfall_id):
    try:
        card = get_or_create_card(scryfall_id)
    except ScryfallError as e:
        if e.not_found:
            return jsonify(error="Card not found"), 404
        return jsonify(error=str(e)), 502
    db.session.commit()

    resp = jsonify(card=card.to_dict())
    resp.headers["Cache-Control"] = "private, max-age=3600"
    return resp
