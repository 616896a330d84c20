"""
Collections blueprint.

A collection is a named group of cards a user owns (a binder, a box…).
Every card added here becomes eligible for price tracking.

URLs:
  GET    /api/collections                          – list own collections
  POST   /api/collections                          – create a collection
  GET    /api/collections/<id>                     – collection with its cards
  PUT    /api/collections/<id>                     – rename / edit description
  DELETE /api/collections/<id>                     – delete with all its entries
  POST   /api/collections/<id>/cards               – add a Scryfall card
  DELETE /api/collections/<id>/cards/<entry_id>    – remove an entry
"""
import logging

from flask import Blueprint, jsonify, abort
from flask_login import login_required, current_user

from manavault.extensions import db
from manavault.forms.collections import CollectionForm, AddCollectionCardForm
from manavault.models.collection import Collection, CollectionCard, CardCondition
from manavault.utils.card_service import get_or_create_card, add_to_collection
from manavault.utils.scryfall import ScryfallError

log = logging.getLogger(__name__)
collections_bp = Blueprint("collections", __name__, url_prefix="/api/collections")


def _get_own_collection(collection_id: int) -> Collection:
    """Return the collection if it belongs to the current user, else 404."""
    collection = db.session.get(Collection, collection_id)
    if collection is None or collection.user_id != current_user.id:
        abort(404)
    return collection


@collections_bp.route("")
@login_required
def index():
    collections = (
        Collection.query
        .filter_by(user_id=current_user.id)
        .order_by(Collection.name.asc())
        .all()
    )
    return jsonify(collections=[c.to_dict() for c in collections])


@collections_bp.route("", methods=["POST"])
@login_required
def create():
    form = CollectionForm()
    if not form.validate_on_submit():
        return jsonify(error="Invalid collection data", fields=form.errors), 400

    collection = Collection(
        user_id=current_user.id,
        name=form.name.data.strip(),
        description=(form.description.data or "").strip() or None,
    )
    db.session.add(collection)
    db.session.commit()
    return jsonify(collection=collection.to_dict()), 201


@collections_bp.route("/<int:collection_id>")
@login_required
def detail(collection_id):
    collection = _get_own_collection(collection_id)
    return jsonify(collection=collection.to_dict(with_cards=True))


@collections_bp.route("/<int:collection_id>", methods=["PUT"])
@login_required
def edit(collection_id):
    collection = _get_own_collection(collection_id)
    form = CollectionForm()
    if not form.validate_on_submit():
        return jsonify(error="Invalid collection data", fields=form.errors), 400

    collection.name = form.name.data.strip()
    collection.description = (form.description.data or "").strip() or None
    db.session.commit()
    return jsonify(collection=collection.to_dict())


@collections_bp.route("/<int:collection_id>", methods=["DELETE"])
@login_required
def delete(collection_id):
    collection = _get_own_collection(collection_id)
    db.session.delete(collection)
    db.session.commit()
    return jsonify(success=True)


@collections_bp.route("/<int:collection_id>/cards", methods=["POST"])
@login_required
def add_card(collection_id):
    collection = _get_own_collection(collection_id)
    form = AddCollectionCardForm()
    if not form.validate_on_submit():
        return jsonify(error="Invalid card data", fields=form.errors), 400

    try:
        card = get_or_create_card(form.card_id.data.strip())
    except ScryfallError as exc:
        db.session.rollback()
        status = 404 if exc.not_found else 502
        return jsonify(error=f"Could not load card: {exc}"), status

    entry, created = add_to_collection(
        collection,
        card,
        quantity=form.quantity.data or 1,
        foil=form.foil.data,
        condition=CardCondition(form.condition.data),
        notes=(form.notes.data or "").strip(),
    )
    db.session.commit()
    return jsonify(entry=entry.to_dict(), created=created), 201 if created else 200


@collections_bp.route("/<int:collection_id>/cards/<int:entry_id>", methods=["DELETE"])
@login_required
def remove_card(collection_id, entry_id):
    collection = _get_own_collection(collection_id)
    entry = CollectionCard.query.filter_by(id=entry_id, collection_id=collection.id).first_or_404()
    db.session.delete(entry)
    db.session.commit()
    return jsonify(success=True)
