"""
Profile blueprint: the logged-in user's own account details.

URLs:
  GET   /api/user/profile  – account details with collection and deck counts
  PATCH /api/user/profile  – update display name and/or interface language
"""
import logging

from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user

from manavault.extensions import db
from manavault.forms.auth import ProfileForm

log = logging.getLogger(__name__)
profile_bp = Blueprint("profile", __name__, url_prefix="/api/user")


@profile_bp.route("/profile")
@login_required
def profile():
    data = current_user.to_dict()
    data["collection_count"] = current_user.collections.count()
    data["deck_count"] = current_user.decks.count()
    return jsonify(user=data)


@profile_bp.route("/profile", methods=["PATCH"])
@login_required
def update_profile():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify(error="No data provided"), 400

    form = ProfileForm()
    if not form.validate_on_submit():
        return jsonify(error="Invalid profile data", fields=form.errors), 400

    if "name" in payload:
        current_user.display_name = (form.name.data or "").strip() or None
    if form.language.data:
        current_user.language = form.language.data
    db.session.commit()
    log.info("Updated profile for user %s.", current_user.username)
    return jsonify(message="Profile updated", user=current_user.to_dict())
