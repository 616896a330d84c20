"""
Auth blueprint: JSON session login for API clients.

URLs:
  GET  /auth/csrf-token  – token to send back as X-CSRFToken on writes
  POST /auth/register    – create an account and log it in (3 per hour per IP)
  POST /auth/login       – start a session (username or email + password)
  POST /auth/logout      – end the session
  GET  /auth/me          – the logged-in user
"""
import logging
from datetime import datetime, timezone

from flask import Blueprint, jsonify
from flask_login import login_required, login_user, logout_user, current_user
from flask_wtf.csrf import generate_csrf
from sqlalchemy import func, or_

from manavault.extensions import db, limiter
from manavault.forms.auth import RegisterForm, LoginForm
from manavault.models.user import User

log = logging.getLogger(__name__)
auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


@auth_bp.route("/csrf-token")
def csrf_token():
    return jsonify(csrf_token=generate_csrf())


@auth_bp.route("/register", methods=["POST"])
@limiter.limit("3 per hour")
def register():
    form = RegisterForm()
    if not form.validate_on_submit():
        return jsonify(error="Invalid registration data", fields=form.errors), 400

    username = form.username.data.strip()
    email    = form.email.data.strip().lower()

    taken = User.query.filter(
        or_(func.lower(User.username) == username.lower(), User.email == email)
    ).first()
    if taken:
        return jsonify(error="Username or email already registered"), 409

    user = User(username=username, email=email)
    user.set_password(form.password.data)
    db.session.add(user)
    db.session.commit()
    log.info("Registered user %s (id=%s).", user.username, user.id)

    login_user(user)
    return jsonify(user=user.to_dict()), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        return jsonify(error="Username and password are required", fields=form.errors), 400

    ident = form.login.data.strip()
    user = User.query.filter(
        or_(func.lower(User.username) == ident.lower(), User.email == ident.lower())
    ).first()
    if user is None or not user.check_password(form.password.data) or not user.is_active:
        return jsonify(error="Invalid credentials"), 401

    user.last_login = datetime.now(timezone.utc)
    db.session.commit()
    login_user(user)
    return jsonify(user=user.to_dict())


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return jsonify(success=True)


@auth_bp.route("/me")
@login_required
def me():
    return jsonify(user=current_user.to_dict())
