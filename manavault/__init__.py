"""
ManaVault – Flask application factory.
MTG collection & deck tracker with per-user price tracking.
"""
import logging
import os

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from manavault.config import config
from manavault.extensions import db, login_manager, csrf, limiter, migrate
from manavault.utils.scryfall import ScryfallClient


def create_app(config_name: str = "default", scryfall: ScryfallClient = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name])

    # Ensure instance directory exists (SQLite lives here)
    os.makedirs(app.instance_path, exist_ok=True)

    logging.getLogger("manavault").setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # ── Initialise extensions ────────────────────────────────────────────────
    db.init_app(app)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)
    migrate.init_app(app, db)

    (scryfall or ScryfallClient.from_config(app.config)).init_app(app)

    if app.config.get("TALISMAN_ENABLED"):
        from flask_talisman import Talisman
        Talisman(app, **app.config.get("TALISMAN_CONFIG", {}))

    # ── Auth ─────────────────────────────────────────────────────────────────
    @login_manager.user_loader
    def load_user(user_id):
        from manavault.models.user import User
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify(error="Unauthorized"), 401

    # ── Register blueprints ──────────────────────────────────────────────────
    from manavault.blueprints.auth import auth_bp
    from manavault.blueprints.collections import collections_bp
    from manavault.blueprints.decks import decks_bp
    from manavault.blueprints.cards import cards_bp
    from manavault.blueprints.scryfall import scryfall_bp
    from manavault.blueprints.profile import profile_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(collections_bp)
    app.register_blueprint(decks_bp)
    app.register_blueprint(cards_bp)
    app.register_blueprint(scryfall_bp)
    app.register_blueprint(profile_bp)

    # ── Error handlers ───────────────────────────────────────────────────────
    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify(error=e.description), e.code

    @app.errorhandler(500)
    def internal_error(e):
        db.session.rollback()
        return jsonify(error="Internal server error"), 500

    # ── Database ─────────────────────────────────────────────────────────────
    with app.app_context():
        # Register all models with SQLAlchemy before create_all().
        import importlib
        importlib.import_module("manavault.models")
        db.create_all()

    return app
