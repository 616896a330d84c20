from datetime import datetime, timezone
from flask_login import UserMixin
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, InvalidHashError, VerificationError
from manavault.extensions import db

_ph = PasswordHasher()

# Interface languages a profile may pick
LANGUAGES = ("en", "fr", "de", "es", "it", "pt", "ja", "ko", "ru", "zh")


class User(db.Model, UserMixin):
    __tablename__ = "users"

    id            = db.Column(db.Integer, primary_key=True)
    username      = db.Column(db.String(64),  unique=True, nullable=False, index=True)
    email         = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(512), nullable=False)
    is_active     = db.Column(db.Boolean, default=True, nullable=False)
    display_name  = db.Column(db.String(64), nullable=True)
    language      = db.Column(db.String(5),  default="en", nullable=False)
    created_at    = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    last_login    = db.Column(db.DateTime, nullable=True)

    collections = db.relationship("Collection", back_populates="user", lazy="dynamic",
                                  cascade="all, delete-orphan")
    decks       = db.relationship("Deck", back_populates="user", lazy="dynamic",
                                  cascade="all, delete-orphan")

    # ── Password helpers ────────────────────────────────────────────────────
    def set_password(self, password: str) -> None:
        self.password_hash = _ph.hash(password)

    def check_password(self, password: str) -> bool:
        try:
            return _ph.verify(self.password_hash, password)
        except (VerifyMismatchError, InvalidHashError, VerificationError):
            return False

    # Flask-Login requires this property
    @property
    def active(self) -> bool:
        return self.is_active

    def to_dict(self) -> dict:
        return {
            "id":         self.id,
            "username":   self.username,
            "email":      self.email,
            "name":       self.display_name,
            "language":   self.language,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<User {self.username}>"
