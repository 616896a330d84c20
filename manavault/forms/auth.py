from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField
from wtforms.validators import AnyOf, DataRequired, Email, Length, Optional, Regexp

from manavault.models.user import LANGUAGES


class RegisterForm(FlaskForm):
    username = StringField(
        "Username",
        validators=[
            DataRequired(),
            Length(min=3, max=64),
            Regexp(r"^[A-Za-z0-9_.-]+$", message="Letters, digits, '.', '_' and '-' only."),
        ],
    )
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=120)])
    password = PasswordField("Password", validators=[DataRequired(), Length(min=8, max=128)])


class LoginForm(FlaskForm):
    # Accepts either the username or the email address
    login = StringField("Username or email", validators=[DataRequired(), Length(max=120)])
    password = PasswordField("Password", validators=[DataRequired()])


class ProfileForm(FlaskForm):
    # Both fields are optional; PATCH only touches what the body carries
    name = StringField("Display name", validators=[Optional(), Length(max=64)])
    language = StringField("Language", validators=[Optional(), AnyOf(LANGUAGES, message="Invalid language.")])
