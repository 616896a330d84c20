from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, IntegerField, BooleanField, SelectField
from wtforms.validators import DataRequired, Optional, Length, NumberRange

from manavault.models.deck import MTG_FORMATS


class DeckForm(FlaskForm):
    name = StringField("Deck Name", validators=[DataRequired(), Length(max=100)])
    format = SelectField(
        "Format",
        choices=[(f, f) for f in MTG_FORMATS],
        default="Casual",
        validators=[Optional()],
    )
    description = TextAreaField("Description", validators=[Optional(), Length(max=2000)])


class AddDeckCardForm(FlaskForm):
    card_id = StringField("Scryfall ID", validators=[DataRequired(), Length(max=40)])
    quantity = IntegerField("Quantity", default=1, validators=[Optional(), NumberRange(min=1, max=99)])
    is_sideboard = BooleanField("Sideboard", default=False)
