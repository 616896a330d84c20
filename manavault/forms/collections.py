from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, IntegerField, BooleanField, SelectField
from wtforms.validators import DataRequired, Optional, Length, NumberRange

from manavault.models.collection import CardCondition


class CollectionForm(FlaskForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=100)])
    description = TextAreaField("Description", validators=[Optional(), Length(max=2000)])


class AddCollectionCardForm(FlaskForm):
    card_id = StringField("Scryfall ID", validators=[DataRequired(), Length(max=40)])
    quantity = IntegerField("Quantity", default=1, validators=[Optional(), NumberRange(min=1, max=99)])
    foil = BooleanField("Foil", default=False)
    condition = SelectField(
        "Condition",
        choices=[(c.value, c.label) for c in CardCondition],
        default=CardCondition.NM.value,
        validators=[Optional()],
    )
    notes = StringField("Notes", validators=[Optional(), Length(max=500)])
