from flask_wtf import FlaskForm
from wtforms import (
    BooleanField,
    SelectField,
    StringField,
    SubmitField,
)
from wtforms.validators import URL, DataRequired, Length, Optional

from pickems.models.team import CONFERENCES


class CreateLeagueForm(FlaskForm):
    name = StringField(
        "Name",
        validators=[DataRequired(message="Name is required"), Length(max=100)],
    )
    password = StringField(
        "Password",
        validators=[
            DataRequired(message="Password is required"),
            Length(min=8, message="Password must be at least 8 characters"),
        ],
        description="Minimum of 8 characters",
    )
    submit = SubmitField("Save")


class JoinLeagueForm(FlaskForm):
    hash = StringField(
        "League ID", validators=[DataRequired(message="League ID is required")]
    )
    password = StringField(
        "Password",
        validators=[
            DataRequired(message="Password is required"),
            Length(min=8, message="Password must be at least 8 characters"),
        ],
        description="Minimum of 8 characters",
    )
    submit = SubmitField("Save")


class CreateTeamForm(FlaskForm):
    name = StringField(
        "Name",
        validators=[DataRequired(message="Team name is required"), Length(max=100)],
    )
    abbreviation = StringField(
        "Abbreviation",
        validators=[
            DataRequired(message="Team abbreviation is required"),
            Length(max=10),
        ],
    )
    conference = SelectField(
        "Conference",
        choices=[("", "Select a conference")] + [(c, c) for c in CONFERENCES],
        validators=[DataRequired(message="Team conference is required")],
    )
    image_uri = StringField(
        "Image URL", validators=[Optional(), URL(), Length(max=500)]
    )
    submit = SubmitField("Create")


class LeagueSettingsForm(FlaskForm):
    """League flags; team rows are read from the raw form lists"""

    is_locked = BooleanField(
        "Lock league",
        description="This will display member picks and prevent members from changing their picks",
    )
    is_archived = BooleanField(
        "Archive league",
        description="This will prevent the league from showing in list of leagues",
    )
    submit = SubmitField("Save")


class PickSheetForm(FlaskForm):
    """CSRF carrier for the pick sheet; entries are read from the raw form lists"""

    submit = SubmitField("Save picks")
