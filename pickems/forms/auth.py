from flask_wtf import FlaskForm
from wtforms import BooleanField, PasswordField, StringField, SubmitField
from wtforms.validators import (
    DataRequired,
    Email,
    EqualTo,
    Length,
    ValidationError,
)

from pickems.models.user import User


class LoginForm(FlaskForm):
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired()])
    remember_me = BooleanField("Remember Me")
    submit = SubmitField("Log in")


class RegistrationForm(FlaskForm):
    first_name = StringField(
        "First name",
        validators=[DataRequired(message="First name is required"), Length(max=50)],
    )
    last_name = StringField(
        "Last name",
        validators=[DataRequired(message="Last name is required"), Length(max=50)],
    )
    email = StringField(
        "Email", validators=[DataRequired(message="Email is required"), Email()]
    )
    password = PasswordField(
        "Password",
        validators=[
            DataRequired(message="Password is required"),
            Length(min=8, message="Password must be at least 8 characters"),
        ],
    )
    password_confirm = PasswordField(
        "Confirm Password",
        validators=[
            DataRequired(),
            EqualTo("password", message="Passwords must match"),
        ],
    )
    submit = SubmitField("Create account")

    def validate_email(self, email):
        if User.get_user_by_email(email.data):
            raise ValidationError("A user already exists with this email")


class ProfileForm(FlaskForm):
    first_name = StringField(
        "First name",
        validators=[DataRequired(message="First name is required"), Length(max=50)],
    )
    last_name = StringField(
        "Last name",
        validators=[DataRequired(message="Last name is required"), Length(max=50)],
    )
    submit = SubmitField("Save")
