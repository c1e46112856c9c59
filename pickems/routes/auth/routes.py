import logging
from urllib.parse import urlparse

from flask import flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required, login_user, logout_user

from pickems import db, limiter, login_manager
from pickems.errors import ConstraintViolation
from pickems.forms.auth import LoginForm, ProfileForm, RegistrationForm
from pickems.models import User
from pickems.routes.auth import bp

logger = logging.getLogger(__name__)


@login_manager.user_loader
def load_user(user_id):
    return User.get_user_by_id(int(user_id))


@bp.route("/login", methods=["GET", "POST"])
@limiter.limit("10 per minute")
def login():
    if current_user.is_authenticated:
        return redirect(url_for("leagues.index"))

    form = LoginForm()
    if form.validate_on_submit():
        user = User.verify_login(form.email.data, form.password.data)

        if user:
            login_user(user, remember=form.remember_me.data)

            next_page = request.args.get("next")
            if not next_page or urlparse(next_page).netloc != "":
                next_page = url_for("leagues.index")

            flash(f"Welcome back, {user.full_name}!", "success")
            return redirect(next_page)

        logger.info("Failed login attempt")
        flash("Invalid email or password.", "error")

    return render_template("auth/login.html", form=form)


@bp.route("/register", methods=["GET", "POST"])
@limiter.limit("5 per hour")
def register():
    if current_user.is_authenticated:
        return redirect(url_for("leagues.index"))

    form = RegistrationForm()
    if form.validate_on_submit():
        try:
            user = User.create_user(
                first_name=form.first_name.data.strip(),
                last_name=form.last_name.data.strip(),
                email=form.email.data,
                password=form.password.data,
            )
            db.session.commit()
        except ConstraintViolation:
            db.session.rollback()
            form.email.errors.append("A user already exists with this email")
            return render_template("auth/register.html", form=form), 400

        logger.info(f"User {user.id} registered")
        login_user(user)
        flash("Registration successful! Create or join a league to start picking.", "success")
        return redirect(url_for("leagues.index"))

    return render_template("auth/register.html", form=form)


@bp.route("/logout")
@login_required
def logout():
    logout_user()
    flash("You have been logged out successfully.", "info")
    return redirect(url_for("auth.login"))


@bp.route("/profile", methods=["GET", "POST"])
@login_required
def profile():
    form = ProfileForm(obj=current_user)

    if form.validate_on_submit():
        current_user.update_profile(
            form.first_name.data.strip(), form.last_name.data.strip()
        )
        db.session.commit()
        flash("Profile updated successfully!", "success")
        return redirect(url_for("leagues.index"))

    return render_template("auth/profile.html", form=form)
