from flask import redirect, url_for
from flask_login import current_user

from pickems.routes.main import bp


@bp.route("/")
def index():
    if current_user.is_authenticated:
        return redirect(url_for("leagues.index"))
    return redirect(url_for("auth.login"))
