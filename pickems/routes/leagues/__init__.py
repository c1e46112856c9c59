from flask import Blueprint

bp = Blueprint("leagues", __name__)

from pickems.routes.leagues import routes  # noqa: F401, E402
