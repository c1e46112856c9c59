import logging
from functools import wraps

from flask import abort, jsonify, make_response, request
from flask_login import current_user, login_required

from pickems.errors import ConstraintViolation, NotFound
from pickems.models import League, Pick, Team
from pickems.routes.api import bp
from pickems.services.leaderboard_service import compute_leaderboard
from pickems.services.pick_service import validate_and_upsert_picks

logger = logging.getLogger(__name__)

LEADERBOARD_LOCKED_MESSAGE = (
    "Leaderboard will be available once all picks are in and league is locked."
)


def add_security_headers(f):
    """Add no-cache headers to API responses"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        response = make_response(f(*args, **kwargs))
        response.headers["Cache-Control"] = (
            "no-store, no-cache, must-revalidate, max-age=0"
        )
        return response

    return decorated_function


def _get_member_league(league_id):
    league = League.get_league(league_id, current_user.id)
    if not league:
        abort(404)
    return league


@bp.route("/leagues")
@login_required
@add_security_headers
def leagues():
    """Leagues the current user belongs to"""
    return jsonify(
        [league.to_dict() for league in League.get_league_list_items(current_user.id)]
    )


@bp.route("/leagues/<int:league_id>/leaderboard")
@login_required
@add_security_headers
def leaderboard(league_id):
    """Score table and pick matrix of a locked league"""
    league = _get_member_league(league_id)

    if not league.is_locked:
        return jsonify({"error": LEADERBOARD_LOCKED_MESSAGE, "is_locked": False}), 403

    return jsonify(compute_leaderboard(league.id))


@bp.route("/leagues/<int:league_id>/picks", methods=["GET"])
@login_required
@add_security_headers
def get_picks(league_id):
    """The current user's picks in a league"""
    league = _get_member_league(league_id)
    picks = Pick.get_picks(league.id, current_user.id)
    return jsonify([pick.to_dict() for pick in picks])


@bp.route("/leagues/<int:league_id>/picks", methods=["POST"])
@login_required
@add_security_headers
def submit_picks(league_id):
    """
    Submit the current user's pick sheet

    Body: {"picks": [{"team_id": 1, "points": 5}, ...]}
    """
    league = _get_member_league(league_id)

    if league.is_locked:
        return jsonify({"ok": False, "error": "League is locked"}), 403

    data = request.get_json(silent=True)
    batch = data.get("picks") if isinstance(data, dict) else None
    if not isinstance(batch, list) or not all(isinstance(e, dict) for e in batch):
        return jsonify({"ok": False, "error": "picks must be a list of objects"}), 400

    try:
        ok, errors = validate_and_upsert_picks(
            league.id,
            current_user.id,
            batch,
            max_points=Team.query.filter_by(league_id=league.id).count(),
        )
    except NotFound as e:
        return jsonify({"ok": False, "error": str(e)}), 404
    except ConstraintViolation as e:
        logger.error(f"Pick submission for league {league.id} failed: {e}")
        return jsonify({"ok": False, "error": "Error updating picks"}), 500

    if not ok:
        return (
            jsonify({"ok": False, "errors": {str(k): v for k, v in errors.items()}}),
            400,
        )

    return jsonify({"ok": True})
