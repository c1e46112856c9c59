import logging
from itertools import zip_longest

from flask import abort, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required

from pickems import db, limiter
from pickems.errors import ConstraintViolation, NotFound, ValidationError
from pickems.forms.leagues import (
    CreateLeagueForm,
    CreateTeamForm,
    JoinLeagueForm,
    LeagueSettingsForm,
    PickSheetForm,
)
from pickems.models import League, Pick, Team
from pickems.routes.leagues import bp
from pickems.services.leaderboard_service import (
    build_leaderboard,
    summarize_member_picks,
)
from pickems.services.pick_service import build_pick_batch, validate_and_upsert_picks

logger = logging.getLogger(__name__)


def _get_member_league(league_id):
    """Load a league the current user belongs to, or 404"""
    league = League.get_league(league_id, current_user.id)
    if not league:
        abort(404)
    return league


def _require_owner(league):
    if not league.is_owner(current_user.id):
        abort(403)


def _render_league_page(template, league, **context):
    return render_template(
        template,
        league=league,
        tabs=league.get_tabs(current_user.id),
        join_url=url_for("leagues.join", lid=league.hash, _external=True),
        **context,
    )


def _parse_int_list(values):
    try:
        return [int(value) for value in values]
    except (TypeError, ValueError):
        abort(400)


@bp.route("/")
@login_required
def index():
    """List the user's leagues"""
    leagues = League.get_league_list_items(current_user.id)
    return render_template("leagues/index.html", leagues=leagues)


@bp.route("/new", methods=["GET", "POST"])
@login_required
def new():
    """Create a league"""
    form = CreateLeagueForm()

    if form.validate_on_submit():
        league = League.create_league(
            name=form.name.data.strip(),
            password=form.password.data,
            user_id=current_user.id,
        )
        db.session.commit()
        flash(f'League "{league.name}" created successfully!', "success")
        return redirect(url_for("leagues.details", league_id=league.id))

    if request.method == "POST" and form.errors:
        logger.warning(
            f"League creation form validation failed for user {current_user.id}"
        )

    return render_template("leagues/new.html", form=form)


@bp.route("/join", methods=["GET", "POST"])
@login_required
@limiter.limit("20 per hour", methods=["POST"])
def join():
    """Join a league by its id and password"""
    form = JoinLeagueForm()
    league = None

    lid = request.args.get("lid")
    if lid:
        league = League.get_league_by_hash(lid)
        if not league:
            flash("League not found.", "error")
            return redirect(url_for("leagues.join"))
        if request.method == "GET":
            form.hash.data = league.hash

    if form.validate_on_submit():
        verified = League.verify_league_password(form.hash.data, form.password.data)
        if not verified:
            form.password.errors.append("Invalid id or password")
            return render_template("leagues/join.html", form=form, league=league)

        membership = League.join_league(verified.hash, current_user.id)
        if not membership:
            form.hash.errors.append("Error joining league")
            return render_template("leagues/join.html", form=form, league=league)

        db.session.commit()
        flash(f'Successfully joined "{verified.name}"!', "success")
        return redirect(url_for("leagues.details", league_id=membership.league_id))

    return render_template("leagues/join.html", form=form, league=league)


@bp.route("/<int:league_id>")
@login_required
def detail(league_id):
    _get_member_league(league_id)
    return redirect(url_for("leagues.details", league_id=league_id))


@bp.route("/<int:league_id>/details")
@login_required
def details(league_id):
    """Leaderboard, shown once the league is locked"""
    league = _get_member_league(league_id)

    leaderboard = None
    my_picks = []
    if league.is_locked:
        picks = Pick.get_league_member_picks(league.id)
        leaderboard = build_leaderboard(picks, Team.get_teams(league.id))
        my_picks = summarize_member_picks(picks, current_user.id)

    return _render_league_page(
        "leagues/details.html", league, leaderboard=leaderboard, my_picks=my_picks
    )


@bp.route("/<int:league_id>/entries", methods=["GET", "POST"])
@login_required
def entries(league_id):
    """The current user's pick sheet"""
    league = _get_member_league(league_id)
    teams = Team.get_teams_by_rank(league.id)
    form = PickSheetForm()
    errors = {}
    values = {
        pick.team_id: pick.points or ""
        for pick in Pick.get_picks(league.id, current_user.id)
    }

    if request.method == "POST":
        if league.is_locked:
            flash("League is locked. Picks can no longer be changed.", "error")
            return redirect(url_for("leagues.entries", league_id=league.id))

        if form.validate_on_submit():
            team_ids = request.form.getlist("team_id")
            points = request.form.getlist("points")
            batch = build_pick_batch(team_ids, points)

            try:
                ok, errors = validate_and_upsert_picks(
                    league.id, current_user.id, batch, max_points=len(teams)
                )
            except NotFound as e:
                logger.warning(f"Pick submission for league {league.id}: {e}")
                abort(404)
            except ConstraintViolation as e:
                logger.error(f"Pick submission for league {league.id} failed: {e}")
                flash("Error updating picks. Please try again.", "error")
                return redirect(url_for("leagues.entries", league_id=league.id))

            if ok:
                flash("Your picks have been saved.", "success")
                return redirect(url_for("leagues.entries", league_id=league.id))

            # Show the rejected sheet as it was submitted
            values = {}
            for team_id, value in zip(team_ids, points):
                try:
                    values[int(team_id)] = value
                except ValueError:
                    continue

    return _render_league_page(
        "leagues/entries.html",
        league,
        teams=teams,
        values=values,
        errors=errors,
        form=form,
    )


@bp.route("/<int:league_id>/members")
@login_required
def members(league_id):
    """League member list"""
    league = _get_member_league(league_id)
    league_members = League.get_league_members(league.id)
    return _render_league_page(
        "leagues/members.html", league, members=league_members
    )


@bp.route("/<int:league_id>/members/<int:user_id>/remove", methods=["POST"])
@login_required
def remove_member(league_id, user_id):
    """Remove a member and their picks (owner only)"""
    league = _get_member_league(league_id)
    _require_owner(league)

    if user_id == league.user_id:
        flash("The league owner cannot be removed.", "error")
        return redirect(url_for("leagues.members", league_id=league.id))

    try:
        League.delete_league_user(league.id, user_id)
    except NotFound:
        abort(404)

    db.session.commit()
    flash("Member removed.", "info")
    return redirect(url_for("leagues.members", league_id=league.id))


@bp.route("/<int:league_id>/admin", methods=["GET", "POST"])
@login_required
def admin(league_id):
    """Owner tools: add teams, edit teams, lock or archive the league"""
    league = _get_member_league(league_id)
    _require_owner(league)

    intent = request.form.get("intent") if request.method == "POST" else None

    team_form = CreateTeamForm(prefix="team")
    settings_form = LeagueSettingsForm(
        formdata=request.form if intent == "update-league" else None, obj=league
    )
    report = []
    status = 200

    if intent == "add-team":
        if team_form.validate_on_submit():
            try:
                Team.create_team(
                    league_id=league.id,
                    name=team_form.name.data.strip(),
                    abbreviation=team_form.abbreviation.data.strip(),
                    conference=team_form.conference.data,
                    image_uri=team_form.image_uri.data,
                )
            except ValidationError as e:
                for field, message in e.errors.items():
                    getattr(team_form, field).errors.append(message)
                status = 400
            else:
                db.session.commit()
                flash("Team created.", "success")
                return redirect(url_for("leagues.admin", league_id=league.id))
        else:
            status = 400

    elif intent == "update-league":
        if settings_form.validate_on_submit():
            team_ids = _parse_int_list(request.form.getlist("team_id"))
            ranks = request.form.getlist("rank")
            wins = request.form.getlist("wins")
            names = request.form.getlist("team_name")
            abbreviations = request.form.getlist("team_abbreviation")
            removed_team_ids = _parse_int_list(request.form.getlist("remove_team_id"))

            rows = [
                {
                    "team_id": team_id,
                    "rank": rank,
                    "wins": team_wins,
                    "name": name,
                    "abbreviation": abbreviation,
                }
                for team_id, rank, team_wins, name, abbreviation in zip_longest(
                    team_ids, ranks, wins, names, abbreviations
                )
            ]

            League.update_league(
                league.id, settings_form.is_locked.data, settings_form.is_archived.data
            )
            report = Team.bulk_update_teams(league.id, rows, removed_team_ids)

            if all(entry["ok"] for entry in report):
                logger.info(
                    f"League {league.id} updated by owner: locked={league.is_locked} "
                    f"archived={league.is_archived}"
                )
                flash("League saved.", "success")
                return redirect(url_for("leagues.admin", league_id=league.id))

            flash("Error updating league. No changes were saved.", "error")
            status = 400
        else:
            status = 400

    elif intent is not None:
        abort(400)

    teams = Team.get_teams_by_rank(league.id)
    failed_rows = {entry["team_id"]: entry["error"] for entry in report if not entry["ok"]}
    return (
        _render_league_page(
            "leagues/admin.html",
            league,
            team_form=team_form,
            settings_form=settings_form,
            afc_teams=[t for t in teams if t.conference == "AFC"],
            nfc_teams=[t for t in teams if t.conference == "NFC"],
            failed_rows=failed_rows,
        ),
        status,
    )


@bp.route("/<int:league_id>/delete", methods=["POST"])
@login_required
def delete(league_id):
    """Delete a league (owner only)"""
    league = _get_member_league(league_id)
    _require_owner(league)

    league_name = league.name
    League.delete_league(league.id)
    db.session.commit()

    flash(f'League "{league_name}" has been permanently deleted.', "success")
    return redirect(url_for("leagues.index"))
