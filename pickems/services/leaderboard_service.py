"""
Leaderboard calculations for a league

A member's score is the sum over their picks of points wagered times the
picked team's win count. Callers decide whether the league is locked before
showing any of this.
"""

import logging

from pickems.services.repositories import PickRepository, TeamRepository

logger = logging.getLogger(__name__)

EMPTY_CELL = 0


def _sort_teams(teams):
    return sorted(teams, key=lambda t: (t.rank, t.name or "", t.id))


def _group_by_member(picks):
    """Group picks by member id, keeping first-seen order"""
    members = {}
    for pick in picks:
        member = members.get(pick.user_id)
        if member is None:
            member = {
                "member_id": pick.user_id,
                "display_name": pick.user.full_name if pick.user else str(pick.user_id),
                "picks": [],
            }
            members[pick.user_id] = member
        member["picks"].append(pick)
    return list(members.values())


def build_leaderboard(picks, teams):
    """
    Build the score table and pick matrix from already-loaded rows

    Args:
        picks: picks with user_id, team_id, points and a loaded user
        teams: every team of the league

    Returns:
        dict: {"ranked_scores": [...], "matrix": {"team_headers": [...], "rows": [...]}}
    """
    teams = _sort_teams(teams)
    wins_by_team = {team.id: team.wins or 0 for team in teams}

    members = _group_by_member(picks)
    for member in members:
        total = 0
        for pick in member["picks"]:
            wins = wins_by_team.get(pick.team_id)
            if wins is None:
                wins = pick.team.wins if pick.team else 0
            total += (pick.points or 0) * wins
        member["total_points"] = total

    members.sort(
        key=lambda m: (-m["total_points"], m["display_name"].lower(), m["member_id"])
    )

    ranked_scores = [
        {
            "rank": position,
            "member_id": member["member_id"],
            "display_name": member["display_name"],
            "total_points": member["total_points"],
        }
        for position, member in enumerate(members, start=1)
    ]

    team_headers = [
        {
            "team_id": team.id,
            "label": team.image_uri or team.name,
            "name": team.name,
            "abbreviation": team.abbreviation,
            "image_uri": team.image_uri,
        }
        for team in teams
    ]

    rows = []
    for member in members:
        points_by_team = {pick.team_id: pick.points for pick in member["picks"]}
        rows.append(
            {
                "member_id": member["member_id"],
                "display_name": member["display_name"],
                "cells": [points_by_team.get(team.id, EMPTY_CELL) for team in teams],
            }
        )

    return {
        "ranked_scores": ranked_scores,
        "matrix": {"team_headers": team_headers, "rows": rows},
    }


def compute_leaderboard(league_id, pick_repository=None, team_repository=None):
    """Load a league's picks and teams and build its leaderboard"""
    pick_repository = pick_repository or PickRepository()
    team_repository = team_repository or TeamRepository()

    picks = pick_repository.get_league_member_picks(league_id)
    teams = team_repository.get_teams(league_id)

    leaderboard = build_leaderboard(picks, teams)
    logger.debug(
        f"Computed leaderboard for league {league_id}: "
        f"{len(leaderboard['ranked_scores'])} members, {len(teams)} teams"
    )
    return leaderboard


def summarize_member_picks(picks, member_id):
    """One member's non-empty picks, highest point value first"""
    own = [pick for pick in picks if pick.user_id == member_id and pick.points]
    own.sort(key=lambda p: (-(p.points or 0), p.team_id))
    return [
        {
            "team_id": pick.team_id,
            "abbreviation": pick.team.abbreviation if pick.team else None,
            "points": pick.points,
        }
        for pick in own
    ]
