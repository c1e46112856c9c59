from types import SimpleNamespace

from pickems.services.leaderboard_service import (
    EMPTY_CELL,
    build_leaderboard,
    compute_leaderboard,
    summarize_member_picks,
)


def team(team_id, name, wins=0, rank=0, image_uri=None, abbreviation=None):
    return SimpleNamespace(
        id=team_id,
        name=name,
        abbreviation=abbreviation or name[:3].upper(),
        wins=wins,
        rank=rank,
        image_uri=image_uri,
    )


def member(member_id, name):
    return SimpleNamespace(id=member_id, full_name=name)


def pick(user, picked_team, points):
    return SimpleNamespace(
        user_id=user.id,
        user=user,
        team_id=picked_team.id,
        team=picked_team,
        points=points,
    )


class FakePickRepository:
    def __init__(self, picks):
        self.picks = picks

    def get_league_member_picks(self, league_id):
        return self.picks


class FakeTeamRepository:
    def __init__(self, teams):
        self.teams = teams

    def get_teams(self, league_id):
        return self.teams


X = team(1, "Team X", wins=10, rank=2)
Y = team(2, "Team Y", wins=2, rank=1)
ALICE = member(1, "Alice Adams")
BOB = member(2, "Bob Brown")


def test_scores_multiply_points_by_wins():
    picks = [pick(ALICE, X, 5), pick(ALICE, Y, 1), pick(BOB, X, 1), pick(BOB, Y, 5)]

    result = build_leaderboard(picks, [X, Y])

    assert result["ranked_scores"] == [
        {"rank": 1, "member_id": 1, "display_name": "Alice Adams", "total_points": 52},
        {"rank": 2, "member_id": 2, "display_name": "Bob Brown", "total_points": 20},
    ]


def test_order_does_not_depend_on_pick_order():
    picks = [pick(BOB, Y, 5), pick(ALICE, Y, 1), pick(BOB, X, 1), pick(ALICE, X, 5)]

    ranked = build_leaderboard(picks, [Y, X])["ranked_scores"]

    assert [row["member_id"] for row in ranked] == [1, 2]


def test_matrix_columns_follow_team_rank():
    picks = [pick(ALICE, X, 5), pick(ALICE, Y, 1)]

    matrix = build_leaderboard(picks, [X, Y])["matrix"]

    assert [h["team_id"] for h in matrix["team_headers"]] == [2, 1]
    assert matrix["rows"] == [
        {"member_id": 1, "display_name": "Alice Adams", "cells": [1, 5]}
    ]


def test_header_label_prefers_image():
    logo = team(3, "Team Z", rank=3, image_uri="https://example.com/z.png")

    headers = build_leaderboard([], [X, logo])["matrix"]["team_headers"]

    assert [h["label"] for h in headers] == ["Team X", "https://example.com/z.png"]


def test_unpicked_teams_get_empty_cells():
    z = team(3, "Team Z", wins=4, rank=3)
    picks = [pick(ALICE, X, 5), pick(BOB, z, 2)]

    rows = build_leaderboard(picks, [X, Y, z])["matrix"]["rows"]

    cells = {row["member_id"]: row["cells"] for row in rows}
    assert cells[ALICE.id] == [EMPTY_CELL, 5, EMPTY_CELL]
    assert cells[BOB.id] == [EMPTY_CELL, EMPTY_CELL, 2]
    assert all(len(row["cells"]) == 3 for row in rows)


def test_no_picks_still_lists_teams():
    result = build_leaderboard([], [X, Y])

    assert result["ranked_scores"] == []
    assert result["matrix"]["rows"] == []
    assert len(result["matrix"]["team_headers"]) == 2


def test_ties_are_ordered_by_name():
    zed = member(3, "zed Zimmer")
    amy = member(4, "Amy Apple")
    picks = [pick(zed, X, 1), pick(amy, X, 1)]

    ranked = build_leaderboard(picks, [X, Y])["ranked_scores"]

    assert [row["display_name"] for row in ranked] == ["Amy Apple", "zed Zimmer"]
    assert [row["rank"] for row in ranked] == [1, 2]


def test_members_with_same_name_are_not_merged():
    first = member(7, "Sam Smith")
    second = member(8, "Sam Smith")
    picks = [pick(first, X, 3), pick(second, X, 1)]

    ranked = build_leaderboard(picks, [X, Y])["ranked_scores"]

    assert [(row["member_id"], row["total_points"]) for row in ranked] == [
        (7, 30),
        (8, 10),
    ]


def test_compute_leaderboard_reads_from_repositories():
    picks = [pick(ALICE, X, 5), pick(BOB, Y, 5)]

    result = compute_leaderboard(
        1,
        pick_repository=FakePickRepository(picks),
        team_repository=FakeTeamRepository([X, Y]),
    )

    assert [row["total_points"] for row in result["ranked_scores"]] == [50, 10]


def test_summarize_member_picks_skips_blank_picks():
    picks = [pick(ALICE, X, 2), pick(ALICE, Y, 7), pick(BOB, X, 9), pick(ALICE, Y, 0)]

    assert summarize_member_picks(picks, ALICE.id) == [
        {"team_id": 2, "abbreviation": "TEA", "points": 7},
        {"team_id": 1, "abbreviation": "TEA", "points": 2},
    ]
