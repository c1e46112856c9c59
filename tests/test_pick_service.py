import pytest

from pickems.errors import NotFound, ValidationError
from pickems.services.pick_service import (
    NO_PICK,
    POINTS_RANGE_MESSAGE,
    UNIQUE_POINTS_MESSAGE,
    WHOLE_NUMBER_MESSAGE,
    build_pick_batch,
    coerce_points,
    validate_and_upsert_picks,
    validate_pick_batch,
)


class FakePickRepository:
    """In-memory stand-in keyed by (league, user, team)"""

    def __init__(self, team_ids=None):
        self.team_ids = team_ids
        self.rows = {}
        self.pending = {}
        self.commits = 0
        self.rollbacks = 0

    def upsert_pick(self, league_id, user_id, team_id, points):
        if self.team_ids is not None and team_id not in self.team_ids:
            raise NotFound("Team", team_id)
        self.pending[(league_id, user_id, team_id)] = points

    def commit(self):
        self.rows.update(self.pending)
        self.pending = {}
        self.commits += 1

    def rollback(self):
        self.pending = {}
        self.rollbacks += 1

    def get_picks(self, league_id, user_id):
        return {
            team_id: points
            for (lid, uid, team_id), points in self.rows.items()
            if lid == league_id and uid == user_id
        }


def test_coerce_points():
    assert coerce_points(None) is None
    assert coerce_points("") is None
    assert coerce_points("  ") is None
    assert coerce_points("7") == 7
    assert coerce_points(3) == 3
    assert coerce_points(0) == 0


@pytest.mark.parametrize("value", ["abc", "1.5", "-2", -1, True])
def test_coerce_points_rejects_non_whole_numbers(value):
    with pytest.raises(ValueError):
        coerce_points(value)


def test_build_pick_batch_pairs_form_lists():
    assert build_pick_batch(["1", "2"], ["5", ""]) == [
        {"team_id": "1", "points": "5"},
        {"team_id": "2", "points": ""},
    ]


def test_duplicate_points_flag_every_colliding_team():
    batch = [
        {"team_id": 1, "points": 5},
        {"team_id": 2, "points": 5},
        {"team_id": 3, "points": 2},
        {"team_id": 4, "points": 5},
    ]

    with pytest.raises(ValidationError) as exc:
        validate_pick_batch(batch)

    assert exc.value.errors == {
        1: UNIQUE_POINTS_MESSAGE,
        2: UNIQUE_POINTS_MESSAGE,
        4: UNIQUE_POINTS_MESSAGE,
    }


def test_duplicate_points_persist_nothing():
    repo = FakePickRepository()
    batch = [{"team_id": 1, "points": "3"}, {"team_id": 2, "points": "3"}]

    ok, errors = validate_and_upsert_picks(10, 20, batch, pick_repository=repo)

    assert ok is False
    assert set(errors) == {1, 2}
    assert repo.rows == {}
    assert repo.commits == 0


def test_distinct_points_are_stored_and_read_back():
    repo = FakePickRepository()
    batch = [
        {"team_id": "1", "points": "5"},
        {"team_id": "2", "points": "1"},
        {"team_id": "3", "points": "9"},
    ]

    ok, errors = validate_and_upsert_picks(10, 20, batch, pick_repository=repo)

    assert ok is True
    assert errors == {}
    assert repo.get_picks(10, 20) == {1: 5, 2: 1, 3: 9}
    assert repo.commits == 1


def test_blank_and_zero_points_never_collide():
    repo = FakePickRepository()
    batch = [
        {"team_id": 1, "points": ""},
        {"team_id": 2, "points": None},
        {"team_id": 3, "points": "0"},
        {"team_id": 4, "points": 0},
        {"team_id": 5, "points": 4},
    ]

    ok, errors = validate_and_upsert_picks(10, 20, batch, pick_repository=repo)

    assert ok is True
    assert repo.get_picks(10, 20) == {
        1: NO_PICK,
        2: NO_PICK,
        3: 0,
        4: 0,
        5: 4,
    }


def test_resubmission_overwrites_previous_values():
    repo = FakePickRepository()
    validate_and_upsert_picks(
        1, 1, [{"team_id": 1, "points": 1}, {"team_id": 2, "points": 2}], repo
    )
    validate_and_upsert_picks(
        1, 1, [{"team_id": 1, "points": 2}, {"team_id": 2, "points": 1}], repo
    )

    assert repo.get_picks(1, 1) == {1: 2, 2: 1}


def test_malformed_points_are_reported_per_team():
    repo = FakePickRepository()
    batch = [{"team_id": 1, "points": "ten"}, {"team_id": 2, "points": "4"}]

    ok, errors = validate_and_upsert_picks(1, 1, batch, pick_repository=repo)

    assert ok is False
    assert errors == {1: WHOLE_NUMBER_MESSAGE}
    assert repo.rows == {}


def test_unknown_team_rolls_back_and_raises():
    repo = FakePickRepository(team_ids={1})
    batch = [{"team_id": 1, "points": 3}, {"team_id": 99, "points": 4}]

    with pytest.raises(NotFound):
        validate_and_upsert_picks(1, 1, batch, pick_repository=repo)

    assert repo.rollbacks == 1
    assert repo.rows == {}


def test_empty_batch_is_accepted():
    repo = FakePickRepository()
    assert validate_and_upsert_picks(1, 1, [], pick_repository=repo) == (True, {})


def test_points_above_limit_are_rejected():
    repo = FakePickRepository()
    batch = [{"team_id": 1, "points": 3}, {"team_id": 2, "points": 4}]

    ok, errors = validate_and_upsert_picks(
        1, 1, batch, pick_repository=repo, max_points=3
    )

    assert ok is False
    assert errors == {2: POINTS_RANGE_MESSAGE.format(max_points=3)}
    assert repo.rows == {}


def test_blank_picks_ignore_the_limit():
    entries = validate_pick_batch(
        [{"team_id": 1, "points": ""}, {"team_id": 2, "points": "2"}], max_points=2
    )

    assert entries == [{"team_id": 1, "points": None}, {"team_id": 2, "points": 2}]


def test_build_pick_batch_keeps_unmatched_teams():
    assert build_pick_batch(["1", "2"], ["5"]) == [
        {"team_id": "1", "points": "5"},
        {"team_id": "2", "points": None},
    ]
