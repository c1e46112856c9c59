"""
Pick submission service

A submission is one member's whole pick sheet for a league: a list of
{"team_id": ..., "points": ...} entries. The sheet is validated as a unit
and only written when every entry passes.
"""

import logging
from collections import Counter
from itertools import zip_longest

from pickems.errors import PickemError, ValidationError
from pickems.services.repositories import PickRepository

logger = logging.getLogger(__name__)

UNIQUE_POINTS_MESSAGE = "Please enter a unique point value"
WHOLE_NUMBER_MESSAGE = "Please enter a whole number"
INVALID_TEAM_MESSAGE = "Invalid team"
POINTS_RANGE_MESSAGE = "Please enter a value from 1 to {max_points}"

# Stored for teams the member left blank
NO_PICK = 0


def coerce_points(value):
    """
    Convert a submitted point value to an int

    Returns None for a blank value. Raises ValueError for anything that is
    not a non-negative whole number.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, int):
        points = value
    else:
        text = str(value).strip()
        if text == "":
            return None
        points = int(text)
    if points < 0:
        raise ValueError(value)
    return points


def build_pick_batch(team_ids, points_values):
    """Pair up the parallel team_id/points lists a pick form posts"""
    return [
        {"team_id": team_id, "points": points}
        for team_id, points in zip_longest(team_ids, points_values)
    ]


def validate_pick_batch(batch, max_points=None):
    """
    Validate a pick sheet before anything is written

    Args:
        batch: iterable of {"team_id", "points"} dicts
        max_points: highest allowed value, normally the league's team count;
            None means no upper bound

    Returns:
        list: normalized entries with int team_id and int-or-None points

    Raises:
        ValidationError: with a {team_id: message} map when any value is
            malformed or out of range, or when two teams share the same point
            value. Blank and zero values mean "no pick" and never collide.
    """
    errors = {}
    entries = []

    for raw in batch:
        raw_team_id = raw.get("team_id")
        try:
            team_id = int(raw_team_id)
        except (TypeError, ValueError):
            errors[str(raw_team_id)] = INVALID_TEAM_MESSAGE
            continue

        try:
            points = coerce_points(raw.get("points"))
        except (TypeError, ValueError):
            errors[team_id] = WHOLE_NUMBER_MESSAGE
            continue

        if max_points is not None and points and points > max_points:
            errors[team_id] = POINTS_RANGE_MESSAGE.format(max_points=max_points)
            continue

        entries.append({"team_id": team_id, "points": points})

    counts = Counter(entry["points"] for entry in entries if entry["points"])
    for entry in entries:
        if entry["points"] and counts[entry["points"]] > 1:
            errors[entry["team_id"]] = UNIQUE_POINTS_MESSAGE

    if errors:
        raise ValidationError(errors, "Pick sheet rejected")

    return entries


def validate_and_upsert_picks(
    league_id, member_id, batch, pick_repository=None, max_points=None
):
    """
    Validate a member's pick sheet and store it

    Either every entry is upserted and committed, or nothing is written.

    Returns:
        tuple: (ok, errors). (True, {}) on success, (False, {team_id: message})
        when the sheet fails validation. The API serializes it as
        {"ok": ..., "errors": ...}.
    """
    pick_repository = pick_repository or PickRepository()

    try:
        entries = validate_pick_batch(batch, max_points=max_points)
    except ValidationError as e:
        logger.info(
            f"Rejected pick sheet for user {member_id} in league {league_id}: "
            f"{len(e.errors)} invalid entries"
        )
        return False, e.errors

    try:
        for entry in entries:
            points = entry["points"] if entry["points"] is not None else NO_PICK
            pick_repository.upsert_pick(league_id, member_id, entry["team_id"], points)
        pick_repository.commit()
    except PickemError:
        pick_repository.rollback()
        raise

    logger.info(
        f"Saved {len(entries)} picks for user {member_id} in league {league_id}"
    )
    return True, {}
