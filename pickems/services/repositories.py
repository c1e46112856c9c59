"""
Repository adapters the scoring services depend on.

The services only need a handful of reads and one write, so they take these
objects as arguments. The SQLAlchemy-backed defaults delegate to the model
query helpers; tests pass in-memory stand-ins with the same methods.
"""

from pickems import db
from pickems.models import Pick, Team


class PickRepository:
    """Pick reads and writes backed by the database session"""

    def commit(self):
        db.session.commit()

    def rollback(self):
        db.session.rollback()

    def upsert_pick(self, league_id, user_id, team_id, points):
        return Pick.upsert_pick(league_id, user_id, team_id, points)

    def get_picks(self, league_id, user_id):
        return Pick.get_picks(league_id, user_id)

    def get_league_member_picks(self, league_id):
        return Pick.get_league_member_picks(league_id)


class TeamRepository:
    """Team reads backed by the database session"""

    def get_teams(self, league_id):
        return Team.get_teams(league_id)
