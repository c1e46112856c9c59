import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from pickems import db
from pickems.errors import ConstraintViolation, NotFound

logger = logging.getLogger(__name__)


class Pick(db.Model):
    __tablename__ = "picks"

    id = db.Column(db.Integer, primary_key=True)

    # Pick identification
    league_id = db.Column(db.Integer, db.ForeignKey("leagues.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=False)

    # Points wagered on the team; 0 means no pick
    points = db.Column(db.Integer, nullable=False, default=0)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    team = db.relationship("Team", foreign_keys=[team_id])
    league = db.relationship("League", foreign_keys=[league_id])

    # Constraints and indexes
    __table_args__ = (
        db.UniqueConstraint(
            "league_id", "user_id", "team_id", name="unique_league_user_team_pick"
        ),
        db.Index("idx_pick_league_user", "league_id", "user_id"),
        db.Index("idx_pick_team", "team_id"),
    )

    def __repr__(self):
        return f"<Pick league_id={self.league_id} user_id={self.user_id} team_id={self.team_id} points={self.points}>"

    @staticmethod
    def upsert_pick(league_id, user_id, team_id, points):
        """Insert or update the pick for (league, user, team)

        Raises NotFound when the league, user or team does not exist (or the
        team belongs to another league) and ConstraintViolation if the write
        still collides with an existing row.
        """
        from .league import League
        from .team import Team
        from .user import User

        if not db.session.get(League, league_id):
            raise NotFound("League", league_id)
        if not db.session.get(User, user_id):
            raise NotFound("User", user_id)
        team = db.session.get(Team, team_id)
        if not team or team.league_id != league_id:
            raise NotFound("Team", team_id)

        pick = Pick.query.filter_by(
            league_id=league_id, user_id=user_id, team_id=team_id
        ).first()

        if pick:
            pick.points = points
        else:
            pick = Pick(
                league_id=league_id, user_id=user_id, team_id=team_id, points=points
            )
            db.session.add(pick)

        try:
            db.session.flush()
        except IntegrityError as e:
            db.session.rollback()
            logger.error(
                f"Duplicate pick write for league={league_id} user={user_id} team={team_id}: {e}"
            )
            raise ConstraintViolation(
                f"Pick for team {team_id} could not be saved"
            ) from e

        return pick

    @staticmethod
    def get_picks(league_id, user_id):
        """All picks one user made in one league, in insertion order"""
        return (
            Pick.query.filter_by(league_id=league_id, user_id=user_id)
            .order_by(Pick.id)
            .all()
        )

    @staticmethod
    def get_league_member_picks(league_id):
        """All picks in a league with their user and team loaded"""
        from .league_member import LeagueMember

        return (
            Pick.query.join(
                LeagueMember,
                db.and_(
                    LeagueMember.league_id == Pick.league_id,
                    LeagueMember.user_id == Pick.user_id,
                ),
            )
            .filter(Pick.league_id == league_id)
            .options(joinedload(Pick.user), joinedload(Pick.team))
            .order_by(Pick.id)
            .all()
        )

    def to_dict(self):
        """Convert pick to dictionary for API responses"""
        return {
            "id": self.id,
            "league_id": self.league_id,
            "user_id": self.user_id,
            "team_id": self.team_id,
            "points": self.points,
            "team": self.team.to_dict() if self.team else None,
        }
