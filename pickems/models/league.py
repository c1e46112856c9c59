import logging
import secrets
from datetime import datetime, timezone

from werkzeug.security import check_password_hash, generate_password_hash

from pickems import db

logger = logging.getLogger(__name__)


class League(db.Model):
    __tablename__ = "leagues"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)

    # Public join id shared in invite links, plus the join secret
    hash = db.Column(db.String(16), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # League state
    is_locked = db.Column(db.Boolean, default=False, nullable=False)
    is_archived = db.Column(db.Boolean, default=False, nullable=False)

    # Owner and timestamps
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    members = db.relationship(
        "LeagueMember", backref="league", lazy="dynamic", cascade="all, delete-orphan"
    )
    teams = db.relationship("Team", backref="league", lazy="dynamic")

    __table_args__ = (
        db.Index("idx_league_owner", "user_id"),
        db.Index("idx_league_archived", "is_archived"),
    )

    def __repr__(self):
        return f"<League {self.name}>"

    def __init__(self, **kwargs):
        super(League, self).__init__(**kwargs)
        if not self.hash:
            self.hash = self.generate_hash()

    @staticmethod
    def generate_hash():
        """Generate a unique 16-character URL-safe join id"""
        while True:
            value = secrets.token_urlsafe(12)[:16]
            if not League.query.filter_by(hash=value).first():
                return value

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def is_owner(self, user_id):
        return self.user_id == user_id

    def is_user_member(self, user_id):
        return self.members.filter_by(user_id=user_id).first() is not None

    def get_member_count(self):
        return self.members.count()

    def get_tabs(self, user_id):
        """Navigation tabs for a league page, built fresh for each request"""
        tabs = [
            {"name": "Leaderboard", "endpoint": "leagues.details"},
            {"name": "Your Picks", "endpoint": "leagues.entries"},
            {"name": "Members", "endpoint": "leagues.members"},
        ]
        if self.is_owner(user_id):
            tabs.append({"name": "Admin", "endpoint": "leagues.admin"})
        return tabs

    @staticmethod
    def get_league(league_id, user_id):
        """Get a league, but only for one of its members"""
        from .league_member import LeagueMember

        membership = LeagueMember.query.filter_by(
            league_id=league_id, user_id=user_id
        ).first()
        if not membership:
            return None
        return db.session.get(League, league_id)

    @staticmethod
    def get_league_list_items(user_id):
        """Leagues shown on the member's dashboard (archived ones are hidden)"""
        from .user import User

        user = db.session.get(User, user_id)
        if not user:
            return []
        return user.get_leagues(include_archived=False)

    @staticmethod
    def get_league_by_hash(hash):
        if not hash:
            return None
        return League.query.filter_by(hash=hash.strip()).first()

    @staticmethod
    def create_league(name, password, user_id):
        """Create a league and add its creator as the first member"""
        from .league_member import LeagueMember

        league = League(name=name, user_id=user_id, is_locked=False, is_archived=False)
        league.set_password(password)
        db.session.add(league)
        db.session.flush()

        db.session.add(LeagueMember(league_id=league.id, user_id=user_id))
        db.session.flush()

        logger.info(f"League {league.id} ({league.name}) created by user {user_id}")
        return league

    @staticmethod
    def verify_league_password(hash, password):
        """Return the league when hash and password match, otherwise None"""
        league = League.get_league_by_hash(hash)
        if not league or not league.password_hash:
            return None
        if not league.check_password(password):
            return None
        return league

    @staticmethod
    def join_league(hash, user_id):
        """Add a user to the league with this hash

        Returns the membership (the existing one if the user already joined),
        or None when no league has this hash.
        """
        from .league_member import LeagueMember

        league = League.get_league_by_hash(hash)
        if not league:
            return None

        existing = LeagueMember.query.filter_by(
            league_id=league.id, user_id=user_id
        ).first()
        if existing:
            return existing

        membership = LeagueMember(league_id=league.id, user_id=user_id)
        db.session.add(membership)
        db.session.flush()
        logger.info(f"User {user_id} joined league {league.id}")
        return membership

    @staticmethod
    def update_league(league_id, is_locked, is_archived):
        from pickems.errors import NotFound

        league = db.session.get(League, league_id)
        if not league:
            raise NotFound("League", league_id)
        league.is_locked = is_locked
        league.is_archived = is_archived
        return league

    @staticmethod
    def delete_league(league_id):
        """Delete a league with its picks, teams and memberships"""
        from pickems.errors import NotFound

        from .league_member import LeagueMember
        from .pick import Pick
        from .team import Team

        league = db.session.get(League, league_id)
        if not league:
            raise NotFound("League", league_id)

        Pick.query.filter_by(league_id=league_id).delete()
        Team.query.filter_by(league_id=league_id).delete()
        LeagueMember.query.filter_by(league_id=league_id).delete()
        db.session.delete(league)
        logger.info(f"League {league_id} deleted")

    @staticmethod
    def delete_league_user(league_id, user_id):
        """Remove a member and their picks from a league"""
        from pickems.errors import NotFound

        from .league_member import LeagueMember
        from .pick import Pick

        membership = LeagueMember.query.filter_by(
            league_id=league_id, user_id=user_id
        ).first()
        if not membership:
            raise NotFound("LeagueMember", f"{league_id}/{user_id}")

        Pick.query.filter_by(league_id=league_id, user_id=user_id).delete()
        db.session.delete(membership)
        logger.info(f"User {user_id} removed from league {league_id}")

    @staticmethod
    def get_league_members(league_id):
        """Members of a league, in join order"""
        from .league_member import LeagueMember
        from .user import User

        return (
            User.query.join(LeagueMember, LeagueMember.user_id == User.id)
            .filter(LeagueMember.league_id == league_id)
            .order_by(LeagueMember.joined_at, User.id)
            .all()
        )

    def to_dict(self):
        """Convert league to dictionary for API responses"""
        return {
            "id": self.id,
            "name": self.name,
            "hash": self.hash,
            "user_id": self.user_id,
            "is_locked": self.is_locked,
            "is_archived": self.is_archived,
            "member_count": self.get_member_count(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
