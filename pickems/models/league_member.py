from datetime import datetime, timezone

from pickems import db


class LeagueMember(db.Model):
    __tablename__ = "league_members"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    league_id = db.Column(db.Integer, db.ForeignKey("leagues.id"), nullable=False)

    joined_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.UniqueConstraint("league_id", "user_id", name="unique_league_user"),
        db.Index("idx_league_members_league", "league_id"),
        db.Index("idx_user_memberships", "user_id"),
    )

    def __repr__(self):
        return f"<LeagueMember user_id={self.user_id} league_id={self.league_id}>"

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "league_id": self.league_id,
            "display_name": self.user.full_name if self.user else None,
            "email": self.user.email if self.user else None,
            "joined_at": self.joined_at.isoformat() if self.joined_at else None,
        }
