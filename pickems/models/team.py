import logging
from datetime import datetime, timezone

from pickems import db
from pickems.errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

CONFERENCES = ("AFC", "NFC")


class Team(db.Model):
    __tablename__ = "teams"

    id = db.Column(db.Integer, primary_key=True)

    # Team identification
    name = db.Column(db.String(100), nullable=False)
    abbreviation = db.Column(db.String(10), nullable=False)
    conference = db.Column(db.String(10), nullable=False)  # AFC or NFC

    # Standing within the league
    rank = db.Column(db.Integer, nullable=False, default=0)
    wins = db.Column(db.Integer, nullable=False, default=0)

    # Visual elements
    image_uri = db.Column(db.String(500))

    # League context
    league_id = db.Column(db.Integer, db.ForeignKey("leagues.id"), nullable=False)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (db.Index("idx_team_league", "league_id"),)

    def __repr__(self):
        return f"<Team {self.abbreviation} {self.name}>"

    @staticmethod
    def get_teams(league_id):
        """Get all teams of a league in creation order"""
        return (
            Team.query.filter_by(league_id=league_id)
            .order_by(Team.created_at, Team.id)
            .all()
        )

    @staticmethod
    def get_teams_by_rank(league_id):
        """Get all teams of a league ordered by rank, for display"""
        return (
            Team.query.filter_by(league_id=league_id)
            .order_by(Team.rank, Team.name, Team.id)
            .all()
        )

    @staticmethod
    def create_team(league_id, name, abbreviation, conference, image_uri=None):
        from .league import League

        if not db.session.get(League, league_id):
            raise NotFound("League", league_id)
        if conference not in CONFERENCES:
            raise ValidationError({"conference": "Team conference is required"})

        team = Team(
            league_id=league_id,
            name=name,
            abbreviation=abbreviation,
            conference=conference,
            image_uri=image_uri or None,
            wins=0,
            rank=0,
        )
        db.session.add(team)
        db.session.flush()
        logger.info(f"Team {team.abbreviation} added to league {league_id}")
        return team

    @staticmethod
    def update_team(team_id, rank, wins, name, abbreviation, image_uri=None):
        team = db.session.get(Team, team_id)
        if not team:
            raise NotFound("Team", team_id)

        team.rank = rank
        team.wins = wins
        team.name = name
        team.abbreviation = abbreviation
        if image_uri is not None:
            team.image_uri = image_uri or None
        return team

    @staticmethod
    def delete_team(team_id):
        """Delete a team together with every pick made on it"""
        from .pick import Pick

        team = db.session.get(Team, team_id)
        if not team:
            raise NotFound("Team", team_id)

        Pick.query.filter_by(team_id=team_id).delete()
        db.session.delete(team)
        logger.info(f"Team {team_id} deleted from league {team.league_id}")

    @staticmethod
    def bulk_update_teams(league_id, rows, removed_team_ids=()):
        """Apply admin edits to many teams as one unit of work

        Each row is a dict with team_id, rank, wins, name and abbreviation.
        Returns a report with one entry per row and per removal:
        {"team_id", "ok", "error"}. When any entry fails the session is
        rolled back and nothing is applied; otherwise the changes are
        committed together.
        """
        report = []
        league_team_ids = {
            team_id
            for (team_id,) in db.session.query(Team.id).filter_by(league_id=league_id)
        }

        def parse_count(value):
            number = int(value)
            if number < 0:
                raise ValueError(value)
            return number

        removed = set(removed_team_ids)
        for row in rows:
            team_id = row.get("team_id")
            if team_id in removed:
                continue
            if team_id not in league_team_ids:
                report.append(
                    {"team_id": team_id, "ok": False, "error": "Team not found"}
                )
                continue

            name = (row.get("name") or "").strip()
            abbreviation = (row.get("abbreviation") or "").strip()
            try:
                rank = parse_count(row.get("rank"))
                wins = parse_count(row.get("wins"))
            except (TypeError, ValueError):
                report.append(
                    {
                        "team_id": team_id,
                        "ok": False,
                        "error": "Rank and wins must be whole numbers",
                    }
                )
                continue
            if not name or not abbreviation:
                report.append(
                    {
                        "team_id": team_id,
                        "ok": False,
                        "error": "Team name and abbreviation are required",
                    }
                )
                continue

            Team.update_team(team_id, rank, wins, name, abbreviation)
            report.append({"team_id": team_id, "ok": True, "error": None})

        for team_id in sorted(removed):
            if team_id not in league_team_ids:
                report.append(
                    {"team_id": team_id, "ok": False, "error": "Team not found"}
                )
                continue
            Team.delete_team(team_id)
            report.append({"team_id": team_id, "ok": True, "error": None})

        if all(entry["ok"] for entry in report):
            db.session.commit()
        else:
            db.session.rollback()
            failed = [entry["team_id"] for entry in report if not entry["ok"]]
            logger.warning(
                f"Bulk team update for league {league_id} rejected, failed rows: {failed}"
            )

        return report

    def to_dict(self):
        """Convert team to dictionary for API responses"""
        return {
            "id": self.id,
            "name": self.name,
            "abbreviation": self.abbreviation,
            "conference": self.conference,
            "rank": self.rank,
            "wins": self.wins,
            "image_uri": self.image_uri,
            "league_id": self.league_id,
        }
