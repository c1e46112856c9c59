from pickems import db  # noqa: F401 - imported for model imports

from .league import League
from .league_member import LeagueMember
from .pick import Pick
from .team import Team
from .user import User

__all__ = [
    "User",
    "League",
    "LeagueMember",
    "Team",
    "Pick",
]
