from datetime import datetime, timezone

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from pickems import db
from pickems.errors import ConstraintViolation


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # Profile information
    first_name = db.Column(db.String(50), nullable=False, default="")
    last_name = db.Column(db.String(50), nullable=False, default="")

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    picks = db.relationship("Pick", backref="user", lazy="dynamic")
    league_memberships = db.relationship(
        "LeagueMember", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )
    owned_leagues = db.relationship("League", backref="owner", lazy="dynamic")

    def __repr__(self):
        return f"<User {self.email}>"

    def set_password(self, password):
        """Set password hash"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Check password against hash"""
        return check_password_hash(self.password_hash, password)

    @property
    def full_name(self):
        """Return "first last", or the email when no name is set"""
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or self.email

    @staticmethod
    def get_user_by_id(user_id):
        return db.session.get(User, user_id)

    @staticmethod
    def get_user_by_email(email):
        return User.query.filter_by(email=email.strip().lower()).first()

    @staticmethod
    def create_user(first_name, last_name, email, password):
        """Create a user with a hashed password

        Raises ConstraintViolation when the email is already registered.
        """
        email = email.strip().lower()
        if User.get_user_by_email(email):
            raise ConstraintViolation(f"Email {email} is already registered")

        user = User(first_name=first_name, last_name=last_name, email=email)
        user.set_password(password)
        db.session.add(user)
        db.session.flush()
        return user

    @staticmethod
    def verify_login(email, password):
        """Return the user when the credentials match, otherwise None"""
        user = User.get_user_by_email(email)
        if not user or not user.check_password(password):
            return None
        return user

    def update_profile(self, first_name, last_name):
        self.first_name = first_name
        self.last_name = last_name

    def get_leagues(self, include_archived=False):
        """Get leagues this user belongs to, oldest membership first"""
        from .league import League
        from .league_member import LeagueMember

        query = (
            League.query.join(LeagueMember, LeagueMember.league_id == League.id)
            .filter(LeagueMember.user_id == self.id)
            .order_by(LeagueMember.joined_at, League.id)
        )
        if not include_archived:
            query = query.filter(League.is_archived.is_(False))
        return query.all()

    def to_dict(self):
        """Convert user to dictionary for API responses"""
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "display_name": self.full_name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
