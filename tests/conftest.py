import pytest

from pickems import create_app, db
from pickems.models import League, Pick, Team, User

PASSWORD = "correct-horse"


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(first_name, last_name="Tester", email=None, password=PASSWORD):
    user = User.create_user(
        first_name,
        last_name,
        email or f"{first_name.lower()}.{last_name.lower()}@example.com",
        password,
    )
    db.session.commit()
    return user


def make_league(owner, name="Office Pool", password="league-pass"):
    league = League.create_league(name, password, owner.id)
    db.session.commit()
    return league


def make_team(league, name, abbreviation, conference="AFC", rank=0, wins=0):
    team = Team.create_team(league.id, name, abbreviation, conference)
    team.rank = rank
    team.wins = wins
    db.session.commit()
    return team


def add_member(league, user):
    League.join_league(league.hash, user.id)
    db.session.commit()


def make_pick(league, user, team, points):
    pick = Pick.upsert_pick(league.id, user.id, team.id, points)
    db.session.commit()
    return pick


def login(client, user, password=PASSWORD):
    return client.post(
        "/auth/login",
        data={"email": user.email, "password": password},
        follow_redirects=False,
    )


@pytest.fixture
def owner(app):
    return make_user("Olivia", "Owner")


@pytest.fixture
def member(app):
    return make_user("Max", "Member")


@pytest.fixture
def league(owner, member):
    league = make_league(owner)
    add_member(league, member)
    return league


@pytest.fixture
def teams(league):
    return [
        make_team(league, "Kansas City Chiefs", "KC", "AFC", rank=1, wins=10),
        make_team(league, "Buffalo Bills", "BUF", "AFC", rank=2, wins=2),
        make_team(league, "Detroit Lions", "DET", "NFC", rank=3, wins=7),
    ]
