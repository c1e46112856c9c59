#!/usr/bin/env python3
"""
NFL Pick'em Management CLI

Command-line management for the NFL Pick'em pool: database setup, users,
and league administration.
"""

import os
import secrets

import click
from flask.cli import with_appcontext
from flask_migrate import downgrade, migrate, upgrade
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from pickems import create_app, db
from pickems.errors import ConstraintViolation, NotFound
from pickems.models import League, Pick, Team, User
from pickems.services.leaderboard_service import compute_leaderboard
from pickems.utils.logging_config import get_logger

logger = get_logger(__name__)


@click.group()
def cli():
    """NFL Pick'em Management CLI"""
    pass


# User Commands
@cli.group()
def user():
    """User management commands"""
    pass


@user.command()
@click.option("--first-name", prompt=True, help="First name")
@click.option("--last-name", prompt=True, help="Last name")
@click.option("--email", prompt=True, help="Email address")
@click.option(
    "--password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Password",
)
@with_appcontext
def create(first_name, last_name, email, password):
    """Create a user account"""
    if len(password) < 8:
        click.echo("❌ Password must be at least 8 characters")
        return

    try:
        new_user = User.create_user(first_name, last_name, email, password)
        db.session.commit()
        click.echo(f"✅ Created user {new_user.email} (id {new_user.id})")
    except ConstraintViolation:
        db.session.rollback()
        click.echo(f"❌ A user already exists with email {email}")
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error creating user: {str(e)}")
        logger.error(f"User creation failed - SQL error: {e}")


@user.command()
@with_appcontext
def list_users():
    """List all users"""
    users = User.query.order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("Users:")
    for u in users:
        click.echo(f"  {u.id}: {u.full_name} <{u.email}>")


# League Commands
@cli.group()
def league():
    """League management commands"""
    pass


@league.command()
@click.option("--all", "show_all", is_flag=True, help="Include archived leagues")
@with_appcontext
def list_leagues(show_all):
    """List leagues"""
    query = League.query
    if not show_all:
        query = query.filter_by(is_archived=False)
    leagues = query.order_by(League.id).all()

    if not leagues:
        click.echo("No leagues found.")
        return

    click.echo("Leagues:")
    for lg in leagues:
        status = "🔒 Locked" if lg.is_locked else "🟢 Open"
        archived = " (archived)" if lg.is_archived else ""
        click.echo(
            f"  {lg.id}: {lg.name} [{lg.hash}] - {status}, "
            f"{lg.get_member_count()} members{archived}"
        )


def _set_locked(league_id, is_locked):
    lg = db.session.get(League, league_id)
    if not lg:
        click.echo(f"❌ League {league_id} not found!")
        return

    try:
        League.update_league(league_id, is_locked, lg.is_archived)
        db.session.commit()
    except (NotFound, SQLAlchemyError) as e:
        db.session.rollback()
        click.echo(f"❌ Error updating league: {str(e)}")
        logger.error(f"League {league_id} lock update failed: {e}")
        return

    state = "Locked" if is_locked else "Unlocked"
    click.echo(f"✅ {state} league {lg.name}")


@league.command()
@click.argument("league_id", type=int)
@with_appcontext
def lock(league_id):
    """Lock a league, revealing its leaderboard"""
    _set_locked(league_id, True)


@league.command()
@click.argument("league_id", type=int)
@with_appcontext
def unlock(league_id):
    """Unlock a league so members can change their picks"""
    _set_locked(league_id, False)


@league.command()
@click.argument("league_id", type=int)
@with_appcontext
def leaderboard(league_id):
    """Print a league's standings"""
    lg = db.session.get(League, league_id)
    if not lg:
        click.echo(f"❌ League {league_id} not found!")
        return

    if not lg.is_locked:
        click.echo("⚠️  League is not locked; standings are provisional")

    board = compute_leaderboard(league_id)
    if not board["ranked_scores"]:
        click.echo("No picks yet.")
        return

    click.echo(f"🏆 {lg.name}")
    for row in board["ranked_scores"]:
        click.echo(f"  {row['rank']:>3}. {row['display_name']:<30} {row['total_points']}")


# Database Commands
@cli.group()
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command()
@with_appcontext
def init_db():
    """Initialize database tables"""
    try:
        db.create_all()
        click.echo("✅ Database tables created successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error initializing database: {str(e)}")


@db_cmd.command()
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@with_appcontext
def reset(yes):
    """⚠️  DANGER: Drop and recreate all tables"""
    if not yes and not click.confirm("This will DELETE ALL DATA. Are you sure?"):
        click.echo("Cancelled.")
        return

    try:
        db.drop_all()
        db.create_all()
        click.echo("✅ Database reset successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error resetting database: {str(e)}")


# Database Migration Commands
@cli.group()
def db_migrate():
    """Database migration commands"""
    pass


@db_migrate.command()
@with_appcontext
def init_migrations():
    """Initialize migrations repository"""
    if os.path.exists("migrations"):
        click.echo("❌ Migrations directory already exists!")
        return

    from flask_migrate import init as flask_migrate_init

    flask_migrate_init()
    click.echo("✅ Migrations repository initialized!")


@db_migrate.command()
@click.option("-m", "--message", required=True, help="Migration message")
@with_appcontext
def create_migration(message):
    """Create a new migration"""
    migrate(message=message)
    click.echo(f"✅ Migration created: {message}")


@db_migrate.command()
@click.option("--revision", default="head", help="Revision to upgrade to")
@with_appcontext
def apply_migrations(revision):
    """Apply migrations to database"""
    upgrade(revision=revision)
    click.echo(f"✅ Migrations applied to {revision}")


@db_migrate.command()
@click.option("--revision", required=True, help="Revision to downgrade to")
@with_appcontext
def rollback_migration(revision):
    """Rollback migrations to specific revision"""
    downgrade(revision=revision)
    click.echo(f"✅ Rolled back to {revision}")


# Info Commands
@cli.command()
def generate_secrets():
    """Print fresh SECRET_KEY and WTF_CSRF_SECRET_KEY values"""
    click.echo(f"SECRET_KEY={secrets.token_urlsafe(32)}")
    click.echo(f"WTF_CSRF_SECRET_KEY={secrets.token_urlsafe(32)}")
    click.echo("📝 Copy these values to your .env file")


@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("🏈 NFL Pick'em Application Status")
    click.echo("=" * 40)

    try:
        db.session.execute(text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database: Error - {str(e)}")
        return

    click.echo(f"👥 Users: {User.query.count()}")

    league_count = League.query.filter_by(is_archived=False).count()
    locked_count = League.query.filter_by(is_archived=False, is_locked=True).count()
    click.echo(f"🏆 Active Leagues: {league_count} ({locked_count} locked)")

    click.echo(f"🏈 Teams: {Team.query.count()}")
    click.echo(f"📝 Picks: {Pick.query.count()}")


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        cli()
