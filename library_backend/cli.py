import click
from flask import Blueprint

from library_backend.errors import LibraryError
from library_backend.models.user import UserRoles
from library_backend.services.auth_service import AuthService
from library_backend.tasks.jobs import run_reminder_job, run_reservation_cleanup_job

cli_bp = Blueprint("cli", __name__, cli_group=None)


@cli_bp.cli.command("create-user")
@click.argument("username")
@click.argument("email")
@click.argument("password")
@click.option("--role", type=click.Choice(UserRoles.ALL), default=UserRoles.USER, show_default=True)
def create_user(username, email, password, role):
    """Create a user account, e.g. the first Admin."""
    try:
        user = AuthService.register(username, email, password, role=role)
    except LibraryError as e:
        raise click.ClickException(e.message)
    click.echo(f"created user id={user.id} role={user.role}")


@cli_bp.cli.command("run-jobs")
def run_jobs():
    """Run the reminder and reservation-expiry jobs once."""
    from flask import current_app

    app = current_app._get_current_object()
    run_reminder_job(app)
    run_reservation_cleanup_job(app)
    click.echo("jobs finished")
