"""Typer CLI for WeddingRSVP."""

from __future__ import annotations

import json
from pathlib import Path

from sqlalchemy.exc import OperationalError
import typer
import uvicorn

from .config import (
    load_settings,
    settings,
    settings_as_dict,
    update_config_file,
)
from .crud import create_invite as crud_create_invite
from .crud import list_invites as crud_list_invites
from .database import get_session
from .errors import RSVPError
from .housekeeping import run_housekeeping, vacuum_database
from .party import party_of
from .reports import meal_label, serialize_invite, summarize
from .scheduler import start_scheduler, stop_scheduler
from .seed import seed_fake_data
from .storage import init_db, upgrade_database

app = typer.Typer(help="WeddingRSVP command-line interface")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Show help when no subcommand is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("upgrade-db")
def upgrade_db(
    no_backup: bool = typer.Option(
        False,
        "--no-backup",
        help="Skip creating a .bak copy of the database before upgrading",
    ),
) -> None:
    """Upgrade the SQLite database schema if needed."""
    try:
        actions = upgrade_database(make_backup=not no_backup)
    except OperationalError as exc:
        message = str(getattr(exc, "orig", exc)).lower()
        if "readonly" in message or "read-only" in message:
            typer.secho(
                "Unable to upgrade because the database is read-only. "
                f"Ensure write access to {settings.database_path}.",
                err=True,
                fg=typer.colors.RED,
            )
            raise typer.Exit(code=1)
        raise

    typer.echo("Database upgrade complete:")
    for action in actions:
        typer.echo(f"- {action}")


@app.command("runserver")
def runserver(
    host: str = typer.Option(settings.app_host, "--host", help="Host to bind"),
    port: int = typer.Option(settings.app_port, "--port", help="Port to bind"),
):
    """Start FastAPI with APScheduler."""
    init_db()
    start_scheduler()
    config = uvicorn.Config(
        "weddingrsvp.api:app",
        host=host,
        port=port,
        reload=False,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
    server = uvicorn.Server(config)
    try:
        typer.echo(f"Starting WeddingRSVP on {host}:{port}")
        server.run()
    finally:
        stop_scheduler()


@app.command("create-invite")
def create_invite(
    name: str = typer.Argument(..., help="Invite name/slug shared with the guests"),
    guests: list[str] = typer.Option(
        [], "--guest", "-g", help="Guest name (repeat for each guest)"
    ),
    plus_one: bool = typer.Option(
        False, "--plus-one/--no-plus-one", help="Ask whether guests bring a plus one"
    ),
    kids: int = typer.Option(
        0, "--kids", min=0, help="Ask for kids, allowing up to this many (0 = don't ask)"
    ),
    accommodation: bool = typer.Option(
        True,
        "--accommodation/--no-accommodation",
        help="Ask whether the party needs accommodation",
    ),
) -> None:
    """Provision a group invite without going through the admin API."""
    init_db()
    try:
        with get_session() as session:
            invite = crud_create_invite(
                session,
                name=name,
                guest_names=guests,
                ask_for_plus_one=plus_one,
                ask_for_kids=kids > 0,
                max_number_of_kids=kids,
                ask_for_accommodation=accommodation,
            )
            typer.echo(f"Created invite {invite.name} ({len(invite.guests)} guests)")
    except RSVPError as exc:
        typer.secho(exc.message, err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)


def _describe(invite) -> str:
    if invite.attending is None:
        status = "awaiting"
    else:
        status = "attending" if invite.attending else "declined"
    party = party_of(invite).as_dict()
    if party["kind"] == "group":
        people = ", ".join(
            f"{g['name']} ({meal_label(g['meal_choice']) or '-'})"
            for g in party["guests"]
        )
    else:
        people = meal_label(party["meal_choice"]) or "-"
        if party["plus_one"]:
            people += f" + {party['plus_one_name']}"
    return f"{invite.name}: {status} [{people}]"


@app.command("list-invites")
def list_invites(
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON records"),
) -> None:
    """Print every invite and its current answer."""
    init_db()
    with get_session() as session:
        invites = crud_list_invites(session)
        if as_json:
            typer.echo(json.dumps([serialize_invite(i) for i in invites], indent=2))
            return
        if not invites:
            typer.echo("No invites yet.")
            return
        for invite in invites:
            typer.echo(_describe(invite))


@app.command("summary")
def summary() -> None:
    """Print aggregate attendance and meal counts."""
    init_db()
    with get_session() as session:
        stats = summarize(crud_list_invites(session))
    typer.echo(json.dumps(stats, indent=2))


@app.command("prune-sessions")
def prune_sessions(
    vacuum: bool = typer.Option(
        False,
        "--vacuum",
        help="Run SQLite VACUUM after pruning completes",
    ),
) -> None:
    """Delete expired admin sessions."""
    init_db()
    stats = run_housekeeping()
    typer.echo(f"Pruned {stats['sessions_pruned']} expired admin sessions.")
    if vacuum:
        vacuum_database()
        typer.echo("Database vacuum complete.")


@app.command("seed-data")
def seed_data(
    invites: int = typer.Option(
        settings.seed_invites, "--invites", min=0, help="Number of invites to create"
    ),
    group_percent: int = typer.Option(
        settings.seed_group_percent,
        "--group-percent",
        min=0,
        max=100,
        help="Percentage of invites provisioned as groups (0-100)",
    ),
):
    """Populate the database with fake invites for testing."""
    stats = seed_fake_data(invite_count=invites, group_percentage=group_percent)
    typer.echo(
        f"Seed complete: {stats['invites']} invites ({stats['groups']} groups), "
        f"{stats['answered']} answered."
    )


@app.command("config")
def configure(
    show: bool = typer.Option(
        False, "--show", help="Show the current effective configuration"
    ),
    session_prune_hours: int | None = typer.Option(
        None, "--session-prune-hours", min=1, help="Hours between session pruning runs"
    ),
    enable_scheduler: bool | None = typer.Option(
        None,
        "--enable-scheduler/--disable-scheduler",
        help="Toggle background scheduler (session pruning)",
    ),
    host: str | None = typer.Option(None, "--host", help="Default host for runserver"),
    port: int | None = typer.Option(None, "--port", help="Default port for runserver"),
    seed_invites: int | None = typer.Option(
        None, "--seed-invites", min=0, help="Default seed-data invites"
    ),
    seed_group_percent: int | None = typer.Option(
        None,
        "--seed-group-percent",
        min=0,
        max=100,
        help="Default percent of group invites for seed-data",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config-path",
        help="Path to weddingrsvp.toml (default: ./weddingrsvp.toml)",
    ),
):
    """View or update the persistent configuration file."""

    updates = {
        "session_prune_hours": session_prune_hours,
        "enable_scheduler": enable_scheduler,
        "app_host": host,
        "app_port": port,
        "seed_invites": seed_invites,
        "seed_group_percent": seed_group_percent,
    }
    clean_updates = {k: v for k, v in updates.items() if v is not None}

    target_path = config_path or settings.config_path
    if clean_updates:
        settings_ref = update_config_file(clean_updates, path=target_path)
        typer.echo(f"Updated configuration in {target_path}")
    else:
        settings_ref = load_settings(target_path)
    if show or not clean_updates:
        effective = settings_as_dict(settings_ref)
        effective["config_path"] = str(target_path)
        typer.echo(json.dumps(effective, indent=2))


if __name__ == "__main__":
    app()
