from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from alembic import command
from alembic.config import Config

from velion_dkn.app.core.logging import setup_logging
from velion_dkn.auth.security import issue_token as _issue_token
from velion_dkn.auth.settings import get_auth_settings
from velion_dkn.db.engine import DBEngine
from velion_dkn.db.settings import get_db_settings
from velion_dkn.db.uow import UnitOfWork
from velion_dkn.users.models import User

app = typer.Typer(no_args_is_help=True, add_completion=False, help="Velion DKN API management")
db_app = typer.Typer(no_args_is_help=True, add_completion=False, help="Alembic migrations")
app.add_typer(db_app, name="db")

ALEMBIC_DIR = "migrations"
ALEMBIC_INI = "alembic.ini"


def _load_config(project_root: Path, database_url: Optional[str]) -> Config:
    cfg = Config(str(project_root / ALEMBIC_INI))
    if database_url:
        cfg.set_main_option("sqlalchemy.url", database_url)
    cfg.set_main_option("script_location", str(project_root / ALEMBIC_DIR))
    return cfg


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(5000, help="Bind port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the API under uvicorn."""
    import uvicorn

    uvicorn.run("velion_dkn.main:app", host=host, port=port, reload=reload)


@app.command("init-db")
def init_db():
    """Create all tables from the model metadata (no migrations)."""
    setup_logging()

    async def _run() -> None:
        engine = DBEngine(get_db_settings())
        try:
            await engine.create_all()
        finally:
            await engine.dispose()

    asyncio.run(_run())
    typer.echo("Tables created")


@app.command("create-user")
def create_user(
    name: str = typer.Option(..., help="Display name"),
    email: str = typer.Option(..., help="Unique email"),
    department: Optional[str] = typer.Option(None),
    region: Optional[str] = typer.Option(None),
    expertise: Optional[str] = typer.Option(None, help="Comma separated"),
    role: str = typer.Option("consultant"),
    reviewer: bool = typer.Option(False, "--reviewer", help="Make the user a Knowledge Champion"),
):
    """Insert a user row. Accounts normally come from the auth service."""
    setup_logging()

    async def _run() -> int:
        engine = DBEngine(get_db_settings())
        try:
            async with UnitOfWork(engine) as uow:
                user = await uow.repo(User).create(
                    name=name,
                    email=email,
                    department=department,
                    region=region,
                    expertise=expertise,
                    role=role,
                    is_reviewer=reviewer,
                )
                return user.id
        finally:
            await engine.dispose()

    typer.echo(str(asyncio.run(_run())))


@app.command("issue-token")
def issue_token(
    user_id: int = typer.Argument(..., help="Id of the user the token is for"),
    lifetime: Optional[int] = typer.Option(None, help="Lifetime in seconds"),
):
    """Print a bearer token for USER_ID."""
    typer.echo(_issue_token(user_id, get_auth_settings(), lifetime_seconds=lifetime))


@db_app.command("revision")
def revision(
    message: str = typer.Option(..., "-m", "--message", help="Migration message"),
    autogenerate: bool = typer.Option(True, help="Autogenerate from model diffs"),
    project_root: Path = typer.Option(Path.cwd(), help="Root containing alembic.ini"),
    database_url: Optional[str] = typer.Option(None, help="Override DATABASE_URL"),
):
    cfg = _load_config(project_root.resolve(), database_url)
    command.revision(cfg, message=message, autogenerate=autogenerate)


@db_app.command("upgrade")
def upgrade(
    revision: str = typer.Argument("head"),
    project_root: Path = typer.Option(Path.cwd(), help="Root containing alembic.ini"),
    database_url: Optional[str] = typer.Option(None, help="Override DATABASE_URL"),
):
    cfg = _load_config(project_root.resolve(), database_url)
    command.upgrade(cfg, revision)


@db_app.command("downgrade")
def downgrade(
    revision: str = typer.Argument("-1"),
    project_root: Path = typer.Option(Path.cwd(), help="Root containing alembic.ini"),
    database_url: Optional[str] = typer.Option(None, help="Override DATABASE_URL"),
):
    cfg = _load_config(project_root.resolve(), database_url)
    command.downgrade(cfg, revision)


@db_app.command("current")
def current(
    verbose: bool = typer.Option(False, help="Verbose output"),
    project_root: Path = typer.Option(Path.cwd(), help="Root containing alembic.ini"),
    database_url: Optional[str] = typer.Option(None, help="Override DATABASE_URL"),
):
    cfg = _load_config(project_root.resolve(), database_url)
    command.current(cfg, verbose=verbose)


if __name__ == "__main__":
    app()
