import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError

from tenant_tables.extensions import db
from tenant_tables.utils.logging_utils import get_logger


@click.command("setup")
@click.option("--drop/--no-drop", default=False, help="Drop every registered table before creating it again")
@with_appcontext
def setup_command(drop: bool):
    """Create every table registered on the shared metadata.

    Tables register themselves when they are constructed, so import the
    module that defines them before running this command.  Safe to run
    multiple times; existing tables are left alone unless --drop is given.
    """
    log = get_logger("cli")
    names = sorted(db.metadata.tables.keys())
    if not names:
        click.echo("ℹ No tables registered, nothing to do")
        return

    try:
        if drop:
            db.drop_all()
            click.echo("✔ Dropped registered tables")
        db.create_all()
    except SQLAlchemyError as e:
        current_app.logger.warning(f"Failed to create tables: {e}")
        log.exception("setup failed tables=%s", names)
        raise click.ClickException(f"Failed to create tables: {e}") from e

    existing = set(sa_inspect(db.engine).get_table_names())
    for name in names:
        status = "✔" if name in existing else "⚠"
        click.echo(f"{status} {name}")
    log.info("setup complete tables=%s drop=%s", names, drop)
