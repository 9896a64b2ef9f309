"""Initialize database command."""

import click

from ..config import get_settings
from ..db import get_db_path, init_db
from .base import async_command, echo_info, echo_success


@click.command()
@async_command
async def init():
    """Create the data directory and the SQLite schema.

    Safe to run more than once; existing data is kept.
    """
    data_dir = get_settings().data_dir
    echo_info(f"Initializing gymkeep in {data_dir}")

    await init_db(get_db_path(data_dir))
    echo_success("Database initialized")

    click.echo()
    click.echo("Next steps:")
    click.echo("  gymkeep create-superadmin --email admin@example.com")
    click.echo('  gymkeep create-gym "Iron Temple" --owner-email owner@example.com')
    click.echo("  gymkeep serve")
