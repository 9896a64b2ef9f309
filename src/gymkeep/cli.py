"""CLI entry point for gymkeep."""

import click

from . import __version__
from .commands import create_gym, create_superadmin, init, list_gyms, seed_demo, serve


@click.group()
@click.version_option(version=__version__, prog_name="gymkeep")
def main():
    """gymkeep: multi-tenant gym management.

    Example usage:

        # Create the database
        gymkeep init

        # Create an administrator and a first gym
        gymkeep create-superadmin --email admin@example.com
        gymkeep create-gym "Iron Temple" --owner-email owner@example.com

        # Run the API
        gymkeep serve
    """


main.add_command(init)
main.add_command(create_superadmin)
main.add_command(create_gym)
main.add_command(list_gyms)
main.add_command(seed_demo)
main.add_command(serve)


if __name__ == "__main__":
    main()
