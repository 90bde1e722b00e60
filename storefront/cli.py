# storefront/cli.py
import click
from flask.cli import with_appcontext

from .services.catalog import seed_products


@click.command("seed-products")
@with_appcontext
def seed_products_command():
    """Load the demo catalog into an empty product table."""
    n = seed_products()
    if not n:
        click.echo("Catalog already has products"); return
    click.echo(f"Seeded {n} products")


def register_cli(app):
    app.cli.add_command(seed_products_command)
