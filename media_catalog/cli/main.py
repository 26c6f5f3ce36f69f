# media_catalog/cli/main.py
import logging
import click

from media_catalog.sa.database import Database
from .commands.media import media
from .commands.lookup import category, genre
from .commands.admin import admin


@click.group()
@click.option('--db-url', envvar='DATABASE_URL', default=None,
              help="Database connection string (env: DATABASE_URL, default: sqlite:///catalog.db)")
@click.option('--log-level', default='WARNING', show_default=True,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help="Logging level")
@click.pass_context
def cli(ctx: click.Context, db_url: str | None, log_level: str):
    """Media Catalog CLI"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    database = Database(db_url)
    database.init_db()
    ctx.obj = {'database': database}


cli.add_command(media)
cli.add_command(category)
cli.add_command(genre)
cli.add_command(admin)


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
