# media_catalog/cli/commands/admin.py
import click

from media_catalog.sa.repositories.media_item import MediaItemRepository
from media_catalog.services.media_item_service import MediaItemAdminService
from ..utils import USER_ID_OPTION, catalog_session


@click.group()
def admin():
    """Administrative commands"""
    pass


@admin.command()
@click.argument('item_id', type=int)
@USER_ID_OPTION
@click.confirmation_option(prompt="Permanently remove this media item?")
@click.pass_context
def purge(ctx, item_id, user_id):
    """Permanently remove a media item. This cannot be undone."""
    with catalog_session(ctx) as session:
        if not MediaItemAdminService(MediaItemRepository(session)).purge(item_id, user_id):
            raise click.ClickException(f"Media item {item_id} not found")
    click.echo(click.style(f"Purged media item {item_id}", fg='green'))
