# media_catalog/cli/commands/media.py
import json
from pathlib import Path
import click
from pydantic import ValidationError as SchemaValidationError

from media_catalog.sa.models import MediaItem
from media_catalog.sa.repositories.media_item import MediaItemRepository
from media_catalog.services.media_item_service import MediaItemService
from media_catalog.services.search_service import SearchService
from media_catalog.models.media import MediaType, MediaItemCreate
from media_catalog.models.search import SearchCriteria
from ..utils import (
    USER_ID_OPTION, MEDIA_TYPE_CHOICE, catalog_session, handle_catalog_errors,
    parse_media_type, format_item, print_items, print_item_detail
)


@click.group()
def media():
    """Catalog item commands"""
    pass


@media.command()
@click.argument('title')
@click.option('--author', help="Author or creator")
@click.option('--isbn', help="ISBN (required for books and e-books)")
@click.option('--type', 'media_type', type=MEDIA_TYPE_CHOICE, default=MediaType.BOOK.value, show_default=True)
@click.option('--genre', help="Genre label")
@click.option('--category', help="Category label")
@click.option('--published', type=click.DateTime(formats=['%Y-%m-%d']), help="Publication date (YYYY-MM-DD)")
@click.option('--description', help="Free-text description")
@click.option('--quantity', type=int, default=1, show_default=True, help="Number of copies owned")
@USER_ID_OPTION
@click.pass_context
@handle_catalog_errors
def add(ctx, title, author, isbn, media_type, genre, category, published, description, quantity, user_id):
    """Add a new item to the catalog"""
    with catalog_session(ctx) as session:
        service = MediaItemService(MediaItemRepository(session))
        item = service.create(MediaItem(
            title=title,
            author=author,
            isbn=isbn,
            media_type=parse_media_type(media_type),
            genre=genre,
            category=category,
            publication_date=published,
            description=description,
            quantity=quantity
        ), user_id)
        click.echo(click.style("Added: ", fg='green') + format_item(item))


@media.command()
@click.argument('item_id', type=int)
@click.option('--include-deleted', is_flag=True, help="Also show soft-deleted items")
@click.pass_context
def show(ctx, item_id, include_deleted):
    """Show every field of one item"""
    with catalog_session(ctx) as session:
        item = MediaItemService(MediaItemRepository(session)).get_by_id(item_id, include_deleted=include_deleted)
        if item is None:
            raise click.ClickException(f"Media item {item_id} not found")
        print_item_detail(item)


@media.command(name="list")
@click.option('--type', 'media_type', type=MEDIA_TYPE_CHOICE, help="Only items of this type")
@click.option('--category', help="Only items in this category")
@click.option('--genre', help="Only items in this genre")
@click.option('--author', help="Only items by this author")
@click.option('--available', is_flag=True, help="Only items with copies on the shelf")
@click.option('--include-deleted', is_flag=True, help="Also list soft-deleted items")
@click.pass_context
def list_items(ctx, media_type, category, genre, author, available, include_deleted):
    """List catalog items ordered by title"""
    with catalog_session(ctx) as session:
        service = MediaItemService(MediaItemRepository(session))
        if media_type:
            items = service.get_by_type(parse_media_type(media_type))
        elif category:
            items = service.get_by_category(category)
        elif genre:
            items = service.get_by_genre(genre)
        elif author:
            items = service.get_by_author(author)
        elif available:
            items = service.get_available_items()
        else:
            items = service.get_all(include_deleted=include_deleted)
        print_items(items)


@media.command()
@click.argument('term', required=False, default="")
@click.option('--type', 'media_type', help="Media type filter; unrecognised values are ignored")
@click.option('--genre', help="Genre filter")
@click.option('--page', type=int, default=1, show_default=True, help="Page number (1-based)")
@click.option('--size', type=int, default=20, show_default=True, help="Items per page")
@click.pass_context
def search(ctx, term, media_type, genre, page, size):
    """Search titles, authors and ISBNs, one page at a time"""
    try:
        criteria = SearchCriteria(title=term, type=media_type, genre=genre, page=page - 1, page_size=size)
    except SchemaValidationError as e:
        raise click.BadParameter(str(e))

    with catalog_session(ctx) as session:
        items, total = SearchService(MediaItemRepository(session)).search(criteria)
        print_items(items)
        pages = max(1, (total + size - 1) // size)
        click.echo(click.style(f"\nPage {page} of {pages} ({total} matching items)", fg='blue'))


@media.command()
@click.argument('item_id', type=int)
@click.option('--title')
@click.option('--author')
@click.option('--isbn')
@click.option('--type', 'media_type', type=MEDIA_TYPE_CHOICE)
@click.option('--genre')
@click.option('--category')
@click.option('--description')
@USER_ID_OPTION
@click.pass_context
@handle_catalog_errors
def update(ctx, item_id, title, author, isbn, media_type, genre, category, description, user_id):
    """Change descriptive fields of an item"""
    with catalog_session(ctx) as session:
        service = MediaItemService(MediaItemRepository(session))
        item = service.get_by_id(item_id)
        if item is None:
            raise click.ClickException(f"Media item {item_id} not found")

        changes = {
            'title': title, 'author': author, 'isbn': isbn, 'genre': genre,
            'category': category, 'description': description,
            'media_type': parse_media_type(media_type)
        }
        for field, value in changes.items():
            if value is not None:
                setattr(item, field, value)

        service.update(item, user_id)
        click.echo(click.style("Updated: ", fg='green') + format_item(item))


@media.command()
@click.argument('item_id', type=int)
@click.argument('new_quantity', type=int)
@USER_ID_OPTION
@click.pass_context
@handle_catalog_errors
def quantity(ctx, item_id, new_quantity, user_id):
    """Set the number of owned copies"""
    with catalog_session(ctx) as session:
        service = MediaItemService(MediaItemRepository(session))
        service.update_quantity(item_id, new_quantity, user_id)
        click.echo(click.style("Updated: ", fg='green') + format_item(service.get_by_id(item_id)))


@media.command()
@click.argument('item_id', type=int)
@click.option('--by', 'adjustment', type=int, required=True, help="Copies to add (negative to remove)")
@USER_ID_OPTION
@click.pass_context
@handle_catalog_errors
def adjust(ctx, item_id, adjustment, user_id):
    """Add or remove owned copies"""
    with catalog_session(ctx) as session:
        service = MediaItemService(MediaItemRepository(session))
        service.adjust_quantity(item_id, adjustment, user_id)
        click.echo(click.style("Updated: ", fg='green') + format_item(service.get_by_id(item_id)))


@media.command(name="bulk-quantity")
@click.argument('assignments', nargs=-1, required=True)
@USER_ID_OPTION
@click.pass_context
@handle_catalog_errors
def bulk_quantity(ctx, assignments, user_id):
    """Set quantities for several items: ID=QUANTITY ..."""
    item_quantities = {}
    for assignment in assignments:
        item_id, sep, value = assignment.partition('=')
        if not sep:
            raise click.BadParameter(f"Expected ID=QUANTITY, got {assignment!r}")
        try:
            item_quantities[int(item_id)] = int(value)
        except ValueError:
            raise click.BadParameter(f"Expected integers in {assignment!r}")

    with catalog_session(ctx) as session:
        result = MediaItemService(MediaItemRepository(session)).update_quantities_bulk(item_quantities, user_id)

    click.echo(click.style("Updated: ", fg='blue') + click.style(str(len(result.updated)), fg='green'))
    if result.skipped:
        click.echo(click.style("Skipped (unknown or deleted): ", fg='yellow') +
                   ", ".join(str(item_id) for item_id in result.skipped))
    if result.rejected:
        click.echo(click.style("Rejected (negative quantity): ", fg='red') +
                   ", ".join(str(item_id) for item_id in result.rejected))


@media.command()
@click.argument('item_id', type=int)
@USER_ID_OPTION
@click.pass_context
def delete(ctx, item_id, user_id):
    """Soft-delete an item (it can be restored)"""
    with catalog_session(ctx) as session:
        if not MediaItemService(MediaItemRepository(session)).soft_delete(item_id, user_id):
            raise click.ClickException(f"Media item {item_id} not found")
    click.echo(click.style(f"Deleted media item {item_id}", fg='green'))


@media.command()
@click.argument('item_id', type=int)
@USER_ID_OPTION
@click.pass_context
@handle_catalog_errors
def restore(ctx, item_id, user_id):
    """Restore a soft-deleted item"""
    with catalog_session(ctx) as session:
        if not MediaItemService(MediaItemRepository(session)).restore(item_id, user_id):
            raise click.ClickException(f"Media item {item_id} not found")
    click.echo(click.style(f"Restored media item {item_id}", fg='green'))


@media.command()
@click.pass_context
def stats(ctx):
    """Show catalog statistics"""
    with catalog_session(ctx) as session:
        service = MediaItemService(MediaItemRepository(session))
        click.echo(click.style("\nCatalog statistics:", fg='blue'))
        click.echo(click.style("Total items: ", fg='blue') + click.style(str(service.total_count()), fg='cyan'))
        click.echo(click.style("Available items: ", fg='blue') + click.style(str(service.available_count()), fg='cyan'))
        for media_type, count in service.count_by_type().items():
            click.echo(f"  {media_type.display_name}: {count}")


@media.command(name="import")
@click.argument('path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@USER_ID_OPTION
@click.pass_context
@handle_catalog_errors
def import_items(ctx, path, user_id):
    """Import items from a JSON file holding a list of objects.

    The import is all or nothing: one bad entry rejects the whole file.
    """
    try:
        raw_items = json.loads(path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Could not parse {path}: {e}")
    if not isinstance(raw_items, list):
        raise click.ClickException(f"{path} must contain a JSON list")

    try:
        entries = [MediaItemCreate.model_validate(raw) for raw in raw_items]
    except SchemaValidationError as e:
        raise click.ClickException(f"Invalid entry in {path}:\n{e}")

    with catalog_session(ctx) as session:
        service = MediaItemService(MediaItemRepository(session))
        created = service.create_bulk([MediaItem(**entry.model_dump()) for entry in entries], user_id)
        click.echo(click.style(f"Imported {len(created)} items", fg='green'))
