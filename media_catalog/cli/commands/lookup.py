# media_catalog/cli/commands/lookup.py
import click

from media_catalog.sa.models import Category, Genre
from media_catalog.models.media import CategorySchema, GenreSchema
from media_catalog.sa.repositories.lookup import CategoryRepository, GenreRepository
from media_catalog.services.lookup_service import CategoryService, GenreService
from ..utils import USER_ID_OPTION, MEDIA_TYPE_CHOICE, catalog_session, handle_catalog_errors, parse_media_type


def _print_lookups(entries, kind: str, schema=CategorySchema) -> None:
    if not entries:
        click.echo(click.style(f"No {kind} found.", fg='yellow'))
        return
    for entry in map(schema.model_validate, entries):
        line = click.style(f"#{entry.id} ", fg='cyan') + entry.name
        applies_to = getattr(entry, 'applicable_to_media_type', None)
        if applies_to is not None:
            line += click.style(f" ({applies_to.display_name} only)", fg='blue')
        if not entry.is_active:
            line += click.style(" (inactive)", fg='red')
        click.echo(line)


@click.group()
def category():
    """Category management commands"""
    pass


@category.command(name="add")
@click.argument('name')
@click.option('--description', help="Optional description")
@USER_ID_OPTION
@click.pass_context
@handle_catalog_errors
def add_category(ctx, name, description, user_id):
    """Create a category"""
    with catalog_session(ctx) as session:
        created = CategoryService(CategoryRepository(session)).create(
            Category(name=name, description=description), user_id
        )
        click.echo(click.style(f"Created category #{created.id}: {created.name}", fg='green'))


@category.command(name="list")
@click.option('--all', 'show_all', is_flag=True, help="Include inactive categories")
@click.option('--search', 'term', help="Filter active categories by name or description")
@click.pass_context
def list_categories(ctx, show_all, term):
    """List categories"""
    with catalog_session(ctx) as session:
        service = CategoryService(CategoryRepository(session))
        if term:
            entries = service.search(term)
        else:
            entries = service.get_all() if show_all else service.get_active()
        _print_lookups(entries, "categories")


@category.command(name="deactivate")
@click.argument('category_id', type=int)
@click.pass_context
def deactivate_category(ctx, category_id):
    """Deactivate a category (it is never removed)"""
    with catalog_session(ctx) as session:
        if not CategoryService(CategoryRepository(session)).delete(category_id):
            raise click.ClickException(f"Category {category_id} not found")
    click.echo(click.style(f"Deactivated category {category_id}", fg='green'))


@click.group()
def genre():
    """Genre management commands"""
    pass


@genre.command(name="add")
@click.argument('name')
@click.option('--description', help="Optional description")
@click.option('--media-type', type=MEDIA_TYPE_CHOICE, help="Restrict the genre to one media type")
@USER_ID_OPTION
@click.pass_context
@handle_catalog_errors
def add_genre(ctx, name, description, media_type, user_id):
    """Create a genre"""
    with catalog_session(ctx) as session:
        created = GenreService(GenreRepository(session)).create(
            Genre(name=name, description=description, applicable_to_media_type=parse_media_type(media_type)),
            user_id
        )
        click.echo(click.style(f"Created genre #{created.id}: {created.name}", fg='green'))


@genre.command(name="list")
@click.option('--all', 'show_all', is_flag=True, help="Include inactive genres")
@click.option('--media-type', type=MEDIA_TYPE_CHOICE, help="Only genres usable for this media type")
@click.pass_context
def list_genres(ctx, show_all, media_type):
    """List genres"""
    with catalog_session(ctx) as session:
        service = GenreService(GenreRepository(session))
        if media_type:
            entries = service.get_by_media_type(parse_media_type(media_type))
        else:
            entries = service.get_all() if show_all else service.get_active()
        _print_lookups(entries, "genres", GenreSchema)


@genre.command(name="deactivate")
@click.argument('genre_id', type=int)
@click.pass_context
def deactivate_genre(ctx, genre_id):
    """Deactivate a genre (it is never removed)"""
    with catalog_session(ctx) as session:
        if not GenreService(GenreRepository(session)).delete(genre_id):
            raise click.ClickException(f"Genre {genre_id} not found")
    click.echo(click.style(f"Deactivated genre {genre_id}", fg='green'))
