# media_catalog/cli/utils.py
import functools
from contextlib import contextmanager
from typing import Iterator, Iterable
import click
from sqlalchemy.orm import Session

from media_catalog.exceptions import CatalogError, ValidationError, DuplicateError, NotFoundError
from media_catalog.models.media import MediaType, MediaItemSchema

USER_ID_OPTION = click.option(
    '--user-id', envvar='CATALOG_USER_ID', type=int, required=True,
    help="ID of the acting user, recorded in audit fields (env: CATALOG_USER_ID)"
)

MEDIA_TYPE_CHOICE = click.Choice([media_type.value for media_type in MediaType], case_sensitive=False)


@contextmanager
def catalog_session(ctx: click.Context) -> Iterator[Session]:
    """Open a unit of work on the database configured for the CLI"""
    database = ctx.find_root().obj['database']
    with database.get_db() as session:
        yield session


def handle_catalog_errors(func):
    """Turn catalog errors into CLI errors with a non-zero exit code"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ValidationError as e:
            raise click.ClickException(f"Invalid input: {e}")
        except DuplicateError as e:
            raise click.ClickException(f"Duplicate: {e}")
        except NotFoundError as e:
            raise click.ClickException(f"Not found: {e}")
        except CatalogError as e:
            raise click.ClickException(str(e))
    return wrapper


def parse_media_type(value: str | None) -> MediaType | None:
    return MediaType.parse(value) if value else None


def format_item(item) -> str:
    """One-line summary of a media item"""
    data = MediaItemSchema.model_validate(item)
    by = f" by {data.author}" if data.author else ""
    isbn = f" [ISBN {data.isbn}]" if data.isbn else ""
    color = 'green' if data.is_available else 'yellow'
    status = click.style(f"{data.available_quantity}/{data.quantity} available", fg=color)
    if data.is_deleted:
        status += click.style(" (deleted)", fg='red')
    return (click.style(f"#{data.id} ", fg='cyan') +
            f"{data.title}{by}{isbn} - {data.media_type.display_name}, " + status)


def print_items(items: Iterable, empty_message: str = "No media items found.") -> None:
    items = list(items)
    if not items:
        click.echo(click.style(empty_message, fg='yellow'))
        return
    for item in items:
        click.echo(format_item(item))


def print_item_detail(item) -> None:
    data = MediaItemSchema.model_validate(item)
    click.echo(click.style(f"\n{data.title}", fg='blue', bold=True))
    for label, value in data.model_dump().items():
        if value is None or label == 'title':
            continue
        if isinstance(value, MediaType):
            value = value.display_name
        click.echo(click.style(f"  {label}: ", fg='blue') + click.style(str(value), fg='cyan'))
