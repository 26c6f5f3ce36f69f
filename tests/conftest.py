# tests/conftest.py
import os
import sys
import pytest
from pathlib import Path
from datetime import datetime
from sqlalchemy.sql import text
from sqlalchemy.orm import Session

# Add project root to Python path
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from media_catalog.sa.database import Database
from media_catalog.sa.models import MediaItem
from media_catalog.sa.repositories import MediaItemRepository, CategoryRepository, GenreRepository
from media_catalog.services import MediaItemService, CategoryService, GenreService, SearchService
from media_catalog.models.media import MediaType

USER_ID = 7


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory):
    """Create a temporary directory for the test database."""
    test_dir = tmp_path_factory.mktemp("test_db")
    return str(test_dir / "test_catalog.db")


@pytest.fixture(scope="session")
def database(test_db_path):
    """Create a test database instance"""
    db = Database(f"sqlite:///{test_db_path}")

    # Drop all tables and recreate schema
    db.drop_db()
    db.init_db()

    yield db

    db.engine.dispose()
    try:
        os.remove(test_db_path)
    except OSError:
        pass


@pytest.fixture(scope="function")
def db_session(database):
    """Create a new database session for a test"""
    session: Session = database.get_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def cleanup_db(db_session):
    """Clean up database tables before each test"""
    db_session.execute(text("DELETE FROM media_item"))
    db_session.execute(text("DELETE FROM category"))
    db_session.execute(text("DELETE FROM genre"))
    db_session.commit()
    yield
    db_session.rollback()


@pytest.fixture
def media_repo(db_session):
    return MediaItemRepository(db_session)


@pytest.fixture
def media_service(media_repo):
    return MediaItemService(media_repo)


@pytest.fixture
def search_service(media_repo):
    return SearchService(media_repo)


@pytest.fixture
def category_service(db_session):
    return CategoryService(CategoryRepository(db_session))


@pytest.fixture
def genre_service(db_session):
    return GenreService(GenreRepository(db_session))


def make_item(**overrides) -> MediaItem:
    """Build an unsaved book with sensible defaults"""
    fields = dict(
        title="Dune",
        author="Frank Herbert",
        isbn="9780441013593",
        media_type=MediaType.BOOK,
        genre="Science Fiction",
        category="Fiction",
        quantity=3,
    )
    fields.update(overrides)
    return MediaItem(**fields)


@pytest.fixture
def sample_item(db_session):
    """A stored book with 3 copies, all on the shelf"""
    item = make_item(available_quantity=3, created_by_user_id=USER_ID)
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture
def multiple_items(db_session):
    """A small mixed catalog"""
    items = [
        make_item(title="Dune", author="Frank Herbert", isbn="9780441013593",
                  publication_date=datetime(1965, 8, 1), quantity=2, available_quantity=2),
        make_item(title="Neuromancer", author="William Gibson", isbn="9780441569595",
                  publication_date=datetime(1984, 7, 1), quantity=1, available_quantity=0),
        make_item(title="Blade Runner", author="Ridley Scott", isbn=None, media_type=MediaType.DVD,
                  genre="Science Fiction", category="Film", quantity=1, available_quantity=1),
        make_item(title="National Geographic", author=None, isbn=None, media_type=MediaType.MAGAZINE,
                  genre="Nature", category="Periodicals", quantity=4, available_quantity=4),
        make_item(title="The Hobbit", author="J.R.R. Tolkien", isbn="9780547928227",
                  media_type=MediaType.EBOOK, genre="Fantasy", category="Fiction",
                  publication_date=datetime(1937, 9, 21), quantity=5, available_quantity=5),
    ]
    db_session.add_all(items)
    db_session.commit()
    return items


@pytest.fixture
def item_factory():
    return make_item
