# tests/test_services/test_media_item_service.py

import pytest
from media_catalog.sa.models import MediaItem
from media_catalog.services import MediaItemAdminService
from media_catalog.models.media import MediaType
from media_catalog.exceptions import ValidationError, DuplicateError, NotFoundError

USER_ID = 7


def test_create_makes_all_copies_available(media_service, item_factory):
    item = media_service.create(
        item_factory(title="The Hobbit", author="J.R.R. Tolkien", isbn="978-0547928227", quantity=5),
        USER_ID
    )
    assert item.id is not None
    assert item.available_quantity == 5
    assert item.created_by_user_id == USER_ID
    assert not item.is_deleted

    media_service.update_quantity(item.id, 3, USER_ID)
    stored = media_service.get_by_id(item.id)
    assert stored.quantity == 3
    assert stored.available_quantity == 3


def test_create_duplicate_isbn(media_service, item_factory):
    media_service.create(item_factory(isbn="X"), USER_ID)
    with pytest.raises(DuplicateError):
        media_service.create(item_factory(title="Another Book", isbn="X"), USER_ID)


def test_create_duplicate_title_author(media_service, item_factory):
    media_service.create(item_factory(isbn="1"), USER_ID)
    with pytest.raises(DuplicateError):
        media_service.create(item_factory(isbn="2"), USER_ID)


def test_create_duplicate_title_without_author(media_service, item_factory):
    media_service.create(item_factory(title="Wired", author=None, isbn=None, media_type=MediaType.MAGAZINE), USER_ID)
    with pytest.raises(DuplicateError):
        media_service.create(item_factory(title="Wired", author="  ", isbn=None, media_type=MediaType.MAGAZINE), USER_ID)


def test_create_normalizes_blank_fields(media_service, item_factory):
    item = media_service.create(
        item_factory(title="  Heat  ", author=" ", isbn="", media_type=MediaType.DVD, genre=" "),
        USER_ID
    )
    assert item.title == "Heat"
    assert item.author is None
    assert item.isbn is None
    assert item.genre is None


@pytest.mark.parametrize("overrides", [
    dict(title=""),
    dict(title="   "),
    dict(title="x" * 201),
    dict(author="x" * 101),
    dict(isbn="x" * 21),
    dict(genre="x" * 51),
    dict(category="x" * 51),
    dict(description="x" * 1001),
    dict(quantity=-1),
    dict(isbn=None),
    dict(isbn=None, media_type=MediaType.EBOOK),
])
def test_create_rejects_invalid(media_service, item_factory, overrides):
    with pytest.raises(ValidationError):
        media_service.create(item_factory(**overrides), USER_ID)
    assert media_service.total_count() == 0


def test_create_without_isbn_for_non_book(media_service, item_factory):
    item = media_service.create(item_factory(isbn=None, media_type=MediaType.CD), USER_ID)
    assert item.id is not None


def test_update(media_service, sample_item):
    sample_item.description = "Spice must flow"
    assert media_service.update(sample_item, 11)

    stored = media_service.get_by_id(sample_item.id)
    assert stored.description == "Spice must flow"
    assert stored.updated_by_user_id == 11
    assert stored.updated_at is not None


def test_update_missing_item(media_service, item_factory):
    item = item_factory(available_quantity=3)
    item.id = 9999
    with pytest.raises(NotFoundError):
        media_service.update(item, USER_ID)


def test_update_deleted_item(media_service, sample_item):
    media_service.soft_delete(sample_item.id, USER_ID)
    item = media_service.get_by_id(sample_item.id, include_deleted=True)
    item.title = "Dune Messiah"
    with pytest.raises(NotFoundError):
        media_service.update(item, USER_ID)


def test_update_invalid_discards_changes(media_service, sample_item):
    sample_item.title = ""
    with pytest.raises(ValidationError):
        media_service.update(sample_item, USER_ID)
    assert media_service.get_by_id(sample_item.id).title == "Dune"


def test_update_available_above_quantity(media_service, sample_item):
    sample_item.available_quantity = 10
    with pytest.raises(ValidationError):
        media_service.update(sample_item, USER_ID)


def test_update_to_duplicate_isbn(media_service, multiple_items):
    dune = multiple_items[0]
    dune.isbn = multiple_items[1].isbn
    with pytest.raises(DuplicateError):
        media_service.update(dune, USER_ID)
    assert media_service.get_by_id(dune.id).isbn == "9780441013593"


def test_update_keeps_own_isbn(media_service, sample_item):
    sample_item.genre = "Classics"
    assert media_service.update(sample_item, USER_ID)


def test_soft_delete_frees_isbn(media_service, media_repo, sample_item, item_factory):
    assert media_service.soft_delete(sample_item.id, USER_ID)
    assert not media_repo.exists_by_isbn(sample_item.isbn)
    assert media_service.get_by_id(sample_item.id) is None

    item = media_service.create(item_factory(), USER_ID)
    assert item.id != sample_item.id


def test_soft_delete_missing_or_deleted(media_service, sample_item):
    assert media_service.soft_delete(9999, USER_ID) is False
    assert media_service.soft_delete(sample_item.id, USER_ID)
    assert media_service.soft_delete(sample_item.id, USER_ID) is False


def test_restore_round_trip(media_service, sample_item):
    media_service.soft_delete(sample_item.id, USER_ID)
    assert media_service.restore(sample_item.id, 12)

    stored = media_service.get_by_id(sample_item.id)
    assert stored is not None
    assert stored.quantity == 3
    assert stored.available_quantity == 3
    assert stored.updated_by_user_id == 12


def test_restore_active_item_is_noop(media_service, sample_item):
    assert media_service.restore(sample_item.id, USER_ID)


def test_restore_missing_item(media_service):
    assert media_service.restore(9999, USER_ID) is False


def test_restore_collision(media_service, sample_item, item_factory):
    media_service.soft_delete(sample_item.id, USER_ID)
    media_service.create(item_factory(), USER_ID)
    with pytest.raises(DuplicateError):
        media_service.restore(sample_item.id, USER_ID)


def test_search(media_service, item_factory):
    media_service.create(item_factory(title="Clean Code", author="Robert Martin", isbn="1"), USER_ID)
    media_service.create(item_factory(title="The Clean Coder", author="Robert Martin", isbn="2"), USER_ID)
    media_service.create(item_factory(title="Refactoring", author="Martin Fowler", isbn="3"), USER_ID)

    assert len(media_service.search("")) == 3
    assert [i.title for i in media_service.search("clean code")] == ["Clean Code", "The Clean Coder"]
    assert [i.title for i in media_service.search("CLEAN CODE")] == ["Clean Code", "The Clean Coder"]


def test_search_excludes_deleted(media_service, sample_item):
    media_service.soft_delete(sample_item.id, USER_ID)
    assert media_service.search("") == []
    assert media_service.search("dune") == []


def test_get_by_isbn(media_service, sample_item):
    assert media_service.get_by_isbn(sample_item.isbn).id == sample_item.id
    assert media_service.get_by_isbn("missing") is None


def test_update_quantity_clamps(media_service, db_session, sample_item):
    sample_item.quantity = 5
    sample_item.available_quantity = 2
    db_session.commit()

    assert media_service.update_quantity(sample_item.id, 1, USER_ID)
    stored = media_service.get_by_id(sample_item.id)
    assert stored.quantity == 1
    assert stored.available_quantity == 0


def test_update_quantity_preserves_borrowed(media_service, db_session, sample_item):
    sample_item.quantity = 5
    sample_item.available_quantity = 3
    db_session.commit()

    media_service.update_quantity(sample_item.id, 8, USER_ID)
    stored = media_service.get_by_id(sample_item.id)
    assert stored.available_quantity == 6
    assert stored.borrowed_quantity == 2


def test_update_quantity_negative(media_service, sample_item):
    with pytest.raises(ValidationError):
        media_service.update_quantity(sample_item.id, -1, USER_ID)
    assert media_service.get_by_id(sample_item.id).quantity == 3


def test_update_quantity_missing(media_service, sample_item):
    with pytest.raises(NotFoundError):
        media_service.update_quantity(9999, 1, USER_ID)

    media_service.soft_delete(sample_item.id, USER_ID)
    with pytest.raises(NotFoundError):
        media_service.update_quantity(sample_item.id, 1, USER_ID)


def test_adjust_quantity(media_service, sample_item):
    media_service.adjust_quantity(sample_item.id, 2, USER_ID)
    assert media_service.get_available_quantity(sample_item.id) == 5

    media_service.adjust_quantity(sample_item.id, -4, USER_ID)
    stored = media_service.get_by_id(sample_item.id)
    assert stored.quantity == 1
    assert stored.available_quantity == 1

    with pytest.raises(ValidationError):
        media_service.adjust_quantity(sample_item.id, -2, USER_ID)


def test_availability(media_service, multiple_items):
    dune, neuromancer = multiple_items[0], multiple_items[1]
    assert media_service.is_available(dune.id)
    assert media_service.is_available(dune.id, 2)
    assert not media_service.is_available(dune.id, 3)
    assert not media_service.is_available(neuromancer.id)
    assert not media_service.is_available(9999)
    assert media_service.get_available_quantity(9999) == 0


def test_statistics(media_service, multiple_items):
    assert media_service.total_count() == 5
    assert media_service.available_count() == 4

    counts = media_service.count_by_type()
    assert set(counts) == set(MediaType)
    assert counts[MediaType.BOOK] == 2
    assert counts[MediaType.DVD] == 1
    assert counts[MediaType.JOURNAL] == 0


def test_is_unique(media_service, sample_item):
    assert not media_service.is_unique("Dune", "Frank Herbert")
    assert media_service.is_unique("Dune", "Frank Herbert", exclude_id=sample_item.id)
    assert not media_service.is_unique("Other", "Someone", isbn=sample_item.isbn)
    assert media_service.is_unique("Other", "Someone", isbn="123")


def test_create_bulk(media_service, item_factory):
    items = media_service.create_bulk([
        item_factory(title="A", isbn="1", quantity=2),
        item_factory(title="B", isbn="2", quantity=4),
    ], USER_ID)
    assert [i.available_quantity for i in items] == [2, 4]
    assert media_service.total_count() == 2


def test_create_bulk_all_or_nothing(media_service, item_factory):
    with pytest.raises(ValidationError):
        media_service.create_bulk([
            item_factory(title="A", isbn="1"),
            item_factory(title="B", isbn=None),
        ], USER_ID)
    assert media_service.total_count() == 0


def test_create_bulk_duplicate_within_batch(media_service, item_factory):
    with pytest.raises(DuplicateError):
        media_service.create_bulk([
            item_factory(title="A", isbn="1"),
            item_factory(title="B", isbn="1"),
        ], USER_ID)

    with pytest.raises(DuplicateError):
        media_service.create_bulk([
            item_factory(title="A", isbn="1"),
            item_factory(title="A", isbn="2"),
        ], USER_ID)
    assert media_service.total_count() == 0


def test_create_bulk_duplicate_of_existing(media_service, sample_item, item_factory):
    with pytest.raises(DuplicateError):
        media_service.create_bulk([item_factory(title="Other")], USER_ID)
    assert media_service.total_count() == 1


def test_update_quantities_bulk(media_service, multiple_items):
    dune, neuromancer, blade_runner = multiple_items[:3]
    media_service.soft_delete(blade_runner.id, USER_ID)

    result = media_service.update_quantities_bulk(
        {dune.id: 1, neuromancer.id: -3, blade_runner.id: 2, 9999: 4},
        USER_ID
    )

    assert result
    assert result.updated == [dune.id]
    assert result.rejected == [neuromancer.id]
    assert sorted(result.skipped) == sorted([blade_runner.id, 9999])
    assert media_service.get_by_id(dune.id).quantity == 1
    assert media_service.get_by_id(neuromancer.id).quantity == 1


def test_update_quantities_bulk_nothing_valid(media_service):
    result = media_service.update_quantities_bulk({9999: 1}, USER_ID)
    assert not result


def test_purge_requires_admin_service(media_service, media_repo, sample_item):
    assert not hasattr(media_service, "purge")
    assert not hasattr(media_service, "hard_delete")

    admin = MediaItemAdminService(media_repo)
    assert admin.purge(sample_item.id, USER_ID)
    assert media_service.get_by_id(sample_item.id, include_deleted=True) is None
    assert admin.purge(sample_item.id, USER_ID) is False


def test_purge_deleted_item(media_service, media_repo, db_session, sample_item):
    media_service.soft_delete(sample_item.id, USER_ID)
    assert MediaItemAdminService(media_repo).purge(sample_item.id, USER_ID)
    assert db_session.get(MediaItem, sample_item.id) is None


def test_no_copies_is_unavailable_even_for_zero_requested(media_service, multiple_items):
    neuromancer = multiple_items[1]
    assert not media_service.is_available(neuromancer.id, 0)


@pytest.fixture
def bypass_duplicate_checks(monkeypatch, media_repo):
    """Let writes reach the unique indexes as if a concurrent writer got there first"""
    monkeypatch.setattr(media_repo, "exists_by_isbn", lambda *args, **kwargs: False)
    monkeypatch.setattr(media_repo, "exists_by_title_author", lambda *args, **kwargs: False)


def test_create_storage_collision_is_duplicate(media_service, sample_item, item_factory, bypass_duplicate_checks):
    with pytest.raises(DuplicateError):
        media_service.create(item_factory(title="Other", author="Someone"), USER_ID)
    assert media_service.total_count() == 1


def test_create_bulk_storage_collision_is_duplicate(media_service, sample_item, item_factory,
                                                    bypass_duplicate_checks):
    with pytest.raises(DuplicateError):
        media_service.create_bulk([
            item_factory(title="A", isbn="1"),
            item_factory(title="B"),
        ], USER_ID)
    assert media_service.total_count() == 1


def test_update_storage_collision_is_duplicate(media_service, multiple_items, bypass_duplicate_checks):
    dune = multiple_items[0]
    dune.isbn = multiple_items[1].isbn
    with pytest.raises(DuplicateError):
        media_service.update(dune, USER_ID)
    assert media_service.get_by_id(dune.id).isbn == "9780441013593"
    assert media_service.total_count() == 5


def test_restore_storage_collision_is_duplicate(media_service, sample_item, item_factory, bypass_duplicate_checks):
    media_service.soft_delete(sample_item.id, USER_ID)
    media_service.create(item_factory(), USER_ID)

    with pytest.raises(DuplicateError):
        media_service.restore(sample_item.id, USER_ID)
    assert media_service.get_by_id(sample_item.id) is None
    assert media_service.total_count() == 1
