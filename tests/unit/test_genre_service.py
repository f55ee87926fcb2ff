import uuid

import pytest

from bookverse.services.catalog_service import CatalogService
from bookverse.services.errors import ErrorKind
from bookverse.services.genre_service import GenreService


@pytest.fixture
def genre_service(session_factory):
    return GenreService(session_factory)


@pytest.fixture
def catalog_service(session_factory):
    return CatalogService(session_factory)


@pytest.mark.asyncio
async def test_create_rename_and_name_rules(genre_service):
    fantasy = (await genre_service.create_genre("  Fantasy ")).value
    await genre_service.create_genre("Horror")

    duplicate = await genre_service.create_genre("fantasy")
    blank = await genre_service.create_genre("   ")
    clash = await genre_service.rename_genre(fantasy.id, "HORROR")
    recased = await genre_service.rename_genre(fantasy.id, "FANTASY")

    assert fantasy.name == "Fantasy"
    assert duplicate.error.code == "Genres.NameTaken"
    assert duplicate.error.kind is ErrorKind.CONFLICT
    assert blank.error.code == "Genres.InvalidName"
    assert clash.error.code == "Genres.NameTaken"
    assert recased.value.name == "FANTASY"
    assert (await genre_service.rename_genre(uuid.uuid4(), "Poetry")).error.code == "Genres.NotFound"


@pytest.mark.asyncio
async def test_tag_books_and_count(genre_service, make_book):
    dune = await make_book("Dune")
    hyperion = await make_book("Hyperion")
    scifi = (await genre_service.create_genre("Science Fiction")).value
    classic = (await genre_service.create_genre("Classic")).value

    tagged = await genre_service.add_genres_to_book(dune.id, [scifi.id, classic.id, scifi.id])
    await genre_service.add_genres_to_book(hyperion.id, [scifi.id])
    # Adding an existing tag again is a no-op
    again = await genre_service.add_genres_to_book(dune.id, [classic.id])

    assert [g.name for g in tagged.value] == ["Classic", "Science Fiction"]
    assert [g.name for g in again.value] == ["Classic", "Science Fiction"]
    assert (await genre_service.get_genre(scifi.id)).value.book_count == 2

    listing = await genre_service.list_genres(1, 10)
    assert [(g.name, g.book_count) for g in listing.items] == [("Classic", 1), ("Science Fiction", 2)]
    assert listing.total_count == 2


@pytest.mark.asyncio
async def test_add_genres_validation(genre_service, make_book):
    book = await make_book()
    genre = (await genre_service.create_genre("Memoir")).value
    missing_genre = uuid.uuid4()

    empty = await genre_service.add_genres_to_book(book.id, [])
    unknown_genre = await genre_service.add_genres_to_book(book.id, [genre.id, missing_genre])
    unknown_book = await genre_service.add_genres_to_book(uuid.uuid4(), [genre.id])

    assert empty.error.code == "Genres.EmptySelection"
    assert unknown_genre.error.code == "Genres.NotFound"
    assert str(missing_genre) in unknown_genre.error.message
    assert unknown_book.error.code == "Books.NotFound"
    # A failed batch tags nothing
    assert (await genre_service.list_book_genres(book.id)).value == []


@pytest.mark.asyncio
async def test_remove_genre_from_book(genre_service, make_book):
    book = await make_book()
    genre = (await genre_service.create_genre("Essays")).value
    await genre_service.add_genres_to_book(book.id, [genre.id])

    removed = await genre_service.remove_genre_from_book(book.id, genre.id)
    again = await genre_service.remove_genre_from_book(book.id, genre.id)

    assert removed.is_success
    assert again.error.code == "Genres.NotAssigned"
    assert again.error.kind is ErrorKind.NOT_FOUND
    assert (await genre_service.list_book_genres(book.id)).value == []


@pytest.mark.asyncio
async def test_deleted_genre_drops_off_books(genre_service, catalog_service, make_book):
    book = await make_book("The Name of the Rose")
    genre = (await genre_service.create_genre("Mystery")).value
    await genre_service.add_genres_to_book(book.id, [genre.id])

    assert (await genre_service.delete_genre(genre.id)).is_success

    assert (await genre_service.get_genre(genre.id)).error.code == "Genres.NotFound"
    assert (await genre_service.list_book_genres(book.id)).value == []
    assert (await catalog_service.list_books(genre="mystery")).total_count == 0
    # The name is free again
    assert (await genre_service.create_genre("Mystery")).is_success


@pytest.mark.asyncio
async def test_list_books_by_genre_ignores_case(genre_service, catalog_service, make_book):
    emma = await make_book("Emma")
    persuasion = await make_book("Persuasion")
    await make_book("Ulysses")
    romance = (await genre_service.create_genre("Romance")).value
    await genre_service.add_genres_to_book(emma.id, [romance.id])
    await genre_service.add_genres_to_book(persuasion.id, [romance.id])

    page = await catalog_service.list_books(genre="  ROMANCE ", page_size=1)
    unknown = await catalog_service.list_books(genre="western")

    assert page.total_count == 2
    assert [b.title for b in page.items] == ["Emma"]
    assert unknown.items == []
