import uuid

import pytest

from bookverse.services.catalog_service import CatalogService
from bookverse.services.errors import BookErrors, ErrorKind


@pytest.fixture
def catalog_service(session_factory):
    return CatalogService(session_factory)


@pytest.mark.asyncio
async def test_create_book_with_author(catalog_service):
    author = (await catalog_service.create_author("  Octavia Butler ")).value

    result = await catalog_service.create_book("Kindred", page_count=264, author_id=author.id)

    assert result.is_success
    book = result.value
    assert author.name == "Octavia Butler"
    assert book.author_id == author.id
    assert book.average_rating == 0.0
    assert book.rating_count == 0


@pytest.mark.asyncio
async def test_create_book_validation(catalog_service):
    blank = await catalog_service.create_book("   ")
    negative = await catalog_service.create_book("Kindred", page_count=-1)
    no_author = await catalog_service.create_book("Kindred", author_id=uuid.uuid4())
    blank_author = await catalog_service.create_author("")

    assert blank.error == BookErrors.InvalidTitle
    assert negative.error == BookErrors.InvalidPageCount
    assert no_author.error.code == "Authors.NotFound"
    assert no_author.error.kind is ErrorKind.NOT_FOUND
    assert blank_author.error == BookErrors.InvalidAuthorName


@pytest.mark.asyncio
async def test_get_missing_book(catalog_service):
    result = await catalog_service.get_book(uuid.uuid4())

    assert result.is_failure
    assert result.error.code == "Books.NotFound"


@pytest.mark.asyncio
async def test_list_books_search_and_paging(catalog_service):
    for title in ("Parable of the Sower", "Dawn", "Kindred", "Parable of the Talents"):
        await catalog_service.create_book(title)

    page = await catalog_service.list_books(search="parable", page_number=1, page_size=1)
    everything = await catalog_service.list_books(page_size=10)

    assert page.total_count == 2
    assert [b.title for b in page.items] == ["Parable of the Sower"]
    assert page.has_next_page is True
    assert [b.title for b in everything.items] == [
        "Dawn",
        "Kindred",
        "Parable of the Sower",
        "Parable of the Talents",
    ]


@pytest.mark.asyncio
async def test_get_and_list_authors(catalog_service):
    butler = (await catalog_service.create_author("Octavia Butler")).value
    await catalog_service.create_author("N. K. Jemisin")
    await catalog_service.create_author("Ted Chiang")

    found = await catalog_service.get_author(butler.id)
    missing = await catalog_service.get_author(uuid.uuid4())
    everyone = await catalog_service.list_authors()
    searched = await catalog_service.list_authors(search="CHIANG")

    assert found.value.name == "Octavia Butler"
    assert missing.error.code == "Authors.NotFound"
    assert [a.name for a in everyone.items] == ["N. K. Jemisin", "Octavia Butler", "Ted Chiang"]
    assert [a.name for a in searched.items] == ["Ted Chiang"]
    assert searched.total_count == 1
