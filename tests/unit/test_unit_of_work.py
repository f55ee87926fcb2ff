import pytest

from bookverse.models.db import Author, Book
from bookverse.repositories import UnitOfWork


@pytest.mark.asyncio
async def test_read_only_block_leaves_entities_readable(session_factory, make_book):
    book = await make_book("The Left Hand of Darkness", page_count=304)

    async with UnitOfWork(session_factory) as uow:
        loaded = await uow.books.get_by_id(book.id)
        everything, total = await uow.books.get_all()

    # Attribute access after the block must not need the closed session
    assert loaded.title == "The Left Hand of Darkness"
    assert loaded.page_count == 304
    assert [b.id for b in everything] == [book.id]
    assert total == 1


@pytest.mark.asyncio
async def test_includes_are_loaded_before_the_block_ends(session_factory):
    async with UnitOfWork(session_factory) as uow:
        author = Author(name="Ursula K. Le Guin")
        await uow.authors.add(author)
        await uow.flush()
        await uow.books.add(Book(title="The Lathe of Heaven", author_id=author.id))
        await uow.save_changes()

    async with UnitOfWork(session_factory) as uow:
        loaded = await uow.authors.get_by_id(author.id, "books")

    assert [b.title for b in loaded.books] == ["The Lathe of Heaven"]


@pytest.mark.asyncio
async def test_unsaved_changes_are_discarded(session_factory, make_book):
    book = await make_book("Draft title")

    async with UnitOfWork(session_factory) as uow:
        loaded = await uow.books.get_by_id(book.id)
        loaded.title = "Never saved"

    async with UnitOfWork(session_factory) as uow:
        reloaded = await uow.books.get_by_id(book.id)

    assert reloaded.title == "Draft title"


@pytest.mark.asyncio
async def test_exception_rolls_back_and_propagates(session_factory):
    with pytest.raises(RuntimeError):
        async with UnitOfWork(session_factory) as uow:
            await uow.books.add(Book(title="Half written"))
            await uow.flush()
            raise RuntimeError("boom")

    async with UnitOfWork(session_factory) as uow:
        _, total = await uow.books.get_all()

    assert total == 0
