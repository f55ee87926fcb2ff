import uuid

import pytest

from bookverse.models.db import DEFAULT_SHELF_CURRENTLY_READING, DEFAULT_SHELF_READ


@pytest.mark.asyncio
async def test_progress_is_upserted(progress_service, make_user, make_book):
    user = await make_user(default_shelves=True)
    book = await make_book(page_count=200)

    first = await progress_service.update_progress(user.id, book.id, 20)
    second = await progress_service.update_progress(user.id, book.id, 80)

    assert first.is_success and second.is_success
    assert first.value.id == second.value.id
    assert (await progress_service.get_progress(user.id, book.id)).current_page == 80


@pytest.mark.asyncio
@pytest.mark.parametrize("page", [-1, 201])
async def test_page_outside_book_is_rejected(progress_service, make_user, make_book, page):
    user = await make_user()
    book = await make_book(page_count=200)

    result = await progress_service.update_progress(user.id, book.id, page)

    assert result.error.code == "ReadingProgress.InvalidPage"
    assert await progress_service.get_progress(user.id, book.id) is None


@pytest.mark.asyncio
async def test_finishing_a_book_moves_it_to_read(progress_service, shelf_service, make_user, make_book):
    user = await make_user(default_shelves=True)
    book = await make_book(page_count=120)
    await shelf_service.set_book_status(user.id, book.id, DEFAULT_SHELF_CURRENTLY_READING)

    result = await progress_service.update_progress(user.id, book.id, 120)

    assert result.is_success
    assert await shelf_service.get_book_status(user.id, book.id) == DEFAULT_SHELF_READ
    shelves = await shelf_service.list_user_shelves(user.id)
    holding = [s.name for s in shelves if s.find_membership(book.id) is not None]
    assert holding == [DEFAULT_SHELF_READ]


@pytest.mark.asyncio
async def test_finishing_again_keeps_single_read_membership(progress_service, shelf_service, make_user, make_book):
    user = await make_user()
    book = await make_book(page_count=50)

    await progress_service.update_progress(user.id, book.id, 50)
    await progress_service.update_progress(user.id, book.id, 10)
    await progress_service.update_progress(user.id, book.id, 50)

    shelves = await shelf_service.list_user_shelves(user.id)
    read_shelf = next(s for s in shelves if s.name == DEFAULT_SHELF_READ)
    assert [m.book_id for m in read_shelf.memberships] == [book.id]


@pytest.mark.asyncio
async def test_partial_progress_leaves_status_alone(progress_service, shelf_service, make_user, make_book):
    user = await make_user(default_shelves=True)
    book = await make_book(page_count=300)
    await shelf_service.set_book_status(user.id, book.id, DEFAULT_SHELF_CURRENTLY_READING)

    await progress_service.update_progress(user.id, book.id, 299)

    assert await shelf_service.get_book_status(user.id, book.id) == DEFAULT_SHELF_CURRENTLY_READING


@pytest.mark.asyncio
async def test_progress_needs_caller_and_book(progress_service, make_user):
    user = await make_user()

    assert (await progress_service.update_progress(None, uuid.uuid4(), 1)).error.code == "Auth.Unauthorized"
    assert (await progress_service.update_progress(user.id, uuid.uuid4(), 1)).error.code == "Books.NotFound"
