import uuid

import pytest

from bookverse.services.errors import ErrorKind
from bookverse.services.quote_service import normalize_tags


def test_normalize_tags_lowercases_and_deduplicates():
    assert normalize_tags([" Love", "love", "WAR", "", None, "war "]) == ["love", "war"]
    assert normalize_tags(None) == []


@pytest.mark.asyncio
async def test_create_quote_validates_text_and_references(quote_service, make_user):
    user = await make_user()

    blank = await quote_service.create_quote(user.id, "   ")
    missing_book = await quote_service.create_quote(user.id, "Words", book_id=uuid.uuid4())
    anonymous = await quote_service.create_quote(None, "Words")

    assert blank.error.code == "Quotes.InvalidText"
    assert blank.error.kind is ErrorKind.VALIDATION
    assert missing_book.error.code == "Books.NotFound"
    assert anonymous.error.code == "Auth.Unauthorized"


@pytest.mark.asyncio
async def test_like_toggles(quote_service, make_user):
    author = await make_user()
    fan = await make_user()
    quote = (await quote_service.create_quote(author.id, "So it goes.")).value

    liked = await quote_service.toggle_like(fan.id, quote.id)
    assert liked.value.like_count == 1

    unliked = await quote_service.toggle_like(fan.id, quote.id)
    assert unliked.value.like_count == 0

    assert (await quote_service.get_quote(quote.id)).value.like_count == 0
    assert (await quote_service.toggle_like(fan.id, uuid.uuid4())).error.code == "Quotes.NotFound"
    assert (await quote_service.get_quote(uuid.uuid4())).error.code == "Quotes.NotFound"


@pytest.mark.asyncio
async def test_update_and_delete_require_ownership(quote_service, make_user):
    author = await make_user()
    other = await make_user()
    quote = (await quote_service.create_quote(author.id, "Original", tags=["Draft"])).value

    assert (await quote_service.update_quote(other.id, quote.id, "Hijack")).error.code == "Quotes.Unauthorized"
    assert (await quote_service.delete_quote(other.id, quote.id)).error.kind is ErrorKind.FORBIDDEN

    updated = await quote_service.update_quote(author.id, quote.id, "Revised", tags=["Final", "final"])
    assert updated.value.text == "Revised"
    assert updated.value.tags == ["final"]

    assert (await quote_service.delete_quote(author.id, quote.id)).is_success
    assert (await quote_service.get_quote(quote.id)).error.code == "Quotes.NotFound"


@pytest.mark.asyncio
async def test_list_quotes_filters_by_tag_and_user(quote_service, make_user):
    ann = await make_user()
    ben = await make_user()
    await quote_service.create_quote(ann.id, "one", tags=["Love"])
    await quote_service.create_quote(ann.id, "two", tags=["war"])
    await quote_service.create_quote(ben.id, "three", tags=["love", "hope"])

    by_tag = await quote_service.list_quotes(tag="LOVE")
    by_user = await quote_service.list_quotes(user_id=ann.id)
    both = await quote_service.list_quotes(tag="love", user_id=ben.id)
    paged = await quote_service.list_quotes(page_number=2, page_size=2)

    assert sorted(q.text for q in by_tag.items) == ["one", "three"]
    assert by_user.total_count == 2
    assert [q.text for q in both.items] == ["three"]
    assert paged.total_count == 3
    assert len(paged.items) == 1
