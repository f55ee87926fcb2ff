import uuid

import pytest

from bookverse.services.comment_service import CommentService
from bookverse.services.errors import ErrorKind


@pytest.fixture
def comment_service(session_factory):
    return CommentService(session_factory)


@pytest.mark.asyncio
async def test_comment_on_review_and_quote(comment_service, review_service, quote_service, make_user, make_book):
    writer = await make_user("writer")
    reader = await make_user("reader")
    book = await make_book()
    review = (await review_service.create_review(writer.id, book.id, 5, "Loved it")).value
    quote = (await quote_service.create_quote(writer.id, "Fear is the mind-killer.")).value

    on_review = await comment_service.create_comment(reader.id, "Review", review.id, "  Agreed!  ")
    await comment_service.create_comment(writer.id, "Review", review.id, "Thanks")
    on_quote = await comment_service.create_comment(reader.id, "Quote", quote.id, "Classic line")

    assert on_review.value.text == "Agreed!"
    assert on_review.value.user.username == "reader"
    assert on_quote.value.target_type == "Quote"

    thread = await comment_service.list_comments("Review", review.id)
    assert thread.total_count == 2
    assert [c.user.username for c in thread.items] == ["reader", "writer"]
    assert (await comment_service.list_comments("Quote", quote.id)).total_count == 1


@pytest.mark.asyncio
async def test_create_comment_validation(comment_service, quote_service, make_user):
    reader = await make_user()
    quote = (await quote_service.create_quote(reader.id, "Words")).value

    anonymous = await comment_service.create_comment(None, "Quote", quote.id, "hi")
    blank = await comment_service.create_comment(reader.id, "Quote", quote.id, "   ")
    too_long = await comment_service.create_comment(reader.id, "Quote", quote.id, "x" * 2001)
    bad_target = await comment_service.create_comment(reader.id, "Shelf", quote.id, "hi")
    missing = await comment_service.create_comment(reader.id, "Review", quote.id, "hi")

    assert anonymous.error.code == "Auth.Unauthorized"
    assert blank.error.code == "Comments.InvalidText"
    assert too_long.error.code == "Comments.InvalidText"
    assert bad_target.error.code == "Comments.InvalidTarget"
    assert missing.error.code == "Comments.TargetNotFound"
    assert missing.error.kind is ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_only_author_edits_or_deletes(comment_service, quote_service, make_user):
    author = await make_user()
    other = await make_user()
    quote = (await quote_service.create_quote(author.id, "Words")).value
    comment = (await comment_service.create_comment(author.id, "Quote", quote.id, "first")).value

    forbidden_edit = await comment_service.update_comment(other.id, comment.id, "hijacked")
    forbidden_delete = await comment_service.delete_comment(other.id, comment.id)
    edited = await comment_service.update_comment(author.id, comment.id, "second thoughts")

    assert forbidden_edit.error.code == "Comments.Unauthorized"
    assert forbidden_edit.error.kind is ErrorKind.FORBIDDEN
    assert forbidden_delete.error.code == "Comments.Unauthorized"
    assert edited.value.text == "second thoughts"
    assert (await comment_service.get_comment(comment.id)).value.text == "second thoughts"


@pytest.mark.asyncio
async def test_deleted_comment_disappears(comment_service, quote_service, make_user):
    author = await make_user()
    quote = (await quote_service.create_quote(author.id, "Words")).value
    comment = (await comment_service.create_comment(author.id, "Quote", quote.id, "soon gone")).value

    assert (await comment_service.delete_comment(author.id, comment.id)).is_success

    assert (await comment_service.get_comment(comment.id)).error.code == "Comments.NotFound"
    assert (await comment_service.list_comments("Quote", quote.id)).total_count == 0
    assert (await comment_service.delete_comment(author.id, comment.id)).error.code == "Comments.NotFound"
    assert (await comment_service.update_comment(author.id, uuid.uuid4(), "x")).error.code == "Comments.NotFound"
