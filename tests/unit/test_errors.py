from bookverse.services.errors import (
    Error,
    ErrorKind,
    FeedErrors,
    Result,
    ShelfErrors,
    to_http_payload,
)


def test_result_success_and_failure():
    ok = Result.ok(42)
    failed = Result.fail(FeedErrors.InvalidPage)

    assert ok.is_success and not ok.is_failure
    assert ok.value == 42
    assert failed.is_failure
    assert failed.error.code == "Feed.InvalidPage"


def test_kinds_map_to_http_statuses():
    expected = {
        ErrorKind.UNAUTHORIZED: 401,
        ErrorKind.NOT_FOUND: 404,
        ErrorKind.FORBIDDEN: 403,
        ErrorKind.CONFLICT: 409,
        ErrorKind.VALIDATION: 400,
        ErrorKind.FAILURE: 400,
    }
    assert {kind: int(kind.status) for kind in ErrorKind} == expected


def test_http_payload_envelope():
    status, body = to_http_payload(ShelfErrors.default_shelf_delete_denied("Read"))

    assert status == 400
    assert body == {
        "type": "error",
        "data": {
            "code": "Shelves.DefaultShelfDeleteDenied",
            "message": "Cannot delete default shelf 'Read'.",
        },
    }


def test_errors_compare_by_value():
    assert Error.conflict("X.Y", "m") == Error("X.Y", "m", ErrorKind.CONFLICT)
    assert ShelfErrors.AlreadyAdded.kind is ErrorKind.CONFLICT
