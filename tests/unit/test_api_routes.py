import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from bookverse.api import feed as feed_router
from bookverse.api import shelves as shelves_router
from bookverse.core import dependencies
from bookverse.core.exceptions import setup_exception_handlers
from bookverse.models.schemas import FeedItem, PagedResult, UserSummary
from bookverse.services.errors import AuthErrors, FeedErrors, Result, ShelfErrors


CALLER_ID = uuid.uuid4()


class DummyShelfService:
    def __init__(self):
        self.calls = []

    async def delete_shelf(self, caller_id, shelf_id):
        self.calls.append(("delete", caller_id, shelf_id))
        if caller_id is None:
            return Result.fail(AuthErrors.Unauthorized)
        return Result.fail(ShelfErrors.default_shelf_delete_denied("Read"))

    async def add_book_to_shelf(self, caller_id, shelf_id, book_id):
        self.calls.append(("add", caller_id, shelf_id, book_id))
        return Result.fail(ShelfErrors.AlreadyAdded)

    async def remove_book_from_shelf(self, caller_id, shelf_id, book_id):
        return Result.ok()

    async def get_shelf(self, shelf_id):
        return Result.fail(ShelfErrors.not_found(shelf_id))


class DummyFeedService:
    def __init__(self):
        self.requests = []

    async def get_feed(self, caller_id, page_number=1, page_size=None):
        self.requests.append((caller_id, page_number, page_size))
        if page_number < 1:
            return Result.fail(FeedErrors.InvalidPage)
        item = FeedItem(
            id="q-1",
            activity_type="Quote",
            created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
            user=UserSummary(id=CALLER_ID, username="writer"),
        )
        return Result.ok(PagedResult.create([item], page_number, page_size or 10, 11))


@pytest.fixture
def test_client():
    app = FastAPI()
    setup_exception_handlers(app)
    app.include_router(shelves_router.router, prefix="/api")
    app.include_router(feed_router.router, prefix="/api")

    shelf_service = DummyShelfService()
    feed_service = DummyFeedService()
    caller = SimpleNamespace(id=CALLER_ID)

    app.dependency_overrides[dependencies.get_shelf_service] = lambda: shelf_service
    app.dependency_overrides[dependencies.get_feed_service] = lambda: feed_service
    app.dependency_overrides[dependencies.get_optional_user] = lambda: caller

    client = TestClient(app)
    return client, app, shelf_service, feed_service


def test_domain_error_maps_to_status_and_code(test_client):
    client, _, shelf_service, _ = test_client
    shelf_id = uuid.uuid4()

    response = client.delete(f"/api/shelves/{shelf_id}")

    assert response.status_code == 400
    assert response.json() == {
        "type": "error",
        "data": {
            "code": "Shelves.DefaultShelfDeleteDenied",
            "message": "Cannot delete default shelf 'Read'.",
        },
    }
    assert shelf_service.calls == [("delete", CALLER_ID, shelf_id)]


def test_conflict_and_not_found_statuses(test_client):
    client, _, _, _ = test_client

    conflict = client.post(f"/api/shelves/{uuid.uuid4()}/books/{uuid.uuid4()}")
    missing = client.get(f"/api/shelves/{uuid.uuid4()}")

    assert conflict.status_code == 409
    assert conflict.json()["data"]["code"] == "Shelves.AlreadyAdded"
    assert missing.status_code == 404
    assert missing.json()["data"]["code"] == "Shelves.NotFound"


def test_success_without_body(test_client):
    client, _, _, _ = test_client

    response = client.delete(f"/api/shelves/{uuid.uuid4()}/books/{uuid.uuid4()}")

    assert response.status_code == 204


def test_anonymous_caller_reaches_service_and_gets_401(test_client):
    client, app, shelf_service, _ = test_client
    app.dependency_overrides[dependencies.get_optional_user] = lambda: None

    response = client.delete(f"/api/shelves/{uuid.uuid4()}")

    assert response.status_code == 401
    assert response.json()["data"]["code"] == "Auth.Unauthorized"
    assert shelf_service.calls[0][1] is None


def test_feed_uses_camel_case_query_and_body(test_client):
    client, _, _, feed_service = test_client

    response = client.get("/api/feed", params={"pageNumber": 2, "pageSize": 5})

    assert response.status_code == 200
    payload = response.json()
    assert feed_service.requests == [(CALLER_ID, 2, 5)]
    assert payload["pageNumber"] == 2
    assert payload["totalCount"] == 11
    assert payload["totalPages"] == 3
    assert payload["hasNextPage"] is True
    assert payload["hasPreviousPage"] is True
    assert payload["items"][0]["activityType"] == "Quote"
    assert payload["items"][0]["user"]["username"] == "writer"


def test_feed_invalid_page(test_client):
    client, _, _, _ = test_client

    response = client.get("/api/feed", params={"pageNumber": 0})

    assert response.status_code == 400
    assert response.json()["data"]["code"] == "Feed.InvalidPage"


def test_bad_bearer_token_is_rejected():
    app = FastAPI()
    setup_exception_handlers(app)
    app.include_router(feed_router.router, prefix="/api")

    class RejectingAuthService:
        async def resolve_user(self, token):
            raise ValueError("Invalid token")

    app.dependency_overrides[dependencies.get_auth_service] = lambda: RejectingAuthService()
    app.dependency_overrides[dependencies.get_feed_service] = lambda: DummyFeedService()
    client = TestClient(app)

    response = client.get("/api/feed", headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401
    assert response.json()["data"]["message"] == "Invalid token"
