"""
Tests for the error envelope: every failure is {"success": false, "error": ...}.
"""
import pytest
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import (
    ConflictError,
    ForbiddenError,
    LeaderboardEntryNotFound,
    NotFoundError,
    TrackZenException,
    http_exception_handler,
    trackzen_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)


class Item(BaseModel):
    quantity: int


@pytest.fixture()
def error_app():
    app = FastAPI()
    app.add_exception_handler(TrackZenException, trackzen_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/missing")
    def missing():
        raise NotFoundError("Widget not found")

    @app.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    @app.post("/items")
    def create_item(item: Item):
        return item

    return app


class TestExceptionClasses:
    @pytest.mark.parametrize("exc_class, status", [
        (NotFoundError, 404),
        (ForbiddenError, 403),
        (ConflictError, 409),
    ])
    def test_status_codes(self, exc_class, status):
        assert exc_class("x").http_status == status

    def test_leaderboard_entry_message(self):
        exc = LeaderboardEntryNotFound()
        assert exc.http_status == 404
        assert exc.to_dict() == {"success": False, "error": "User not found in leaderboard"}


class TestHandlers:
    def test_application_error(self, error_app):
        r = TestClient(error_app).get("/missing")
        assert r.status_code == 404
        assert r.json() == {"success": False, "error": "Widget not found"}

    def test_unhandled_error_is_generic(self, error_app, caplog):
        r = TestClient(error_app, raise_server_exceptions=False).get("/boom")
        assert r.status_code == 500
        assert r.json() == {"success": False, "error": "Internal server error"}
        assert "kaboom" not in r.text
        assert "Unhandled error on GET /boom" in caplog.text

    def test_validation_details(self, error_app):
        r = TestClient(error_app).post("/items", json={"quantity": "lots"})
        assert r.status_code == 422
        body = r.json()
        assert body["success"] is False
        assert body["error"] == "Validation failed"
        assert body["details"][0]["field"] == "quantity"
        assert body["details"][0]["message"]


class TestAppEnvelope:
    def test_unknown_route(self, client):
        r = client.get("/api/nowhere")
        assert r.status_code == 404
        assert r.json() == {"success": False, "error": "Not Found"}

    def test_wrong_method(self, client):
        r = client.delete("/api/leaderboard")
        assert r.status_code == 405
        assert r.json()["success"] is False

    def test_ping(self, client):
        assert client.get("/api/ping").json() == {"message": "pong"}
