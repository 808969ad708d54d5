import io

import httpx
import pytest

from api import create_app
from services.media_host import MediaHost


class FakeMediaHost:
    """Upload endpoint stand-in built on httpx.MockTransport."""

    def __init__(self):
        self.uploads = []
        self.fail = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.fail:
            return httpx.Response(503, json={"error": {"message": "unavailable"}})
        n = len(self.uploads) + 1
        self.uploads.append(request)
        return httpx.Response(
            200,
            json={"public_id": f"asset{n}", "secure_url": f"https://media.test/asset{n}"},
        )


class Upload:
    """What the controller needs from werkzeug's FileStorage."""

    def __init__(self, filename="avatar.png", content=b"\x89PNG fake"):
        self.filename = filename
        self.stream = io.BytesIO(content)


@pytest.fixture()
def media():
    return FakeMediaHost()


@pytest.fixture()
def app(tmp_path, media):
    # File-backed SQLite so worker threads in the concurrency tests share it
    app = create_app("testing", {"DATABASE_URL": f"sqlite:///{tmp_path / 'test.db'}"})
    host = MediaHost(
        upload_url="https://media.test/upload",
        client=httpx.Client(transport=httpx.MockTransport(media.handler)),
    )
    app.extensions["media_host"] = host
    app.extensions["session_controller"].media_host = host
    yield app
    app.extensions["storage"].dispose()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def controller(app):
    return app.extensions["session_controller"]


@pytest.fixture()
def store(controller):
    return controller.store


@pytest.fixture()
def make_upload():
    return Upload


@pytest.fixture()
def alice(controller):
    return controller.register(
        username="alice",
        email="alice@x.com",
        password="secret123",
        full_name="Alice Liddell",
        avatar=Upload(),
    )


def _register_form(**overrides):
    form = {
        "username": "alice",
        "email": "alice@x.com",
        "fullName": "Alice Liddell",
        "password": "secret123",
        "avatar": (io.BytesIO(b"\x89PNG fake"), "avatar.png"),
    }
    form.update(overrides)
    return form


@pytest.fixture()
def register_form():
    return _register_form


@pytest.fixture()
def registered(client):
    res = client.post("/api/v1/users/register", data=_register_form(), content_type="multipart/form-data")
    assert res.status_code == 201
    return res.get_json()["data"]


@pytest.fixture()
def logged_in(client, registered):
    res = client.post("/api/v1/users/login", json={"username": "alice", "password": "secret123"})
    assert res.status_code == 200
    return res.get_json()["data"]
