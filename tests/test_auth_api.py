import io


def _set_cookies(res):
    return {h.split("=", 1)[0]: h for h in res.headers.getlist("Set-Cookie")}


def test_register_returns_201_without_credentials(client, register_form):
    res = client.post("/api/v1/users/register", data=register_form(), content_type="multipart/form-data")
    assert res.status_code == 201
    user = res.get_json()["data"]
    assert user["username"] == "alice"
    assert user["avatar"].startswith("https://media.test/")
    for key in ("password", "passwordHash", "password_hash", "refreshToken", "refresh_token"):
        assert key not in user


def test_register_duplicate_username_any_case_is_409(client, registered, register_form):
    form = register_form(username="ALICE", email="second@x.com")
    res = client.post("/api/v1/users/register", data=form, content_type="multipart/form-data")
    assert res.status_code == 409
    body = res.get_json()
    assert body["error"] == "CONFLICT"
    assert body["status"] == 409


def test_register_missing_avatar_is_400(client, register_form):
    form = register_form()
    form.pop("avatar")
    res = client.post("/api/v1/users/register", data=form, content_type="multipart/form-data")
    assert res.status_code == 400


def test_register_invalid_email_is_400(client, register_form):
    form = register_form(email="not-an-email")
    res = client.post("/api/v1/users/register", data=form, content_type="multipart/form-data")
    assert res.status_code == 400
    assert "email" in res.get_json()["details"]


def test_register_media_failure_is_502(client, media, register_form):
    media.fail = True
    res = client.post("/api/v1/users/register", data=register_form(), content_type="multipart/form-data")
    assert res.status_code == 502
    assert res.get_json()["error"] == "UPSTREAM_ERROR"


def test_register_overlong_username_is_400(client, register_form):
    form = register_form(username="a" * 65)
    res = client.post("/api/v1/users/register", data=form, content_type="multipart/form-data")
    assert res.status_code == 400
    assert "username" in res.get_json()["details"]


def test_register_overlong_full_name_is_400(client, register_form):
    form = register_form(fullName="A" * 256)
    res = client.post("/api/v1/users/register", data=form, content_type="multipart/form-data")
    assert res.status_code == 400
    assert "fullName" in res.get_json()["details"]


def test_register_with_cover_image(client, register_form):
    form = register_form(coverImage=(io.BytesIO(b"jpeg"), "cover.jpg"))
    res = client.post("/api/v1/users/register", data=form, content_type="multipart/form-data")
    assert res.status_code == 201
    assert res.get_json()["data"]["coverImage"].startswith("https://media.test/")


def test_login_sets_http_only_cookies(client, app, registered):
    res = client.post("/api/v1/users/login", json={"username": "alice", "password": "secret123"})
    assert res.status_code == 200
    data = res.get_json()["data"]
    assert data["accessToken"] and data["refreshToken"]
    assert data["user"]["id"] == registered["id"]

    cookies = _set_cookies(res)
    assert set(cookies) == {"accessToken", "refreshToken"}
    settings = app.extensions["auth_settings"]
    assert "HttpOnly" in cookies["accessToken"]
    assert "SameSite=Strict" in cookies["refreshToken"]
    assert f"Max-Age={int(settings.access_token_ttl.total_seconds())}" in cookies["accessToken"]
    assert f"Max-Age={int(settings.refresh_token_ttl.total_seconds())}" in cookies["refreshToken"]


def test_login_wrong_password_is_401(client, registered):
    res = client.post("/api/v1/users/login", json={"username": "alice", "password": "wrongpassword"})
    assert res.status_code == 401
    assert res.get_json()["error"] == "UNAUTHORIZED"


def test_login_unknown_user_is_401(client, registered):
    res = client.post("/api/v1/users/login", json={"email": "nobody@x.com", "password": "secret123"})
    assert res.status_code == 401


def test_login_unknown_user_is_404_when_distinct_errors_enabled(client, controller, registered):
    controller.distinct_login_errors = True
    res = client.post("/api/v1/users/login", json={"email": "nobody@x.com", "password": "secret123"})
    assert res.status_code == 404


def test_login_without_identifier_is_400(client, registered):
    res = client.post("/api/v1/users/login", json={"password": "secret123"})
    assert res.status_code == 400


def test_refresh_from_cookie_rotates(client, logged_in):
    res = client.post("/api/v1/users/refresh-token")
    assert res.status_code == 200
    data = res.get_json()["data"]
    assert data["refreshToken"] != logged_in["refreshToken"]
    assert set(_set_cookies(res)) == {"accessToken", "refreshToken"}


def test_refresh_from_body_rejects_reuse(client, logged_in):
    client.delete_cookie("refreshToken")
    original = logged_in["refreshToken"]

    first = client.post("/api/v1/users/refresh-token", json={"refreshToken": original})
    assert first.status_code == 200

    client.delete_cookie("refreshToken")
    again = client.post("/api/v1/users/refresh-token", json={"refreshToken": original})
    assert again.status_code == 401


def test_refresh_without_token_is_401(client):
    res = client.post("/api/v1/users/refresh-token")
    assert res.status_code == 401


def test_refresh_with_non_object_body_is_401(client):
    res = client.post("/api/v1/users/refresh-token", json=["x"])
    assert res.status_code == 401
    assert res.get_json()["error"] == "UNAUTHORIZED"


def test_logout_clears_cookies_and_revokes(client, logged_in):
    res = client.post(
        "/api/v1/users/logout",
        headers={"Authorization": f"Bearer {logged_in['accessToken']}"},
    )
    assert res.status_code == 200
    cookies = _set_cookies(res)
    assert "Max-Age=0" in cookies["accessToken"] or "Expires=Thu, 01 Jan 1970" in cookies["accessToken"]
    assert "refreshToken" in cookies

    res = client.post("/api/v1/users/refresh-token", json={"refreshToken": logged_in["refreshToken"]})
    assert res.status_code == 401


def test_logout_requires_authentication(client):
    client.delete_cookie("accessToken")
    res = client.post("/api/v1/users/logout")
    assert res.status_code == 401


def test_health(client):
    res = client.get("/api/v1/health")
    assert res.status_code == 200
    assert res.get_json()["database"] == "ok"
