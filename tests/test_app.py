import pytest

from api import create_app
from api.config import DevelopmentConfig, ProductionConfig, TestingConfig, get_config
from services.settings import ConfigError


def test_get_config_by_name():
    assert get_config("prod") is ProductionConfig
    assert get_config("testing") is TestingConfig
    assert get_config("dev") is DevelopmentConfig


def test_create_app_refuses_missing_secret(tmp_path):
    with pytest.raises(ConfigError):
        create_app("testing", {"DATABASE_URL": f"sqlite:///{tmp_path / 'a.db'}", "ACCESS_TOKEN_SECRET": ""})


def test_create_app_refuses_shared_secret(tmp_path):
    with pytest.raises(ConfigError):
        create_app(
            "testing",
            {
                "DATABASE_URL": f"sqlite:///{tmp_path / 'a.db'}",
                "REFRESH_TOKEN_SECRET": TestingConfig.ACCESS_TOKEN_SECRET,
            },
        )


def test_app_wires_extensions(app):
    for key in ("storage", "auth_settings", "media_host", "session_controller"):
        assert key in app.extensions
    controller = app.extensions["session_controller"]
    assert controller.tokens.settings is app.extensions["auth_settings"]


def test_unknown_route_uses_error_envelope(client):
    res = client.get("/api/v1/nope")
    assert res.status_code == 404
    body = res.get_json()
    assert body["error"] == "NOT_FOUND"
    assert body["status"] == 404


def test_testing_config_reports_test_env(app):
    assert app.config["APP_ENV"] == "test"


def test_root(client):
    assert client.get("/").get_json()["docs"] == "/apidocs/"
