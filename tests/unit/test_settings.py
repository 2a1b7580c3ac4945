"""Unit tests for settings loading."""

from pathlib import Path

import pytest

from mailing_list.settings import env_overrides, load_settings

PROJECT_ROOT = Path(__file__).parent.parent.parent

MINIMAL_YAML = """
application:
  base_url: https://lists.example.com/
"""


@pytest.fixture
def settings_file(tmp_path) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(MINIMAL_YAML)
    return path


class TestLoadSettings:
    def test_project_settings_file_is_valid(self) -> None:
        settings = load_settings(PROJECT_ROOT / "settings.yaml", environ={})
        assert settings.subscriptions.token_length == 25
        assert settings.subscriptions.confirmation_path == "/subscriptions/confirm"
        assert settings.email_client.provider == "dev"

    def test_defaults_applied(self, settings_file) -> None:
        settings = load_settings(settings_file, environ={})
        assert settings.application.base_url == "https://lists.example.com"
        assert settings.database.timeout_seconds == 5.0
        assert settings.email_client.timeout_seconds == 10.0
        assert settings.logging.json_logs is False

    def test_env_overrides_file(self, settings_file) -> None:
        settings = load_settings(
            settings_file,
            environ={
                "APP_APPLICATION__BASE_URL": "https://prod.example.com",
                "APP_DATABASE__TIMEOUT_SECONDS": "1.5",
                "APP_LOGGING__JSON": "true",
            },
        )
        assert settings.application.base_url == "https://prod.example.com"
        assert settings.database.timeout_seconds == 1.5
        assert settings.logging.json_logs is True

    def test_settings_path_from_env(self, settings_file) -> None:
        settings = load_settings(environ={"APP_SETTINGS_PATH": str(settings_file)})
        assert settings.application.base_url == "https://lists.example.com"

    def test_missing_explicit_file_raises(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.yaml", environ={})

    def test_base_url_required(self, tmp_path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("database:\n  path: x.db\n")
        with pytest.raises(ValueError, match="validation failed"):
            load_settings(path, environ={})

    def test_relative_base_url_rejected(self, tmp_path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("application:\n  base_url: lists.example.com\n")
        with pytest.raises(ValueError):
            load_settings(path, environ={})

    def test_invalid_yaml_raises(self, tmp_path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("application: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_settings(path, environ={})

    @pytest.mark.parametrize(
        "environ",
        [
            {"APP_EMAIL_CLIENT__PROVIDER": "http"},
            {
                "APP_EMAIL_CLIENT__PROVIDER": "http",
                "APP_EMAIL_CLIENT__BASE_URL": "api.postmarkapp.com",
                "APP_EMAIL_CLIENT__AUTHORIZATION_TOKEN": "secret",
            },
            {
                "APP_EMAIL_CLIENT__PROVIDER": "http",
                "APP_EMAIL_CLIENT__BASE_URL": "https://api.postmarkapp.com",
                "APP_EMAIL_CLIENT__AUTHORIZATION_TOKEN": "  ",
            },
        ],
    )
    def test_http_provider_requires_endpoint_and_token(self, settings_file, environ) -> None:
        with pytest.raises(ValueError, match="email_client"):
            load_settings(settings_file, environ=environ)

    def test_http_provider_accepted_when_complete(self, settings_file) -> None:
        settings = load_settings(
            settings_file,
            environ={
                "APP_EMAIL_CLIENT__PROVIDER": "http",
                "APP_EMAIL_CLIENT__BASE_URL": "https://api.postmarkapp.com",
                "APP_EMAIL_CLIENT__AUTHORIZATION_TOKEN": "secret",
            },
        )
        assert settings.email_client.provider == "http"

    def test_unknown_provider_rejected(self, settings_file) -> None:
        with pytest.raises(ValueError):
            load_settings(settings_file, environ={"APP_EMAIL_CLIENT__PROVIDER": "carrier-pigeon"})


def test_env_overrides_ignores_unrelated_keys() -> None:
    overrides = env_overrides(
        {
            "APP_APPLICATION__PORT": "9000",
            "APP_SETTINGS_PATH": "x.yaml",
            "HOME": "/root",
        }
    )
    assert overrides == {"application": {"port": "9000"}}
