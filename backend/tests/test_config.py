import pytest

from pingtopass.core.config import DEFAULT_JWT_SECRET, Settings


def _settings(**values) -> Settings:
    return Settings(_env_file=None, **values)


def test_plain_sqlite_url():
    assert _settings(DATABASE_URL="sqlite:///./local.db").database_url == "sqlite:///./local.db"


def test_turso_url_takes_precedence():
    settings = _settings(
        DATABASE_URL="sqlite:///./local.db",
        TURSO_DATABASE_URL="libsql://pingtopass-demo.turso.io",
        TURSO_AUTH_TOKEN="tok",
    )

    assert settings.database_url == "sqlite+libsql://pingtopass-demo.turso.io?secure=true&authToken=tok"


def test_production_rejects_default_secret():
    settings = _settings(APP_ENV="production", JWT_SECRET=DEFAULT_JWT_SECRET)

    with pytest.raises(RuntimeError, match="JWT_SECRET"):
        settings.validate_production()


def test_production_with_secret_passes():
    _settings(APP_ENV="production", JWT_SECRET="a-long-random-secret").validate_production()


def test_development_skips_checks():
    _settings(APP_ENV="development", JWT_SECRET="").validate_production()
