from crewplan.platform.config import Settings


def test_cors_origins_split_and_trimmed():
    settings = Settings(CORS_ORIGINS="http://a.io, http://b.io,")

    assert settings.cors_origins == ["http://a.io", "http://b.io"]


def test_cors_origins_default_to_wildcard():
    assert Settings(CORS_ORIGINS="").cors_origins == ["*"]


def test_production_flag():
    assert Settings(APP_ENV="production").is_production
    assert not Settings(APP_ENV="staging").is_production
