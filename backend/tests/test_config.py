from examgrid.core.config import Settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.api_prefix == "/api"
    assert settings.exam_preferred_daily_cap == 2
    assert settings.exam_fallback_daily_cap == 3
    assert settings.exam_scheduler_random_seed is None


def test_cors_origins_accept_comma_and_json_strings():
    settings = Settings(_env_file=None, cors_origins="http://a.test, http://b.test")
    assert settings.cors_origins == ["http://a.test", "http://b.test"]

    settings = Settings(_env_file=None, cors_origins='["http://c.test"]')
    assert settings.cors_origins == ["http://c.test"]


def test_scheduler_settings_from_env(monkeypatch):
    monkeypatch.setenv("EXAM_FALLBACK_DAILY_CAP", "4")
    monkeypatch.setenv("EXAM_SCHEDULER_RANDOM_SEED", "123")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = Settings(_env_file=None)
    assert settings.exam_fallback_daily_cap == 4
    assert settings.exam_scheduler_random_seed == 123
    assert settings.log_level == "DEBUG"
