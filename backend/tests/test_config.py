from mushi.core.config import Settings


def test_settings_defaults_without_env():
    # Avoid reading any .env files during this test
    s = Settings(_env_file=None)

    assert s.PAGE_SIZE == 20
    assert s.REVEAL_DEBOUNCE_SECONDS == 0.5
    assert s.TEMPLATES_BUCKET == "templates"
    assert s.PLACEHOLDER_IMAGE_URL == "/mushi-logo.png"
    assert s.STORAGE_BACKEND == "s3"


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("PAGE_SIZE", "30")
    monkeypatch.setenv("STORAGE_BACKEND", "b2")
    s = Settings(_env_file=None)
    assert s.PAGE_SIZE == 30
    assert s.STORAGE_BACKEND == "b2"
