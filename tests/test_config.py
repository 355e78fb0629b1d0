"""Settings defaults."""

from app.core.config import Settings


def test_debug_is_off_by_default(monkeypatch):
    monkeypatch.delenv("DEBUG", raising=False)
    settings = Settings(_env_file=None)
    assert settings.debug is False
    assert settings.admission_claim_timeout_seconds == 300


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("MAX_COURSE_APPLICATIONS_PER_INSTITUTION", "3")
    settings = Settings(_env_file=None)
    assert settings.debug is True
    assert settings.max_course_applications_per_institution == 3
