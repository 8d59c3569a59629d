"""Settings tests."""
from market_alerts.config import Settings


def test_defaults_without_environment(monkeypatch):
    for name in ("DATABASE_URL", "SMTP_HOST", "SCHEDULER_ENABLED", "RECORD_RETENTION_DAYS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.database_url.startswith("postgresql://")
    assert settings.smtp_host is None
    assert settings.scheduler_enabled is True
    assert settings.record_retention_days == 30


def test_values_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///alerts.db")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("SCHEDULER_ENABLED", "false")
    monkeypatch.setenv("ALERT_SWEEP_INTERVAL_SECONDS", "60")
    monkeypatch.setenv("PROVIDER_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("SMTP_HOST", "smtp.example.com")

    settings = Settings.from_env()

    assert settings.database_url == "sqlite:///alerts.db"
    assert settings.log_level == "DEBUG"
    assert settings.scheduler_enabled is False
    assert settings.alert_sweep_interval_seconds == 60
    assert settings.provider_timeout_seconds == 2.5
    assert settings.smtp_host == "smtp.example.com"
