import json
import logging
from decimal import Decimal

import pytest
from pydantic import ValidationError

from haccp_review.config.logging import CustomJsonFormatter, build_logging_config
from haccp_review.config.settings import Settings


def test_defaults():
    settings = Settings()
    assert settings.NOTIFICATION_RATING_THRESHOLD == Decimal("3.5")
    assert settings.CRITICAL_RATING_THRESHOLD == Decimal("2.0")
    assert settings.CRITICAL_ROOT_CAUSES == {"temperature_storage", "cross_contamination"}
    assert (settings.TREND_DEFAULT_MONTHS, settings.TREND_MAX_MONTHS) == (6, 36)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("BACKEND_CORS_ORIGINS", '["https://dashboard.example.org", "https://ops.example.org"]')
    monkeypatch.setenv("CRITICAL_ROOT_CAUSES", '["worker_hygiene"]')
    monkeypatch.setenv("NOTIFICATION_RATING_THRESHOLD", "3.0")

    settings = Settings()

    assert settings.CORS_ORIGINS == ["https://dashboard.example.org", "https://ops.example.org"]
    assert settings.CRITICAL_ROOT_CAUSES == {"worker_hygiene"}
    assert settings.NOTIFICATION_RATING_THRESHOLD == Decimal("3.0")


def test_threshold_out_of_range():
    with pytest.raises(ValidationError):
        Settings(CRITICAL_RATING_THRESHOLD=Decimal("6.0"))


@pytest.mark.parametrize(
    "overrides",
    [
        {"TREND_MAX_MONTHS": 60},
        {"TREND_MAX_MONTHS": 0},
        {"TREND_MAX_MONTHS": 12, "TREND_DEFAULT_MONTHS": 13},
        {"TREND_DEFAULT_MONTHS": 0},
    ],
)
def test_trend_window_is_bounded(overrides):
    with pytest.raises(ValidationError):
        Settings(**overrides)


def test_trend_window_may_be_narrowed():
    settings = Settings(TREND_MAX_MONTHS=12, TREND_DEFAULT_MONTHS=3)
    assert (settings.TREND_DEFAULT_MONTHS, settings.TREND_MAX_MONTHS) == (3, 12)


def test_unknown_critical_root_cause(monkeypatch):
    monkeypatch.setenv("CRITICAL_ROOT_CAUSES", '["temperature_storage", "temprature_storage"]')
    with pytest.raises(ValidationError, match="temprature_storage"):
        Settings()


def test_file_handlers_only_when_enabled(tmp_path):
    quiet = build_logging_config(Settings())
    assert set(quiet["handlers"]) == {"console"}

    with_files = build_logging_config(Settings(LOG_TO_FILE=True, LOG_DIR=str(tmp_path / "logs")))
    assert {"file", "error_file", "json_file"} <= set(with_files["handlers"])
    assert (tmp_path / "logs").is_dir()


def test_json_formatter_carries_identifiers():
    formatter = CustomJsonFormatter("%(message)s", environment="testing")
    record = logging.LogRecord("haccp_review.test", logging.INFO, __file__, 1, "verified", None, None)
    record.review_id = "r-1"

    payload = json.loads(formatter.format(record))

    assert payload["review_id"] == "r-1"
    assert payload["environment"] == "testing"
    assert payload["level"] == "INFO"
