"""
Settings loading and validation tests.
"""

import pytest
from pydantic import ValidationError

from telemetry_api.config.settings import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("INFLUX_BUCKET", raising=False)
    settings = Settings(_env_file=None)

    assert settings.influx_measurement == "telemetry"
    assert settings.series_row_limit == 10000
    assert settings.lookback == "30d"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("INFLUX_BUCKET", "trackers")
    monkeypatch.setenv("TZ", "Europe/Berlin")

    settings = Settings(_env_file=None)

    assert settings.influx_bucket == "trackers"
    assert settings.timezone.key == "Europe/Berlin"


def test_unknown_timezone_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, tz="Mars/Olympus_Mons")


@pytest.mark.parametrize(
    "field,value",
    [
        ("influx_bucket", ""),
        ("influx_bucket", "fleet\n"),
        ("influx_measurement", ""),
        ("influx_measurement", "tele\x00metry"),
        ("lookback", "30 days"),
        ("lookback", ""),
        ("series_row_limit", 0),
    ],
)
def test_bad_query_settings_fail_at_startup(field, value):
    """Broken bucket, measurement or window settings stop the app from loading."""
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})


def test_bucket_from_environment_is_validated(monkeypatch):
    monkeypatch.setenv("INFLUX_BUCKET", "")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
