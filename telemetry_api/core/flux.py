"""
Flux query rendering for the telemetry bucket.

Every value interpolated into query text goes through ``flux_string`` (or,
for timestamps, ``flux_time``) so callers cannot break out of a string
literal. Parameterised Flux is only available on InfluxDB Cloud, which is
why the queries are rendered here instead of being passed ``params``.

Bucket, measurement, lookback and row limit come from server settings, so
bad values there raise ``ConfigurationError`` rather than a caller error.
"""

import re
from typing import Optional
from zoneinfo import ZoneInfo

from telemetry_api.core.errors import ConfigurationError, InvalidArgumentError
from telemetry_api.core.timefmt import format_rfc3339, parse_rfc3339

DEFAULT_MEASUREMENT = "telemetry"
DEFAULT_LOOKBACK = "30d"
DEFAULT_ROW_LIMIT = 10000

SERIES_FIELDS = (
    "speed",
    "fls485_level_1",
    "fls485_level_2",
    "latitude",
    "longitude",
    "main_power_voltage",
    "event_time",
)

CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
DURATION = re.compile(r"^(\d+(ns|us|ms|s|m|h|d|w|mo|y))+$")


def flux_string(value: str, name: str = "value") -> str:
    """Render ``value`` as a quoted Flux string literal."""
    if not isinstance(value, str):
        raise InvalidArgumentError(f"{name} must be a string")
    if CONTROL_CHARS.search(value):
        raise InvalidArgumentError(f"{name} contains control characters")

    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("${", "\\${")
    return f'"{escaped}"'


def flux_time(value: str, name: str, tz: Optional[ZoneInfo] = None) -> str:
    """Render an RFC3339 timestamp as a Flux ``time()`` call.

    Timestamps carrying an offset are passed through as written, keeping
    any nanosecond digits. Ones without an offset are placed in ``tz`` and
    rendered in UTC at microsecond precision.
    """
    if parse_rfc3339(value) is not None:
        return f"time(v: {flux_string(value, name)})"

    parsed = parse_rfc3339(value, tz)
    if parsed is None:
        raise InvalidArgumentError(f"{name} must be an RFC3339 timestamp, got {value!r}")
    return f"time(v: {flux_string(format_rfc3339(parsed, fractional=True), name)})"


def _require(**params: str) -> None:
    missing = [name for name, value in params.items() if not value]
    if missing:
        raise InvalidArgumentError(f"{', '.join(missing)} required")


def _setting(value: str, name: str) -> str:
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"{name} is not configured")
    if CONTROL_CHARS.search(value):
        raise ConfigurationError(f"{name} contains control characters")
    return flux_string(value, name)


def _lookback(lookback: str) -> str:
    if not DURATION.match(lookback or ""):
        raise ConfigurationError(f"Invalid lookback duration {lookback!r}")
    return f"-{lookback}"


def build_identifier_query(
    bucket: str,
    measurement: str = DEFAULT_MEASUREMENT,
    lookback: str = DEFAULT_LOOKBACK,
) -> str:
    return (
        f"from(bucket: {_setting(bucket, 'bucket')})\n"
        f"  |> range(start: {_lookback(lookback)})\n"
        f'  |> filter(fn: (r) => r["_measurement"] == {_setting(measurement, "measurement")})\n'
        f'  |> keep(columns: ["imei"])\n'
        f"  |> group()\n"
        f'  |> distinct(column: "imei")\n'
        f'  |> sort(columns: ["_value"])'
    )


def build_field_list_query(
    bucket: str,
    identifier: str,
    measurement: str = DEFAULT_MEASUREMENT,
    lookback: str = DEFAULT_LOOKBACK,
) -> str:
    _require(imei=identifier)
    return (
        f"from(bucket: {_setting(bucket, 'bucket')})\n"
        f"  |> range(start: {_lookback(lookback)})\n"
        f'  |> filter(fn: (r) => r["_measurement"] == {_setting(measurement, "measurement")})\n'
        f'  |> filter(fn: (r) => r["imei"] == {flux_string(identifier, "imei")})\n'
        f'  |> keep(columns: ["_field"])\n'
        f"  |> group()\n"
        f'  |> distinct(column: "_field")\n'
        f'  |> sort(columns: ["_value"])'
    )


def build_series_query(
    bucket: str,
    identifier: str,
    start: str,
    end: str,
    measurement: str = DEFAULT_MEASUREMENT,
    limit: int = DEFAULT_ROW_LIMIT,
    tz: Optional[ZoneInfo] = None,
) -> str:
    _require(imei=identifier, start=start, end=end)
    if limit <= 0:
        raise ConfigurationError("row limit must be positive")

    start_time = parse_rfc3339(start, tz)
    end_time = parse_rfc3339(end, tz)
    if start_time is not None and end_time is not None and start_time > end_time:
        raise InvalidArgumentError("start must not be after end")

    field_filter = " or ".join(
        f'r["_field"] == {flux_string(field)}' for field in SERIES_FIELDS
    )
    return (
        f"from(bucket: {_setting(bucket, 'bucket')})\n"
        f"  |> range(start: {flux_time(start, 'start', tz)}, stop: {flux_time(end, 'end', tz)})\n"
        f'  |> filter(fn: (r) => r["_measurement"] == {_setting(measurement, "measurement")}'
        f' and r["imei"] == {flux_string(identifier, "imei")})\n'
        f"  |> filter(fn: (r) => {field_filter})\n"
        f'  |> pivot(rowKey: ["_time"], columnKey: ["_field"], valueColumn: "_value")\n'
        f'  |> sort(columns: ["_time"])\n'
        f"  |> map(fn: (r) => ({{r with main_power_voltage: if exists r.main_power_voltage"
        f" then float(v: r.main_power_voltage) / 1000.0 else 0.0}}))\n"
        f"  |> limit(n: {int(limit)})"
    )
