"""
Turns pivoted telemetry rows into chart series and a map track.

Rows are expected in time order (the series query sorts by ``_time``); the
output keeps that order. Values that are missing or not numeric are skipped
for that field only.
"""

import math
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from telemetry_api.core.timefmt import epoch_seconds, format_rfc3339, parse_rfc3339
from telemetry_api.models.telemetry import (
    SeriesPoint,
    TelemetryResponse,
    TelemetrySeries,
    TrackPoint,
)

# (row column, output series)
SERIES_COLUMNS = (
    ("speed", "speed"),
    ("fls485_level_1", "fls485_level_1"),
    ("fls485_level_2", "fls485_level_2"),
    ("main_power_voltage", "main_power_voltage"),
)

LATITUDE = "latitude"
LONGITUDE = "longitude"
EVENT_TIME = "event_time"


def to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    if not math.isfinite(number):
        return None
    return number


def resolve_event_time(values: Mapping[str, Any], row_time: datetime) -> int:
    event_time = values.get(EVENT_TIME)
    if isinstance(event_time, int) and not isinstance(event_time, bool):
        return event_time
    if isinstance(event_time, str):
        parsed = parse_rfc3339(event_time)
        if parsed is not None:
            return epoch_seconds(parsed)
    return epoch_seconds(row_time)


class TelemetryReshaper:
    def __init__(self):
        self.series: dict[str, list[SeriesPoint]] = {
            name: [] for _, name in SERIES_COLUMNS
        }
        self.track: list[TrackPoint] = []
        self.row_count = 0

    def add(self, row_time: datetime, values: Mapping[str, Any]) -> None:
        self.row_count += 1
        time = format_rfc3339(row_time)

        for column, name in SERIES_COLUMNS:
            value = to_float(values.get(column))
            if value is not None:
                self.series[name].append(SeriesPoint(time=time, value=value))

        lat = to_float(values.get(LATITUDE))
        lon = to_float(values.get(LONGITUDE))
        if lat is None or lon is None:
            return

        self.track.append(
            TrackPoint(
                time=time,
                lat=lat,
                lon=lon,
                event_time=resolve_event_time(values, row_time),
            )
        )

    def add_record(self, record) -> None:
        """Add an ``influxdb_client`` FluxRecord."""
        self.add(record.get_time(), record.values)

    def result(self) -> TelemetryResponse:
        return TelemetryResponse(
            series=TelemetrySeries(
                **{name: list(points) for name, points in self.series.items()}
            ),
            track=list(self.track),
        )


def reshape(rows: Iterable[tuple[datetime, Mapping[str, Any]]]) -> TelemetryResponse:
    reshaper = TelemetryReshaper()
    for row_time, values in rows:
        reshaper.add(row_time, values)
    return reshaper.result()
