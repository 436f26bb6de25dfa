from typing import Optional

from influxdb_client.client.influxdb_client_async import InfluxDBClientAsync

from telemetry_api.config.settings import get_settings

_influx_client: Optional[InfluxDBClientAsync] = None


async def get_influx_client() -> InfluxDBClientAsync:
    global _influx_client

    if _influx_client is None:
        settings = get_settings()
        _influx_client = InfluxDBClientAsync(
            url=settings.influx_url,
            token=settings.influx_token,
            org=settings.influx_org,
            timeout=settings.influx_timeout_ms,
        )

    return _influx_client


async def close_influx_client():
    global _influx_client
    if _influx_client:
        await _influx_client.close()
        _influx_client = None
