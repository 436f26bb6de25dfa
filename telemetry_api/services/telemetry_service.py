import logging

from telemetry_api.config.settings import get_settings
from telemetry_api.core.errors import UpstreamQueryError
from telemetry_api.core.flux import (
    build_field_list_query,
    build_identifier_query,
    build_series_query,
)
from telemetry_api.core.influx_client import close_influx_client, get_influx_client
from telemetry_api.core.reshaper import TelemetryReshaper
from telemetry_api.models.telemetry import FieldList, IdentifierList, TelemetryResponse

logger = logging.getLogger(__name__)


class TelemetryService:
    def __init__(self):
        self.client = None
        self.settings = get_settings()

    async def initialize(self):
        if not self.client:
            self.client = await get_influx_client()

    async def close(self):
        self.client = None
        await close_influx_client()

    async def _records(self, query_name: str, query: str):
        await self.initialize()
        logger.debug("Running %s query:\n%s", query_name, query)
        try:
            records = await self.client.query_api().query_stream(
                query, org=self.settings.influx_org or None
            )
            async for record in records:
                yield record
        except Exception as e:
            logger.error("%s query failed: %s", query_name, e)
            raise UpstreamQueryError(query_name, e) from e

    async def _collect_strings(self, query_name: str, query: str) -> list[str]:
        values = []
        async for record in self._records(query_name, query):
            value = record.get_value()
            if isinstance(value, str):
                values.append(value)
        return values

    async def list_identifiers(self) -> IdentifierList:
        query = build_identifier_query(
            self.settings.influx_bucket,
            measurement=self.settings.influx_measurement,
            lookback=self.settings.lookback,
        )
        return IdentifierList(imeis=await self._collect_strings("identifiers", query))

    async def list_fields(self, imei: str) -> FieldList:
        query = build_field_list_query(
            self.settings.influx_bucket,
            imei,
            measurement=self.settings.influx_measurement,
            lookback=self.settings.lookback,
        )
        return FieldList(fields=await self._collect_strings("fields", query))

    async def get_telemetry(self, imei: str, start: str, end: str) -> TelemetryResponse:
        query = build_series_query(
            self.settings.influx_bucket,
            imei,
            start,
            end,
            measurement=self.settings.influx_measurement,
            limit=self.settings.series_row_limit,
            tz=self.settings.timezone,
        )

        reshaper = TelemetryReshaper()
        async for record in self._records("telemetry", query):
            reshaper.add_record(record)

        if reshaper.row_count >= self.settings.series_row_limit:
            logger.warning(
                "Telemetry for %s truncated at %d rows", imei, self.settings.series_row_limit
            )
        return reshaper.result()


_service = TelemetryService()


def get_telemetry_service() -> TelemetryService:
    return _service
