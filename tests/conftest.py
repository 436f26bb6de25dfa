import os

os.environ["INFLUX_BUCKET"] = "fleet"
os.environ["INFLUX_ORG"] = "acme"
os.environ["TZ"] = "UTC"

import pytest
from fastapi.testclient import TestClient

from telemetry_api.main import app
from telemetry_api.services.telemetry_service import get_telemetry_service


class FakeRecord:
    def __init__(self, values: dict):
        self.values = values

    def get_time(self):
        return self.values.get("_time")

    def get_value(self):
        return self.values.get("_value")


class FakeQueryApi:
    def __init__(self, influx):
        self.influx = influx

    async def query_stream(self, query, org=None, params=None):
        self.influx.queries.append(query)
        if self.influx.error is not None:
            raise self.influx.error
        return self._stream()

    async def _stream(self):
        for values in self.influx.rows:
            if isinstance(values, Exception):
                raise values
            yield FakeRecord(values)


class FakeInflux:
    """Stands in for InfluxDBClientAsync; records every query it is given."""

    def __init__(self):
        self.rows = []
        self.queries = []
        self.error = None

    def query_api(self):
        return FakeQueryApi(self)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def influx(client):
    fake = FakeInflux()
    get_telemetry_service().client = fake
    yield fake
