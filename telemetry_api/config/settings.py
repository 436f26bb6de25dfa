from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings

from telemetry_api.core.flux import CONTROL_CHARS, DURATION


class Settings(BaseSettings):
    influx_url: str = "http://localhost:8086"
    influx_org: str = ""
    influx_bucket: str = "telemetry"
    influx_measurement: str = "telemetry"
    influx_token: str = ""
    influx_timeout_ms: int = 10000

    tz: str = "UTC"
    lookback: str = "30d"
    series_row_limit: int = 10000

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080

    class Config:
        env_file = ".env"
        extra = "ignore"

    @field_validator("influx_bucket", "influx_measurement")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value:
            raise ValueError("must not be empty")
        if CONTROL_CHARS.search(value):
            raise ValueError("must not contain control characters")
        return value

    @field_validator("lookback")
    @classmethod
    def validate_lookback(cls, value: str) -> str:
        if not DURATION.match(value):
            raise ValueError(f"Invalid Flux duration {value!r}")
        return value

    @field_validator("series_row_limit")
    @classmethod
    def validate_row_limit(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("tz")
    @classmethod
    def validate_tz(cls, value: str) -> str:
        value = value or "UTC"
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone {value!r}")
        return value

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.tz)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
