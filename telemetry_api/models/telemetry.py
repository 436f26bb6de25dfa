from pydantic import BaseModel, Field


class SeriesPoint(BaseModel):
    time: str
    value: float


class TrackPoint(BaseModel):
    time: str
    lat: float
    lon: float
    event_time: int


class TelemetrySeries(BaseModel):
    speed: list[SeriesPoint] = Field(default_factory=list)
    fls485_level_1: list[SeriesPoint] = Field(default_factory=list)
    fls485_level_2: list[SeriesPoint] = Field(default_factory=list)
    main_power_voltage: list[SeriesPoint] = Field(default_factory=list)


class TelemetryResponse(BaseModel):
    series: TelemetrySeries = Field(default_factory=TelemetrySeries)
    track: list[TrackPoint] = Field(default_factory=list)


class IdentifierList(BaseModel):
    imeis: list[str]


class FieldList(BaseModel):
    fields: list[str]
