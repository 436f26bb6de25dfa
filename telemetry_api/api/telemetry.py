from typing import Optional

from fastapi import APIRouter

from telemetry_api.models.telemetry import FieldList, IdentifierList, TelemetryResponse
from telemetry_api.services.telemetry_service import get_telemetry_service

router = APIRouter()


@router.get("/identifiers", response_model=IdentifierList)
@router.get("/imeis", response_model=IdentifierList, include_in_schema=False)
async def list_identifiers():
    service = get_telemetry_service()
    return await service.list_identifiers()


@router.get("/fields", response_model=FieldList)
async def list_fields(imei: Optional[str] = None):
    service = get_telemetry_service()
    return await service.list_fields(imei or "")


@router.get("/telemetry", response_model=TelemetryResponse)
async def get_telemetry(
    imei: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
):
    service = get_telemetry_service()
    return await service.get_telemetry(imei or "", start or "", end or "")
