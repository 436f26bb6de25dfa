import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from telemetry_api.api import telemetry
from telemetry_api.config.settings import get_settings
from telemetry_api.core.errors import ConfigurationError, UpstreamQueryError
from telemetry_api.middleware.request_log import RequestLogMiddleware
from telemetry_api.services.telemetry_service import get_telemetry_service

settings = get_settings()

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    service = get_telemetry_service()
    await service.initialize()
    logger.info(
        "Telemetry API started (influx=%s bucket=%s)",
        settings.influx_url,
        settings.influx_bucket,
    )
    yield
    await service.close()
    logger.info("Telemetry API stopped")


app = FastAPI(title="Telemetry API", version="1.0.0", lifespan=lifespan)

app.add_middleware(RequestLogMiddleware)

app.include_router(telemetry.router, prefix="/api", tags=["telemetry"])


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "telemetry-api"}


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error("Server misconfigured: %s", exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(UpstreamQueryError)
async def upstream_error_handler(request: Request, exc: UpstreamQueryError):
    return JSONResponse(status_code=500, content={"error": str(exc)})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("telemetry_api.main:app", host=settings.host, port=settings.port)
