"""
FastAPI boundary for the synthesis service.

Handlers are thin: validate input (pydantic), call ``HealthDataService``,
shape the JSON. Validation failures become 400s naming the offending fields,
expected absences become 404s, and anything unexpected is logged and reported
as a generic 500 without taking the process down.
"""

import asyncio
import contextlib
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from adapters.http.keepalive import run_keepalive
from adapters.storage.json_store import JsonFileHistoryStore
from vitalsim.config import AppConfig
from vitalsim.domain.errors import InputValidationError, InternalError
from vitalsim.domain.models import GlucosePredictionRequest, RawSensorReading
from vitalsim.domain.reports import GLUCOSE_DISCLAIMERS
from vitalsim.services.health_data import HealthDataService

logger = structlog.get_logger(__name__)

AVAILABLE_ENDPOINTS = [
    "GET /health",
    "POST /api/sensor-data",
    "GET /api/sensor-data",
    "GET /api/sensor-data/device/:deviceId",
    "GET /api/sensor-data/export/csv",
    "DELETE /api/sensor-data",
    "POST /api/predict-glucose",
    "GET /api/health-data/:deviceId",
]


def _field_name(loc: tuple[Any, ...]) -> str:
    names = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(names) if names else "body"


def _validation_payload(errors: list[dict[str, Any]]) -> dict[str, Any]:
    missing = [_field_name(tuple(e["loc"])) for e in errors if e.get("type") == "missing"]
    invalid = [
        {"field": _field_name(tuple(e["loc"])), "message": e.get("msg", "invalid value")}
        for e in errors
        if e.get("type") != "missing"
    ]
    payload: dict[str, Any] = {
        "error": "Missing required fields" if missing else "Invalid request",
    }
    if missing:
        payload["missingFields"] = missing
    if invalid:
        payload["invalidFields"] = invalid
    return payload


def _service(request: Request) -> HealthDataService:
    return request.app.state.service


def create_app(config: AppConfig, service: HealthDataService | None = None) -> FastAPI:
    """Build the application around ``service`` (or one wired from ``config``)."""
    if service is None:
        store = JsonFileHistoryStore(
            config.storage.data_file,
            flush_every=config.storage.flush_every,
            max_records=config.storage.max_records,
        )
        service = HealthDataService.from_config(config, store)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        loaded = service.store.load()
        logger.info("server_started", records_loaded=loaded, environment=config.environment)

        keepalive: asyncio.Task[None] | None = None
        if config.api.keepalive_url:
            keepalive = asyncio.create_task(
                run_keepalive(config.api.keepalive_url, config.api.keepalive_interval_seconds)
            )
        try:
            yield
        finally:
            if keepalive is not None:
                keepalive.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await keepalive
            saved = service.flush()
            logger.info("server_stopped", history_saved=saved, total_records=len(service.store))

    app = FastAPI(title="vitalsim", version="0.1.0", lifespan=lifespan)
    app.state.service = service
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---- error boundary ----

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        payload = _validation_payload(list(exc.errors()))
        logger.info("request_rejected", path=request.url.path, **payload)
        return JSONResponse(status_code=400, content=jsonable_encoder(payload))

    @app.exception_handler(InputValidationError)
    async def input_validation_handler(
        request: Request, exc: InputValidationError
    ) -> JSONResponse:
        logger.info("request_rejected", path=request.url.path, error=exc.message)
        return JSONResponse(
            status_code=400, content={"error": exc.message, "invalidFields": exc.fields}
        )

    @app.exception_handler(InternalError)
    async def internal_error_handler(request: Request, exc: InternalError) -> JSONResponse:
        logger.exception("request_failed", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "message": "Request could not be completed"},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unexpected_request_error", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=500,
            content={"error": "Something went wrong!", "message": "Request could not be completed"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return JSONResponse(
                status_code=404,
                content={"error": "Endpoint not found", "availableEndpoints": AVAILABLE_ENDPOINTS},
            )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    # ---- routes ----

    @app.get("/health")
    def health(request: Request) -> dict[str, Any]:
        state = _service(request).status()
        return {
            "status": "OK",
            "timestamp": state["timestamp"],
            "totalRecords": state["totalRecords"],
            "uptime": state["uptime"],
            "glucoseSimulation": "enabled",
            "healthySimulation": True,
        }

    @app.post("/api/sensor-data", status_code=status.HTTP_201_CREATED)
    def receive_sensor_data(request: Request, reading: RawSensorReading) -> dict[str, Any]:
        result = _service(request).ingest(reading)
        stored = result.reading
        return {
            "success": True,
            "message": "Data received and converted to healthy values",
            "recordId": stored.id,
            "totalRecords": result.total_records,
            "simulatedHealthy": True,
            "healthyValues": {
                "heartRate": stored.heart_rate,
                "spo2": stored.spo2,
                "temperature": stored.temperature,
                "red": stored.red,
                "ir": stored.ir,
                "glucose": stored.last_glucose,
            },
            "originalValues": (
                stored.original_values.model_dump(by_alias=True)
                if stored.original_values
                else None
            ),
        }

    @app.get("/api/sensor-data")
    def list_sensor_data(
        request: Request,
        limit: int = Query(default=100, ge=0),
        offset: int = Query(default=0, ge=0),
        device_id: str | None = Query(default=None, alias="deviceId"),
        start_date: str | None = Query(default=None, alias="startDate"),
        end_date: str | None = Query(default=None, alias="endDate"),
        valid_only: bool = Query(default=False, alias="validOnly"),
    ) -> dict[str, Any]:
        page = _service(request).list_readings(
            device_id=device_id,
            start_date=start_date,
            end_date=end_date,
            valid_only=valid_only,
            limit=limit,
            offset=offset,
        )
        return {
            "success": True,
            "data": page.data,
            "pagination": {
                "total": page.total,
                "limit": page.limit,
                "offset": page.offset,
                "hasMore": page.has_more,
            },
            "filters": page.filters,
            "simulatedHealthy": True,
        }

    @app.get("/api/sensor-data/device/{device_id}")
    def device_sensor_data(
        request: Request, device_id: str, limit: int = Query(default=50, ge=0)
    ) -> dict[str, Any]:
        data = _service(request).device_readings(device_id, limit=limit)
        return {
            "success": True,
            "deviceId": device_id,
            "data": data,
            "totalRecords": len(data),
            "simulatedHealthy": True,
        }

    @app.get("/api/sensor-data/export/csv", response_model=None)
    def export_csv(
        request: Request, device_id: str | None = Query(default=None, alias="deviceId")
    ) -> Response:
        service = _service(request)
        result = service.export_csv(device_id)
        if result.is_err():
            return JSONResponse(status_code=404, content={"error": result.unwrap_err().message})

        stamp = int(service.clock.now().timestamp() * 1000)
        return Response(
            content=result.unwrap(),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="sensor_data_{stamp}.csv"'},
        )

    @app.delete("/api/sensor-data")
    def delete_sensor_data(
        request: Request, device_id: str | None = Query(default=None, alias="deviceId")
    ) -> dict[str, Any]:
        outcome = _service(request).delete_readings(device_id)
        if device_id:
            message = f"Deleted {outcome.deleted} records for device {device_id}"
        else:
            message = "All sensor data cleared"
        return {"success": True, "message": message, "remainingRecords": outcome.remaining}

    @app.post("/api/predict-glucose")
    def predict_glucose(request: Request, body: GlucosePredictionRequest) -> dict[str, Any]:
        result = _service(request).predict_glucose(body)
        return {
            "success": True,
            "timestamp": result.timestamp,
            "deviceId": result.device_id,
            "input": result.inputs,
            "prediction": result.prediction.model_dump(by_alias=True, mode="json"),
            "simulatedGlucose": True,
            "disclaimers": GLUCOSE_DISCLAIMERS,
        }

    @app.get("/api/health-data/{device_id}", response_model=None)
    def health_data(
        request: Request,
        device_id: str,
        include_history: bool = Query(default=False, alias="includeHistory"),
        history_limit: int = Query(default=10, ge=0, alias="historyLimit"),
    ) -> dict[str, Any] | JSONResponse:
        result = _service(request).health_view(
            device_id, include_history=include_history, history_limit=history_limit
        )
        if result.is_err():
            error = result.unwrap_err()
            return JSONResponse(
                status_code=404,
                content={
                    "error": "No sensor data found",
                    "message": error.message,
                    "deviceId": device_id,
                },
            )
        return result.unwrap().to_payload()

    return app
