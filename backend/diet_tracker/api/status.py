import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from diet_tracker import __version__
from diet_tracker.core.db import Database, get_database
from diet_tracker.models.diet_log import DietLog
from diet_tracker.models.schemas import StatusResponse, TableCheckResponse, utc_iso

router = APIRouter()
logger = logging.getLogger(__name__)

RUNNING_MESSAGE = "Diet Tracker API is running"


def _status() -> StatusResponse:
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return StatusResponse(message=RUNNING_MESSAGE, timestamp=utc_iso(now))


@router.get("/", response_model=StatusResponse, summary="Service status")
async def root():
    return _status()


@router.get("/app", response_model=StatusResponse, summary="Service status (alias)")
async def app_status():
    return _status()


@router.get("/ping", response_class=PlainTextResponse, summary="Liveness probe")
async def ping() -> str:
    logger.info("Ping route hit")
    return "pong"


@router.get("/health", response_model=StatusResponse, summary="Health check")
async def health():
    return _status()


@router.get("/health/db", summary="Check database connection")
async def db_health(database: Database = Depends(get_database)) -> dict:
    status = await database.check_health()
    status["version"] = __version__
    return status


@router.get(
    "/drizzle-test",
    response_model=TableCheckResponse,
    responses={500: {"model": TableCheckResponse}},
    summary="Check the diet_logs table is reachable",
)
async def table_check(database: Database = Depends(get_database)):
    try:
        await database.table_exists(DietLog.__tablename__)
    except Exception as exc:
        logger.warning("diet_logs table check failed: %s", exc)
        body = TableCheckResponse(
            success=False,
            message="Database connection failed or table needs to be created",
            table_exists=False,
            error=str(exc),
        )
        return JSONResponse(status_code=500, content=body.model_dump(by_alias=True))
    return TableCheckResponse(
        success=True,
        message="Database connection working and table exists",
        table_exists=True,
    )
