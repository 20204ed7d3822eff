from typing import Annotated

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from diet_tracker.core.db import get_db_session
from diet_tracker.models.schemas import (
    DietLogCreate,
    DietLogDeleteResponse,
    DietLogListResponse,
    DietLogRead,
    DietLogResponse,
    DietLogUpdate,
    ErrorResponse,
)
from diet_tracker.services import diet_log_service

router = APIRouter()

# diet_logs.id is SERIAL (int4).
MAX_ENTRY_ID = 2_147_483_647
EntryId = Annotated[int, Path(ge=1, le=MAX_ENTRY_ID, description="Diet log id")]

_errors = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}
_errors_with_404 = {**_errors, 404: {"model": ErrorResponse}}


@router.get("/{user_id}", response_model=DietLogListResponse, responses=_errors, summary="List a user's diet logs")
async def list_diet_logs(user_id: str, db: AsyncSession = Depends(get_db_session)):
    """All entries for ``user_id``, newest ``loggedAt`` first."""
    entries = await diet_log_service.list_for_user(db, user_id)
    return DietLogListResponse(data=[DietLogRead.model_validate(e) for e in entries])


@router.post(
    "",
    response_model=DietLogResponse,
    status_code=201,
    responses=_errors,
    summary="Create a diet log",
)
async def create_diet_log(payload: DietLogCreate, db: AsyncSession = Depends(get_db_session)):
    entry = await diet_log_service.create_entry(db, payload)
    return DietLogResponse(data=DietLogRead.model_validate(entry))


@router.put("/{entry_id}", response_model=DietLogResponse, responses=_errors_with_404, summary="Update a diet log")
async def update_diet_log(entry_id: EntryId, payload: DietLogUpdate, db: AsyncSession = Depends(get_db_session)):
    entry = await diet_log_service.update_entry(db, entry_id, payload)
    return DietLogResponse(data=DietLogRead.model_validate(entry))


@router.delete(
    "/{entry_id}", response_model=DietLogDeleteResponse, responses=_errors_with_404, summary="Delete a diet log"
)
async def delete_diet_log(entry_id: EntryId, db: AsyncSession = Depends(get_db_session)):
    entry = await diet_log_service.delete_entry(db, entry_id)
    return DietLogDeleteResponse(data=DietLogRead.model_validate(entry))
