import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from nejiba.config import settings
from nejiba.db.models import SavedWorkshop
from nejiba.db.session import get_db_session
from nejiba.observability import log_event, validation_fields
from nejiba.schemas.workshop import (
    StoredWorkshop,
    ValidateRequest,
    ValidationResult,
    WorkshopListItem,
    WorkshopMetadata,
    WorkshopSaveRequest,
    WorkshopUpdateRequest,
)
from nejiba.services.normalizer import normalize_workshop_plan
from nejiba.services.taxonomy import PlanRules
from nejiba.services.validator import validate_workshop_json
from nejiba.services.workshop_store import (
    InvalidWorkshopError,
    clear_workshops,
    count_workshops,
    delete_workshop,
    get_workshop,
    list_workshops,
    save_workshop,
    update_workshop,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/workshops", tags=["workshops"])


def get_plan_rules() -> PlanRules:
    return PlanRules(strict_taxonomy=settings.strict_taxonomy)


def _metadata(workshop: SavedWorkshop) -> WorkshopMetadata:
    return WorkshopMetadata(
        created_at=workshop.created_at,
        source=workshop.source,
        imported_from=workshop.imported_from,
        last_modified=workshop.last_modified,
        topic=workshop.topic,
        duration=workshop.duration,
        age_range=workshop.age_range,
    )


def _stored(workshop: SavedWorkshop) -> StoredWorkshop:
    return StoredWorkshop(id=workshop.id, plan=workshop.plan, metadata=_metadata(workshop))


def _unprocessable(e: InvalidWorkshopError) -> HTTPException:
    return HTTPException(status_code=422, detail=e.result.model_dump(by_alias=True))


@router.post("/validate", response_model=ValidationResult)
async def validate_workshop(req: ValidateRequest, rules: PlanRules = Depends(get_plan_rules)):
    raw = req.json_text if req.json_text is not None else req.plan
    result = validate_workshop_json(raw, rules)
    log_event(
        logger,
        logging.INFO,
        "workshop_validated",
        input="text" if req.json_text is not None else "plan",
        **validation_fields(result),
    )
    return result


@router.post("/normalize", response_model=dict)
async def normalize_workshop(plan: dict):
    return normalize_workshop_plan(plan)


@router.post("", response_model=StoredWorkshop)
async def create_workshop(
    req: WorkshopSaveRequest,
    rules: PlanRules = Depends(get_plan_rules),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        workshop = await save_workshop(db, req.plan, req.source, req.imported_from, rules)
    except InvalidWorkshopError as e:
        raise _unprocessable(e)
    return _stored(workshop)


@router.get("", response_model=list[WorkshopListItem])
async def list_saved_workshops(
    search: str | None = None,
    db: AsyncSession = Depends(get_db_session),
):
    workshops = await list_workshops(db, search)
    return [WorkshopListItem(id=w.id, metadata=_metadata(w)) for w in workshops]


@router.get("/count", response_model=dict)
async def count_saved_workshops(db: AsyncSession = Depends(get_db_session)):
    return {"count": await count_workshops(db)}


@router.delete("", response_model=dict)
async def clear_saved_workshops(db: AsyncSession = Depends(get_db_session)):
    return {"deleted": await clear_workshops(db)}


@router.get("/{workshop_id}", response_model=StoredWorkshop)
async def get_saved_workshop(workshop_id: str, db: AsyncSession = Depends(get_db_session)):
    workshop = await get_workshop(db, workshop_id)
    if not workshop:
        raise HTTPException(status_code=404, detail="Workshop not found")
    return _stored(workshop)


@router.put("/{workshop_id}", response_model=StoredWorkshop)
async def update_saved_workshop(
    workshop_id: str,
    req: WorkshopUpdateRequest,
    rules: PlanRules = Depends(get_plan_rules),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        workshop = await update_workshop(db, workshop_id, req.plan, rules)
    except InvalidWorkshopError as e:
        raise _unprocessable(e)
    if not workshop:
        raise HTTPException(status_code=404, detail="Workshop not found")
    return _stored(workshop)


@router.delete("/{workshop_id}", response_model=dict)
async def delete_saved_workshop(workshop_id: str, db: AsyncSession = Depends(get_db_session)):
    if not await delete_workshop(db, workshop_id):
        raise HTTPException(status_code=404, detail="Workshop not found")
    return {"deleted": True}
