"""Fitness HTTP router — upsert and lookups by date, year, month."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from app.db import get_service
from app.fitness.models import FitnessData
from app.fitness.service import FitnessService

router = APIRouter(prefix="/api/fitness", tags=["fitness"])

# Serves GET /get?date=..., kept outside the /api prefix for older clients.
raw_router = APIRouter(tags=["fitness"])

_DUMP = {"response_model_exclude_none": True}


def _not_found(record_date: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"No fitness record for {record_date}")


@router.get("", response_model=list[FitnessData], **_DUMP)
async def list_records(service: FitnessService = Depends(get_service)) -> list[FitnessData]:
    store = await service.ensure_loaded()
    return store.all()


@router.get("/all", response_model=list[FitnessData], **_DUMP)
async def list_all_records(service: FitnessService = Depends(get_service)) -> list[FitnessData]:
    store = await service.ensure_loaded()
    return store.all()


@router.get("/year/{year}", response_model=list[FitnessData], **_DUMP)
async def records_by_year(
    year: str,
    service: FitnessService = Depends(get_service),
) -> list[FitnessData]:
    store = await service.ensure_loaded()
    return store.by_year(year)


@router.get("/year/{year}/month/{month}", response_model=list[FitnessData], **_DUMP)
async def records_by_month(
    year: str,
    month: str,
    service: FitnessService = Depends(get_service),
) -> list[FitnessData]:
    store = await service.ensure_loaded()
    return store.by_month(year, month)


@router.post("", response_model=FitnessData, **_DUMP)
async def upsert_record(
    record: FitnessData,
    service: FitnessService = Depends(get_service),
) -> FitnessData:
    await service.upsert(record)
    return record


@router.get("/{record_date}", response_model=FitnessData, **_DUMP)
async def record_by_date(
    record_date: str,
    service: FitnessService = Depends(get_service),
) -> FitnessData:
    store = await service.ensure_loaded()
    record = store.get(record_date)
    if record is None:
        raise _not_found(record_date)
    return record


@raw_router.get("/get", response_model=FitnessData, **_DUMP)
async def raw_record_by_date(
    service: FitnessService = Depends(get_service),
    record_date: str | None = Query(default=None, alias="date", description="YYYY-MM-DD (default: today)"),
) -> FitnessData:
    record_date = record_date or date.today().isoformat()
    store = await service.ensure_loaded()
    record = store.get(record_date)
    if record is None:
        raise _not_found(record_date)
    return record
