"""
Tables router.
Table status and availability queries.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    AllTablesStatusOutput,
    ImmediateOrderOutput,
    TableAvailabilityOutput,
    TableOutput,
    TableSearchOutput,
    TableSearchRequest,
    TableStatusOutput,
    UpdateTableStatusRequest,
)
from rest_api.services.domain import AvailabilityService, TableService
from rest_api.services.domain.availability_service import build_table_output


router = APIRouter(prefix="/api/tables", tags=["tables"])


@router.get("/status", response_model=AllTablesStatusOutput)
def all_tables_status(db: Session = Depends(get_db)) -> AllTablesStatusOutput:
    """Every table by number with its derived availability."""
    return AvailabilityService(db).get_all_tables_status()


@router.post("/availability/search", response_model=TableSearchOutput)
def search_available_tables(
    body: TableSearchRequest,
    db: Session = Depends(get_db),
) -> TableSearchOutput:
    """
    Find tables that seat the party and are free for the window.

    ``reservation_time`` defaults to now, ``duration_minutes`` to the
    configured sitting length.
    """
    service = AvailabilityService(db)
    start, duration = service.resolve_window(body.reservation_time, body.duration_minutes)
    tables = service.find_available_tables(body.party_size, start, duration)
    return TableSearchOutput(
        available_tables=[build_table_output(t) for t in tables],
        count=len(tables),
        party_size=body.party_size,
        reservation_time=start,
        duration_minutes=duration,
    )


@router.get("/availability/{table_id}", response_model=TableAvailabilityOutput)
def check_table_availability(
    table_id: int,
    at: datetime | None = Query(default=None, alias="datetime", description="Start of the window (default now)"),
    duration: int | None = Query(default=None, ge=1, description="Window length in minutes"),
    db: Session = Depends(get_db),
) -> TableAvailabilityOutput:
    return AvailabilityService(db).check_table_availability(table_id, at, duration)


@router.get("/availability/{table_id}/immediate", response_model=ImmediateOrderOutput)
def immediate_order_check(table_id: int, db: Session = Depends(get_db)) -> ImmediateOrderOutput:
    """Can a walk-in order be placed at this table right now?"""
    return AvailabilityService(db).can_accept_immediate_order(table_id)


@router.get("/{table_id}/status", response_model=TableStatusOutput)
def table_status(table_id: int, db: Session = Depends(get_db)) -> TableStatusOutput:
    return AvailabilityService(db).get_table_status(table_id)


@router.patch("/{table_id}/status", response_model=TableOutput)
def update_table_status(
    table_id: int,
    body: UpdateTableStatusRequest,
    db: Session = Depends(get_db),
) -> TableOutput:
    """Manual status override (e.g. mark a table reserved)."""
    table = TableService(db).update_status(table_id, body.status)
    return build_table_output(table)
