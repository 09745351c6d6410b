"""
Report endpoints.

``/dashboard`` returns the overview counters; the other routes return
date-filtered listings as ``{data, count}``.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...core.db import Database, get_db
from ...core.security import get_current_user
from ...schemas.common import envelope
from ...services.report_service import ReportService

router = APIRouter()


def _report(data: list) -> dict:
    body = envelope(data)
    body["count"] = len(data)
    return body


@router.get("/dashboard")
async def dashboard(
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    return envelope(await ReportService.dashboard(db))


@router.get("/orders")
async def orders_report(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    status: Optional[str] = Query(None),
    source: Optional[str] = Query(None),
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    return _report(
        await ReportService.entity_report(
            db, "orders", start_date, end_date, status=status, source=source
        )
    )


@router.get("/services")
async def services_report(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    status: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    return _report(
        await ReportService.entity_report(
            db, "services", start_date, end_date, status=status, category=category
        )
    )


@router.get("/tasks")
async def tasks_report(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    return _report(
        await ReportService.entity_report(
            db, "tasks", start_date, end_date, type=type, status=status, priority=priority
        )
    )


@router.get("/customers")
async def customers_report(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    source: Optional[str] = Query(None),
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    return _report(
        await ReportService.entity_report(db, "customers", start_date, end_date, source=source)
    )


@router.get("/products")
async def products_report(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    category: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    db: Database = Depends(get_db),
    current_user: dict = Depends(get_current_user),
) -> dict:
    return _report(
        await ReportService.entity_report(
            db, "products", start_date, end_date, category=category, status=status
        )
    )
