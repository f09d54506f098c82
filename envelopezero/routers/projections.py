from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from envelopezero import models
from envelopezero.core.database import get_db
from envelopezero.core.deps import get_current_user
from envelopezero.schemas import CategoryProjectionOut, DashboardOut
from envelopezero.services.projection_service import ProjectionService


router = APIRouter(tags=["projections"])


@router.get("/dashboard", response_model=DashboardOut)
def dashboard(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    summary = ProjectionService(db, current_user).dashboard()
    return DashboardOut(inflow=summary.inflow, outflow=summary.outflow, available=summary.available)


@router.get("/projections/month/{month}", response_model=list[CategoryProjectionOut])
def month_projection(month: str, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    rows = ProjectionService(db, current_user).month_projection(month)
    return [
        CategoryProjectionOut(
            category_id=r.category_id,
            category_name=r.category_name,
            assigned=r.assigned,
            activity=r.activity,
            available=r.available,
        )
        for r in rows
    ]
