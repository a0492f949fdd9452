"""Admin analytics."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bastadental.models import User
from bastadental.models.user import ROLE_ADMIN
from bastadental.routers.deps import require_roles
from bastadental.routers.responses import AnalyticsEnvelope
from bastadental.services.analytics import build_report
from bastadental.services.db import get_db

router = APIRouter()


@router.get("", response_model=AnalyticsEnvelope)
def get_analytics(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(ROLE_ADMIN)),
) -> AnalyticsEnvelope:
    return AnalyticsEnvelope(**build_report(db, start_date, end_date))
