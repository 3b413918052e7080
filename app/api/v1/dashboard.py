"""
Dashboard API endpoint
"""
from datetime import date, time
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_user
from app.application.dashboard import DashboardService
from app.config import get_settings
from app.infrastructure.db.models import User
from app.utils.dates import local_today


router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


class UpcomingSession(BaseModel):
    id: str
    client_id: str
    client_name: str
    session_date: date
    session_time: time
    status: str


class DashboardResponse(BaseModel):
    total_clients: int
    scheduled_sessions: int
    active_packages: int
    completed_sessions: int
    upcoming: list[UpcomingSession]


@router.get("/", response_model=DashboardResponse)
def get_dashboard(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Сводка практики: счётчики и ближайшие сессии"""
    today = local_today(ZoneInfo(get_settings().TIMEZONE))
    overview = DashboardService(db).get_overview(user.id, today)
    return DashboardResponse(
        **{k: v for k, v in overview.items() if k != "upcoming"},
        upcoming=[UpcomingSession(**item) for item in overview["upcoming"]],
    )
