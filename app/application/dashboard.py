"""
Dashboard - practice overview for the home page.

Pure read-layer: no mutations. Provides:
  1. Counters (clients, scheduled sessions, active packages, completed sessions)
  2. Upcoming scheduled sessions
"""
from datetime import date

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.config import get_settings
from app.domain.scheduled_session import SESSION_STATUS_COMPLETED, SESSION_STATUS_SCHEDULED
from app.domain.session_package import PACKAGE_STATUS_ACTIVE
from app.infrastructure.db.models import ClientModel, ScheduledSessionModel, SessionPackageModel


class DashboardService:
    def __init__(self, db: Session):
        self.db = db

    def get_overview(self, account_id: int, today: date, limit: int | None = None) -> dict:
        """
        Returns:
            total_clients, scheduled_sessions, active_packages,
            completed_sessions: int
            upcoming: list[item] - ближайшие запланированные сессии (>= today)
        """
        return {
            **self.get_counters(account_id),
            "upcoming": self.get_upcoming_sessions(account_id, today, limit),
        }

    def get_counters(self, account_id: int) -> dict:
        total_clients = self.db.query(func.count(ClientModel.id)).filter(
            ClientModel.account_id == account_id,
        ).scalar() or 0
        scheduled = self._count_sessions(account_id, SESSION_STATUS_SCHEDULED)
        completed = self._count_sessions(account_id, SESSION_STATUS_COMPLETED)
        active_packages = self.db.query(func.count(SessionPackageModel.id)).filter(
            SessionPackageModel.account_id == account_id,
            SessionPackageModel.status == PACKAGE_STATUS_ACTIVE,
        ).scalar() or 0

        return {
            "total_clients": total_clients,
            "scheduled_sessions": scheduled,
            "active_packages": active_packages,
            "completed_sessions": completed,
        }

    def get_upcoming_sessions(self, account_id: int, today: date, limit: int | None = None) -> list[dict]:
        limit = limit or get_settings().UPCOMING_SESSIONS_LIMIT
        rows = (
            self.db.query(ScheduledSessionModel, ClientModel.full_name)
            .join(ClientModel, ClientModel.id == ScheduledSessionModel.client_id)
            .filter(
                ScheduledSessionModel.account_id == account_id,
                ScheduledSessionModel.status == SESSION_STATUS_SCHEDULED,
                ScheduledSessionModel.session_date >= today,
            )
            .order_by(ScheduledSessionModel.session_date.asc(), ScheduledSessionModel.session_time.asc())
            .limit(limit)
            .all()
        )
        return [
            {
                "id": s.id,
                "client_id": s.client_id,
                "client_name": full_name,
                "session_date": s.session_date,
                "session_time": s.session_time,
                "status": s.status,
            }
            for s, full_name in rows
        ]

    def _count_sessions(self, account_id: int, status: str) -> int:
        return self.db.query(func.count(ScheduledSessionModel.id)).filter(
            ScheduledSessionModel.account_id == account_id,
            ScheduledSessionModel.status == status,
        ).scalar() or 0
