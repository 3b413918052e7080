"""
Scheduled session API endpoints
"""
from datetime import date, time

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_user
from app.application.errors import NotFoundError, ValidationError
from app.application.sessions import (
    DeleteSessionUseCase,
    ScheduleSessionUseCase,
    UpdateSessionStatusUseCase,
)
from app.infrastructure.db.models import ClientModel, ScheduledSessionModel, User


router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


# === Request/Response models ===

class ScheduleSessionRequest(BaseModel):
    client_id: str
    package_id: str | None = None
    session_date: date
    session_time: time


class UpdateStatusRequest(BaseModel):
    status: str  # completed, cancelled


class SessionResponse(BaseModel):
    id: str
    client_id: str
    client_name: str | None = None
    package_id: str | None
    session_date: date
    session_time: time
    status: str


def _session_response(s, client_name: str | None = None) -> SessionResponse:
    return SessionResponse(
        id=s.id,
        client_id=s.client_id,
        client_name=client_name,
        package_id=s.package_id,
        session_date=s.session_date,
        session_time=s.session_time,
        status=s.status,
    )


# === Endpoints ===

@router.get("/", response_model=list[SessionResponse])
def list_sessions(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Все сессии аккаунта, новые первыми"""
    rows = (
        db.query(ScheduledSessionModel, ClientModel.full_name)
        .join(ClientModel, ClientModel.id == ScheduledSessionModel.client_id)
        .filter(ScheduledSessionModel.account_id == user.id)
        .order_by(ScheduledSessionModel.session_date.desc(), ScheduledSessionModel.session_time.desc())
        .all()
    )
    return [_session_response(s, client_name=name) for s, name in rows]


@router.post("/", response_model=SessionResponse)
def schedule_session(
    req: ScheduleSessionRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Запланировать сессию (опционально по пакету)"""
    try:
        session_id = ScheduleSessionUseCase(db).execute(
            account_id=user.id,
            client_id=req.client_id,
            session_date=req.session_date,
            session_time=req.session_time,
            package_id=req.package_id,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _session_response(db.get(ScheduledSessionModel, session_id))


@router.patch("/{session_id}/status", response_model=SessionResponse)
def update_session_status(
    session_id: str,
    req: UpdateStatusRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Отметить сессию проведённой или отменённой"""
    try:
        UpdateSessionStatusUseCase(db).execute(session_id, user.id, req.status)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _session_response(db.get(ScheduledSessionModel, session_id))


@router.delete("/{session_id}")
def delete_session(
    session_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Удалить сессию"""
    try:
        DeleteSessionUseCase(db).execute(session_id, user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"status": "deleted"}
