"""
Session package API endpoints (create, burn, extend, delete)
"""
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_user
from app.application.errors import NotFoundError, ValidationError
from app.application.packages import (
    BURN_ORIGIN_MANUAL,
    BurnSessionUseCase,
    CreatePackageUseCase,
    DeletePackageUseCase,
    ExtendPackageExpiryUseCase,
)
from app.domain.session_package import sessions_remaining
from app.infrastructure.db.models import ClientModel, ConsumedSessionModel, SessionPackageModel, User


router = APIRouter(prefix="/api/v1/packages", tags=["packages"])


# === Request/Response models ===

class CreatePackageRequest(BaseModel):
    client_id: str
    total_sessions: int
    start_date: date | None = None
    expiry_date: date | None = None


class BurnRequest(BaseModel):
    note: str | None = None
    origin: str | None = BURN_ORIGIN_MANUAL


class BurnPackageRequest(BurnRequest):
    client_id: str


class ExtendExpiryRequest(BaseModel):
    expiry_date: date | None = None


class PackageResponse(BaseModel):
    id: str
    client_id: str
    client_name: str | None = None
    total_sessions: int
    used_sessions: int
    remaining_sessions: int
    status: str  # active, completed
    start_date: date | None
    expiry_date: date | None

    @classmethod
    def from_row(cls, p, client_name: str | None = None) -> "PackageResponse":
        return cls(
            id=p.id,
            client_id=p.client_id,
            client_name=client_name,
            total_sessions=p.total_sessions,
            used_sessions=p.used_sessions,
            remaining_sessions=sessions_remaining(p.used_sessions, p.total_sessions),
            status=p.status,
            start_date=p.start_date,
            expiry_date=p.expiry_date,
        )


class BurnResponse(BaseModel):
    id: str
    client_id: str
    package_id: str
    consumed_at: datetime
    note: str | None
    origin: str | None

    @classmethod
    def from_row(cls, s) -> "BurnResponse":
        return cls(
            id=s.id,
            client_id=s.client_id,
            package_id=s.package_id,
            consumed_at=s.consumed_at,
            note=s.note,
            origin=s.origin,
        )


def burn_response(db: Session, consumed_id: str) -> BurnResponse:
    return BurnResponse.from_row(db.get(ConsumedSessionModel, consumed_id))


# === Endpoints ===

@router.get("/", response_model=list[PackageResponse])
def list_packages(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Все пакеты аккаунта (новые первыми) с именем клиента"""
    rows = (
        db.query(SessionPackageModel, ClientModel.full_name)
        .join(ClientModel, ClientModel.id == SessionPackageModel.client_id)
        .filter(SessionPackageModel.account_id == user.id)
        .order_by(SessionPackageModel.created_at.desc())
        .all()
    )
    return [PackageResponse.from_row(p, client_name=name) for p, name in rows]


@router.post("/", response_model=PackageResponse)
def create_package(
    req: CreatePackageRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Создать пакет сессий"""
    try:
        package_id = CreatePackageUseCase(db).execute(
            account_id=user.id,
            client_id=req.client_id,
            total_sessions=req.total_sessions,
            start_date=req.start_date,
            expiry_date=req.expiry_date,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return PackageResponse.from_row(db.get(SessionPackageModel, package_id))


@router.post("/{package_id}/burn", response_model=BurnResponse)
def burn_session(
    package_id: str,
    req: BurnPackageRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Сжечь сессию с конкретного пакета"""
    try:
        consumed_id = BurnSessionUseCase(db).execute(
            package_id=package_id,
            client_id=req.client_id,
            account_id=user.id,
            note=req.note,
            origin=req.origin,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return burn_response(db, consumed_id)


@router.patch("/{package_id}/expiry", response_model=PackageResponse)
def extend_expiry(
    package_id: str,
    req: ExtendExpiryRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Продлить пакет (новая дата окончания)"""
    try:
        ExtendPackageExpiryUseCase(db).execute(package_id, user.id, req.expiry_date)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return PackageResponse.from_row(db.get(SessionPackageModel, package_id))


@router.delete("/{package_id}")
def delete_package(
    package_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Удалить пакет вместе с его сессиями"""
    try:
        deleted = DeletePackageUseCase(db).execute(package_id, user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"status": "deleted", "deleted": deleted}
