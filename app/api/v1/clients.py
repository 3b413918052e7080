"""
Client API endpoints (records, board with stats, burn history)
"""
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_user
from app.api.v1.packages import PackageResponse, BurnRequest, BurnResponse, burn_response
from app.application.clients import (
    CreateClientUseCase, UpdateClientUseCase, DeleteClientUseCase, get_owned_client,
)
from app.application.clients_board import ClientsBoardService
from app.application.errors import NotFoundError, ValidationError
from app.application.packages import BurnCurrentSessionUseCase
from app.infrastructure.db.models import User


router = APIRouter(prefix="/api/v1/clients", tags=["clients"])


# === Request/Response models ===

class CreateClientRequest(BaseModel):
    full_name: str
    rut: str | None = None
    email: str | None = None
    phone: str | None = None
    notes: str | None = None
    birth_date: date | None = None
    gender: str | None = None


class UpdateClientRequest(BaseModel):
    full_name: str | None = None
    rut: str | None = None
    email: str | None = None
    phone: str | None = None
    notes: str | None = None
    birth_date: date | None = None
    gender: str | None = None
    status: str | None = None  # new, active, inactive


class ClientResponse(BaseModel):
    id: str
    full_name: str
    rut: str | None
    email: str | None
    phone: str | None
    notes: str | None
    birth_date: date | None
    gender: str | None
    status: str
    created_at: datetime


class ClientStatsResponse(BaseModel):
    status_tag: str
    computed_status: str  # active, inactive
    is_new: bool
    current_package: PackageResponse | None
    queued_packages: list[PackageResponse]
    packages_count: int
    active_packages_count: int
    queued_count: int
    sessions_total: int
    sessions_used: int
    sessions_remaining: int
    progress_percent: int
    expiry_date: date | None
    package_expired: bool
    age: int | None
    scheduled_pending: int
    consumed_count: int


class ClientCardResponse(BaseModel):
    client: ClientResponse
    stats: ClientStatsResponse


class ScheduledSessionItem(BaseModel):
    id: str
    package_id: str | None
    session_date: date
    session_time: str
    status: str


class ClientDetailResponse(ClientCardResponse):
    packages: list[PackageResponse]
    scheduled_sessions: list[ScheduledSessionItem]
    last_burns: list[BurnResponse]


class BurnHistoryGroup(BaseModel):
    day: date
    sessions: list[BurnResponse]


class BurnHistoryResponse(BaseModel):
    total: int
    total_pages: int
    page: int
    page_size: int
    groups: list[BurnHistoryGroup]


# === Helpers ===

def _client_response(c) -> ClientResponse:
    return ClientResponse(
        id=c.id,
        full_name=c.full_name,
        rut=c.rut,
        email=c.email,
        phone=c.phone,
        notes=c.notes,
        birth_date=c.birth_date,
        gender=c.gender,
        status=c.status,
        created_at=c.created_at,
    )


def _stats_response(s) -> ClientStatsResponse:
    return ClientStatsResponse(
        status_tag=s.status_tag,
        computed_status=s.computed_status,
        is_new=s.is_new,
        current_package=PackageResponse.from_row(s.current_package) if s.current_package else None,
        queued_packages=[PackageResponse.from_row(p) for p in s.queued_packages],
        packages_count=s.packages_count,
        active_packages_count=s.active_packages_count,
        queued_count=s.queued_count,
        sessions_total=s.sessions_total,
        sessions_used=s.sessions_used,
        sessions_remaining=s.sessions_remaining,
        progress_percent=s.progress_percent,
        expiry_date=s.expiry_date,
        package_expired=s.package_expired,
        age=s.age,
        scheduled_pending=s.scheduled_pending,
        consumed_count=s.consumed_count,
    )


# === Endpoints ===

@router.get("/", response_model=list[ClientCardResponse])
def list_clients(
    q: str | None = None,
    status: str = "all",
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Доска клиентов: все клиенты со статистикой (поиск по имени/RUT, фильтр)"""
    try:
        cards = ClientsBoardService(db).list_board(user.id, search=q, status_filter=status)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return [
        ClientCardResponse(client=_client_response(c["client"]), stats=_stats_response(c["stats"]))
        for c in cards
    ]


@router.post("/", response_model=ClientResponse)
def create_client(
    req: CreateClientRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Создать клиента"""
    try:
        client_id = CreateClientUseCase(db).execute(account_id=user.id, **req.model_dump())
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _client_response(get_owned_client(db, client_id, user.id))


@router.get("/{client_id}", response_model=ClientDetailResponse)
def get_client(
    client_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Карточка клиента с пакетами, сессиями и последними списаниями"""
    try:
        detail = ClientsBoardService(db).get_client_detail(user.id, client_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    stats = detail["stats"]
    return ClientDetailResponse(
        client=_client_response(detail["client"]),
        stats=_stats_response(stats),
        packages=[PackageResponse.from_row(p) for p in detail["packages"]],
        scheduled_sessions=[
            ScheduledSessionItem(
                id=s.id,
                package_id=s.package_id,
                session_date=s.session_date,
                session_time=s.session_time.strftime("%H:%M"),
                status=s.status,
            )
            for s in detail["scheduled_sessions"]
        ],
        last_burns=[BurnResponse.from_row(b) for b in stats.last_burns],
    )


@router.patch("/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: str,
    req: UpdateClientRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Обновить клиента (только переданные поля)"""
    try:
        UpdateClientUseCase(db).execute(client_id, user.id, **req.model_dump(exclude_unset=True))
        client = get_owned_client(db, client_id, user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _client_response(client)


@router.delete("/{client_id}")
def delete_client(
    client_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Удалить клиента вместе с пакетами и сессиями"""
    try:
        deleted = DeleteClientUseCase(db).execute(client_id, user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"status": "deleted", "deleted": deleted}


@router.post("/{client_id}/burn", response_model=BurnResponse)
def burn_current_session(
    client_id: str,
    req: BurnRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Сжечь сессию с текущего пакета клиента"""
    try:
        consumed_id = BurnCurrentSessionUseCase(db).execute(
            client_id, user.id, note=req.note, origin=req.origin
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return burn_response(db, consumed_id)


@router.get("/{client_id}/burns", response_model=BurnHistoryResponse)
def burn_history(
    client_id: str,
    day: date | None = None,
    page: int = 1,
    page_size: int | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """История сожжённых сессий (фильтр по дню, постранично)"""
    try:
        history = ClientsBoardService(db).get_burn_history(
            user.id, client_id, on_date=day, page=page, page_size=page_size
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return BurnHistoryResponse(
        total=history["total"],
        total_pages=history["total_pages"],
        page=history["page"],
        page_size=history["page_size"],
        groups=[
            BurnHistoryGroup(day=g["day"], sessions=[BurnResponse.from_row(s) for s in g["sessions"]])
            for g in history["groups"]
        ],
    )
