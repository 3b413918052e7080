"""
Client stats - derived display state of a client.

Pure derivation from raw rows: no queries, no caching. Recomputed on every
read so it can never drift from the stored packages and sessions.

Two status signals are exposed side by side and never merged:
  status_tag       - manual tag stored on the client (new/active/inactive)
  computed_status  - "active" while the client has a current package
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Iterable, Optional

from app.domain.client import CLIENT_STATUS_NEW, age_on
from app.domain.scheduled_session import SESSION_STATUS_SCHEDULED
from app.domain.session_package import (
    PACKAGE_STATUS_ACTIVE,
    select_current_active_package,
    sessions_remaining,
)
from app.utils.dates import as_utc, day_start, local_day

COMPUTED_STATUS_ACTIVE = "active"
COMPUTED_STATUS_INACTIVE = "inactive"

DEFAULT_NEW_CLIENT_DAYS = 7
LAST_BURNS_LIMIT = 3


@dataclass(frozen=True)
class ClientStats:
    client_id: str
    status_tag: str
    computed_status: str
    is_new: bool

    current_package: Optional[Any]
    queued_packages: list = field(default_factory=list)
    packages_count: int = 0
    active_packages_count: int = 0

    sessions_total: int = 0
    sessions_used: int = 0
    sessions_remaining: int = 0
    progress_percent: int = 0

    expiry_date: Optional[date] = None
    package_expired: bool = False

    age: Optional[int] = None
    scheduled_pending: int = 0
    consumed_count: int = 0
    last_burns: list = field(default_factory=list)

    @property
    def queued_count(self) -> int:
        return len(self.queued_packages)


def is_new_client(
    created_at: Optional[datetime],
    status_tag: str,
    now: datetime,
    new_client_days: int = DEFAULT_NEW_CLIENT_DAYS,
) -> bool:
    """Created within the window; without a timestamp falls back to the manual tag."""
    if created_at is None:
        return status_tag == CLIENT_STATUS_NEW
    return as_utc(now) - as_utc(created_at) <= timedelta(days=new_client_days)


def progress_percent(used: int, total: int) -> int:
    if total <= 0:
        return 0
    return min(round(used / total * 100), 100)


def is_package_expired(expiry_date: Optional[date], now: datetime, tz: tzinfo = timezone.utc) -> bool:
    """Истёк с начала дня expiry_date (00:00 в поясе tz)"""
    if expiry_date is None:
        return False
    return day_start(expiry_date, tz) < as_utc(now)


def build_client_stats(
    client,
    packages: Iterable,
    now: datetime,
    scheduled: Iterable = (),
    consumed: Iterable = (),
    new_client_days: int = DEFAULT_NEW_CLIENT_DAYS,
    tz: tzinfo = timezone.utc,
) -> ClientStats:
    """
    Собрать производное состояние клиента.

    Args:
        client: строка клиента (id, status, created_at, birth_date)
        packages: все пакеты этого клиента
        now: момент вычисления
        scheduled: запланированные сессии клиента (опционально)
        consumed: сожжённые сессии клиента (опционально)
        new_client_days: окно "нового" клиента в днях
        tz: часовой пояс практики (календарные дни: срок пакета, возраст)
    """
    packages = list(packages)
    scheduled = list(scheduled)
    consumed = list(consumed)

    selection = select_current_active_package(packages)
    current = selection.current

    total = current.total_sessions if current else 0
    used = current.used_sessions if current else 0
    expiry = current.expiry_date if current else None

    last_burns = sorted(consumed, key=lambda s: as_utc(s.consumed_at), reverse=True)[:LAST_BURNS_LIMIT]

    return ClientStats(
        client_id=client.id,
        status_tag=client.status,
        computed_status=COMPUTED_STATUS_ACTIVE if current else COMPUTED_STATUS_INACTIVE,
        is_new=is_new_client(
            getattr(client, "created_at", None), client.status, now, new_client_days
        ),
        current_package=current,
        queued_packages=list(selection.queue),
        packages_count=len(packages),
        active_packages_count=sum(1 for p in packages if p.status == PACKAGE_STATUS_ACTIVE),
        sessions_total=total,
        sessions_used=used,
        sessions_remaining=sessions_remaining(used, total),
        progress_percent=progress_percent(used, total),
        expiry_date=expiry,
        package_expired=is_package_expired(expiry, now, tz),
        age=age_on(getattr(client, "birth_date", None), local_day(now, tz)),
        scheduled_pending=sum(1 for s in scheduled if s.status == SESSION_STATUS_SCHEDULED),
        consumed_count=len(consumed),
        last_burns=last_burns,
    )
