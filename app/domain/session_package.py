"""
Session package domain - selection of the package a client is drawing down
and the usage increment rule.

Functions here are pure and accept either ORM rows (SessionPackageModel) or
SessionPackage dataclasses: only the attributes id, status, used_sessions,
total_sessions, start_date and expiry_date are read.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional

PACKAGE_STATUS_ACTIVE = "active"
PACKAGE_STATUS_COMPLETED = "completed"

# Packages without a start date sort as if they started at the epoch
_EPOCH = date(1970, 1, 1)


class PackageExhaustedError(ValueError):
    pass


@dataclass
class SessionPackage:
    """Plain package value (used by tests and seed scripts)"""
    id: str
    total_sessions: int
    used_sessions: int = 0
    status: str = PACKAGE_STATUS_ACTIVE
    start_date: Optional[date] = None
    expiry_date: Optional[date] = None
    client_id: Optional[str] = None


@dataclass(frozen=True)
class PackageSelection:
    current: Optional[Any] = None
    queue: list = field(default_factory=list)


def is_available(package) -> bool:
    """Active and not exhausted"""
    return (
        package.status == PACKAGE_STATUS_ACTIVE
        and package.used_sessions < package.total_sessions
    )


def package_sort_key(package) -> tuple:
    return (package.start_date or _EPOCH, str(package.id))


def select_current_active_package(packages: Iterable) -> PackageSelection:
    """
    Разбить пакеты клиента на текущий и очередь.

    Берутся только активные пакеты с used < total, по дате начала
    (без даты - первыми), при равенстве - по строковому id.
    Первый пакет - текущий, остальные - очередь.
    """
    available = sorted((p for p in packages if is_available(p)), key=package_sort_key)
    if not available:
        return PackageSelection(current=None, queue=[])
    return PackageSelection(current=available[0], queue=available[1:])


def consume_one(used_sessions: int, total_sessions: int) -> tuple[int, str]:
    """
    Usage increment rule: +1, and the package completes once used reaches total.

    Returns:
        (new_used, new_status)

    Raises:
        PackageExhaustedError: если в пакете не осталось сессий
    """
    if used_sessions >= total_sessions:
        raise PackageExhaustedError("В пакете не осталось сессий")
    new_used = used_sessions + 1
    new_status = PACKAGE_STATUS_COMPLETED if new_used >= total_sessions else PACKAGE_STATUS_ACTIVE
    return new_used, new_status


def sessions_remaining(used_sessions: int, total_sessions: int) -> int:
    return max(total_sessions - used_sessions, 0)
