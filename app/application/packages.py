"""
Package use cases - consumption accounting.

Burn = insert a consumed-session row + increment the package counter. Both
writes run in one transaction with the package row locked, so two
concurrent burns on the same package cannot both read the same
used_sessions value.
"""
import logging
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from app.application.clients import get_owned_client
from app.application.errors import NotFoundError, ValidationError
from app.config import get_settings
from app.domain.session_package import (
    PACKAGE_STATUS_ACTIVE,
    PACKAGE_STATUS_COMPLETED,
    PackageExhaustedError,
    consume_one,
    select_current_active_package,
)
from app.infrastructure.db.models import (
    ConsumedSessionModel,
    ScheduledSessionModel,
    SessionPackageModel,
)
from app.infrastructure.db.session import unit_of_work
from app.utils.dates import local_today
from app.utils.validation import parse_iso_date

logger = logging.getLogger(__name__)

BURN_ORIGIN_MANUAL = "manual"


class PackageValidationError(ValidationError):
    """Ошибка валидации пакета"""
    pass


class PackageNotFoundError(NotFoundError):
    pass


def get_owned_package(
    db: Session,
    package_id: str,
    account_id: int,
    client_id: str | None = None,
    for_update: bool = False,
) -> SessionPackageModel:
    """
    Пакет аккаунта (и клиента, если передан) или PackageNotFoundError

    for_update=True блокирует строку до конца транзакции (SELECT ... FOR UPDATE).
    """
    query = db.query(SessionPackageModel).filter(
        SessionPackageModel.id == package_id,
        SessionPackageModel.account_id == account_id,
    )
    if client_id is not None:
        query = query.filter(SessionPackageModel.client_id == client_id)
    if for_update:
        query = query.with_for_update()
    package = query.first()
    if not package:
        raise PackageNotFoundError("Пакет не найден")
    return package


def consume_package_session(package: SessionPackageModel) -> None:
    """
    Списать одну сессию с пакета (used += 1, completed при used == total).

    Вызывается внутри транзакции, строка пакета уже заблокирована.
    """
    if package.status == PACKAGE_STATUS_COMPLETED:
        raise PackageValidationError("Пакет уже завершён")
    try:
        package.used_sessions, package.status = consume_one(
            package.used_sessions, package.total_sessions
        )
    except PackageExhaustedError as e:
        raise PackageValidationError(str(e)) from e


def _parse_date(value, field_name: str) -> date | None:
    try:
        return parse_iso_date(value)
    except ValueError as e:
        raise PackageValidationError(f"{field_name}: {e}") from e


class CreatePackageUseCase:
    """
    Use case: Создать пакет сессий для клиента

    Новый пакет активен, used_sessions = 0. Без даты начала берётся
    сегодняшняя (в поясе TIMEZONE): пакеты расходуются в порядке приобретения.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        account_id: int,
        client_id: str,
        total_sessions: int,
        start_date: date | str | None = None,
        expiry_date: date | str | None = None,
        today: date | None = None,
    ) -> str:
        if total_sessions is None or total_sessions <= 0:
            raise PackageValidationError("Количество сессий в пакете должно быть больше 0")

        start = _parse_date(start_date, "Дата начала")
        expiry = _parse_date(expiry_date, "Дата окончания")
        if start is None:
            start = today or local_today(ZoneInfo(get_settings().TIMEZONE))
        if expiry is not None and expiry < start:
            raise PackageValidationError("Дата окончания не может быть раньше даты начала")

        with unit_of_work(self.db):
            get_owned_client(self.db, client_id, account_id)
            package = SessionPackageModel(
                account_id=account_id,
                client_id=client_id,
                total_sessions=total_sessions,
                used_sessions=0,
                status=PACKAGE_STATUS_ACTIVE,
                start_date=start,
                expiry_date=expiry,
            )
            self.db.add(package)
            self.db.flush()

        logger.info(
            "Package created: id=%s client_id=%s total=%d", package.id, client_id, total_sessions
        )
        return package.id


class BurnSessionUseCase:
    """
    Use case: Сжечь (списать) сессию с пакета

    Процесс (одна транзакция):
    1. Заблокировать строку пакета (проверка владельца и клиента)
    2. Вставить consumed_sessions с consumed_at = now
    3. used_sessions += 1, completed при used == total
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        package_id: str,
        client_id: str,
        account_id: int,
        note: str | None = None,
        origin: str | None = BURN_ORIGIN_MANUAL,
        now: datetime | None = None,
    ) -> str:
        """
        Returns:
            id созданной строки consumed_sessions

        Raises:
            PackageNotFoundError: пакет не принадлежит аккаунту или клиенту
            PackageValidationError: в пакете не осталось сессий
        """
        consumed_at = now or datetime.now(timezone.utc)

        with unit_of_work(self.db):
            package = get_owned_package(
                self.db, package_id, account_id, client_id=client_id, for_update=True
            )
            consumed = ConsumedSessionModel(
                account_id=account_id,
                client_id=client_id,
                package_id=package.id,
                consumed_at=consumed_at,
                note=(note or "").strip() or None,
                origin=origin,
            )
            self.db.add(consumed)
            consume_package_session(package)
            self.db.flush()

        logger.info(
            "Session burned: package_id=%s used=%d/%d status=%s",
            package.id, package.used_sessions, package.total_sessions, package.status,
        )
        return consumed.id


class BurnCurrentSessionUseCase:
    """Use case: Сжечь сессию с текущего пакета клиента (по правилу выбора пакета)"""

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        client_id: str,
        account_id: int,
        note: str | None = None,
        origin: str | None = BURN_ORIGIN_MANUAL,
        now: datetime | None = None,
    ) -> str:
        get_owned_client(self.db, client_id, account_id)
        packages = self.db.query(SessionPackageModel).filter(
            SessionPackageModel.client_id == client_id,
            SessionPackageModel.account_id == account_id,
        ).all()

        current = select_current_active_package(packages).current
        if current is None:
            raise PackageValidationError("У клиента нет активного пакета")

        return BurnSessionUseCase(self.db).execute(
            package_id=current.id,
            client_id=client_id,
            account_id=account_id,
            note=note,
            origin=origin,
            now=now,
        )


class ExtendPackageExpiryUseCase:
    """Use case: Продлить пакет (меняется только дата окончания)"""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, package_id: str, account_id: int, expiry_date: date | str | None) -> None:
        expiry = _parse_date(expiry_date, "Дата окончания")
        if expiry is None:
            raise PackageValidationError("Укажите новую дату окончания")

        with unit_of_work(self.db):
            package = get_owned_package(self.db, package_id, account_id)
            package.expiry_date = expiry

        logger.info("Package expiry extended: id=%s expiry=%s", package_id, expiry.isoformat())


class DeletePackageUseCase:
    """
    Use case: Удалить пакет

    Сначала запланированные и сожжённые сессии пакета, затем сам пакет.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(self, package_id: str, account_id: int) -> dict[str, int]:
        with unit_of_work(self.db):
            package = get_owned_package(self.db, package_id, account_id)

            scheduled = self.db.query(ScheduledSessionModel).filter(
                ScheduledSessionModel.package_id == package_id,
                ScheduledSessionModel.account_id == account_id,
            ).delete(synchronize_session=False)
            consumed = self.db.query(ConsumedSessionModel).filter(
                ConsumedSessionModel.package_id == package_id,
                ConsumedSessionModel.account_id == account_id,
            ).delete(synchronize_session=False)

            self.db.delete(package)

        logger.info(
            "Package deleted: id=%s scheduled=%d consumed=%d", package_id, scheduled, consumed
        )
        return {"packages": 1, "scheduled_sessions": scheduled, "consumed_sessions": consumed}
