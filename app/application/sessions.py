"""
Scheduled session use cases - scheduling, status transitions, deletion.
"""
import logging
from datetime import date, time

from sqlalchemy.orm import Session

from app.application.clients import get_owned_client
from app.application.errors import NotFoundError, ValidationError
from app.application.packages import consume_package_session, get_owned_package
from app.config import get_settings
from app.domain.scheduled_session import (
    SESSION_STATUS_SCHEDULED,
    SessionTransitionError,
    validate_transition,
)
from app.infrastructure.db.models import ScheduledSessionModel
from app.infrastructure.db.session import unit_of_work

logger = logging.getLogger(__name__)


class SessionValidationError(ValidationError):
    pass


class SessionNotFoundError(NotFoundError):
    pass


def get_owned_session(db: Session, session_id: str, account_id: int) -> ScheduledSessionModel:
    session = db.query(ScheduledSessionModel).filter(
        ScheduledSessionModel.id == session_id,
        ScheduledSessionModel.account_id == account_id,
    ).first()
    if not session:
        raise SessionNotFoundError("Сессия не найдена")
    return session


class ScheduleSessionUseCase:
    """
    Use case: Запланировать сессию

    Если указан пакет и включён SCHEDULE_CONSUMES_PACKAGE, сессия
    списывается с пакета сразу при планировании (в той же транзакции).
    Иначе пакет только привязывается, списание - через burn.
    """

    def __init__(self, db: Session, consumes_package: bool | None = None):
        self.db = db
        if consumes_package is None:
            consumes_package = get_settings().SCHEDULE_CONSUMES_PACKAGE
        self.consumes_package = consumes_package

    def execute(
        self,
        account_id: int,
        client_id: str,
        session_date: date,
        session_time: time,
        package_id: str | None = None,
    ) -> str:
        if session_date is None or session_time is None:
            raise SessionValidationError("Укажите дату и время сессии")

        with unit_of_work(self.db):
            get_owned_client(self.db, client_id, account_id)

            package = None
            if package_id:
                package = get_owned_package(
                    self.db, package_id, account_id,
                    client_id=client_id, for_update=self.consumes_package,
                )

            session = ScheduledSessionModel(
                account_id=account_id,
                client_id=client_id,
                package_id=package.id if package else None,
                session_date=session_date,
                session_time=session_time,
                status=SESSION_STATUS_SCHEDULED,
            )
            self.db.add(session)
            if package is not None and self.consumes_package:
                consume_package_session(package)
            self.db.flush()

        logger.info(
            "Session scheduled: id=%s client_id=%s package_id=%s on %s %s",
            session.id, client_id, package_id, session_date.isoformat(), session_time.isoformat(),
        )
        return session.id


class UpdateSessionStatusUseCase:
    """Use case: scheduled -> completed | cancelled"""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, session_id: str, account_id: int, status: str) -> None:
        with unit_of_work(self.db):
            session = get_owned_session(self.db, session_id, account_id)
            try:
                validate_transition(session.status, status)
            except SessionTransitionError as e:
                raise SessionValidationError(str(e)) from e
            previous = session.status
            session.status = status

        logger.info("Session %s: %s -> %s", session_id, previous, status)


class DeleteSessionUseCase:
    """Use case: Удалить сессию (из любого статуса, зависимых строк нет)"""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, session_id: str, account_id: int) -> None:
        with unit_of_work(self.db):
            session = get_owned_session(self.db, session_id, account_id)
            self.db.delete(session)
