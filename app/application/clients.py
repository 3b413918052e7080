"""
Client use cases - CRUD of client records and cascade deletion.
"""
import logging
from datetime import date, datetime, timezone

from sqlalchemy.orm import Session

from app.application.errors import NotFoundError, ValidationError
from app.domain.client import CLIENT_STATUS_NEW, VALID_CLIENT_STATUSES, VALID_GENDERS
from app.infrastructure.db.models import (
    ClientModel,
    ConsumedSessionModel,
    ScheduledSessionModel,
    SessionPackageModel,
)
from app.infrastructure.db.session import unit_of_work
from app.utils.validation import is_valid_email, normalize_optional_text

logger = logging.getLogger(__name__)


class ClientValidationError(ValidationError):
    pass


class ClientNotFoundError(NotFoundError):
    pass


def get_owned_client(db: Session, client_id: str, account_id: int) -> ClientModel:
    """Клиент аккаунта или ClientNotFoundError (чужой клиент = несуществующий)"""
    client = db.query(ClientModel).filter(
        ClientModel.id == client_id,
        ClientModel.account_id == account_id,
    ).first()
    if not client:
        raise ClientNotFoundError("Клиент не найден")
    return client


def _clean_full_name(full_name: str) -> str:
    full_name = (full_name or "").strip()
    if not full_name:
        raise ClientValidationError("Имя клиента не может быть пустым")
    return full_name


def _clean_email(email: str | None) -> str | None:
    email = normalize_optional_text(email)
    if email is not None and not is_valid_email(email):
        raise ClientValidationError(f"Некорректный email: «{email}»")
    return email


def _clean_gender(gender: str | None) -> str | None:
    gender = normalize_optional_text(gender)
    if gender is not None and gender not in VALID_GENDERS:
        raise ClientValidationError(f"Неверное значение пола: {gender}")
    return gender


class CreateClientUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        account_id: int,
        full_name: str,
        rut: str | None = None,
        email: str | None = None,
        phone: str | None = None,
        notes: str | None = None,
        birth_date: date | None = None,
        gender: str | None = None,
    ) -> str:
        client = ClientModel(
            account_id=account_id,
            full_name=_clean_full_name(full_name),
            rut=normalize_optional_text(rut),
            email=_clean_email(email),
            phone=normalize_optional_text(phone),
            notes=normalize_optional_text(notes),
            birth_date=birth_date,
            gender=_clean_gender(gender),
            status=CLIENT_STATUS_NEW,
        )
        with unit_of_work(self.db):
            self.db.add(client)
            self.db.flush()
        logger.info("Client created: id=%s account_id=%s", client.id, account_id)
        return client.id


class UpdateClientUseCase:
    """
    Обновить карточку клиента.

    Меняются только переданные поля; status - ручной тег (new/active/inactive),
    не зависит от вычисляемого статуса по пакетам.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(self, client_id: str, account_id: int, **changes) -> None:
        with unit_of_work(self.db):
            client = get_owned_client(self.db, client_id, account_id)

            if "full_name" in changes:
                client.full_name = _clean_full_name(changes["full_name"])
            if "rut" in changes:
                client.rut = normalize_optional_text(changes["rut"])
            if "email" in changes:
                client.email = _clean_email(changes["email"])
            if "phone" in changes:
                client.phone = normalize_optional_text(changes["phone"])
            if "notes" in changes:
                client.notes = normalize_optional_text(changes["notes"])
            if "birth_date" in changes:
                client.birth_date = changes["birth_date"]
            if "gender" in changes:
                client.gender = _clean_gender(changes["gender"])
            if "status" in changes:
                status = changes["status"]
                if status not in VALID_CLIENT_STATUSES:
                    raise ClientValidationError(f"Неверный статус клиента: {status}")
                client.status = status

            client.updated_at = datetime.now(timezone.utc)


class DeleteClientUseCase:
    """
    Use case: Удалить клиента вместе со всеми зависимыми строками

    Порядок: сожжённые сессии -> запланированные -> пакеты -> клиент,
    в одной транзакции и только в пределах аккаунта.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(self, client_id: str, account_id: int) -> dict[str, int]:
        """
        Returns:
            Количество удалённых строк по таблицам
        """
        with unit_of_work(self.db):
            client = get_owned_client(self.db, client_id, account_id)

            consumed = self.db.query(ConsumedSessionModel).filter(
                ConsumedSessionModel.client_id == client_id,
                ConsumedSessionModel.account_id == account_id,
            ).delete(synchronize_session=False)
            scheduled = self.db.query(ScheduledSessionModel).filter(
                ScheduledSessionModel.client_id == client_id,
                ScheduledSessionModel.account_id == account_id,
            ).delete(synchronize_session=False)
            packages = self.db.query(SessionPackageModel).filter(
                SessionPackageModel.client_id == client_id,
                SessionPackageModel.account_id == account_id,
            ).delete(synchronize_session=False)

            self.db.delete(client)

        logger.info(
            "Client deleted: id=%s account_id=%s packages=%d scheduled=%d consumed=%d",
            client_id, account_id, packages, scheduled, consumed,
        )
        return {
            "clients": 1,
            "packages": packages,
            "scheduled_sessions": scheduled,
            "consumed_sessions": consumed,
        }
