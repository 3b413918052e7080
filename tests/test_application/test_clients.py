"""Tests for client use cases - CRUD and cascade deletion."""
from datetime import date, datetime, time, timedelta, timezone

import pytest

from app.application.clients import (
    CreateClientUseCase, UpdateClientUseCase, DeleteClientUseCase,
    ClientValidationError, ClientNotFoundError,
)
from app.application.errors import NotFoundError
from app.application.packages import CreatePackageUseCase, BurnSessionUseCase
from app.application.sessions import ScheduleSessionUseCase
from app.infrastructure.db.models import (
    ClientModel, SessionPackageModel, ScheduledSessionModel, ConsumedSessionModel,
)

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def _get(db, client_id):
    return db.query(ClientModel).filter(ClientModel.id == client_id).first()


class TestCreateClient:
    def test_create_client(self, db_session, sample_account_id):
        cid = CreateClientUseCase(db_session).execute(
            account_id=sample_account_id, full_name="  Ana Pérez  ",
            rut="12.345.678-5", email="ana@example.cl", phone="  ",
            birth_date=date(1990, 5, 17), gender="female",
        )
        client = _get(db_session, cid)
        assert client is not None
        assert client.account_id == sample_account_id
        assert client.full_name == "Ana Pérez"
        assert client.rut == "12.345.678-5"
        assert client.email == "ana@example.cl"
        assert client.phone is None
        assert client.notes is None
        assert client.status == "new"
        assert client.gender == "female"
        assert client.created_at is not None

    def test_empty_name_fails(self, db_session, sample_account_id):
        with pytest.raises(ClientValidationError, match="Имя"):
            CreateClientUseCase(db_session).execute(account_id=sample_account_id, full_name="   ")

    def test_invalid_email_fails(self, db_session, sample_account_id):
        with pytest.raises(ClientValidationError, match="email"):
            CreateClientUseCase(db_session).execute(
                account_id=sample_account_id, full_name="Ana", email="ana@",
            )

    def test_invalid_gender_fails(self, db_session, sample_account_id):
        with pytest.raises(ClientValidationError, match="пола"):
            CreateClientUseCase(db_session).execute(
                account_id=sample_account_id, full_name="Ana", gender="robot",
            )


class TestUpdateClient:
    def test_update_fields_and_status_tag(self, db_session, sample_account_id):
        cid = CreateClientUseCase(db_session).execute(account_id=sample_account_id, full_name="Ana")

        UpdateClientUseCase(db_session).execute(
            cid, sample_account_id, full_name="Ana María", notes="Prefiere mañanas", status="inactive",
        )

        client = _get(db_session, cid)
        assert client.full_name == "Ana María"
        assert client.notes == "Prefiere mañanas"
        assert client.status == "inactive"
        assert client.updated_at is not None

    def test_blank_optional_field_cleared(self, db_session, sample_account_id):
        cid = CreateClientUseCase(db_session).execute(
            account_id=sample_account_id, full_name="Ana", phone="+56 9 1111 2222",
        )
        UpdateClientUseCase(db_session).execute(cid, sample_account_id, phone="")
        assert _get(db_session, cid).phone is None

    def test_invalid_status_fails(self, db_session, sample_account_id):
        cid = CreateClientUseCase(db_session).execute(account_id=sample_account_id, full_name="Ana")
        with pytest.raises(ClientValidationError, match="статус"):
            UpdateClientUseCase(db_session).execute(cid, sample_account_id, status="archived")
        assert _get(db_session, cid).status == "new"

    def test_not_found(self, db_session, sample_account_id):
        with pytest.raises(ClientNotFoundError, match="не найден"):
            UpdateClientUseCase(db_session).execute("missing", sample_account_id, full_name="x")

    def test_other_account_cannot_update(self, db_session, sample_account_id, other_account_id):
        cid = CreateClientUseCase(db_session).execute(account_id=sample_account_id, full_name="Ana")
        with pytest.raises(NotFoundError):
            UpdateClientUseCase(db_session).execute(cid, other_account_id, full_name="Hack")
        assert _get(db_session, cid).full_name == "Ana"


class TestDeleteClient:
    def _client_with_history(self, db, account_id):
        """2 пакета, 3 запланированные сессии, 5 сожжённых"""
        cid = CreateClientUseCase(db).execute(account_id=account_id, full_name="Ana")
        create_package = CreatePackageUseCase(db)
        p1 = create_package.execute(account_id, cid, total_sessions=10, start_date=date(2026, 1, 1))
        p2 = create_package.execute(account_id, cid, total_sessions=5, start_date=date(2026, 2, 1))

        burn = BurnSessionUseCase(db)
        for i in range(5):
            burn.execute(p1, cid, account_id, now=NOW - timedelta(days=i))

        schedule = ScheduleSessionUseCase(db, consumes_package=False)
        schedule.execute(account_id, cid, date(2026, 3, 20), time(10, 0), package_id=p1)
        schedule.execute(account_id, cid, date(2026, 3, 27), time(10, 0), package_id=p2)
        schedule.execute(account_id, cid, date(2026, 4, 3), time(10, 0))
        return cid

    def test_cascade_removes_all_dependents(self, db_session, sample_account_id):
        cid = self._client_with_history(db_session, sample_account_id)

        deleted = DeleteClientUseCase(db_session).execute(cid, sample_account_id)

        assert deleted == {
            "clients": 1, "packages": 2, "scheduled_sessions": 3, "consumed_sessions": 5,
        }
        assert _get(db_session, cid) is None
        assert db_session.query(SessionPackageModel).filter_by(client_id=cid).count() == 0
        assert db_session.query(ScheduledSessionModel).filter_by(client_id=cid).count() == 0
        assert db_session.query(ConsumedSessionModel).filter_by(client_id=cid).count() == 0

    def test_second_delete_is_not_found(self, db_session, sample_account_id):
        cid = self._client_with_history(db_session, sample_account_id)
        DeleteClientUseCase(db_session).execute(cid, sample_account_id)

        with pytest.raises(ClientNotFoundError):
            DeleteClientUseCase(db_session).execute(cid, sample_account_id)

    def test_other_account_cannot_delete(self, db_session, sample_account_id, other_account_id):
        cid = self._client_with_history(db_session, sample_account_id)

        with pytest.raises(ClientNotFoundError):
            DeleteClientUseCase(db_session).execute(cid, other_account_id)

        assert _get(db_session, cid) is not None
        assert db_session.query(ConsumedSessionModel).filter_by(client_id=cid).count() == 5

    def test_other_clients_untouched(self, db_session, sample_account_id):
        keep = self._client_with_history(db_session, sample_account_id)
        drop = self._client_with_history(db_session, sample_account_id)

        DeleteClientUseCase(db_session).execute(drop, sample_account_id)

        assert db_session.query(SessionPackageModel).filter_by(client_id=keep).count() == 2
        assert db_session.query(ScheduledSessionModel).filter_by(client_id=keep).count() == 3
        assert db_session.query(ConsumedSessionModel).filter_by(client_id=keep).count() == 5
