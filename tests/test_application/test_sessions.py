"""Tests for scheduled session use cases."""
from datetime import date, time

import pytest

from app.application.clients import CreateClientUseCase, ClientNotFoundError
from app.application.packages import CreatePackageUseCase, PackageNotFoundError, PackageValidationError
from app.application.sessions import (
    ScheduleSessionUseCase, UpdateSessionStatusUseCase, DeleteSessionUseCase,
    SessionValidationError, SessionNotFoundError,
)
from app.infrastructure.db.models import ScheduledSessionModel, SessionPackageModel

DAY = date(2026, 3, 20)
AT = time(10, 30)


@pytest.fixture
def client_id(db_session, sample_account_id):
    return CreateClientUseCase(db_session).execute(account_id=sample_account_id, full_name="Ana")


@pytest.fixture
def package_id(db_session, sample_account_id, client_id):
    return CreatePackageUseCase(db_session).execute(sample_account_id, client_id, total_sessions=2)


def _session(db, session_id):
    db.expire_all()
    return db.query(ScheduledSessionModel).filter(ScheduledSessionModel.id == session_id).first()


def _used(db, package_id):
    db.expire_all()
    return db.query(SessionPackageModel).filter(SessionPackageModel.id == package_id).one().used_sessions


class TestScheduleSession:
    def test_schedule_without_package(self, db_session, sample_account_id, client_id):
        sid = ScheduleSessionUseCase(db_session).execute(sample_account_id, client_id, DAY, AT)

        session = _session(db_session, sid)
        assert session.status == "scheduled"
        assert session.package_id is None
        assert session.session_date == DAY
        assert session.session_time == AT
        assert session.account_id == sample_account_id

    def test_scheduling_consumes_package(self, db_session, sample_account_id, client_id, package_id):
        sid = ScheduleSessionUseCase(db_session, consumes_package=True).execute(
            sample_account_id, client_id, DAY, AT, package_id=package_id,
        )

        assert _session(db_session, sid).package_id == package_id
        assert _used(db_session, package_id) == 1

    def test_scheduling_only_links_package(self, db_session, sample_account_id, client_id, package_id):
        sid = ScheduleSessionUseCase(db_session, consumes_package=False).execute(
            sample_account_id, client_id, DAY, AT, package_id=package_id,
        )

        assert _session(db_session, sid).package_id == package_id
        assert _used(db_session, package_id) == 0

    def test_exhausted_package_blocks_scheduling(self, db_session, sample_account_id, client_id, package_id):
        schedule = ScheduleSessionUseCase(db_session, consumes_package=True)
        schedule.execute(sample_account_id, client_id, DAY, AT, package_id=package_id)
        schedule.execute(sample_account_id, client_id, DAY, time(12, 0), package_id=package_id)

        with pytest.raises(PackageValidationError):
            schedule.execute(sample_account_id, client_id, DAY, time(15, 0), package_id=package_id)

        assert db_session.query(ScheduledSessionModel).count() == 2
        assert _used(db_session, package_id) == 2

    def test_missing_time_rejected(self, db_session, sample_account_id, client_id):
        with pytest.raises(SessionValidationError):
            ScheduleSessionUseCase(db_session).execute(sample_account_id, client_id, DAY, None)

    def test_client_of_other_account(self, db_session, other_account_id, client_id):
        with pytest.raises(ClientNotFoundError):
            ScheduleSessionUseCase(db_session).execute(other_account_id, client_id, DAY, AT)
        assert db_session.query(ScheduledSessionModel).count() == 0

    def test_package_of_another_client(self, db_session, sample_account_id, package_id):
        other_client = CreateClientUseCase(db_session).execute(account_id=sample_account_id, full_name="Bruno")
        with pytest.raises(PackageNotFoundError):
            ScheduleSessionUseCase(db_session).execute(
                sample_account_id, other_client, DAY, AT, package_id=package_id,
            )
        assert db_session.query(ScheduledSessionModel).count() == 0


class TestUpdateSessionStatus:
    @pytest.mark.parametrize("target", ["completed", "cancelled"])
    def test_scheduled_transitions(self, db_session, sample_account_id, client_id, target):
        sid = ScheduleSessionUseCase(db_session).execute(sample_account_id, client_id, DAY, AT)

        UpdateSessionStatusUseCase(db_session).execute(sid, sample_account_id, target)

        assert _session(db_session, sid).status == target

    def test_terminal_status_is_final(self, db_session, sample_account_id, client_id):
        sid = ScheduleSessionUseCase(db_session).execute(sample_account_id, client_id, DAY, AT)
        update = UpdateSessionStatusUseCase(db_session)
        update.execute(sid, sample_account_id, "cancelled")

        with pytest.raises(SessionValidationError, match="Нельзя"):
            update.execute(sid, sample_account_id, "completed")

        assert _session(db_session, sid).status == "cancelled"

    def test_cancel_does_not_refund_package(self, db_session, sample_account_id, client_id, package_id):
        sid = ScheduleSessionUseCase(db_session, consumes_package=True).execute(
            sample_account_id, client_id, DAY, AT, package_id=package_id,
        )
        UpdateSessionStatusUseCase(db_session).execute(sid, sample_account_id, "cancelled")
        assert _used(db_session, package_id) == 1

    def test_other_account_not_found(self, db_session, sample_account_id, other_account_id, client_id):
        sid = ScheduleSessionUseCase(db_session).execute(sample_account_id, client_id, DAY, AT)
        with pytest.raises(SessionNotFoundError):
            UpdateSessionStatusUseCase(db_session).execute(sid, other_account_id, "completed")
        assert _session(db_session, sid).status == "scheduled"


class TestDeleteSession:
    def test_delete_from_any_status(self, db_session, sample_account_id, client_id):
        sid = ScheduleSessionUseCase(db_session).execute(sample_account_id, client_id, DAY, AT)
        UpdateSessionStatusUseCase(db_session).execute(sid, sample_account_id, "completed")

        DeleteSessionUseCase(db_session).execute(sid, sample_account_id)

        assert _session(db_session, sid) is None

    def test_delete_twice(self, db_session, sample_account_id, client_id):
        sid = ScheduleSessionUseCase(db_session).execute(sample_account_id, client_id, DAY, AT)
        DeleteSessionUseCase(db_session).execute(sid, sample_account_id)
        with pytest.raises(SessionNotFoundError):
            DeleteSessionUseCase(db_session).execute(sid, sample_account_id)
