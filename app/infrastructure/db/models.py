"""
SQLAlchemy ORM models (practice tables)

Every practice table carries account_id (= users.id). All reads and writes
filter on it, so rows of another account are indistinguishable from
missing rows.
"""
import uuid
from datetime import datetime, timezone, date as date_type, time as time_type
from sqlalchemy import String, DateTime, Integer, Text, TIMESTAMP, Date, Time, func, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.db.session import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    Practitioner account
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False
    )


class ClientModel(Base):
    """Client record of the practitioner"""
    __tablename__ = "clients"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    account_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    rut: Mapped[str | None] = mapped_column(String(32), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    birth_date: Mapped[date_type | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(32), nullable=True)  # female, male, other, prefer_not_to_say

    # Manual tag: new, active, inactive (independent of package-based status)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="new", server_default="new")

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)


class SessionPackageModel(Base):
    """Prepaid block of sessions drawn down by burns (and, by policy, by scheduling)"""
    __tablename__ = "session_packages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    account_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    client_id: Mapped[str] = mapped_column(String(36), ForeignKey("clients.id"), nullable=False, index=True)

    total_sessions: Mapped[int] = mapped_column(Integer, nullable=False)
    used_sessions: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active", server_default="active")  # active, completed

    start_date: Mapped[date_type | None] = mapped_column(Date, nullable=True)
    expiry_date: Mapped[date_type | None] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )


class ScheduledSessionModel(Base):
    """Calendar appointment, optionally linked to a package"""
    __tablename__ = "scheduled_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    account_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    client_id: Mapped[str] = mapped_column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    package_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("session_packages.id"), nullable=True, index=True
    )

    session_date: Mapped[date_type] = mapped_column(Date, nullable=False)
    session_time: Mapped[time_type] = mapped_column(Time, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="scheduled", server_default="scheduled"
    )  # scheduled, completed, cancelled

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_scheduled_sessions_account_date", "account_id", "session_date", "session_time"),
    )


class ConsumedSessionModel(Base):
    """Burn event: one session consumed against a package"""
    __tablename__ = "consumed_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    account_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    client_id: Mapped[str] = mapped_column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    package_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("session_packages.id"), nullable=False, index=True
    )

    consumed_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False, index=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    origin: Mapped[str | None] = mapped_column(String(32), nullable=True)  # manual, ...
