"""
Clients board - read layer over clients, packages and sessions.

Pure read: no mutations. Stats are rebuilt from rows on every call
(see app.domain.client_stats).
"""
import math
from collections import defaultdict
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from app.application.clients import ClientValidationError, get_owned_client
from app.config import get_settings
from app.domain.client_stats import COMPUTED_STATUS_ACTIVE, COMPUTED_STATUS_INACTIVE, build_client_stats
from app.infrastructure.db.models import (
    ClientModel,
    ConsumedSessionModel,
    ScheduledSessionModel,
    SessionPackageModel,
)
from app.utils.dates import local_day

BOARD_FILTER_ALL = "all"
BOARD_FILTER_NEW = "new"
VALID_BOARD_FILTERS = {BOARD_FILTER_ALL, BOARD_FILTER_NEW, COMPUTED_STATUS_ACTIVE, COMPUTED_STATUS_INACTIVE}


def _group_by_client(rows) -> dict[str, list]:
    grouped: dict[str, list] = defaultdict(list)
    for row in rows:
        grouped[row.client_id].append(row)
    return grouped


class ClientsBoardService:
    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()
        self.tz = ZoneInfo(self.settings.TIMEZONE)

    # ------------------------------------------------------------------
    # Board
    # ------------------------------------------------------------------

    def list_board(
        self,
        account_id: int,
        now: datetime | None = None,
        search: str | None = None,
        status_filter: str = BOARD_FILTER_ALL,
    ) -> list[dict]:
        """
        Returns:
            [{"client": ClientModel, "stats": ClientStats}, ...] - newest clients first

        search     - подстрока имени или RUT (без учёта регистра)
        status_filter - all | active | inactive | new
            active/inactive - по вычисляемому статусу (есть текущий пакет),
            new - по окну "нового" клиента
        """
        if status_filter not in VALID_BOARD_FILTERS:
            raise ClientValidationError(f"Неверный фильтр: {status_filter}")
        now = now or datetime.now(timezone.utc)

        clients = self.db.query(ClientModel).filter(
            ClientModel.account_id == account_id,
        ).order_by(ClientModel.created_at.desc()).all()

        packages = _group_by_client(
            self.db.query(SessionPackageModel).filter(SessionPackageModel.account_id == account_id).all()
        )
        scheduled = _group_by_client(
            self.db.query(ScheduledSessionModel).filter(ScheduledSessionModel.account_id == account_id).all()
        )
        consumed = _group_by_client(
            self.db.query(ConsumedSessionModel).filter(ConsumedSessionModel.account_id == account_id).all()
        )

        term = (search or "").strip().lower()
        cards = []
        for client in clients:
            if term and term not in client.full_name.lower() and term not in (client.rut or "").lower():
                continue
            stats = build_client_stats(
                client,
                packages.get(client.id, []),
                now,
                scheduled=scheduled.get(client.id, []),
                consumed=consumed.get(client.id, []),
                new_client_days=self.settings.NEW_CLIENT_DAYS,
                tz=self.tz,
            )
            if status_filter == BOARD_FILTER_NEW and not stats.is_new:
                continue
            if status_filter in (COMPUTED_STATUS_ACTIVE, COMPUTED_STATUS_INACTIVE) \
                    and stats.computed_status != status_filter:
                continue
            cards.append({"client": client, "stats": stats})
        return cards

    # ------------------------------------------------------------------
    # Client detail
    # ------------------------------------------------------------------

    def get_client_detail(self, account_id: int, client_id: str, now: datetime | None = None) -> dict:
        """Карточка клиента: stats + все пакеты + запланированные сессии"""
        now = now or datetime.now(timezone.utc)
        client = get_owned_client(self.db, client_id, account_id)

        packages = self.db.query(SessionPackageModel).filter(
            SessionPackageModel.client_id == client_id,
            SessionPackageModel.account_id == account_id,
        ).order_by(SessionPackageModel.created_at.desc()).all()
        scheduled = self.db.query(ScheduledSessionModel).filter(
            ScheduledSessionModel.client_id == client_id,
            ScheduledSessionModel.account_id == account_id,
        ).order_by(ScheduledSessionModel.session_date.desc(), ScheduledSessionModel.session_time.desc()).all()
        consumed = self._consumed_for_client(account_id, client_id)

        return {
            "client": client,
            "stats": build_client_stats(
                client, packages, now,
                scheduled=scheduled, consumed=consumed,
                new_client_days=self.settings.NEW_CLIENT_DAYS, tz=self.tz,
            ),
            "packages": packages,
            "scheduled_sessions": scheduled,
        }

    # ------------------------------------------------------------------
    # Burn history
    # ------------------------------------------------------------------

    def get_burn_history(
        self,
        account_id: int,
        client_id: str,
        on_date: date | None = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> dict:
        """
        История сожжённых сессий клиента, новые первыми.

        Returns:
            total, total_pages (>= 1), page (прижат к [1, total_pages]),
            page_size, groups: [{"day": date, "sessions": [...]}]
            Дни считаются в часовом поясе TIMEZONE.
        """
        get_owned_client(self.db, client_id, account_id)
        page_size = page_size or self.settings.BURN_HISTORY_PAGE_SIZE
        if page_size <= 0:
            raise ClientValidationError("Размер страницы должен быть больше 0")

        consumed = self._consumed_for_client(account_id, client_id)
        if on_date is not None:
            consumed = [s for s in consumed if local_day(s.consumed_at, self.tz) == on_date]

        total = len(consumed)
        total_pages = max(1, math.ceil(total / page_size))
        page = min(max(page, 1), total_pages)
        start = (page - 1) * page_size

        groups: list[dict] = []
        for item in consumed[start:start + page_size]:
            day = local_day(item.consumed_at, self.tz)
            if not groups or groups[-1]["day"] != day:
                groups.append({"day": day, "sessions": []})
            groups[-1]["sessions"].append(item)

        return {
            "total": total,
            "total_pages": total_pages,
            "page": page,
            "page_size": page_size,
            "groups": groups,
        }

    def _consumed_for_client(self, account_id: int, client_id: str) -> list[ConsumedSessionModel]:
        return self.db.query(ConsumedSessionModel).filter(
            ConsumedSessionModel.client_id == client_id,
            ConsumedSessionModel.account_id == account_id,
        ).order_by(ConsumedSessionModel.consumed_at.desc()).all()
