"""
Seed test data for test@example.com: clients with packages, sessions and burns.
Run:  python seed_test_data.py
"""
import sys
from datetime import date, datetime, time, timedelta, timezone

from app.infrastructure.db.session import get_session_factory
from app.infrastructure.db.models import User, ClientModel
from app.application.clients import CreateClientUseCase
from app.application.packages import CreatePackageUseCase, BurnSessionUseCase
from app.application.sessions import ScheduleSessionUseCase

db = get_session_factory()()

user = db.query(User).filter(User.email == "test@example.com").first()
if not user:
    print("User test@example.com not found, run create_test_user.py first"); sys.exit(1)
ACCOUNT_ID = user.id

existing = db.query(ClientModel).filter_by(account_id=ACCOUNT_ID).count()
if existing > 0:
    print(f"Data exists ({existing} clients), nothing to do"); sys.exit(0)

today = date.today()
now = datetime.now(timezone.utc)

create_client = CreateClientUseCase(db)
create_package = CreatePackageUseCase(db)
burn = BurnSessionUseCase(db)
schedule = ScheduleSessionUseCase(db)

# ── Ana: one package in progress, one queued ────────────────────
ana = create_client.execute(
    ACCOUNT_ID, "Ana Pérez", rut="12.345.678-5", email="ana@example.cl",
    birth_date=date(1990, 5, 17), gender="female",
)
ana_first = create_package.execute(
    ACCOUNT_ID, ana, total_sessions=8,
    start_date=today - timedelta(days=40), expiry_date=today + timedelta(days=20),
)
create_package.execute(ACCOUNT_ID, ana, total_sessions=4, start_date=today)
for days_ago in (30, 23, 16, 9):
    burn.execute(ana_first, ana, ACCOUNT_ID, now=now - timedelta(days=days_ago))
schedule.execute(ACCOUNT_ID, ana, today + timedelta(days=2), time(10, 0), package_id=ana_first)

# ── Bruno: exhausted package, client shows as inactive ──────────
bruno = create_client.execute(ACCOUNT_ID, "Bruno Soto", phone="+56 9 1234 5678", gender="male")
bruno_pkg = create_package.execute(
    ACCOUNT_ID, bruno, total_sessions=2, start_date=today - timedelta(days=60),
)
burn.execute(bruno_pkg, bruno, ACCOUNT_ID, now=now - timedelta(days=50))
burn.execute(bruno_pkg, bruno, ACCOUNT_ID, note="Cierre de proceso", now=now - timedelta(days=43))

# ── Carla: new client without packages ──────────────────────────
carla = create_client.execute(ACCOUNT_ID, "Carla Díaz", notes="Derivada por Ana")
schedule.execute(ACCOUNT_ID, carla, today + timedelta(days=1), time(18, 30))

print(f"Seeded 3 clients for account_id={ACCOUNT_ID}")
db.close()
