"""
Create test user
"""
from app.infrastructure.db.session import get_db
from app.infrastructure.db.models import User
from app.auth import create_user

EMAIL = "test@example.com"
PASSWORD = "password123"

db = next(get_db())

existing = db.query(User).filter(User.email == EMAIL).first()
if existing:
    print(f"User already exists: {EMAIL} (ID: {existing.id})")
else:
    user = create_user(db, EMAIL, PASSWORD)
    print("Created user:")
    print(f"  Email: {EMAIL}")
    print(f"  Password: {PASSWORD}")
    print(f"  ID: {user.id}")

db.close()
