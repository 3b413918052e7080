"""
FastAPI dependencies (DB session, authentication)
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.application.errors import UnauthenticatedError
from app.infrastructure.db.session import get_db as _get_db
from app.infrastructure.db.models import User


# Re-export get_db для удобства
get_db = _get_db


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Получить текущего пользователя из session

    Raises:
        UnauthenticatedError: если не залогинен (401) - до любых обращений к данным

    Usage:
        @router.get("/clients")
        def list_clients(user: User = Depends(get_current_user)):
            ...
    """
    user_id = request.session.get("user_id")
    if not user_id:
        raise UnauthenticatedError("Not authenticated")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        request.session.clear()
        raise UnauthenticatedError("User not found")

    return user
