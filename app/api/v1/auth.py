"""
Authentication routes (login, logout, me)
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_user
from app.auth import authenticate
from app.infrastructure.db.models import User


router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: int
    email: str


@router.post("/login", response_model=UserResponse)
def login(request: Request, req: LoginRequest, db: Session = Depends(get_db)):
    """Вход: проверка пароля и запись user_id в session"""
    user = authenticate(db, req.email, req.password)
    if not user:
        raise HTTPException(status_code=401, detail="Неверный email или пароль")

    request.session["user_id"] = user.id
    return UserResponse(id=user.id, email=user.email)


@router.post("/logout")
def logout(request: Request):
    """Выход из системы"""
    request.session.clear()
    return {"status": "logged_out"}


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return UserResponse(id=user.id, email=user.email)
