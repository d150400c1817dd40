from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.schemas.auth import LoginRequest, TokenOut
from app.models.user import User
from app.core.security import verify_password, create_access_token
from app.api.deps import get_current_user
from app.api.responses import send_success

router = APIRouter(tags=["auth"])

@router.post("/auth/login")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == body.email.strip().lower()).first()
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = TokenOut(access_token=create_access_token(user.id, role=user.role))
    return send_success(
        {**token.model_dump(), "user": {"id": user.id, "email": user.email, "role": user.role}},
        "Login successful",
    )


@router.get("/auth/me")
def me(me: User = Depends(get_current_user)):
    return send_success({
        "id": me.id,
        "email": me.email,
        "fullName": me.full_name or "",
        "role": me.role,
    }, "Current user")
