import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.core.errors import ValidationError
from app.core.security import create_user_token, decode_token, verify_password
from app.crud import crud_user
from app.db.models import User
from app.db.session import get_db
from app.schemas.user import AuthResponse, LoginRequest, MeResponse, TokenVerifyRequest, UserCreate, UserPublic

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(token=create_user_token(user), user=UserPublic.model_validate(user))


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: UserCreate, db: Session = Depends(get_db)):
    if not payload.name or not payload.email or not payload.password:
        raise ValidationError("All fields are required")

    if crud_user.get_user_by_email(db, payload.email):
        raise ValidationError("User already exists")

    user = crud_user.create_user(db, name=payload.name, email=payload.email, password=payload.password)
    logger.info("Created user %s", user.id)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    if not payload.email or not payload.password:
        raise ValidationError("Email and password are required")

    user = crud_user.get_user_by_email(db, payload.email)
    if not user or not verify_password(payload.password, user.password_hash):
        logger.info("Login attempt failed for %s", payload.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    logger.info("Login successful for user %s", user.id)
    return _auth_response(user)


@router.get("/me", response_model=MeResponse)
def read_users_me(current_user: User = Depends(get_current_user)):
    return MeResponse(user=UserPublic.model_validate(current_user))


@router.post("/verify-token")
def verify_token(payload: TokenVerifyRequest, db: Session = Depends(get_db)):
    invalid = JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"valid": False})
    if not payload.token:
        return invalid

    try:
        claims = decode_token(payload.token)
    except HTTPException:
        return invalid

    user = crud_user.get_user(db, claims.get("sub"))
    if user is None:
        return invalid
    return {"valid": True, "user": UserPublic.model_validate(user).model_dump(mode="json")}
