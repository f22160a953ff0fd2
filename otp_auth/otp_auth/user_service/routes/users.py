"""
User Router - sign-up, sign-in, OTP delivery and profile endpoints.
"""
from datetime import timedelta
import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from ..auth import TOKEN_COOKIE_NAME, create_access_token, get_current_identity, hash_password, verify_password
from ..config import Settings, get_settings
from ..db import get_db
from ..models import User
from ..otp import issue_otp, mark_email_codes_used, redeem_otp
from ..schemas import (
    MessageResponse,
    SendCodeRequest,
    SignInRequest,
    SignUpRequest,
    TokenIdentity,
    UserDetailResponse,
    UserOut,
    UserResponse,
)

router = APIRouter(prefix="/user", tags=["user"])
logger = logging.getLogger(__name__)


def start_session(user: User, response: Response, settings: Settings) -> None:
    """Issue a session token for ``user`` and attach it as the session cookie."""
    ttl = timedelta(days=settings.TOKEN_TTL_DAYS)
    identity = TokenIdentity(id=user.id, email=user.email, name=user.name)
    token = create_access_token(identity, settings.JWT_SECRET, ttl=ttl, algorithm=settings.JWT_ALGORITHM)
    response.set_cookie(
        key=TOKEN_COOKIE_NAME,
        value=token,
        max_age=int(ttl.total_seconds()),
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
    )


@router.post("/sign-up", response_model=UserResponse)
def sign_up(
    payload: SignUpRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=422, detail="Email already exists")

    try:
        if not redeem_otp(db, payload.email, payload.otp):
            db.rollback()
            logger.info("Sign-up rejected, invalid OTP: email=%s", payload.email)
            raise HTTPException(
                status_code=422,
                detail="Invalid OTP code either used or expired"
            )

        user = User(
            name=payload.name,
            email=payload.email,
            phone=payload.phone,
            password=hash_password(payload.password),
        )
        db.add(user)
        mark_email_codes_used(db, payload.email)
        db.commit()
    except HTTPException:
        raise
    except Exception:
        db.rollback()
        raise
    db.refresh(user)

    logger.info("Sign up successful: user_id=%s, email=%s", user.id, user.email)
    start_session(user, response, settings)
    return UserResponse(message="Sign up successful", data=UserOut.model_validate(user))


@router.post("/sign-in", response_model=UserResponse)
def sign_in(
    credentials: SignInRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = db.query(User).filter(User.email == credentials.email).first()
    if not user or not verify_password(credentials.password, user.password):
        logger.info("Sign-in failed: email=%s, known_user=%s", credentials.email, user is not None)
        raise HTTPException(status_code=422, detail="Invalid email or password")

    logger.info("Login successful: user_id=%s, email=%s", user.id, user.email)
    start_session(user, response, settings)
    return UserResponse(message="Login successful", data=UserOut.model_validate(user))


@router.post("/send-email", response_model=MessageResponse)
def send_email(
    payload: SendCodeRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    otp = issue_otp(db, payload.email)

    # Dev mode: write the code to the logs (simulate email)
    if settings.DEV_MODE:
        logger.info("[DEV] OTP for %s: %s", otp.email, otp.code)

    return MessageResponse(message="OTP sent successfully")


@router.get("/detail", response_model=UserDetailResponse)
def get_user_detail(
    identity: TokenIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.id == identity.id).first()
    data = UserOut.model_validate(user) if user else {}
    return UserDetailResponse(message="User details fetched successfully", data=data)
