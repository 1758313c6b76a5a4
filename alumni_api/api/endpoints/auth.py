from fastapi import APIRouter, Depends, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from alumni_api.core.database import get_db
from alumni_api.core.exceptions import (
    AuthenticationError,
    DuplicateEmailError,
    InactiveAccountError,
    InvalidCredentialsError,
)
from alumni_api.core.logging_config import logger, set_user_id
from alumni_api.core.rate_limiter import auth_rate_limit, register_rate_limit
from alumni_api.core.security import (
    verify_password,
    get_password_hash,
    create_token_pair,
    decode_token,
)
from alumni_api.core.types import utcnow
from alumni_api.models.user import User
from alumni_api.modules.auth.dependencies import get_current_user
from alumni_api.schemas.auth import UserRegister, UserLogin, RefreshTokenRequest, Token, AuthResponse
from alumni_api.schemas.user import UserResponse

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@register_rate_limit()
async def register(
    request: Request,
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """Register a new alumni account"""
    client_ip = request.client.host if request.client else "unknown"
    email = user_data.email.lower()

    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        logger.log_auth_event(
            event="register",
            success=False,
            user_email=email,
            reason="Email already registered",
            client_ip=client_ip
        )
        raise DuplicateEmailError()

    user = User(
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        email=email,
        phone=user_data.phone,
        hashed_password=get_password_hash(user_data.password),
        graduation_year=user_data.graduation_year,
        degree=user_data.degree,
        major=user_data.major,
        profession=user_data.profession,
        company=user_data.company,
        last_login=utcnow(),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    set_user_id(str(user.id))
    logger.log_auth_event(event="register", success=True, user_email=email, client_ip=client_ip)

    return AuthResponse(
        user=UserResponse.from_user(user, full=True),
        **create_token_pair(str(user.id), user.email),
    )


@router.post("/login", response_model=AuthResponse)
@auth_rate_limit()
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Exchange email + password for a token pair"""
    client_ip = request.client.host if request.client else "unknown"
    email = credentials.email.lower()

    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=email,
            reason="Invalid credentials",
            client_ip=client_ip
        )
        raise InvalidCredentialsError()

    if not user.is_active:
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=email,
            reason="Account inactive",
            client_ip=client_ip
        )
        raise InactiveAccountError()

    user.last_login = utcnow()
    await db.commit()

    set_user_id(str(user.id))
    logger.log_auth_event(event="login", success=True, user_email=email, client_ip=client_ip)

    return AuthResponse(
        user=UserResponse.from_user(user, full=True),
        **create_token_pair(str(user.id), user.email),
    )


@router.post("/refresh", response_model=Token)
async def refresh_token(
    body: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db)
):
    """Issue a new token pair from a refresh token"""
    payload = decode_token(body.refresh_token, expected_type="refresh")

    result = await db.execute(select(User).where(User.id == payload["sub"]))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise InactiveAccountError()

    logger.log_auth_event(event="refresh", success=True, user_email=user.email)
    return Token(**create_token_pair(str(user.id), user.email))


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Current user, unfiltered"""
    return UserResponse.from_user(current_user, full=True)
