"""JSON auth endpoints for the SPA (/v1/auth/login, /signup, /ct-signup, /me).

Login and both sign-up flows return { accessToken, user } so the client
can keep the token in memory and go straight to the student dashboard.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from inspira.api.dependencies import RepoDep, UserDep, http_error
from inspira.models.user import User
from inspira.services import accounts_service, auth_service, token_service
from inspira.services.errors import DomainError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/auth", tags=["auth"])


# --- Request / Response schemas -------------------------------------------


class LoginIn(BaseModel):
    email: str
    password: str


class SignupIn(BaseModel):
    name: str
    email: str
    password: str
    phone: str | None = None


class CtSignupIn(SignupIn):
    access_code: str


class UserOut(BaseModel):
    id: str
    email: str
    name: str
    roles: list[str]
    phone: str | None = None
    is_ct_student: bool = False

    @classmethod
    def of(cls, user: User) -> UserOut:
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            roles=list(user.roles),
            phone=user.phone,
            is_ct_student=user.is_ct_student,
        )


class AuthResponse(BaseModel):
    accessToken: str
    user: UserOut


def _issue(user: User) -> AuthResponse:
    access_token = token_service.create_access_token(
        sub=user.id, roles=list(user.roles)
    )
    return AuthResponse(accessToken=access_token, user=UserOut.of(user))


# --- POST /v1/auth/login --------------------------------------------------


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginIn, repos: RepoDep) -> AuthResponse:
    email = payload.email.lower().strip()

    user = await auth_service.authenticate_user(repos.users, email, payload.password)
    if user is None:
        logger.warning("Login failed  email=%s", email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Invalid email or password"},
        )

    logger.info("Login succeeded  user_id=%s email=%s", user.id, email)
    return _issue(user)


# --- POST /v1/auth/signup -------------------------------------------------


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def signup(payload: SignupIn, repos: RepoDep) -> AuthResponse:
    try:
        user = await accounts_service.register_student(
            repos.users,
            name=payload.name,
            email=payload.email,
            password=payload.password,
            phone=payload.phone,
        )
    except DomainError as e:
        raise http_error(e) from e
    return _issue(user)


# --- POST /v1/auth/ct-signup ----------------------------------------------


@router.post(
    "/ct-signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def ct_signup(payload: CtSignupIn, repos: RepoDep) -> AuthResponse:
    """Sign up with a single-use CT access code handed out by an admin."""
    try:
        user = await accounts_service.register_ct_student(
            repos.users,
            repos.access_codes,
            name=payload.name,
            email=payload.email,
            password=payload.password,
            access_code=payload.access_code,
            phone=payload.phone,
        )
    except DomainError as e:
        raise http_error(e) from e
    return _issue(user)


# --- GET /v1/auth/me ------------------------------------------------------


@router.get("/me", response_model=UserOut)
async def me(principal: UserDep, repos: RepoDep) -> UserOut:
    user = await repos.users.get_by_id(principal.user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account no longer exists",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return UserOut.of(user)
