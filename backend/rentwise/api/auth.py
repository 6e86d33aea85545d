"""
Auth API routes - Rentwise
Sign-in / sign-up, JWT verification and the request-context dependency
every other router builds on.
"""
from enum import Enum
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Header, Query
from pydantic import BaseModel, Field

from rentwise.errors import PermissionDeniedError
from rentwise.models import Profile, RequestContext, Role
from rentwise.services.auth_service import (
    authenticate_user,
    create_token,
    profile_service,
    register_user,
    verify_token,
)

router = APIRouter(prefix="/auth", tags=["auth"])


class AuthMode(str, Enum):
    SIGNIN = "signin"
    SIGNUP = "signup"


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(LoginRequest):
    password: str = Field(min_length=6)
    full_name: str = ""
    role: Role = Role.TENANT


class AuthRequest(LoginRequest):
    full_name: str = ""
    role: Role = Role.TENANT


class AuthResponse(BaseModel):
    token: str
    profile: Profile


async def get_request_context(authorization: Optional[str] = Header(None)) -> RequestContext:
    """Dependency: verify the bearer token and load the caller's profile."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Not authenticated")

    token = authorization
    if token.startswith("Bearer "):
        token = token[7:]

    payload = verify_token(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    profile = profile_service.get_profile(payload.get("sub", ""))
    if profile is None:
        raise HTTPException(status_code=401, detail="Profile not found")

    return RequestContext(user_id=profile.id, profile=profile)


def require_roles(*roles: Role):
    """Dependency factory: allow only callers whose role is in `roles`."""
    async def dep(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        if ctx.role not in roles:
            raise PermissionDeniedError("Permission denied", "Insufficient role")
        return ctx
    return dep


def _sign_up(email: str, password: str, full_name: str, role: Role) -> AuthResponse:
    if role == Role.ADMIN:
        raise HTTPException(status_code=403, detail="Admin accounts cannot be self-registered")
    if len(password) < 6:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")
    profile = register_user(email, password, full_name, role)
    return AuthResponse(token=create_token(profile), profile=profile)


def _sign_in(email: str, password: str) -> AuthResponse:
    profile = authenticate_user(email, password)
    if not profile:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return AuthResponse(token=create_token(profile), profile=profile)


@router.post("", response_model=AuthResponse)
async def authenticate(req: AuthRequest, mode: AuthMode = Query(AuthMode.SIGNIN)):
    """Sign in, or sign up when `mode=signup`."""
    if mode == AuthMode.SIGNUP:
        return _sign_up(req.email, req.password, req.full_name, req.role)
    return _sign_in(req.email, req.password)


@router.post("/register", response_model=AuthResponse)
async def register(req: RegisterRequest):
    return _sign_up(req.email, req.password, req.full_name, req.role)


@router.post("/login", response_model=AuthResponse)
async def login(req: LoginRequest):
    """Authenticate and return a JWT token."""
    return _sign_in(req.email, req.password)


@router.get("/me", response_model=Profile)
async def get_me(ctx: RequestContext = Depends(get_request_context)):
    """Return current user's profile."""
    return ctx.profile
