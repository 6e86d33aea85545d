"""
Authentication Service - Rentwise
JWT-based auth with bcrypt password hashing. Credentials live on the
profiles table.
"""
import time
import bcrypt
import jwt
from typing import Optional, Dict, Any

from rentwise.config import get_settings
from rentwise.models import Profile, Role
from rentwise.services.profile_service import ProfileService

profile_service = ProfileService()


def hash_password(plain_password: str) -> str:
    return bcrypt.hashpw(plain_password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against a bcrypt hash."""
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def register_user(email: str, password: str, full_name: str = "", role: Role = Role.TENANT) -> Profile:
    """Create a profile with a hashed password."""
    return profile_service.create_profile(email, hash_password(password), full_name, role)


def authenticate_user(email: str, password: str) -> Optional[Profile]:
    """Authenticate a user. Returns the profile or None."""
    found = profile_service.get_credentials(email)
    if not found:
        return None
    profile, password_hash = found
    if not verify_password(password, password_hash):
        return None
    return profile


def create_token(profile: Profile) -> str:
    """Create a JWT token for an authenticated profile."""
    settings = get_settings()
    now = int(time.time())
    payload = {
        "sub": profile.id,
        "role": profile.role.value,
        "email": profile.email,
        "iat": now,
        "exp": now + settings.jwt_expiration,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify a JWT token. Returns decoded payload or None."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
