"""Session boundary: who is signed in.

The manager's credentials come from configuration (``MANAGER_EMAIL`` and a
passlib ``MANAGER_PASSWORD_HASH``); the session is a signed cookie.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from passlib.context import CryptContext

from em_diary import config

# pbkdf2_sha256 ships with passlib; no compiled backend needed
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

SESSION_COOKIE = "session"


@dataclass(frozen=True)
class Manager:
    email: str
    display_name: str


DEMO_MANAGER = Manager(email="demo@emdiary.local", display_name="Demo Manager")


@dataclass
class AuthSession:
    """What views see of the session: the manager, a loading flag, sign-out."""

    current_user: Optional[Manager]
    loading: bool = False

    @property
    def is_signed_in(self) -> bool:
        return self.current_user is not None

    def sign_out(self, response):
        return clear_session_cookie(response)


class NotAuthenticated(Exception):
    """Raised by ``require_auth``; the app redirects to the sign-in page."""

    def __init__(self, next_url: str = "/"):
        super().__init__("Not authenticated")
        self.next_url = next_url


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(config.SECRET_KEY)


def hash_password(password: str) -> str:
    """Hash a password for storing."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a stored password against one provided by user."""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Malformed or unrecognized hash
        return False


def create_session_token(email: str) -> str:
    """Create a session token for the manager."""
    data = {
        "email": email,
        "created": datetime.now(timezone.utc).isoformat()
    }
    return _serializer().dumps(data)


def decode_session_token(token: str) -> Optional[dict]:
    """Decode and validate a session token."""
    try:
        return _serializer().loads(token, max_age=config.SESSION_EXPIRE_MINUTES * 60)
    except (BadSignature, SignatureExpired):
        return None


def authenticate_manager(email: str, password: str) -> Optional[Manager]:
    """Check sign-in credentials against the configured manager account."""
    email = (email or "").strip().lower()
    if not config.MANAGER_EMAIL or email != config.MANAGER_EMAIL:
        return None
    if not verify_password(password, config.MANAGER_PASSWORD_HASH):
        return None
    return Manager(email=email, display_name=email.split("@")[0])


def get_current_user(request: Request) -> Optional[Manager]:
    """Manager for this request, or None when signed out."""
    if config.DEMO_MODE:
        return DEMO_MANAGER

    token = request.cookies.get(SESSION_COOKIE)
    if not token:
        return None

    data = decode_session_token(token)
    if not data:
        return None

    email = data.get("email")
    if not email or email != config.MANAGER_EMAIL:
        return None
    return Manager(email=email, display_name=email.split("@")[0])


def get_auth_session(request: Request) -> AuthSession:
    """Dependency: the session object views render against."""
    return AuthSession(current_user=get_current_user(request))


def is_signed_in(request: Request) -> bool:
    return get_current_user(request) is not None


def require_auth(request: Request) -> Manager:
    """Dependency for pages that need a signed-in manager."""
    user = get_current_user(request)
    if user is None:
        next_url = request.url.path
        if request.url.query:
            next_url = f"{next_url}?{request.url.query}"
        raise NotAuthenticated(next_url)
    return user


def set_session_cookie(response, email: str):
    """Set session cookie on response."""
    token = create_session_token(email)
    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        httponly=True,
        max_age=config.SESSION_EXPIRE_MINUTES * 60,
        samesite="lax"
    )
    return response


def clear_session_cookie(response):
    """Clear session cookie on response."""
    response.delete_cookie(SESSION_COOKIE)
    return response
