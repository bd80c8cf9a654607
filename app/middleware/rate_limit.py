from slowapi import Limiter
from starlette.requests import Request

from app.config import settings
from app.services.session_service import decode_access_token


def get_real_client_ip(request: Request) -> str:
    """Client IP for rate limiting.

    X-Forwarded-For is only honoured when ``trust_forwarded_for`` is set, since
    any client can send the header on a direct connection.
    """
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def get_license_holder_key(request: Request) -> str:
    """Key validation limits on the token subject so a user behind a shared
    address gets their own budget. Unauthenticated requests fall back to the IP.
    """
    authorization = request.headers.get("Authorization", "")
    if authorization.startswith("Bearer "):
        try:
            return f"user:{decode_access_token(authorization[7:]).subject}"
        except ValueError:
            pass
    return f"ip:{get_real_client_ip(request)}"


limiter = Limiter(key_func=get_real_client_ip, enabled=settings.rate_limit_enabled)
