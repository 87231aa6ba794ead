from fastapi import Request
from fastapi.security.utils import get_authorization_scheme_param
from slowapi import Limiter
from slowapi.util import get_remote_address

import auth
import errors
from config import settings


def rate_limit_key(request: Request) -> str:
    """Throttle signed-in users per account, anonymous browsing per client address."""
    scheme, token = get_authorization_scheme_param(request.headers.get("Authorization"))
    if scheme.lower() == "bearer" and token:
        try:
            user_id = auth.decode_token(token).get("id")
        except errors.UnauthenticatedError:
            user_id = None
        if user_id is not None:
            return f"user:{user_id}"
    return get_remote_address(request)


limiter = Limiter(
    key_func=rate_limit_key,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)
