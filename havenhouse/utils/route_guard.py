"""Cookie gate for the staff dashboard and the resident portal pages."""

from typing import Mapping, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse

from ..core.config import settings

STAFF_PREFIXES = ("/dashboard", "/staff")
STAFF_LOGIN = "/staff/login"
STAFF_HOME = "/dashboard"
PORTAL_PREFIX = "/portal"


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def resolve_redirect(path: str, cookies: Mapping[str, str]) -> Optional[str]:
    """Where a page request should be sent instead, or None to let it through.

    Only the presence of the cookie is checked here; API routes verify the
    token itself.
    """
    if any(_under(path, prefix) for prefix in STAFF_PREFIXES):
        has_token = bool(cookies.get(settings.staff_cookie_name))
        on_login = _under(path, STAFF_LOGIN)
        if not has_token and not on_login:
            return STAFF_LOGIN
        if has_token and on_login:
            return STAFF_HOME

    if _under(path, PORTAL_PREFIX):
        if not cookies.get(settings.resident_cookie_name) and path != PORTAL_PREFIX:
            return PORTAL_PREFIX

    return None


class RouteGuardMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request, call_next):
        target = resolve_redirect(request.url.path, request.cookies)
        if target is not None:
            return RedirectResponse(url=target, status_code=307)
        return await call_next(request)
