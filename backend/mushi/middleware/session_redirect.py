# mushi/middleware/session_redirect.py
from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from mushi.middleware.rbac import ACCESS_TOKEN_COOKIE
from mushi.services.session import JWTAuthProvider

PROTECTED_PREFIXES = ("/templates", "/dashboard", "/account")
SIGNED_IN_REDIRECTS = ("/", "/signup")
EXCLUDED_PREFIXES = ("/api", "/_next/static", "/_next/image", "/favicon.ico", "/public/", "/healthz")


class SessionRedirectMiddleware(BaseHTTPMiddleware):
    """
    Page-level routing on session presence: signed-out visitors are sent to
    the entry page from protected views, signed-in users skip the entry and
    sign-up pages.
    """

    def __init__(self, app, auth=None, entry_point: str = "/", home: str = "/templates"):
        super().__init__(app)
        self.auth = auth or JWTAuthProvider()
        self.entry_point = entry_point
        self.home = home

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path.startswith(EXCLUDED_PREFIXES):
            return await call_next(request)

        token = request.cookies.get(ACCESS_TOKEN_COOKIE)
        auth_header = request.headers.get("authorization", "")
        if not token and auth_header.lower().startswith("bearer "):
            token = auth_header[7:]
        session = self.auth.get_session(token)

        if session is None and path.startswith(PROTECTED_PREFIXES):
            return RedirectResponse(self.entry_point, status_code=307)
        if session is not None and path in SIGNED_IN_REDIRECTS:
            return RedirectResponse(self.home, status_code=307)
        return await call_next(request)
