# mushi/middleware/rbac.py
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mushi.core.error_messages import ErrorResponses
from mushi.models.session import Session
from mushi.services.session import JWTAuthProvider

bearer_scheme = HTTPBearer(auto_error=False)

ACCESS_TOKEN_COOKIE = "access_token"


def token_from_request(request: Request, credentials: Optional[HTTPAuthorizationCredentials] = None) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(ACCESS_TOKEN_COOKIE)


def get_auth_provider() -> JWTAuthProvider:
    return JWTAuthProvider()


async def get_current_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: JWTAuthProvider = Depends(get_auth_provider),
) -> Session:
    token = token_from_request(request, credentials)
    if not token:
        raise ErrorResponses.INVALID_TOKEN
    session = auth.get_session(token)
    if session is None:
        raise ErrorResponses.INVALID_TOKEN
    return session
