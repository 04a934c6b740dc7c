# mushi/services/session.py
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, List, Optional

import jwt

from mushi.models.session import Session
from mushi.utils.auth_utils import decode_token

logger = logging.getLogger(__name__)

SessionHandler = Callable[[Optional[Session]], None]


class AuthProvider(ABC):
    @abstractmethod
    def get_session(self, token: Optional[str]) -> Optional[Session]:
        """Validate a token; None when it is missing or invalid."""


class JWTAuthProvider(AuthProvider):
    def __init__(self, secret: Optional[str] = None):
        self.secret = secret

    def get_session(self, token):
        if not token:
            return None
        try:
            payload = decode_token(token, secret=self.secret)
        except jwt.InvalidTokenError as e:
            logger.info("Rejected session token: %s", e)
            return None

        expires_at = None
        if payload.get("exp") is not None:
            expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        return Session(user_id=str(payload["sub"]), email=payload.get("email"), expires_at=expires_at)


class SessionContext:
    """
    Holds the current session and notifies subscribers when it changes.
    Consumers keep a reference to the context and re-read get_session() when
    notified.
    """

    def __init__(self, auth: Optional[AuthProvider] = None, session: Optional[Session] = None):
        self._auth = auth or JWTAuthProvider()
        self._session = session
        self._handlers: List[SessionHandler] = []

    def get_session(self) -> Optional[Session]:
        return self._session

    def subscribe(self, handler: SessionHandler) -> Callable[[], None]:
        self._handlers.append(handler)

        def unsubscribe():
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def set_session(self, session: Optional[Session]) -> None:
        if session == self._session:
            return
        self._session = session
        for handler in list(self._handlers):
            try:
                handler(session)
            except Exception:
                logger.exception("Session change handler failed")

    def refresh(self, token: Optional[str]) -> Optional[Session]:
        session = self._auth.get_session(token)
        self.set_session(session)
        return session

    def sign_out(self) -> None:
        self.set_session(None)
