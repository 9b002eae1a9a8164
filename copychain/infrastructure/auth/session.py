"""Session component - owns the current bearer credential for one client.

Created explicitly and injected into the generation gateway. initialize()
fetches the current session on start, close() tears it down. Listeners are
notified on sign-in, token refresh and sign-out.
"""

import logging
from collections.abc import Callable

import httpx

from copychain.domain.errors import IdentityError
from copychain.domain.ports.session import AuthSession, IdentityPort, SessionEvent

logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionEvent, AuthSession | None], None]


class SessionManager:
    """Lifecycle-scoped session state."""

    def __init__(self, identity: IdentityPort) -> None:
        self._identity = identity
        self._session: AuthSession | None = None
        self._initialized = False
        self._listeners: list[SessionListener] = []

    @property
    def session(self) -> AuthSession | None:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    async def initialize(self) -> AuthSession | None:
        """Load whatever session the identity provider already has."""
        session = await self._identity.current_session()
        self._initialized = True
        if session is not None:
            self._set(session, SessionEvent.SIGNED_IN)
        return session

    async def sign_in(self, session: AuthSession) -> None:
        """Adopt a session obtained from the identity provider."""
        self._initialized = True
        self._set(session, SessionEvent.SIGNED_IN)

    async def get_access_token(self) -> str | None:
        """A valid bearer token, refreshing an expired session once.

        Returns None when there is no session or the refresh fails.
        """
        if not self._initialized:
            await self.initialize()
        session = self._session
        if session is None:
            return None
        if session.is_expired():
            try:
                session = await self._identity.refresh(session)
            except (IdentityError, httpx.HTTPError) as e:
                logger.warning("Session refresh failed, signing out locally: %s", e)
                self._set(None, SessionEvent.SIGNED_OUT)
                return None
            self._set(session, SessionEvent.TOKEN_REFRESHED)
        return session.access_token

    async def sign_out(self) -> None:
        """Revoke remotely (best effort) and always invalidate locally."""
        session = self._session
        if session is None:
            return
        try:
            await self._identity.sign_out(session)
        except (IdentityError, httpx.HTTPError) as e:
            logger.warning("Remote sign out failed: %s", e)
        finally:
            self._set(None, SessionEvent.SIGNED_OUT)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener; returns the unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def close(self) -> None:
        """Teardown: drop the session and all listeners."""
        self._session = None
        self._initialized = False
        self._listeners.clear()
        if hasattr(self._identity, "close"):
            await self._identity.close()

    def _set(self, session: AuthSession | None, event: SessionEvent) -> None:
        self._session = session
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception:  # noqa: BLE001
                logger.exception("Session listener failed on %s", event.value)
