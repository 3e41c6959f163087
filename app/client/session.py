import logging
from typing import Callable, Optional

from supabase import AsyncClient

from app.core.errors import Unauthorized, upstream_message


logger = logging.getLogger(__name__)

SIGNED_OUT = "SIGNED_OUT"


class SessionStore:
    """
    The client's current Supabase session.

    Lifecycle: ``hydrate()`` once at start-up, ``start()`` to follow auth state
    events (sign-in, token refresh, sign-out) and ``clear()`` / ``sign_out()``
    when the user leaves. Listeners registered with ``add_listener`` are
    called with the new session (or None) on every change.
    """

    def __init__(self, client: AsyncClient):
        self.client = client
        self._session = None
        self._listeners: list[Callable] = []
        self._auth_subscription = None

    @property
    def session(self):
        return self._session

    @property
    def user_id(self) -> Optional[str]:
        if self._session is None or self._session.user is None:
            return None
        return str(self._session.user.id)

    @property
    def access_token(self) -> Optional[str]:
        return self._session.access_token if self._session else None

    def require_user_id(self) -> str:
        user_id = self.user_id
        if user_id is None:
            raise Unauthorized("No active session. Please log in again.")
        return user_id

    def require_access_token(self) -> str:
        token = self.access_token
        if not token:
            raise Unauthorized("No active session. Please log in again.")
        return token

    def add_listener(self, listener: Callable) -> None:
        self._listeners.append(listener)

    async def hydrate(self):
        self._set(await self.client.auth.get_session())
        return self._session

    def start(self) -> None:
        if self._auth_subscription is None:
            self._auth_subscription = self.client.auth.on_auth_state_change(
                self.handle_auth_event
            )

    def stop(self) -> None:
        if self._auth_subscription is not None:
            self._auth_subscription.unsubscribe()
            self._auth_subscription = None

    def handle_auth_event(self, event, session) -> None:
        name = getattr(event, "value", event)
        logger.info(f"auth_event event={name}")
        if name == SIGNED_OUT:
            self.clear()
        else:
            self._set(session)

    async def sign_in(self, email: str, password: str):
        try:
            res = await self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as e:
            raise Unauthorized("Invalid email or password.", upstream_message(e))
        self._set(res.session)
        return self._session

    async def sign_out(self) -> None:
        try:
            await self.client.auth.sign_out()
        finally:
            self.clear()

    def clear(self) -> None:
        self._set(None)

    def _set(self, session) -> None:
        self._session = session
        for listener in list(self._listeners):
            listener(session)
