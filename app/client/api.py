import httpx

from app.chat.schemas import ConversationSummary, OpenConversationResponseModel
from app.core.errors import (
    AppError,
    Conflict,
    Forbidden,
    InvalidRequest,
    NotFound,
    Unauthorized,
    UpstreamFailure,
)

from .session import SessionStore


STATUS_TO_ERROR = {
    400: InvalidRequest,
    401: Unauthorized,
    403: Forbidden,
    404: NotFound,
    409: Conflict,
    422: InvalidRequest,
}


def raise_for_api_error(response: httpx.Response) -> None:
    if response.is_success:
        return

    try:
        body = response.json()
    except ValueError:
        body = {}

    detail = body.get("detail") if isinstance(body, dict) else None
    if not isinstance(detail, str):
        detail = None
    details = body.get("details") if isinstance(body, dict) else None

    error_class: type[AppError] = STATUS_TO_ERROR.get(response.status_code, UpstreamFailure)
    raise error_class(detail, details)


class SoulMatchApi:
    """Calls to the SoulMatch HTTP API on behalf of the signed-in user."""

    def __init__(self, http: httpx.AsyncClient, session: SessionStore):
        self.http = http
        self.session = session

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.session.require_access_token()}"}

    async def list_conversations(self) -> list[ConversationSummary]:
        response = await self.http.get("/messages/conversations", headers=self._headers())
        raise_for_api_error(response)
        return [
            ConversationSummary(**row) for row in response.json()["conversations"]
        ]

    async def open_conversation(self, target_user_id: str) -> OpenConversationResponseModel:
        response = await self.http.post(
            "/messages/open",
            json={"target_user_id": target_user_id},
            headers=self._headers(),
        )
        raise_for_api_error(response)
        return OpenConversationResponseModel(**response.json())
