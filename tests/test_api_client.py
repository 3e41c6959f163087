"""Tests for the HTTP API client and ChatClient wiring.

HTTP calls are mocked with respx.
"""

import json
from types import SimpleNamespace

import httpx
import pytest
import respx

from app.chat.schemas import ConversationSummary
from app.client.api import SoulMatchApi, raise_for_api_error
from app.client.chat import ChatClient
from app.client.session import SessionStore
from app.core.errors import Forbidden, InvalidRequest, Unauthorized, UpstreamFailure


BASE_URL = "https://api.soulmatch.test"

CONVERSATION = {
    "id": "c1",
    "partner": {"id": "u2", "name": "Sari", "photo_url": None},
    "compatibility": 88,
    "stage": "pdkt",
    "created_at": "2024-01-01T00:00:00+00:00",
    "last_message": None,
}


def signed_in_session(token="access-u1"):
    store = SessionStore(SimpleNamespace(auth=None))
    store._set(SimpleNamespace(access_token=token, user=SimpleNamespace(id="u1")))
    return store


def make_api(session=None):
    return SoulMatchApi(httpx.AsyncClient(base_url=BASE_URL), session or signed_in_session())


def make_chat():
    return ChatClient(SimpleNamespace(), httpx.AsyncClient(base_url=BASE_URL), signed_in_session())


class StubTimeline:
    def __init__(self):
        self.selected = []

    async def select_conversation(self, conversation_id):
        self.selected.append(conversation_id)


class TestRaiseForApiError:
    def test_success_passes(self):
        raise_for_api_error(httpx.Response(200, json={}))

    @pytest.mark.parametrize(
        "status,error_class",
        [
            (400, InvalidRequest),
            (401, Unauthorized),
            (403, Forbidden),
            (422, InvalidRequest),
            (500, UpstreamFailure),
            (502, UpstreamFailure),
        ],
    )
    def test_status_maps_to_error(self, status, error_class):
        response = httpx.Response(status, json={"detail": "nope", "details": "why"})

        with pytest.raises(error_class) as exc_info:
            raise_for_api_error(response)

        assert exc_info.value.message == "nope"
        assert exc_info.value.details == "why"

    def test_validation_list_detail_is_invalid_request(self):
        response = httpx.Response(
            422, json={"detail": [{"loc": ["body"], "msg": "Field required"}]}
        )

        with pytest.raises(InvalidRequest) as exc_info:
            raise_for_api_error(response)

        assert exc_info.value.message == "Invalid request."

    def test_non_json_body_uses_default_message(self):
        with pytest.raises(UpstreamFailure) as exc_info:
            raise_for_api_error(httpx.Response(503, text="Service Unavailable"))

        assert exc_info.value.message == UpstreamFailure.default_message


class TestSoulMatchApi:
    @pytest.mark.asyncio
    async def test_list_conversations_sends_bearer(self):
        with respx.mock(base_url=BASE_URL) as router:
            route = router.get("/messages/conversations").respond(
                200, json={"conversations": [CONVERSATION]}
            )

            conversations = await make_api().list_conversations()

        assert route.calls.last.request.headers["Authorization"] == "Bearer access-u1"
        assert conversations[0].id == "c1"
        assert conversations[0].partner.name == "Sari"

    @pytest.mark.asyncio
    async def test_open_conversation(self):
        with respx.mock(base_url=BASE_URL) as router:
            route = router.post("/messages/open").respond(
                200, json={"conversation_id": "c1", "is_new": True}
            )

            opened = await make_api().open_conversation("u2")

        assert json.loads(route.calls.last.request.content) == {"target_user_id": "u2"}
        assert opened.conversation_id == "c1"
        assert opened.is_new is True

    @pytest.mark.asyncio
    async def test_open_conversation_error(self):
        with respx.mock(base_url=BASE_URL) as router:
            router.post("/messages/open").respond(
                400,
                json={"detail": "You cannot open a conversation with yourself.", "code": "E_INVALID_REQUEST"},
            )

            with pytest.raises(InvalidRequest) as exc_info:
                await make_api().open_conversation("u1")

        assert exc_info.value.message == "You cannot open a conversation with yourself."

    @pytest.mark.asyncio
    async def test_signed_out_never_calls_api(self):
        session = SessionStore(SimpleNamespace(auth=None))

        with respx.mock(base_url=BASE_URL, assert_all_called=False) as router:
            route = router.get("/messages/conversations").respond(
                200, json={"conversations": []}
            )

            with pytest.raises(Unauthorized):
                await make_api(session).list_conversations()

        assert not route.called


class TestChatClient:
    @pytest.mark.asyncio
    async def test_open_with_refreshes_inbox_and_selects(self):
        chat = make_chat()
        chat.timeline = StubTimeline()

        with respx.mock(base_url=BASE_URL) as router:
            router.post("/messages/open").respond(
                200, json={"conversation_id": "c1", "is_new": True}
            )
            inbox = router.get("/messages/conversations").respond(
                200, json={"conversations": [CONVERSATION]}
            )

            conversation_id = await chat.open_with("u2")

        assert conversation_id == "c1"
        assert inbox.call_count == 1
        assert [c.id for c in chat.inbox.conversations] == ["c1"]
        assert chat.timeline.selected == ["c1"]

    @pytest.mark.asyncio
    async def test_open_existing_known_conversation_skips_refresh(self):
        chat = make_chat()
        chat.inbox.load([ConversationSummary(**CONVERSATION)])
        chat.timeline = StubTimeline()

        with respx.mock(base_url=BASE_URL, assert_all_called=False) as router:
            router.post("/messages/open").respond(
                200, json={"conversation_id": "c1", "is_new": False}
            )
            inbox = router.get("/messages/conversations").respond(
                200, json={"conversations": []}
            )

            await chat.open_with("u2")

        assert not inbox.called
        assert chat.timeline.selected == ["c1"]
