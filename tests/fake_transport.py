import json
from typing import Any


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport:
    """Stands in for HttpTransport: scripted session responses and event streams."""

    def __init__(
        self,
        session_responses: list[Any] | None = None,
        streams: list[list[str]] | None = None,
    ):
        self._session_responses = list(session_responses or [{"accessToken": "token-1"}])
        self._streams = list(streams or [])
        self.get_calls: list[tuple[str, dict]] = []
        self.stream_calls: list[tuple[str, dict, Any]] = []
        self.closed = False

    async def get_json(self, url: str, *, headers: dict[str, str] | None = None) -> Any:
        self.get_calls.append((url, dict(headers or {})))
        if len(self._session_responses) > 1:
            response = self._session_responses.pop(0)
        else:
            response = self._session_responses[0]
        if isinstance(response, BaseException):
            raise response
        return response

    async def stream_events(self, url: str, *, headers: dict[str, str] | None = None, json_body: Any = None):
        self.stream_calls.append((url, dict(headers or {}), json_body))
        for data in self._streams.pop(0):
            yield data

    async def aclose(self) -> None:
        self.closed = True


def message_event(
    text: str | None,
    *,
    message_id: str = "m1",
    conversation_id: str = "c1",
) -> str:
    parts = [] if text is None else [text]
    return json.dumps({
        "message": {
            "id": message_id,
            "author": {"role": "assistant"},
            "content": {"content_type": "text", "parts": parts},
            "end_turn": None,
        },
        "conversation_id": conversation_id,
        "error": None,
    })
