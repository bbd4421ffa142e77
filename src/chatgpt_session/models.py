from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SessionResult:
    """Body of the ``/auth/session`` exchange."""

    access_token: str | None
    error: str | None
    expires: str | None = None
    user: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> SessionResult:
        if not isinstance(data, dict):
            return cls(access_token=None, error=None)
        return cls(
            access_token=data.get("accessToken") or None,
            error=data.get("error") or None,
            expires=data.get("expires"),
            user=data.get("user"),
        )


@dataclass(frozen=True)
class MessageContent:
    content_type: str
    parts: list[Any] = field(default_factory=list)


@dataclass(frozen=True)
class Message:
    id: str | None
    role: str | None
    content: MessageContent | None
    end_turn: bool | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Message:
        raw_content = data.get("content")
        content = None
        if isinstance(raw_content, dict):
            parts = raw_content.get("parts")
            if parts is None:
                parts = []
            elif not isinstance(parts, list):
                raise ValueError(f"message content parts must be a list, got {type(parts).__name__}")
            content = MessageContent(
                content_type=raw_content.get("content_type", "text"),
                parts=list(parts),
            )
        author = data.get("author")
        role = data.get("role")
        if role is None and isinstance(author, dict):
            role = author.get("role")
        return cls(
            id=data.get("id"),
            role=role,
            content=content,
            end_turn=data.get("end_turn"),
            metadata=data.get("metadata") or {},
        )

    @property
    def text(self) -> str:
        # Only the first part carries the reply text.
        if self.content is None or not self.content.parts:
            return ""
        first = self.content.parts[0]
        return first if isinstance(first, str) else ""


@dataclass(frozen=True)
class ConversationResponseEvent:
    """One parsed server-sent event of the conversation stream."""

    message: Message | None
    conversation_id: str | None
    error: Any = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> ConversationResponseEvent:
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        raw_message = data.get("message")
        message = Message.from_dict(raw_message) if isinstance(raw_message, dict) else None
        return cls(
            message=message,
            conversation_id=data.get("conversation_id"),
            error=data.get("error"),
            raw=data,
        )

    @property
    def text(self) -> str:
        return self.message.text if self.message is not None else ""
