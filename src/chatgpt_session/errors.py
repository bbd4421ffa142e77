from __future__ import annotations


class ChatGPTError(Exception):
    """Base class for every error raised by the client."""


class InvalidSessionTokenError(ChatGPTError, ValueError):
    def __init__(self, message: str = "ChatGPT invalid session token"):
        super().__init__(message)


class AuthenticationError(ChatGPTError):
    """The session token could not be exchanged for an access token."""

    def __init__(self, message: str, *, error_code: str | None = None):
        super().__init__(message)
        self.error_code = error_code


class SessionExpiredError(AuthenticationError):
    pass


class TransportError(ChatGPTError):
    def __init__(self, message: str, *, status_code: int, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class StreamParseError(ChatGPTError):
    def __init__(self, message: str, *, payload: str):
        super().__init__(message)
        self.payload = payload


class IncompleteStreamError(ChatGPTError):
    """The event stream closed before the completion sentinel arrived."""

    def __init__(self, message: str, *, partial_response: str = ""):
        super().__init__(message)
        self.partial_response = partial_response
