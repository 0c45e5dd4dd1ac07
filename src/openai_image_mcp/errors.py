from typing import Any


class ImageToolError(Exception):
    """Base class for every failure a tool call can report back to the host."""

    kind = "error"


class InvalidArgumentError(ImageToolError):
    kind = "validation"

    def __init__(self, field: str, value: Any, reason: str | None = None):
        self.field = field
        self.value = value
        self.reason = reason
        message = f"Invalid argument '{field}': {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ImageReadError(ImageToolError):
    kind = "io_open"

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Could not open '{path}': {reason}")


class TransportError(ImageToolError):
    kind = "transport"


class ApiError(ImageToolError):
    """Non-2xx answer from the Images API; the message is the raw body text."""

    kind = "api"

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(body)


class DecodeError(ImageToolError):
    kind = "decode"


class ImageWriteError(ImageToolError):
    kind = "io_write"

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Could not write '{path}': {reason}")
