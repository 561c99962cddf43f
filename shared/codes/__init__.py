"""
Shared response messages used across layers (Domain/Core/API).

The envelope ``code`` mirrors the HTTP status, so only the human readable
messages need a single source of truth.
"""
from enum import Enum


class ResponseMessage(str, Enum):
    """Standard envelope messages keyed by HTTP status meaning."""

    # 2xx
    OK = "Request successful"
    CREATED = "Resource created successfully"

    # 4xx
    BAD_REQUEST = "Bad request"
    UNAUTHORIZED = "Unauthorized access"
    FORBIDDEN = "Access is forbidden"
    NOT_FOUND = "Resource not found"
    CONFLICT = "Conflict with current state of resource"
    TOO_MANY_REQUESTS = "Too many requests"

    # 5xx
    INTERNAL_SERVER_ERROR = "Internal server error"
    BAD_GATEWAY = "Bad gateway"
    SERVICE_UNAVAILABLE = "Service unavailable"

    def __str__(self) -> str:
        return self.value


__all__ = ["ResponseMessage"]
