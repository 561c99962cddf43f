"""
Payment gateway error kinds and provider error mapping.
"""
from __future__ import annotations

from enum import Enum


class GatewayErrorKind(str, Enum):
    INVALID_REQUEST = "invalid_request"
    NOT_FOUND = "not_found"
    ALREADY_REFUNDED = "already_refunded"
    CARD = "card"
    AUTHENTICATION = "authentication"
    PERMISSION = "permission"
    RATE_LIMIT = "rate_limit"
    IDEMPOTENCY = "idempotency"
    CONNECTION = "connection"
    API = "api"


# Stripe error codes that get a dedicated kind regardless of the error class
RESOURCE_MISSING = "resource_missing"
CHARGE_ALREADY_REFUNDED = "charge_already_refunded"

STRIPE_CODE_TO_KIND = {
    RESOURCE_MISSING: GatewayErrorKind.NOT_FOUND,
    CHARGE_ALREADY_REFUNDED: GatewayErrorKind.ALREADY_REFUNDED,
}

# Keyed by SDK exception class name so the table survives SDK module moves
STRIPE_ERROR_CLASS_TO_KIND = {
    "InvalidRequestError": GatewayErrorKind.INVALID_REQUEST,
    "CardError": GatewayErrorKind.CARD,
    "AuthenticationError": GatewayErrorKind.AUTHENTICATION,
    "PermissionError": GatewayErrorKind.PERMISSION,
    "RateLimitError": GatewayErrorKind.RATE_LIMIT,
    "IdempotencyError": GatewayErrorKind.IDEMPOTENCY,
    "APIConnectionError": GatewayErrorKind.CONNECTION,
    "APIError": GatewayErrorKind.API,
}

# Status used when the SDK error carries no HTTP status of its own
DEFAULT_STATUS_BY_KIND = {
    GatewayErrorKind.INVALID_REQUEST: 400,
    GatewayErrorKind.NOT_FOUND: 404,
    GatewayErrorKind.ALREADY_REFUNDED: 400,
    GatewayErrorKind.CARD: 402,
    GatewayErrorKind.AUTHENTICATION: 401,
    GatewayErrorKind.PERMISSION: 403,
    GatewayErrorKind.RATE_LIMIT: 429,
    GatewayErrorKind.IDEMPOTENCY: 400,
}
