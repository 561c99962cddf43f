"""
Unwrap ``GatewayResult`` values into plain values or business exceptions.

Application services call :func:`unwrap` at their own boundary so that routes
only ever see values or ``BusinessException`` subclasses.
"""
from __future__ import annotations

from typing import Optional, TypeVar

from domain.common.exceptions import BusinessException, GatewayException, NotFoundException
from domain.payment.result import Err, GatewayResult
from shared.codes.payment_codes import GatewayErrorKind


T = TypeVar("T")


def to_exception(err: Err, *, not_found_message: Optional[str] = None) -> BusinessException:
    if err.kind is GatewayErrorKind.NOT_FOUND:
        return NotFoundException(
            not_found_message or err.message,
            details={"kind": err.kind.value, "provider_code": err.code},
        )
    return GatewayException(
        err.message,
        status_code=err.status_code,
        kind=err.kind.value,
        provider_code=err.code,
    )


def unwrap(result: GatewayResult[T], *, not_found_message: Optional[str] = None) -> T:
    if isinstance(result, Err):
        raise to_exception(result, not_found_message=not_found_message)
    return result.value
