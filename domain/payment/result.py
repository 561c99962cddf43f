"""
Tagged result returned by every payment gateway call.

Gateway adapters never raise for processor-reported failures; they return
``Err`` and the application layer decides how to surface it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

from shared.codes.payment_codes import GatewayErrorKind


T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: GatewayErrorKind
    message: str
    status_code: Optional[int] = None
    # processor specific error code, e.g. "resource_missing"
    code: Optional[str] = None

    @property
    def ok(self) -> bool:
        return False


GatewayResult = Union[Ok[T], Err]
