"""
Base payment client implementing shared concerns: call wrapping, error
mapping into ``Err`` results, field access on SDK objects and logging.
Concrete providers subclass and implement the PaymentGateway port.
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, TypeVar

from core.logging_config import get_logger
from domain.payment.result import Err, GatewayResult, Ok


logger = get_logger(__name__)

R = TypeVar("R")


class BasePaymentClient:
    provider: str = "base"

    # Exception types raised by the provider SDK for processor-reported failures
    provider_errors: tuple[type[BaseException], ...] = ()

    async def _call(
        self,
        operation: str,
        fn: Callable[..., Awaitable[Any]],
        mapper: Callable[[Any], R],
        *args: Any,
        **kwargs: Any,
    ) -> GatewayResult[R]:
        """Run one SDK call and map its outcome to ``Ok``/``Err``.

        Only provider errors are converted; anything else (programming errors,
        mapping bugs) propagates to the global exception handler.
        """
        self._log("gateway_call", operation=operation)
        try:
            raw = await fn(*args, **kwargs)
        except self.provider_errors as exc:
            err = self._to_err(exc)
            logger.warning(
                "gateway_call_failed",
                provider=self.provider,
                operation=operation,
                kind=err.kind.value,
                status_code=err.status_code,
                code=err.code,
                error=err.message,
            )
            return err
        return Ok(mapper(raw))

    def _to_err(self, exc: BaseException) -> Err:
        raise NotImplementedError

    # Helpers
    @staticmethod
    def _field(obj: Any, key: str, default: Any = None) -> Any:
        """Read ``key`` from an SDK object or plain dict."""
        if obj is None:
            return default
        if isinstance(obj, dict):
            value = obj.get(key, default)
        else:
            try:
                value = obj[key]
            except (KeyError, TypeError, AttributeError):
                value = getattr(obj, key, default)
        return default if value is None else value

    @classmethod
    def _id_of(cls, obj: Any) -> Optional[str]:
        """Expanded objects carry an ``id``; unexpanded references are plain strings."""
        if obj is None or isinstance(obj, str):
            return obj
        return cls._field(obj, "id")

    @classmethod
    def _items(cls, list_obj: Any) -> list:
        return list(cls._field(list_obj, "data", []) or [])

    def _log(self, event: str, **kwargs) -> None:
        logger.info(
            event,
            provider=self.provider,
            **kwargs,
        )
