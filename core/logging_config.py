"""
Structlog 日志配置

structlog 与标准库 logging（uvicorn、stripe、sqlalchemy 等）共用一条处理链：
DEBUG 下输出彩色控制台格式，其余环境输出单行 JSON，每条日志都带有
服务名与运行环境，请求期间还会合并中间件绑定的 request_id 等上下文。
"""
import json
import logging
from typing import Any, List

import structlog
from structlog.contextvars import merge_contextvars
from structlog.stdlib import ProcessorFormatter

from core.config import settings


# 第三方库日志过于冗长，统一提升到 WARNING
_NOISY_LOGGERS = ("stripe", "httpx", "httpcore", "sqlalchemy.engine", "aiosqlite", "asyncio")


def _add_service_info(logger: Any, method_name: str, event_dict: dict) -> dict:
    event_dict.setdefault("service", settings.PROJECT_NAME)
    event_dict.setdefault("env", settings.ENVIRONMENT)
    return event_dict


def _json_dumps(obj: Any, **kwargs: Any) -> str:
    # 保留中文等非 ASCII 字符
    return json.dumps(obj, ensure_ascii=False, **kwargs)


def _renderer() -> Any:
    if settings.DEBUG:
        return structlog.dev.ConsoleRenderer(colors=True)
    return structlog.processors.JSONRenderer(serializer=_json_dumps)


def configure_logging() -> None:
    pre_chain: List[Any] = [
        merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_service_info,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[ProcessorFormatter.remove_processors_meta, _renderer()],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


configure_logging()
