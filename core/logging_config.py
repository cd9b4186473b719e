"""
Structlog 日志配置

structlog and the standard library share one processor chain, so lines
from uvicorn, SQLAlchemy and httpx come out in the same format as the
application's own events: coloured console output in DEBUG, one JSON object
per line otherwise.
"""
import json
import logging
from typing import Any, List

import structlog
from structlog.contextvars import merge_contextvars
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer, TimeStamper, add_log_level
from structlog.stdlib import ProcessorFormatter

# 第三方库的噪声级别
_QUIET_LOGGERS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "aiosqlite": logging.INFO,
}


def _debug_enabled() -> bool:
    # 延迟导入：缺少必填配置时也能先把日志配好
    try:
        from core.config import settings
    except ValueError:
        return False
    return settings.DEBUG


def _pre_chain() -> List[Any]:
    return [
        merge_contextvars,
        add_log_level,
        TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def get_renderer(debug: bool) -> Any:
    if debug:
        return ConsoleRenderer(colors=True)
    return JSONRenderer(serializer=lambda obj, **kw: json.dumps(obj, ensure_ascii=False, **kw))


def configure_logging(debug: bool | None = None) -> None:
    """配置 structlog 并把标准库 logging 接入同一处理链"""
    if debug is None:
        debug = _debug_enabled()

    structlog.configure(
        processors=[*_pre_chain(), ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=[ProcessorFormatter.remove_processors_meta, get_renderer(debug)],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    for name, level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
