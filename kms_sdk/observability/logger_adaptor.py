"""Loguru backed logger used across kms-sdk."""

import sys
from typing import Any, Optional

from loguru import logger as _loguru_logger

from kms_sdk.constants import LOG_LEVEL

_loggers: dict = {}
_sink_configured = False

KMS_FORMAT_STR = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> <blue>[{level}]</blue> <cyan>{extra[logger_name]}</cyan> - <level>{message}</level>"


def _configure_sink() -> None:
    global _sink_configured
    if _sink_configured:
        return
    _loguru_logger.remove()
    _loguru_logger.configure(extra={"logger_name": "kms_sdk"})
    _loguru_logger.add(
        sys.stderr, format=KMS_FORMAT_STR, level=LOG_LEVEL, colorize=True
    )
    _sink_configured = True


class KMSLoggerAdapter:
    """Minimal logger that forwards to loguru. Same .info/.error/.warning/.debug/.exception API."""

    def __init__(self, name: str) -> None:
        _configure_sink()
        self._name = name
        self._log = _loguru_logger.bind(logger_name=name)

    @property
    def name(self) -> str:
        return self._name

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log.info(msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log.error(msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log.warning(msg, *args, **kwargs)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log.debug(msg, *args, **kwargs)

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log.exception(msg, *args, **kwargs)

    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log.critical(msg, *args, **kwargs)


def get_logger(name: Optional[str] = None) -> KMSLoggerAdapter:
    if name is None:
        name = "kms_sdk.observability.logger_adaptor"
    if name not in _loggers:
        _loggers[name] = KMSLoggerAdapter(name)
    return _loggers[name]


default_logger = get_logger()
