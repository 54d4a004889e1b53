import logging
import os
from collections.abc import Iterable
from threading import Lock
from typing import Any

_SETUP_LOCK = Lock()
_SETUP_DONE = False
_MASK = "***"
_SECRET_MARKERS = (
    "password",
    "secret",
    "token",
    "private.key",
    "api.key",
    "credentials",
)


def _resolve_log_level() -> int:
    level_name = os.getenv("CONNECTOR_TF_LOG_LEVEL", "WARNING").upper()
    return getattr(logging, level_name, logging.WARNING)


def _setup_default_logging() -> None:
    global _SETUP_DONE
    if _SETUP_DONE:
        return

    with _SETUP_LOCK:
        if _SETUP_DONE:
            return

        root_logger = logging.getLogger()
        if not root_logger.handlers:
            logging.basicConfig(
                level=_resolve_log_level(),
                format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            )

        _SETUP_DONE = True


def get_logger(name: str) -> logging.Logger:
    _setup_default_logging()
    return logging.getLogger(f"connector_tf.{name}")


def _looks_secret(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in _SECRET_MARKERS)


def redact_config(values: dict[str, Any], sensitive_keys: Iterable[str] = ()) -> dict[str, Any]:
    known = set(sensitive_keys)
    redacted: dict[str, Any] = {}
    for key, value in values.items():
        if value is not None and (key in known or _looks_secret(key)):
            redacted[key] = _MASK
        else:
            redacted[key] = value
    return redacted
