"""Console logging setup shared by the exchange core and its tests."""
from __future__ import annotations

import logging
import os
from typing import Any, Mapping, Optional, Tuple

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

HANDLER_NAME = "p2p-exchange-console"

# Top-level package/module names; every module logs under ``__name__``.
PROJECT_LOGGERS = ("validation", "transactions", "app", "commands", "ledger", "config")

QUIET_LOGGERS = ("asyncio", "trio", "urllib3", "requests")

_configured = False


def _level_from(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip():
        numeric = logging.getLevelName(value.strip().upper())
        if isinstance(numeric, int):
            return numeric
    return None


def _resolve(logging_settings: Any) -> Tuple[int, str, str]:
    """Pick level, format and date format from settings, then env, then defaults."""
    if isinstance(logging_settings, Mapping):
        source = dict(logging_settings)
    elif logging_settings is not None:
        source = {key: getattr(logging_settings, key, None) for key in ("level", "format", "datefmt")}
    else:
        source = {}

    level = _level_from(source.get("level"))
    if level is None:
        level = _level_from(os.environ.get("P2P_LOG_LEVEL")) or logging.INFO
    fmt = source.get("format") or os.environ.get("P2P_LOG_FORMAT") or DEFAULT_FORMAT
    datefmt = source.get("datefmt") or os.environ.get("P2P_LOG_DATEFMT") or DEFAULT_DATEFMT
    return level, fmt, datefmt


def configure(logging_settings: Any = None, *, force: bool = True) -> None:
    """Install one console handler on the root logger and set project levels.

    ``logging_settings`` may be a ``config.LoggingSettings``, a plain mapping
    with ``level``/``format``/``datefmt`` keys, or ``None`` to use the
    ``P2P_LOG_*`` environment variables. Handlers installed by others (for
    example pytest's capture handler) are left in place; only the handler this
    module owns is replaced.
    """
    global _configured
    if _configured and not force:
        return

    level, fmt, datefmt = _resolve(logging_settings)

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)

    console = logging.StreamHandler()
    console.set_name(HANDLER_NAME)
    console.setFormatter(logging.Formatter(fmt, datefmt))
    root.addHandler(console)
    root.setLevel(max(logging.WARNING, level))

    for name in PROJECT_LOGGERS:
        logging.getLogger(name).setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, level))

    logging.captureWarnings(True)
    _configured = True


def is_configured() -> bool:
    return _configured
