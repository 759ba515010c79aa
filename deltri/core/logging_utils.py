"""Logging utilities for deltri.

Provides a consistent logger hierarchy and formatting without modifying the
process root logger. All deltri code should obtain loggers via get_logger().
"""
from __future__ import annotations

import logging
import sys
from typing import Optional, Union

_FORMAT = logging.Formatter('%(levelname)s %(name)s: %(message)s')


def _ensure_deltri_root() -> logging.Logger:
    """Ensure the 'deltri' logger has a single stream handler and is isolated
    from the process root logger. Returns the 'deltri' logger.
    """
    root = logging.getLogger('deltri')
    has_non_null = any(not isinstance(h, logging.NullHandler) for h in root.handlers)
    if not has_non_null:
        # NullHandlers installed by the package __init__ would swallow records
        for h in list(root.handlers):
            if isinstance(h, logging.NullHandler):
                root.removeHandler(h)
        handler = logging.StreamHandler(stream=sys.stdout)
        handler.setFormatter(_FORMAT)
        root.addHandler(handler)
    root.propagate = False
    return root


def _to_level(level: Union[str, int, None], default: int = logging.INFO) -> int:
    if level is None:
        return default
    if isinstance(level, int):
        return level
    lvl = getattr(logging, str(level).upper(), None)
    return lvl if isinstance(lvl, int) else default


def configure_logging(level: Union[str, int] = 'INFO', mute_external: bool = True) -> None:
    """Configure the 'deltri' logger family level and optional external noise suppression.

    This does NOT modify the process root logger.
    """
    root = _ensure_deltri_root()
    lvl = _to_level(level)
    root.setLevel(lvl)
    if mute_external and lvl <= logging.DEBUG:
        for noisy in ('matplotlib', 'matplotlib.font_manager'):
            logging.getLogger(noisy).setLevel(logging.INFO)


def get_logger(name: str, level: Optional[Union[str, int]] = None) -> logging.Logger:
    """Return a logger under the 'deltri' namespace.

    Without an explicit level the logger is left at NOTSET so that it inherits
    whatever configure_logging() set on the 'deltri' parent. Handlers are only
    attached by configure_logging(); library use stays silent by default.
    """
    log = logging.getLogger(name)
    if level is not None:
        log.setLevel(_to_level(level))
    else:
        log.setLevel(logging.NOTSET)
    return log


__all__ = ['get_logger', 'configure_logging']
