from __future__ import annotations

import logging
import sys

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.strip().upper() or "INFO")
    if isinstance(resolved, int):
        return resolved
    return logging.INFO


def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(_resolve_level(level))

    # Re-running setup (reload, tests) must not stack handlers.
    for handler in root.handlers:
        if getattr(handler, "_copydesk_handler", False):
            handler.setLevel(root.level)
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    handler.setLevel(root.level)
    handler._copydesk_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    # uvicorn installs its own handlers; keep access logs at the same level.
    logging.getLogger("uvicorn.access").setLevel(root.level)
    logging.getLogger("httpx").setLevel(max(root.level, logging.WARNING))
