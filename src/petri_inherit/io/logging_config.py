# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — Structured Logging Configuration
# © 1998–2026 Miroslav Šotek. All rights reserved.
# Contact: www.anulum.li | protoscience@anulum.li
# ──────────────────────────────────────────────────────────────────────
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, MutableMapping, Tuple

PACKAGE_LOGGER = "petri_inherit"


class InheritJSONFormatter(logging.Formatter):
    """
    JSON Formatter for Petri Inherit.
    Encodes log records as structured machine-readable JSON.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        # Net ids, graph sizes etc. passed via the 'extra' kwarg
        if hasattr(record, "net_context"):
            log_data["net_context"] = record.net_context

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class NetLoggerAdapter(logging.LoggerAdapter):
    """Logger bound to one net.

    Every record carries a ``net_context`` dict holding ``net_id`` and the
    adapter's other context keys.  A per-call ``extra={"net_context": {...}}``
    is merged on top, so call sites only pass what changes per message.
    """

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        context = dict(self.extra or {})
        context.update(extra.pop("net_context", None) or {})
        extra["net_context"] = context
        kwargs["extra"] = extra
        return msg, kwargs


def net_logger(logger: logging.Logger, net_id: str, **context: Any) -> NetLoggerAdapter:
    """Wrap ``logger`` so its records name ``net_id`` in ``net_context``."""
    return NetLoggerAdapter(logger, {"net_id": net_id, **context})


def setup_inherit_logging(
    level: int = logging.INFO,
    json_output: bool = True,
    log_file: str | None = None
) -> logging.Logger:
    """
    Initializes logging for the ``petri_inherit`` logger hierarchy.

    Existing handlers on the package logger are replaced, so calling this
    twice does not duplicate output.
    """
    root_logger = logging.getLogger(PACKAGE_LOGGER)
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    # Console goes to stderr so command output on stdout stays parseable
    console_handler = logging.StreamHandler(sys.stderr)
    if json_output:
        console_handler.setFormatter(InheritJSONFormatter())
    else:
        console_handler.setFormatter(logging.Formatter(
            '[%(asctime)s] %(levelname)s in %(module)s: %(message)s'
        ))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(InheritJSONFormatter() if json_output else logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        root_logger.addHandler(file_handler)

    root_logger.debug(
        "Structured logging initialized",
        extra={"net_context": {"json_enabled": json_output}},
    )
    return root_logger
