"""
Logging setup for the ``bulle-chart`` CLI.

``configure_logging(config.logging, debug=config.debug)`` runs once per
command, before the dataset is opened. Library modules only ever call
``logging.getLogger(__name__)``.

Console output goes to stderr, so ``recommend --json`` can be piped.
With ``json_format = true`` every record becomes one JSON line::

    {"ts": "2026-02-24T15:00:00Z", "level": "INFO", "logger": "bulle_chart.storage.taxonomy_store", "msg": "Added profession 1 'Dev'."}

Keys passed through ``extra=`` (for example ``profession_id``) are added at
the top level of the JSON object.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bulle_chart.config import LoggingConfig

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record: ``ts``, ``level``, ``logger``, ``msg`` (+ extras)."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict = {
            "ts": created.strftime(TIMESTAMP_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(
            (k, v) for k, v in record.__dict__.items()
            if k not in _STANDARD_ATTRS and not k.startswith("_")
        )
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _build_formatter(config: "LoggingConfig") -> logging.Formatter:
    if config.json_format:
        return JsonLineFormatter()
    formatter = logging.Formatter(TEXT_FORMAT, datefmt=TIMESTAMP_FORMAT)
    formatter.converter = time.gmtime
    return formatter


def _build_handlers(config: "LoggingConfig") -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        path = Path(config.log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    return handlers


def configure_logging(config: "LoggingConfig", debug: bool = False) -> None:
    """Install stderr (and optional file) handlers on the root logger.

    Args:
        config: ``AppConfig.logging``.
        debug: ``AppConfig.debug``; forces DEBUG regardless of ``config.level``.
    """
    level = logging.DEBUG if debug else getattr(logging, config.level, logging.INFO)
    formatter = _build_formatter(config)

    handlers = _build_handlers(config)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
