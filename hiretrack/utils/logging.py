from __future__ import annotations

import json
import logging
import sys
from typing import Any


def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))

    root.handlers.clear()
    root.addHandler(handler)

    # pymongo is chatty at DEBUG (heartbeats, topology); keep it at WARNING unless asked.
    if str(level).upper() != "DEBUG":
        logging.getLogger("pymongo").setLevel(logging.WARNING)


def log_event(logger: logging.Logger, event_type: str, **fields: Any) -> None:
    data: dict[str, Any] = {"type": event_type, **fields}
    logger.info(json.dumps(data, separators=(",", ":"), default=str))
