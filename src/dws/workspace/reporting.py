"""Progress reporting seam between the orchestrator and its caller.

The orchestrator never prints. It calls a ``Reporter``; the CLI passes
one backed by rich output helpers, while library callers and tests get
``LoggingReporter``, which turns every message into a log record.
"""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Reporter(Protocol):
    def status(self, label: str, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def success(self, label: str, message: str) -> None: ...


class LoggingReporter:
    def status(self, label: str, message: str) -> None:
        logger.info("%s: %s", label, message)

    def info(self, message: str) -> None:
        logger.info("%s", message)

    def warn(self, message: str) -> None:
        logger.warning("%s", message)

    def success(self, label: str, message: str) -> None:
        logger.info("%s: %s", label, message)
