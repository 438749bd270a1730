from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

NotificationSink = Callable[[str, str], None]


def _discard(level: str, message: str) -> None:
    return None


class Notifier:
    """User-facing messages, separate from the log.

    ``info`` messages only reach the sink when ``verbose`` is on; ``success``
    and ``warn`` always do.
    """

    def __init__(self, verbose: bool = False, sink: NotificationSink | None = None):
        self.verbose = verbose
        self.sink = sink or _discard

    def info(self, message: str) -> None:
        logger.info(message)
        if self.verbose:
            self.sink("info", message)

    def success(self, message: str) -> None:
        logger.info(message)
        self.sink("success", message)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.sink("warning", message)
