"""Logging helpers shared by the translation pipeline."""

from __future__ import annotations

import logging
from typing import Callable, Optional


LogSink = Callable[[str], None]


def configure_logging(level: str) -> None:
    """Configure root logging for scripts and the API process."""

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


class TranslationLog:
    """Forward pipeline messages to a named logger and an optional caller sink.

    The sink is whatever the caller wants to drain (a status line, a list in a
    test, an HTTP response). A failing sink never interrupts translation.
    Debug messages only reach the logger.
    """

    def __init__(
        self,
        name: str = "cttranslate.translation",
        sink: Optional[LogSink] = None,
        *,
        prefix: str = "",
    ) -> None:
        self.logger = logging.getLogger(name)
        self.sink = sink
        self.prefix = prefix

    def child(self, prefix: str) -> TranslationLog:
        """Return a log that tags every message with ``[prefix]``."""

        return TranslationLog(self.logger.name, self.sink, prefix=prefix)

    def debug(self, message: str, *args: object) -> None:
        self._emit(logging.DEBUG, message, args)

    def info(self, message: str, *args: object) -> None:
        self._emit(logging.INFO, message, args)

    def warning(self, message: str, *args: object) -> None:
        self._emit(logging.WARNING, message, args)

    def _emit(self, level: int, message: str, args: tuple[object, ...]) -> None:
        if self.prefix:
            message = f"[{self.prefix}] {message}"
        self.logger.log(level, message, *args)
        if self.sink is None or level < logging.INFO:
            return
        try:
            self.sink(message % args if args else message)
        except Exception as exc:
            self.logger.debug("Log sink rejected message: %s", exc)
