"""
Queue-based logging setup.

Log records are handed to a background listener thread so handler I/O
never blocks the event loop driving the engines. When the queue is full
records are dropped and counted rather than stalling a tick.
"""

import logging
import queue
import sys
from datetime import datetime
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path

from chainarb.config.constants import LOG_DATE_FORMAT, LOG_FORMAT, MAX_LOG_QUEUE_SIZE


class MillisecondFormatter(logging.Formatter):
    """Formatter with millisecond precision timestamps."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        ct = datetime.fromtimestamp(record.created)
        s = ct.strftime(datefmt or LOG_DATE_FORMAT)
        return f"{s}.{int(record.msecs):03d}"


class DroppingQueueHandler(QueueHandler):
    """Queue handler that discards records instead of failing on a full queue."""

    def __init__(self, log_queue: "queue.Queue[logging.LogRecord]") -> None:
        super().__init__(log_queue)
        self.dropped = 0

    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            self.dropped += 1


class DrainingQueueListener(QueueListener):
    """Listener whose stop waits for queue space instead of failing on a full queue."""

    def enqueue_sentinel(self) -> None:
        self.queue.put(self._sentinel)


class AsyncLogger:
    """
    Logger whose handlers run on a background thread.

    Calls on the wrapped logger only enqueue the record.
    """

    def __init__(
        self,
        name: str,
        level: int = logging.INFO,
        log_file: Path | None = None,
        queue_size: int = MAX_LOG_QUEUE_SIZE,
    ) -> None:
        """
        Initialize async logger.

        Args:
            name: Logger name.
            level: Logging level.
            log_file: Optional file path for logging.
            queue_size: Records buffered before new ones are dropped.
        """
        self._level = level
        self._log_file = log_file
        self._queue: queue.Queue[logging.LogRecord] = queue.Queue(maxsize=queue_size)
        self._listener: DrainingQueueListener | None = None
        self._queue_handler: DroppingQueueHandler | None = None
        self._logger = logging.getLogger(name)

    def _build_handlers(self) -> list[logging.Handler]:
        formatter = MillisecondFormatter(LOG_FORMAT, LOG_DATE_FORMAT)

        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(formatter)
        console.setLevel(self._level)
        handlers: list[logging.Handler] = [console]

        if self._log_file:
            self._log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self._log_file)
            file_handler.setFormatter(formatter)
            file_handler.setLevel(logging.DEBUG)  # file gets everything
            handlers.append(file_handler)

        return handlers

    def start(self) -> None:
        """Attach the queue handler and start the listener thread."""
        if self._listener is not None:
            return

        self._queue_handler = DroppingQueueHandler(self._queue)
        self._logger.addHandler(self._queue_handler)
        self._logger.setLevel(self._level)

        self._listener = DrainingQueueListener(
            self._queue,
            *self._build_handlers(),
            respect_handler_level=True,
        )
        self._listener.start()

    def stop(self) -> None:
        """Flush pending records and detach the queue handler."""
        dropped = self.dropped
        if self._listener:
            self._listener.stop()
            if dropped:
                # Queue is drained; hand the summary straight to the handlers
                record = self._logger.makeRecord(
                    self._logger.name,
                    logging.WARNING,
                    __file__,
                    0,
                    f"Dropped {dropped} log records",
                    None,
                    None,
                )
                self._listener.handle(record)
            self._listener = None
        if self._queue_handler:
            self._logger.removeHandler(self._queue_handler)
            self._queue_handler = None

    @property
    def logger(self) -> logging.Logger:
        """Get the underlying logger."""
        return self._logger

    @property
    def is_running(self) -> bool:
        """Check whether the listener thread is active."""
        return self._listener is not None

    @property
    def dropped(self) -> int:
        """Records discarded because the queue was full."""
        return self._queue_handler.dropped if self._queue_handler else 0

    def __enter__(self) -> "AsyncLogger":
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
) -> AsyncLogger:
    """
    Set up application-wide logging for the ``chainarb`` logger tree.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional log file path.

    Returns:
        Started AsyncLogger; call ``stop()`` on shutdown.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.getLogger().setLevel(numeric_level)

    async_logger = AsyncLogger(
        name="chainarb",
        level=numeric_level,
        log_file=log_file,
    )
    async_logger.start()

    # Keep chainarb records from reaching root handlers twice
    async_logger.logger.propagate = False

    # Quiet third-party loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    return async_logger
