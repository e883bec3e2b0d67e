"""Daily update log files."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class _IsoFormatter(logging.Formatter):
    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        moment = datetime.fromtimestamp(record.created, timezone.utc)
        return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class DailyFileHandler(logging.FileHandler):
    """Append to ``<directory>/update-YYYY-MM-DD.log``, one file per UTC day."""

    def __init__(self, directory: Path, prefix: str = "update") -> None:
        self._directory = Path(directory)
        self._prefix = prefix
        self._day = self._today()
        self._directory.mkdir(parents=True, exist_ok=True)
        super().__init__(self.path_for(self._day), mode="a", encoding="utf-8")
        self.setFormatter(_IsoFormatter("[%(asctime)s] %(message)s"))

    @staticmethod
    def _today() -> str:
        return datetime.now(timezone.utc).date().isoformat()

    def path_for(self, day: str) -> Path:
        return self._directory / f"{self._prefix}-{day}.log"

    def emit(self, record: logging.LogRecord) -> None:
        day = self._today()
        if day != self._day:
            self.acquire()
            try:
                self.close()
                self._day = day
                self.baseFilename = str(self.path_for(day).resolve())
            finally:
                self.release()
        super().emit(record)


def configure_logging(log_dir: Path | None, level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    if log_dir is not None:
        logging.getLogger().addHandler(DailyFileHandler(log_dir))
