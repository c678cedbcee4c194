"""Time-rotated log file with a stable symlink to the current file."""

from __future__ import annotations

import os
import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import TextIO

import structlog

from pod_lifecycle.models.events import utcnow

log = structlog.get_logger()

DEFAULT_BASENAME = "PodLifecycle_log"
SUFFIX_FORMAT = "%Y%m%d%H%M"
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class RotatingLogFile:
    """File-like object that switches to a new file every ``rotation`` period.

    Files are named ``<basename>.<period start as %Y%m%d%H%M>`` (UTC) and
    ``<basename>`` is kept as a symlink to the file currently written.
    """

    def __init__(
        self,
        log_dir: Path,
        basename: str = DEFAULT_BASENAME,
        rotation: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.log_dir = log_dir
        self.basename = basename
        self.rotation = rotation
        self._clock = clock
        self._lock = threading.Lock()
        self._file: TextIO | None = None
        self._path: Path | None = None
        self.log_dir.mkdir(parents=True, exist_ok=True)

    @property
    def link_path(self) -> Path:
        return self.log_dir / self.basename

    @property
    def current_path(self) -> Path | None:
        return self._path

    def path_for(self, now: datetime) -> Path:
        periods = (now - _EPOCH) // self.rotation
        start = _EPOCH + periods * self.rotation
        return self.log_dir / f"{self.basename}.{start.strftime(SUFFIX_FORMAT)}"

    def write(self, data: str) -> int:
        with self._lock:
            fh = self._current_file()
            return fh.write(data)

    def flush(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.flush()

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None

    def _current_file(self) -> TextIO:
        path = self.path_for(self._clock())
        if self._file is not None and path == self._path:
            return self._file

        if self._file is not None:
            self._file.close()
        self._file = open(path, "a", encoding="utf-8")
        self._path = path
        self._update_link(path)
        log.info("event log rotated", path=str(path))
        return self._file

    def _update_link(self, target: Path) -> None:
        tmp = self.link_path.with_name(self.link_path.name + ".tmp")
        tmp.unlink(missing_ok=True)
        tmp.symlink_to(target.name)
        os.replace(tmp, self.link_path)
