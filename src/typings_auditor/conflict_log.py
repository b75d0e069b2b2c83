from __future__ import annotations

import threading
from pathlib import Path
from typing import Iterable, List

LOG_FILE_NAME = "conflicts.md"


class ConflictLog:
    """Append-only list of report lines shared by every audit in a run.

    Appends may come from worker threads, so they are serialized with a lock
    held only for the append itself.
    """

    def __init__(self) -> None:
        self._lines: List[str] = []
        self._lock = threading.Lock()

    def __call__(self, line: str) -> None:
        self.append(line)

    def append(self, line: str) -> None:
        with self._lock:
            self._lines.append(line)

    def extend(self, lines: Iterable[str]) -> None:
        """Append a block of lines without interleaving other writers."""

        block = list(lines)
        with self._lock:
            self._lines.extend(block)

    @property
    def lines(self) -> List[str]:
        with self._lock:
            return list(self._lines)

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)

    def render(self) -> str:
        lines = self.lines
        if not lines:
            return ""
        return "\n".join(lines) + "\n"


def write_log(log: ConflictLog, log_dir: Path, file_name: str = LOG_FILE_NAME) -> Path:
    log_dir.mkdir(parents=True, exist_ok=True)
    destination = log_dir / file_name
    destination.write_text(log.render(), encoding="utf-8")
    return destination
