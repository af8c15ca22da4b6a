"""
Background ingestion of export files.

Files are read and parsed on worker threads; the results are handed to the
render loop through a queue that it drains without blocking once per frame.
The channel collection itself is never touched from a worker.
"""
from __future__ import annotations

import logging
import queue
import threading
from pathlib import Path
from typing import Callable, Optional

from .io_handler import parse_content, read_file
from .models import IngestResult

logger = logging.getLogger(__name__)


class IngestWorker:
    """Runs format detection and parsing off the render thread.

    Usage:
      worker = IngestWorker()
      worker.submit("recording.txt")
      ...
      for result in worker.poll():   # once per frame
          collection.merge(result)
    """

    def __init__(self) -> None:
        self._results: queue.Queue[IngestResult] = queue.Queue()
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._pending = 0

    @property
    def pending(self) -> int:
        """Number of submitted files whose result has not been queued yet."""
        with self._lock:
            return self._pending

    def submit(self, filepath: Path | str) -> None:
        """Read and parse a file in the background."""
        filepath = Path(filepath)
        self._start(lambda: read_file(filepath), filepath.name)

    def submit_bytes(self, content: bytes, source: str = "") -> None:
        """Parse already loaded file content in the background."""
        self._start(lambda: parse_content(content, source=source), source)

    def _start(self, job: Callable[[], IngestResult], source: str) -> None:
        with self._lock:
            self._pending += 1
        thread = threading.Thread(
            target=self._run,
            args=(job, source),
            name=f"ingest-{source}",
            daemon=True,
        )
        thread.start()

    def _run(self, job: Callable[[], IngestResult], source: str) -> None:
        try:
            result = job()
        except OSError as e:
            logger.warning(f"Could not read {source}: {e}")
            result = IngestResult(source=source, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error while ingesting {source}")
            result = IngestResult(source=source, error=str(e))

        self._results.put(result)
        with self._idle:
            self._pending -= 1
            self._idle.notify_all()

    def poll(self) -> list[IngestResult]:
        """Take all finished results without blocking."""
        results = []
        while True:
            try:
                results.append(self._results.get_nowait())
            except queue.Empty:
                break
        return results

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until every submitted file has produced a result."""
        with self._idle:
            return self._idle.wait_for(lambda: self._pending == 0, timeout)
