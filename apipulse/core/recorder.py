"""Thread-safe sink for request results."""

import threading
from typing import List, Tuple

from .models import RequestResult


class ResultRecorder:
    """
    Collects request results from concurrent workers.

    Writers serialize on a lock. The (total, success, failure) counts are
    republished as a single tuple on every write, so readers such as the
    progress reporter never take the lock and never see a torn update.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._results: List[RequestResult] = []
        self._counts: Tuple[int, int, int] = (0, 0, 0)

    def record(self, result: RequestResult) -> None:
        with self._lock:
            self._results.append(result)
            total, success, failure = self._counts
            if result.success:
                self._counts = (total + 1, success + 1, failure)
            else:
                self._counts = (total + 1, success, failure + 1)

    def counts(self) -> Tuple[int, int, int]:
        """Return a consistent (total, success, failure) triple."""
        return self._counts

    def current_count(self) -> int:
        return self._counts[0]

    def success_count(self) -> int:
        return self._counts[1]

    def failure_count(self) -> int:
        return self._counts[2]

    def results(self) -> List[RequestResult]:
        """Return a copy of all recorded results."""
        with self._lock:
            return list(self._results)

    def reset(self) -> None:
        with self._lock:
            self._results = []
            self._counts = (0, 0, 0)

    def __len__(self) -> int:
        return self.current_count()
