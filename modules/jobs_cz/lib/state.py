from __future__ import annotations

import sys
import threading
from collections.abc import Iterable

UNBOUNDED = sys.maxsize


class RunState:
    """
    Run-scoped shared state: the seen set of detail URLs and the result budget.

    Handlers run concurrently on the engine's worker threads. Every mutation
    goes through one lock, so a check-then-act on the budget or on seen-set
    membership is a single critical section:
      - saved_count never exceeds results_wanted
      - with dedupe on, a URL is admitted at most once per run
    The seen set only grows; saved_count only increases.
    """

    def __init__(self, results_wanted: int = 100, max_pages: int = 999, *, dedupe: bool = True) -> None:
        if results_wanted < 1:
            raise ValueError("results_wanted must be >= 1")
        if max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        self.results_wanted = int(results_wanted)
        self.max_pages = int(max_pages)
        self.dedupe = dedupe
        self._lock = threading.Lock()
        self._seen: set[str] = set()
        self._saved = 0

    # ------------- reads -------------
    @property
    def saved_count(self) -> int:
        with self._lock:
            return self._saved

    @property
    def remaining(self) -> int:
        with self._lock:
            return max(0, self.results_wanted - self._saved)

    def budget_reached(self) -> bool:
        with self._lock:
            return self._saved >= self.results_wanted

    def has_seen(self, url: str) -> bool:
        with self._lock:
            return url in self._seen

    def seen_count(self) -> int:
        with self._lock:
            return len(self._seen)

    # ------------- atomic mutations -------------
    def admit_links(self, links: Iterable[str], *, count_as_saved: bool = False) -> list[str]:
        """
        Filter out already-seen links (when dedupe is on), mark the rest seen,
        and truncate to the remaining budget.

        Links cut by the budget are still marked seen. With count_as_saved the
        admitted links are charged against the budget in the same critical
        section (link-only mode, where each link is itself a result).
        """
        with self._lock:
            unique: list[str] = []
            batch: set[str] = set()
            for link in links:
                if self.dedupe and (link in self._seen or link in batch):
                    continue
                batch.add(link)
                unique.append(link)
            self._seen.update(unique)

            take = unique[: max(0, self.results_wanted - self._saved)]
            if count_as_saved:
                self._saved += len(take)
            return take

    def claim_result(self) -> bool:
        """Reserve one result slot; False once the budget is spent."""
        with self._lock:
            if self._saved >= self.results_wanted:
                return False
            self._saved += 1
            return True
