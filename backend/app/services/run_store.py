# app/services/run_store.py
"""
run_store.py
- Purpose: Keeps finished runs (and their output files) in memory so they can be downloaded.
- Design: Nothing touches disk. Oldest runs are released once the store is full;
  a caller resetting the UI releases its run explicitly.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.services.extraction_service import ExtractionRun

logger = logging.getLogger("app.run_store")

DEFAULT_MAX_RUNS = 32


class RunStore:
    def __init__(self, max_runs: int = DEFAULT_MAX_RUNS):
        self.max_runs = max_runs
        self._runs: OrderedDict[str, "ExtractionRun"] = OrderedDict()

    def __len__(self) -> int:
        return len(self._runs)

    def put(self, run: "ExtractionRun") -> None:
        self._runs[run.run_id] = run
        self._runs.move_to_end(run.run_id)
        while len(self._runs) > self.max_runs:
            evicted_id, _ = self._runs.popitem(last=False)
            logger.info("run.evicted", extra={"evicted_run_id": evicted_id})

    def get(self, run_id: str) -> "ExtractionRun | None":
        return self._runs.get(run_id)

    def release(self, run_id: str) -> bool:
        return self._runs.pop(run_id, None) is not None
