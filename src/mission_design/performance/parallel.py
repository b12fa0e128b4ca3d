"""
Process-pool parallelism for the embarrassingly parallel mission workloads.

Two computations dominate the run time of a mission analysis:

    1. Ground-station pass scans -- O(stations x duration / step).  Every
       station is scanned independently against a shared ephemeris.
    2. Porkchop sweeps -- one Lambert solve per (departure, flight time)
       cell, with every departure row independent of the others.

Both are pure functions of their inputs, so tasks share no mutable state and
the parallel result is identical to the sequential one.  Workers are separate
OS processes (``multiprocessing.Pool``), so the GIL does not serialise the
numerical work.  Task functions must be picklable, i.e. defined at module
top level.
"""

from __future__ import annotations

import logging
import os
from multiprocessing import Pool
from typing import Any, Callable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


def _run_task(args: Tuple[Callable, Any]) -> Any:
    """
    Top-level function for pickling by multiprocessing.Pool.
    Unpacks (task_func, payload) and calls task_func(payload).
    """
    task_func, payload = args
    return task_func(payload)


class ParallelSim:
    """
    Ordered map of a task function over independent payloads.

    ``num_workers == 1`` runs in the calling process, which keeps
    single-core runs and debugging free of pool start-up cost.
    """

    def __init__(self, num_workers: Optional[int] = None):
        """
        Parameters
        ----------
        num_workers : int or None
            Number of worker processes. None means ``os.cpu_count()``; zero
            and negative counts run sequentially.
        """
        if num_workers is None:
            num_workers = os.cpu_count() or 4
        self.num_workers = max(1, num_workers)

    @property
    def is_sequential(self) -> bool:
        return self.num_workers == 1

    def map(self, task_func: Callable[[Any], Any],
            payloads: Sequence[Any]) -> List[Any]:
        """
        Evaluate *task_func* on every payload.

        Parameters
        ----------
        task_func : callable
            Module-level function taking one payload.
        payloads : sequence
            One entry per independent task.

        Returns
        -------
        list of results, in the same order as *payloads*.
        """
        payloads = list(payloads)
        if self.is_sequential or len(payloads) <= 1:
            return [task_func(p) for p in payloads]

        workers = min(self.num_workers, len(payloads))
        logger.debug("Dispatching %d tasks to %d workers", len(payloads), workers)
        tasks = [(task_func, p) for p in payloads]
        with Pool(processes=workers) as pool:
            return pool.map(_run_task, tasks)

    def __repr__(self) -> str:
        return f"ParallelSim(num_workers={self.num_workers})"
