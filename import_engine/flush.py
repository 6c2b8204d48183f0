"""
import_engine.flush - Concurrent write-out of every buffered destination.

One task per non-empty destination runs on a thread pool sharing the
engine's connection pool.  Inside a task, chunks are written in input
order, one transaction each.  When a task fails, a shared cancel event
stops its siblings before their next chunk; every failure is collected
into a single FlushError.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable

import config
from db.store import CatalogStore
from import_engine.errors import FlushError
from import_engine.resolver import chunked

logger = logging.getLogger(__name__)


class FlushCancelled(Exception):
    """A sibling task failed; this one stopped early."""


@dataclass
class FlushTask:
    destination: str
    rows: list
    write: Callable          # (conn, chunk) → rows written


def run_flush(
    store: CatalogStore,
    tasks: list[FlushTask],
    batch_size: int,
    workers: int | None = None,
) -> dict[str, int]:
    """
    Run *tasks* concurrently; return destination → buffered row count.
    Raises FlushError listing every failed destination.
    """
    tasks = [t for t in tasks if t.rows]
    if not tasks:
        return {}

    workers = max(1, min(workers or config.FLUSH_WORKERS, len(tasks)))
    cancel = threading.Event()
    counts: dict[str, int] = {}
    errors: list[tuple[str, BaseException]] = []

    with ThreadPoolExecutor(max_workers=workers,
                            thread_name_prefix="flush") as executor:
        futures = {
            executor.submit(_run_task, store, task, batch_size, cancel): task
            for task in tasks
        }
        for future in as_completed(futures):
            task = futures[future]
            try:
                future.result()
            except FlushCancelled:
                logger.info(f"Flush of {task.destination} cancelled")
                continue
            except Exception as exc:
                cancel.set()
                logger.error(f"Flush of {task.destination} failed: {exc}")
                errors.append((task.destination, exc))
                continue
            counts[task.destination] = len(task.rows)

    if errors:
        raise FlushError(errors, counts)
    return counts


def _run_task(store: CatalogStore, task: FlushTask, batch_size: int,
              cancel: threading.Event) -> int:
    started = time.perf_counter()
    written = 0
    try:
        for n, chunk in enumerate(chunked(task.rows, batch_size), start=1):
            if cancel.is_set():
                raise FlushCancelled(task.destination)
            with store.engine.begin() as conn:
                written += task.write(conn, chunk)
            logger.debug(f"{task.destination}: chunk {n} ({len(chunk)} rows)")
    except FlushCancelled:
        raise
    except Exception:
        cancel.set()
        raise
    logger.debug(f"{task.destination}: {written} rows in "
                 f"{time.perf_counter() - started:.3f}s")
    return written
