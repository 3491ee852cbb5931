"""A minimal pool of worker threads."""

from __future__ import annotations

import threading
from typing import Callable


def worker_pool(n: int, worker: Callable[[int], None]) -> Callable[[], None]:
    """Start n threads, each running worker with its index from 0 to n - 1.

    Returns a function that waits until every worker has finished.
    """
    threads = [threading.Thread(target=worker, args=(index,)) for index in range(n)]
    for thread in threads:
        thread.start()

    def wait() -> None:
        for thread in threads:
            thread.join()

    return wait