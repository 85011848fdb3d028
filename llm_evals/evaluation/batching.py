from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar
import time

from llm_evals.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


# Split items into fixed-size batches, keeping each batch's start index
def make_batches(items: Sequence[T], batch_size: int) -> List[Tuple[int, List[T]]]:
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    return [
        (i, list(items[i:i + batch_size]))
        for i in range(0, len(items), batch_size)
    ]


def run_bounded(
    items: Sequence[T],
    fn: Callable[[int, T], R],
    max_concurrency: int = 3,
    start_idx: int = 0,
) -> List[Optional[R]]:
    """Call ``fn(index, item)`` for every item with at most
    ``max_concurrency`` calls in flight.

    Results come back in input order. An item whose call raised is logged
    and yields ``None``; the other items are unaffected.
    """
    if not items:
        return []

    results: List[Optional[R]] = [None] * len(items)

    with ThreadPoolExecutor(max_workers=max(1, max_concurrency)) as pool:
        futures = [
            pool.submit(fn, start_idx + offset, item)
            for offset, item in enumerate(items)
        ]
        for offset, fut in enumerate(futures):
            try:
                results[offset] = fut.result()
            except Exception as e:
                logger.error("Error processing record %d: %s", start_idx + offset, e)

    return results


def run_batches(
    items: Sequence[T],
    handle_batch: Callable[[int, int, int, List[T]], List[R]],
    batch_size: int,
    delay_seconds: float = 30,
    sleep: Optional[Callable[[float], None]] = None,
) -> List[R]:
    """Hand each batch to ``handle_batch(batch_number, total_batches, start, batch)``
    in order, pausing ``delay_seconds`` between batches."""
    sleep = sleep or time.sleep
    batches = make_batches(items, batch_size)
    total_batches = len(batches)

    out: List[R] = []
    for batch_number, (start, batch) in enumerate(batches, 1):
        out.extend(handle_batch(batch_number, total_batches, start, batch))

        if batch_number < total_batches and delay_seconds > 0:
            print(f"Waiting {delay_seconds:g} seconds before next batch...")
            sleep(delay_seconds)

    return out
