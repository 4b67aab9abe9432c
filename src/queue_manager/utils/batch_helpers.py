"""
Module: batch_helpers.py
Description: Utility functions for batch operations.

SQS caps batch calls at 10 entries and the queue client never chunks on
its own. These helpers validate batches up front and let callers split
larger workloads and merge the per-chunk results.

Key Components:
- chunk_list(): Split lists into smaller chunks
- validate_batch_entries(): Size and id-uniqueness checks
- merge_batch_results(): Combine BatchResults from several chunks

Dependencies: typing, models, errors
"""

from typing import List, Sequence, TypeVar

from queue_manager.errors import QueueValidationError
from queue_manager.models.batch import BatchResult

T = TypeVar('T')


def chunk_list(items: Sequence[T], chunk_size: int) -> List[List[T]]:
    """
    Split a sequence into chunks of at most ``chunk_size`` items.

    Args:
        items: Items to split
        chunk_size: Maximum size of each chunk

    Returns:
        List of chunks, in order

    Raises:
        ValueError: If chunk_size is not positive

    Example:
        >>> chunk_list([1, 2, 3, 4, 5], 2)
        [[1, 2], [3, 4], [5]]
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    items = list(items)
    return [items[i:i + chunk_size] for i in range(0, len(items), chunk_size)]


def validate_batch_entries(ids: Sequence[str], max_size: int) -> None:
    """
    Validate a batch before it is sent to the queue service.

    Args:
        ids: Client-assigned entry ids, one per entry
        max_size: Maximum allowed batch size

    Raises:
        QueueValidationError: If the batch is empty, too large, or has
            duplicate ids
    """
    if not ids:
        raise QueueValidationError("batch must contain at least one entry")
    if len(ids) > max_size:
        raise QueueValidationError(
            f"batch size cannot exceed {max_size} entries (got {len(ids)})"
        )

    seen = set()
    duplicates = []
    for entry_id in ids:
        if entry_id in seen:
            duplicates.append(entry_id)
        seen.add(entry_id)
    if duplicates:
        raise QueueValidationError(
            f"batch entry ids must be unique, duplicated: {', '.join(sorted(set(duplicates)))}"
        )


def merge_batch_results(chunk_results: Sequence[BatchResult]) -> BatchResult:
    """
    Merge per-chunk BatchResults into a single result, preserving order.

    Example:
        >>> merged = merge_batch_results([first_chunk_result, second_chunk_result])
        >>> merged.failed_ids
        ['7']
    """
    merged = BatchResult()
    for result in chunk_results:
        merged.successful.extend(result.successful)
        merged.failed.extend(result.failed)
    return merged
