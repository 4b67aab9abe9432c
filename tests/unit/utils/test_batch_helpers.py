"""
Module: test_batch_helpers.py
Description: Unit tests for batch chunking, validation and merging.
"""

import pytest

from queue_manager.errors import QueueValidationError
from queue_manager.models import BatchFailure, BatchResult, BatchResultEntry
from queue_manager.utils.batch_helpers import (
    chunk_list,
    merge_batch_results,
    validate_batch_entries,
)


class TestChunkList:

    def test_chunks_preserve_order(self):
        assert chunk_list([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]

    def test_twenty_five_entries_in_batches_of_ten(self):
        chunks = chunk_list(list(range(25)), 10)
        assert [len(chunk) for chunk in chunks] == [10, 10, 5]

    def test_empty_input(self):
        assert chunk_list([], 10) == []

    def test_chunk_size_must_be_positive(self):
        with pytest.raises(ValueError, match="chunk_size must be positive"):
            chunk_list([1], 0)


class TestValidateBatchEntries:

    def test_valid_batch(self):
        validate_batch_entries(["1", "2", "3"], 10)

    def test_too_many_entries(self):
        with pytest.raises(QueueValidationError, match="cannot exceed 10"):
            validate_batch_entries([str(i) for i in range(11)], 10)

    def test_empty_batch(self):
        with pytest.raises(QueueValidationError, match="at least one entry"):
            validate_batch_entries([], 10)

    def test_duplicate_ids(self):
        with pytest.raises(QueueValidationError, match="duplicated: 1"):
            validate_batch_entries(["1", "2", "1"], 10)

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            validate_batch_entries([], 10)


class TestMergeBatchResults:

    def test_merge_keeps_order(self):
        first = BatchResult(
            successful=[BatchResultEntry(id="1")],
            failed=[BatchFailure(id="2", code="InternalError")]
        )
        second = BatchResult(successful=[BatchResultEntry(id="3")])

        merged = merge_batch_results([first, second])

        assert merged.successful_ids == ["1", "3"]
        assert merged.failed_ids == ["2"]

    def test_merge_nothing(self):
        merged = merge_batch_results([])
        assert merged.successful == []
        assert merged.failed == []
