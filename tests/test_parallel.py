"""Tests for the fork-join range executor."""

import threading
import time

import pytest

from ptau_verify.primitives.parallel import execute, split_ranges


class TestSplitRanges:
    """Partition of [0, total) into contiguous ranges."""

    @pytest.mark.parametrize("total,workers", [
        (10, 3),
        (3, 10),
        (1, 1),
        (100, 7),
        (8, 8),
        (65536, 12),
    ])
    def test_partition_has_no_gaps_or_overlaps(self, total: int, workers: int) -> None:
        """Ranges are contiguous, cover [0, total) and differ in size by at most 1."""
        ranges = split_ranges(total, workers)

        assert len(ranges) == min(total, workers)
        assert ranges[0][0] == 0
        assert ranges[-1][1] == total
        for (_, end), (start, _) in zip(ranges, ranges[1:]):
            assert end == start

        sizes = [end - start for start, end in ranges]
        assert max(sizes) - min(sizes) <= 1
        # Larger ranges come first
        assert sizes == sorted(sizes, reverse=True)

    def test_extra_elements_go_to_first_ranges(self) -> None:
        assert split_ranges(10, 3) == [(0, 4), (4, 7), (7, 10)]

    def test_zero_iterations(self) -> None:
        assert split_ranges(0, 4) == []

    @pytest.mark.parametrize("total,workers", [(10, 0), (-1, 4)])
    def test_invalid_arguments(self, total: int, workers: int) -> None:
        with pytest.raises(ValueError):
            split_ranges(total, workers)


class TestExecute:
    """Concurrent execution and joining."""

    def test_results_in_range_order(self) -> None:
        parts = execute(10, lambda start, end: list(range(start, end)), max_workers=4)

        assert len(parts) == 4
        assert [i for part in parts for i in part] == list(range(10))

    def test_zero_iterations(self) -> None:
        assert execute(0, lambda start, end: start) == []

    def test_single_range_runs_in_caller_thread(self) -> None:
        caller = threading.get_ident()
        assert execute(5, lambda start, end: threading.get_ident(), max_workers=1) == [caller]

    def test_default_worker_count(self) -> None:
        parts = execute(3, lambda start, end: (start, end))
        assert [i for start, end in parts for i in range(start, end)] == [0, 1, 2]

    def test_all_ranges_finish_before_first_error_is_raised(self) -> None:
        """No cancellation; the first failing range in order wins."""
        finished = set()
        lock = threading.Lock()

        def work(start: int, end: int) -> int:
            if start == 0:
                time.sleep(0.05)
                raise RuntimeError("range 0 failed")
            if start == 2:
                raise KeyError("range 2 failed")
            time.sleep(0.05)
            with lock:
                finished.add(start)
            return start

        with pytest.raises(RuntimeError, match="range 0 failed"):
            execute(4, work, max_workers=4)
        assert finished == {1, 3}
