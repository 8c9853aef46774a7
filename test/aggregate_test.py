"""
결과 병합 테스트

실행: python -m pytest test/aggregate_test.py -v
"""

import sys
from pathlib import Path

import pytest

# 프로젝트 루트 경로 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from database import ResultSet
from worker.aggregate import RunSummary, assemble, summarize
from worker.exception import AggregationError
from worker.model import ErrorKind, JobOutcome

from conftest import make_jobs


@pytest.fixture
def jobs():
    return make_jobs("RETURN 0", "RETURN 1", "RETURN 2", "RETURN 3")


class TestAssemble:
    """admission skip + 워커풀 결과 병합"""

    def test_merges_by_index(self, jobs):
        outcomes = [
            JobOutcome(index=3, result_set=ResultSet(columns=("n",), rows=((3,),))),
            JobOutcome(index=0),
            JobOutcome(index=2, error_message="boom", error_kind=ErrorKind.PERMANENT),
        ]
        final = assemble(jobs, {1: "missing label: AZUser"}, outcomes)

        assert [o.index for o in final] == [0, 1, 2, 3]
        assert final[1].skipped
        assert final[1].skip_reason == "missing label: AZUser"
        assert final[1].attempts == 0
        assert final[2].error_message == "boom"

    def test_missing_index_raises(self, jobs):
        with pytest.raises(AggregationError) as exc_info:
            assemble(jobs, {}, [JobOutcome(index=0), JobOutcome(index=1)])
        assert "[2, 3]" in str(exc_info.value)

    def test_duplicate_index_raises(self, jobs):
        """admission skip 과 실행 결과가 같은 index"""
        outcomes = [JobOutcome(index=i) for i in range(4)]
        with pytest.raises(AggregationError):
            assemble(jobs, {1: "missing label: X"}, outcomes)

    def test_out_of_range_index_raises(self, jobs):
        outcomes = [JobOutcome(index=i) for i in range(4)] + [JobOutcome(index=9)]
        with pytest.raises(AggregationError):
            assemble(jobs, {}, outcomes)


class TestSummarize:
    """상태별 집계"""

    def test_counts(self):
        outcomes = [
            JobOutcome(index=0, result_set=ResultSet(columns=("n",), rows=((1,),))),
            JobOutcome(index=1),
            JobOutcome.skip(2, "missing label: X"),
            JobOutcome(index=3, error_message="boom"),
            JobOutcome(index=4, error_message="late", error_kind=ErrorKind.TIMEOUT),
        ]
        summary = summarize(outcomes)

        assert summary == RunSummary(ok=1, empty=1, skipped=1, error=2)
        assert summary.total == 5
        assert str(summary) == "ok=1 empty=1 skipped=1 error=2 total=5"
