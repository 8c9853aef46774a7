"""
결과 병합

admission에서 건너뛴 잡과 워커풀 실행 결과를 원래 잡 순서대로 합친다.
"""

from dataclasses import dataclass
from typing import Mapping, Sequence

from worker.exception import AggregationError
from worker.model import Job, JobOutcome, OutcomeStatus


@dataclass(frozen=True)
class RunSummary:
    """상태별 집계"""
    ok: int = 0
    empty: int = 0
    skipped: int = 0
    error: int = 0

    @property
    def total(self) -> int:
        return self.ok + self.empty + self.skipped + self.error

    def __str__(self) -> str:
        return (
            f"ok={self.ok} empty={self.empty} skipped={self.skipped} "
            f"error={self.error} total={self.total}"
        )


def assemble(
    jobs: Sequence[Job],
    planned_skips: Mapping[int, str],
    outcomes: Sequence[JobOutcome],
) -> list[JobOutcome]:
    """
    최종 결과 목록 생성

    Args:
        jobs: 원래 잡 목록 (index 0..N-1)
        planned_skips: admission skip (index -> 사유)
        outcomes: 워커풀 결과 (실행 대상 잡 각각 하나)

    Returns:
        길이 N, final[i].index == i

    Raises:
        AggregationError: index 누락/중복
    """
    final: list[JobOutcome | None] = [None] * len(jobs)

    for index, reason in planned_skips.items():
        _place(final, JobOutcome.skip(index, reason))
    for outcome in outcomes:
        _place(final, outcome)

    missing = [i for i, outcome in enumerate(final) if outcome is None]
    if missing:
        raise AggregationError(f"No outcome for job index(es): {missing}")

    for i, job in enumerate(jobs):
        if job.index != i:
            raise AggregationError(f"Job list is not densely indexed: position {i} has index {job.index}")
    return final


def _place(final: list[JobOutcome | None], outcome: JobOutcome) -> None:
    if not 0 <= outcome.index < len(final):
        raise AggregationError(f"Outcome index out of range: {outcome.index}")
    if final[outcome.index] is not None:
        raise AggregationError(f"Duplicate outcome for job index {outcome.index}")
    final[outcome.index] = outcome


def summarize(outcomes: Sequence[JobOutcome]) -> RunSummary:
    """상태별 개수"""
    counts = {status: 0 for status in OutcomeStatus}
    for outcome in outcomes:
        counts[outcome.status] += 1
    return RunSummary(
        ok=counts[OutcomeStatus.OK],
        empty=counts[OutcomeStatus.EMPTY],
        skipped=counts[OutcomeStatus.SKIPPED],
        error=counts[OutcomeStatus.ERROR],
    )
