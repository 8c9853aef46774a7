"""
BatchEngine: 배치 실행 진입점

inventory 조회 -> admission -> 워커풀 실행 -> 결과 병합 순서로 실행합니다.
"""

import logging
from dataclasses import dataclass, field
from typing import Sequence

from database import BaseBackend
from planner import SchemaPresence, plan_all
from worker.aggregate import RunSummary, assemble, summarize
from worker.cancel import CancelToken
from worker.main import WorkerPool
from worker.model import ExecutionOptions, Job, JobOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    """배치 실행 결과"""
    outcomes: list[JobOutcome] = field(default_factory=list)
    presence: SchemaPresence | None = None
    summary: RunSummary = field(default_factory=RunSummary)


class BatchEngine:
    """배치 실행 엔진"""

    def __init__(self, backend: BaseBackend, options: ExecutionOptions):
        self._backend = backend
        self._options = options

    async def build_presence(self) -> SchemaPresence:
        """백엔드 inventory로 스키마 인덱스 생성 (실행당 한 번)"""
        inventory = await self._backend.inventory(self._options.database)
        return SchemaPresence.from_inventory(inventory)

    async def run(self, jobs: Sequence[Job], admission: bool = True) -> RunResult:
        """
        배치 실행

        잡 단위 실패는 결과에 기록되며 예외로 전파되지 않는다.
        (inventory 조회 실패는 BackendError로 전파)

        Args:
            jobs: index 0..N-1 잡 목록
            admission: False면 스키마 확인 없이 모두 실행
        """
        presence = await self.build_presence() if admission else None
        plan = plan_all(jobs, presence)

        pool = WorkerPool(self._backend, self._options)
        with CancelToken.with_timeout(self._options.run_timeout) as run_token:
            outcomes = await pool.run(plan.runnable, token=run_token)

        final = assemble(jobs, plan.skipped, outcomes)
        summary = summarize(final)
        logger.info(f"Batch finished: {summary}")
        return RunResult(outcomes=final, presence=presence, summary=summary)
