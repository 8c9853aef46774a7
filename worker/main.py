"""
WorkerPool: 고정 크기 워커풀 모듈

잡 목록을 하나의 분배 큐에 넣고, parallelism 개의 워커가 각자 백엔드 핸들을
하나씩 열어 큐에서 잡을 꺼내 실행합니다. 결과는 미리 할당한 슬롯에 기록되므로
완료 순서와 관계없이 입력 순서가 유지됩니다.
"""

import asyncio
import logging
from typing import Any, Sequence

from database import BaseBackend
from worker.cancel import CancelToken
from worker.exception import CancelledJobError
from worker.executor import Executor
from worker.model import ExecutionOptions, Job, JobOutcome

logger = logging.getLogger(__name__)

FAIL_FAST_SKIP_REASON = "not dispatched: fail-fast stop after an earlier failure"

_SENTINEL: Any = None


class WorkerPool:
    """
    잡 실행 워커풀

    - 분배 큐는 단일 생산자 / 다중 소비자, 각 잡은 정확히 한 워커에게 전달됨
    - 슬롯 k는 jobs[k]를 받은 워커만 한 번 기록 (잠금 불필요)
    - fail_fast: 오류 발생 시 아직 꺼내지 않은 잡은 실행하지 않음 (진행 중 잡은 계속)
    """

    def __init__(self, backend: BaseBackend, options: ExecutionOptions):
        self._backend = backend
        self._options = options
        self._executor = Executor(backend, options)
        self._stop_event: asyncio.Event | None = None
        self._dispatched = 0

    @property
    def worker_count(self) -> int:
        return max(1, self._options.parallelism)

    @property
    def dispatched_count(self) -> int:
        """실제로 실행이 시작된 잡 수"""
        return self._dispatched

    @property
    def stopped(self) -> bool:
        """fail-fast 정지 여부"""
        return self._stop_event is not None and self._stop_event.is_set()

    async def run(self, jobs: Sequence[Job], token: CancelToken | None = None) -> list[JobOutcome]:
        """
        잡 실행

        Args:
            jobs: 실행할 잡 (admission 통과분)
            token: 전체 실행 토큰 (None이면 options.run_timeout으로 생성)

        Returns:
            list[JobOutcome]: outcomes[k]는 jobs[k]의 결과
        """
        own_token = token is None
        run_token = CancelToken.with_timeout(self._options.run_timeout) if own_token else token

        slots: list[JobOutcome | None] = [None] * len(jobs)
        queue: asyncio.Queue = asyncio.Queue()
        self._stop_event = asyncio.Event()
        self._dispatched = 0

        # 단일 생산자: 모든 잡 + 워커 수만큼 종료 표시
        for slot, job in enumerate(jobs):
            queue.put_nowait((slot, job))
        for _ in range(self.worker_count):
            queue.put_nowait(_SENTINEL)

        logger.info(
            f"WorkerPool started (jobs={len(jobs)}, workers={self.worker_count}, "
            f"retries={self._options.retry_count}, per_job_timeout={self._options.per_job_timeout}, "
            f"fail_fast={self._options.fail_fast})"
        )

        workers = [
            asyncio.create_task(self._worker(n, queue, slots, len(jobs), run_token), name=f"worker-{n}")
            for n in range(self.worker_count)
        ]
        try:
            results = await asyncio.gather(*workers, return_exceptions=True)
        finally:
            if own_token:
                run_token.close()

        worker_errors = []
        for n, result in enumerate(results):
            if isinstance(result, BaseException):
                logger.error(f"Worker {n} exited with error: {result!r}")
                worker_errors.append(result)

        reason = self._undispatched_reason(run_token, worker_errors)
        outcomes = [
            outcome if outcome is not None else JobOutcome.skip(jobs[k].index, reason)
            for k, outcome in enumerate(slots)
        ]
        logger.info(f"WorkerPool finished (dispatched={self._dispatched}/{len(jobs)})")
        return outcomes

    def _undispatched_reason(self, run_token: CancelToken, worker_errors: list[BaseException]) -> str:
        """실행되지 않은 슬롯의 skip 사유"""
        if run_token.cancelled:
            return f"cancelled: {run_token.reason}"
        if self.stopped:
            return FAIL_FAST_SKIP_REASON
        if worker_errors:
            return f"not dispatched: worker failed: {worker_errors[0]}"
        return "not dispatched"

    async def _worker(
        self,
        number: int,
        queue: asyncio.Queue,
        slots: list[JobOutcome | None],
        total: int,
        run_token: CancelToken,
    ) -> None:
        """워커 태스크 (전용 핸들 하나로 큐가 빌 때까지 실행)"""
        async with self._backend.session(self._options.database) as handle:
            logger.debug(f"Worker {number} opened session")
            while not self._stop_event.is_set():
                try:
                    item = await run_token.run(queue.get())
                except CancelledJobError:
                    return
                if item is _SENTINEL:
                    return
                if self._stop_event.is_set():
                    # 정지 이후 꺼낸 잡은 실행하지 않음
                    return

                slot, job = item
                self._dispatched += 1
                logger.info(f"({slot + 1}/{total}) {job.display_name} [{job.identifier}]")

                outcome = await self._executor.execute(handle, job, run_token)
                slots[slot] = outcome

                if outcome.error_message is not None and self._options.fail_fast:
                    if not self._stop_event.is_set():
                        logger.warning(f"Fail-fast: stopping dispatch after failure of {job.identifier}")
                    self._stop_event.set()
