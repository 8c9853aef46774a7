"""
잡 실행기 모듈

개별 잡의 실행(잡 단위 제한 시간 + 일시적 오류 재시도)을 담당합니다.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from database import BaseBackend, ResultSet
from worker.cancel import CancelToken
from worker.exception import CancelledJobError, JobTimeoutError
from worker.model import ErrorKind, ExecutionOptions, Job, JobOutcome

logger = logging.getLogger(__name__)

TRANSIENT_CLASSIFICATION = "TransientError"

# 드라이버 분류 정보가 없을 때 사용하는 네트워크 오류 문구 (소문자, 포함 여부로 판단)
TRANSIENT_MESSAGE_MARKERS: tuple[str, ...] = (
    "connection refused",
    "timeout",
    "timed out",
    "temporary failure",
    "unexpected end of stream",
    "unexpected eof",
    "broken pipe",
    "connection reset",
    "reset by peer",
    "service unavailable",
    "serviceunavailable",
)


def classify_error(error: BaseException) -> ErrorKind:
    """
    오류 분류

    1. 백엔드 분류 정보(classification 속성)가 있으면 그것만으로 판단
    2. 없으면 메시지에 네트워크 오류 문구가 포함되어 있는지 확인
    """
    if isinstance(error, JobTimeoutError):
        return ErrorKind.TIMEOUT
    if isinstance(error, CancelledJobError):
        return ErrorKind.CANCELLED

    classification = getattr(error, "classification", None)
    if isinstance(classification, str) and classification:
        if classification == TRANSIENT_CLASSIFICATION:
            return ErrorKind.TRANSIENT
        return ErrorKind.PERMANENT

    message = str(error).lower()
    if any(marker in message for marker in TRANSIENT_MESSAGE_MARKERS):
        return ErrorKind.TRANSIENT
    return ErrorKind.PERMANENT


@dataclass(frozen=True)
class ExecutionResult:
    """재시도 정책 실행 결과"""
    result_set: ResultSet | None
    error: BaseException | None
    attempts: int

    @property
    def error_kind(self) -> ErrorKind | None:
        return classify_error(self.error) if self.error is not None else None


class RetryPolicy:
    """
    일시적 오류 재시도 정책

    시도 n(1부터) 실패 후 backoff_base * n 초 대기 (선형 증가).
    대기는 토큰 취소 시 즉시 중단된다.
    """

    def __init__(self, retry_count: int, backoff_base: float = 0.2):
        self._retry_count = max(0, retry_count)
        self._backoff_base = backoff_base

    @property
    def retry_count(self) -> int:
        return self._retry_count

    def backoff(self, attempt: int) -> float:
        """attempt번째 실패 후 대기 시간"""
        return self._backoff_base * attempt

    async def execute(
        self,
        call: Callable[[], Awaitable[ResultSet]],
        token: CancelToken,
        label: str = "",
    ) -> ExecutionResult:
        """
        재시도 포함 실행 (예외를 던지지 않고 결과로 반환)

        Args:
            call: 한 번의 실행 시도
            token: 취소 토큰
            label: 로그용 잡 이름
        """
        last_error: BaseException | None = None
        attempts = 0

        for attempt in range(1, self._retry_count + 2):
            attempts = attempt
            try:
                result_set = await token.run(call())
                return ExecutionResult(result_set=result_set, error=None, attempts=attempts)
            except CancelledJobError as e:
                return ExecutionResult(result_set=None, error=e, attempts=attempts)
            except Exception as e:
                last_error = e

            kind = classify_error(last_error)
            logger.debug(f"Attempt {attempt} failed ({kind.value}): {label} error={last_error}")
            if kind is not ErrorKind.TRANSIENT or attempt > self._retry_count:
                break

            delay = self.backoff(attempt)
            logger.warning(
                f"Scheduling retry: {label} retry={attempt}/{self._retry_count}, "
                f"delay={delay:.2f}s, error={last_error}"
            )
            try:
                await token.sleep(delay)
            except CancelledJobError as e:
                return ExecutionResult(result_set=None, error=e, attempts=attempts)

        return ExecutionResult(result_set=None, error=last_error, attempts=attempts)


class Executor:
    """잡 실행기 (워커 하나가 자신의 핸들로 사용)"""

    def __init__(self, backend: BaseBackend, options: ExecutionOptions):
        self._backend = backend
        self._options = options
        self._policy = RetryPolicy(options.retry_count, options.backoff_base)

    async def execute(self, handle: Any, job: Job, run_token: CancelToken) -> JobOutcome:
        """
        잡 실행

        Args:
            handle: 워커 전용 백엔드 핸들
            job: 실행할 잡
            run_token: 전체 실행 토큰

        Returns:
            JobOutcome: 성공 또는 오류 (예외를 던지지 않음)
        """
        label = f"{job.display_name} [{job.identifier}]"

        with run_token.child(timeout=self._options.per_job_timeout) as job_token:
            def call() -> Awaitable[ResultSet]:
                return self._backend.execute(
                    handle,
                    job.query_text,
                    row_limit=self._options.row_limit,
                    timeout=job_token.remaining(),
                )

            result = await self._policy.execute(call, job_token, label=label)

        if result.error is None:
            logger.debug(f"Job execution completed: {label} rows={len(result.result_set.rows)}")
            return JobOutcome(index=job.index, result_set=result.result_set, attempts=result.attempts)

        kind = result.error_kind
        if kind is ErrorKind.TIMEOUT:
            logger.error(f"Job execution timed out: {label}")
        else:
            logger.error(f"Job execution failed: {label} error={result.error}")
        return JobOutcome(
            index=job.index,
            error_message=str(result.error) or type(result.error).__name__,
            error_kind=kind,
            attempts=result.attempts,
        )
