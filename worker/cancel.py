"""
협조적 취소 토큰

대기 지점(큐 수신, 백엔드 호출, 재시도 대기)마다 토큰을 넘겨 취소 여부를 확인한다.
- 전체 실행 토큰: 모든 진행 중/대기 중 잡에 영향
- 잡 토큰 (child): 해당 잡 실행에만 영향, 부모 취소는 전파됨
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, TypeVar

from worker.exception import CancelledJobError, JobTimeoutError, RunCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancelToken:
    """취소 토큰"""

    def __init__(
        self,
        timeout: float | None = None,
        parent: "CancelToken | None" = None,
        error_factory: Callable[[str], CancelledJobError] = RunCancelledError,
        timeout_reason: str | None = None,
    ):
        self._event = asyncio.Event()
        self._reason: str | None = None
        self._error_factory = error_factory
        self._parent = parent
        self._children: set[CancelToken] = set()
        self._timer: asyncio.TimerHandle | None = None
        self._deadline: float | None = None

        if parent is not None:
            parent._children.add(self)
            if parent.cancelled:
                self._cancel(parent.reason, parent._error_factory)
                return

        if timeout is not None:
            loop = asyncio.get_running_loop()
            self._deadline = time.monotonic() + timeout
            reason = timeout_reason or f"deadline of {timeout:g}s exceeded"
            self._timer = loop.call_later(timeout, self.cancel, reason)

    @classmethod
    def with_timeout(cls, timeout: float | None) -> "CancelToken":
        """전체 실행 토큰"""
        return cls(timeout=timeout, timeout_reason=f"run deadline of {timeout:g}s exceeded" if timeout else None)

    def child(
        self,
        timeout: float | None = None,
        error_factory: Callable[[str], CancelledJobError] = JobTimeoutError,
    ) -> "CancelToken":
        """잡 단위 토큰 (만료되어도 부모/형제에 영향 없음)"""
        reason = f"query timed out after {timeout:g}s" if timeout else None
        return CancelToken(timeout=timeout, parent=self, error_factory=error_factory, timeout_reason=reason)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def remaining(self) -> float | None:
        """남은 시간 (초), 제한 없으면 None (부모 기한 포함)"""
        candidates = []
        token: CancelToken | None = self
        while token is not None:
            if token._deadline is not None:
                candidates.append(token._deadline - time.monotonic())
            token = token._parent
        if not candidates:
            return None
        return max(0.0, min(candidates))

    def cancel(self, reason: str = "cancelled") -> None:
        """취소 (자식 토큰에도 전파)"""
        self._cancel(reason, self._error_factory)

    def _cancel(self, reason: str | None, error_factory: Callable[[str], CancelledJobError]) -> None:
        if self.cancelled:
            return
        self._reason = reason or "cancelled"
        self._error_factory = error_factory
        self._event.set()
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        logger.debug(f"Token cancelled: {self._reason}")
        for child in list(self._children):
            child._cancel(self._reason, error_factory)

    def error(self) -> CancelledJobError:
        """현재 취소 사유에 맞는 예외 생성"""
        return self._error_factory(self._reason or "cancelled")

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise self.error()

    async def wait(self) -> None:
        await self._event.wait()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        awaitable을 취소와 경쟁시켜 실행

        먼저 취소되면 awaitable을 취소하고 토큰 예외를 발생시킨다.
        """
        if self.cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise self.error()

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.debug(f"Error from cancelled operation ignored: {e}")
        raise self.error()

    async def sleep(self, delay: float) -> None:
        """취소 가능한 대기"""
        await self.run(asyncio.sleep(delay))

    def close(self) -> None:
        """타이머 해제 및 부모에서 분리"""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._parent is not None:
            self._parent._children.discard(self)
            self._parent = None

    def __enter__(self) -> "CancelToken":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
