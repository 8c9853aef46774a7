"""
Worker 모델 - 잡 / 실행 결과 구조체
"""

from dataclasses import dataclass, field
from enum import Enum

from database.model import ResultSet


class ErrorKind(str, Enum):
    """실패 분류"""
    TRANSIENT = "transient"  # 재시도 후에도 실패한 일시적 오류
    PERMANENT = "permanent"  # 재시도하지 않는 오류 (문법, 권한 등)
    TIMEOUT = "timeout"      # 잡 단위 제한 시간 초과
    CANCELLED = "cancelled"  # 전체 실행 제한 시간 초과


class OutcomeStatus(str, Enum):
    """리포트용 상태"""
    OK = "ok"
    EMPTY = "empty"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Job:
    """실행할 쿼리 잡 (index는 원래 요청 순서)"""
    index: int
    identifier: str
    display_name: str
    query_text: str


@dataclass(frozen=True)
class JobOutcome:
    """잡 하나의 최종 결과"""
    index: int
    result_set: ResultSet = field(default_factory=ResultSet)
    error_message: str | None = None
    error_kind: ErrorKind | None = None
    skipped: bool = False
    skip_reason: str | None = None
    attempts: int = 0

    @classmethod
    def skip(cls, index: int, reason: str) -> "JobOutcome":
        return cls(index=index, skipped=True, skip_reason=reason)

    @property
    def ok(self) -> bool:
        return not self.skipped and self.error_message is None

    @property
    def status(self) -> OutcomeStatus:
        if self.skipped:
            return OutcomeStatus.SKIPPED
        if self.error_message is not None:
            return OutcomeStatus.ERROR
        if not self.result_set.rows:
            return OutcomeStatus.EMPTY
        return OutcomeStatus.OK
