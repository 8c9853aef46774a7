"""
실행 옵션 모델
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExecutionOptions(BaseModel):
    """배치 실행 옵션 (실행 중 변경 불가)"""
    model_config = ConfigDict(frozen=True)

    database: str = Field(default="neo4j", description="대상 데이터베이스 이름")
    row_limit: int = Field(default=0, ge=0, description="잡당 최대 행 수 (0 = 무제한)")
    parallelism: int = Field(default=4, description="동시 워커 수")
    per_job_timeout: float | None = Field(default=None, description="잡 단위 제한 시간 (초)")
    retry_count: int = Field(default=1, description="일시적 오류 재시도 횟수")
    fail_fast: bool = False
    run_timeout: float | None = Field(default=None, description="전체 실행 제한 시간 (초)")
    backoff_base: float = Field(default=0.2, ge=0, description="재시도 대기 단위 (초)")

    @field_validator("parallelism")
    @classmethod
    def _at_least_one(cls, v: int) -> int:
        return max(1, v)

    @field_validator("retry_count")
    @classmethod
    def _not_negative(cls, v: int) -> int:
        return max(0, v)

    @field_validator("per_job_timeout", "run_timeout")
    @classmethod
    def _positive_or_none(cls, v: float | None) -> float | None:
        # 0 이하는 제한 없음
        if v is None or v <= 0:
            return None
        return v
