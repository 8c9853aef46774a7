"""백엔드 기본 인터페이스"""

import re
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Any

from database.exception import ReadOnlyViolationError
from database.model import ResultSet, SchemaInventory

_WRITE_KEYWORDS = re.compile(r"\b(CREATE|MERGE|DELETE|DETACH|SET|REMOVE|DROP|LOAD\s+CSV)\b", re.IGNORECASE)
# '...' / "..." (백슬래시 이스케이프 포함)
_STRING_LITERAL = re.compile(r"'(?:[^'\\]|\\.)*'|\"(?:[^\"\\]|\\.)*\"", re.DOTALL)
_HAS_LIMIT = re.compile(r"limit", re.IGNORECASE)


def apply_row_limit(query_text: str, row_limit: int) -> str:
    """
    행 제한 적용

    row_limit > 0 이고 쿼리에 LIMIT 이 없으면 마지막 줄에 LIMIT 을 붙인다.
    ('limit' 문자열이 어디든 있으면 그대로 둔다)
    """
    text = query_text.strip()
    if row_limit > 0 and not _HAS_LIMIT.search(text):
        text = f"{text}\nLIMIT {row_limit}"
    return text


def ensure_read_only(query_text: str) -> None:
    """
    쓰기 키워드가 있으면 ReadOnlyViolationError

    문자열 리터럴('SET ADMINS' 등)은 비운 뒤 검사한다. 키워드 기반 검사이므로
    주석 안의 키워드는 여전히 거부된다.
    """
    match = _WRITE_KEYWORDS.search(_STRING_LITERAL.sub("''", query_text))
    if match:
        raise ReadOnlyViolationError(match.group(1).upper())


class BaseBackend(ABC):
    """
    쿼리 백엔드 기본 클래스

    워커마다 session()으로 핸들을 하나씩 열고, 해당 핸들로만 execute()를
    호출한다. inventory()는 실행 시작 시 한 번 호출된다.
    """

    @abstractmethod
    async def connect(self) -> None:
        """백엔드 연결"""
        ...

    @abstractmethod
    async def close(self) -> None:
        """백엔드 연결 해제"""
        ...

    @abstractmethod
    def session(self, database: str) -> AbstractAsyncContextManager[Any]:
        """
        워커 전용 연결 핸들

        Args:
            database: 대상 데이터베이스 이름

        Returns:
            핸들을 반환하는 async context manager
        """
        ...

    @abstractmethod
    async def execute(
        self,
        handle: Any,
        query_text: str,
        row_limit: int = 0,
        timeout: float | None = None,
    ) -> ResultSet:
        """
        읽기 전용 쿼리 실행

        Args:
            handle: session()이 반환한 핸들
            query_text: 쿼리 문자열
            row_limit: 최대 행 수 (0 = 무제한)
            timeout: 남은 시간 (초, None = 무제한)

        Raises:
            BackendError: 실행 실패
        """
        ...

    @abstractmethod
    async def inventory(self, database: str) -> SchemaInventory:
        """라벨 / 관계 타입 목록 조회"""
        ...

    async def __aenter__(self) -> "BaseBackend":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
