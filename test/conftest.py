"""
테스트 공용 픽스처

FakeBackend: 메모리 기반 백엔드
- 쿼리 문자열별 응답 시나리오 (ResultSet 또는 예외, 호출마다 순서대로 소비)
- 쿼리별 지연 시간
- 호출 횟수 / 동시 실행 수 / 세션 수 기록
"""

import asyncio
import itertools
import sys
from collections import Counter
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import pytest

# 프로젝트 루트 경로 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from database import BaseBackend, BackendError, ResultSet, SchemaInventory
from worker.model import Job


class FakeBackend(BaseBackend):
    """시나리오 기반 가짜 백엔드"""

    def __init__(
        self,
        labels=(),
        relationship_types=(),
        responses: dict[str, list] | None = None,
        delays: dict[str, float] | None = None,
        default: ResultSet | None = None,
        session_error: Exception | None = None,
    ):
        self.inventory_result = SchemaInventory.from_names(labels, relationship_types)
        self.responses = {k: list(v) for k, v in (responses or {}).items()}
        self.delays = dict(delays or {})
        self.default = default if default is not None else ResultSet(columns=("n",), rows=((1,),))
        self.session_error = session_error

        self.calls: Counter = Counter()
        self.timeouts: dict[str, list] = {}
        self.handles_by_query: dict[str, list] = {}
        self.inventory_calls = 0
        self.sessions_opened = 0
        self.sessions_closed = 0
        self.active = 0
        self.max_active = 0
        self.connected = False
        self.closed = False
        self._handle_ids = itertools.count(1)

    async def connect(self) -> None:
        self.connected = True

    async def close(self) -> None:
        self.closed = True

    @asynccontextmanager
    async def session(self, database: str) -> AsyncIterator[Any]:
        if self.session_error is not None:
            raise self.session_error
        self.sessions_opened += 1
        try:
            yield f"handle-{next(self._handle_ids)}"
        finally:
            self.sessions_closed += 1

    async def execute(self, handle: Any, query_text: str, row_limit: int = 0, timeout: float | None = None) -> ResultSet:
        self.calls[query_text] += 1
        self.timeouts.setdefault(query_text, []).append(timeout)
        self.handles_by_query.setdefault(query_text, []).append(handle)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            delay = self.delays.get(query_text, 0)
            if delay:
                await asyncio.sleep(delay)
            else:
                await asyncio.sleep(0)
            script = self.responses.get(query_text)
            if not script:
                return self.default
            response = script.pop(0) if len(script) > 1 else script[0]
            if isinstance(response, BaseException):
                raise response
            return response
        finally:
            self.active -= 1

    async def inventory(self, database: str) -> SchemaInventory:
        self.inventory_calls += 1
        return self.inventory_result


def make_jobs(*query_texts: str) -> list[Job]:
    """index 0..N-1 잡 생성"""
    return [
        Job(index=i, identifier=f"q{i}", display_name=f"Query {i}", query_text=text)
        for i, text in enumerate(query_texts)
    ]


def transient(message: str = "server busy") -> BackendError:
    return BackendError(message, classification="TransientError", code="Neo.TransientError.General.Busy")


def permanent(message: str = "syntax error") -> BackendError:
    return BackendError(message, classification="ClientError", code="Neo.ClientError.Statement.SyntaxError")


@pytest.fixture
def fake_backend():
    """기본 FakeBackend (라벨 User/Computer/Group, 관계 MemberOf/AdminTo)"""
    return FakeBackend(labels=("User", "Computer", "Group"), relationship_types=("MemberOf", "AdminTo"))
