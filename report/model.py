"""
리포트 입력 모델
"""

from dataclasses import dataclass
from typing import Any, Sequence

from catalog.model import Query
from worker.model import JobOutcome, OutcomeStatus


@dataclass(frozen=True)
class ReportEntry:
    """쿼리 메타데이터 + 실행 결과 (원래 순서의 한 줄)"""
    query: Query
    outcome: JobOutcome

    @property
    def status(self) -> OutcomeStatus:
        return self.outcome.status

    @property
    def has_rows(self) -> bool:
        return bool(self.outcome.result_set.rows)

    def keys_and_headers(self) -> tuple[tuple[str, ...], tuple[str, ...]]:
        """카탈로그 헤더가 없으면 결과 컬럼을 그대로 사용"""
        if self.query.headers:
            return self.query.column_keys, self.query.headers
        columns = self.outcome.result_set.columns
        return columns, columns

    def cells(self, row: Sequence[Any], keys: Sequence[str]) -> list[tuple[str, Any]]:
        """행에서 키 순서대로 (키, 값) 추출, 없는 컬럼은 None"""
        index = self.outcome.result_set.column_index()
        out = []
        for key in keys:
            position = index.get(key)
            value = row[position] if position is not None and position < len(row) else None
            out.append((key, value))
        return out

    def to_dict(self) -> dict[str, Any]:
        """JSON 출력용"""
        data: dict[str, Any] = {
            "query": self.query.model_dump(mode="json"),
            "result": {
                "columns": list(self.outcome.result_set.columns),
                "rows": [list(row) for row in self.outcome.result_set.rows],
            },
        }
        if self.outcome.error_message is not None:
            data["error"] = self.outcome.error_message
            if self.outcome.error_kind is not None:
                data["errorKind"] = self.outcome.error_kind.value
        if self.outcome.skipped:
            data["skipped"] = True
            data["skipWhy"] = self.outcome.skip_reason
        return data


def build_entries(queries: Sequence[Query], outcomes: Sequence[JobOutcome]) -> list[ReportEntry]:
    """카탈로그 순서와 결과 순서(index)를 맞춰 묶음"""
    if len(queries) != len(outcomes):
        raise ValueError(f"queries ({len(queries)}) and outcomes ({len(outcomes)}) length mismatch")
    return [ReportEntry(query=q, outcome=o) for q, o in zip(queries, outcomes)]
