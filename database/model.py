"""
백엔드 결과 모델
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ResultSet:
    """쿼리 결과 (컬럼 순서 유지)"""
    columns: tuple[str, ...] = ()
    rows: tuple[tuple[Any, ...], ...] = ()

    def column_index(self) -> dict[str, int]:
        """컬럼명 -> 위치"""
        return {name: i for i, name in enumerate(self.columns)}

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class SchemaInventory:
    """백엔드에 존재하는 노드 라벨 / 관계 타입 목록 (정렬됨)"""
    labels: tuple[str, ...] = field(default_factory=tuple)
    relationship_types: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_names(cls, labels, relationship_types) -> "SchemaInventory":
        return cls(
            labels=tuple(sorted(str(name) for name in labels)),
            relationship_types=tuple(sorted(str(name) for name in relationship_types)),
        )
