"""
스키마 존재 인덱스

실행 시작 시 백엔드 inventory를 한 번 조회해 만든 라벨/관계 타입 집합.
생성 후에는 읽기 전용이므로 워커 간 공유에 잠금이 필요 없다.
"""

from dataclasses import dataclass, field

from database.model import SchemaInventory


@dataclass(frozen=True)
class SchemaPresence:
    """소문자 라벨 / 관계 타입 집합"""
    labels: frozenset[str] = field(default_factory=frozenset)
    relationship_types: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_inventory(cls, inventory: SchemaInventory) -> "SchemaPresence":
        return cls.from_names(inventory.labels, inventory.relationship_types)

    @classmethod
    def from_names(cls, labels, relationship_types) -> "SchemaPresence":
        return cls(
            labels=frozenset(name.lower() for name in labels),
            relationship_types=frozenset(name.lower() for name in relationship_types),
        )

    def has_label(self, name: str) -> bool:
        return name.lower() in self.labels

    def has_relationship_type(self, name: str) -> bool:
        return name.lower() in self.relationship_types
