"""
Neo4j 비동기 백엔드 패키지

사용 예시:
    from database.neo4j import Neo4jBackend, Neo4jConfig

    async with Neo4jBackend(Neo4jConfig(password="...")) as backend:
        inventory = await backend.inventory("neo4j")
"""

from database.neo4j.connection import (
    Neo4jBackend,
    Neo4jConfig,
    LABELS_QUERY,
    RELATIONSHIP_TYPES_QUERY,
)

__all__ = [
    'Neo4jBackend',
    'Neo4jConfig',
    'LABELS_QUERY',
    'RELATIONSHIP_TYPES_QUERY',
]
