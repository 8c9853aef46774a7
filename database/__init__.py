"""백엔드 패키지 - 쿼리 실행 대상 (Neo4j)"""

from database.base import BaseBackend, apply_row_limit, ensure_read_only
from database.exception import (
    DatabaseError,
    BackendError,
    BackendConnectionError,
    ReadOnlyViolationError,
)
from database.model import ResultSet, SchemaInventory

__all__ = [
    'BaseBackend',
    'apply_row_limit',
    'ensure_read_only',
    'DatabaseError',
    'BackendError',
    'BackendConnectionError',
    'ReadOnlyViolationError',
    'ResultSet',
    'SchemaInventory',
]
