"""
Neo4j 비동기 백엔드 모듈

neo4j 공식 드라이버(AsyncGraphDatabase)를 사용하여 읽기 전용 쿼리를 실행합니다.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator

import neo4j
from neo4j import AsyncGraphDatabase, AsyncSession
from neo4j.exceptions import DriverError, Neo4jError

from database.base import BaseBackend, apply_row_limit, ensure_read_only
from database.exception import BackendConnectionError, BackendError
from database.model import ResultSet, SchemaInventory

logger = logging.getLogger(__name__)

LABELS_QUERY = "CALL db.labels() YIELD label RETURN label"
RELATIONSHIP_TYPES_QUERY = "CALL db.relationshipTypes() YIELD relationshipType RETURN relationshipType"


@dataclass
class Neo4jConfig:
    """Neo4j 연결 설정"""
    uri: str = ""  # 지정 시 host/port 무시
    host: str = "127.0.0.1"
    port: int = 7687
    username: str = "neo4j"
    password: str = ""
    database: str = "neo4j"
    connection_timeout: float = 10.0
    max_connection_pool_size: int = 50

    def resolved_uri(self) -> str:
        """실제 접속 URI"""
        if self.uri:
            return self.uri
        return f"bolt://{self.host}:{self.port}"


def _log_query(query_text: str, row_limit: int, timeout: float | None) -> None:
    """쿼리 로깅"""
    oneline = ' '.join(query_text.split())
    logger.debug(f"[CYPHER] {oneline} | limit={row_limit}, timeout={timeout}")


def _log_result(row_count: int) -> None:
    """결과 로깅"""
    logger.debug(f"[CYPHER Result] {row_count} row(s)")


def _translate(e: Exception) -> BackendError:
    """드라이버 예외 -> BackendError (분류 정보 유지)"""
    if isinstance(e, Neo4jError):
        return BackendError(
            f"{e.code}: {e.message}" if e.code else str(e),
            classification=getattr(e, "classification", None),
            code=e.code,
        )
    return BackendConnectionError(f"{type(e).__name__}: {e}")


class Neo4jBackend(BaseBackend):
    """
    Neo4j 백엔드 구현

    사용 예시:
        async with Neo4jBackend(config) as backend:
            inventory = await backend.inventory("neo4j")
            async with backend.session("neo4j") as handle:
                rs = await backend.execute(handle, "MATCH (u:User) RETURN u.name AS user")
    """

    def __init__(self, config: Neo4jConfig):
        self._config = config
        self._driver: neo4j.AsyncDriver | None = None

    async def connect(self) -> None:
        """드라이버 생성 및 연결 확인"""
        if self._driver is not None:
            logger.warning("Neo4j driver already connected")
            return

        uri = self._config.resolved_uri()
        try:
            self._driver = AsyncGraphDatabase.driver(
                uri,
                auth=(self._config.username, self._config.password),
                connection_timeout=self._config.connection_timeout,
                max_connection_pool_size=self._config.max_connection_pool_size,
            )
            await self._driver.verify_connectivity()
        except (Neo4jError, DriverError) as e:
            await self.close()
            raise _translate(e) from e

        logger.info(f"Connected to {uri} as {self._config.username}")

    @property
    def driver(self) -> neo4j.AsyncDriver:
        if self._driver is None:
            raise RuntimeError("Neo4j backend not connected. Call connect() first.")
        return self._driver

    @asynccontextmanager
    async def session(self, database: str) -> AsyncIterator[AsyncSession]:
        """워커 전용 읽기 세션"""
        sess = self.driver.session(database=database, default_access_mode=neo4j.READ_ACCESS)
        try:
            yield sess
        finally:
            await sess.close()

    async def execute(
        self,
        handle: AsyncSession,
        query_text: str,
        row_limit: int = 0,
        timeout: float | None = None,
    ) -> ResultSet:
        """읽기 트랜잭션으로 쿼리 실행"""
        ensure_read_only(query_text)
        text = apply_row_limit(query_text, row_limit)
        _log_query(text, row_limit, timeout)

        columns: tuple[str, ...] = ()
        rows: list[tuple[Any, ...]] = []
        try:
            # execute_read는 드라이버 자체 재시도가 있으므로 명시적 트랜잭션 사용
            # 서버 타임아웃은 begin_transaction 에서 지정 (tx.run 은 문자열만 받음)
            tx = await handle.begin_transaction(timeout=timeout)
            async with tx:
                result = await tx.run(text)
                columns = tuple(result.keys())
                async for record in result:
                    rows.append(tuple(record.values()))
                    if row_limit > 0 and len(rows) >= row_limit:
                        break
        except (Neo4jError, DriverError) as e:
            raise _translate(e) from e

        _log_result(len(rows))
        return ResultSet(columns=columns, rows=tuple(rows))

    async def inventory(self, database: str) -> SchemaInventory:
        """db.labels() / db.relationshipTypes() 조회"""
        async with self.session(database) as sess:
            labels = await self._single_column(sess, LABELS_QUERY)
            rel_types = await self._single_column(sess, RELATIONSHIP_TYPES_QUERY)

        inventory = SchemaInventory.from_names(labels, rel_types)
        logger.info(
            f"Schema inventory: {len(inventory.labels)} labels, "
            f"{len(inventory.relationship_types)} relationship types"
        )
        return inventory

    async def _single_column(self, sess: AsyncSession, query_text: str) -> list[str]:
        """첫 번째 컬럼 값 목록"""
        try:
            result = await sess.run(query_text)
            values = []
            async for record in result:
                if len(record) == 0:
                    continue
                values.append(str(record[0]))
            return values
        except (Neo4jError, DriverError) as e:
            raise _translate(e) from e

    async def close(self) -> None:
        """드라이버 종료"""
        if self._driver is not None:
            await self._driver.close()
            self._driver = None
            logger.info("Neo4j driver closed")
