"""
쿼리 카탈로그

catalog/data/queries.yaml 에서 내장 쿼리를 읽어 변경 불가능한 QueryCatalog 값으로
만든다. 필터 / 정렬 / 표시 모드 적용은 모두 새 QueryCatalog 를 반환한다.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

import yaml
from pydantic import ValidationError

from catalog.exception import CatalogLoadError, InvalidCategoryError, QueryNotFoundError
from catalog.model import Category, Query
from worker.model import Job

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "data" / "queries.yaml"

# 항상 맨 앞에 오는 기본 인벤토리 탭
BASELINE_ORDER: dict[str, int] = {
    "ad-all-users-samaccountname": 1,
    "ad-all-computers-fqdn": 2,
    "ad-domain-admins": 3,
    "ad-domain-controllers": 4,
}

_CATEGORY_RANK: dict[str, int] = {"ad": 10, "entraid": 20, "info": 30}

USER_DISPLAY_MODES = ("samaccountname", "upn")
HOST_DISPLAY_MODES = ("fqdn", "hostname", "both")

# hostname 컬럼을 추가할 수 있는 컴퓨터 결과 쿼리
_COMPUTER_COLUMN_QUERIES = frozenset({
    "ad-domain-controllers",
    "ad-domain-admin-sessions-non-dc",
    "ad-domain-users-local-admin",
    "ad-unconstrained-delegation-non-dc",
    "ad-computers-unconstrained-delegation",
})

_RETURN_COMPUTER = re.compile(r"(?P<head>RETURN\s+(?:distinct\s+)?)(?:.*?,\s*)?(?P<expr>[A-Za-z0-9_.()]+)\s+AS computer\b", re.IGNORECASE)


@dataclass(frozen=True)
class QueryCatalog:
    """변경 불가능한 쿼리 목록"""
    queries: tuple[Query, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[Query]:
        return iter(self.queries)

    def __len__(self) -> int:
        return len(self.queries)

    def __getitem__(self, position: int) -> Query:
        return self.queries[position]

    def __add__(self, other: "QueryCatalog") -> "QueryCatalog":
        return QueryCatalog(self.queries + other.queries)

    def filter_category(self, category: str) -> "QueryCatalog":
        """
        카테고리 필터 (all 또는 빈 값이면 전체)

        Raises:
            InvalidCategoryError: all|AD|EntraID|INFO 이외
        """
        category = (category or "").strip()
        if not category or category.lower() == "all":
            return self
        allowed = {c.value.lower() for c in Category}
        if category.lower() not in allowed:
            raise InvalidCategoryError(category)
        return QueryCatalog(tuple(q for q in self.queries if q.category.lower() == category.lower()))

    def without_category(self, category: str) -> "QueryCatalog":
        """해당 카테고리 제외"""
        return QueryCatalog(tuple(q for q in self.queries if q.category.lower() != category.lower()))

    def ordered(self) -> "QueryCatalog":
        """기본 탭 -> AD -> EntraID -> INFO (카테고리 내 순서 유지)"""
        def sort_key(item: tuple[int, Query]) -> tuple[int, int, int]:
            position, q = item
            if q.id in BASELINE_ORDER:
                return (0, BASELINE_ORDER[q.id], 0)
            return (1, _CATEGORY_RANK.get(q.category.lower(), 99), position)

        ranked = sorted(enumerate(self.queries), key=sort_key)
        return QueryCatalog(tuple(q for _, q in ranked))

    def find(self, query_id: str) -> Query:
        """ID로 쿼리 조회"""
        for q in self.queries:
            if q.id == query_id:
                return q
        raise QueryNotFoundError(query_id)

    def only(self, query_id: str) -> "QueryCatalog":
        return QueryCatalog((self.find(query_id),))

    def with_display_modes(self, user_mode: str = "samaccountname", host_mode: str = "fqdn") -> "QueryCatalog":
        """사용자명 / 호스트명 표시 방식 적용"""
        return QueryCatalog(tuple(_apply_display_modes(q, user_mode, host_mode) for q in self.queries))

    def to_jobs(self) -> list[Job]:
        """원래 순서대로 index 0..N-1 잡 생성"""
        return [
            Job(index=i, identifier=q.id, display_name=q.sheet_name, query_text=q.cypher)
            for i, q in enumerate(self.queries)
        ]


def load_catalog(path: str | Path | None = None) -> tuple[QueryCatalog, QueryCatalog]:
    """
    카탈로그 파일 로드

    Args:
        path: YAML 경로 (None이면 내장 카탈로그)

    Returns:
        (findings, info)

    Raises:
        CatalogLoadError: 파일/스키마 오류
    """
    catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH
    try:
        with open(catalog_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise CatalogLoadError(str(catalog_path), str(e)) from e

    if not isinstance(data, dict):
        raise CatalogLoadError(str(catalog_path), "top-level mapping expected")

    try:
        findings = QueryCatalog(tuple(Query(**item) for item in data.get("findings") or []))
        info = QueryCatalog(tuple(Query(**item) for item in data.get("info") or []))
    except (TypeError, ValidationError) as e:
        raise CatalogLoadError(str(catalog_path), str(e)) from e

    ids = [q.id for q in findings] + [q.id for q in info]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise CatalogLoadError(str(catalog_path), f"duplicate query id(s): {', '.join(duplicates)}")

    logger.debug(f"Loaded catalog {catalog_path}: {len(findings)} findings, {len(info)} info")
    return findings, info


def _apply_display_modes(q: Query, user_mode: str, host_mode: str) -> Query:
    """기본 인벤토리 탭 / 컴퓨터 결과 쿼리의 표시 방식 변경"""
    if q.id == "ad-all-users-samaccountname":
        if user_mode == "upn":
            return q.model_copy(update={
                "sheet_name": "All Users (UPN)",
                "headers": ("upn",),
                "cypher": (
                    "MATCH (u:User)\n"
                    "WHERE u.userprincipalname IS NOT NULL OR u.name IS NOT NULL\n"
                    "RETURN coalesce(u.userprincipalname, u.name) AS upn\n"
                    "ORDER BY upn"
                ),
            })
        return q.model_copy(update={"sheet_name": "All Users", "headers": ("samaccountname",)})

    if q.id == "ad-all-computers-fqdn":
        if host_mode == "hostname":
            return q.model_copy(update={
                "sheet_name": "All Computers (hostname)",
                "headers": ("hostname",),
                "cypher": (
                    "MATCH (c:Computer)\n"
                    "WITH c, split(c.name,'.') AS parts\n"
                    "RETURN parts[0] AS computer\n"
                    "ORDER BY hostname"
                ),
            })
        if host_mode == "both":
            return q.model_copy(update={
                "sheet_name": "All Computers",
                "headers": ("hostname", "fqdn"),
                "cypher": (
                    "MATCH (c:Computer)\n"
                    "WITH c, split(c.name,'.') AS parts\n"
                    "RETURN parts[0] AS computer, c.name AS fqdn\n"
                    "ORDER BY fqdn"
                ),
            })
        return q

    if q.id in _COMPUTER_COLUMN_QUERIES:
        return _with_hostname_column(q, host_mode)
    return q


def _with_hostname_column(q: Query, host_mode: str) -> Query:
    """both 모드: '<expr> AS computer' 를 반환하는 쿼리에 짧은 호스트명 컬럼을 앞에 추가"""
    if host_mode != "both":
        return q
    if "host" in q.column_keys:
        return q

    lines = q.cypher.split("\n")
    for i, line in enumerate(lines):
        if not line.strip().upper().startswith("RETURN "):
            continue
        match = _RETURN_COMPUTER.search(line)
        if not match:
            return q
        lines[i] = line.replace(
            match.group("head"),
            f"{match.group('head')}split({match.group('expr')},'.')[0] AS host, ",
            1,
        )
        # 'Hostname' 헤더는 computer 키(FQDN)로 해석되므로 새 컬럼은 'Host'
        return q.model_copy(update={"headers": ("Host",) + q.headers, "cypher": "\n".join(lines)})
    return q
