"""
실행 흐름

카탈로그 선택 -> Neo4j 연결 -> (스키마 출력 | 배치 실행) -> 리포트 출력
"""

import logging
import sys
from dataclasses import dataclass
from typing import IO, Callable

from catalog import Category, QueryCatalog, load_catalog
from common.config import AppConfig
from database import BaseBackend, SchemaInventory
from database.neo4j import Neo4jBackend, Neo4jConfig
from houndbatch.exception import UsageError
from report import build_entries, write_console, write_core_csvs, write_structured, write_text, write_xlsx
from worker.aggregate import RunSummary
from worker.engine import BatchEngine

logger = logging.getLogger(__name__)

BackendFactory = Callable[[Neo4jConfig], BaseBackend]


@dataclass(frozen=True)
class RunRequest:
    """쿼리 선택 / 출력 옵션 (연결 / 실행 옵션은 AppConfig)"""
    query_id: str = ""
    category: str = "all"
    include_info: bool = False
    include_entra: bool = False
    list_only: bool = False
    schema_only: bool = False
    user_display: str = "samaccountname"
    host_display: str = "fqdn"
    text_path: str = ""
    xlsx_path: str = ""
    verbose: bool = False
    structured_format: str = ""
    out_path: str = ""
    core_csv_dir: str = ""
    skip_empty: bool = False

    @property
    def console(self) -> bool:
        """출력 옵션이 하나도 없으면 콘솔 출력"""
        return self.verbose or not (self.text_path or self.xlsx_path or self.structured_format)


def _status(message: str) -> None:
    print(f"[+] {message}", file=sys.stderr)


def select_queries(findings: QueryCatalog, info: QueryCatalog, request: RunRequest) -> QueryCatalog:
    """
    실행할 쿼리 선택

    --category INFO / EntraID 는 -i / --entra 없이도 해당 카테고리를 포함한다.
    --id 는 전체 카탈로그에서 찾는다.

    Raises:
        InvalidCategoryError: 잘못된 카테고리
        QueryNotFoundError: 없는 쿼리 ID
    """
    category = (request.category or "all").strip()
    if request.query_id:
        selected = (findings + info).only(request.query_id)
    else:
        include_info = request.include_info or category.lower() == Category.INFO.value.lower()
        include_entra = request.include_entra or category.lower() == Category.ENTRA_ID.value.lower()
        selected = findings + info if include_info else findings
        if not include_entra:
            selected = selected.without_category(Category.ENTRA_ID.value)
        selected = selected.filter_category(category).ordered()
    return selected.with_display_modes(request.user_display, request.host_display)


def print_query_list(catalog: QueryCatalog, stream: IO[str] | None = None) -> None:
    out = stream or sys.stdout
    for q in catalog:
        out.write(f"[{q.category}] {q.title}\n  id: {q.id}\n  sheet: {q.sheet_name}\n  {q.description}\n\n")


def print_schema(inventory: SchemaInventory, stream: IO[str] | None = None) -> None:
    out = stream or sys.stdout
    out.write("== Neo4j schema summary ==\n")
    out.write(f"Node labels ({len(inventory.labels)}): {', '.join(inventory.labels)}\n")
    out.write(
        f"Relationship types ({len(inventory.relationship_types)}): "
        f"{', '.join(inventory.relationship_types)}\n"
    )


async def run(
    config: AppConfig,
    request: RunRequest,
    backend_factory: BackendFactory = Neo4jBackend,
) -> RunSummary | None:
    """
    CLI 실행 본체

    Returns:
        배치 실행 요약 (--list / --schema 이면 None)

    Raises:
        UsageError: 쿼리 미선택 / 비밀번호 누락
        CatalogError, BackendError, ReportError
    """
    findings, info = load_catalog()
    queries = select_queries(findings, info, request)

    if request.list_only:
        print_query_list(queries)
        return None
    if not request.schema_only and len(queries) == 0:
        raise UsageError("no queries selected (try --list)")
    if not config.neo4j.password:
        raise UsageError("missing password: provide -p/--password or set NEO4J_PASS")

    backend_config = config.neo4j.to_backend_config()
    _status(f"Connecting to {backend_config.resolved_uri()} (db={backend_config.database}) as {backend_config.username}")

    async with backend_factory(backend_config) as backend:
        if request.schema_only:
            print_schema(await backend.inventory(backend_config.database))
            return None

        options = config.runner.to_options(backend_config.database)
        limit = f"limit={options.row_limit}" if options.row_limit > 0 else "no row limit"
        _status(
            f"Running {len(queries)} queries ({limit}, parallel={options.parallelism}, "
            f"per-query-timeout={options.per_job_timeout}s)"
        )
        result = await BatchEngine(backend, options).run(queries.to_jobs(), admission=config.runner.admission)

    entries = build_entries(list(queries), result.outcomes)
    write_outputs(entries, request)
    _status(f"Done: {result.summary}")
    return result.summary


def write_outputs(entries, request: RunRequest) -> None:
    """구조화 출력이 지정되면 그것만, 아니면 텍스트 / XLSX / 콘솔"""
    if request.core_csv_dir:
        write_core_csvs(request.core_csv_dir, entries)

    if request.structured_format:
        write_structured(entries, request.structured_format, request.out_path or None)
        _status(f"Wrote structured output to {request.out_path or 'stdout'}")
        return

    if request.text_path:
        write_text(entries, request.text_path)
        _status(f"Wrote text report -> {request.text_path}")
    if request.xlsx_path:
        write_xlsx(entries, request.xlsx_path, skip_empty=request.skip_empty)
        _status(f"Wrote XLSX report -> {request.xlsx_path}")
    if request.console:
        write_console(entries)
