"""houndbatch CLI"""

import argparse
import asyncio
import sys
from typing import NoReturn, Sequence

from catalog import HOST_DISPLAY_MODES, USER_DISPLAY_MODES, CatalogError
from common.config import AppConfig, ConfigError, load_config
from common.logging import LOG_LEVELS, setup_logging
from database import BackendError
from houndbatch import __version__
from houndbatch.app import RunRequest, run
from houndbatch.exception import UsageError
from report import STRUCTURED_FORMATS, ReportError

USAGE_EXIT_CODE = 2
HINT = "hint: run with -h for usage/examples"

DESCRIPTION = "houndbatch - BloodHound/Neo4j defensive query runner (AD + EntraID)"
EPILOG = """\
examples:
  houndbatch -p secret -x report.xlsx
  houndbatch --neo4j-uri bolt://10.0.0.5:7687 --entra -i --format json --out results.json
  houndbatch --list --category AD
"""


def fail(message: str) -> NoReturn:
    """error / hint 출력 후 종료 코드 2"""
    print(f"error: {message}", file=sys.stderr)
    print(HINT, file=sys.stderr)
    sys.exit(USAGE_EXIT_CODE)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        fail(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="houndbatch",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # 설정 파일 값을 덮어쓰는 인자는 default=None
    conn = parser.add_argument_group("connection")
    conn.add_argument("--neo4j-ip", dest="host", default=None, help="Neo4j host (used if --neo4j-uri not set, default 127.0.0.1)")
    conn.add_argument("--neo4j-uri", dest="uri", default=None, help="Neo4j URI (e.g. bolt://10.0.0.5:7687), overrides --neo4j-ip")
    conn.add_argument("--db", dest="database", default=None, help="Neo4j database name (default neo4j)")
    conn.add_argument("-u", "--username", default=None, help="Neo4j username (default neo4j)")
    conn.add_argument("-p", "--password", default=None, help="Neo4j password (or set NEO4J_PASS)")

    select = parser.add_argument_group("query selection")
    select.add_argument("--list", action="store_true", help="list available queries")
    select.add_argument("--schema", action="store_true", help="print labels / relationship types")
    select.add_argument("--id", dest="query_id", default="", help="run a single query by id")
    select.add_argument("--category", default="all", help="all|AD|EntraID|INFO (default all)")
    select.add_argument("-i", "--info", action="store_true", help="include informational/inventory queries")
    select.add_argument("--entra", action="store_true", help="include EntraID queries (best-effort, schema varies)")

    display = parser.add_argument_group("display")
    display.add_argument("--user-display", choices=USER_DISPLAY_MODES, default="samaccountname", help="user column in the all-users tab")
    display.add_argument("--host-display", choices=HOST_DISPLAY_MODES, default="fqdn", help="computer naming in computer tabs")

    output = parser.add_argument_group("output (default is console output)")
    output.add_argument("-t", "--text", dest="text_path", default="", help="write a text report")
    output.add_argument("-x", "--xlsx", dest="xlsx_path", default="", help="write an XLSX report")
    output.add_argument("-v", "--verbose", action="store_true", help="print to console")
    output.add_argument("--format", dest="structured_format", default="", help="structured output: json|csv|text")
    output.add_argument("--out", dest="out_path", default="", help="structured output file (default stdout)")
    output.add_argument("--core-csv-dir", default="", help="write users/computers/domain admins/domain controllers CSVs")
    output.add_argument("--skip-empty", action="store_true", help="do not create empty/skipped/error sheets")

    robust = parser.add_argument_group("performance/robustness")
    robust.add_argument("--limit", dest="row_limit", type=int, default=None, help="rows per query (0 = unlimited)")
    robust.add_argument("--timeout", dest="run_timeout", type=float, default=None, help="overall run timeout seconds (default 60, 0 = none)")
    robust.add_argument("--query-timeout", dest="per_job_timeout", type=float, default=None, help="per-query timeout seconds (default 30, 0 = none)")
    robust.add_argument("--parallel", dest="parallelism", type=int, default=None, help="parallel query workers (default 4)")
    robust.add_argument("--retries", dest="retry_count", type=int, default=None, help="transient error retries (default 1)")
    robust.add_argument("--fail-fast", action="store_true", default=None, help="stop dispatching after the first query error")
    robust.add_argument("--no-admission", dest="admission", action="store_false", default=None, help="run every query without the schema check")

    ambient = parser.add_argument_group("config/logging")
    ambient.add_argument("--config", default=None, help="config YAML (default config/houndbatch.yaml)")
    ambient.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default=None, help="log level (default WARNING)")
    ambient.add_argument("--log-json", dest="json_format", action="store_true", default=None, help="JSON log lines")
    ambient.add_argument("--log-file", dest="log_file", default=None, help="also write logs to this file")
    ambient.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def validate_args(args: argparse.Namespace) -> None:
    """
    인자 조합 검사

    Raises:
        UsageError: 잘못된 조합
    """
    fmt = args.structured_format.strip().lower()
    if fmt and fmt not in STRUCTURED_FORMATS:
        raise UsageError(f"unknown --format: {args.structured_format} (expected: {'|'.join(STRUCTURED_FORMATS)})")
    if args.out_path and not fmt:
        raise UsageError("--out requires --format")
    if args.list and args.schema:
        raise UsageError("--list and --schema are mutually exclusive")


def apply_args(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """CLI 인자로 설정 덮어쓰기 (지정한 값만)"""
    config = config.with_overrides(
        "neo4j",
        host=args.host,
        uri=args.uri,
        database=args.database,
        username=args.username,
        password=args.password,
    )
    config = config.with_overrides(
        "runner",
        row_limit=args.row_limit,
        run_timeout=args.run_timeout,
        per_job_timeout=args.per_job_timeout,
        parallelism=args.parallelism,
        retry_count=args.retry_count,
        fail_fast=args.fail_fast,
        admission=args.admission,
    )
    return config.with_overrides(
        "logging",
        level=args.log_level,
        json_format=args.json_format,
        file=args.log_file,
    )


def to_request(args: argparse.Namespace) -> RunRequest:
    return RunRequest(
        query_id=args.query_id.strip(),
        category=args.category,
        include_info=args.info,
        include_entra=args.entra,
        list_only=args.list,
        schema_only=args.schema,
        user_display=args.user_display,
        host_display=args.host_display,
        text_path=args.text_path,
        xlsx_path=args.xlsx_path,
        verbose=args.verbose,
        structured_format=args.structured_format.strip().lower(),
        out_path=args.out_path,
        core_csv_dir=args.core_csv_dir,
        skip_empty=args.skip_empty,
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        validate_args(args)
        config = apply_args(load_config(args.config), args)
        setup_logging(config.logging.level, config.logging.json_format, config.logging.file)
    except (UsageError, ConfigError, ValueError) as e:
        fail(str(e))
    except OSError as e:
        fail(f"cannot open log file: {e}")

    try:
        asyncio.run(run(config, to_request(args)))
    except (UsageError, CatalogError) as e:
        fail(str(e))
    except BackendError as e:
        fail(f"neo4j error: {e}")
    except ReportError as e:
        fail(f"write report failed: {e}")
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
