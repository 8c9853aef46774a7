"""
리포트 출력 (콘솔 / 텍스트 / JSON / CSV)
"""

import csv
import json
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator, Sequence

from report.exception import ReportWriteError, UnknownFormatError
from report.format import ValueFormatter
from report.model import ReportEntry

logger = logging.getLogger(__name__)

SEPARATOR = "=" * 100
STRUCTURED_FORMATS = ("json", "csv", "text")
CSV_BASE_HEADER = ("query_id", "query_title", "category", "status")


@contextmanager
def _open_output(target: str | Path | IO[str] | None) -> Iterator[IO[str]]:
    """경로면 파일을 열고, 스트림이면 그대로, None/빈 값이면 stdout"""
    if target is None or (isinstance(target, (str, Path)) and not str(target).strip()):
        yield sys.stdout
        return
    if not isinstance(target, (str, Path)):
        yield target
        return
    try:
        f = open(target, "w", encoding="utf-8", newline="")
    except OSError as e:
        raise ReportWriteError(f"cannot open {target}: {e}") from e
    with f:
        yield f


def _write_block(entry: ReportEntry, out: IO[str], fmt: ValueFormatter, delimiter: str) -> None:
    """쿼리 1건: 제목 / 설명 / (finding title) / 쿼리 / 결과 행 / 구분선"""
    q = entry.query
    out.write(f"{q.sheet_name}\n{q.description}\n")
    if not q.is_info and q.finding_title.strip():
        out.write(f"finding title: {q.finding_title}\n")
    out.write(f"neo4j query: {fmt.one_line(q.cypher)}\n\n")

    outcome = entry.outcome
    if outcome.skipped:
        out.write(f"SKIPPED: {outcome.skip_reason}\n{SEPARATOR}\n")
        return
    if outcome.error_message is not None:
        out.write(f"ERROR: {outcome.error_message}\n{SEPARATOR}\n")
        return

    keys, _ = entry.keys_and_headers()
    for row in outcome.result_set.rows:
        values = [fmt.value(key, v) for key, v in entry.cells(row, keys)]
        out.write(delimiter.join(values) + "\n")
    out.write(SEPARATOR + "\n")


def write_console(entries: Sequence[ReportEntry], stream: IO[str] | None = None) -> None:
    """사람이 읽는 콘솔 출력 (값 구분자 ', ')"""
    out = stream or sys.stdout
    fmt = ValueFormatter()
    for entry in entries:
        _write_block(entry, out, fmt, ", ")


def write_text(entries: Sequence[ReportEntry], target: str | Path | IO[str] | None) -> None:
    """텍스트 리포트 (값 구분자 ',')"""
    fmt = ValueFormatter()
    with _open_output(target) as out:
        for entry in entries:
            _write_block(entry, out, fmt, ",")


def write_json(entries: Sequence[ReportEntry], target: str | Path | IO[str] | None) -> None:
    """JSON 리포트 (엔트리 리스트)"""
    with _open_output(target) as out:
        json.dump([entry.to_dict() for entry in entries], out, indent=2, default=str, ensure_ascii=False)
        out.write("\n")


def write_csv(entries: Sequence[ReportEntry], target: str | Path | IO[str] | None) -> None:
    """
    평탄화 CSV

    헤더는 query_id, query_title, category, status + 모든 결과 컬럼의 정렬된 합집합.
    결과가 없는 쿼리는 값이 빈 한 줄로 기록한다.
    """
    keys = sorted({column for entry in entries for column in entry.outcome.result_set.columns})
    fmt = ValueFormatter()
    with _open_output(target) as out:
        writer = csv.writer(out, lineterminator="\n")
        writer.writerow([*CSV_BASE_HEADER, *keys])
        for entry in entries:
            q = entry.query
            prefix = [q.id, q.title, q.category, entry.status.value]
            rows = entry.outcome.result_set.rows
            if not rows:
                writer.writerow(prefix + [""] * len(keys))
                continue
            for row in rows:
                writer.writerow(prefix + [fmt.value(key, v) for key, v in entry.cells(row, keys)])


def write_structured(entries: Sequence[ReportEntry], fmt: str, out_path: str | Path | None = None) -> None:
    """
    구조화 출력

    Args:
        entries: 리포트 엔트리 (원래 순서)
        fmt: json | csv | text
        out_path: 출력 경로 (None/빈 값이면 stdout)

    Raises:
        UnknownFormatError: 지원하지 않는 형식
        ReportWriteError: 파일 쓰기 실패
    """
    writers = {"json": write_json, "csv": write_csv, "text": write_text}
    name = (fmt or "").strip().lower()
    if name not in writers:
        raise UnknownFormatError(fmt)
    try:
        writers[name](entries, out_path)
    except OSError as e:
        raise ReportWriteError(f"failed to write {name} report: {e}") from e
    if out_path:
        logger.info(f"Wrote {name} report: {out_path}")
