"""
XLSX 워크북 리포트

엔트리마다 시트 하나, 맨 앞에 Summary 시트를 둔다.
"""

import logging
from pathlib import Path
from typing import Sequence

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from report.exception import ReportWriteError
from report.format import ValueFormatter
from report.model import ReportEntry
from worker.aggregate import summarize
from worker.model import OutcomeStatus

logger = logging.getLogger(__name__)

SUMMARY_SHEET = "Summary"
SUMMARY_HEADERS = ("order", "category", "sheet", "id", "status", "rows", "cypher")
SUMMARY_WIDTHS = {"A": 8, "B": 10, "C": 30, "D": 30, "E": 10, "F": 10, "G": 80}

MAX_SHEET_NAME = 31
MIN_COLUMN_WIDTH = 10
MAX_COLUMN_WIDTH = 60
WIDTH_SAMPLE_ROWS = 300

_SHEET_NAME_REPLACEMENTS = {":": "-", "\\": "-", "/": "-", "?": "", "*": "", "[": "(", "]": ")"}


def safe_sheet_name(name: str) -> str:
    """엑셀 시트 이름 규칙에 맞게 변환 (금지 문자 치환, 31자 제한)"""
    name = name.strip() or "Sheet"
    for old, new in _SHEET_NAME_REPLACEMENTS.items():
        name = name.replace(old, new)
    return name[:MAX_SHEET_NAME] or "Sheet"


def _unique_sheet_name(name: str, used: set[str]) -> str:
    """대소문자 무시 중복 시 ' (2)' 형태 접미사"""
    candidate = name
    n = 2
    while candidate.lower() in used:
        suffix = f" ({n})"
        candidate = name[:MAX_SHEET_NAME - len(suffix)] + suffix
        n += 1
    used.add(candidate.lower())
    return candidate


def display_width(text: str) -> int:
    """대략적인 표시 폭 (제어 문자 제외, 200자에서 중단)"""
    width = 0
    for ch in text:
        if ch in "\r\n\t":
            continue
        width += 1
        if width > 200:
            break
    return width


def _apply_column_widths(ws: Worksheet, widths: Sequence[int]) -> None:
    for i, width in enumerate(widths, start=1):
        if width <= 0:
            continue
        ws.column_dimensions[get_column_letter(i)].width = max(MIN_COLUMN_WIDTH, min(MAX_COLUMN_WIDTH, width))


def _write_entry_sheet(ws: Worksheet, entry: ReportEntry, fmt: ValueFormatter) -> None:
    q = entry.query
    ws.append([q.description])
    if not q.is_info and q.finding_title.strip():
        ws.append(["finding title:", q.finding_title])
    ws.append(["neo4j query:", q.cypher])
    ws.append([])

    keys, headers = entry.keys_and_headers()
    ws.append(list(headers))
    widths = [display_width(h) for h in headers]

    outcome = entry.outcome
    if outcome.skipped:
        ws.append(["SKIPPED", outcome.skip_reason])
        return
    if outcome.error_message is not None:
        ws.append(["ERROR", outcome.error_message])
        return

    for n, row in enumerate(outcome.result_set.rows):
        values = [fmt.value(key, v) for key, v in entry.cells(row, keys)]
        ws.append(values)
        if n < WIDTH_SAMPLE_ROWS:
            for i, value in enumerate(values):
                widths[i] = max(widths[i], display_width(value))
    _apply_column_widths(ws, widths)


def _write_summary_sheet(ws: Worksheet, entries: Sequence[ReportEntry], fmt: ValueFormatter) -> None:
    """쿼리별 상태 / 행 수 + 합계, 헤더 행 고정"""
    ws.append(list(SUMMARY_HEADERS))
    for order, entry in enumerate(entries, start=1):
        q = entry.query
        ws.append([
            order,
            q.category,
            q.sheet_name,
            q.id,
            entry.status.value,
            entry.outcome.result_set.row_count,
            fmt.one_line(q.cypher),
        ])

    summary = summarize([entry.outcome for entry in entries])
    ws.append([])
    ws.append([
        "totals",
        f"ok={summary.ok}",
        f"empty={summary.empty}",
        f"skipped={summary.skipped}",
        f"error={summary.error}",
        f"total={summary.total}",
    ])

    for column, width in SUMMARY_WIDTHS.items():
        ws.column_dimensions[column].width = width
    ws.freeze_panes = "A2"

    if any(not entry.query.sheet_name.strip() for entry in entries):
        ws["A1"] = "warning: some queries have empty sheet names"


def write_xlsx(entries: Sequence[ReportEntry], path: str | Path, skip_empty: bool = False) -> None:
    """
    XLSX 워크북 저장

    Args:
        entries: 리포트 엔트리 (원래 순서)
        path: 저장 경로
        skip_empty: 결과 없음 / 스킵 / 오류 시트 생략 (Summary 에는 모두 기록)

    Raises:
        ReportWriteError: 저장 실패
    """
    fmt = ValueFormatter()
    wb = Workbook()
    summary_ws = wb.active
    summary_ws.title = SUMMARY_SHEET
    _write_summary_sheet(summary_ws, entries, fmt)

    used = {SUMMARY_SHEET.lower()}
    written = 0
    for entry in entries:
        if skip_empty and entry.status is not OutcomeStatus.OK:
            continue
        ws = wb.create_sheet(_unique_sheet_name(safe_sheet_name(entry.query.sheet_name), used))
        _write_entry_sheet(ws, entry, fmt)
        written += 1

    if written == 0:
        wb.create_sheet("Report")["A1"] = "No sheets were produced (all empty/skipped/error)."

    try:
        wb.save(path)
    except OSError as e:
        raise ReportWriteError(f"failed to write xlsx report {path}: {e}") from e
    logger.info(f"Wrote xlsx report: {path} ({written} sheets)")
