"""핵심 인벤토리 CSV (사용자 / 컴퓨터 / Domain Admins / DC)"""

import csv
import logging
from pathlib import Path
from typing import Sequence

from report.exception import ReportWriteError
from report.format import ValueFormatter
from report.model import ReportEntry

logger = logging.getLogger(__name__)

CORE_EXPORTS: tuple[tuple[str, str], ...] = (
    ("ad-all-users-samaccountname", "users.csv"),
    ("ad-all-computers-fqdn", "computers.csv"),
    ("ad-domain-admins", "domain_admins.csv"),
    ("ad-domain-controllers", "domain_controllers.csv"),
)


def _write_single(path: Path, entry: ReportEntry, fmt: ValueFormatter) -> None:
    keys, headers = entry.keys_and_headers()
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerow(headers)
        outcome = entry.outcome
        if outcome.skipped:
            writer.writerow(["SKIPPED", outcome.skip_reason])
            return
        if outcome.error_message is not None:
            writer.writerow(["ERROR", outcome.error_message])
            return
        for row in outcome.result_set.rows:
            writer.writerow([fmt.value(key, v) for key, v in entry.cells(row, keys)])


def write_core_csvs(out_dir: str | Path | None, entries: Sequence[ReportEntry]) -> list[Path]:
    """
    핵심 쿼리 결과를 개별 CSV로 저장 (해당 쿼리가 실행된 경우만)

    Returns:
        생성된 파일 경로 목록

    Raises:
        ReportWriteError: 디렉토리 생성 / 파일 쓰기 실패
    """
    if out_dir is None or not str(out_dir).strip():
        return []
    directory = Path(out_dir)
    by_id = {entry.query.id: entry for entry in entries}
    fmt = ValueFormatter()
    written: list[Path] = []
    try:
        directory.mkdir(parents=True, exist_ok=True)
        for query_id, file_name in CORE_EXPORTS:
            entry = by_id.get(query_id)
            if entry is None:
                continue
            path = directory / file_name
            _write_single(path, entry, fmt)
            written.append(path)
    except OSError as e:
        raise ReportWriteError(f"failed to write core csv in {directory}: {e}") from e

    logger.info(f"Wrote {len(written)} core csv file(s) to {directory}")
    return written
