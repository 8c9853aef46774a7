"""
리포트 출력 테스트

테스트 항목:
1. ValueFormatter (None, epoch 변환, 리스트)
2. 콘솔 / 텍스트 블록
3. 구조화 출력 (JSON / CSV / 지원하지 않는 형식)
4. XLSX (Summary 시트, 시트 이름, skip_empty)
5. 핵심 CSV

실행: python -m pytest test/report_test.py -v
"""

import csv
import io
import json
import sys
from pathlib import Path

import pytest
from openpyxl import load_workbook

# 프로젝트 루트 경로 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from catalog.model import Query
from database import ResultSet
from report import (
    ReportError,
    UnknownFormatError,
    ValueFormatter,
    build_entries,
    write_console,
    write_core_csvs,
    write_structured,
    write_text,
    write_xlsx,
)
from report.xlsx import safe_sheet_name
from worker.model import ErrorKind, JobOutcome


def make_query(query_id: str, sheet_name: str, headers=(), category: str = "AD", finding_title: str = "") -> Query:
    return Query(
        id=query_id,
        title=f"Title {query_id}",
        category=category,
        sheet_name=sheet_name,
        headers=headers,
        description=f"Description of {query_id}",
        finding_title=finding_title,
        cypher="MATCH (u:User)\nRETURN u.name AS user,\n  u.pwdlastset AS pwdlastset",
    )


@pytest.fixture
def entries():
    queries = [
        make_query("q-ok", "Old Passwords", ("User", "Password Set"), finding_title="Stale passwords"),
        make_query("q-empty", "Nothing Here", ("User",)),
        make_query("q-skip", "Entra Users", ("User",), category="EntraID"),
        make_query("q-error", "Broken", ("User",)),
    ]
    outcomes = [
        JobOutcome(
            index=0,
            result_set=ResultSet(columns=("user", "pwdlastset"), rows=(("alice", 0), ("bob", None))),
            attempts=1,
        ),
        JobOutcome(index=1, result_set=ResultSet(columns=("user",)), attempts=1),
        JobOutcome.skip(2, "missing label: AZUser"),
        JobOutcome(index=3, error_message="Invalid input", error_kind=ErrorKind.PERMANENT, attempts=1),
    ]
    return build_entries(queries, outcomes)


# ============================================================
# ValueFormatter Tests
# ============================================================

class TestValueFormatter:
    """셀 값 변환"""

    def test_none_is_empty(self):
        assert ValueFormatter().value("user", None) == ""

    def test_epoch_columns(self):
        fmt = ValueFormatter()
        assert fmt.value("pwdlastset", 0) == "1970-01-01T00:00:00Z"
        assert fmt.value("lastlogontimestamp", 86400.7) == "1970-01-02T00:00:00Z"
        assert fmt.value("pwdlastset", "never") == "never"
        # 다른 컬럼의 숫자는 그대로
        assert fmt.value("count", 0) == "0"

    def test_lists_and_bools(self):
        fmt = ValueFormatter()
        assert fmt.value("type", ["Base", "User"]) == "[Base User]"
        assert fmt.value("enabled", True) == "true"

    def test_one_line(self):
        assert ValueFormatter.one_line("MATCH (u)\r\n  RETURN   u") == "MATCH (u) RETURN u"


# ============================================================
# Console / Text Tests
# ============================================================

class TestTextOutput:
    """콘솔 / 텍스트"""

    def test_console_blocks(self, entries):
        out = io.StringIO()
        write_console(entries, out)
        text = out.getvalue()

        assert text.count("=" * 100) == 4
        assert "finding title: Stale passwords" in text
        assert "neo4j query: MATCH (u:User) RETURN u.name AS user, u.pwdlastset AS pwdlastset" in text
        assert "alice, 1970-01-01T00:00:00Z\n" in text
        assert "bob, \n" in text
        assert "SKIPPED: missing label: AZUser" in text
        assert "ERROR: Invalid input" in text

    def test_text_file_uses_comma(self, entries, tmp_path):
        path = tmp_path / "report.txt"
        write_text(entries, path)
        text = path.read_text(encoding="utf-8")

        assert text.startswith("Old Passwords\nDescription of q-ok\n")
        assert "alice,1970-01-01T00:00:00Z\n" in text


# ============================================================
# Structured Output Tests
# ============================================================

class TestStructuredOutput:
    """JSON / CSV"""

    def test_json(self, entries, tmp_path):
        path = tmp_path / "out.json"
        write_structured(entries, "json", path)
        data = json.loads(path.read_text(encoding="utf-8"))

        assert [item["query"]["id"] for item in data] == ["q-ok", "q-empty", "q-skip", "q-error"]
        assert data[0]["result"] == {"columns": ["user", "pwdlastset"], "rows": [["alice", 0], ["bob", None]]}
        assert "error" not in data[0]
        assert data[2]["skipped"] is True
        assert data[2]["skipWhy"] == "missing label: AZUser"
        assert data[3]["error"] == "Invalid input"
        assert data[3]["errorKind"] == "permanent"

    def test_csv(self, entries, tmp_path):
        path = tmp_path / "out.csv"
        write_structured(entries, "CSV", path)
        with open(path, encoding="utf-8", newline="") as f:
            rows = list(csv.reader(f))

        assert rows[0] == ["query_id", "query_title", "category", "status", "pwdlastset", "user"]
        assert rows[1] == ["q-ok", "Title q-ok", "AD", "ok", "1970-01-01T00:00:00Z", "alice"]
        assert rows[2] == ["q-ok", "Title q-ok", "AD", "ok", "", "bob"]
        # 결과가 없으면 빈 값 한 줄
        assert rows[3] == ["q-empty", "Title q-empty", "AD", "empty", "", ""]
        assert rows[4][3] == "skipped"
        assert rows[5][3] == "error"
        assert len(rows) == 6

    def test_unknown_format(self, entries, tmp_path):
        with pytest.raises(UnknownFormatError) as exc_info:
            write_structured(entries, "yaml", tmp_path / "out.yaml")
        assert isinstance(exc_info.value, ReportError)

    def test_length_mismatch(self, entries):
        with pytest.raises(ValueError):
            build_entries([entries[0].query], [])


# ============================================================
# XLSX Tests
# ============================================================

class TestXlsx:
    """XLSX 워크북"""

    def test_safe_sheet_name(self):
        assert safe_sheet_name("A/B: [test]?*") == "A-B- (test)"
        assert len(safe_sheet_name("x" * 50)) == 31
        assert safe_sheet_name("   ") == "Sheet"

    def test_workbook_layout(self, entries, tmp_path):
        path = tmp_path / "report.xlsx"
        write_xlsx(entries, path)
        wb = load_workbook(path)

        assert wb.sheetnames == ["Summary", "Old Passwords", "Nothing Here", "Entra Users", "Broken"]

        summary = wb["Summary"]
        assert summary.freeze_panes == "A2"
        assert [c.value for c in summary[1]] == ["order", "category", "sheet", "id", "status", "rows", "cypher"]
        assert [summary.cell(row=r, column=5).value for r in range(2, 6)] == ["ok", "empty", "skipped", "error"]
        assert summary.cell(row=2, column=6).value == 2
        assert summary.cell(row=7, column=1).value == "totals"
        assert summary.cell(row=7, column=6).value == "total=4"

        sheet = wb["Old Passwords"]
        assert sheet["A1"].value == "Description of q-ok"
        assert sheet["A2"].value == "finding title:"
        assert sheet["A3"].value == "neo4j query:"
        assert [c.value for c in sheet[5]] == ["User", "Password Set"]
        assert [c.value for c in sheet[6]] == ["alice", "1970-01-01T00:00:00Z"]
        assert sheet.column_dimensions["A"].width == 10
        assert sheet.column_dimensions["B"].width == 20

        skipped = wb["Entra Users"]
        assert skipped["A4"].value == "User"
        assert skipped["A5"].value == "SKIPPED"
        assert skipped["B5"].value == "missing label: AZUser"

    def test_skip_empty_and_duplicate_names(self, entries, tmp_path):
        """skip_empty: 결과 있는 시트만, 같은 이름은 접미사"""
        duplicate = build_entries([entries[0].query], [entries[0].outcome])[0]
        path = tmp_path / "report.xlsx"
        write_xlsx([*entries, duplicate], path, skip_empty=True)
        wb = load_workbook(path)

        assert wb.sheetnames == ["Summary", "Old Passwords", "Old Passwords (2)"]

    def test_nothing_to_write(self, entries, tmp_path):
        path = tmp_path / "report.xlsx"
        write_xlsx(entries[1:], path, skip_empty=True)
        wb = load_workbook(path)

        assert wb.sheetnames == ["Summary", "Report"]
        assert wb["Report"]["A1"].value == "No sheets were produced (all empty/skipped/error)."


# ============================================================
# Core CSV Tests
# ============================================================

class TestCoreCsv:
    """핵심 인벤토리 CSV"""

    def test_writes_only_present_queries(self, tmp_path):
        queries = [
            make_query("ad-all-users-samaccountname", "All Users", ("samaccountname",)),
            make_query("ad-domain-controllers", "Domain Controllers", ("Hostname", "Operating System")),
        ]
        outcomes = [
            JobOutcome(index=0, result_set=ResultSet(columns=("samaccountname",), rows=(("alice",), ("bob",)))),
            JobOutcome.skip(1, "missing relationship type: MemberOf"),
        ]
        written = write_core_csvs(tmp_path / "core", build_entries(queries, outcomes))

        assert [p.name for p in written] == ["users.csv", "domain_controllers.csv"]
        assert (tmp_path / "core" / "users.csv").read_text(encoding="utf-8") == "samaccountname\nalice\nbob\n"
        assert (tmp_path / "core" / "domain_controllers.csv").read_text(encoding="utf-8") == (
            "Hostname,Operating System\nSKIPPED,missing relationship type: MemberOf\n"
        )

    def test_no_directory_is_noop(self, entries):
        assert write_core_csvs("", entries) == []
