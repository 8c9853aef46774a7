"""Report 모듈 - 실행 결과 출력"""

from report.core_csv import write_core_csvs
from report.exception import ReportError, ReportWriteError, UnknownFormatError
from report.format import ValueFormatter
from report.model import ReportEntry, build_entries
from report.writers import STRUCTURED_FORMATS, write_console, write_structured, write_text
from report.xlsx import write_xlsx

__all__ = [
    "write_core_csvs",
    "ReportError",
    "ReportWriteError",
    "UnknownFormatError",
    "ValueFormatter",
    "ReportEntry",
    "build_entries",
    "STRUCTURED_FORMATS",
    "write_console",
    "write_structured",
    "write_text",
    "write_xlsx",
]
