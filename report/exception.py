"""
리포트 관련 예외 클래스 정의
"""


class ReportError(Exception):
    """리포트 기본 예외"""
    pass


class UnknownFormatError(ReportError):
    """지원하지 않는 구조화 출력 형식"""
    def __init__(self, format_name: str):
        self.format_name = format_name
        self.message = f"unknown structured format: {format_name} (expected: json|csv|text)"
        super().__init__(self.message)


class ReportWriteError(ReportError):
    """리포트 파일 쓰기 실패"""
    pass
