"""
CLI 관련 예외 클래스 정의
"""


class UsageError(Exception):
    """잘못된 인자 조합 / 필수 값 누락 (종료 코드 2)"""
    pass
