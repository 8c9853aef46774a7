"""
Worker 관련 예외 클래스 정의
"""


class WorkerError(Exception):
    """Worker 기본 예외"""
    pass


class CancelledJobError(WorkerError):
    """취소 토큰에 의해 중단됨"""
    def __init__(self, reason: str):
        self.reason = reason
        self.message = reason
        super().__init__(self.message)


class JobTimeoutError(CancelledJobError):
    """잡 단위 제한 시간 초과"""
    pass


class RunCancelledError(CancelledJobError):
    """전체 실행 취소 (제한 시간 초과 등)"""
    pass


class AggregationError(WorkerError):
    """결과 병합 실패 (누락/중복 index)"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)
