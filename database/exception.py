"""
백엔드(데이터베이스) 관련 예외 클래스 정의
"""


class DatabaseError(Exception):
    """데이터베이스 기본 예외"""
    pass


class BackendError(DatabaseError):
    """
    백엔드 쿼리 실행 실패

    classification은 드라이버가 제공하는 오류 분류 (예: Neo4j의
    'TransientError', 'ClientError')이며, 없으면 None.
    """
    def __init__(self, message: str, classification: str | None = None, code: str | None = None):
        self.message = message
        self.classification = classification
        self.code = code
        super().__init__(self.message)


class BackendConnectionError(BackendError):
    """백엔드 연결 실패 (서비스 불가, 세션 만료 등)"""
    pass


class ReadOnlyViolationError(DatabaseError):
    """읽기 전용 실행기에서 쓰기 쿼리 실행 시도"""
    def __init__(self, keyword: str):
        self.keyword = keyword
        self.message = f"Cannot execute write query in readonly runner (keyword: {keyword})"
        super().__init__(self.message)
