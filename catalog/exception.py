"""
카탈로그 관련 예외 클래스 정의
"""


class CatalogError(Exception):
    """카탈로그 기본 예외"""
    pass


class CatalogLoadError(CatalogError):
    """카탈로그 파일 로드 실패"""
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        self.message = f"Failed to load query catalog {path}: {reason}"
        super().__init__(self.message)


class InvalidCategoryError(CatalogError):
    """알 수 없는 카테고리"""
    def __init__(self, category: str):
        self.category = category
        self.message = f"invalid --category {category!r} (expected: all|AD|EntraID|INFO)"
        super().__init__(self.message)


class QueryNotFoundError(CatalogError):
    """쿼리 ID를 찾을 수 없음"""
    def __init__(self, query_id: str):
        self.query_id = query_id
        self.message = f"unknown query id: {query_id}"
        super().__init__(self.message)
