"""Worker 모듈 - 배치 쿼리 실행 (워커풀, 재시도, 취소, 결과 병합)"""
