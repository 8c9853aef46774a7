"""Common 모듈 - 로깅 / 설정"""
