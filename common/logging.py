"""
JSON 구조화 로깅 설정

리포트는 stdout 으로 출력하므로 로그는 stderr (및 선택적 파일)로 보냅니다.
"""

import logging
import sys

from pythonjsonlogger import jsonlogger

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON 로그 포매터"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = self.formatTime(record)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name

        # message 필드 정리
        if 'message' not in log_record and record.getMessage():
            log_record['message'] = record.getMessage()


def build_formatter(json_format: bool) -> logging.Formatter:
    """핸들러 포매터 생성"""
    if json_format:
        return CustomJsonFormatter('%(timestamp)s %(level)s %(name)s %(message)s')
    return logging.Formatter(TEXT_FORMAT)


def setup_logging(
    level: str = "WARNING",
    json_format: bool = False,
    log_file: str | None = None
) -> None:
    """
    로깅 설정

    Args:
        level: 로그 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: JSON 포맷 사용 여부 (False면 기본 텍스트 포맷)
        log_file: 로그 파일 경로 (None이면 stderr만 사용)

    Raises:
        ValueError: 알 수 없는 로그 레벨
    """
    level_name = level.upper()
    if level_name not in LOG_LEVELS:
        raise ValueError(f"unknown log level: {level} (expected: {'|'.join(LOG_LEVELS)})")

    formatter = build_formatter(json_format)
    handlers = []

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    handlers.append(stream_handler)

    # 파일 핸들러 (옵션)
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    # 루트 로거 설정
    logging.basicConfig(
        level=getattr(logging, level_name),
        handlers=handlers,
        force=True  # 기존 설정 덮어쓰기
    )

    # 외부 라이브러리 로그 레벨 조정
    logging.getLogger('asyncio').setLevel(logging.WARNING)
    logging.getLogger('neo4j').setLevel(logging.WARNING)
