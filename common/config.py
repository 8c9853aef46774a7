"""
설정 로드

config/houndbatch.yaml (neo4j / runner / logging 섹션)을 읽어 pydantic 모델로 검증합니다.
우선순위: 기본값 < YAML < NEO4J_PASS 환경 변수 < CLI 인자
"""

import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field, ValidationError

from database.neo4j import Neo4jConfig
from worker.model import ExecutionOptions

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "houndbatch.yaml"
PASSWORD_ENV = "NEO4J_PASS"


class ConfigError(Exception):
    """설정 파일 / 값 오류"""
    pass


class Neo4jSettings(BaseModel):
    """Neo4j 접속 설정"""
    uri: str = Field(default="", description="지정 시 host/port 무시")
    host: str = "127.0.0.1"
    port: int = Field(default=7687, ge=1, le=65535)
    username: str = "neo4j"
    password: str = ""
    database: str = "neo4j"
    connection_timeout: float = Field(default=10.0, gt=0)
    max_connection_pool_size: int = Field(default=50, ge=1)

    def to_backend_config(self) -> Neo4jConfig:
        return Neo4jConfig(**self.model_dump())


class RunnerSettings(BaseModel):
    """배치 실행 설정"""
    parallelism: int = Field(default=4, le=64, description="1 미만은 1로 처리")
    retry_count: int = Field(default=1, le=10, description="0 미만은 0으로 처리")
    backoff_base: float = Field(default=0.2, ge=0, le=10)
    row_limit: int = Field(default=0, ge=0)
    per_job_timeout: float = Field(default=30, ge=0, description="0 = 제한 없음")
    run_timeout: float = Field(default=60, ge=0, description="0 = 제한 없음")
    fail_fast: bool = False
    admission: bool = True

    def to_options(self, database: str) -> ExecutionOptions:
        return ExecutionOptions(
            database=database,
            row_limit=self.row_limit,
            parallelism=self.parallelism,
            per_job_timeout=self.per_job_timeout,
            retry_count=self.retry_count,
            fail_fast=self.fail_fast,
            run_timeout=self.run_timeout,
            backoff_base=self.backoff_base,
        )


class LoggingSettings(BaseModel):
    """로깅 설정"""
    level: str = "WARNING"
    json_format: bool = False
    file: str | None = None


class AppConfig(BaseModel):
    """전체 설정"""
    neo4j: Neo4jSettings = Field(default_factory=Neo4jSettings)
    runner: RunnerSettings = Field(default_factory=RunnerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def with_overrides(self, section: str, **values: Any) -> "AppConfig":
        """
        섹션 값 덮어쓰기 (None 값은 무시)

        Raises:
            ConfigError: 검증 실패
        """
        current = getattr(self, section)
        updates = {k: v for k, v in values.items() if v is not None}
        if not updates:
            return self
        try:
            merged = type(current)(**{**current.model_dump(), **updates})
        except ValidationError as e:
            raise ConfigError(f"invalid {section} setting: {e}") from e
        return self.model_copy(update={section: merged})


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """
    설정 로드

    Args:
        path: YAML 경로 (None이면 기본 경로, 파일이 없으면 기본값 사용)
        environ: 환경 변수 (None이면 os.environ)

    Raises:
        ConfigError: 파일 읽기 / YAML / 검증 오류
    """
    environ = os.environ if environ is None else environ
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"cannot read config {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"cannot read config {config_path}: top-level mapping expected")
        logger.debug(f"Loaded config: {config_path}")
    elif path:
        raise ConfigError(f"config file not found: {config_path}")

    try:
        config = AppConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"invalid config {config_path}: {e}") from e

    password = environ.get(PASSWORD_ENV)
    if password:
        config = config.with_overrides("neo4j", password=password)
    return config
