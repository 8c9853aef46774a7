"""
설정 로드 테스트

실행: python -m pytest test/config_test.py -v
"""

import logging
import sys
from pathlib import Path

import pytest

# 프로젝트 루트 경로 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from common.config import DEFAULT_CONFIG_PATH, AppConfig, ConfigError, load_config
from common.logging import CustomJsonFormatter, setup_logging


class TestLoadConfig:
    """YAML + 환경 변수"""

    def test_default_file(self):
        """config/houndbatch.yaml 기본값"""
        assert DEFAULT_CONFIG_PATH.exists()
        config = load_config(environ={})

        assert config.neo4j.database == "neo4j"
        assert config.neo4j.to_backend_config().resolved_uri() == "bolt://127.0.0.1:7687"
        assert config.runner.parallelism == 4
        assert config.runner.retry_count == 1
        assert config.runner.per_job_timeout == 30
        assert config.runner.run_timeout == 60
        assert config.logging.level == "WARNING"

    def test_password_from_environment(self):
        config = load_config(environ={"NEO4J_PASS": "s3cret"})
        assert config.neo4j.password == "s3cret"

    def test_yaml_overrides_defaults(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(
            "neo4j:\n  uri: neo4j+s://graph.example:7687\n  database: bloodhound\n"
            "runner:\n  parallelism: 8\n  run_timeout: 0\n",
            encoding="utf-8",
        )
        config = load_config(path, environ={})

        assert config.neo4j.to_backend_config().resolved_uri() == "neo4j+s://graph.example:7687"
        assert config.runner.parallelism == 8
        # 설정 파일에 없는 값은 기본값
        assert config.runner.retry_count == 1

        options = config.runner.to_options(config.neo4j.database)
        assert options.database == "bloodhound"
        assert options.run_timeout is None
        assert options.per_job_timeout == 30

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "missing.yaml", environ={})

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("neo4j:\n  port: 99999\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path, environ={})

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path, environ={})


class TestOverrides:
    """CLI 값 덮어쓰기"""

    def test_none_values_ignored(self):
        config = AppConfig()
        assert config.with_overrides("runner", parallelism=None) is config

    def test_override_section(self):
        config = AppConfig().with_overrides("runner", parallelism=0, retry_count=3)

        assert config.runner.retry_count == 3
        # 1 미만 병렬도는 실행 옵션에서 1로 보정
        assert config.runner.to_options("neo4j").parallelism == 1

    def test_invalid_override(self):
        with pytest.raises(ConfigError):
            AppConfig().with_overrides("neo4j", port=0)


class TestLogging:
    """로깅 설정"""

    def test_setup_text_logging(self, tmp_path):
        log_file = tmp_path / "run.log"
        setup_logging("debug", json_format=False, log_file=str(log_file))

        logging.getLogger("houndbatch.test").debug("hello log")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "hello log" in log_file.read_text(encoding="utf-8")
        assert logging.getLogger("neo4j").level == logging.WARNING

    def test_setup_json_logging(self):
        setup_logging("INFO", json_format=True)
        assert isinstance(logging.getLogger().handlers[0].formatter, CustomJsonFormatter)

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            setup_logging("LOUD")
