"""
설정 로더

config.yaml 로드 및 Settings 생성.
파일이 없으면 기본값 사용 (설정 파일은 선택 사항).
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from core.constants import Defaults, EnvVars, Paths


@dataclass(frozen=True)
class Settings:
    """애플리케이션 설정

    불변 데이터 구조로 설정 변경 방지
    """

    db_path: Path
    currency_symbol: str = Defaults.CURRENCY_SYMBOL
    check_limit: int = Defaults.CHECK_LIMIT
    history_limit: int = Defaults.HISTORY_LIMIT
    log_level: str = Defaults.LOG_LEVEL
    log_dir: Path = Paths.LOGS_DIR

    @property
    def log_level_no(self) -> int:
        """logging 모듈 레벨 값"""
        return logging.getLevelName(self.log_level)


class ConfigLoadError(Exception):
    """설정 로드 실패 예외"""

    pass


def get_config_path(path: Path | str | None = None) -> Path:
    """설정 파일 경로 결정

    우선순위: 인자 > UTANG_CONFIG 환경 변수 > 기본 경로
    """
    if path is not None:
        return Path(path).expanduser()

    env_path = os.environ.get(EnvVars.CONFIG_PATH)
    if env_path:
        return Path(env_path).expanduser()

    return Paths.CONFIG_FILE


def load_settings(path: Path | str | None = None) -> Settings:
    """config.yaml 파일 로드

    Args:
        path: config.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 인스턴스

    Raises:
        ConfigLoadError: 형식이 잘못되었거나 값이 유효하지 않은 경우
    """
    config_path = get_config_path(path)

    data: dict[str, Any] = {}
    if config_path.exists():
        try:
            content = config_path.read_text(encoding="utf-8")
            loaded = yaml.safe_load(content)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigLoadError(f"config.yaml 파싱 실패: {e}") from e

        if loaded is not None:
            if not isinstance(loaded, dict):
                raise ConfigLoadError("config.yaml 최상위는 mapping이어야 합니다")
            data = loaded

    # db_path: 환경 변수가 설정 파일보다 우선
    db_path_value = os.environ.get(EnvVars.DB_PATH) or data.get("db_path")
    db_path = Path(db_path_value).expanduser() if db_path_value else Paths.DB_FILE

    log_dir_value = data.get("log_dir")
    log_dir = Path(log_dir_value).expanduser() if log_dir_value else Paths.LOGS_DIR

    currency_symbol = data.get("currency_symbol", Defaults.CURRENCY_SYMBOL)
    if not isinstance(currency_symbol, str):
        raise ConfigLoadError(
            f"currency_symbol은 문자열이어야 합니다: {currency_symbol!r}"
        )

    # 로그 레벨 검증
    log_level = str(data.get("log_level", Defaults.LOG_LEVEL)).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigLoadError(f"유효하지 않은 log_level입니다: '{log_level}'")

    return Settings(
        db_path=db_path,
        currency_symbol=currency_symbol,
        check_limit=_get_limit(data, "check_limit", Defaults.CHECK_LIMIT),
        history_limit=_get_limit(data, "history_limit", Defaults.HISTORY_LIMIT),
        log_level=log_level,
        log_dir=log_dir,
    )


def _get_limit(data: dict[str, Any], key: str, default: int) -> int:
    """조회 개수 설정값 검증 (0 이상 정수)"""
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigLoadError(
            f"{key}는 0 이상의 정수여야 합니다: {value!r}"
        )
    return value
