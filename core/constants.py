"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 사용자 홈 디렉토리 (DB, 로그, 설정 파일의 기준 위치)
HOME_DIR: Path = Path.home()


class Defaults:
    """기본값 상수"""

    APP_NAME: str = "utang"

    CURRENCY_SYMBOL: str = "Rp"
    CHECK_LIMIT: int = 5  # check <name> 시 최근 거래 수
    HISTORY_LIMIT: int = 5  # check (이름 없음) 시 전체 최근 거래 수

    DESCRIPTION: str = "not provided"  # 설명 미입력 시 CLI 기본값

    LOG_LEVEL: str = "INFO"
    BUSY_TIMEOUT_MS: int = 30000


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    DATA_DIR: Path = HOME_DIR / ".local" / "share" / "utang"
    CONFIG_DIR: Path = HOME_DIR / ".config" / "utang"
    LOGS_DIR: Path = DATA_DIR / "logs"

    # 설정 파일
    CONFIG_FILE: Path = CONFIG_DIR / "config.yaml"

    # DB 파일
    DB_FILE: Path = DATA_DIR / "utang.db"


class EnvVars:
    """환경 변수 이름"""

    CONFIG_PATH: str = "UTANG_CONFIG"
    DB_PATH: str = "UTANG_DB_PATH"
