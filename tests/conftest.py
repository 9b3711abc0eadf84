"""
pytest 공통 fixture 정의

임시 DB, Ledger 서비스/조회 객체, 설정 파일 fixture
"""

import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import EnvVars
from core.ledger import LedgerQuery, LedgerService, LedgerStore, initialize


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """사용자 환경 변수가 테스트에 영향 주지 않도록 제거"""
    monkeypatch.delenv(EnvVars.CONFIG_PATH, raising=False)
    monkeypatch.delenv(EnvVars.DB_PATH, raising=False)


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def db_path(temp_dir: Path) -> Path:
    """테스트용 DB 경로 (하위 디렉토리는 아직 없음)"""
    return temp_dir / "data" / "utang.db"


@pytest_asyncio.fixture
async def db(db_path: Path) -> SQLiteAdapter:
    """스키마 초기화된 테스트용 DB"""
    adapter = await initialize(db_path)
    yield adapter
    await adapter.close()


@pytest.fixture
def store(db: SQLiteAdapter) -> LedgerStore:
    """LedgerStore 인스턴스"""
    return LedgerStore(db)


@pytest.fixture
def service(db: SQLiteAdapter) -> LedgerService:
    """LedgerService 인스턴스"""
    return LedgerService(db)


@pytest.fixture
def query(db: SQLiteAdapter) -> LedgerQuery:
    """LedgerQuery 인스턴스"""
    return LedgerQuery(db)


@pytest.fixture
def temp_config_file(temp_dir: Path) -> Path:
    """테스트용 config.yaml 파일 생성"""
    config_content = f"""# 테스트용 config.yaml
db_path: "{(temp_dir / 'custom' / 'ledger.db').as_posix()}"
currency_symbol: "IDR "
check_limit: 3
history_limit: 10
log_level: debug
log_dir: "{(temp_dir / 'logs').as_posix()}"
"""
    config_path = temp_dir / "config.yaml"
    config_path.write_text(config_content, encoding="utf-8")
    return config_path
