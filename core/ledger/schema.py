"""
Ledger 스키마 초기화 / 마이그레이션

CLI 시작 시 DB를 열고 필요한 마이그레이션을 순서대로 적용.
스키마 버전은 PRAGMA user_version으로 관리 (파일 존재 여부로 추론하지 않음).

버전 이력:
- v1: users, transactions 테이블
- v2: transactions 조회용 인덱스
"""

import logging
from pathlib import Path
from typing import Awaitable, Callable

from adapters.db.sqlite_adapter import SQLiteAdapter, get_db_path
from core.errors import StorageUnavailable

logger = logging.getLogger(__name__)


async def initialize(db_path: Path | str | None = None) -> SQLiteAdapter:
    """Ledger DB 열기 + 마이그레이션 적용

    디렉토리/파일/테이블이 없으면 생성. 여러 번 호출해도 안전 (멱등).

    Args:
        db_path: DB 파일 경로 (None이면 기본 경로)

    Returns:
        연결된 SQLiteAdapter (호출자가 close 책임)

    Raises:
        StorageUnavailable: DB를 열 수 없거나 스키마 버전이 더 높은 경우
    """
    db = SQLiteAdapter(get_db_path(db_path))
    await db.connect()
    try:
        await migrate(db)
    except Exception:
        await db.close()
        raise
    return db


async def get_schema_version(db: SQLiteAdapter) -> int:
    """현재 스키마 버전 조회"""
    row = await db.fetchone("PRAGMA user_version")
    return int(row[0]) if row else 0


async def migrate(db: SQLiteAdapter) -> int:
    """미적용 마이그레이션 순서대로 실행

    각 단계와 버전 갱신은 하나의 트랜잭션으로 묶음.

    Args:
        db: 연결된 SQLiteAdapter

    Returns:
        적용 후 스키마 버전
    """
    current = await get_schema_version(db)

    if current > SCHEMA_VERSION:
        raise StorageUnavailable(
            f"DB 스키마 버전({current})이 지원 버전({SCHEMA_VERSION})보다 높습니다",
            db_path=str(db.db_path),
        )

    for version, step in MIGRATIONS:
        if version <= current:
            continue

        async with db.transaction():
            # 다른 프로세스가 먼저 적용했으면 건너뜀
            if await get_schema_version(db) >= version:
                current = version
                continue
            await step(db)
            # PRAGMA는 파라미터 바인딩 불가
            await db.execute(f"PRAGMA user_version = {int(version)}")

        logger.info(f"스키마 마이그레이션 적용: v{version}")
        current = version

    return current


async def _migrate_v1(db: SQLiteAdapter) -> None:
    """users / transactions 테이블 생성

    이전 버전 도구가 만든 DB(user_version=0, 테이블 존재)도 그대로 수용.
    description 컬럼이 없는 구버전 transactions 테이블은 컬럼 추가.
    """
    # users 테이블
    await db.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            username         TEXT NOT NULL UNIQUE,
            balance          INTEGER NOT NULL DEFAULT 0
        )
    """)

    # transactions 테이블
    await db.execute("""
        CREATE TABLE IF NOT EXISTS transactions (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id          INTEGER NOT NULL,
            transaction_type TEXT NOT NULL,
            amount           INTEGER NOT NULL,
            date             TEXT NOT NULL,
            description      TEXT,
            FOREIGN KEY (user_id) REFERENCES users(id)
        )
    """)

    columns = {c["name"] for c in await db.get_table_info("transactions")}
    if "description" not in columns:
        await db.execute("ALTER TABLE transactions ADD COLUMN description TEXT")
        logger.info("구버전 transactions 테이블에 description 컬럼 추가")


async def _migrate_v2(db: SQLiteAdapter) -> None:
    """조회용 인덱스 생성 (date DESC, id DESC 정렬)"""
    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_transactions_user_date
        ON transactions(user_id, date, id)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_transactions_date
        ON transactions(date, id)
    """)


MIGRATIONS: list[tuple[int, Callable[[SQLiteAdapter], Awaitable[None]]]] = [
    (1, _migrate_v1),
    (2, _migrate_v2),
]

SCHEMA_VERSION: int = MIGRATIONS[-1][0]
