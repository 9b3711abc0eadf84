"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
여러 CLI 프로세스가 같은 DB 파일에 동시에 접근할 수 있도록 설정.

주의: 연결은 autocommit 모드(isolation_level=None)로 열고,
쓰기 트랜잭션은 transaction()에서 BEGIN IMMEDIATE로 명시적으로 시작한다.
"""

import logging
import sqlite3
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

from core.constants import Defaults, Paths
from core.errors import StorageUnavailable

logger = logging.getLogger(__name__)


def get_db_path(override: Path | str | None = None) -> Path:
    """DB 경로 반환

    Args:
        override: 설정 파일/인자로 지정한 경로 (None이면 기본 경로)

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if override is None or str(override) == "":
        return Paths.DB_FILE
    return Path(override).expanduser()


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체

    Raises:
        StorageUnavailable: 디렉토리 생성 또는 파일 열기 실패
    """
    # pathlib.Path를 문자열로 변환
    db_path_str = str(db_path)

    # 디렉토리가 없으면 생성
    db_dir = Path(db_path).parent
    try:
        db_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageUnavailable(
            f"DB 디렉토리를 생성할 수 없습니다: {db_dir} ({e})",
            db_path=db_path_str,
        ) from e

    conn: aiosqlite.Connection | None = None
    try:
        if readonly:
            # 읽기 전용 모드
            conn = await aiosqlite.connect(
                f"file:{db_path_str}?mode=ro", uri=True, isolation_level=None
            )
        else:
            conn = await aiosqlite.connect(db_path_str, isolation_level=None)

        # WAL 모드 설정 (읽기 전용 연결은 journal_mode 변경 불가)
        if not readonly:
            await conn.execute("PRAGMA journal_mode=WAL")

        # 동시 접근 설정 (다른 프로세스가 쓰기 잠금을 잡고 있으면 대기)
        await conn.execute(f"PRAGMA busy_timeout={Defaults.BUSY_TIMEOUT_MS}")

        # 외래 키 제약 활성화
        await conn.execute("PRAGMA foreign_keys=ON")
    except (sqlite3.Error, OSError) as e:
        if conn is not None:
            await conn.close()
        raise StorageUnavailable(
            f"DB 파일을 열 수 없습니다: {db_path_str} ({e})",
            db_path=db_path_str,
        ) from e

    logger.info(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    트랜잭션 컨텍스트 매니저 제공.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction() as conn:
        await conn.execute("UPDATE users SET balance = balance + ? WHERE id = ?", ...)
        await conn.execute("INSERT INTO transactions ...")

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    @property
    def in_transaction(self) -> bool:
        """트랜잭션 진행 중 여부"""
        return self._conn is not None and self._conn.in_transaction

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite 연결 종료")

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if parameters:
            return await self._conn.execute(sql, parameters)
        return await self._conn.execute(sql)

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        """SQL 다중 실행"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        return await self._conn.executemany(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchall()

    async def commit(self) -> None:
        """커밋"""
        if self._conn is not None:
            await self._conn.commit()

    async def rollback(self) -> None:
        """롤백"""
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """쓰기 트랜잭션 컨텍스트 매니저

        BEGIN IMMEDIATE로 시작하여 쓰기 잠금을 먼저 획득.
        다른 프로세스의 read-modify-write와 섞이지 않음.
        성공 시 자동 커밋, 예외 시 자동 롤백.

        사용 예시:
        ```python
        async with adapter.transaction() as conn:
            await conn.execute("INSERT INTO ...")
            # 성공 시 자동 커밋
        ```
        """
        async with self._begin("BEGIN IMMEDIATE") as conn:
            yield conn

    @asynccontextmanager
    async def snapshot(self) -> AsyncIterator[aiosqlite.Connection]:
        """읽기 스냅샷 컨텍스트 매니저

        BEGIN(DEFERRED)으로 시작. WAL 모드에서 첫 SELECT 시점의 스냅샷을
        블록이 끝날 때까지 유지하므로 여러 SELECT가 같은 상태를 본다.
        쓰기 잠금은 잡지 않음 (다른 프로세스의 쓰기를 막지 않음).
        """
        async with self._begin("BEGIN") as conn:
            yield conn

    @asynccontextmanager
    async def _begin(self, statement: str) -> AsyncIterator[aiosqlite.Connection]:
        if self._conn is None:
            raise RuntimeError("Not connected to database")
        if self._conn.in_transaction:
            raise RuntimeError("Transaction already in progress")

        await self._conn.execute(statement)
        try:
            yield self._conn
            await self.commit()
        except Exception:
            await self.rollback()
            raise

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    async def index_exists(self, index_name: str) -> bool:
        """인덱스 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='index' AND name=?",
            (index_name,),
        )
        return result is not None

    async def get_table_info(self, table_name: str) -> list[dict[str, Any]]:
        """테이블 정보 조회"""
        rows = await self.fetchall(f"PRAGMA table_info({table_name})")

        columns = []
        for row in rows:
            columns.append({
                "cid": row[0],
                "name": row[1],
                "type": row[2],
                "notnull": bool(row[3]),
                "default_value": row[4],
                "pk": bool(row[5]),
            })

        return columns

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
