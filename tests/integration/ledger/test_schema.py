"""Ledger 스키마 초기화 / 마이그레이션 통합 테스트"""

from pathlib import Path

import aiosqlite
import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.errors import StorageUnavailable
from core.ledger.schema import (
    SCHEMA_VERSION,
    get_schema_version,
    initialize,
    migrate,
)


class TestInitialize:
    """initialize 테스트"""

    @pytest.mark.asyncio
    async def test_creates_directory_and_tables(self, tmp_path: Path) -> None:
        """디렉토리 + 테이블 생성"""
        db_path = tmp_path / "share" / "utang" / "utang.db"

        db = await initialize(db_path)
        try:
            assert db_path.exists()
            assert await db.table_exists("users") is True
            assert await db.table_exists("transactions") is True
            assert await get_schema_version(db) == SCHEMA_VERSION
        finally:
            await db.close()

    @pytest.mark.asyncio
    async def test_idempotent(self, tmp_path: Path) -> None:
        """재초기화는 기존 데이터 유지"""
        db_path = tmp_path / "utang.db"

        db = await initialize(db_path)
        await db.execute("INSERT INTO users (username) VALUES ('alice')")
        await db.close()

        db = await initialize(db_path)
        try:
            row = await db.fetchone("SELECT COUNT(*) FROM users")
            assert row[0] == 1
            assert await get_schema_version(db) == SCHEMA_VERSION
        finally:
            await db.close()

    @pytest.mark.asyncio
    async def test_migrate_twice_is_noop(self, db: SQLiteAdapter) -> None:
        """마이그레이션 중복 실행"""
        assert await migrate(db) == SCHEMA_VERSION
        assert await migrate(db) == SCHEMA_VERSION

    @pytest.mark.asyncio
    async def test_storage_unavailable(self, tmp_path: Path) -> None:
        """디렉토리를 만들 수 없으면 StorageUnavailable"""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")

        with pytest.raises(StorageUnavailable):
            await initialize(blocker / "utang.db")

    @pytest.mark.asyncio
    async def test_newer_schema_rejected(self, tmp_path: Path) -> None:
        """코드보다 높은 스키마 버전"""
        db_path = tmp_path / "future.db"
        async with SQLiteAdapter(db_path) as adapter:
            await adapter.execute(f"PRAGMA user_version = {SCHEMA_VERSION + 1}")

        with pytest.raises(StorageUnavailable, match="스키마 버전"):
            await initialize(db_path)


class TestSchemaShape:
    """스키마 구조 테스트"""

    @pytest.mark.asyncio
    async def test_users_columns(self, db: SQLiteAdapter) -> None:
        """users 컬럼"""
        columns = {c["name"]: c for c in await db.get_table_info("users")}

        assert set(columns) == {"id", "username", "balance"}
        assert columns["id"]["pk"] is True
        assert columns["username"]["notnull"] is True
        assert columns["balance"]["notnull"] is True
        assert columns["balance"]["default_value"] == "0"

    @pytest.mark.asyncio
    async def test_transactions_columns(self, db: SQLiteAdapter) -> None:
        """transactions 컬럼"""
        columns = {c["name"]: c for c in await db.get_table_info("transactions")}

        assert set(columns) == {
            "id", "user_id", "transaction_type", "amount", "date", "description",
        }
        assert columns["description"]["notnull"] is False
        assert columns["date"]["notnull"] is True

    @pytest.mark.asyncio
    async def test_indexes(self, db: SQLiteAdapter) -> None:
        """조회용 인덱스"""
        assert await db.index_exists("ix_transactions_user_date") is True
        assert await db.index_exists("ix_transactions_date") is True

    @pytest.mark.asyncio
    async def test_username_unique(self, db: SQLiteAdapter) -> None:
        """username UNIQUE 제약"""
        await db.execute("INSERT INTO users (username) VALUES ('alice')")

        with pytest.raises(aiosqlite.IntegrityError):
            await db.execute("INSERT INTO users (username) VALUES ('alice')")

    @pytest.mark.asyncio
    async def test_username_case_sensitive(self, db: SQLiteAdapter) -> None:
        """대소문자 구분"""
        await db.execute("INSERT INTO users (username) VALUES ('alice')")
        await db.execute("INSERT INTO users (username) VALUES ('Alice')")

        row = await db.fetchone("SELECT COUNT(*) FROM users")
        assert row[0] == 2

    @pytest.mark.asyncio
    async def test_foreign_key_enforced(self, db: SQLiteAdapter) -> None:
        """transactions.user_id 외래 키"""
        with pytest.raises(aiosqlite.IntegrityError):
            await db.execute(
                """
                INSERT INTO transactions (user_id, transaction_type, amount, date)
                VALUES (999, 'pay', 100, '2026-01-01 00:00:00+00:00')
                """
            )


class TestLegacyMigration:
    """이전 버전 도구가 만든 DB 마이그레이션"""

    @pytest.mark.asyncio
    async def test_adds_description_column(self, tmp_path: Path) -> None:
        """description 없는 구버전 transactions 테이블"""
        db_path = tmp_path / "legacy.db"
        async with SQLiteAdapter(db_path) as adapter:
            await adapter.execute("""
                CREATE TABLE users (
                    id integer primary key autoincrement,
                    username text not null,
                    balance integer default 0,
                    UNIQUE(username)
                )
            """)
            await adapter.execute("""
                CREATE TABLE transactions (
                    id integer primary key autoincrement,
                    user_id integer not null,
                    transaction_type text not null,
                    amount integer not null,
                    date text not null
                )
            """)
            await adapter.execute(
                "INSERT INTO users (username, balance) VALUES ('alice', 1000)"
            )
            await adapter.execute(
                """
                INSERT INTO transactions (user_id, transaction_type, amount, date)
                VALUES (1, 'pay', 1000, '2024-05-01 10:20:30.123456789 +07:00')
                """
            )

        db = await initialize(db_path)
        try:
            columns = [c["name"] for c in await db.get_table_info("transactions")]
            assert "description" in columns
            assert await get_schema_version(db) == SCHEMA_VERSION

            # 기존 데이터 보존
            row = await db.fetchone("SELECT balance FROM users WHERE username = 'alice'")
            assert row[0] == 1000
            row = await db.fetchone("SELECT description FROM transactions")
            assert row[0] is None
        finally:
            await db.close()

    @pytest.mark.asyncio
    async def test_existing_tables_without_version(self, tmp_path: Path) -> None:
        """테이블은 있고 user_version=0인 DB"""
        db_path = tmp_path / "unversioned.db"
        async with SQLiteAdapter(db_path) as adapter:
            await adapter.execute("""
                CREATE TABLE users (
                    id integer primary key autoincrement,
                    username text not null,
                    balance integer default 0,
                    UNIQUE(username)
                )
            """)
            assert await get_schema_version(adapter) == 0

        db = await initialize(db_path)
        try:
            assert await db.table_exists("transactions") is True
            assert await get_schema_version(db) == SCHEMA_VERSION
        finally:
            await db.close()
