"""LedgerStore 통합 테스트"""

from datetime import datetime, timedelta, timezone

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.errors import ConstraintViolation, DuplicateUser, MalformedTimestamp, UserNotFound
from core.ledger.store import LedgerStore
from core.ledger.types import TransactionKind, User

BASE_TS = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone(timedelta(hours=7)))


class TestLedgerStoreUsers:
    """사용자 저장/조회 테스트"""

    @pytest.mark.asyncio
    async def test_insert_and_find(self, store: LedgerStore) -> None:
        """생성 후 조회 (잔액 0)"""
        user_id = await store.insert_user("alice")

        user = await store.find_user("alice")

        assert user == User(id=user_id, username="alice", balance=0)

    @pytest.mark.asyncio
    async def test_duplicate(self, store: LedgerStore) -> None:
        """중복 이름 → DuplicateUser"""
        await store.insert_user("alice")

        with pytest.raises(DuplicateUser) as exc_info:
            await store.insert_user("alice")

        assert exc_info.value.username == "alice"
        assert isinstance(exc_info.value, ConstraintViolation)

    @pytest.mark.asyncio
    async def test_find_missing(self, store: LedgerStore) -> None:
        """없는 사용자 → UserNotFound"""
        with pytest.raises(UserNotFound) as exc_info:
            await store.find_user("ghost")

        assert exc_info.value.username == "ghost"

    @pytest.mark.asyncio
    async def test_find_is_case_sensitive(self, store: LedgerStore) -> None:
        """대소문자 구분 조회"""
        await store.insert_user("alice")

        with pytest.raises(UserNotFound):
            await store.find_user("Alice")

    @pytest.mark.asyncio
    async def test_user_exists(self, store: LedgerStore) -> None:
        """존재 여부"""
        await store.insert_user("alice")

        assert await store.user_exists("alice") is True
        assert await store.user_exists("bob") is False

    @pytest.mark.asyncio
    async def test_adjust_balance(self, store: LedgerStore) -> None:
        """잔액 증감"""
        user_id = await store.insert_user("alice")

        await store.adjust_balance(user_id, 1000)
        await store.adjust_balance(user_id, -300)

        user = await store.find_user("alice")
        assert user.balance == 700

    @pytest.mark.asyncio
    async def test_adjust_balance_missing_user(self, store: LedgerStore) -> None:
        """없는 id 잔액 변경 → id로 식별되는 UserNotFound"""
        with pytest.raises(UserNotFound) as exc_info:
            await store.adjust_balance(999, 100)

        assert exc_info.value.user_id == 999
        assert exc_info.value.username is None
        assert str(exc_info.value) == "User not found: id=999"


class TestLedgerStoreTransactions:
    """거래 저장/조회 테스트"""

    @pytest.mark.asyncio
    async def test_insert_transaction(self, store: LedgerStore) -> None:
        """거래 추가"""
        user_id = await store.insert_user("alice")

        tx_id = await store.insert_transaction(
            user_id, TransactionKind.PAY, 1000, BASE_TS, "lunch"
        )

        txs = await store.transactions_for_user("alice", 5)
        assert len(txs) == 1
        assert txs[0].id == tx_id
        assert txs[0].user_id == user_id
        assert txs[0].username == "alice"
        assert txs[0].kind is TransactionKind.PAY
        assert txs[0].amount == 1000
        assert txs[0].date == BASE_TS
        assert txs[0].description == "lunch"

    @pytest.mark.asyncio
    async def test_insert_transaction_stores_kind_text(
        self, store: LedgerStore, db: SQLiteAdapter
    ) -> None:
        """transaction_type 컬럼에 소문자 문자열 저장"""
        user_id = await store.insert_user("alice")
        await store.insert_transaction(user_id, "BORROW", -500, BASE_TS)

        row = await db.fetchone("SELECT transaction_type, date FROM transactions")
        assert row[0] == "borrow"
        assert row[1] == "2026-01-01 12:00:00+07:00"

    @pytest.mark.asyncio
    async def test_insert_transaction_missing_user(self, store: LedgerStore) -> None:
        """외래 키 위반 → ConstraintViolation"""
        with pytest.raises(ConstraintViolation):
            await store.insert_transaction(999, TransactionKind.PAY, 100, BASE_TS)

    @pytest.mark.asyncio
    async def test_transactions_for_user_order_and_limit(self, store: LedgerStore) -> None:
        """date DESC 정렬 + 개수 제한"""
        user_id = await store.insert_user("alice")
        for day in range(7):
            await store.insert_transaction(
                user_id, TransactionKind.PAY, 100 + day, BASE_TS + timedelta(days=day)
            )

        txs = await store.transactions_for_user("alice", 5)

        assert [t.amount for t in txs] == [106, 105, 104, 103, 102]

    @pytest.mark.asyncio
    async def test_same_date_ordered_by_id_desc(self, store: LedgerStore) -> None:
        """같은 시각이면 나중에 추가된 거래 먼저"""
        user_id = await store.insert_user("alice")
        first = await store.insert_transaction(user_id, TransactionKind.PAY, 1, BASE_TS)
        second = await store.insert_transaction(user_id, TransactionKind.PAY, 2, BASE_TS)
        third = await store.insert_transaction(user_id, TransactionKind.PAY, 3, BASE_TS)

        txs = await store.transactions_for_user("alice", 5)

        assert [t.id for t in txs] == [third, second, first]

    @pytest.mark.asyncio
    async def test_transactions_for_user_filters(self, store: LedgerStore) -> None:
        """다른 사용자 거래 제외"""
        alice = await store.insert_user("alice")
        bob = await store.insert_user("bob")
        await store.insert_transaction(alice, TransactionKind.PAY, 100, BASE_TS)
        await store.insert_transaction(bob, TransactionKind.LEND, 200, BASE_TS)

        txs = await store.transactions_for_user("bob", 5)

        assert [t.username for t in txs] == ["bob"]

    @pytest.mark.asyncio
    async def test_transactions_for_unknown_user_empty(self, store: LedgerStore) -> None:
        """없는 사용자 → 빈 리스트 (존재 판단은 호출자)"""
        assert await store.transactions_for_user("ghost", 5) == []

    @pytest.mark.asyncio
    async def test_recent_transactions_across_users(self, store: LedgerStore) -> None:
        """전체 사용자 최근 거래"""
        alice = await store.insert_user("alice")
        bob = await store.insert_user("bob")
        await store.insert_transaction(alice, TransactionKind.PAY, 100, BASE_TS)
        await store.insert_transaction(bob, TransactionKind.LEND, 200, BASE_TS + timedelta(hours=1))
        await store.insert_transaction(alice, TransactionKind.RECEIVE, -50, BASE_TS + timedelta(hours=2))

        txs = await store.recent_transactions(2)

        assert [(t.username, t.amount) for t in txs] == [("alice", -50), ("bob", 200)]

    @pytest.mark.asyncio
    async def test_legacy_date_readable(self, store: LedgerStore, db: SQLiteAdapter) -> None:
        """구버전 날짜 형식 조회"""
        user_id = await store.insert_user("alice")
        await db.execute(
            """
            INSERT INTO transactions (user_id, transaction_type, amount, date, description)
            VALUES (?, 'pay', 100, '2024-05-01 10:20:30.123456789 +07:00', NULL)
            """,
            (user_id,),
        )

        txs = await store.recent_transactions(5)

        assert txs[0].date.year == 2024
        assert txs[0].description is None

    @pytest.mark.asyncio
    async def test_malformed_date_surfaces(self, store: LedgerStore, db: SQLiteAdapter) -> None:
        """파싱 불가 날짜 → MalformedTimestamp"""
        user_id = await store.insert_user("alice")
        await db.execute(
            """
            INSERT INTO transactions (user_id, transaction_type, amount, date)
            VALUES (?, 'pay', 100, 'sometime last week')
            """,
            (user_id,),
        )

        with pytest.raises(MalformedTimestamp):
            await store.transactions_for_user("alice", 5)


class TestBalanceSummary:
    """balance_summary 테스트"""

    @pytest.mark.asyncio
    async def test_summary(self, store: LedgerStore) -> None:
        """저장 잔액 vs 로그 합계"""
        alice = await store.insert_user("alice")
        await store.insert_user("bob")
        await store.adjust_balance(alice, 700)
        await store.insert_transaction(alice, TransactionKind.PAY, 1000, BASE_TS)
        await store.insert_transaction(alice, TransactionKind.RECEIVE, -300, BASE_TS)

        summary = {s.username: s for s in await store.balance_summary()}

        assert summary["alice"].balance == 700
        assert summary["alice"].ledger_sum == 700
        assert summary["alice"].transaction_count == 2
        assert summary["bob"].ledger_sum == 0
        assert summary["bob"].transaction_count == 0
