"""
Ledger 저장소

users / transactions 테이블에 대한 단순 읽기/쓰기.
트랜잭션 경계는 호출자(LedgerService)가 db.transaction()으로 결정.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

import aiosqlite

from core.errors import ConstraintViolation, DuplicateUser, UserNotFound
from core.ledger.types import Transaction, TransactionKind, User
from core.utils.timezone import format_ts, parse_ts

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


# transactions 조회 공통 SELECT (users 조인)
_TRANSACTION_SELECT = """
    SELECT
        t.id,
        t.user_id,
        u.username,
        t.transaction_type,
        t.amount,
        t.date,
        t.description
    FROM transactions t
    JOIN users u ON u.id = t.user_id
"""


@dataclass(frozen=True)
class BalanceSummary:
    """사용자별 저장 잔액과 거래 로그 합계"""

    user_id: int
    username: str
    balance: int
    ledger_sum: int
    transaction_count: int


class LedgerStore:
    """Ledger 저장소

    사용자와 거래를 저장하고 조회하는 클래스.
    users.balance는 transactions 합계의 Projection으로 관리됨.

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    # -------------------------------------------------------------------------
    # 쓰기
    # -------------------------------------------------------------------------

    async def insert_user(self, username: str) -> int:
        """사용자 생성 (잔액 0)

        Args:
            username: 사용자 이름 (대소문자 구분)

        Returns:
            생성된 user id

        Raises:
            DuplicateUser: 이미 존재하는 이름
            ConstraintViolation: 기타 제약 위반
        """
        try:
            cursor = await self.db.execute(
                "INSERT INTO users (username, balance) VALUES (?, 0)",
                (username,),
            )
        except aiosqlite.IntegrityError as e:
            if "UNIQUE" in str(e).upper():
                raise DuplicateUser(username) from e
            raise ConstraintViolation(str(e)) from e

        logger.debug(f"Inserted user: {username} (id={cursor.lastrowid})")
        return cursor.lastrowid

    async def adjust_balance(self, user_id: int, delta: int) -> None:
        """잔액 증감 (balance += delta)

        단일 UPDATE 문으로 처리하여 읽기-쓰기 사이 끼어들기 없음.

        Raises:
            UserNotFound: 해당 id의 사용자가 없는 경우
        """
        cursor = await self.db.execute(
            "UPDATE users SET balance = balance + ? WHERE id = ?",
            (delta, user_id),
        )
        if cursor.rowcount == 0:
            raise UserNotFound(user_id=user_id)

    async def insert_transaction(
        self,
        user_id: int,
        kind: TransactionKind,
        amount: int,
        timestamp: datetime,
        description: str | None = None,
    ) -> int:
        """거래 추가 (생성 후 변경 불가)

        Args:
            user_id: 사용자 id
            kind: 거래 유형
            amount: 부호 포함 금액
            timestamp: 거래 시각
            description: 설명 (선택)

        Returns:
            생성된 transaction id

        Raises:
            ConstraintViolation: 외래 키 등 제약 위반
        """
        try:
            cursor = await self.db.execute(
                """
                INSERT INTO transactions (
                    user_id, transaction_type, amount, date, description
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    TransactionKind.parse(kind).value,
                    amount,
                    format_ts(timestamp),
                    description,
                ),
            )
        except aiosqlite.IntegrityError as e:
            raise ConstraintViolation(str(e)) from e

        logger.debug(f"Inserted transaction: user_id={user_id}, amount={amount}")
        return cursor.lastrowid

    # -------------------------------------------------------------------------
    # 읽기
    # -------------------------------------------------------------------------

    async def find_user(self, username: str) -> User:
        """사용자 조회

        Raises:
            UserNotFound: 사용자가 없는 경우
        """
        row = await self.db.fetchone(
            "SELECT id, username, balance FROM users WHERE username = ?",
            (username,),
        )
        if row is None:
            raise UserNotFound(username)

        return User(id=row[0], username=row[1], balance=row[2])

    async def user_exists(self, username: str) -> bool:
        """사용자 존재 여부"""
        row = await self.db.fetchone(
            "SELECT 1 FROM users WHERE username = ?",
            (username,),
        )
        return row is not None

    async def transactions_for_user(
        self,
        username: str,
        limit: int,
    ) -> list[Transaction]:
        """사용자별 최근 거래 (시각 DESC, id DESC)

        날짜 문자열이 아니라 julianday()로 UTC 기준 시각을 비교.
        오프셋이 다른 행(DST, 시간대 변경, 구버전 형식)도 실제 시각 순서로 정렬.

        사용자가 없으면 빈 리스트. 존재 여부 판단은 호출자 책임.
        """
        rows = await self.db.fetchall(
            _TRANSACTION_SELECT
            + """
            WHERE u.username = ?
            ORDER BY julianday(t.date) DESC, t.id DESC
            LIMIT ?
            """,
            (username, limit),
        )
        return [self._row_to_transaction(row) for row in rows]

    async def recent_transactions(self, limit: int) -> list[Transaction]:
        """전체 사용자 최근 거래 (시각 DESC, id DESC)"""
        rows = await self.db.fetchall(
            _TRANSACTION_SELECT
            + """
            ORDER BY julianday(t.date) DESC, t.id DESC
            LIMIT ?
            """,
            (limit,),
        )
        return [self._row_to_transaction(row) for row in rows]

    async def balance_summary(self) -> list[BalanceSummary]:
        """사용자별 저장 잔액 vs 거래 로그 합계"""
        rows = await self.db.fetchall(
            """
            SELECT
                u.id,
                u.username,
                u.balance,
                COALESCE(SUM(t.amount), 0) AS ledger_sum,
                COUNT(t.id) AS tx_count
            FROM users u
            LEFT JOIN transactions t ON t.user_id = u.id
            GROUP BY u.id, u.username, u.balance
            ORDER BY u.id
            """
        )
        return [
            BalanceSummary(
                user_id=row[0],
                username=row[1],
                balance=row[2],
                ledger_sum=row[3],
                transaction_count=row[4],
            )
            for row in rows
        ]

    @staticmethod
    def _row_to_transaction(row: tuple[Any, ...]) -> Transaction:
        """조회 결과 행 → Transaction

        Raises:
            MalformedTimestamp: date 컬럼 파싱 실패
        """
        return Transaction(
            id=row[0],
            user_id=row[1],
            username=row[2],
            kind=TransactionKind.parse(row[3]),
            amount=row[4],
            date=parse_ts(row[5]),
            description=row[6],
        )
