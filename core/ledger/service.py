"""
Ledger 서비스

부호 없는 금액 + 거래 유형 → 부호 포함 금액 변환,
잔액 갱신과 거래 추가를 하나의 트랜잭션으로 처리.

불변식: 모든 사용자에 대해 users.balance == SUM(transactions.amount)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.errors import ConstraintViolation, DuplicateUser, InvalidAmount, UserNotFound
from core.ledger.store import LedgerStore
from core.ledger.types import Transaction, TransactionKind, User
from core.utils.timezone import now_local

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


def signed_amount(kind: TransactionKind | str, magnitude: int) -> int:
    """거래 유형에 따라 부호 적용

    | kind    | amount |
    |---------|--------|
    | pay     | +m     |
    | lend    | +m     |
    | receive | -m     |
    | borrow  | -m     |

    Args:
        kind: 거래 유형
        magnitude: 부호 없는 금액 (양의 정수)

    Returns:
        부호 포함 금액 (0 아님)

    Raises:
        InvalidAmount: 알 수 없는 유형, 0/음수/정수 아닌 금액
    """
    kind = TransactionKind.parse(kind)

    # bool은 int 하위 타입이므로 별도 차단
    if isinstance(magnitude, bool) or not isinstance(magnitude, int):
        raise InvalidAmount(f"Amount must be an integer: {magnitude!r}", value=magnitude)
    if magnitude <= 0:
        raise InvalidAmount(f"Amount must be positive: {magnitude}", value=magnitude)

    return kind.signed(magnitude)


class LedgerService:
    """Ledger 서비스

    잔액 변경은 반드시 이 클래스를 통해서만 수행.
    모든 쓰기는 BEGIN IMMEDIATE 트랜잭션 안에서 실행되어
    다른 프로세스의 동시 쓰기와 직렬화됨.

    Args:
        db: SQLite 어댑터 (프로세스당 1개, 호출자가 생성/종료)
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db
        self.store = LedgerStore(db)

    async def create_user(
        self,
        username: str,
        initial_magnitude: int = 0,
        kind: TransactionKind | str = TransactionKind.PAY,
        description: str | None = None,
    ) -> User:
        """사용자 생성 (+ 초기 거래)

        initial_magnitude가 0이 아니면 같은 유형/설명/생성 시각으로
        첫 거래를 함께 기록. 사용자 생성과 첫 거래는 하나의 트랜잭션.

        Args:
            username: 사용자 이름 (대소문자 구분)
            initial_magnitude: 초기 금액 (0이면 거래 없음)
            kind: 초기 거래 유형
            description: 초기 거래 설명

        Returns:
            생성된 User (초기 거래 반영 후)

        Raises:
            DuplicateUser: 이미 존재하는 이름
            InvalidAmount: 알 수 없는 유형 또는 음수/정수 아닌 금액
            ValueError: 빈 이름
        """
        if not isinstance(username, str) or not username.strip():
            raise ValueError("username must be a non-empty string")

        kind = TransactionKind.parse(kind)
        amount = 0
        if initial_magnitude != 0:
            amount = signed_amount(kind, initial_magnitude)

        created_at = now_local()

        async with self.db.transaction():
            user_id = await self.store.insert_user(username)
            if amount != 0:
                await self.store.adjust_balance(user_id, amount)
                await self.store.insert_transaction(
                    user_id, kind, amount, created_at, description
                )

        logger.info(
            f"사용자 생성: {username} (초기 금액 {amount}, 유형 {kind.value})"
        )
        return User(id=user_id, username=username, balance=amount)

    async def apply_transaction(
        self,
        username: str,
        magnitude: int,
        kind: TransactionKind | str,
        description: str | None = None,
    ) -> Transaction:
        """거래 적용 (잔액 갱신 + 거래 추가, 원자적)

        Args:
            username: 사용자 이름
            magnitude: 부호 없는 금액
            kind: 거래 유형
            description: 설명 (선택)

        Returns:
            생성된 Transaction

        Raises:
            UserNotFound: 사용자 없음 (호출자가 create_user 여부 결정)
            InvalidAmount: 0/음수 금액 또는 알 수 없는 유형
        """
        kind = TransactionKind.parse(kind)
        amount = signed_amount(kind, magnitude)
        ts = now_local()

        try:
            async with self.db.transaction():
                user = await self.store.find_user(username)
                await self.store.adjust_balance(user.id, amount)
                try:
                    tx_id = await self.store.insert_transaction(
                        user.id, kind, amount, ts, description
                    )
                except ConstraintViolation as e:
                    # 외래 키 위반 = 사용자 행 없음
                    raise UserNotFound(username) from e
        except (UserNotFound, DuplicateUser):
            raise
        except Exception:
            logger.warning(
                f"거래 롤백: {username} {kind.value} {amount}",
                exc_info=True,
            )
            raise

        logger.info(f"거래 기록: {username} {kind.value} {amount} (잔액 {user.balance + amount})")
        return Transaction(
            id=tx_id,
            user_id=user.id,
            username=user.username,
            kind=kind,
            amount=amount,
            date=ts,
            description=description,
        )

    # -------------------------------------------------------------------------
    # 유형별 헬퍼
    # -------------------------------------------------------------------------

    async def pay(self, username: str, magnitude: int, description: str | None = None) -> Transaction:
        """상대방에게 지불 (+)"""
        return await self.apply_transaction(username, magnitude, TransactionKind.PAY, description)

    async def receive(self, username: str, magnitude: int, description: str | None = None) -> Transaction:
        """상대방으로부터 수령 (-)"""
        return await self.apply_transaction(username, magnitude, TransactionKind.RECEIVE, description)

    async def lend(self, username: str, magnitude: int, description: str | None = None) -> Transaction:
        """상대방에게 빌려줌 (+)"""
        return await self.apply_transaction(username, magnitude, TransactionKind.LEND, description)

    async def borrow(self, username: str, magnitude: int, description: str | None = None) -> Transaction:
        """상대방으로부터 빌림 (-)"""
        return await self.apply_transaction(username, magnitude, TransactionKind.BORROW, description)
