"""
Ledger 조회

읽기 전용 View: 사용자별 잔액 + 최근 거래, 전체 최근 거래.
금액 포맷/표 레이아웃은 호출자(CLI) 책임.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.constants import Defaults
from core.ledger.store import LedgerStore
from core.ledger.types import Transaction, UserWithTransactions

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter


class LedgerQuery:
    """Ledger 조회 서비스
    
    "거래 없음"(빈 리스트)과 "사용자 없음"(UserNotFound)을 구분.
    
    Args:
        db: SQLite 어댑터
        check_limit: check() 기본 조회 개수
        history_limit: history() 기본 조회 개수
    """
    
    def __init__(
        self,
        db: SQLiteAdapter,
        check_limit: int = Defaults.CHECK_LIMIT,
        history_limit: int = Defaults.HISTORY_LIMIT,
    ):
        self.db = db
        self.store = LedgerStore(db)
        self.check_limit = _validate_limit(check_limit)
        self.history_limit = _validate_limit(history_limit)
    
    async def check(
        self,
        username: str,
        limit: int | None = None,
    ) -> UserWithTransactions:
        """사용자 잔액 + 최근 거래 조회
        
        Args:
            username: 사용자 이름
            limit: 조회 개수 (None이면 check_limit)
            
        Returns:
            UserWithTransactions (거래는 최신순)
            
        Raises:
            UserNotFound: 사용자가 없는 경우
            MalformedTimestamp: 저장된 날짜 파싱 실패
        """
        limit = self.check_limit if limit is None else _validate_limit(limit)
        
        # 잔액과 거래 목록을 같은 스냅샷에서 조회
        async with self.db.snapshot():
            user = await self.store.find_user(username)
            transactions = await self.store.transactions_for_user(username, limit)
        
        return UserWithTransactions(user=user, transactions=transactions)
    
    async def history(self, limit: int | None = None) -> list[Transaction]:
        """전체 사용자 최근 거래 조회
        
        Args:
            limit: 조회 개수 (None이면 history_limit)
            
        Returns:
            최신순 거래 목록 (date DESC, id DESC)
        """
        limit = self.history_limit if limit is None else _validate_limit(limit)
        return await self.store.recent_transactions(limit)


def _validate_limit(limit: int) -> int:
    """조회 개수 검증 (0 이상 정수)"""
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise ValueError(f"limit must be a non-negative integer: {limit!r}")
    return limit
