"""
Balance Reconciler

저장된 잔액(users.balance)과 거래 로그 합계를 비교하여 불일치 감지.
잔액을 직접 수정하지 않음 (모든 잔액 변경은 거래 행과 짝을 이뤄야 함).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from core.errors import LedgerDriftError
from core.ledger.store import LedgerStore

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceDrift:
    """Drift 정보"""
    user_id: int
    username: str
    expected: int  # 거래 로그 합계
    actual: int  # 저장된 잔액
    
    @property
    def difference(self) -> int:
        """저장 잔액 - 로그 합계"""
        return self.actual - self.expected


class BalanceReconciler:
    """잔액 정합 검사기
    
    Args:
        db: SQLite 어댑터
    """
    
    def __init__(self, db: SQLiteAdapter):
        self.db = db
        self.store = LedgerStore(db)
    
    async def find_drift(self) -> list[BalanceDrift]:
        """모든 사용자 잔액 재계산 후 불일치 목록 반환
        
        Returns:
            BalanceDrift 목록 (일치하면 빈 리스트)
        """
        drifts: list[BalanceDrift] = []
        
        for summary in await self.store.balance_summary():
            if summary.balance == summary.ledger_sum:
                continue
            
            drift = BalanceDrift(
                user_id=summary.user_id,
                username=summary.username,
                expected=summary.ledger_sum,
                actual=summary.balance,
            )
            logger.warning(
                f"Balance drift: {drift.username} "
                f"stored={drift.actual} ledger={drift.expected} "
                f"diff={drift.difference}"
            )
            drifts.append(drift)
        
        if not drifts:
            logger.info("잔액 정합 검사 통과")
        
        return drifts
    
    async def assert_consistent(self) -> None:
        """불일치가 있으면 예외
        
        Raises:
            LedgerDriftError: 하나 이상의 사용자 잔액 불일치
        """
        drifts = await self.find_drift()
        if drifts:
            raise LedgerDriftError(drifts)
