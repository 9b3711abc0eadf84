"""
개인 채무 Ledger

상대방별 잔액과 거래 로그를 함께 관리.
잔액 변경은 항상 거래 행 추가와 같은 트랜잭션에서 수행.

사용 예시:
```python
from core.ledger import LedgerQuery, LedgerService, TransactionKind, initialize

db = await initialize()  # ~/.local/share/utang/utang.db
try:
    service = LedgerService(db)
    await service.apply_transaction("alice", 1000, TransactionKind.PAY, "lunch")

    result = await LedgerQuery(db).check("alice")
    print(result.balance, result.transactions)
finally:
    await db.close()
```
"""

from core.ledger.query import LedgerQuery
from core.ledger.reconciler import BalanceDrift, BalanceReconciler
from core.ledger.schema import SCHEMA_VERSION, get_schema_version, initialize, migrate
from core.ledger.service import LedgerService, signed_amount
from core.ledger.store import BalanceSummary, LedgerStore
from core.ledger.types import (
    SIGN_TABLE,
    Transaction,
    TransactionKind,
    User,
    UserWithTransactions,
)

__all__ = [
    # 핵심 클래스
    "LedgerStore",
    "LedgerService",
    "LedgerQuery",
    "BalanceReconciler",
    # 스키마
    "initialize",
    "migrate",
    "get_schema_version",
    "SCHEMA_VERSION",
    # 타입
    "TransactionKind",
    "User",
    "Transaction",
    "UserWithTransactions",
    "BalanceSummary",
    "BalanceDrift",
    # 함수/상수
    "signed_amount",
    "SIGN_TABLE",
]
