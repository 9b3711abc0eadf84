"""
Ledger 타입 정의

거래 유형(TransactionKind)과 부호 규칙, 조회 결과 데이터 구조
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from core.errors import InvalidAmount


class TransactionKind(str, Enum):
    """거래 유형
    
    str을 상속하여 DB의 transaction_type 컬럼에 그대로 저장.
    금액 부호는 SIGN_TABLE로 결정 (pay/lend → +, receive/borrow → -).
    """
    
    PAY = "pay"  # 상대방에게 지불
    RECEIVE = "receive"  # 상대방으로부터 수령
    LEND = "lend"  # 상대방에게 빌려줌
    BORROW = "borrow"  # 상대방으로부터 빌림
    
    @classmethod
    def parse(cls, value: "TransactionKind | str") -> "TransactionKind":
        """문자열 또는 Enum을 TransactionKind로 변환
        
        Args:
            value: "pay", "PAY", TransactionKind.PAY 등
            
        Returns:
            TransactionKind
            
        Raises:
            InvalidAmount: 알 수 없는 유형인 경우
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        valid_kinds = [k.value for k in cls]
        raise InvalidAmount(
            f"Unknown transaction kind: {value!r} (valid: {valid_kinds})",
            value=value,
        )
    
    @property
    def sign(self) -> int:
        """금액 부호 (+1 / -1)"""
        return SIGN_TABLE[self]
    
    def signed(self, magnitude: int) -> int:
        """부호 없는 금액에 부호 적용"""
        return self.sign * magnitude


# 거래 유형별 부호 규칙
SIGN_TABLE: dict[TransactionKind, int] = {
    TransactionKind.PAY: 1,
    TransactionKind.LEND: 1,
    TransactionKind.RECEIVE: -1,
    TransactionKind.BORROW: -1,
}


@dataclass(frozen=True)
class User:
    """거래 상대방 (불변 스냅샷)
    
    balance는 LedgerService만 변경. 조회 시점의 값.
    """
    
    id: int
    username: str
    balance: int


@dataclass(frozen=True)
class Transaction:
    """거래 (생성 후 불변)
    
    amount는 부호 포함 금액 (0 불가).
    username은 조인 조회 시 표시용으로 함께 전달.
    """
    
    id: int
    user_id: int
    username: str
    kind: TransactionKind
    amount: int
    date: datetime
    description: str | None = None


@dataclass(frozen=True)
class UserWithTransactions:
    """check 조회 결과 (잔액 + 최근 거래)"""
    
    user: User
    transactions: list[Transaction] = field(default_factory=list)
    
    @property
    def balance(self) -> int:
        """현재 잔액"""
        return self.user.balance
