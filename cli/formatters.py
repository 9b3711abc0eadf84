"""
CLI 출력 포맷

금액(천 단위 구분, 부호)과 표 레이아웃.
Core는 원시 정수/문자열만 반환하고 표시 형식은 여기서 결정.
"""

from core.constants import Defaults
from core.ledger.reconciler import BalanceDrift
from core.ledger.types import Transaction, UserWithTransactions

LABEL_WIDTH = 13
SEPARATOR = "-" * 55


def format_currency(amount: int, symbol: str = Defaults.CURRENCY_SYMBOL) -> str:
    """금액 포맷
    
    Example:
        >>> format_currency(1500000)
        'Rp1,500,000'
        >>> format_currency(-2500)
        '-Rp2,500'
    """
    if amount < 0:
        return f"-{symbol}{-amount:,}"
    return f"{symbol}{amount:,}"


def format_transaction(
    index: int,
    tx: Transaction,
    symbol: str = Defaults.CURRENCY_SYMBOL,
) -> str:
    """거래 1행 (번호, 이름, 유형, 금액, 날짜, 설명)"""
    return (
        f"{index}. {tx.username:<10} {tx.kind.value:<10} "
        f"{format_currency(tx.amount, symbol):<13} "
        f"{tx.date.date().isoformat():<13} {tx.description or '-'}"
    )


def render_user(
    result: UserWithTransactions,
    symbol: str = Defaults.CURRENCY_SYMBOL,
) -> str:
    """check <name> 출력"""
    lines = [
        f"{'Name':<{LABEL_WIDTH}}: {result.user.username}",
        f"{'Balance':<{LABEL_WIDTH}}: {format_currency(result.balance, symbol)}",
        f"{'Transactions':<{LABEL_WIDTH}}:",
    ]
    if not result.transactions:
        lines.append("(no transactions)")
        return "\n".join(lines)
    
    lines.append(_header())
    lines.append(SEPARATOR)
    for index, tx in enumerate(result.transactions, start=1):
        lines.append(format_transaction(index, tx, symbol))
    return "\n".join(lines)


def render_history(
    transactions: list[Transaction],
    symbol: str = Defaults.CURRENCY_SYMBOL,
) -> str:
    """check (이름 없음) 출력"""
    if not transactions:
        return "No transactions yet."
    
    lines = [_header(), SEPARATOR]
    for index, tx in enumerate(transactions, start=1):
        lines.append(format_transaction(index, tx, symbol))
    return "\n".join(lines)


def render_drift(
    drifts: list[BalanceDrift],
    symbol: str = Defaults.CURRENCY_SYMBOL,
) -> str:
    """verify 출력"""
    if not drifts:
        return "All balances match the transaction log."
    
    lines = [f"Balance drift detected for {len(drifts)} user(s):"]
    for drift in drifts:
        lines.append(
            f"  {drift.username:<10} stored {format_currency(drift.actual, symbol)}, "
            f"log {format_currency(drift.expected, symbol)}"
        )
    return "\n".join(lines)


def _header() -> str:
    """거래 표 헤더 (번호 칸 3자 포함)"""
    return f"   {'Name':<10} {'Type':<10} {'Amount':<13} {'Date':<13} Description"
