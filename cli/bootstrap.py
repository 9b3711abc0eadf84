"""
CLI Bootstrap

인자 파싱, 설정 로드, DB 연결 생성 후 Ledger 호출.
DB 연결은 프로세스당 1개를 만들어 서비스/조회 객체에 전달.

명령:
    utang pay <name> <amount> [description]
    utang receive <name> <amount> [description]
    utang lend <name> <amount> [description]
    utang borrow <name> <amount> [description]
    utang check [name] [range]
    utang verify
"""

import argparse
import asyncio
import logging
import sys
from typing import Callable, TextIO

from adapters.db.sqlite_adapter import SQLiteAdapter
from cli.formatters import format_currency, render_drift, render_history, render_user
from core.config.loader import ConfigLoadError, Settings, load_settings
from core.constants import Defaults
from core.errors import LedgerError, UserNotFound
from core.ledger import (
    BalanceReconciler,
    LedgerQuery,
    LedgerService,
    TransactionKind,
    initialize,
)
from core.logging import setup_logging

logger = logging.getLogger("cli")

__version__ = "1.0.0"

# 명령별 완료 메시지 동사
ACTION_VERBS: dict[TransactionKind, str] = {
    TransactionKind.PAY: "Paying",
    TransactionKind.RECEIVE: "Receiving",
    TransactionKind.LEND: "Lending",
    TransactionKind.BORROW: "Borrowing",
}

# 명령별 도움말
ACTION_HELP: dict[TransactionKind, str] = {
    TransactionKind.PAY: "Pay a certain amount to a user",
    TransactionKind.RECEIVE: "Receive a certain amount from a user",
    TransactionKind.LEND: "Lend a certain amount to a user",
    TransactionKind.BORROW: "Borrow a certain amount from a user",
}

CREATE_PROMPT = "This person is not in the database, do you want to add them? y/n "

# 종료 코드
EXIT_OK = 0
EXIT_ERROR = 1


def parse_amount(value: str) -> int:
    """금액 인자 파싱 (양의 정수, 천 단위 구분 쉼표 허용)"""
    try:
        amount = int(value.replace(",", ""))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid amount: {value!r}")
    if amount <= 0:
        raise argparse.ArgumentTypeError(f"amount must be positive: {value!r}")
    return amount


def parse_name(value: str) -> str:
    """사용자 이름 인자 파싱 (공백만 있는 이름 거부)"""
    if not value.strip():
        raise argparse.ArgumentTypeError("name must not be blank")
    return value


def parse_range(value: str) -> int:
    """조회 개수 인자 파싱 (0 이상 정수)"""
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid range: {value!r}")
    if count < 0:
        raise argparse.ArgumentTypeError(f"range must not be negative: {value!r}")
    return count


def build_parser() -> argparse.ArgumentParser:
    """argparse 파서 생성"""
    parser = argparse.ArgumentParser(
        prog=Defaults.APP_NAME,
        description="Cli tool for managing debt",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="config.yaml 경로")
    parser.add_argument("--db", help="DB 파일 경로 (설정보다 우선)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    for kind in TransactionKind:
        sub = subparsers.add_parser(kind.value, help=ACTION_HELP[kind])
        sub.add_argument("name", type=parse_name)
        sub.add_argument("amount", type=parse_amount)
        sub.add_argument("description", nargs="?", default=Defaults.DESCRIPTION)
        sub.set_defaults(kind=kind)

    check = subparsers.add_parser("check", help="Check balance or transactions info")
    check.add_argument("name", nargs="?")
    check.add_argument("range", nargs="?", type=parse_range)

    subparsers.add_parser("verify", help="Compare balances with the transaction log")

    return parser


class CliApp:
    """CLI 명령 실행기

    Args:
        settings: 애플리케이션 설정
        db: 연결된 SQLiteAdapter
        out: 출력 스트림
        prompt: 사용자 입력 함수 (테스트에서 교체)
    """

    def __init__(
        self,
        settings: Settings,
        db: SQLiteAdapter,
        out: TextIO | None = None,
        prompt: Callable[[str], str] = input,
    ):
        self.settings = settings
        self.service = LedgerService(db)
        self.query = LedgerQuery(
            db,
            check_limit=settings.check_limit,
            history_limit=settings.history_limit,
        )
        self.reconciler = BalanceReconciler(db)
        self.out = out if out is not None else sys.stdout
        self.prompt = prompt

    async def run(self, args: argparse.Namespace) -> int:
        """명령 실행 후 종료 코드 반환"""
        if args.command == "check":
            return await self.check(args.name, args.range)
        if args.command == "verify":
            return await self.verify()
        return await self.transact(args.kind, args.name, args.amount, args.description)

    async def transact(
        self,
        kind: TransactionKind,
        name: str,
        amount: int,
        description: str,
    ) -> int:
        """pay / receive / lend / borrow"""
        try:
            await self.service.apply_transaction(name, amount, kind, description)
        except UserNotFound:
            return await self._offer_create(kind, name, amount, description)

        self._print(f"{ACTION_VERBS[kind]} {name} {self._money(amount)}")
        return EXIT_OK

    async def check(self, name: str | None, limit: int | None) -> int:
        """check [name] [range]"""
        if name is None:
            transactions = await self.query.history(limit)
            self._print(render_history(transactions, self.settings.currency_symbol))
            return EXIT_OK

        result = await self.query.check(name, limit)
        self._print(render_user(result, self.settings.currency_symbol))
        return EXIT_OK

    async def verify(self) -> int:
        """잔액 정합 검사"""
        drifts = await self.reconciler.find_drift()
        self._print(render_drift(drifts, self.settings.currency_symbol))
        return EXIT_ERROR if drifts else EXIT_OK

    async def _offer_create(
        self,
        kind: TransactionKind,
        name: str,
        amount: int,
        description: str,
    ) -> int:
        """없는 사용자 생성 여부 확인 후 같은 유형/금액/설명으로 생성"""
        if not self._confirm(CREATE_PROMPT):
            self._print(f"{name} was not added.")
            return EXIT_OK

        user = await self.service.create_user(name, amount, kind, description)
        self._print(
            f"Created {user.username} with balance {self._money(user.balance)}"
        )
        return EXIT_OK

    def _confirm(self, message: str) -> bool:
        """y/n 입력 (y만 승인, EOF는 거부)"""
        self.out.write(message + "\n")
        self.out.flush()
        try:
            answer = self.prompt(">> ")
        except EOFError:
            return False
        return answer.strip().lower() == "y"

    def _money(self, amount: int) -> str:
        return format_currency(amount, self.settings.currency_symbol)

    def _print(self, text: str) -> None:
        self.out.write(text + "\n")


async def main(
    argv: list[str] | None = None,
    out: TextIO | None = None,
    prompt: Callable[[str], str] = input,
    configure_logging: bool = True,
) -> int:
    """CLI 메인 함수

    Returns:
        종료 코드 (0 성공, 1 도메인 오류, 2 인자 오류는 argparse가 처리)
    """
    args = build_parser().parse_args(argv)

    # 1. 설정 로드
    try:
        settings = load_settings(args.config)
    except ConfigLoadError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR

    if configure_logging:
        setup_logging(
            Defaults.APP_NAME,
            file_level=settings.log_level_no,
            log_dir=settings.log_dir,
        )

    db_path = args.db or settings.db_path

    # 2. DB 연결 및 스키마 초기화
    try:
        db = await initialize(db_path)
    except LedgerError as e:
        logger.error(f"DB 초기화 실패: {e}")
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR

    # 3. 명령 실행
    try:
        app = CliApp(settings, db, out=out, prompt=prompt)
        return await app.run(args)
    except LedgerError as e:
        logger.error(f"{args.command} 실패: {e}")
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR
    finally:
        await db.close()


def run() -> None:
    """콘솔 스크립트 진입점"""
    sys.exit(asyncio.run(main()))
