"""
Ledger 예외 정의

Storage / Service / Query 계층에서 공통으로 사용하는 도메인 예외.
하위 계층 예외(aiosqlite, OSError 등)는 `raise ... from e`로 연결한다.
"""


class LedgerError(Exception):
    """Ledger 예외 최상위 클래스"""

    pass


class StorageUnavailable(LedgerError):
    """DB 파일/디렉토리를 열거나 생성할 수 없음 (치명적)"""

    def __init__(self, message: str, db_path: str | None = None):
        super().__init__(message)
        self.db_path = db_path


class UserNotFound(LedgerError):
    """사용자 없음 (호출자가 create_user로 재시도 가능)"""

    def __init__(self, username: str | None = None, user_id: int | None = None):
        target = repr(username) if username is not None else f"id={user_id}"
        super().__init__(f"User not found: {target}")
        self.username = username
        self.user_id = user_id


class ConstraintViolation(LedgerError):
    """UNIQUE / FOREIGN KEY 제약 위반"""

    pass


class DuplicateUser(ConstraintViolation):
    """이미 존재하는 사용자 생성 시도 (상태 변경 없음)"""

    def __init__(self, username: str):
        super().__init__(f"User already exists: {username!r}")
        self.username = username


class InvalidAmount(LedgerError):
    """0, 음수, 정수가 아닌 금액 또는 알 수 없는 거래 유형"""

    def __init__(self, message: str, value: object = None):
        super().__init__(message)
        self.value = value


class MalformedTimestamp(LedgerError):
    """저장된 날짜 문자열 파싱 실패"""

    def __init__(self, value: object):
        super().__init__(f"Malformed timestamp: {value!r}")
        self.value = value


class LedgerDriftError(LedgerError):
    """잔액과 거래 로그 합계 불일치 (무결성 검사 실패)"""

    def __init__(self, drifts: list):
        usernames = ", ".join(d.username for d in drifts)
        super().__init__(f"Balance drift detected for: {usernames}")
        self.drifts = drifts
