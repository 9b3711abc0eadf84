"""
타임스탬프 유틸리티

저장: 로컬 시간 + UTC 오프셋, 초 단위 정밀도 (예: 2026-02-21 01:00:00+09:00)
이전 버전 도구가 남긴 chrono 형식(나노초, 공백 오프셋)도 읽기 지원.

주의: 파싱 실패 시 현재 시간으로 대체하지 않고 MalformedTimestamp 발생
"""

import re
from datetime import datetime

from core.errors import MalformedTimestamp


# 예: 2024-05-01 10:20:30.123456789 +07:00
_LEGACY_TS_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d{1,9}))?"
    r" (?P<offset>[+-]\d{2}:?\d{2})$"
)


def now_local() -> datetime:
    """현재 로컬 시간 반환 (타임존 포함, 초 단위)
    
    Returns:
        현재 로컬 시간 (tzinfo=시스템 로컬 오프셋, microsecond=0)
    """
    return datetime.now().astimezone().replace(microsecond=0)


def format_ts(dt: datetime) -> str:
    """datetime을 저장용 문자열로 포맷
    
    Args:
        dt: datetime 객체 (naive면 로컬 시간으로 간주)
        
    Returns:
        "YYYY-MM-DD HH:MM:SS+HH:MM" 형식 문자열
        
    Example:
        >>> format_ts(datetime(2026, 2, 21, 1, 0, 0, tzinfo=timezone(timedelta(hours=9))))
        '2026-02-21 01:00:00+09:00'
    """
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.replace(microsecond=0).isoformat(sep=" ")


def parse_ts(value: str) -> datetime:
    """저장된 날짜 문자열을 datetime으로 변환
    
    ISO 8601 형식과 이전 버전의 chrono 형식 모두 허용.
    
    Args:
        value: DB에 저장된 날짜 문자열
        
    Returns:
        타임존 포함 datetime
        
    Raises:
        MalformedTimestamp: 형식이 잘못된 경우
    """
    if not isinstance(value, str) or not value.strip():
        raise MalformedTimestamp(value)
    
    text = value.strip()
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        dt = _parse_legacy(text)
    
    if dt.tzinfo is None:
        # 오프셋 없는 값은 로컬 시간으로 간주
        dt = dt.astimezone()
    return dt


def _parse_legacy(text: str) -> datetime:
    """chrono Local::now().to_string() 형식 파싱"""
    match = _LEGACY_TS_RE.match(text)
    if match is None:
        raise MalformedTimestamp(text)
    
    # 나노초는 마이크로초로 절삭
    frac = (match.group("frac") or "0")[:6].ljust(6, "0")
    offset = match.group("offset").replace(":", "")
    try:
        return datetime.strptime(
            f"{match.group('base')}.{frac} {offset}",
            "%Y-%m-%d %H:%M:%S.%f %z",
        )
    except ValueError as e:
        raise MalformedTimestamp(text) from e
