"""
유틸리티 패키지

타임스탬프 포맷/파싱 등 공통 유틸리티
"""

from core.utils.timezone import (
    format_ts,
    now_local,
    parse_ts,
)

__all__ = [
    "format_ts",
    "now_local",
    "parse_ts",
]
