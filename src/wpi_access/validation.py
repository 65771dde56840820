"""
Argument validation helpers

모든 매니저가 공유하는 인자 검사 (실패 시 WpiLogicError)
"""

from typing import Any, Container

from .exceptions import WpiLogicError


def require_int(value: Any, name: str, operation: str, allow_bool: bool = False) -> int:
    """
    정수 타입 검사

    bool 은 int 의 하위 타입이지만 allow_bool=False 이면 거부한다.
    """
    if isinstance(value, bool) and not allow_bool:
        raise WpiLogicError(f"invalid type for {name}", operation)
    if not isinstance(value, int):
        raise WpiLogicError(f"invalid type for {name}", operation)
    return int(value)


def require_range(value: Any, name: str, operation: str, low: int, high: int) -> int:
    """low <= value <= high 정수 검사"""
    value = require_int(value, name, operation)
    if value < low or value > high:
        raise WpiLogicError(
            f"invalid value for {name} ({value}), use a value between {low} and {high}",
            operation
        )
    return value


def require_member(value: Any, name: str, operation: str, allowed: Container[int]) -> int:
    """허용된 정수 집합 검사"""
    value = require_int(value, name, operation)
    if value not in allowed:
        raise WpiLogicError(f"invalid value for {name} ({value})", operation)
    return value
