# grid/errors.py


def _with_count(msg: str, count: int) -> str:
    return f"{msg} ({count} offending values)" if count > 1 else msg


class KmaGridError(ValueError):
    """격자 변환 실패 공통 예외"""


class OutOfRangeError(KmaGridError):
    """입력 위경도가 허용 범위를 벗어남"""

    def __init__(self, name: str, value: float, bounds: str, count: int = 1):
        self.name = name
        self.value = value
        self.count = count
        super().__init__(_with_count(f"{name}={value!r} is outside {bounds}", count))


class GridCoordinateOutOfBoundsError(KmaGridError):
    """격자 좌표가 0~NX_MAX / 0~NY_MAX 범위를 벗어남"""

    def __init__(self, x, y, count: int = 1):
        self.x = x
        self.y = y
        self.count = count
        super().__init__(_with_count(f"grid cell ({x}, {y}) is outside the DFS grid", count))


class InvalidGridIndexError(KmaGridError, TypeError):
    """격자 인덱스가 정수가 아님 (NaN, 소수, bool 등)"""


class DegenerateInverseError(KmaGridError):
    """역변환 결과가 유한한 위경도가 아님"""
