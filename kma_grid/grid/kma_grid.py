# grid/kma_grid.py
from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Tuple

from kma_grid.grid import lcc
from kma_grid.grid.constants import NX_MAX, NY_MAX
from kma_grid.grid.errors import GridCoordinateOutOfBoundsError, InvalidGridIndexError
from kma_grid.grid.lcc import get_constants, project, unproject


def round_half_away(v: float) -> int:
    return int(lcc.round_half_away(v))


def in_grid(x: int, y: int) -> bool:
    return 0 <= x <= NX_MAX and 0 <= y <= NY_MAX


@dataclass(frozen=True)
class KmaGrid:
    """
    기상청 DFS 5km 격자 좌표 (nx=x, ny=y).
    - x: 0 ~ 149, y: 0 ~ 253
    - 투영 정보는 모듈 상수에 고정, 값 자체는 (x, y)만 가짐
    """
    x: int
    y: int

    def __post_init__(self):
        for v in (self.x, self.y):
            if isinstance(v, bool) or not isinstance(v, numbers.Integral):
                raise InvalidGridIndexError(f"grid index must be int, got {type(v).__name__}")
        # numpy 정수도 받되 내부는 int로 통일
        object.__setattr__(self, "x", int(self.x))
        object.__setattr__(self, "y", int(self.y))
        if not in_grid(self.x, self.y):
            raise GridCoordinateOutOfBoundsError(self.x, self.y)

    @classmethod
    def from_gcs(cls, longitude: float, latitude: float) -> "KmaGrid":
        """위경도(deg) → 격자. 격자 밖이면 GridCoordinateOutOfBoundsError"""
        px, py = project(float(longitude), float(latitude))
        return cls(round_half_away(px), round_half_away(py))

    def to_gcs(self) -> Tuple[float, float]:
        """격자 → (경도, 위도) deg"""
        return unproject(self.x, self.y, get_constants())

    def as_tuple(self) -> Tuple[int, int]:
        return self.x, self.y


def forward(longitude: float, latitude: float) -> KmaGrid:
    return KmaGrid.from_gcs(longitude, latitude)


def inverse(grid: KmaGrid) -> Tuple[float, float]:
    return grid.to_gcs()


# 기존 수집기 호환: 위도 먼저 받아 (nx, ny) 반환
def latlon_to_grid(lat: float, lon: float) -> Tuple[int, int]:
    return KmaGrid.from_gcs(lon, lat).as_tuple()
