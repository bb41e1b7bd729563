# grid/lcc.py
from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

import numpy as np

from kma_grid.grid.constants import (
    DEGRAD, OLAT, OLON, RADDEG, RE_GRID, SLAT1, SLAT2, XO, YO,
)
from kma_grid.grid.errors import DegenerateInverseError, OutOfRangeError

# Lambert Conformal Conic (https://en.wikipedia.org/wiki/Lambert_conformal_conic_projection#Transformation)
# 표준위도 30/60, 기준점 126E/38N 고정
# 아래 함수들은 float / numpy 배열 모두 받음 → 단건(KmaGrid)과 배치(grid_frame)가 같은 식을 씀

LON_MIN, LON_MAX = -180.0, 360.0

# ra가 이보다 작으면 역변환 불가 (유효 격자에서는 도달하지 않음)
RA_EPS = 1e-9


@dataclass(frozen=True)
class LccConstants:
    n: float         # cone constant
    f: float         # scale factor
    rho_zero: float  # 기준위도 반경(격자 단위)


@lru_cache(maxsize=None)
def get_constants() -> LccConstants:
    slat1 = SLAT1 * DEGRAD
    slat2 = SLAT2 * DEGRAD

    n = math.tan(math.pi * 0.25 + slat2 * 0.5) / math.tan(math.pi * 0.25 + slat1 * 0.5)
    n = math.log(math.cos(slat1) / math.cos(slat2)) / math.log(n)
    f = math.tan(math.pi * 0.25 + slat1 * 0.5)
    f = (f ** n) * math.cos(slat1) / n
    rho_zero = float(_rho(OLAT * DEGRAD, n, f))
    return LccConstants(n=n, f=f, rho_zero=rho_zero)


def _scalar(v):
    # 0-d 결과는 float로 돌려줌
    return float(v) if np.ndim(v) == 0 else v


def _rho(lat_rad, n: float, f: float):
    # 기준점과 임의 위도가 같은 식을 거쳐야 (126, 38) -> (43, 136)이 정확히 성립
    t = np.tan(np.pi * 0.25 + np.asarray(lat_rad, dtype=float) * 0.5)
    return RE_GRID * f / (t ** n)


def rho(lat_rad, consts: LccConstants | None = None):
    c = consts or get_constants()
    return _scalar(_rho(lat_rad, c.n, c.f))


def normalize_theta(raw):
    """한 바퀴 이내 입력만 가정: ±2π 한 번만 보정해 (-π, π]로"""
    raw = np.asarray(raw, dtype=float)
    out = np.where(raw > np.pi, raw - 2.0 * np.pi, raw)
    out = np.where(out <= -np.pi, out + 2.0 * np.pi, out)
    return _scalar(out)


def round_half_away(v):
    # round()는 banker's rounding → 0.5는 0에서 먼 쪽으로
    v = np.asarray(v, dtype=float)
    return _scalar(np.copysign(np.floor(np.abs(v) + 0.5), v))


# ---------- 입력 검증 ----------
def lat_ok(latitude):
    """-90 < lat <= 90 (남극은 tan(0)^n = 0 으로 특이점), NaN/inf 제외"""
    lat = np.asarray(latitude, dtype=float)
    with np.errstate(invalid="ignore"):
        return np.isfinite(lat) & (lat > -90.0) & (lat <= 90.0)


def lon_ok(longitude):
    """-180 <= lon <= 360: 기준 경도 126에서 한 바퀴 이내 → 1회 보정으로 충분"""
    lon = np.asarray(longitude, dtype=float)
    with np.errstate(invalid="ignore"):
        return np.isfinite(lon) & (lon >= LON_MIN) & (lon <= LON_MAX)


def check_lonlat(longitude, latitude) -> None:
    """
    입력 위경도 검증 (배열이면 원소 전체).
    위반 시 첫 위반 값과 위반 개수를 담은 OutOfRangeError.
    """
    lon, lat = np.broadcast_arrays(np.asarray(longitude, dtype=float), np.asarray(latitude, dtype=float))
    bad_lat = ~lat_ok(lat)
    if bad_lat.any():
        i = int(np.flatnonzero(bad_lat.ravel())[0])
        raise OutOfRangeError("latitude", float(lat.ravel()[i]), "(-90, 90]", count=int(bad_lat.sum()))
    bad_lon = ~lon_ok(lon)
    if bad_lon.any():
        i = int(np.flatnonzero(bad_lon.ravel())[0])
        raise OutOfRangeError("longitude", float(lon.ravel()[i]), f"[{LON_MIN:g}, {LON_MAX:g}]",
                              count=int(bad_lon.sum()))


# ---------- 정방향 / 역방향 ----------
def project_unchecked(longitude, latitude, consts: LccConstants | None = None):
    """검증 없이 위경도(deg) → 연속 평면 좌표. 호출 측에서 check_lonlat / 마스크 처리"""
    c = consts or get_constants()
    lon = np.asarray(longitude, dtype=float)
    lat = np.asarray(latitude, dtype=float)

    ra = _rho(lat * DEGRAD, c.n, c.f)
    theta = np.asarray(normalize_theta(lon * DEGRAD - OLON * DEGRAD))
    theta = theta * c.n

    x = ra * np.sin(theta) + XO
    y = c.rho_zero - ra * np.cos(theta) + YO
    return _scalar(x), _scalar(y)


def project(longitude, latitude) -> Tuple[float, float]:
    """
    위경도(deg) → 연속 평면 좌표 (격자 단위, 반올림 전).
    반환값의 (XO, YO)가 기준점.
    """
    check_lonlat(longitude, latitude)
    return project_unchecked(longitude, latitude)


def unproject(x, y, consts: LccConstants | None = None):
    """
    평면 좌표(격자 단위) → (경도, 위도) deg.
    - n == 0: 고정 표준위도에서는 불가능. 발생하면 상수가 잘못 바뀐 것
    - ra < RA_EPS (원뿔 꼭짓점) 또는 유한하지 않은 결과: DegenerateInverseError
    """
    c = consts or get_constants()
    if c.n == 0.0:
        raise DegenerateInverseError("cone constant n is zero; projection constants are inconsistent")

    xn = np.asarray(x, dtype=float) - XO
    yn = c.rho_zero - (np.asarray(y, dtype=float) - YO)
    ra = np.sqrt(xn ** 2 + yn ** 2)
    if (ra < RA_EPS).any():
        raise DegenerateInverseError("grid cell sits on the cone apex")

    alat = 2.0 * np.arctan((RE_GRID * c.f / ra) ** (1.0 / c.n)) - np.pi * 0.5
    # yn == 0 이면 ±π/2 (xn 부호)
    theta = np.where(yn == 0.0, np.where(xn < 0.0, -np.pi * 0.5, np.pi * 0.5), np.arctan2(xn, yn))
    alon = theta / c.n + OLON * DEGRAD

    lon, lat = alon * RADDEG, alat * RADDEG
    if not (np.isfinite(lon).all() and np.isfinite(lat).all()):
        raise DegenerateInverseError("grid cell has no finite inverse")
    return _scalar(lon), _scalar(lat)
