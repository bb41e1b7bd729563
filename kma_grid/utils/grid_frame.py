# utils/grid_frame.py
from __future__ import annotations

import logging
from typing import Tuple

import numpy as np
import pandas as pd

from kma_grid.grid.constants import NX_MAX, NY_MAX, OLAT, OLON
from kma_grid.grid.errors import GridCoordinateOutOfBoundsError, InvalidGridIndexError
from kma_grid.grid.lcc import check_lonlat, lat_ok, lon_ok, project_unchecked, round_half_away, unproject

log = logging.getLogger(__name__)

ERRORS_MODES = ("raise", "coerce")


# ---------- 벡터 연산 (식은 grid.lcc 공용, 여기서는 마스크/에러 처리만) ----------
def _forward(lon: np.ndarray, lat: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """(x, y, 입력 유효 마스크, 격자 내부 마스크). 무효 행의 x/y는 NaN"""
    ok_in = lat_ok(lat) & lon_ok(lon)
    # 무효 행은 기준점으로 채워 계산만 통과시킴
    x, y = project_unchecked(np.where(ok_in, lon, OLON), np.where(ok_in, lat, OLAT))
    x = np.asarray(round_half_away(x))
    y = np.asarray(round_half_away(y))
    ok_grid = ok_in & (x >= 0) & (x <= NX_MAX) & (y >= 0) & (y <= NY_MAX)
    x = np.where(ok_in, x, np.nan)
    y = np.where(ok_in, y, np.nan)
    return x, y, ok_in, ok_grid


def _index_ok(nx: np.ndarray, ny: np.ndarray) -> np.ndarray:
    """유한한 정수값인지 (NaN, 소수 제외)"""
    with np.errstate(invalid="ignore"):
        return np.isfinite(nx) & np.isfinite(ny) & (nx == np.floor(nx)) & (ny == np.floor(ny))


def _cell_ok(nx: np.ndarray, ny: np.ndarray) -> np.ndarray:
    with np.errstate(invalid="ignore"):
        return _index_ok(nx, ny) & (nx >= 0) & (nx <= NX_MAX) & (ny >= 0) & (ny <= NY_MAX)


def grid_from_arrays(lon, lat) -> Tuple[np.ndarray, np.ndarray]:
    """
    경도/위도 배열 → (nx, ny) int64 배열.
    - 입력 범위 위반: OutOfRangeError (첫 위반 값 + 위반 개수)
    - 격자 밖: GridCoordinateOutOfBoundsError (첫 위반 격자 + 개수)
    """
    lon, lat = np.broadcast_arrays(np.asarray(lon, dtype=float), np.asarray(lat, dtype=float))
    check_lonlat(lon, lat)
    x, y, _, ok_grid = _forward(lon, lat)
    if not ok_grid.all():
        bad = ~ok_grid
        i = int(np.flatnonzero(bad.ravel())[0])
        raise GridCoordinateOutOfBoundsError(int(x.ravel()[i]), int(y.ravel()[i]), count=int(bad.sum()))
    return x.astype(np.int64), y.astype(np.int64)


def gcs_from_arrays(nx, ny) -> Tuple[np.ndarray, np.ndarray]:
    """
    (nx, ny) 배열 → (경도, 위도) deg 배열.
    - NaN/소수 인덱스: InvalidGridIndexError (KmaGrid(1.5, 2)와 같은 예외)
    - 격자 밖 인덱스: GridCoordinateOutOfBoundsError
    """
    nx, ny = np.broadcast_arrays(np.asarray(nx, dtype=float), np.asarray(ny, dtype=float))
    bad = ~_index_ok(nx, ny)
    if bad.any():
        i = int(np.flatnonzero(bad.ravel())[0])
        raise InvalidGridIndexError(
            f"grid index must be a finite integer, got ({nx.ravel()[i]}, {ny.ravel()[i]}) "
            f"({int(bad.sum())} offending values)"
        )
    bad = ~_cell_ok(nx, ny)
    if bad.any():
        i = int(np.flatnonzero(bad.ravel())[0])
        raise GridCoordinateOutOfBoundsError(int(nx.ravel()[i]), int(ny.ravel()[i]), count=int(bad.sum()))

    lon, lat = unproject(nx, ny)
    return np.asarray(lon), np.asarray(lat)


# ---------- DataFrame 헬퍼 ----------
def attach_grid(df: pd.DataFrame, lat_col: str = "lat", lon_col: str = "lon",
                errors: str = "raise") -> pd.DataFrame:
    """
    lat/lon 컬럼 → nx, ny (Int64) 컬럼 추가한 사본 반환.
    errors="coerce"면 범위 위반/격자 밖 행은 <NA>로 두고 경고만 남김.
    """
    if errors not in ERRORS_MODES:
        raise ValueError(f"errors must be one of {ERRORS_MODES}, got {errors!r}")
    need = {lat_col, lon_col}
    if not need.issubset(df.columns):
        raise KeyError(f"필요한 컬럼이 없습니다: {sorted(need - set(df.columns))}")

    lat = pd.to_numeric(df[lat_col], errors="coerce").to_numpy(dtype=float, na_value=np.nan)
    lon = pd.to_numeric(df[lon_col], errors="coerce").to_numpy(dtype=float, na_value=np.nan)

    out = df.copy()
    if errors == "raise":
        nx, ny = grid_from_arrays(lon, lat)
        out["nx"] = pd.array(nx, dtype="Int64")
        out["ny"] = pd.array(ny, dtype="Int64")
        return out

    x, y, ok_in, ok_grid = _forward(lon, lat)
    n_bad = int((~ok_grid).sum())
    if n_bad:
        log.warning("attach_grid: %d/%d rows outside the DFS grid or invalid (-> <NA>)", n_bad, len(df))
    out["nx"] = pd.array(np.where(ok_grid, x, np.nan), dtype="Float64").astype("Int64")
    out["ny"] = pd.array(np.where(ok_grid, y, np.nan), dtype="Float64").astype("Int64")
    return out


def attach_latlon(df: pd.DataFrame, nx_col: str = "nx", ny_col: str = "ny",
                  errors: str = "raise") -> pd.DataFrame:
    """
    nx/ny → 격자 중심 lat/lon 컬럼 추가 (기존 lat/lon은 덮어씀). 결측 행은 NaN.
    소수(60.9 등)/격자 밖 인덱스는 잘라내지 않음:
    errors="raise"면 예외, "coerce"면 NaN으로 두고 경고만 남김.
    """
    if errors not in ERRORS_MODES:
        raise ValueError(f"errors must be one of {ERRORS_MODES}, got {errors!r}")
    need = {nx_col, ny_col}
    if not need.issubset(df.columns):
        raise KeyError(f"필요한 컬럼이 없습니다: {sorted(need - set(df.columns))}")

    nx = pd.to_numeric(df[nx_col], errors="coerce").to_numpy(dtype=float, na_value=np.nan)
    ny = pd.to_numeric(df[ny_col], errors="coerce").to_numpy(dtype=float, na_value=np.nan)
    use = ~(np.isnan(nx) | np.isnan(ny))

    if errors == "coerce":
        bad = use & ~_cell_ok(nx, ny)
        if bad.any():
            log.warning("attach_latlon: %d/%d rows with invalid grid index (-> NaN)", int(bad.sum()), len(df))
        use = use & ~bad

    lon = np.full(len(df), np.nan)
    lat = np.full(len(df), np.nan)
    if use.any():
        lon[use], lat[use] = gcs_from_arrays(nx[use], ny[use])

    out = df.copy()
    out["lat"] = lat
    out["lon"] = lon
    return out


def unique_cells(df: pd.DataFrame, nx_col: str = "nx", ny_col: str = "ny") -> pd.DataFrame:
    """(nx, ny) 고유 호출 목록, 결측 격자 행은 제외"""
    return (
        df.dropna(subset=[nx_col, ny_col])
          .drop_duplicates([nx_col, ny_col])
          .reset_index(drop=True)
    )
