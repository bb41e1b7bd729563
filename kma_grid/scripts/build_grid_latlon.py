# scripts/build_grid_latlon.py
# 행정구역 중심점(lat, lon) → DFS 격자(nx, ny) 부여 + 고유 격자 테이블 생성
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from kma_grid.config import GridFileConfig
from kma_grid.utils.grid_frame import attach_grid, attach_latlon, unique_cells

log = logging.getLogger(__name__)


def _write(df: pd.DataFrame, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".parquet":
        df.to_parquet(path, index=False)
    else:
        df.to_csv(path, index=False, encoding="utf-8-sig")


def build(src: Path, out: Path, cells: Path, cfg: GridFileConfig) -> pd.DataFrame:
    """
    - src: 중심점 CSV (lat/lon 컬럼 필수)
    - out: nx/ny 붙인 중심점 CSV
    - cells: 고유 (nx, ny, lat, lon) 격자, lat/lon은 격자 중심(역변환)
    """
    cent = pd.read_csv(src, encoding="utf-8-sig")
    cent = attach_grid(cent, lat_col=cfg.lat_col, lon_col=cfg.lon_col, errors=cfg.errors)
    _write(cent, out)
    log.info("saved: %s rows=%d", out, len(cent))

    grid = unique_cells(cent)[["nx", "ny"]]
    grid = attach_latlon(grid, errors=cfg.errors)
    _write(grid, cells)
    log.info("saved: %s cells=%d (from %d rows)", cells, len(grid), len(cent))
    return grid


def main(argv: Optional[Sequence[str]] = None) -> int:
    cfg = GridFileConfig()
    parser = argparse.ArgumentParser(description="lat/lon -> KMA DFS grid (nx, ny)")
    parser.add_argument("--src", default=str(cfg.data_dir / "admin_centroids_raw.csv"))
    parser.add_argument("--out", default=str(cfg.data_dir / "admin_centroids.csv"))
    parser.add_argument("--cells", default=str(cfg.data_dir / "grid_latlon.parquet"))
    parser.add_argument("--errors", default=cfg.errors, choices=["raise", "coerce"])
    args = parser.parse_args(argv)
    cfg.errors = args.errors

    if not logging.getLogger().handlers:
        logging.basicConfig(level=cfg.log_level, format="[%(asctime)s] %(levelname)s - %(message)s")

    src = Path(args.src)
    if not src.exists():
        log.error("input not found: %s", src)
        return 1

    build(src, Path(args.out), Path(args.cells), cfg)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
