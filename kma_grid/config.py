# kma_grid/config.py
from dataclasses import dataclass
from pathlib import Path
import os

ROOT = Path(__file__).resolve().parent


@dataclass
class GridFileConfig:
    """격자 배치 변환 스크립트 설정 (환경변수는 import 시점에 읽음)"""
    data_dir: Path = Path(os.getenv("KMA_GRID_DATA_DIR", str(ROOT / "data")))

    # 입력 CSV 컬럼명
    lat_col: str = os.getenv("KMA_GRID_LAT_COL", "lat")
    lon_col: str = os.getenv("KMA_GRID_LON_COL", "lon")

    # raise | coerce (격자 밖 행 처리)
    errors: str = os.getenv("KMA_GRID_ERRORS", "coerce")
    log_level: str = os.getenv("KMA_GRID_LOG_LEVEL", "INFO").upper()
