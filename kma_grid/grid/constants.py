# grid/constants.py
import math

# 기상청 DFS(5km) 격자 고정값. 투영 설정은 이 하나뿐
RE = 6371.00877  # 지구 반경(km)
GRID = 5.0       # 격자 간격(km)
RE_GRID = RE / GRID  # 격자 단위 지구 반경

SLAT1 = 30.0  # 표준위도 1 (deg)
SLAT2 = 60.0  # 표준위도 2 (deg)
OLON = 126.0  # 기준점 경도 (deg)
OLAT = 38.0   # 기준점 위도 (deg)
XO = 43       # 기준점 X 격자
YO = 136      # 기준점 Y 격자

# 격자 인덱스 범위 (양끝 포함)
NX_MAX = 149
NY_MAX = 253

DEGRAD = math.pi / 180.0
RADDEG = 180.0 / math.pi
