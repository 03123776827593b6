"""
유틸리티 모듈
좌표 거리 계산, 경로 단순화, 폴리라인 인코딩, 커서 페이지네이션 함수를 제공합니다.
"""

from .geometry import haversine_m, path_distance_m, douglas_peucker, calculate_path_bbox
from .polyline import encode_polyline, decode_polyline
from .pagination import clamp_limit, encode_cursor, decode_cursor, paginate

__all__ = [
    'haversine_m', 'path_distance_m', 'douglas_peucker', 'calculate_path_bbox',
    'encode_polyline', 'decode_polyline',
    'clamp_limit', 'encode_cursor', 'decode_cursor', 'paginate',
]
