"""
기하학 계산 유틸리티
GPS 좌표 사이의 거리 계산과 경로 단순화(Douglas-Peucker) 알고리즘을 제공합니다.
"""

import logging
import math
from typing import List, Dict

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6_371_000.0


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    하버사인(Haversine) 공식으로 두 좌표 사이의 대원 거리를 계산합니다.

    Args:
        lat1, lng1: 첫 번째 점 (위도, 경도)
        lat2, lng2: 두 번째 점 (위도, 경도)

    Returns:
        float: 거리 (미터)

    Examples:
        >>> round(haversine_m(37.5665, 126.9780, 37.5665, 126.9780))
        0
    """
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def path_distance_m(path_coords: List[Dict[str, float]]) -> float:
    """연속한 점 사이 거리의 합 (미터)"""
    total = 0.0
    for prev, cur in zip(path_coords, path_coords[1:]):
        total += haversine_m(prev['lat'], prev['lng'], cur['lat'], cur['lng'])
    return total


def _to_local_xy(point: Dict[str, float], origin: Dict[str, float]) -> tuple:
    """
    origin 기준 평면 좌표(미터)로 변환합니다.
    러닝 경로 정도의 짧은 거리에서는 등장방형(equirectangular) 근사로 충분합니다.
    """
    x = math.radians(point['lng'] - origin['lng']) * math.cos(math.radians(origin['lat'])) * EARTH_RADIUS_M
    y = math.radians(point['lat'] - origin['lat']) * EARTH_RADIUS_M
    return x, y


def perpendicular_distance_m(
    point: Dict[str, float],
    start: Dict[str, float],
    end: Dict[str, float]
) -> float:
    """
    점에서 선분(start-end)까지의 최단 거리를 계산합니다.

    Args:
        point: 거리를 잴 점 {"lat", "lng"}
        start: 선분 시작점
        end: 선분 끝점

    Returns:
        float: 거리 (미터)
    """
    px, py = _to_local_xy(point, start)
    ex, ey = _to_local_xy(end, start)

    seg_len_sq = ex * ex + ey * ey
    if seg_len_sq == 0:
        # 시작점과 끝점이 같으면 점 사이 거리
        return math.hypot(px, py)

    # 선분 위로 투영한 위치 (0~1로 제한)
    t = max(0.0, min(1.0, (px * ex + py * ey) / seg_len_sq))
    return math.hypot(px - t * ex, py - t * ey)


def douglas_peucker(
    path_coords: List[Dict[str, float]],
    tolerance_m: float = 5.0
) -> List[Dict[str, float]]:
    """
    Douglas-Peucker 알고리즘으로 경로의 점 개수를 줄입니다.

    시작점과 끝점을 잇는 선분에서 가장 멀리 떨어진 점이 tolerance_m보다
    멀면 그 점을 기준으로 나누어 재귀적으로 처리하고, 아니면 중간 점을 모두 버립니다.
    시작점과 끝점은 항상 유지됩니다.

    Args:
        path_coords: 경로 좌표 리스트 [{"lat": float, "lng": float}, ...]
        tolerance_m: 허용 오차 (미터)

    Returns:
        List[Dict]: 단순화된 경로 좌표 리스트

    [신입 개발자를 위한 팁]
    - 재귀 대신 스택을 사용해서 긴 GPX 파일에서도 재귀 한도에 걸리지 않습니다.
    """
    n = len(path_coords)
    if n < 3:
        return list(path_coords)

    keep = [False] * n
    keep[0] = True
    keep[n - 1] = True

    stack = [(0, n - 1)]
    while stack:
        first, last = stack.pop()
        max_dist = 0.0
        index = None
        for i in range(first + 1, last):
            dist = perpendicular_distance_m(path_coords[i], path_coords[first], path_coords[last])
            if dist > max_dist:
                max_dist = dist
                index = i

        if index is not None and max_dist > tolerance_m:
            keep[index] = True
            stack.append((first, index))
            stack.append((index, last))

    simplified = [coord for coord, kept in zip(path_coords, keep) if kept]
    logger.debug(f"Douglas-Peucker: {n} -> {len(simplified)} points (tolerance={tolerance_m}m)")
    return simplified


def calculate_path_bbox(path_coords: List[Dict[str, float]]) -> Dict[str, float]:
    """
    경로의 Bounding Box를 계산합니다.

    Args:
        path_coords: 경로 좌표 리스트

    Returns:
        dict: {"min_lat": float, "max_lat": float, "min_lng": float, "max_lng": float}
    """
    if not path_coords:
        return {"min_lat": 0, "max_lat": 0, "min_lng": 0, "max_lng": 0}

    lats = [coord['lat'] for coord in path_coords]
    lngs = [coord['lng'] for coord in path_coords]

    return {
        "min_lat": min(lats),
        "max_lat": max(lats),
        "min_lng": min(lngs),
        "max_lng": max(lngs)
    }
