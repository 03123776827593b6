# ============================================
# app/services/file_parsers.py - 운동 파일 파서
# ============================================
# GPX 파일에서 거리, 시간, 페이스, 상승 고도와 경로를 추출합니다.
# FIT 파일은 아직 지원하지 않으며 즉시 501 에러를 반환합니다.
# ============================================

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Optional

import gpxpy
import gpxpy.gpx

from app.core.exceptions import ValidationException, NotImplementedFeatureException
from app.utils.geometry import path_distance_m, douglas_peucker
from app.utils.polyline import encode_polyline

logger = logging.getLogger(__name__)

SIMPLIFY_TOLERANCE_M = 5.0


@dataclass
class ParsedWorkout:
    """파일에서 추출한 운동 요약"""
    distance: float                     # m
    duration: int                       # 초
    pace: Optional[float]               # 초/km
    elevation_gain: Optional[float]     # m
    start_time: datetime
    end_time: datetime
    point_count: int
    simplified: List[Dict[str, float]] = field(default_factory=list)
    polyline: str = ""


def _naive_utc(value: datetime) -> datetime:
    # DB에는 UTC naive datetime으로 저장
    if value.tzinfo is not None:
        value = (value - value.utcoffset()).replace(tzinfo=None)
    return value


def _elevation_gain(elevations: List[Optional[float]]) -> Optional[float]:
    """연속한 고도 값에서 오르막 합계를 구합니다. 고도가 없으면 None"""
    values = [e for e in elevations if e is not None]
    if len(values) < 2:
        return None
    gain = 0.0
    for prev, cur in zip(values, values[1:]):
        if cur > prev:
            gain += cur - prev
    return round(gain, 1)


def parse_gpx(content: bytes) -> ParsedWorkout:
    """
    GPX 파일을 파싱합니다.

    [처리 순서]
    1. gpxpy로 트랙 포인트 추출 (시간 정보가 있는 점만 사용)
    2. 하버사인 거리 합계, 첫/마지막 시각으로 시간 계산
    3. Douglas-Peucker(5m)로 경로 단순화 후 polyline 인코딩

    Raises:
        ValidationException: 형식 오류, 또는 시간 정보가 있는 점이 2개 미만 (400)
    """
    try:
        gpx = gpxpy.parse(content.decode("utf-8-sig"))
    except (gpxpy.gpx.GPXException, UnicodeDecodeError, ValueError) as e:
        logger.info(f"GPX parse failed: {e}")
        raise ValidationException(message="GPX 파일 형식이 올바르지 않습니다", field="file", reason="invalid_gpx")

    points = []
    for track in gpx.tracks:
        for segment in track.segments:
            for point in segment.points:
                if point.time is None:
                    continue
                points.append(point)

    if len(points) < 2:
        raise ValidationException(
            message="시간 정보가 있는 트랙 포인트가 2개 이상 필요합니다",
            field="file",
            reason="not_enough_points"
        )

    points.sort(key=lambda p: p.time)
    coords = [{"lat": p.latitude, "lng": p.longitude} for p in points]

    start_time = _naive_utc(points[0].time)
    end_time = _naive_utc(points[-1].time)
    duration = int((end_time - start_time).total_seconds())
    distance = round(path_distance_m(coords), 1)

    pace = None
    if distance > 0 and duration > 0:
        pace = round(duration / (distance / 1000), 1)

    simplified = douglas_peucker(coords, SIMPLIFY_TOLERANCE_M)

    logger.info(
        f"GPX parsed: points={len(points)} simplified={len(simplified)} "
        f"distance={distance}m duration={duration}s"
    )

    return ParsedWorkout(
        distance=distance,
        duration=duration,
        pace=pace,
        elevation_gain=_elevation_gain([p.elevation for p in points]),
        start_time=start_time,
        end_time=end_time,
        point_count=len(points),
        simplified=simplified,
        polyline=encode_polyline(simplified)
    )


def parse_fit(content: bytes) -> ParsedWorkout:
    """FIT 파일 파싱은 아직 지원하지 않습니다 (501)."""
    raise NotImplementedFeatureException("FIT 파일 파싱")


PARSERS = {
    "GPX": parse_gpx,
    "FIT": parse_fit,
}


def parse_workout_file(file_type: str, content: bytes) -> ParsedWorkout:
    parser = PARSERS.get(file_type.upper())
    if parser is None:
        raise ValidationException(message="지원하지 않는 파일 형식입니다", field="file_type", reason="unsupported")
    return parser(content)
