"""
Google Encoded Polyline 인코더/디코더

운동 경로를 문자열 하나로 압축해 DB에 저장하고 지도 SDK에 그대로 넘기기 위해 사용합니다.
(정밀도 5자리, 약 1.1m)
"""

from typing import List, Dict

PRECISION = 5


def _encode_value(value: int) -> str:
    # 부호 비트를 최하위로 옮긴 뒤 5비트씩 잘라서 63을 더함
    value = ~(value << 1) if value < 0 else (value << 1)
    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1f)) + 63))
        value >>= 5
    chunks.append(chr(value + 63))
    return "".join(chunks)


def encode_polyline(path_coords: List[Dict[str, float]], precision: int = PRECISION) -> str:
    """
    좌표 리스트를 encoded polyline 문자열로 변환합니다.

    Args:
        path_coords: [{"lat": float, "lng": float}, ...]
        precision: 소수점 자리수

    Returns:
        str: encoded polyline (빈 리스트면 빈 문자열)

    Examples:
        >>> encode_polyline([{"lat": 38.5, "lng": -120.2}, {"lat": 40.7, "lng": -120.95}])
        '_p~iF~ps|U_ulLnnqC'
    """
    factor = 10 ** precision
    result = []
    prev_lat = 0
    prev_lng = 0

    for coord in path_coords:
        lat = int(round(coord['lat'] * factor))
        lng = int(round(coord['lng'] * factor))
        result.append(_encode_value(lat - prev_lat))
        result.append(_encode_value(lng - prev_lng))
        prev_lat, prev_lng = lat, lng

    return "".join(result)


def decode_polyline(encoded: str, precision: int = PRECISION) -> List[Dict[str, float]]:
    """encoded polyline 문자열을 좌표 리스트로 되돌립니다."""
    factor = 10 ** precision
    coords = []
    index = 0
    lat = 0
    lng = 0

    while index < len(encoded):
        deltas = []
        for _ in range(2):
            shift = 0
            result = 0
            while True:
                byte = ord(encoded[index]) - 63
                index += 1
                result |= (byte & 0x1f) << shift
                shift += 5
                if byte < 0x20:
                    break
            deltas.append(~(result >> 1) if result & 1 else (result >> 1))
        lat += deltas[0]
        lng += deltas[1]
        coords.append({"lat": lat / factor, "lng": lng / factor})

    return coords
