"""
geometry.py 모듈의 단위 테스트
좌표 거리 계산과 Douglas-Peucker 경로 단순화의 동작을 검증합니다.
"""

import unittest
from app.utils.geometry import (
    haversine_m, path_distance_m, perpendicular_distance_m,
    douglas_peucker, calculate_path_bbox
)


class TestHaversine(unittest.TestCase):
    """하버사인 거리 테스트"""

    def test_same_point(self):
        """같은 점은 거리 0"""
        self.assertEqual(haversine_m(37.5665, 126.9780, 37.5665, 126.9780), 0)

    def test_one_degree_latitude(self):
        """위도 1도는 약 111km"""
        dist = haversine_m(0, 0, 1, 0)
        self.assertAlmostEqual(dist, 111_195, delta=50)

    def test_symmetric(self):
        """A→B와 B→A 거리는 같아야 합니다"""
        a = haversine_m(37.55, 126.97, 37.56, 126.99)
        b = haversine_m(37.56, 126.99, 37.55, 126.97)
        self.assertAlmostEqual(a, b, places=6)


class TestPathDistance(unittest.TestCase):
    """경로 총 거리 테스트"""

    def test_empty_and_single_point(self):
        """점이 0~1개면 거리 0"""
        self.assertEqual(path_distance_m([]), 0)
        self.assertEqual(path_distance_m([{"lat": 37.5, "lng": 127.0}]), 0)

    def test_sum_of_segments(self):
        """구간 거리의 합"""
        path = [
            {"lat": 0.0, "lng": 0.0},
            {"lat": 0.001, "lng": 0.0},
            {"lat": 0.002, "lng": 0.0},
        ]
        expected = haversine_m(0, 0, 0.001, 0) * 2
        self.assertAlmostEqual(path_distance_m(path), expected, places=3)


class TestPerpendicularDistance(unittest.TestCase):
    """점-선분 거리 테스트"""

    def test_point_on_segment(self):
        """선분 위의 점은 거리 0에 가까움"""
        start = {"lat": 37.5, "lng": 127.0}
        end = {"lat": 37.5, "lng": 127.01}
        mid = {"lat": 37.5, "lng": 127.005}
        self.assertLess(perpendicular_distance_m(mid, start, end), 0.5)

    def test_degenerate_segment(self):
        """시작점과 끝점이 같으면 점 사이 거리"""
        start = {"lat": 37.5, "lng": 127.0}
        point = {"lat": 37.501, "lng": 127.0}
        dist = perpendicular_distance_m(point, start, start)
        self.assertAlmostEqual(dist, haversine_m(37.5, 127.0, 37.501, 127.0), delta=1)


class TestDouglasPeucker(unittest.TestCase):
    """경로 단순화 테스트"""

    def test_short_path_unchanged(self):
        """점이 3개 미만이면 그대로"""
        path = [{"lat": 37.5, "lng": 127.0}, {"lat": 37.6, "lng": 127.1}]
        self.assertEqual(douglas_peucker(path), path)

    def test_straight_line_collapses(self):
        """일직선 위의 중간 점은 모두 제거"""
        path = [{"lat": 37.5, "lng": 127.0 + i * 0.0001} for i in range(20)]
        simplified = douglas_peucker(path, tolerance_m=1.0)
        self.assertEqual(simplified, [path[0], path[-1]])

    def test_corner_is_kept(self):
        """꺾이는 점은 유지"""
        path = [
            {"lat": 37.5, "lng": 127.0},
            {"lat": 37.5, "lng": 127.001},
            {"lat": 37.5, "lng": 127.002},
            {"lat": 37.501, "lng": 127.002},
            {"lat": 37.502, "lng": 127.002},
        ]
        simplified = douglas_peucker(path, tolerance_m=5.0)
        self.assertIn(path[2], simplified)
        self.assertEqual(simplified[0], path[0])
        self.assertEqual(simplified[-1], path[-1])
        self.assertEqual(len(simplified), 3)

    def test_long_path_does_not_recurse(self):
        """긴 지그재그 경로도 처리"""
        path = [
            {"lat": 37.5 + (0.001 if i % 2 else 0), "lng": 127.0 + i * 0.001}
            for i in range(1500)
        ]
        simplified = douglas_peucker(path, tolerance_m=5.0)
        self.assertEqual(len(simplified), 1500)


class TestBoundingBox(unittest.TestCase):
    """Bounding Box 테스트"""

    def test_empty(self):
        self.assertEqual(calculate_path_bbox([]), {"min_lat": 0, "max_lat": 0, "min_lng": 0, "max_lng": 0})

    def test_bbox(self):
        path = [{"lat": 37.5, "lng": 127.1}, {"lat": 37.4, "lng": 127.3}, {"lat": 37.6, "lng": 127.2}]
        self.assertEqual(
            calculate_path_bbox(path),
            {"min_lat": 37.4, "max_lat": 37.6, "min_lng": 127.1, "max_lng": 127.3}
        )


if __name__ == "__main__":
    unittest.main()
