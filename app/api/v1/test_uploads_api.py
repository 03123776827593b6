"""
업로드 API 테스트
presign → PUT → parse 흐름과 저장소 경로 검사를 검증합니다.
"""

import unittest
from unittest.mock import patch

from app.config import settings
from app.core.exceptions import FileNotFoundInStorageException
from app.db.testing import ApiTestCase
from app.models.workout import WorkoutFile

SAMPLE_GPX = b"""<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">
  <trk><name>Morning Run</name><trkseg>
    <trkpt lat="37.5000" lon="127.0000"><ele>10</ele><time>2026-05-01T07:00:00Z</time></trkpt>
    <trkpt lat="37.5000" lon="127.0050"><ele>14</ele><time>2026-05-01T07:02:00Z</time></trkpt>
    <trkpt lat="37.5000" lon="127.0100"><ele>12</ele><time>2026-05-01T07:04:00Z</time></trkpt>
    <trkpt lat="37.5050" lon="127.0100"><ele>20</ele><time>2026-05-01T07:06:00Z</time></trkpt>
    <trkpt lat="37.5050" lon="127.0200"><time>2026-05-01T07:10:00Z</time></trkpt>
  </trkseg></trk>
</gpx>
"""


class TestUploadsApi(ApiTestCase):
    """업로드 / 파싱 API 테스트"""

    def setUp(self):
        super().setUp()
        self.user = self.create_user("runner")
        self.headers = self.auth_headers(self.user)

    def presign(self, filename="run.gpx", content_type="application/octet-stream", folder="workouts") -> dict:
        response = self.client.post(
            self.api("/uploads/presign"),
            json={"filename": filename, "content_type": content_type, "folder": folder},
            headers=self.headers
        )
        self.assertEqual(response.status_code, 200, response.text)
        return self.data(response)

    def upload(self, content: bytes, **kwargs) -> str:
        key = self.presign(**kwargs)["key"]
        response = self.client.put(self.api(f"/uploads/disk/{key}"), content=content)
        self.assertEqual(response.status_code, 200, response.text)
        return key

    def parse(self, key: str, file_type="GPX"):
        return self.client.post(
            self.api("/uploads/parse"),
            json={"file_key": key, "file_type": file_type, "original_file_name": "아침 러닝.gpx"},
            headers=self.headers
        )

    def test_presign_key_format(self):
        data = self.presign(filename="my run.gpx")
        folder, owner, name = data["key"].split("/")
        self.assertEqual(folder, "workouts")
        self.assertEqual(owner, self.user.id)
        self.assertTrue(name.endswith("-my_run.gpx"))
        self.assertTrue(data["upload_url"].endswith(f"/uploads/disk/{data['key']}"))
        self.assertTrue(data["public_url"].endswith(f"/disk-files/{data['key']}"))

    def test_presign_rejects_binary_in_images(self):
        response = self.client.post(
            self.api("/uploads/presign"),
            json={"filename": "a.bin", "content_type": "application/octet-stream", "folder": "images"},
            headers=self.headers
        )
        self.assertEqual(response.status_code, 400)

    def test_upload_and_serve(self):
        key = self.upload(b"\x89PNG fake", filename="p.png", content_type="image/png", folder="images")
        response = self.client.get(self.api(f"/disk-files/{key}"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b"\x89PNG fake")
        self.assertEqual(response.headers["content-type"], "image/png")

    def test_serve_missing_file(self):
        response = self.client.get(self.api("/disk-files/images/nobody/none.png"))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.error_code(response), "FILE_NOT_FOUND")

    def test_upload_too_large(self):
        key = self.presign()["key"]
        with patch.object(settings, "MAX_UPLOAD_SIZE_MB", 0):
            response = self.client.put(self.api(f"/uploads/disk/{key}"), content=b"1")
        self.assertEqual(response.status_code, 413)

    def test_parse_gpx_creates_workout(self):
        key = self.upload(SAMPLE_GPX)
        response = self.parse(key)
        self.assertEqual(response.status_code, 201, response.text)
        data = self.data(response)

        workout = data["workout"]
        self.assertEqual(workout["source"], "GPX")
        self.assertEqual(workout["duration"], 600)
        self.assertGreater(workout["distance"], 2300)
        self.assertLess(workout["distance"], 2340)
        self.assertEqual(workout["elevation_gain"], 12.0)
        self.assertEqual(workout["title"], "아침 러닝")
        self.assertTrue(workout["route_polyline"])
        self.assertEqual(data["point_count"], 5)
        self.assertLessEqual(data["simplified_point_count"], 5)

        stored = self.db.query(WorkoutFile).one()
        self.assertEqual(stored.workout_id, workout["id"])

    def test_parse_fit_not_implemented(self):
        key = self.upload(b"fit-bytes", filename="run.fit")
        response = self.parse(key, file_type="FIT")
        self.assertEqual(response.status_code, 501)
        self.assertEqual(self.error_code(response), "NOT_IMPLEMENTED")

    def test_parse_invalid_gpx(self):
        key = self.upload(b"<gpx><broken")
        response = self.parse(key)
        self.assertEqual(response.status_code, 400)

    def test_parse_other_users_file(self):
        other = self.create_user("other")
        response = self.parse(f"workouts/{other.id}/1-run.gpx")
        self.assertEqual(response.status_code, 403)

    def test_parse_missing_file(self):
        response = self.parse(f"workouts/{self.user.id}/1-run.gpx")
        self.assertEqual(response.status_code, 404)

    def test_delete_file(self):
        key = self.upload(SAMPLE_GPX)
        other = self.create_user("other")
        response = self.client.delete(self.api(f"/uploads/{key}"), headers=self.auth_headers(other))
        self.assertEqual(response.status_code, 403)
        response = self.client.delete(self.api(f"/uploads/{key}"), headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(self.storage.exists(key))

    def test_storage_rejects_keys_outside_root(self):
        """../ 가 섞인 키는 저장소 밖으로 나갈 수 없음"""
        for key in ("../secret.txt", "images/../../etc/passwd", ""):
            with self.assertRaises(FileNotFoundInStorageException):
                self.storage.resolve(key)


if __name__ == "__main__":
    unittest.main()
