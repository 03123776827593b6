"""
운동 기록 API 테스트
"""

import unittest

from app.db.testing import ApiTestCase
from app.models.social import Follow, Block, FOLLOW_ACCEPTED


class TestWorkoutsApi(ApiTestCase):
    """운동 기록 CRUD / 공개 범위 테스트"""

    def setUp(self):
        super().setUp()
        self.owner = self.create_user("owner")
        self.viewer = self.create_user("viewer")

    def create(self, **overrides) -> dict:
        body = {"distance": 10000, "duration": 3000, "date": "2026-05-01T07:00:00", "title": "아침 러닝"}
        body.update(overrides)
        response = self.client.post(self.api("/workouts"), json=body, headers=self.auth_headers(self.owner))
        self.assertEqual(response.status_code, 201, response.text)
        return self.data(response)

    def test_create_calculates_pace(self):
        workout = self.create()
        self.assertEqual(workout["pace"], 300.0)
        self.assertEqual(workout["source"], "MANUAL")
        self.assertEqual(workout["user"]["id"], self.owner.id)

    def test_default_visibility_from_profile(self):
        """visibility를 생략하면 프로필 기본값(FOLLOWERS)"""
        self.assertEqual(self.create()["visibility"], "FOLLOWERS")
        self.assertEqual(self.create(visibility="PUBLIC")["visibility"], "PUBLIC")

    def test_invalid_values(self):
        headers = self.auth_headers(self.owner)
        for body in (
            {"distance": 0, "duration": 100, "date": "2026-05-01T07:00:00"},
            {"distance": 1000, "duration": 0, "date": "2026-05-01T07:00:00"},
            {"distance": 1000, "duration": 100, "date": "2026-05-01T07:00:00", "visibility": "FRIENDS"},
        ):
            response = self.client.post(self.api("/workouts"), json=body, headers=headers)
            self.assertEqual(response.status_code, 422)

    def test_followers_workout_visibility(self):
        workout = self.create(visibility="FOLLOWERS")
        path = self.api(f"/workouts/{workout['id']}")

        self.assertEqual(self.client.get(path).status_code, 403)
        self.assertEqual(self.client.get(path, headers=self.auth_headers(self.viewer)).status_code, 403)

        self.db.add(Follow(follower_id=self.viewer.id, following_id=self.owner.id, status=FOLLOW_ACCEPTED))
        self.db.commit()
        self.assertEqual(self.client.get(path, headers=self.auth_headers(self.viewer)).status_code, 200)

    def test_private_workout_owner_only(self):
        workout = self.create(visibility="PRIVATE")
        path = self.api(f"/workouts/{workout['id']}")
        self.assertEqual(self.client.get(path, headers=self.auth_headers(self.owner)).status_code, 200)
        self.assertEqual(self.client.get(path, headers=self.auth_headers(self.viewer)).status_code, 403)

    def test_blocked_viewer_forbidden(self):
        workout = self.create(visibility="PUBLIC")
        self.db.add(Block(blocker_id=self.owner.id, blocked_id=self.viewer.id))
        self.db.commit()
        response = self.client.get(self.api(f"/workouts/{workout['id']}"), headers=self.auth_headers(self.viewer))
        self.assertEqual(response.status_code, 403)

    def test_update_recalculates_pace(self):
        workout = self.create()
        response = self.client.patch(
            self.api(f"/workouts/{workout['id']}"),
            json={"duration": 2400},
            headers=self.auth_headers(self.owner)
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.data(response)["pace"], 240.0)

    def test_only_owner_can_update_or_delete(self):
        workout = self.create()
        headers = self.auth_headers(self.viewer)
        response = self.client.patch(self.api(f"/workouts/{workout['id']}"), json={"title": "x"}, headers=headers)
        self.assertEqual(response.status_code, 403)
        response = self.client.delete(self.api(f"/workouts/{workout['id']}"), headers=headers)
        self.assertEqual(response.status_code, 403)

    def test_delete_then_not_found(self):
        workout = self.create(visibility="PUBLIC")
        headers = self.auth_headers(self.owner)
        self.assertEqual(self.client.delete(self.api(f"/workouts/{workout['id']}"), headers=headers).status_code, 200)

        response = self.client.get(self.api(f"/workouts/{workout['id']}"), headers=headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.error_code(response), "WORKOUT_NOT_FOUND")
        self.assertEqual(self.data(self.client.get(self.api("/workouts"), headers=headers))["items"], [])

    def test_list_is_mine_only(self):
        self.create()
        self.create()
        data = self.data(self.client.get(self.api("/workouts"), params={"limit": 1}, headers=self.auth_headers(self.owner)))
        self.assertEqual(len(data["items"]), 1)
        self.assertIsNotNone(data["nextCursor"])
        data = self.data(self.client.get(self.api("/workouts"), headers=self.auth_headers(self.viewer)))
        self.assertEqual(data["items"], [])


if __name__ == "__main__":
    unittest.main()
