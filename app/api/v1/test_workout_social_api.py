"""
운동 기록 좋아요 / 댓글 API 테스트
"""

import unittest

from app.db.testing import ApiTestCase
from app.models.notification import Notification
from app.models.social import Block
from app.models.workout import Workout


class TestWorkoutSocialApi(ApiTestCase):
    """피드 아이템(운동 기록)에 대한 좋아요 / 댓글"""

    def setUp(self):
        super().setUp()
        self.owner = self.create_user("owner")
        self.fan = self.create_user("fan")
        self.workout = self.create_workout(visibility="PUBLIC")
        self.path = self.api(f"/workouts/{self.workout['id']}")

    def create_workout(self, **overrides) -> dict:
        body = {"distance": 5000, "duration": 1500, "date": "2026-05-01T07:00:00"}
        body.update(overrides)
        response = self.client.post(self.api("/workouts"), json=body, headers=self.auth_headers(self.owner))
        self.assertEqual(response.status_code, 201, response.text)
        return self.data(response)

    def comment(self, user, content="페이스 좋네요!", path=None):
        return self.client.post(
            f"{path or self.path}/comments", json={"content": content}, headers=self.auth_headers(user)
        )

    # ============================================
    # 좋아요
    # ============================================

    def test_like_flow(self):
        headers = self.auth_headers(self.fan)
        response = self.client.post(f"{self.path}/like", headers=headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.data(response), {"liked": True, "like_count": 1})

        response = self.client.post(f"{self.path}/like", headers=headers)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(self.error_code(response), "ALREADY_LIKED")

        status = self.data(self.client.get(f"{self.path}/like", headers=headers))
        self.assertEqual(status, {"liked": True, "like_count": 1})
        anonymous = self.data(self.client.get(f"{self.path}/like"))
        self.assertEqual(anonymous, {"liked": False, "like_count": 1})

        response = self.client.delete(f"{self.path}/like", headers=headers)
        self.assertEqual(self.data(response), {"liked": False, "like_count": 0})
        response = self.client.delete(f"{self.path}/like", headers=headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.error_code(response), "LIKE_NOT_FOUND")

    def test_like_notifies_owner_but_not_self(self):
        self.client.post(f"{self.path}/like", headers=self.auth_headers(self.fan))
        self.client.post(f"{self.path}/like", headers=self.auth_headers(self.owner))

        notifications = self.db.query(Notification).all()
        self.assertEqual(len(notifications), 1)
        self.assertEqual(notifications[0].user_id, self.owner.id)
        self.assertEqual(notifications[0].type, "LIKE")
        self.assertEqual(notifications[0].reference_type, "WORKOUT")

    def test_like_count_in_feed_item(self):
        self.client.post(f"{self.path}/like", headers=self.auth_headers(self.fan))
        self.comment(self.fan)
        items = self.data(self.client.get(self.api("/feed")))["items"]
        self.assertEqual(items[0]["like_count"], 1)
        self.assertEqual(items[0]["comment_count"], 1)

    def test_cannot_like_hidden_workout(self):
        private = self.create_workout(visibility="PRIVATE")
        response = self.client.post(
            self.api(f"/workouts/{private['id']}/like"), headers=self.auth_headers(self.fan)
        )
        self.assertEqual(response.status_code, 403)

        self.db.add(Block(blocker_id=self.fan.id, blocked_id=self.owner.id))
        self.db.commit()
        response = self.client.post(f"{self.path}/like", headers=self.auth_headers(self.fan))
        self.assertEqual(response.status_code, 403)

    def test_missing_workout(self):
        response = self.client.post(self.api("/workouts/missing/like"), headers=self.auth_headers(self.fan))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.error_code(response), "WORKOUT_NOT_FOUND")

    # ============================================
    # 댓글
    # ============================================

    def test_comments_in_order_with_cursor(self):
        for i in range(3):
            self.assertEqual(self.comment(self.fan, f"댓글 {i}").status_code, 201)

        first = self.data(self.client.get(f"{self.path}/comments", params={"limit": 2}))
        self.assertEqual([c["content"] for c in first["items"]], ["댓글 0", "댓글 1"])
        self.assertIsNotNone(first["nextCursor"])

        second = self.data(self.client.get(
            f"{self.path}/comments", params={"limit": 2, "cursor": first["nextCursor"]}
        ))
        self.assertEqual([c["content"] for c in second["items"]], ["댓글 2"])
        self.assertIsNone(second["nextCursor"])

        notifications = self.db.query(Notification).filter(Notification.type == "COMMENT").count()
        self.assertEqual(notifications, 3)

    def test_empty_comment_rejected(self):
        self.assertEqual(self.comment(self.fan, "").status_code, 422)

    def test_comments_from_blocked_users_hidden(self):
        self.comment(self.fan, "차단될 사람의 댓글")
        self.comment(self.owner, "주인 댓글")
        self.db.add(Block(blocker_id=self.owner.id, blocked_id=self.fan.id))
        self.db.commit()

        page = self.data(self.client.get(f"{self.path}/comments", headers=self.auth_headers(self.owner)))
        self.assertEqual([c["content"] for c in page["items"]], ["주인 댓글"])

    def test_delete_comment_author_only(self):
        comment_id = self.data(self.comment(self.fan))["id"]
        path = f"{self.path}/comments/{comment_id}"

        response = self.client.delete(path, headers=self.auth_headers(self.owner))
        self.assertEqual(response.status_code, 403)

        response = self.client.delete(path, headers=self.auth_headers(self.fan))
        self.assertEqual(response.status_code, 200)
        response = self.client.delete(path, headers=self.auth_headers(self.fan))
        self.assertEqual(response.status_code, 409)
        self.assertEqual(self.error_code(response), "COMMENT_ALREADY_DELETED")

        response = self.client.delete(f"{self.path}/comments/missing", headers=self.auth_headers(self.fan))
        self.assertEqual(response.status_code, 404)

        self.db.expire_all()
        workout = self.db.query(Workout).filter(Workout.id == self.workout["id"]).one()
        self.assertEqual(workout.comment_count, 0)
        self.assertEqual(self.data(self.client.get(f"{self.path}/comments"))["items"], [])


if __name__ == "__main__":
    unittest.main()
