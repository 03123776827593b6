"""
알림 API 테스트
"""

import unittest

from app.db.testing import ApiTestCase
from app.models.notification import NOTIFICATION_LIKE, NOTIFICATION_COMMENT
from app.services.notification_service import NotificationService


class TestNotificationsApi(ApiTestCase):
    """알림 목록 / 읽음 처리 테스트"""

    def setUp(self):
        super().setUp()
        self.alice = self.create_user("alice")
        self.bob = self.create_user("bob")
        self.service = NotificationService(self.db)

    def notify(self, type=NOTIFICATION_LIKE, actor=None, user=None):
        actor = actor or self.bob
        user = user or self.alice
        return self.service.notify(
            user_id=user.id,
            type=type,
            message=f"{actor.name}님의 알림",
            actor_id=actor.id,
            reference_type="POST",
            reference_id="post-1"
        )

    def test_self_notification_skipped(self):
        self.assertIsNone(self.notify(actor=self.alice, user=self.alice))

    def test_follow_creates_notification(self):
        self.client.post(self.api(f"/follow/{self.alice.id}"), headers=self.auth_headers(self.bob))
        page = self.data(self.client.get(self.api("/notifications"), headers=self.auth_headers(self.alice)))
        self.assertEqual(len(page["items"]), 1)
        self.assertEqual(page["items"][0]["type"], "FOLLOW")
        self.assertEqual(page["items"][0]["actor_id"], self.bob.id)

    def test_list_only_mine_with_cursor(self):
        for _ in range(3):
            self.notify()
        self.notify(actor=self.alice, user=self.bob)

        headers = self.auth_headers(self.alice)
        first = self.data(self.client.get(self.api("/notifications?limit=2"), headers=headers))
        self.assertEqual(len(first["items"]), 2)
        self.assertIsNotNone(first["nextCursor"])

        second = self.data(self.client.get(
            self.api("/notifications"), params={"limit": 2, "cursor": first["nextCursor"]}, headers=headers
        ))
        self.assertEqual(len(second["items"]), 1)
        self.assertIsNone(second["nextCursor"])

        ids = {n["id"] for n in first["items"] + second["items"]}
        self.assertEqual(len(ids), 3)

    def test_unread_count_and_mark_read(self):
        first = self.notify()
        self.notify(type=NOTIFICATION_COMMENT)
        headers = self.auth_headers(self.alice)

        response = self.client.get(self.api("/notifications/unread-count"), headers=headers)
        self.assertEqual(self.data(response)["count"], 2)

        response = self.client.patch(self.api(f"/notifications/{first.id}/read"), headers=headers)
        self.assertEqual(response.status_code, 200)
        response = self.client.get(self.api("/notifications/unread-count"), headers=headers)
        self.assertEqual(self.data(response)["count"], 1)

        page = self.data(self.client.get(self.api("/notifications?unread_only=true"), headers=headers))
        self.assertEqual([n["type"] for n in page["items"]], ["COMMENT"])

    def test_mark_read_other_users_notification(self):
        theirs = self.notify(actor=self.alice, user=self.bob)
        response = self.client.patch(
            self.api(f"/notifications/{theirs.id}/read"), headers=self.auth_headers(self.alice)
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.error_code(response), "NOTIFICATION_NOT_FOUND")

    def test_mark_all_read(self):
        for _ in range(3):
            self.notify()
        headers = self.auth_headers(self.alice)
        response = self.client.patch(self.api("/notifications/read-all"), headers=headers)
        self.assertEqual(self.data(response)["updated"], 3)

        response = self.client.get(self.api("/notifications/unread-count"), headers=headers)
        self.assertEqual(self.data(response)["count"], 0)

        response = self.client.patch(self.api("/notifications/read-all"), headers=headers)
        self.assertEqual(self.data(response)["updated"], 0)

    def test_requires_login(self):
        response = self.client.get(self.api("/notifications"))
        self.assertEqual(response.status_code, 401)

    def test_sse_requires_token(self):
        response = self.client.get(self.api("/notifications/sse"))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.error_code(response), "UNAUTHORIZED")

        response = self.client.get(self.api("/notifications/sse?token=garbage"))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.error_code(response), "INVALID_TOKEN")


if __name__ == "__main__":
    unittest.main()
