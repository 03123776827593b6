"""
프로필 / 팔로우 / 차단 API 테스트
"""

import unittest

from app.db.testing import ApiTestCase
from app.models.social import Follow, FOLLOW_ACCEPTED, FOLLOW_PENDING
from app.models.notification import Notification
from app.models.workout import Workout
from datetime import datetime


class TestProfileApi(ApiTestCase):
    """프로필 API 테스트"""

    def test_my_profile_includes_email_and_stats(self):
        user = self.create_user("runner")
        self.db.add_all([
            Workout(user_id=user.id, distance=5000, duration=1500, date=datetime(2026, 5, 1)),
            Workout(user_id=user.id, distance=5000, duration=1500, date=datetime(2026, 5, 2)),
        ])
        self.db.commit()

        response = self.client.get(self.api("/profile"), headers=self.auth_headers(user))
        self.assertEqual(response.status_code, 200)
        data = self.data(response)
        self.assertEqual(data["email"], "runner@example.com")
        self.assertEqual(data["stats"]["total_workouts"], 2)
        self.assertEqual(data["stats"]["total_distance"], 10000)
        self.assertEqual(data["stats"]["average_pace"], 300.0)

    def test_other_profile_hides_email(self):
        me = self.create_user("me")
        other = self.create_user("other")
        response = self.client.get(self.api(f"/profile/{other.id}"), headers=self.auth_headers(me))
        data = self.data(response)
        self.assertIsNone(data["email"])
        self.assertFalse(data["is_following"])

    def test_update_profile(self):
        user = self.create_user("runner")
        response = self.client.patch(
            self.api("/profile"),
            json={"bio": "매일 5km", "is_private": True},
            headers=self.auth_headers(user)
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.data(response)["bio"], "매일 5km")
        self.assertTrue(self.data(response)["is_private"])

    def test_update_profile_rejects_short_name(self):
        user = self.create_user("runner")
        response = self.client.patch(self.api("/profile"), json={"name": "a"}, headers=self.auth_headers(user))
        self.assertEqual(response.status_code, 422)

    def test_delete_account(self):
        """탈퇴 후 같은 토큰은 ACCOUNT_DELETED, 프로필은 404"""
        user = self.create_user("runner")
        headers = self.auth_headers(user)
        self.assertEqual(self.client.delete(self.api("/profile"), headers=headers).status_code, 200)

        response = self.client.get(self.api("/profile"), headers=headers)
        self.assertEqual(self.error_code(response), "ACCOUNT_DELETED")
        response = self.client.get(self.api(f"/profile/{user.id}"))
        self.assertEqual(response.status_code, 404)


class TestFollowApi(ApiTestCase):
    """팔로우 API 테스트"""

    def setUp(self):
        super().setUp()
        self.alice = self.create_user("alice")
        self.bob = self.create_user("bob")
        self.carol = self.create_user("carol", is_private=True)

    def test_follow_public_user(self):
        response = self.client.post(self.api(f"/follow/{self.bob.id}"), headers=self.auth_headers(self.alice))
        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.data(response)["status"], FOLLOW_ACCEPTED)

        response = self.client.get(self.api("/follow/followers"), headers=self.auth_headers(self.bob))
        self.assertEqual([u["id"] for u in self.data(response)], [self.alice.id])

        notification = self.db.query(Notification).filter(Notification.user_id == self.bob.id).one()
        self.assertEqual(notification.actor_id, self.alice.id)

    def test_follow_private_user_needs_accept(self):
        headers = self.auth_headers(self.alice)
        response = self.client.post(self.api(f"/follow/{self.carol.id}"), headers=headers)
        self.assertEqual(self.data(response)["status"], FOLLOW_PENDING)

        requests = self.client.get(self.api("/follow/requests"), headers=self.auth_headers(self.carol))
        self.assertEqual([u["id"] for u in self.data(requests)], [self.alice.id])

        response = self.client.post(
            self.api(f"/follow/{self.alice.id}/accept"), headers=self.auth_headers(self.carol)
        )
        self.assertEqual(response.status_code, 200)
        follow = self.db.query(Follow).filter(Follow.follower_id == self.alice.id).one()
        self.assertEqual(follow.status, FOLLOW_ACCEPTED)

    def test_reject_request(self):
        self.client.post(self.api(f"/follow/{self.carol.id}"), headers=self.auth_headers(self.alice))
        response = self.client.post(
            self.api(f"/follow/{self.alice.id}/reject"), headers=self.auth_headers(self.carol)
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.db.query(Follow).count(), 0)

    def test_accept_without_request(self):
        response = self.client.post(
            self.api(f"/follow/{self.bob.id}/accept"), headers=self.auth_headers(self.carol)
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.error_code(response), "FOLLOW_REQUEST_NOT_FOUND")

    def test_follow_self_and_duplicate(self):
        headers = self.auth_headers(self.alice)
        response = self.client.post(self.api(f"/follow/{self.alice.id}"), headers=headers)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(self.error_code(response), "CANNOT_FOLLOW_SELF")

        self.client.post(self.api(f"/follow/{self.bob.id}"), headers=headers)
        response = self.client.post(self.api(f"/follow/{self.bob.id}"), headers=headers)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(self.error_code(response), "ALREADY_FOLLOWING")

    def test_unfollow(self):
        headers = self.auth_headers(self.alice)
        self.client.post(self.api(f"/follow/{self.bob.id}"), headers=headers)
        self.assertEqual(self.client.delete(self.api(f"/follow/{self.bob.id}"), headers=headers).status_code, 200)
        response = self.client.delete(self.api(f"/follow/{self.bob.id}"), headers=headers)
        self.assertEqual(self.error_code(response), "FOLLOW_NOT_FOUND")

    def test_follow_unknown_user(self):
        response = self.client.post(self.api("/follow/missing"), headers=self.auth_headers(self.alice))
        self.assertEqual(response.status_code, 404)

    def test_user_following_list(self):
        self.client.post(self.api(f"/follow/{self.bob.id}"), headers=self.auth_headers(self.alice))
        response = self.client.get(self.api(f"/follow/{self.alice.id}/following"))
        self.assertEqual([u["id"] for u in self.data(response)], [self.bob.id])


class TestBlockApi(ApiTestCase):
    """차단 API 테스트"""

    def setUp(self):
        super().setUp()
        self.alice = self.create_user("alice")
        self.bob = self.create_user("bob")

    def test_block_removes_follows_both_ways(self):
        self.client.post(self.api(f"/follow/{self.bob.id}"), headers=self.auth_headers(self.alice))
        self.client.post(self.api(f"/follow/{self.alice.id}"), headers=self.auth_headers(self.bob))

        response = self.client.post(self.api(f"/block/{self.bob.id}"), headers=self.auth_headers(self.alice))
        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.db.query(Follow).count(), 0)

    def test_blocked_user_cannot_follow_or_view(self):
        self.client.post(self.api(f"/block/{self.bob.id}"), headers=self.auth_headers(self.alice))

        response = self.client.post(self.api(f"/follow/{self.alice.id}"), headers=self.auth_headers(self.bob))
        self.assertEqual(response.status_code, 403)
        response = self.client.get(self.api(f"/profile/{self.alice.id}"), headers=self.auth_headers(self.bob))
        self.assertEqual(response.status_code, 403)

    def test_blocker_cannot_view_blocked_profile(self):
        self.client.post(self.api(f"/block/{self.bob.id}"), headers=self.auth_headers(self.alice))

        response = self.client.get(self.api(f"/profile/{self.bob.id}"), headers=self.auth_headers(self.alice))
        self.assertEqual(response.status_code, 403)
        response = self.client.post(self.api(f"/follow/{self.bob.id}"), headers=self.auth_headers(self.alice))
        self.assertEqual(response.status_code, 403)

    def test_block_twice(self):
        headers = self.auth_headers(self.alice)
        self.client.post(self.api(f"/block/{self.bob.id}"), headers=headers)
        response = self.client.post(self.api(f"/block/{self.bob.id}"), headers=headers)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(self.error_code(response), "ALREADY_BLOCKED")

    def test_block_self(self):
        response = self.client.post(self.api(f"/block/{self.alice.id}"), headers=self.auth_headers(self.alice))
        self.assertEqual(self.error_code(response), "CANNOT_BLOCK_SELF")

    def test_list_and_unblock(self):
        headers = self.auth_headers(self.alice)
        self.client.post(self.api(f"/block/{self.bob.id}"), headers=headers)
        response = self.client.get(self.api("/block"), headers=headers)
        self.assertEqual([u["id"] for u in self.data(response)], [self.bob.id])

        self.assertEqual(self.client.delete(self.api(f"/block/{self.bob.id}"), headers=headers).status_code, 200)
        response = self.client.delete(self.api(f"/block/{self.bob.id}"), headers=headers)
        self.assertEqual(self.error_code(response), "BLOCK_NOT_FOUND")


if __name__ == "__main__":
    unittest.main()
