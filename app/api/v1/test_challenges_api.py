"""
챌린지 API 테스트
참가, 진행 상황 갱신, 리더보드 정렬을 검증합니다.
"""

import unittest
from datetime import datetime, timedelta

from app.db.testing import ApiTestCase
from app.models.challenge import Challenge
from app.services.challenge_service import is_goal_reached


def _period(start_days=-1, end_days=30) -> dict:
    now = datetime.utcnow()
    return {
        "start_date": (now + timedelta(days=start_days)).isoformat(),
        "end_date": (now + timedelta(days=end_days)).isoformat(),
    }


class TestGoalReached(unittest.TestCase):
    """목표 달성 판단 테스트"""

    def test_distance(self):
        challenge = Challenge(type="DISTANCE", target_value=100)
        self.assertFalse(is_goal_reached(challenge, 99.9))
        self.assertTrue(is_goal_reached(challenge, 100))

    def test_pace_lower_is_better(self):
        challenge = Challenge(type="PACE", target_value=300)
        self.assertTrue(is_goal_reached(challenge, 290))
        self.assertTrue(is_goal_reached(challenge, 300))
        self.assertFalse(is_goal_reached(challenge, 310))
        self.assertFalse(is_goal_reached(challenge, 0))


class TestChallengesApi(ApiTestCase):
    """챌린지 API 테스트"""

    def setUp(self):
        super().setUp()
        self.creator = self.create_user("creator")
        self.runner = self.create_user("runner")

    def create(self, user=None, **overrides) -> dict:
        body = {"title": "한 달 100km", "type": "DISTANCE", "target_value": 100, "target_unit": "KM"}
        body.update(_period())
        body.update(overrides)
        response = self.client.post(
            self.api("/challenges"), json=body, headers=self.auth_headers(user or self.creator)
        )
        self.assertEqual(response.status_code, 201, response.text)
        return self.data(response)

    def path(self, challenge: dict, suffix: str = "") -> str:
        return self.api(f"/challenges/{challenge['id']}{suffix}")

    def progress(self, challenge, user, value):
        return self.client.patch(
            self.path(challenge, "/progress"), json={"current_value": value}, headers=self.auth_headers(user)
        )

    def test_creator_auto_joins(self):
        challenge = self.create()
        self.assertTrue(challenge["joined"])
        self.assertEqual(challenge["participant_count"], 1)

    def test_end_before_start_rejected(self):
        body = {"title": "x", "type": "DISTANCE", "target_value": 1, "target_unit": "KM"}
        body.update(_period(start_days=5, end_days=1))
        response = self.client.post(self.api("/challenges"), json=body, headers=self.auth_headers(self.creator))
        self.assertEqual(response.status_code, 422)

    def test_join_and_leave(self):
        challenge = self.create()
        response = self.client.post(self.path(challenge, "/join"), headers=self.auth_headers(self.runner))
        self.assertEqual(response.status_code, 201)
        response = self.client.post(self.path(challenge, "/join"), headers=self.auth_headers(self.runner))
        self.assertEqual(response.json()["detail"]["error"]["details"]["reason"], "already_joined")

        self.assertEqual(self.client.delete(self.path(challenge, "/leave"), headers=self.auth_headers(self.runner)).status_code, 200)
        response = self.client.delete(self.path(challenge, "/leave"), headers=self.auth_headers(self.runner))
        self.assertEqual(self.error_code(response), "PARTICIPANT_NOT_FOUND")

    def test_cannot_join_ended_challenge(self):
        challenge = self.create(**_period(start_days=-30, end_days=-1))
        response = self.client.post(self.path(challenge, "/join"), headers=self.auth_headers(self.runner))
        self.assertEqual(response.json()["detail"]["error"]["details"]["reason"], "ended")

    def test_progress_completion(self):
        challenge = self.create()
        data = self.data(self.progress(challenge, self.creator, 50))
        self.assertFalse(data["is_completed"])
        data = self.data(self.progress(challenge, self.creator, 120))
        self.assertTrue(data["is_completed"])
        self.assertIsNotNone(data["completed_at"])

        response = self.progress(challenge, self.runner, 10)
        self.assertEqual(response.status_code, 404)

    def test_leaderboard_distance(self):
        challenge = self.create()
        self.client.post(self.path(challenge, "/join"), headers=self.auth_headers(self.runner))
        self.progress(challenge, self.creator, 30)
        self.progress(challenge, self.runner, 80)

        board = self.data(self.client.get(self.path(challenge, "/leaderboard")))
        self.assertEqual([(p["user"]["id"], p["rank"]) for p in board],
                         [(self.runner.id, 1), (self.creator.id, 2)])

    def test_leaderboard_pace_lowest_first_zero_last(self):
        challenge = self.create(type="PACE", target_value=330, target_unit="SEC_PER_KM")
        third = self.create_user("third")
        for user in (self.runner, third):
            self.client.post(self.path(challenge, "/join"), headers=self.auth_headers(user))
        self.progress(challenge, self.runner, 340)
        self.progress(challenge, third, 310)

        board = self.data(self.client.get(self.path(challenge, "/leaderboard")))
        self.assertEqual([p["user"]["id"] for p in board], [third.id, self.runner.id, self.creator.id])
        self.assertTrue(board[0]["is_completed"])

    def test_crew_challenge_requires_membership(self):
        crew = self.data(self.client.post(
            self.api("/crews"), json={"name": "한강 크루"}, headers=self.auth_headers(self.creator)
        ))
        challenge = self.create(crew_id=crew["id"])

        response = self.client.post(self.path(challenge, "/join"), headers=self.auth_headers(self.runner))
        self.assertEqual(response.status_code, 403)

        body = {"title": "x", "type": "FREQUENCY", "target_value": 10, "target_unit": "COUNT", "crew_id": crew["id"]}
        body.update(_period())
        response = self.client.post(self.api("/challenges"), json=body, headers=self.auth_headers(self.runner))
        self.assertEqual(response.status_code, 403)

        listed = self.data(self.client.get(self.api("/challenges"), params={"crew_id": crew["id"]}))
        self.assertEqual([c["id"] for c in listed["items"]], [challenge["id"]])

    def test_creator_only_update(self):
        challenge = self.create()
        response = self.client.patch(self.path(challenge), json={"title": "x"}, headers=self.auth_headers(self.runner))
        self.assertEqual(response.status_code, 403)
        response = self.client.patch(
            self.path(challenge),
            json={"end_date": (datetime.utcnow() - timedelta(days=5)).isoformat()},
            headers=self.auth_headers(self.creator)
        )
        self.assertEqual(response.status_code, 400)


if __name__ == "__main__":
    unittest.main()
