"""
1:1 대화 API 테스트
대화방 생성 / 메시지 전송 / 읽음 처리 / 삭제를 검증합니다.
"""

import unittest

from app.db.testing import ApiTestCase


class TestConversationsApi(ApiTestCase):
    """대화 API 테스트"""

    def setUp(self):
        super().setUp()
        self.alice = self.create_user("alice")
        self.bob = self.create_user("bob")
        self.carol = self.create_user("carol")

    def open(self, user, other):
        return self.client.post(
            self.api("/conversations"),
            json={"participant_id": other.id},
            headers=self.auth_headers(user)
        )

    def send(self, user, conversation_id, content="안녕하세요"):
        return self.client.post(
            self.api(f"/conversations/{conversation_id}/messages"),
            json={"content": content},
            headers=self.auth_headers(user)
        )

    def test_open_is_idempotent(self):
        response = self.open(self.alice, self.bob)
        self.assertEqual(response.status_code, 201)
        conversation = self.data(response)
        self.assertEqual(conversation["other_user"]["id"], self.bob.id)
        self.assertIsNone(conversation["last_message"])

        again = self.data(self.open(self.bob, self.alice))
        self.assertEqual(again["id"], conversation["id"])
        self.assertEqual(again["other_user"]["id"], self.alice.id)

    def test_open_errors(self):
        response = self.open(self.alice, self.alice)
        self.assertEqual(response.status_code, 400)

        response = self.client.post(
            self.api("/conversations"), json={"participant_id": "missing"}, headers=self.auth_headers(self.alice)
        )
        self.assertEqual(response.status_code, 404)

        self.client.post(self.api(f"/block/{self.bob.id}"), headers=self.auth_headers(self.alice))
        response = self.open(self.bob, self.alice)
        self.assertEqual(response.status_code, 403)

    def test_send_and_list_messages(self):
        conversation_id = self.data(self.open(self.alice, self.bob))["id"]
        response = self.send(self.alice, conversation_id, "내일 한강에서 뛸래요?")
        self.assertEqual(response.status_code, 201)
        message = self.data(response)
        self.assertEqual(message["sender_id"], self.alice.id)
        self.send(self.bob, conversation_id, "좋아요")

        page = self.data(self.client.get(
            self.api(f"/conversations/{conversation_id}"), headers=self.auth_headers(self.bob)
        ))
        self.assertEqual(
            sorted(m["content"] for m in page["items"]),
            sorted(["내일 한강에서 뛸래요?", "좋아요"])
        )
        self.assertIsNone(page["nextCursor"])

    def test_message_creates_notification(self):
        conversation_id = self.data(self.open(self.alice, self.bob))["id"]
        self.send(self.alice, conversation_id)
        page = self.data(self.client.get(self.api("/notifications"), headers=self.auth_headers(self.bob)))
        self.assertEqual(page["items"][0]["type"], "MESSAGE")
        self.assertEqual(page["items"][0]["reference_id"], conversation_id)

    def test_unread_count_and_mark_read(self):
        conversation_id = self.data(self.open(self.alice, self.bob))["id"]
        self.send(self.alice, conversation_id, "하나")
        self.send(self.alice, conversation_id, "둘")

        conversations = self.data(self.client.get(self.api("/conversations"), headers=self.auth_headers(self.bob)))
        self.assertEqual(len(conversations["items"]), 1)
        self.assertEqual(conversations["items"][0]["unread_count"], 2)

        mine = self.data(self.client.get(self.api("/conversations"), headers=self.auth_headers(self.alice)))
        self.assertEqual(mine["items"][0]["unread_count"], 0)

        response = self.client.patch(
            self.api(f"/conversations/{conversation_id}/read"), headers=self.auth_headers(self.bob)
        )
        self.assertEqual(response.status_code, 200)
        conversations = self.data(self.client.get(self.api("/conversations"), headers=self.auth_headers(self.bob)))
        self.assertEqual(conversations["items"][0]["unread_count"], 0)

    def test_outsider_cannot_read_or_send(self):
        conversation_id = self.data(self.open(self.alice, self.bob))["id"]
        headers = self.auth_headers(self.carol)

        response = self.client.get(self.api(f"/conversations/{conversation_id}"), headers=headers)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.send(self.carol, conversation_id).status_code, 403)

        response = self.client.get(self.api("/conversations/missing"), headers=headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.error_code(response), "CONVERSATION_NOT_FOUND")

    def test_blocked_cannot_send(self):
        conversation_id = self.data(self.open(self.alice, self.bob))["id"]
        self.client.post(self.api(f"/block/{self.alice.id}"), headers=self.auth_headers(self.bob))
        self.assertEqual(self.send(self.alice, conversation_id).status_code, 403)

    def test_empty_message_rejected(self):
        conversation_id = self.data(self.open(self.alice, self.bob))["id"]
        self.assertEqual(self.send(self.alice, conversation_id, "").status_code, 422)

    def test_delete_message(self):
        conversation_id = self.data(self.open(self.alice, self.bob))["id"]
        message_id = self.data(self.send(self.alice, conversation_id, "지울 메시지"))["id"]

        response = self.client.delete(
            self.api(f"/conversations/messages/{message_id}"), headers=self.auth_headers(self.bob)
        )
        self.assertEqual(response.status_code, 403)

        response = self.client.delete(
            self.api(f"/conversations/messages/{message_id}"), headers=self.auth_headers(self.alice)
        )
        self.assertEqual(response.status_code, 200)

        page = self.data(self.client.get(
            self.api(f"/conversations/{conversation_id}"), headers=self.auth_headers(self.bob)
        ))
        self.assertTrue(page["items"][0]["is_deleted"])
        self.assertIsNone(page["items"][0]["content"])

        response = self.client.delete(
            self.api(f"/conversations/messages/{message_id}"), headers=self.auth_headers(self.alice)
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.error_code(response), "MESSAGE_NOT_FOUND")

    def test_sse_requires_token(self):
        response = self.client.get(self.api("/conversations/sse"))
        self.assertEqual(response.status_code, 401)


if __name__ == "__main__":
    unittest.main()
