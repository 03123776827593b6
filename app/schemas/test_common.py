"""
공통 응답 형식 테스트
"""

import unittest

from app.db.testing import ApiTestCase
from app.schemas.common import success_response, cursor_page


class TestEnvelopes(unittest.TestCase):

    def test_success_response(self):
        self.assertEqual(
            success_response({"id": "1"}, "완료"),
            {"success": True, "data": {"id": "1"}, "message": "완료"}
        )
        self.assertEqual(success_response(), {"success": True, "data": None, "message": None})

    def test_cursor_page(self):
        self.assertEqual(cursor_page([1, 2], None), {"items": [1, 2], "nextCursor": None})


class TestEnvelopesOverHttp(ApiTestCase):

    def test_page_envelope(self):
        body = self.client.get(self.api("/feed")).json()
        self.assertEqual(set(body), {"success", "data", "message"})
        self.assertTrue(body["success"])
        self.assertEqual(body["data"], {"items": [], "nextCursor": None})

    def test_error_envelope(self):
        response = self.client.get(self.api("/posts/missing"))
        self.assertEqual(response.status_code, 404)
        detail = response.json()["detail"]
        self.assertFalse(detail["success"])
        self.assertEqual(detail["error"]["code"], "POST_NOT_FOUND")
        self.assertIn("message", detail["error"])


if __name__ == "__main__":
    unittest.main()
