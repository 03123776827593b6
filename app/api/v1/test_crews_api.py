"""
크루 / 크루 게시판 API 테스트
"""

import unittest
from datetime import datetime, timedelta

from app.db.testing import ApiTestCase
from app.models.crew import CrewBoardPost
from app.models.notification import Notification


class CrewApiTestCase(ApiTestCase):
    """크루 하나와 멤버를 준비하는 베이스"""

    def setUp(self):
        super().setUp()
        self.owner = self.create_user("owner")
        self.member = self.create_user("member")
        self.outsider = self.create_user("outsider")
        response = self.client.post(
            self.api("/crews"),
            json={"name": "새벽 러닝 크루", "description": "매일 6시", "max_members": 3},
            headers=self.auth_headers(self.owner)
        )
        self.assertEqual(response.status_code, 201, response.text)
        self.crew = self.data(response)
        self.crew_path = self.api(f"/crews/{self.crew['id']}")
        self.client.post(f"{self.crew_path}/join", headers=self.auth_headers(self.member))


class TestCrewsApi(CrewApiTestCase):
    """크루 API 테스트"""

    def test_create_makes_owner_and_announcement_board(self):
        self.assertEqual(self.crew["my_role"], "OWNER")
        boards = self.data(self.client.get(f"{self.crew_path}/boards", headers=self.auth_headers(self.owner)))
        self.assertEqual([(b["name"], b["type"], b["write_permission"]) for b in boards],
                         [("공지", "ANNOUNCEMENT", "ADMIN_ONLY")])

    def test_join_notifies_creator_and_counts(self):
        notification = self.db.query(Notification).filter(Notification.user_id == self.owner.id).one()
        self.assertEqual(notification.type, "CREW_JOIN")

        data = self.data(self.client.get(self.crew_path, headers=self.auth_headers(self.member)))
        self.assertEqual(data["member_count"], 2)
        self.assertEqual(data["my_role"], "MEMBER")

    def test_join_twice_and_full(self):
        response = self.client.post(f"{self.crew_path}/join", headers=self.auth_headers(self.member))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["error"]["details"]["reason"], "already_member")

        self.client.post(f"{self.crew_path}/join", headers=self.auth_headers(self.outsider))
        late = self.create_user("late")
        response = self.client.post(f"{self.crew_path}/join", headers=self.auth_headers(late))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["error"]["details"]["reason"], "full")

    def test_kicked_member_cannot_rejoin(self):
        response = self.client.delete(
            f"{self.crew_path}/members/{self.member.id}", headers=self.auth_headers(self.owner)
        )
        self.assertEqual(response.status_code, 200)
        response = self.client.post(f"{self.crew_path}/join", headers=self.auth_headers(self.member))
        self.assertEqual(response.json()["detail"]["error"]["details"]["reason"], "banned")

    def test_kick_or_role_change_for_non_member(self):
        headers = self.auth_headers(self.owner)
        response = self.client.delete(f"{self.crew_path}/members/{self.outsider.id}", headers=headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["error"]["details"]["reason"], "not_member")

        response = self.client.patch(
            f"{self.crew_path}/members/{self.outsider.id}/role", json={"role": "ADMIN"}, headers=headers
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["error"]["details"]["reason"], "not_member")

    def test_member_cannot_kick_or_update(self):
        headers = self.auth_headers(self.member)
        response = self.client.delete(f"{self.crew_path}/members/{self.owner.id}", headers=headers)
        self.assertEqual(response.status_code, 403)
        response = self.client.patch(self.crew_path, json={"name": "바꾼 이름"}, headers=headers)
        self.assertEqual(response.status_code, 403)

    def test_owner_cannot_leave(self):
        response = self.client.delete(f"{self.crew_path}/leave", headers=self.auth_headers(self.owner))
        self.assertEqual(response.status_code, 403)
        response = self.client.delete(f"{self.crew_path}/leave", headers=self.auth_headers(self.member))
        self.assertEqual(response.status_code, 200)
        response = self.client.delete(f"{self.crew_path}/leave", headers=self.auth_headers(self.member))
        self.assertEqual(response.status_code, 400)

    def test_max_members_below_current_count(self):
        response = self.client.patch(self.crew_path, json={"max_members": 2}, headers=self.auth_headers(self.owner))
        self.assertEqual(response.status_code, 200)
        self.client.post(f"{self.crew_path}/join", headers=self.auth_headers(self.outsider))
        response = self.client.patch(self.crew_path, json={"max_members": 5}, headers=self.auth_headers(self.owner))
        self.assertEqual(self.data(response)["max_members"], 5)
        response = self.client.post(f"{self.crew_path}/join", headers=self.auth_headers(self.outsider))
        self.assertEqual(response.status_code, 201)
        response = self.client.patch(self.crew_path, json={"max_members": 2}, headers=self.auth_headers(self.owner))
        self.assertEqual(response.status_code, 400)

    def test_role_change_owner_only(self):
        path = f"{self.crew_path}/members/{self.member.id}/role"
        response = self.client.patch(path, json={"role": "ADMIN"}, headers=self.auth_headers(self.member))
        self.assertEqual(response.status_code, 403)
        response = self.client.patch(path, json={"role": "ADMIN"}, headers=self.auth_headers(self.owner))
        self.assertEqual(self.data(response)["role"], "ADMIN")
        response = self.client.patch(path, json={"role": "OWNER"}, headers=self.auth_headers(self.owner))
        self.assertEqual(response.status_code, 422)

    def test_members_and_my_crews(self):
        members = self.data(self.client.get(f"{self.crew_path}/members"))
        self.assertEqual([m["user"]["id"] for m in members], [self.owner.id, self.member.id])
        mine = self.data(self.client.get(self.api("/crews/my"), headers=self.auth_headers(self.member)))
        self.assertEqual([c["id"] for c in mine], [self.crew["id"]])

    def test_delete_crew(self):
        response = self.client.delete(self.crew_path, headers=self.auth_headers(self.member))
        self.assertEqual(response.status_code, 403)
        response = self.client.delete(self.crew_path, headers=self.auth_headers(self.owner))
        self.assertEqual(response.status_code, 200)
        response = self.client.get(self.crew_path)
        self.assertEqual(self.error_code(response), "CREW_NOT_FOUND")

    def test_list_public_crews(self):
        self.client.post(
            self.api("/crews"),
            json={"name": "비공개 크루", "is_public": False},
            headers=self.auth_headers(self.outsider)
        )
        data = self.data(self.client.get(self.api("/crews"), params={"is_public": True}))
        self.assertEqual([c["id"] for c in data["items"]], [self.crew["id"]])


class TestCrewBoardsApi(CrewApiTestCase):
    """크루 게시판 API 테스트"""

    def setUp(self):
        super().setUp()
        response = self.client.post(
            f"{self.crew_path}/boards",
            json={"name": "자유게시판", "sort_order": 1},
            headers=self.auth_headers(self.owner)
        )
        self.assertEqual(response.status_code, 201, response.text)
        self.board = self.data(response)
        boards = self.data(self.client.get(f"{self.crew_path}/boards", headers=self.auth_headers(self.owner)))
        self.announcement = next(b for b in boards if b["type"] == "ANNOUNCEMENT")

    def write(self, user, board_id=None, title="안녕하세요"):
        return self.client.post(
            f"{self.crew_path}/boards/{board_id or self.board['id']}/posts",
            json={"title": title, "content": "본문"},
            headers=self.auth_headers(user)
        )

    def test_outsider_forbidden(self):
        response = self.client.get(f"{self.crew_path}/boards", headers=self.auth_headers(self.outsider))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.write(self.outsider).status_code, 403)

    def test_member_cannot_manage_boards(self):
        response = self.client.post(
            f"{self.crew_path}/boards", json={"name": "x"}, headers=self.auth_headers(self.member)
        )
        self.assertEqual(response.status_code, 403)

    def test_admin_only_board(self):
        self.assertEqual(self.write(self.member, self.announcement["id"]).status_code, 403)
        self.assertEqual(self.write(self.owner, self.announcement["id"]).status_code, 201)

    def test_announcement_board_cannot_be_deleted(self):
        response = self.client.delete(
            f"{self.crew_path}/boards/{self.announcement['id']}", headers=self.auth_headers(self.owner)
        )
        self.assertEqual(response.status_code, 400)

    def test_delete_board_hides_posts(self):
        post = self.data(self.write(self.member))
        response = self.client.delete(f"{self.crew_path}/boards/{self.board['id']}", headers=self.auth_headers(self.owner))
        self.assertEqual(response.status_code, 200)
        response = self.client.get(f"{self.crew_path}/posts/{post['id']}", headers=self.auth_headers(self.member))
        self.assertEqual(response.status_code, 404)

    def test_pinned_posts_first_across_pages(self):
        base = datetime(2026, 5, 1, 6, 0, 0)
        ids = []
        for i in range(5):
            post = CrewBoardPost(
                board_id=self.board["id"],
                author_id=self.member.id,
                title=f"글 {i}",
                content="본문",
                is_pinned=(i == 0),
                created_at=base + timedelta(minutes=i)
            )
            self.db.add(post)
            self.db.commit()
            ids.append(post.id)

        seen = []
        cursor = None
        while True:
            params = {"limit": 2}
            if cursor:
                params["cursor"] = cursor
            response = self.client.get(
                f"{self.crew_path}/boards/{self.board['id']}/posts",
                params=params,
                headers=self.auth_headers(self.member)
            )
            data = self.data(response)
            seen.extend(p["id"] for p in data["items"])
            cursor = data["nextCursor"]
            if cursor is None:
                break

        self.assertEqual(seen, [ids[0], ids[4], ids[3], ids[2], ids[1]])

    def test_pin_like_and_comment(self):
        post = self.data(self.write(self.member))
        post_path = f"{self.crew_path}/posts/{post['id']}"

        self.assertEqual(self.client.patch(f"{post_path}/pin", headers=self.auth_headers(self.member)).status_code, 403)
        response = self.client.patch(f"{post_path}/pin", headers=self.auth_headers(self.owner))
        self.assertTrue(self.data(response)["is_pinned"])

        self.assertEqual(self.client.post(f"{post_path}/like", headers=self.auth_headers(self.owner)).status_code, 200)
        response = self.client.post(f"{post_path}/like", headers=self.auth_headers(self.owner))
        self.assertEqual(self.error_code(response), "ALREADY_LIKED")
        detail = self.data(self.client.get(post_path, headers=self.auth_headers(self.owner)))
        self.assertEqual(detail["like_count"], 1)
        self.assertTrue(detail["liked"])
        self.assertEqual(self.client.delete(f"{post_path}/like", headers=self.auth_headers(self.owner)).status_code, 200)
        response = self.client.delete(f"{post_path}/like", headers=self.auth_headers(self.owner))
        self.assertEqual(self.error_code(response), "LIKE_NOT_FOUND")

        comment = self.data(self.client.post(
            f"{post_path}/comments", json={"content": "좋아요"}, headers=self.auth_headers(self.owner)
        ))
        reply = self.data(self.client.post(
            f"{post_path}/comments", json={"content": "감사", "parent_id": comment["id"]},
            headers=self.auth_headers(self.member)
        ))
        response = self.client.post(
            f"{post_path}/comments", json={"content": "x", "parent_id": reply["id"]},
            headers=self.auth_headers(self.owner)
        )
        self.assertEqual(response.status_code, 400)

        comments = self.data(self.client.get(f"{post_path}/comments", headers=self.auth_headers(self.member)))
        self.assertEqual([c["id"] for c in comments], [comment["id"], reply["id"]])

    def test_edit_by_author_or_admin(self):
        post = self.data(self.write(self.member))
        post_path = f"{self.crew_path}/posts/{post['id']}"
        other = self.create_user("other")
        self.client.post(f"{self.crew_path}/join", headers=self.auth_headers(other))

        response = self.client.patch(post_path, json={"title": "남의 글"}, headers=self.auth_headers(other))
        self.assertEqual(response.status_code, 403)
        response = self.client.patch(post_path, json={"title": "수정"}, headers=self.auth_headers(self.member))
        self.assertEqual(self.data(response)["title"], "수정")
        response = self.client.delete(post_path, headers=self.auth_headers(self.owner))
        self.assertEqual(response.status_code, 200)


if __name__ == "__main__":
    unittest.main()
