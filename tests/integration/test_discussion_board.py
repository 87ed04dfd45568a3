"""
Discussion board: topics, replies, the moderation queue and appeals.
"""

from datetime import datetime, timedelta

import pytest

from crudsuite.db.discussion_board import ModerationAction

BASE = "/discussionBoard"


@pytest.fixture
def admin(register):
    return register("/administrator")


@pytest.fixture
def moderator(register, admin):
    return register("/moderator", appointed_by_admin_id=admin["id"])


@pytest.fixture
def author(register):
    return register("/member", display_name="Author")


@pytest.fixture
def reader(register):
    return register("/member", display_name="Reader")


@pytest.fixture
def category(client, admin):
    response = client.post(
        f"{BASE}/administrator/categories",
        json={"name": "General", "slug": "general", "display_order": 1},
        headers=admin["headers"],
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def make_topic(client, category):
    def _make(member, title="Hello", body="First post"):
        response = client.post(
            f"{BASE}/member/topics",
            json={"category_id": category["id"], "title": title, "body": body},
            headers=member["headers"],
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make


def report(client, member, **payload):
    return client.post(f"{BASE}/member/reports", json=payload, headers=member["headers"])


def act(client, moderator, **payload):
    return client.post(f"{BASE}/moderator/moderationActions", json=payload, headers=moderator["headers"])


class TestCategories:
    def test_duplicate_slug(self, client, admin, category):
        response = client.post(
            f"{BASE}/administrator/categories",
            json={"name": "Other", "slug": "general"},
            headers=admin["headers"],
        )
        assert response.status_code == 409

    def test_member_cannot_create(self, client, author):
        response = client.post(
            f"{BASE}/administrator/categories",
            json={"name": "Other", "slug": "other"},
            headers=author["headers"],
        )
        assert response.status_code == 403

    def test_public_search(self, client, category, assert_page):
        data = assert_page(client.patch(f"{BASE}/categories", json={"search": "gen"}), records=1)
        assert data[0]["slug"] == "general"


class TestTopics:
    def test_search_pagination_and_filters(self, client, author, reader, make_topic, assert_page):
        make_topic(author, title="Python tips")
        make_topic(author, title="Rust tips")
        make_topic(reader, title="Gardening")

        data = assert_page(
            client.patch(f"{BASE}/topics", json={"limit": 2, "sort_by": "title", "sort_direction": "asc"}),
            records=3,
            limit=2,
        )
        assert [t["title"] for t in data] == ["Gardening", "Python tips"]

        data = assert_page(
            client.patch(f"{BASE}/topics", json={"page": 2, "limit": 2, "sort_by": "title", "sort_direction": "asc"}),
            records=3,
            current=2,
            limit=2,
        )
        assert [t["title"] for t in data] == ["Rust tips"]

        data = assert_page(client.patch(f"{BASE}/topics", json={"author_id": author["id"], "search": "TIPS"}), records=2)
        assert all(t["author_id"] == author["id"] for t in data)

    def test_get_increments_view_count(self, client, author, make_topic):
        topic = make_topic(author)
        client.get(f"{BASE}/topics/{topic['id']}")
        response = client.get(f"{BASE}/topics/{topic['id']}")
        assert response.json()["view_count"] == 2

    def test_only_author_can_edit(self, client, author, reader, make_topic):
        topic = make_topic(author)
        response = client.put(
            f"{BASE}/member/topics/{topic['id']}", json={"title": "Hijacked"}, headers=reader["headers"]
        )
        assert response.status_code == 403

        response = client.put(
            f"{BASE}/member/topics/{topic['id']}", json={"title": "Edited"}, headers=author["headers"]
        )
        assert response.json()["title"] == "Edited"

    def test_delete_is_soft_and_hides_topic(self, client, author, make_topic, assert_page):
        topic = make_topic(author)
        assert client.delete(f"{BASE}/member/topics/{topic['id']}", headers=author["headers"]).status_code == 204
        assert client.get(f"{BASE}/topics/{topic['id']}").status_code == 404
        assert_page(client.patch(f"{BASE}/topics", json={}), records=0)

    def test_inactive_category(self, client, admin, author):
        inactive = client.post(
            f"{BASE}/administrator/categories",
            json={"name": "Archive", "slug": "archive", "is_active": False},
            headers=admin["headers"],
        ).json()
        response = client.post(
            f"{BASE}/member/topics",
            json={"category_id": inactive["id"], "title": "x", "body": "y"},
            headers=author["headers"],
        )
        assert response.status_code == 404


class TestReplies:
    def test_nesting_depth_limit(self, client, author, make_topic):
        topic = make_topic(author)
        url = f"{BASE}/member/topics/{topic['id']}/replies"

        parent = None
        for depth in range(11):
            response = client.post(
                url, json={"content": f"depth {depth}", "parent_reply_id": parent}, headers=author["headers"]
            )
            assert response.status_code == 201, response.text
            assert response.json()["depth"] == depth
            parent = response.json()["id"]

        response = client.post(url, json={"content": "too deep", "parent_reply_id": parent}, headers=author["headers"])
        assert response.status_code == 400

        assert client.get(f"{BASE}/topics/{topic['id']}").json()["reply_count"] == 11

    def test_parent_must_be_in_same_topic(self, client, author, make_topic):
        first = make_topic(author, title="one")
        second = make_topic(author, title="two")
        parent = client.post(
            f"{BASE}/member/topics/{first['id']}/replies", json={"content": "hi"}, headers=author["headers"]
        ).json()

        response = client.post(
            f"{BASE}/member/topics/{second['id']}/replies",
            json={"content": "cross", "parent_reply_id": parent["id"]},
            headers=author["headers"],
        )
        assert response.status_code == 400

    def test_search_oldest_first(self, client, author, reader, make_topic, assert_page):
        topic = make_topic(author)
        for member, text in ((reader, "first"), (author, "second"), (reader, "third")):
            client.post(f"{BASE}/member/topics/{topic['id']}/replies", json={"content": text}, headers=member["headers"])

        data = assert_page(client.patch(f"{BASE}/topics/{topic['id']}/replies", json={}), records=3)
        assert [r["content"] for r in data] == ["first", "second", "third"]

        data = assert_page(
            client.patch(f"{BASE}/topics/{topic['id']}/replies", json={"author_id": reader["id"]}), records=2
        )
        assert {r["content"] for r in data} == {"first", "third"}


class TestEditHistory:
    def edit_topic(self, client, member, topic, **fields):
        response = client.put(f"{BASE}/member/topics/{topic['id']}", json=fields, headers=member["headers"])
        assert response.status_code == 200, response.text
        return response.json()

    def test_topic_edits_are_tracked_in_order(self, client, author, make_topic, assert_page):
        topic = make_topic(author, title="v1", body="body 1")
        self.edit_topic(client, author, topic, title="v2")
        self.edit_topic(client, author, topic, body="body 2")
        self.edit_topic(client, author, topic, title="v3", body="body 3")

        url = f"{BASE}/topics/{topic['id']}/editHistory"
        data = assert_page(client.patch(url, json={"sort_direction": "asc"}), records=3)
        assert [e["revision"] for e in data] == [1, 2, 3]
        assert all(e["entity_type"] == "topic" and e["entity_id"] == topic["id"] for e in data)
        assert all(e["member_id"] == author["id"] for e in data)
        assert [(e["previous_title"], e["new_title"]) for e in data] == [("v1", "v2"), ("v2", "v2"), ("v2", "v3")]
        assert [(e["previous_content"], e["new_content"]) for e in data] == [
            ("body 1", "body 1"),
            ("body 1", "body 2"),
            ("body 2", "body 3"),
        ]

        data = assert_page(client.patch(url, json={"limit": 2}), records=3, limit=2)
        assert [e["revision"] for e in data] == [3, 2]

    def test_unchanged_edit_is_not_recorded(self, client, author, make_topic, assert_page):
        topic = make_topic(author, title="Same", body="Same body")
        self.edit_topic(client, author, topic, title="Same")
        assert_page(client.patch(f"{BASE}/topics/{topic['id']}/editHistory", json={}), records=0)

    def test_reply_history_is_public(self, client, author, make_topic, assert_page):
        topic = make_topic(author)
        reply = client.post(
            f"{BASE}/member/topics/{topic['id']}/replies", json={"content": "draft"}, headers=author["headers"]
        ).json()
        url = f"{BASE}/member/topics/{topic['id']}/replies/{reply['id']}"
        for content in ("second", "final"):
            response = client.put(url, json={"content": content}, headers=author["headers"])
            assert response.status_code == 200, response.text

        history = f"{BASE}/topics/{topic['id']}/replies/{reply['id']}/editHistory"
        data = assert_page(client.patch(history, json={"sort_direction": "asc"}), records=2)
        assert [(e["previous_content"], e["new_content"]) for e in data] == [("draft", "second"), ("second", "final")]
        assert all(e["entity_type"] == "reply" and e["previous_title"] is None for e in data)

        assert_page(client.patch(history, json={"member_id": author["id"]}), records=2)
        assert_page(client.patch(history, json={"created_to": "2000-01-01T00:00:00Z"}), records=0)

    def test_history_of_missing_content(self, client, author, make_topic):
        topic = make_topic(author)
        missing = "00000000-0000-0000-0000-000000000000"
        assert client.patch(f"{BASE}/topics/{missing}/editHistory", json={}).status_code == 404
        response = client.patch(f"{BASE}/topics/{topic['id']}/replies/{missing}/editHistory", json={})
        assert response.status_code == 404


class TestReports:
    def test_severity_from_category(self, client, author, reader, make_topic):
        topic = make_topic(author)
        response = report(client, reader, reported_topic_id=topic["id"], violation_category="doxxing")
        assert response.status_code == 201
        body = response.json()
        assert body["severity"] == "critical"
        assert body["status"] == "pending"
        assert body["reported_member_id"] == author["id"]

    def test_validation_rules(self, client, author, reader, make_topic):
        topic = make_topic(author)
        reply = client.post(
            f"{BASE}/member/topics/{topic['id']}/replies", json={"content": "hi"}, headers=author["headers"]
        ).json()

        both = report(client, reader, reported_topic_id=topic["id"], reported_reply_id=reply["id"],
                      violation_category="spam")
        assert both.status_code == 400
        assert report(client, reader, violation_category="spam").status_code == 400
        assert report(client, reader, reported_topic_id=topic["id"], violation_category="other").status_code == 400
        assert report(client, author, reported_topic_id=topic["id"], violation_category="spam").status_code == 400

        assert report(client, reader, reported_reply_id=reply["id"], violation_category="spam").status_code == 201
        assert report(client, reader, reported_reply_id=reply["id"], violation_category="trolling").status_code == 409

    def test_queue_is_ordered_by_priority(self, client, author, reader, moderator, make_topic, assert_page):
        for title, category in (("a", "spam"), ("b", "threats"), ("c", "off_topic"), ("d", "misinformation")):
            topic = make_topic(author, title=title)
            assert report(client, reader, reported_topic_id=topic["id"], violation_category=category).status_code == 201

        data = assert_page(client.patch(f"{BASE}/moderator/reports", json={}, headers=moderator["headers"]), records=4)
        assert [r["severity"] for r in data] == ["critical", "high", "medium", "low"]

        data = assert_page(
            client.patch(f"{BASE}/moderator/reports", json={"severity": "medium"}, headers=moderator["headers"]),
            records=1,
        )
        assert data[0]["violation_category"] == "spam"

    def test_status_workflow(self, client, author, reader, moderator, admin, make_topic, assert_page):
        topic = make_topic(author)
        created = report(client, reader, reported_topic_id=topic["id"], violation_category="spam").json()
        url = f"{BASE}/moderator/reports/{created['id']}"

        response = client.put(url, json={"status": "under_review", "assign_to_self": True}, headers=moderator["headers"])
        assert response.json()["status"] == "under_review"
        assert response.json()["assigned_moderator_id"] == moderator["id"]

        assert client.put(url, json={"status": "pending"}, headers=moderator["headers"]).status_code == 400
        assert client.put(url, json={"status": "dismissed"}, headers=moderator["headers"]).status_code == 400

        response = client.put(
            url, json={"status": "dismissed", "resolution_notes": "Not spam"}, headers=moderator["headers"]
        )
        assert response.status_code == 200
        assert response.json()["resolved_at"] is not None

        assert client.put(url, json={"status": "resolved", "resolution_notes": "x"},
                          headers=moderator["headers"]).status_code == 409

        assert_page(client.patch(f"{BASE}/moderator/reports", json={}, headers=moderator["headers"]), records=0)
        data = assert_page(client.patch(f"{BASE}/administrator/reports", json={}, headers=admin["headers"]), records=1)
        assert data[0]["status"] == "dismissed"

    def test_member_cannot_see_queue(self, client, reader):
        assert client.patch(f"{BASE}/moderator/reports", json={}, headers=reader["headers"]).status_code == 403


class TestModerationActions:
    def test_suspension_blocks_posting_and_resolves_report(self, client, author, reader, moderator, make_topic):
        topic = make_topic(author)
        filed = report(client, reader, reported_topic_id=topic["id"], violation_category="personal_attack").json()

        response = act(
            client, moderator,
            action_type="suspend_user", target_member_id=author["id"], reason="Harassment",
            duration_days=7, related_report_id=filed["id"],
        )
        assert response.status_code == 201, response.text
        assert response.json()["expires_at"] is not None

        reviewed = client.get(f"{BASE}/moderator/reports/{filed['id']}", headers=moderator["headers"]).json()
        assert reviewed["status"] == "resolved"

        blocked = client.post(
            f"{BASE}/member/topics",
            json={"category_id": topic["category_id"], "title": "again", "body": "x"},
            headers=author["headers"],
        )
        assert blocked.status_code == 403

    def test_suspension_needs_duration(self, client, author, moderator):
        response = act(client, moderator, action_type="suspend_user", target_member_id=author["id"], reason="x")
        assert response.status_code == 400

    def test_hide_content(self, client, author, moderator, make_topic):
        topic = make_topic(author)
        response = act(
            client, moderator,
            action_type="hide_content", target_member_id=author["id"], reason="Off topic",
            content_topic_id=topic["id"],
        )
        assert response.status_code == 201
        assert client.get(f"{BASE}/topics/{topic['id']}").status_code == 404

    def test_deleting_a_reply_drops_the_reply_count(self, client, author, reader, moderator, make_topic,
                                                     assert_page):
        topic = make_topic(author)
        url = f"{BASE}/member/topics/{topic['id']}/replies"
        bad = client.post(url, json={"content": "spam"}, headers=reader["headers"]).json()
        client.post(url, json={"content": "welcome"}, headers=author["headers"])

        response = act(
            client, moderator,
            action_type="delete_content", target_member_id=reader["id"], reason="Spam",
            content_reply_id=bad["id"],
        )
        assert response.status_code == 201, response.text

        assert client.get(f"{BASE}/topics/{topic['id']}").json()["reply_count"] == 1
        data = assert_page(client.patch(f"{BASE}/topics/{topic['id']}/replies", json={}), records=1)
        assert data[0]["content"] == "welcome"

    def test_search_actions(self, client, author, reader, moderator, assert_page):
        act(client, moderator, action_type="warning", target_member_id=author["id"], reason="a")
        act(client, moderator, action_type="warning", target_member_id=reader["id"], reason="b")
        act(client, moderator, action_type="ban_user", target_member_id=reader["id"], reason="c")

        data = assert_page(
            client.patch(
                f"{BASE}/moderator/moderationActions",
                json={"target_member_id": reader["id"], "action_type": "warning"},
                headers=moderator["headers"],
            ),
            records=1,
        )
        assert data[0]["reason"] == "b"


class TestAppeals:
    @pytest.fixture
    def ban(self, client, author, moderator):
        response = act(client, moderator, action_type="ban_user", target_member_id=author["id"], reason="Spam")
        assert response.status_code == 201
        return response.json()

    def appeal(self, client, member, action_id):
        return client.post(
            f"{BASE}/member/appeals",
            json={"moderation_action_id": action_id, "appeal_explanation": "This was a misunderstanding."},
            headers=member["headers"],
        )

    def test_overturn_restores_member(self, client, author, admin, ban, make_topic):
        created = self.appeal(client, author, ban["id"])
        assert created.status_code == 201
        assert created.json()["status"] == "pending_review"

        assert self.appeal(client, author, ban["id"]).status_code == 409

        url = f"{BASE}/administrator/appeals/{created.json()['id']}"
        decided = client.put(url, json={"decision": "overturned", "decision_reasoning": "Fair point"},
                             headers=admin["headers"])
        assert decided.status_code == 200
        assert decided.json()["reviewing_administrator_id"] == admin["id"]

        assert client.put(url, json={"decision": "upheld", "decision_reasoning": "Changed my mind"},
                          headers=admin["headers"]).status_code == 409

        # Back to active, so posting works again
        make_topic(author)

    def test_only_target_can_appeal(self, client, reader, ban):
        assert self.appeal(client, reader, ban["id"]).status_code == 403

    def test_appeal_window(self, client, db_session, author, ban):
        db_session.query(ModerationAction).update(
            {ModerationAction.created_at: datetime.utcnow() - timedelta(days=31)}
        )
        db_session.commit()
        assert self.appeal(client, author, ban["id"]).status_code == 400

    def test_pending_appeal_limit(self, client, author, moderator):
        actions = [
            act(client, moderator, action_type="warning", target_member_id=author["id"], reason=f"w{i}").json()
            for i in range(6)
        ]
        for action in actions[:5]:
            assert self.appeal(client, author, action["id"]).status_code == 201
        assert self.appeal(client, author, actions[5]["id"]).status_code == 400

    def test_search_by_status(self, client, author, admin, moderator, assert_page):
        first = act(client, moderator, action_type="warning", target_member_id=author["id"], reason="a").json()
        second = act(client, moderator, action_type="warning", target_member_id=author["id"], reason="b").json()
        decided = self.appeal(client, author, first["id"]).json()
        self.appeal(client, author, second["id"])
        client.put(f"{BASE}/administrator/appeals/{decided['id']}",
                   json={"decision": "upheld", "decision_reasoning": "Stands"}, headers=admin["headers"])

        data = assert_page(
            client.patch(f"{BASE}/administrator/appeals", json={"statuses": ["upheld", "overturned"]},
                         headers=admin["headers"]),
            records=1,
        )
        assert data[0]["id"] == decided["id"]

        assert_page(
            client.patch(f"{BASE}/member/appeals", json={"statuses": ["pending_review"]}, headers=author["headers"]),
            records=1,
        )


def test_admin_member_search_includes_email(client, admin, author, reader, moderator, assert_page):
    act(client, moderator, action_type="ban_user", target_member_id=reader["id"], reason="x")

    data = assert_page(
        client.patch(f"{BASE}/administrator/members", json={"status": "banned"}, headers=admin["headers"]),
        records=1,
    )
    assert data[0]["id"] == reader["id"]
    assert data[0]["email"] == reader["email"]
