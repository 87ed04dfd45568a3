"""
Community platform: communities, subscriptions, posts, votes and reports.
"""

import pytest

from crudsuite.db.community import CommunityMember

BASE = "/communityPlatform"


@pytest.fixture
def creator(register):
    return register("/community/member")


@pytest.fixture
def voter(register):
    return register("/community/member")


@pytest.fixture
def admin(register):
    return register("/community/admin")


@pytest.fixture
def moderator(register):
    return register("/community/moderator")


@pytest.fixture
def make_community(client, creator):
    def _make(name="python", title="Python"):
        response = client.post(
            f"{BASE}/member/communities", json={"name": name, "title": title}, headers=creator["headers"]
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def community(make_community):
    return make_community()


@pytest.fixture
def make_post(client, community):
    def _make(member, title="A post", body="Body"):
        response = client.post(
            f"{BASE}/member/communities/{community['id']}/posts",
            json={"title": title, "body": body},
            headers=member["headers"],
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make


class TestCommunities:
    def test_creator_is_subscribed(self, client, creator, community, assert_page):
        assert community["subscriber_count"] == 1
        data = assert_page(client.patch(f"{BASE}/member/subscriptions", json={}, headers=creator["headers"]), records=1)
        assert data[0]["community_name"] == "python"

    def test_duplicate_name(self, client, creator, community):
        response = client.post(
            f"{BASE}/member/communities", json={"name": "python", "title": "Again"}, headers=creator["headers"]
        )
        assert response.status_code == 409

    @pytest.mark.parametrize("name", ["py", "has space", "x" * 22, "dash-ed"])
    def test_invalid_name(self, client, creator, name):
        response = client.post(f"{BASE}/member/communities", json={"name": name, "title": "t"}, headers=creator["headers"])
        assert response.status_code == 422

    def test_search_sorted_by_subscribers(self, client, voter, make_community, assert_page):
        make_community("small", "Small")
        big = make_community("big_one", "Big")
        client.post(f"{BASE}/member/communities/{big['id']}/subscriptions", headers=voter["headers"])

        data = assert_page(
            client.patch(f"{BASE}/communities", json={"sort_by": "subscriber_count"}),
            records=2,
        )
        assert [c["name"] for c in data] == ["big_one", "small"]
        assert data[0]["subscriber_count"] == 2

    def test_assign_moderator(self, client, admin, moderator, community):
        url = f"{BASE}/admin/communities/{community['id']}/moderators"
        response = client.post(url, json={"moderator_id": moderator["id"]}, headers=admin["headers"])
        assert response.status_code == 201
        assert response.json()["assigned_by_admin_id"] == admin["id"]
        assert client.post(url, json={"moderator_id": moderator["id"]}, headers=admin["headers"]).status_code == 409


class TestSubscriptions:
    def test_subscribe_and_unsubscribe(self, client, voter, community):
        url = f"{BASE}/member/communities/{community['id']}/subscriptions"

        assert client.post(url, headers=voter["headers"]).status_code == 201
        assert client.post(url, headers=voter["headers"]).status_code == 409
        assert client.get(f"{BASE}/communities/{community['id']}").json()["subscriber_count"] == 2

        assert client.delete(url, headers=voter["headers"]).status_code == 204
        assert client.delete(url, headers=voter["headers"]).status_code == 404
        assert client.get(f"{BASE}/communities/{community['id']}").json()["subscriber_count"] == 1

    def test_search_by_community_name(self, client, creator, make_community, assert_page):
        make_community("zeta", "Z")
        make_community("alpha", "A")
        make_community("alpine", "Alpine")

        data = assert_page(
            client.patch(
                f"{BASE}/member/subscriptions",
                json={"search": "alp", "sort_by": "community_name", "sort_direction": "asc"},
                headers=creator["headers"],
            ),
            records=2,
        )
        assert [s["community_name"] for s in data] == ["alpha", "alpine"]


class TestPostsAndComments:
    def test_only_author_can_edit(self, client, creator, voter, make_post):
        post = make_post(creator)
        url = f"{BASE}/member/posts/{post['id']}"
        assert client.put(url, json={"title": "Mine now"}, headers=voter["headers"]).status_code == 403
        assert client.delete(url, headers=voter["headers"]).status_code == 403
        assert client.delete(url, headers=creator["headers"]).status_code == 204
        assert client.get(f"{BASE}/posts/{post['id']}").status_code == 404

    def test_search_filters(self, client, creator, voter, make_post, assert_page):
        make_post(creator, title="Async tips")
        make_post(voter, title="Typing tips")
        make_post(voter, title="Question")

        data = assert_page(client.patch(f"{BASE}/posts", json={"author_id": voter["id"], "search": "tips"}), records=1)
        assert data[0]["title"] == "Typing tips"

    def test_comments(self, client, creator, voter, make_post, assert_page):
        post = make_post(creator)
        other = make_post(creator, title="Other")
        url = f"{BASE}/member/posts/{post['id']}/comments"

        first = client.post(url, json={"body": "first"}, headers=voter["headers"]).json()
        client.post(url, json={"body": "second", "parent_comment_id": first["id"]}, headers=creator["headers"])

        cross = client.post(
            f"{BASE}/member/posts/{other['id']}/comments",
            json={"body": "cross", "parent_comment_id": first["id"]},
            headers=voter["headers"],
        )
        assert cross.status_code == 400

        assert client.get(f"{BASE}/posts/{post['id']}").json()["comment_count"] == 2

        data = assert_page(client.patch(f"{BASE}/posts/{post['id']}/comments", json={"sort_by": "old"}), records=2)
        assert [c["body"] for c in data] == ["first", "second"]


class TestVotes:
    def karma(self, db_session, member_id):
        db_session.expire_all()
        return db_session.query(CommunityMember).filter(CommunityMember.id == member_id).one().karma

    def test_vote_moves_score_and_karma(self, client, db_session, creator, voter, make_post):
        post = make_post(creator)
        url = f"{BASE}/member/posts/{post['id']}/votes"

        assert client.put(url, json={"value": 1}, headers=voter["headers"]).json()["score"] == 1
        assert self.karma(db_session, creator["id"]) == 1

        assert client.put(url, json={"value": -1}, headers=voter["headers"]).json()["score"] == -1
        assert self.karma(db_session, creator["id"]) == -1

        assert client.put(url, json={"value": 0}, headers=voter["headers"]).json()["score"] == 0
        assert self.karma(db_session, creator["id"]) == 0

    def test_cannot_vote_own_post(self, client, creator, make_post):
        post = make_post(creator)
        response = client.put(f"{BASE}/member/posts/{post['id']}/votes", json={"value": 1}, headers=creator["headers"])
        assert response.status_code == 400

    def test_invalid_value(self, client, voter, creator, make_post):
        post = make_post(creator)
        response = client.put(f"{BASE}/member/posts/{post['id']}/votes", json={"value": 2}, headers=voter["headers"])
        assert response.status_code == 422

    def test_top_sort(self, client, creator, voter, make_post, assert_page):
        make_post(creator, title="meh")
        good = make_post(creator, title="good")
        client.put(f"{BASE}/member/posts/{good['id']}/votes", json={"value": 1}, headers=voter["headers"])

        data = assert_page(client.patch(f"{BASE}/posts", json={"sort_by": "top"}), records=2)
        assert data[0]["title"] == "good"


class TestReports:
    @pytest.fixture
    def filed(self, client, creator, voter, make_post):
        post = make_post(creator)
        response = client.post(
            f"{BASE}/member/reports", json={"post_id": post["id"], "category": "spam"}, headers=voter["headers"]
        )
        assert response.status_code == 201, response.text
        return response.json()

    def test_duplicate_and_target_rules(self, client, voter, filed):
        again = client.post(
            f"{BASE}/member/reports", json={"post_id": filed["post_id"], "category": "other"}, headers=voter["headers"]
        )
        assert again.status_code == 409
        neither = client.post(f"{BASE}/member/reports", json={"category": "spam"}, headers=voter["headers"])
        assert neither.status_code == 400

    def test_moderator_scope(self, client, admin, moderator, community, filed, assert_page):
        queue = f"{BASE}/moderator/reports"
        review = f"{BASE}/moderator/reports/{filed['id']}"

        assert_page(client.patch(queue, json={}, headers=moderator["headers"]), records=0)
        assert client.put(review, json={"status": "reviewed"}, headers=moderator["headers"]).status_code == 403

        client.post(
            f"{BASE}/admin/communities/{community['id']}/moderators",
            json={"moderator_id": moderator["id"]},
            headers=admin["headers"],
        )
        assert_page(client.patch(queue, json={}, headers=moderator["headers"]), records=1)

        response = client.put(
            review, json={"status": "action_taken", "resolution": "remove_content"}, headers=moderator["headers"]
        )
        assert response.status_code == 200
        assert response.json()["reviewed_at"] is not None
        assert client.get(f"{BASE}/posts/{filed['post_id']}").status_code == 404

    def test_removing_a_comment_drops_the_post_comment_count(self, client, admin, moderator, community, creator,
                                                              voter, make_post, assert_page):
        post = make_post(creator)
        url = f"{BASE}/member/posts/{post['id']}/comments"
        rude = client.post(url, json={"body": "rude"}, headers=voter["headers"]).json()
        client.post(url, json={"body": "fine"}, headers=voter["headers"])
        assert client.get(f"{BASE}/posts/{post['id']}").json()["comment_count"] == 2

        report = client.post(
            f"{BASE}/member/reports", json={"comment_id": rude["id"], "category": "harassment"},
            headers=creator["headers"],
        ).json()
        client.post(
            f"{BASE}/admin/communities/{community['id']}/moderators",
            json={"moderator_id": moderator["id"]},
            headers=admin["headers"],
        )
        response = client.put(
            f"{BASE}/moderator/reports/{report['id']}",
            json={"status": "action_taken", "resolution": "remove_content"},
            headers=moderator["headers"],
        )
        assert response.status_code == 200, response.text

        assert client.get(f"{BASE}/posts/{post['id']}").json()["comment_count"] == 1
        data = assert_page(client.patch(f"{BASE}/posts/{post['id']}/comments", json={}), records=1)
        assert data[0]["body"] == "fine"

    def test_admin_sees_everything(self, client, admin, filed, assert_page):
        data = assert_page(
            client.patch(f"{BASE}/admin/reports", json={"status": "pending"}, headers=admin["headers"]), records=1
        )
        assert data[0]["id"] == filed["id"]

        response = client.put(f"{BASE}/admin/reports/{filed['id']}", json={"status": "dismissed"},
                              headers=admin["headers"])
        assert response.json()["status"] == "dismissed"
        assert_page(client.patch(f"{BASE}/admin/reports", json={"status": "pending"}, headers=admin["headers"]),
                    records=0)
