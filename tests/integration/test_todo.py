"""
Todo: member todos and the administrator views.
"""

import pytest

BASE = "/todo"


@pytest.fixture
def member(register):
    return register("/todo/member")


@pytest.fixture
def administrator(register):
    return register("/todo/administrator")


@pytest.fixture
def make_todo(client, member):
    def _make(title="Buy milk", owner=None, **fields):
        owner = owner or member
        response = client.post(f"{BASE}/member/todos", json={"title": title, **fields}, headers=owner["headers"])
        assert response.status_code == 201, response.text
        return response.json()

    return _make


class TestMemberTodos:
    def test_defaults(self, member, make_todo):
        todo = make_todo()
        assert todo["member_id"] == member["id"]
        assert todo["priority"] == "Medium"
        assert todo["completed"] is False
        assert todo["completed_at"] is None

    def test_completion_is_stamped_and_cleared(self, client, member, make_todo):
        todo = make_todo()
        url = f"{BASE}/member/todos/{todo['id']}"

        done = client.put(url, json={"completed": True}, headers=member["headers"]).json()
        assert done["completed"] is True
        assert done["completed_at"] is not None

        again = client.put(url, json={"completed": True, "title": "Buy oat milk"}, headers=member["headers"]).json()
        assert again["completed_at"] == done["completed_at"]
        assert again["title"] == "Buy oat milk"

        undone = client.put(url, json={"completed": False}, headers=member["headers"]).json()
        assert undone["completed"] is False
        assert undone["completed_at"] is None

    def test_invalid_priority(self, client, member):
        response = client.post(
            f"{BASE}/member/todos", json={"title": "x", "priority": "Urgent"}, headers=member["headers"]
        )
        assert response.status_code == 422

    def test_other_members_todo_is_missing(self, client, register, make_todo):
        todo = make_todo()
        other = register("/todo/member")
        url = f"{BASE}/member/todos/{todo['id']}"

        assert client.get(url, headers=other["headers"]).status_code == 404
        assert client.put(url, json={"title": "mine"}, headers=other["headers"]).status_code == 404
        assert client.delete(url, headers=other["headers"]).status_code == 404

    def test_delete(self, client, member, make_todo, assert_page):
        todo = make_todo()
        url = f"{BASE}/member/todos/{todo['id']}"

        assert client.delete(url, headers=member["headers"]).status_code == 204
        assert client.get(url, headers=member["headers"]).status_code == 404
        assert_page(client.patch(f"{BASE}/member/todos", json={}, headers=member["headers"]), records=0)


class TestSearch:
    @pytest.fixture
    def todos(self, client, member, make_todo):
        make_todo("Write report", priority="High", due_date="2026-11-01T09:00:00")
        make_todo("Water plants", priority="Low", due_date="2026-11-20T09:00:00")
        done = make_todo("Book flights", priority="Medium")
        client.put(f"{BASE}/member/todos/{done['id']}", json={"completed": True}, headers=member["headers"])

    def search(self, client, member, **body):
        return client.patch(f"{BASE}/member/todos", json=body, headers=member["headers"])

    def test_filters(self, client, member, todos, assert_page):
        data = assert_page(self.search(client, member, search="WRITE"), records=1)
        assert data[0]["title"] == "Write report"

        data = assert_page(self.search(client, member, completed=True), records=1)
        assert data[0]["title"] == "Book flights"

        data = assert_page(self.search(client, member, priority="Low"), records=1)
        assert data[0]["title"] == "Water plants"

        data = assert_page(
            self.search(client, member, due_from="2026-11-10T00:00:00", due_to="2026-11-30T00:00:00"),
            records=1,
        )
        assert data[0]["title"] == "Water plants"

    def test_priority_sort(self, client, member, todos, assert_page):
        data = assert_page(self.search(client, member, sort_by="priority", sort_direction="desc"), records=3)
        assert [t["priority"] for t in data] == ["High", "Medium", "Low"]

        data = assert_page(self.search(client, member, sort_by="priority", sort_direction="asc"), records=3)
        assert [t["priority"] for t in data] == ["Low", "Medium", "High"]

    def test_title_sort(self, client, member, todos, assert_page):
        data = assert_page(self.search(client, member, sort_by="title", sort_direction="asc"), records=3)
        assert [t["title"] for t in data] == ["Book flights", "Water plants", "Write report"]

    def test_pagination(self, client, member, todos, assert_page):
        first = assert_page(self.search(client, member, page=1, limit=2), records=3, limit=2)
        second = assert_page(self.search(client, member, page=2, limit=2), records=3, current=2, limit=2)
        assert len(first) == 2
        assert len(second) == 1
        assert {t["id"] for t in first}.isdisjoint(t["id"] for t in second)

    def test_invalid_sort(self, client, member):
        assert self.search(client, member, sort_by="colour").status_code == 422

    def test_offset_due_date_is_stored_as_utc(self, client, member, make_todo, assert_page):
        todo = make_todo("Standup", due_date="2024-05-01T10:00:00+02:00")
        assert todo["due_date"] == "2024-05-01T08:00:00"

        data = assert_page(
            self.search(client, member, due_from="2024-05-01T07:30:00Z", due_to="2024-05-01T08:30:00Z"),
            records=1,
        )
        assert data[0]["id"] == todo["id"]
        assert data[0]["due_date"] == "2024-05-01T08:00:00"

        moved = client.put(
            f"{BASE}/member/todos/{todo['id']}",
            json={"due_date": "2024-05-01T09:00:00-04:00"},
            headers=member["headers"],
        ).json()
        assert moved["due_date"] == "2024-05-01T13:00:00"


class TestAdministrator:
    def test_search_every_members_todos(self, client, register, administrator, member, make_todo, assert_page):
        other = register("/todo/member")
        make_todo("Mine")
        make_todo("Theirs", owner=other)

        url = f"{BASE}/administrator/todos"
        assert_page(client.patch(url, json={}, headers=administrator["headers"]), records=2)

        data = assert_page(client.patch(url, json={"member_id": other["id"]}, headers=administrator["headers"]),
                           records=1)
        assert data[0]["title"] == "Theirs"

    def test_search_members(self, client, administrator, member, assert_page):
        data = assert_page(
            client.patch(f"{BASE}/administrator/members", json={"search": member["username"]},
                         headers=administrator["headers"]),
            records=1,
        )
        assert data[0]["email"] == member["email"]

    def test_member_token_is_rejected(self, client, member):
        response = client.patch(f"{BASE}/administrator/todos", json={}, headers=member["headers"])
        assert response.status_code == 403
        assert response.json() == {"error": {"message": "Forbidden", "type": "ForbiddenError", "details": {}}}

    def test_administrator_has_no_member_routes(self, client, administrator):
        response = client.patch(f"{BASE}/member/todos", json={}, headers=administrator["headers"])
        assert response.status_code == 403
