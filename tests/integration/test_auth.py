"""
Join, login, refresh and role scoping across products.
"""

import uuid

import pytest

from crudsuite.api.security import create_access_token

PASSWORD = "Passw0rd!"


@pytest.mark.parametrize(
    "path,extra",
    [
        ("/member", {}),
        ("/community/member", {}),
        ("/shopping/customer", {"full_name": "Ada Lovelace"}),
        ("/shopping/seller", {"business_name": "Ada's Shop"}),
        ("/todo/member", {}),
    ],
)
def test_join_then_login(client, path, extra):
    payload = {"email": "Ada@Example.com", "password": PASSWORD, "username": "ada", **extra}

    joined = client.post(f"/auth{path}/join", json=payload)
    assert joined.status_code == 201, joined.text
    body = joined.json()
    assert body["email"] == "ada@example.com"
    assert set(body["token"]) == {"access", "refresh", "expired_at", "refreshable_until"}

    login = client.post(f"/auth{path}/login", json={"email": "ada@example.com", "password": PASSWORD})
    assert login.status_code == 200
    assert login.json()["id"] == body["id"]


def test_duplicate_email_conflicts(client, register):
    register("/todo/member", email="dup@example.com")
    response = client.post(
        "/auth/todo/member/join",
        json={"email": "dup@example.com", "password": PASSWORD, "username": "other"},
    )
    assert response.status_code == 409
    assert response.json()["error"]["type"] == "ConflictError"


def test_same_email_allowed_in_another_product(register):
    register("/todo/member", email="shared@example.com")
    register("/community/member", email="shared@example.com")


def test_wrong_password_is_unauthorized(client, register):
    register("/todo/member", email="me@example.com")
    response = client.post("/auth/todo/member/login", json={"email": "me@example.com", "password": "Wrong000"})
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Incorrect email or password"


def test_refresh_issues_new_pair(client, register):
    member = register("/todo/member")
    response = client.post("/auth/todo/member/refresh", json={"refresh_token": member["token"]["refresh"]})
    assert response.status_code == 200
    assert response.json()["id"] == member["id"]


def test_refresh_rejects_access_token(client, register):
    member = register("/todo/member")
    response = client.post("/auth/todo/member/refresh", json={"refresh_token": member["token"]["access"]})
    assert response.status_code == 401


def test_refresh_rejects_other_role(client, register):
    member = register("/todo/member")
    response = client.post("/auth/todo/administrator/refresh", json={"refresh_token": member["token"]["refresh"]})
    assert response.status_code == 401


def test_administrator_join_requires_strong_password(client):
    response = client.post(
        "/auth/todo/administrator/join",
        json={"email": "root@example.com", "password": "alllowercase", "username": "root"},
    )
    assert response.status_code == 422
    assert response.json()["error"]["message"] == "Request validation failed"


def test_password_limit_counts_utf8_bytes(client):
    # 72 characters but 144 bytes
    too_long = "é" * 72
    response = client.post(
        "/auth/todo/member/join",
        json={"email": "long@example.com", "password": too_long, "username": "long"},
    )
    assert response.status_code == 422
    assert response.json()["error"]["type"] == "ValidationError"

    login = client.post("/auth/todo/member/login", json={"email": "long@example.com", "password": too_long})
    assert login.status_code == 422

    # exactly 72 bytes
    at_limit = "é" * 36
    response = client.post(
        "/auth/todo/member/join",
        json={"email": "limit@example.com", "password": at_limit, "username": "limit"},
    )
    assert response.status_code == 201, response.text
    login = client.post("/auth/todo/member/login", json={"email": "limit@example.com", "password": at_limit})
    assert login.status_code == 200


def test_moderator_join_needs_existing_administrator(client):
    response = client.post(
        "/auth/moderator/join",
        json={
            "email": "mod@example.com",
            "password": PASSWORD,
            "username": "mod",
            "appointed_by_admin_id": str(uuid.uuid4()),
        },
    )
    assert response.status_code == 404


def test_moderator_join_with_administrator(register):
    admin = register("/administrator")
    moderator = register("/moderator", appointed_by_admin_id=admin["id"])
    assert moderator["id"] != admin["id"]


class TestRoleScoping:
    def test_missing_header(self, client):
        response = client.patch("/todo/member/todos", json={})
        assert response.status_code == 403
        assert response.json()["error"] == {"message": "Forbidden", "type": "ForbiddenError", "details": {}}

    def test_garbage_token(self, client):
        response = client.patch("/todo/member/todos", json={}, headers={"Authorization": "Bearer nope"})
        assert response.status_code == 403

    def test_token_of_another_role(self, client, register):
        member = register("/community/member")
        response = client.patch("/todo/member/todos", json={}, headers=member["headers"])
        assert response.status_code == 403

    def test_refresh_token_is_not_an_access_token(self, client, register):
        member = register("/todo/member")
        headers = {"Authorization": f"Bearer {member['token']['refresh']}"}
        assert client.patch("/todo/member/todos", json={}, headers=headers).status_code == 403

    def test_unknown_account(self, client):
        token = create_access_token(str(uuid.uuid4()), "todoMember")
        response = client.patch("/todo/member/todos", json={}, headers={"Authorization": token})
        assert response.status_code == 403

    def test_bare_token_accepted(self, client, register):
        member = register("/todo/member")
        response = client.patch("/todo/member/todos", json={}, headers={"Authorization": member["token"]["access"]})
        assert response.status_code == 200
