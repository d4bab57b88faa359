import pytest

from users.models import User

pytestmark = pytest.mark.django_db


class TestAccounts:
    def test_register_creates_learner_with_tokens(self, api_client):
        resp = api_client.post("/api/auth/register/", {
            "username": "carol",
            "email": "carol@example.com",
            "password": "a-Long-enough-pass-42",
        }, format="json")
        assert resp.status_code == 201
        assert resp.data["user"]["role"] == "learner"
        assert resp.data["user"]["name"] == "carol"
        assert {"access", "refresh"} <= set(resp.data["tokens"])

    def test_duplicate_email_is_rejected(self, api_client, learner):
        resp = api_client.post("/api/auth/register/", {
            "username": "alice2",
            "email": "ALICE@example.com",
            "password": "a-Long-enough-pass-42",
        }, format="json")
        assert resp.status_code == 400

    @pytest.mark.parametrize("login", ["alice", "alice@example.com"])
    def test_login_by_username_or_email(self, api_client, learner, login):
        resp = api_client.post("/api/auth/login/", {"username": login, "password": "pass-1234-word"}, format="json")
        assert resp.status_code == 200
        assert "access" in resp.data["tokens"]

    def test_bad_password(self, api_client, learner):
        resp = api_client.post("/api/auth/login/", {"username": "alice", "password": "nope"}, format="json")
        assert resp.status_code == 400

    def test_me_update(self, client_for, learner):
        client = client_for(learner)
        resp = client.patch("/api/auth/me/", {"name": "Alice L."}, format="json")
        assert resp.status_code == 200
        assert User.objects.get(pk=learner.pk).name == "Alice L."
        assert client.get("/api/auth/me/").data["total_points"] == 0

    def test_only_superadmin_lists_users(self, client_for, learner, superadmin):
        assert client_for(learner).get("/api/users/").status_code == 403
        assert client_for(superadmin).get("/api/users/").status_code == 200

    def test_request_id_is_echoed(self, api_client, db):
        resp = api_client.get("/api/courses/", HTTP_X_REQUEST_ID="abc123")
        assert resp["X-Request-ID"] == "abc123"
