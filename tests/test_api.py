"""End-to-end API tests: sessions, error rendering, admin gate and generation quota."""

import unittest
from unittest.mock import AsyncMock, patch

from blogai.core.errors import UpstreamFailure
from blogai.core.security import TokenSigner
from blogai.models import User

from support import (
    TEST_PASSWORD,
    TEST_SECRET,
    add_post,
    add_user,
    bearer,
    make_context,
    open_client,
)

API = "/api/v1"


class ApiTestCase(unittest.TestCase):
    settings_overrides: dict[str, object] = {}

    def setUp(self) -> None:
        self.context = make_context(**self.settings_overrides)
        self.db = self.context.session_factory()
        self.client = open_client(self, self.context)
        self.addCleanup(self.db.close)

    def login(self, email: str, password: str = TEST_PASSWORD) -> str:
        response = self.client.post(f"{API}/auth/login", json={"email": email, "password": password})
        self.assertEqual(response.status_code, 200, response.text)
        self.client.cookies.clear()
        return response.json()["access_token"]


class TestRoot(ApiTestCase):
    def test_root_and_health(self) -> None:
        self.assertEqual(self.client.get("/").json(), {"message": "BlogAI API"})
        health = self.client.get(f"{API}/health/").json()
        self.assertEqual(health["status"], "ok")
        self.assertEqual(health["database"], "connected")
        self.assertEqual(health["text_generation"], "unconfigured")
        self.assertEqual(health["email"], "unconfigured")


class TestSignupAndLogin(ApiTestCase):
    def test_signup_then_login_sets_cookie(self) -> None:
        response = self.client.post(
            f"{API}/auth/signup",
            json={"name": "Ann", "email": "ann@x.com", "password": "long-enough"},
        )
        self.assertEqual(response.status_code, 201, response.text)
        self.assertEqual(response.json()["user"]["generations_left"], 20)
        self.assertNotIn("password_hash", response.json()["user"])

        response = self.client.post(
            f"{API}/auth/login", json={"email": "ann@x.com", "password": "long-enough"}
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["token_type"], "bearer")
        cookie = response.headers["set-cookie"]
        self.assertIn("auth-token=", cookie)
        self.assertIn("HttpOnly", cookie)
        self.assertIn("Max-Age=604800", cookie)
        self.assertIn("Path=/", cookie)
        self.assertIn("samesite=lax", cookie.lower())
        self.assertNotIn("Secure", cookie)

        # The cookie alone authenticates.
        me = self.client.get(f"{API}/auth/user")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["email"], "ann@x.com")

    def test_duplicate_signup_conflict(self) -> None:
        add_user(self.db, self.context, "dup@x.com")
        response = self.client.post(
            f"{API}/auth/signup", json={"email": "dup@x.com", "password": "long-enough"}
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json(), {"error": "User already exists"})

    def test_invalid_body_is_400(self) -> None:
        response = self.client.post(f"{API}/auth/signup", json={"email": "not-an-email", "password": "x"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("error", response.json())

    def test_bad_credentials(self) -> None:
        add_user(self.db, self.context, "a@x.com")
        response = self.client.post(f"{API}/auth/login", json={"email": "a@x.com", "password": "wrong-pass"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Invalid email or password"})
        self.assertNotIn("set-cookie", response.headers)

    def test_logout_clears_cookie_but_token_still_works(self) -> None:
        add_user(self.db, self.context, "a@x.com")
        token = self.login("a@x.com")
        response = self.client.post(f"{API}/auth/logout")
        self.assertEqual(response.status_code, 200)
        self.assertIn('auth-token=""', response.headers["set-cookie"])
        self.assertEqual(self.client.get(f"{API}/auth/user", headers=bearer(token)).status_code, 200)


class TestProdCookie(ApiTestCase):
    settings_overrides = {"APP_ENV": "prod"}

    def test_cookie_is_secure_in_prod(self) -> None:
        add_user(self.db, self.context, "a@x.com")
        response = self.client.post(f"{API}/auth/login", json={"email": "a@x.com", "password": TEST_PASSWORD})
        self.assertIn("Secure", response.headers["set-cookie"])


class TestUnauthenticated(ApiTestCase):
    def test_missing_token(self) -> None:
        response = self.client.get(f"{API}/dashboard")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Not authenticated"})
        self.assertEqual(response.headers["www-authenticate"], "Bearer")

    def test_garbage_token(self) -> None:
        response = self.client.get(f"{API}/dashboard", headers=bearer("garbage"))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Invalid or expired token"})

    def test_token_for_deleted_account(self) -> None:
        token, _ = TokenSigner(TEST_SECRET).sign({"id": 4242, "role": "admin"})
        response = self.client.get(f"{API}/auth/user", headers=bearer(token))
        self.assertEqual(response.status_code, 401)


class TestProfileAndPassword(ApiTestCase):
    def test_update_profile_and_password(self) -> None:
        add_user(self.db, self.context, "a@x.com")
        token = self.login("a@x.com")
        response = self.client.put(f"{API}/user/profile", json={"name": "Renamed"}, headers=bearer(token))
        self.assertEqual(response.status_code, 200, response.text)
        response = self.client.put(
            f"{API}/user/password",
            json={"current_password": TEST_PASSWORD, "new_password": "another-secret"},
            headers=bearer(token),
        )
        self.assertEqual(response.json(), {"message": "Password updated successfully"})
        self.login("a@x.com", "another-secret")


class TestPostsApi(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.owner = add_user(self.db, self.context, "owner@x.com")
        self.other = add_user(self.db, self.context, "other@x.com")
        self.owner_token = self.login("owner@x.com")
        self.other_token = self.login("other@x.com")

    def test_create_list_delete(self) -> None:
        created = self.client.post(
            f"{API}/posts/draft",
            json={"title": "Hello", "content": "one two three"},
            headers=bearer(self.owner_token),
        )
        self.assertEqual(created.status_code, 201, created.text)
        post_id = created.json()["id"]
        self.assertEqual(created.json()["word_count"], 3)

        listed = self.client.get(f"{API}/posts", headers=bearer(self.owner_token)).json()
        self.assertEqual([p["id"] for p in listed], [post_id])

        forbidden = self.client.delete(f"{API}/posts/{post_id}", headers=bearer(self.other_token))
        self.assertEqual(forbidden.status_code, 403)
        self.assertIn("error", forbidden.json())

        deleted = self.client.delete(f"{API}/posts/{post_id}", headers=bearer(self.owner_token))
        self.assertEqual(deleted.status_code, 204)
        self.assertEqual(self.client.get(f"{API}/posts", headers=bearer(self.owner_token)).json(), [])
        missing = self.client.get(f"{API}/posts/{post_id}", headers=bearer(self.owner_token))
        self.assertEqual(missing.status_code, 404)

    def test_status_filter_query_param(self) -> None:
        add_post(self.db, self.owner, "Draft")
        add_post(self.db, self.owner, "Live", status="published")
        listed = self.client.get(
            f"{API}/posts", params={"status": "published"}, headers=bearer(self.owner_token)
        ).json()
        self.assertEqual([p["title"] for p in listed], ["Live"])

    def test_save_and_collections(self) -> None:
        post = add_post(self.db, self.owner, status="published")
        saved = self.client.post(f"{API}/posts/{post.id}/save", headers=bearer(self.other_token))
        self.assertEqual(saved.status_code, 201)
        listed = self.client.get(f"{API}/posts/saved", headers=bearer(self.other_token)).json()
        self.assertEqual([p["id"] for p in listed], [post.id])

        collection = self.client.post(
            f"{API}/collections", json={"name": "Reading"}, headers=bearer(self.other_token)
        ).json()
        response = self.client.put(
            f"{API}/posts/{post.id}/collections",
            json={"collection_ids": [collection["id"]]},
            headers=bearer(self.other_token),
        )
        self.assertEqual([c["id"] for c in response.json()], [collection["id"]])
        collections = self.client.get(f"{API}/collections", headers=bearer(self.other_token)).json()
        self.assertEqual(collections[0]["post_count"], 1)

        unsaved = self.client.delete(f"{API}/posts/{post.id}/save", headers=bearer(self.other_token))
        self.assertEqual(unsaved.status_code, 204)


class TestAdminApi(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = add_user(self.db, self.context, "admin@x.com", role="admin")
        self.user = add_user(self.db, self.context, "user@x.com", generations_left=2)
        self.admin_token = self.login("admin@x.com")
        self.user_token = self.login("user@x.com")

    def test_non_admin_forbidden(self) -> None:
        for method, path in (
            ("get", "/admin/users"),
            ("get", "/admin/stats"),
            ("patch", f"/admin/users/{self.user.id}"),
            ("delete", f"/admin/users/{self.admin.id}"),
        ):
            kwargs = {"json": {"role": "admin"}} if method == "patch" else {}
            response = getattr(self.client, method)(f"{API}{path}", headers=bearer(self.user_token), **kwargs)
            self.assertEqual(response.status_code, 403, path)
            self.assertEqual(response.json(), {"error": "Admin access required"})

    def test_list_and_stats(self) -> None:
        users = self.client.get(f"{API}/admin/users", headers=bearer(self.admin_token)).json()
        self.assertEqual({u["email"] for u in users}, {"admin@x.com", "user@x.com"})
        stats = self.client.get(f"{API}/admin/stats", headers=bearer(self.admin_token)).json()
        self.assertEqual(stats["total_users"], 2)

    def test_upgrade_to_premium(self) -> None:
        response = self.client.patch(
            f"{API}/admin/users/{self.user.id}",
            json={"subscription": "premium"},
            headers=bearer(self.admin_token),
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual((body["generations_left"], body["generations_total"]), (100, 100))

    def test_self_demotion_and_self_delete_blocked(self) -> None:
        demote = self.client.patch(
            f"{API}/admin/users/{self.admin.id}", json={"role": "user"}, headers=bearer(self.admin_token)
        )
        self.assertEqual(demote.status_code, 403)
        self.assertEqual(demote.json(), {"error": "Cannot change your own admin role"})
        delete = self.client.delete(f"{API}/admin/users/{self.admin.id}", headers=bearer(self.admin_token))
        self.assertEqual(delete.status_code, 403)
        self.assertEqual(delete.json(), {"error": "Cannot delete your own account"})

    def test_delete_user_revokes_access(self) -> None:
        add_post(self.db, self.user)
        response = self.client.delete(f"{API}/admin/users/{self.user.id}", headers=bearer(self.admin_token))
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["posts_deleted"], 1)
        self.assertEqual(self.client.get(f"{API}/auth/user", headers=bearer(self.user_token)).status_code, 401)

    def test_demoted_admin_loses_access_immediately(self) -> None:
        other_admin = add_user(self.db, self.context, "admin2@x.com", role="admin")
        other_token = self.login("admin2@x.com")
        self.client.patch(
            f"{API}/admin/users/{other_admin.id}", json={"role": "user"}, headers=bearer(self.admin_token)
        )
        response = self.client.get(f"{API}/admin/users", headers=bearer(other_token))
        self.assertEqual(response.status_code, 403)


class TestGenerateApi(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = add_user(self.db, self.context, "writer@x.com", generations_left=1)
        self.token = self.login("writer@x.com")

    def _remaining(self) -> int:
        self.db.expire_all()
        return self.db.get(User, self.user.id).generations_left

    def test_topics_consume_one_generation(self) -> None:
        self.context.generator.complete = AsyncMock(return_value='["a", "b", "c"]')
        response = self.client.post(
            f"{API}/generate/topics", json={"topic": "coffee"}, headers=bearer(self.token)
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["topics"], ["a", "b", "c"])
        self.assertTrue(body["partial_success"])
        self.assertEqual(body["generations_left"], 0)
        self.assertEqual(self._remaining(), 0)

        exhausted = self.client.post(
            f"{API}/generate/draft", json={"title": "More"}, headers=bearer(self.token)
        )
        self.assertEqual(exhausted.status_code, 403)
        self.assertEqual(self._remaining(), 0)

    def test_upstream_failure_keeps_quota(self) -> None:
        self.context.generator.complete = AsyncMock(
            side_effect=UpstreamFailure("Gemini returned status 503.")
        )
        response = self.client.post(
            f"{API}/generate/improve", json={"content": "text"}, headers=bearer(self.token)
        )
        self.assertEqual(response.status_code, 502)
        self.assertEqual(
            response.json(), {"error": "Gemini returned status 503.", "requires_retry": True}
        )
        self.assertEqual(self._remaining(), 1)


class TestUnexpectedError(unittest.TestCase):
    def test_unhandled_exception_is_generic_500(self) -> None:
        context = make_context()
        db = context.session_factory()
        add_user(db, context, "a@x.com")
        client = open_client(self, context, raise_server_exceptions=False)
        self.addCleanup(db.close)
        token = client.post(
            f"{API}/auth/login", json={"email": "a@x.com", "password": TEST_PASSWORD}
        ).json()["access_token"]
        with patch("blogai.api.v1.dashboard.build_dashboard", side_effect=RuntimeError("db exploded")):
            response = client.get(f"{API}/dashboard", headers=bearer(token))
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Internal server error"})


if __name__ == "__main__":
    unittest.main()
