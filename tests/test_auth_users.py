import unittest

from linkleaf_api.app.core.security import create_access_token
from tests.helpers import ApiTestCase


class AuthTests(ApiTestCase):
    def test_register_returns_token_and_user(self):
        body = self.register(email="Ada@Example.com")
        self.assertEqual(body["token_type"], "bearer")
        self.assertEqual(body["user"]["email"], "ada@example.com")
        self.assertEqual(body["user"]["first_name"], "Ada")
        self.assertNotIn("password_hash", body["user"])

        me = self.client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"}
        )
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["id"], body["user"]["id"])

    def test_duplicate_email_is_conflict(self):
        self.register()
        response = self.client.post(
            "/api/v1/auth/register",
            json={"email": "ADA@example.com", "password": "secret123", "firstName": "A", "lastName": "L"},
        )
        self.assertEqual(response.status_code, 409)

    def test_register_validation(self):
        response = self.client.post(
            "/api/v1/auth/register",
            json={"email": "ada@example.com", "password": "123", "firstName": "Ada", "lastName": "L"},
        )
        self.assertEqual(response.status_code, 422)

    def test_login(self):
        self.register()
        response = self.client.post(
            "/api/v1/auth/login", json={"email": "ada@example.com", "password": "secret123"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertIsNotNone(response.json()["user"]["last_login"])

    def test_login_with_wrong_password(self):
        self.register()
        for credentials in (
            {"email": "ada@example.com", "password": "wrong-password"},
            {"email": "nobody@example.com", "password": "secret123"},
        ):
            response = self.client.post("/api/v1/auth/login", json=credentials)
            self.assertEqual(response.status_code, 401)
            self.assertEqual(response.json()["detail"], "Invalid credentials")

    def test_missing_or_bad_token(self):
        self.assertEqual(self.client.get("/api/v1/auth/me").status_code, 401)
        response = self.client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not.a.token"})
        self.assertEqual(response.status_code, 401)

    def test_expired_token_is_rejected(self):
        user = self.register()["user"]
        token = create_access_token({"sub": user["id"]}, expires_delta=-10)
        response = self.client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 401)

    def test_change_password(self):
        headers = self.auth_headers()
        wrong = self.client.put(
            "/api/v1/auth/change-password",
            json={"currentPassword": "nope", "newPassword": "brand-new"},
            headers=headers,
        )
        self.assertEqual(wrong.status_code, 401)

        response = self.client.put(
            "/api/v1/auth/change-password",
            json={"currentPassword": "secret123", "newPassword": "brand-new"},
            headers=headers,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "Password updated successfully"})

        old = self.client.post("/api/v1/auth/login", json={"email": "ada@example.com", "password": "secret123"})
        new = self.client.post("/api/v1/auth/login", json={"email": "ada@example.com", "password": "brand-new"})
        self.assertEqual(old.status_code, 401)
        self.assertEqual(new.status_code, 200)


class ProfileTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.headers = self.auth_headers()

    def test_get_profile(self):
        response = self.client.get("/api/v1/users/profile", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["last_name"], "Lovelace")

    def test_partial_profile_update(self):
        response = self.client.put(
            "/api/v1/users/profile",
            json={"avatarUrl": "https://example.com/ada.png"},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["avatar_url"], "https://example.com/ada.png")
        self.assertEqual(body["first_name"], "Ada")
        self.assertEqual(body["last_name"], "Lovelace")

    def test_delete_account_removes_contacts_and_invalidates_token(self):
        self.create_contact(self.headers, tags=["Keep"])
        other = self.auth_headers("other@example.com")

        response = self.client.delete("/api/v1/users/account", headers=self.headers)
        self.assertEqual(response.status_code, 204)

        me = self.client.get("/api/v1/auth/me", headers=self.headers)
        self.assertEqual(me.status_code, 401)
        self.assertEqual(me.json()["detail"], "User no longer exists")

        tags = self.client.get("/api/v1/tags/", headers=other).json()
        self.assertEqual([(tag["name"], tag["contact_count"]) for tag in tags], [("Keep", 0)])

        again = self.register()
        contacts = self.client.get(
            "/api/v1/contacts/", headers={"Authorization": f"Bearer {again['access_token']}"}
        ).json()
        self.assertEqual(contacts["pagination"]["total"], 0)


class HealthTests(ApiTestCase):
    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")


if __name__ == "__main__":
    unittest.main()
