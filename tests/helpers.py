import shutil
import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from linkleaf_api.app.core.config import settings
from linkleaf_api.app.core.db import init_db
from linkleaf_api.app.main import create_app


class DatabaseTestCase(unittest.TestCase):
    """Points the application at a fresh SQLite file for every test."""

    def setUp(self):
        self._tmpdir = tempfile.mkdtemp(prefix="linkleaf-test-")
        self._previous_db = settings.database_url
        settings.database_url = str(Path(self._tmpdir) / "test.db")
        init_db()

    def tearDown(self):
        settings.database_url = self._previous_db
        shutil.rmtree(self._tmpdir, ignore_errors=True)


class ApiTestCase(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.client = TestClient(create_app())

    def register(self, email="ada@example.com", password="secret123", first_name="Ada", last_name="Lovelace"):
        response = self.client.post(
            "/api/v1/auth/register",
            json={
                "email": email,
                "password": password,
                "firstName": first_name,
                "lastName": last_name,
            },
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def auth_headers(self, email="ada@example.com"):
        token = self.register(email=email)["access_token"]
        return {"Authorization": f"Bearer {token}"}

    def create_contact(self, headers, **fields):
        payload = {"name": "Ada Lovelace"}
        payload.update(fields)
        response = self.client.post("/api/v1/contacts/", json=payload, headers=headers)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()
