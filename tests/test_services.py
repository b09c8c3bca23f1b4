import asyncio
import logging
import sqlite3
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest import mock

import seed_demo

from linkleaf_api.app.core.db import get_connection, transaction
from linkleaf_api.app.core.exceptions import NotFoundError
from linkleaf_api.app.core.logging_config import CONSOLE_HANDLER, FILE_HANDLER, setup_logging
from linkleaf_api.app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from linkleaf_api.app.schemas.contact import ContactCreate, ContactUpdate
from linkleaf_api.app.schemas.user import UserRegister
from linkleaf_api.app.services.contact_service import (
    ContactService,
    build_contact_filter,
    resolve_sort,
)
from linkleaf_api.app.services.tag_service import TagService
from linkleaf_api.app.services.user_service import UserService
from tests.helpers import DatabaseTestCase


def count_rows(table):
    conn = get_connection()
    try:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
    finally:
        conn.close()


class SortAndFilterTests(unittest.TestCase):
    def test_resolve_sort(self):
        self.assertEqual(resolve_sort("name", "asc"), ("c.name COLLATE NOCASE", "ASC"))
        self.assertEqual(resolve_sort("created_at", "DESC"), ("c.created_at", "DESC"))
        self.assertEqual(resolve_sort(None, None), ("c.created_at", "DESC"))
        self.assertEqual(resolve_sort("id; DROP TABLE contacts", "asc"), ("c.created_at", "ASC"))
        self.assertEqual(resolve_sort("name", "random"), ("c.name COLLATE NOCASE", "DESC"))

    def test_filter_is_always_scoped_to_user(self):
        where, params = build_contact_filter("user-1")
        self.assertEqual(where, "c.user_id = ?")
        self.assertEqual(params, ["user-1"])

    def test_filter_escapes_search_wildcards(self):
        where, params = build_contact_filter("user-1", search="50%_off", tag="Client")
        self.assertIn("ESCAPE", where)
        self.assertIn("t.name = ?", where)
        self.assertEqual(params[1:5], ["%50\\%\\_off%"] * 4)
        self.assertEqual(params[-1], "Client")

    def test_filter_casefolds_search_term(self):
        where, params = build_contact_filter("user-1", search="ÉLODIE")
        self.assertIn("casefold(c.name) LIKE ?", where)
        self.assertEqual(params[1:], ["%élodie%"] * 4)


class TagResolverTests(DatabaseTestCase):
    def test_normalize_names(self):
        self.assertEqual(
            TagService.normalize_names([" Client", "Friend", "Client ", "", "   ", "Friend"]),
            ["Client", "Friend"],
        )

    def test_resolve_is_idempotent(self):
        with transaction() as conn:
            first = TagService.resolve(conn, "Client")
            second = TagService.resolve(conn, "Client")
        self.assertEqual(first, second)
        self.assertEqual(count_rows("tags"), 1)

    def test_resolve_reuses_tag_from_earlier_transaction(self):
        with transaction() as conn:
            first = TagService.resolve(conn, "Client")
        with transaction() as conn:
            ids = TagService.resolve_all(conn, ["Client", "Friend", "Client"])
        self.assertEqual(len(ids), 2)
        self.assertEqual(ids[0], first)

    def test_tags_for_contacts_without_ids(self):
        conn = get_connection()
        try:
            self.assertEqual(TagService.tags_for_contacts(conn, []), {})
        finally:
            conn.close()


class ContactServiceTests(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.user = asyncio.run(
            UserService.create_user(
                UserRegister(email="ada@example.com", password="secret123", first_name="Ada", last_name="L")
            )
        )

    def test_failed_relink_rolls_back_contact_and_tags(self):
        with mock.patch.object(TagService, "relink", side_effect=RuntimeError("boom")):
            with self.assertRaises(RuntimeError):
                asyncio.run(
                    ContactService.create_contact(self.user.id, ContactCreate(name="Ghost", tags=["Phantom"]))
                )
        self.assertEqual(count_rows("contacts"), 0)
        self.assertEqual(count_rows("tags"), 0)

    def test_unknown_owner_violates_foreign_key(self):
        with self.assertRaises(sqlite3.IntegrityError):
            asyncio.run(ContactService.create_contact("no-such-user", ContactCreate(name="Orphan")))
        self.assertEqual(count_rows("contacts"), 0)

    def test_empty_update_keeps_updated_at(self):
        contact = asyncio.run(ContactService.create_contact(self.user.id, ContactCreate(name="Ada")))
        updated = asyncio.run(ContactService.update_contact(self.user.id, contact.id, ContactUpdate()))
        self.assertEqual(updated.updated_at, contact.updated_at)

    def test_update_of_missing_contact(self):
        with self.assertRaises(NotFoundError):
            asyncio.run(ContactService.update_contact(self.user.id, "missing", ContactUpdate(notes="x")))

    def test_deleting_contact_removes_links_only(self):
        contact = asyncio.run(
            ContactService.create_contact(self.user.id, ContactCreate(name="Ada", tags=["A", "B"]))
        )
        asyncio.run(ContactService.delete_contact(self.user.id, contact.id))
        self.assertEqual(count_rows("contact_tags"), 0)
        self.assertEqual(count_rows("tags"), 2)

    def test_deleting_user_cascades_to_contacts(self):
        asyncio.run(ContactService.create_contact(self.user.id, ContactCreate(name="Ada", tags=["A"])))
        asyncio.run(UserService.delete_user(self.user.id))
        self.assertEqual(count_rows("contacts"), 0)
        self.assertEqual(count_rows("contact_tags"), 0)
        self.assertEqual(count_rows("tags"), 1)


class ContactStatsWindowTests(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.user = asyncio.run(
            UserService.create_user(
                UserRegister(email="ada@example.com", password="secret123", first_name="Ada", last_name="L")
            )
        )

    def add_contact(self, name, created_at=None, **fields):
        contact = asyncio.run(ContactService.create_contact(self.user.id, ContactCreate(name=name, **fields)))
        if created_at is not None:
            with transaction() as conn:
                conn.execute(
                    "UPDATE contacts SET created_at = ? WHERE id = ?",
                    (created_at.isoformat(), contact.id),
                )
        return contact

    def test_recent_and_weekly_windows_start_at_midnight_utc(self):
        now = datetime.now(timezone.utc)
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        week_start = midnight - timedelta(days=7)

        self.add_contact("Today", is_favorite=True)
        self.add_contact("On week boundary", created_at=week_start)
        self.add_contact("Just before week", created_at=week_start - timedelta(seconds=1))
        self.add_contact("Ten days ago", created_at=now - timedelta(days=10))
        self.add_contact("Forty days ago", created_at=now - timedelta(days=40))

        stats = asyncio.run(ContactService.contact_stats(self.user.id)).stats
        self.assertEqual(stats.total_contacts, 5)
        self.assertEqual(stats.recent_contacts, 4)
        self.assertEqual(stats.this_week_contacts, 2)
        self.assertEqual(stats.favorite_contacts, 1)

    def test_top_tags_are_limited_to_ten_and_break_ties_by_name(self):
        names = [f"Tag{index:02d}" for index in range(11, 0, -1)]
        self.add_contact("Everything", tags=names + ["Zulu"])
        self.add_contact("Zulu only", tags=["Zulu"])

        top_tags = asyncio.run(ContactService.contact_stats(self.user.id)).top_tags
        self.assertEqual(len(top_tags), 10)
        self.assertEqual((top_tags[0].name, top_tags[0].contact_count), ("Zulu", 2))
        self.assertEqual([tag.name for tag in top_tags[1:]], sorted(names)[:9])
        self.assertTrue(all(tag.contact_count == 1 for tag in top_tags[1:]))


class LoggingSetupTests(unittest.TestCase):
    def setUp(self):
        self.root = logging.getLogger()
        self.app_logger = logging.getLogger("linkleaf_api")
        self.levels = (self.root.level, self.app_logger.level)
        self._tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        for handler in list(self.root.handlers):
            if handler.get_name() == FILE_HANDLER:
                self.root.removeHandler(handler)
                handler.close()
        self.root.setLevel(self.levels[0])
        self.app_logger.setLevel(self.levels[1])
        self._tmpdir.cleanup()

    def handler_names(self):
        return [handler.get_name() for handler in self.root.handlers]

    def test_repeated_setup_keeps_one_console_handler(self):
        setup_logging("DEBUG")
        logger = setup_logging("debug")
        self.assertIs(logger, self.app_logger)
        self.assertEqual(self.handler_names().count(CONSOLE_HANDLER), 1)
        self.assertEqual(self.app_logger.level, logging.DEBUG)

    def test_unknown_level_falls_back_to_info(self):
        setup_logging("LOUD")
        self.assertEqual(self.app_logger.level, logging.INFO)

    def test_log_file_handler(self):
        path = Path(self._tmpdir.name) / "linkleaf.log"
        setup_logging("WARNING", str(path))
        setup_logging("WARNING", str(path))
        self.assertEqual(self.handler_names().count(FILE_HANDLER), 1)

        logging.getLogger("linkleaf_api.tests").warning("disk is full")
        for handler in self.root.handlers:
            handler.flush()
        self.assertIn("[WARNING] linkleaf_api.tests: disk is full", path.read_text(encoding="utf-8"))


class SeedDemoTests(DatabaseTestCase):
    def test_running_twice_does_not_duplicate_contacts(self):
        asyncio.run(seed_demo.seed(0.0))
        asyncio.run(seed_demo.seed(0.0))
        self.assertEqual(count_rows("users"), 1)
        self.assertEqual(count_rows("contacts"), len(seed_demo.CONTACTS))
        self.assertEqual(count_rows("tags"), len(seed_demo.TAGS))


class SecurityTests(unittest.TestCase):
    def test_token_round_trip(self):
        token = create_access_token({"sub": "user-1"})
        payload = decode_access_token(token)
        self.assertEqual(payload["sub"], "user-1")
        self.assertGreater(payload["exp"], payload["iat"])

    def test_tampered_token(self):
        header, payload, signature = create_access_token({"sub": "user-1"}).split(".")
        forged = create_access_token({"sub": "user-2"}).split(".")[1]
        self.assertIsNone(decode_access_token(f"{header}.{forged}.{signature}"))
        self.assertIsNone(decode_access_token("only.two"))

    def test_password_hashing(self):
        hashed = hash_password("secret123")
        self.assertNotIn("secret123", hashed)
        self.assertTrue(verify_password("secret123", hashed))
        self.assertFalse(verify_password("secret124", hashed))
        self.assertFalse(verify_password("secret123", None))
        self.assertFalse(verify_password("secret123", "not-a-hash"))


if __name__ == "__main__":
    unittest.main()
