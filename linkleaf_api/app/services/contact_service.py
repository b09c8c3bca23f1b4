"""
Business logic for contacts.

Every contact belongs to exactly one user and every query below is
filtered by both the contact id and the requesting user's id.  A
contact owned by somebody else is reported exactly like a missing one
(``NotFoundError``) so the API never reveals that it exists.

Writes run inside ``core.db.transaction``: the contact row, tag
resolution and link rows are committed together or not at all.  Reads
open a connection, run their queries and close it.

Listing builds its WHERE clause from fixed SQL fragments with ``?``
placeholders; sorting goes through ``SORT_COLUMNS`` so user input is
never interpolated into SQL text.
"""

from __future__ import annotations

import logging
import math
import sqlite3
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any, List, Optional, Tuple

from linkleaf_api.app.core.db import get_connection, transaction, utc_now
from linkleaf_api.app.core.exceptions import NotFoundError
from linkleaf_api.app.schemas.contact import (
    ContactCounts,
    ContactCreate,
    ContactPage,
    ContactRead,
    ContactStats,
    ContactUpdate,
    Pagination,
)
from linkleaf_api.app.schemas.tag import TagCount, TagRead
from linkleaf_api.app.services.tag_service import TagService

logger = logging.getLogger(__name__)

CONTACT_COLUMNS = (
    "id",
    "name",
    "email",
    "phone",
    "company",
    "job_title",
    "avatar_url",
    "notes",
    "website",
    "address",
    "birthday",
    "is_favorite",
    "created_at",
    "updated_at",
)

# Columns a client may write; the keys of ``ContactCreate``/``ContactUpdate``
# minus ``tags``.
WRITABLE_COLUMNS = (
    "name",
    "email",
    "phone",
    "company",
    "job_title",
    "avatar_url",
    "notes",
    "website",
    "address",
    "birthday",
    "is_favorite",
)

SORT_COLUMNS = {
    "name": "c.name COLLATE NOCASE",
    "email": "c.email COLLATE NOCASE",
    "company": "c.company COLLATE NOCASE",
    "created_at": "c.created_at",
    "updated_at": "c.updated_at",
}
DEFAULT_SORT = "created_at"
DEFAULT_ORDER = "desc"

SELECT_CONTACT = "SELECT " + ", ".join(f"c.{column}" for column in CONTACT_COLUMNS) + " FROM contacts c"


def resolve_sort(sort_by: Optional[str], sort_order: Optional[str]) -> Tuple[str, str]:
    """Map requested sort key and direction to SQL.

    Unknown keys fall back to ``created_at`` and unknown directions to
    ``DESC``; neither is an error.
    """
    column = SORT_COLUMNS.get(sort_by or "", SORT_COLUMNS[DEFAULT_SORT])
    direction = "ASC" if (sort_order or DEFAULT_ORDER).lower() == "asc" else "DESC"
    return column, direction


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_contact_filter(
    user_id: str, search: Optional[str] = None, tag: Optional[str] = None
) -> Tuple[str, List[Any]]:
    """Return the WHERE clause (without the keyword) and its parameters."""
    clauses = ["c.user_id = ?"]
    params: List[Any] = [user_id]
    if search:
        pattern = f"%{_escape_like(search.casefold())}%"
        clauses.append(
            "(casefold(c.name) LIKE ? ESCAPE '\\' OR casefold(c.email) LIKE ? ESCAPE '\\' "
            "OR casefold(c.company) LIKE ? ESCAPE '\\' OR casefold(c.notes) LIKE ? ESCAPE '\\')"
        )
        params.extend([pattern] * 4)
    if tag:
        clauses.append(
            "EXISTS (SELECT 1 FROM contact_tags ct JOIN tags t ON t.id = ct.tag_id "
            "WHERE ct.contact_id = c.id AND t.name = ?)"
        )
        params.append(tag)
    return " AND ".join(clauses), params


def _to_db(value: Any) -> Any:
    # SQLite has no boolean or date column types.
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


class ContactService:
    """Сервис для работы с контактами пользователя и их тегами."""

    @staticmethod
    def _row_to_contact(row: sqlite3.Row, tags: List[TagRead]) -> ContactRead:
        data = {column: row[column] for column in CONTACT_COLUMNS}
        data["is_favorite"] = bool(data["is_favorite"])
        return ContactRead(**data, tags=tags)

    @classmethod
    def _hydrate(cls, conn: sqlite3.Connection, rows: List[sqlite3.Row]) -> List[ContactRead]:
        tags = TagService.tags_for_contacts(conn, [row["id"] for row in rows])
        return [cls._row_to_contact(row, tags[row["id"]]) for row in rows]

    @staticmethod
    def _owned(conn: sqlite3.Connection, user_id: str, contact_id: str) -> bool:
        row = conn.execute(
            "SELECT id FROM contacts WHERE id = ? AND user_id = ?",
            (contact_id, user_id),
        ).fetchone()
        return row is not None

    @classmethod
    async def list_contacts(
        cls,
        user_id: str,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        tag: Optional[str] = None,
        sort_by: Optional[str] = DEFAULT_SORT,
        sort_order: Optional[str] = DEFAULT_ORDER,
    ) -> ContactPage:
        """Return one page of the user's contacts.

        - ``search`` matches name, email, company or notes, case-insensitively.
        - ``tag`` keeps contacts linked to the tag with exactly this name.
        - ``sort_by``/``sort_order`` are resolved by ``resolve_sort``.
        - ``total`` counts every match, ignoring ``page`` and ``limit``.
        """
        where, params = build_contact_filter(user_id, search, tag)
        sort_column, direction = resolve_sort(sort_by, sort_order)
        offset = (page - 1) * limit
        conn = get_connection()
        try:
            rows = conn.execute(
                f"{SELECT_CONTACT} WHERE {where} "
                f"ORDER BY {sort_column} {direction}, c.id {direction} "
                "LIMIT ? OFFSET ?",
                (*params, limit, offset),
            ).fetchall()
            total = conn.execute(
                f"SELECT COUNT(*) FROM contacts c WHERE {where}", tuple(params)
            ).fetchone()[0]
            contacts = cls._hydrate(conn, rows)
        finally:
            conn.close()
        return ContactPage(
            contacts=contacts,
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                pages=math.ceil(total / limit) if limit else 0,
            ),
        )

    @classmethod
    async def get_contact(cls, user_id: str, contact_id: str) -> ContactRead:
        """Return a contact with its tags or raise ``NotFoundError``."""
        conn = get_connection()
        try:
            row = conn.execute(
                f"{SELECT_CONTACT} WHERE c.id = ? AND c.user_id = ?",
                (contact_id, user_id),
            ).fetchone()
            if not row:
                raise NotFoundError("Contact not found")
            return cls._hydrate(conn, [row])[0]
        finally:
            conn.close()

    @classmethod
    async def create_contact(cls, user_id: str, data: ContactCreate) -> ContactRead:
        """Insert a contact and link its tags in one transaction."""
        contact_id = str(uuid.uuid4())
        now = utc_now()
        fields = data.model_dump(include=set(WRITABLE_COLUMNS))
        columns = ("id", "user_id", *WRITABLE_COLUMNS, "created_at", "updated_at")
        values = (
            contact_id,
            user_id,
            *(_to_db(fields[column]) for column in WRITABLE_COLUMNS),
            now,
            now,
        )
        with transaction() as conn:
            conn.execute(
                f"INSERT INTO contacts ({', '.join(columns)}) "
                f"VALUES ({', '.join('?' for _ in columns)})",
                values,
            )
            tag_ids = TagService.resolve_all(conn, data.tags)
            TagService.relink(conn, contact_id, tag_ids)
        logger.info("User %s created contact %s with %d tag(s)", user_id, contact_id, len(tag_ids))
        return await cls.get_contact(user_id, contact_id)

    @classmethod
    async def update_contact(
        cls, user_id: str, contact_id: str, data: ContactUpdate
    ) -> ContactRead:
        """Apply a partial update.

        Only keys present in the request are written.  When ``tags`` is
        present the tag set is replaced (``[]`` clears it); when it is
        absent or null the links are left alone.  ``updated_at`` is
        refreshed whenever anything changes.
        """
        updates = data.model_dump(exclude_unset=True)
        tag_names = updates.pop("tags", None)
        updates = {column: value for column, value in updates.items() if column in WRITABLE_COLUMNS}

        conn = get_connection()
        try:
            if not cls._owned(conn, user_id, contact_id):
                raise NotFoundError("Contact not found")
        finally:
            conn.close()

        with transaction() as conn:
            if updates or tag_names is not None:
                assignments = [f"{column} = ?" for column in updates]
                assignments.append("updated_at = ?")
                cursor = conn.execute(
                    f"UPDATE contacts SET {', '.join(assignments)} WHERE id = ? AND user_id = ?",
                    (*(_to_db(value) for value in updates.values()), utc_now(), contact_id, user_id),
                )
                if cursor.rowcount == 0:
                    # Deleted between the ownership check and the update.
                    raise NotFoundError("Contact not found")
            if tag_names is not None:
                tag_ids = TagService.resolve_all(conn, tag_names)
                TagService.relink(conn, contact_id, tag_ids)
        logger.info(
            "User %s updated contact %s (fields: %s, tags replaced: %s)",
            user_id,
            contact_id,
            ", ".join(sorted(updates)) or "-",
            tag_names is not None,
        )
        return await cls.get_contact(user_id, contact_id)

    @classmethod
    async def delete_contact(cls, user_id: str, contact_id: str) -> None:
        """Delete a contact; its link rows are removed by the cascade."""
        with transaction() as conn:
            if not cls._owned(conn, user_id, contact_id):
                raise NotFoundError("Contact not found")
            conn.execute(
                "DELETE FROM contacts WHERE id = ? AND user_id = ?",
                (contact_id, user_id),
            )
        logger.info("User %s deleted contact %s", user_id, contact_id)

    @classmethod
    async def contact_stats(cls, user_id: str) -> ContactStats:
        """Aggregate counters and the ten most used tags of one user.

        "Recent" means created since midnight UTC 30 days ago, "this
        week" since midnight UTC 7 days ago.
        """
        today = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
        month_cutoff = (today - timedelta(days=30)).isoformat()
        week_cutoff = (today - timedelta(days=7)).isoformat()
        conn = get_connection()
        try:
            counts = conn.execute(
                """
                SELECT
                    COUNT(*) AS total_contacts,
                    COALESCE(SUM(CASE WHEN is_favorite = 1 THEN 1 ELSE 0 END), 0) AS favorite_contacts,
                    COALESCE(SUM(CASE WHEN created_at >= ? THEN 1 ELSE 0 END), 0) AS recent_contacts,
                    COALESCE(SUM(CASE WHEN created_at >= ? THEN 1 ELSE 0 END), 0) AS this_week_contacts
                FROM contacts
                WHERE user_id = ?
                """,
                (month_cutoff, week_cutoff, user_id),
            ).fetchone()
            tag_rows = conn.execute(
                """
                SELECT t.name, COUNT(*) AS contact_count
                FROM tags t
                JOIN contact_tags ct ON ct.tag_id = t.id
                JOIN contacts c ON c.id = ct.contact_id
                WHERE c.user_id = ?
                GROUP BY t.id, t.name
                ORDER BY contact_count DESC, t.name ASC
                LIMIT 10
                """,
                (user_id,),
            ).fetchall()
        finally:
            conn.close()
        return ContactStats(
            stats=ContactCounts(**dict(counts)),
            top_tags=[TagCount(name=row["name"], contact_count=row["contact_count"]) for row in tag_rows],
        )
