"""
Service layer for tags.

Tags are a dictionary shared by all users.  Contact writes resolve tag
names to ids through ``TagService.resolve`` and replace the link rows
through ``TagService.relink``; both run on the connection of the
caller's transaction so a failure anywhere rolls back the whole write.

Resolution is a single ``INSERT ... ON CONFLICT(name) DO NOTHING``
followed by a lookup, so two requests creating the same new tag at
the same time end up sharing one row instead of tripping over the
unique constraint.

The remaining methods back the ``/tags`` endpoints.  All queries use
parameterized statements.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from typing import Dict, Iterable, List

from linkleaf_api.app.core.db import get_connection, transaction, utc_now
from linkleaf_api.app.core.exceptions import ConflictError, NotFoundError
from linkleaf_api.app.schemas.tag import TagCreate, TagDetail, TagRead, TagUpdate

logger = logging.getLogger(__name__)


class TagService:
    """Tag resolution, contact links and tag dictionary management."""

    @staticmethod
    def normalize_names(names: Iterable[str]) -> List[str]:
        """Strip names, drop empty ones and collapse duplicates.

        The first occurrence wins, so the input order is preserved.
        """
        seen = set()
        result: List[str] = []
        for name in names:
            cleaned = name.strip()
            if cleaned and cleaned not in seen:
                seen.add(cleaned)
                result.append(cleaned)
        return result

    @classmethod
    def resolve(cls, conn: sqlite3.Connection, name: str) -> str:
        """Return the id of the tag called ``name``, creating it if needed."""
        conn.execute(
            "INSERT INTO tags (id, name, created_at) VALUES (?, ?, ?) "
            "ON CONFLICT(name) DO NOTHING",
            (str(uuid.uuid4()), name, utc_now()),
        )
        row = conn.execute("SELECT id FROM tags WHERE name = ?", (name,)).fetchone()
        return row["id"]

    @classmethod
    def resolve_all(cls, conn: sqlite3.Connection, names: Iterable[str]) -> List[str]:
        """Resolve every distinct name once and return the ids in order."""
        return [cls.resolve(conn, name) for name in cls.normalize_names(names)]

    @classmethod
    def relink(cls, conn: sqlite3.Connection, contact_id: str, tag_ids: Iterable[str]) -> None:
        """Replace all link rows of a contact with ``tag_ids``."""
        conn.execute("DELETE FROM contact_tags WHERE contact_id = ?", (contact_id,))
        unique_ids = list(dict.fromkeys(tag_ids))
        conn.executemany(
            "INSERT INTO contact_tags (contact_id, tag_id) VALUES (?, ?)",
            [(contact_id, tag_id) for tag_id in unique_ids],
        )

    @classmethod
    def tags_for_contacts(
        cls, conn: sqlite3.Connection, contact_ids: List[str]
    ) -> Dict[str, List[TagRead]]:
        """Load the tags of several contacts with one query.

        Every requested id is present in the result; contacts without
        tags map to an empty list.  Tags are ordered by name.
        """
        tags: Dict[str, List[TagRead]] = {contact_id: [] for contact_id in contact_ids}
        if not contact_ids:
            return tags
        placeholders = ", ".join("?" for _ in contact_ids)
        rows = conn.execute(
            f"""
            SELECT ct.contact_id, t.id, t.name, t.color
            FROM contact_tags ct
            JOIN tags t ON t.id = ct.tag_id
            WHERE ct.contact_id IN ({placeholders})
            ORDER BY t.name, t.id
            """,
            tuple(contact_ids),
        ).fetchall()
        for row in rows:
            tags[row["contact_id"]].append(
                TagRead(id=row["id"], name=row["name"], color=row["color"])
            )
        return tags

    @classmethod
    async def list_tags(cls, user_id: str) -> List[TagDetail]:
        """Return all tags ordered by name.

        ``contact_count`` only counts contacts owned by ``user_id``; the
        tag dictionary is shared but address books are not.
        """
        conn = get_connection()
        try:
            rows = conn.execute(
                """
                SELECT t.id, t.name, t.color, t.description, t.created_at,
                       COUNT(c.id) AS contact_count
                FROM tags t
                LEFT JOIN contact_tags ct ON ct.tag_id = t.id
                LEFT JOIN contacts c ON c.id = ct.contact_id AND c.user_id = ?
                GROUP BY t.id
                ORDER BY t.name COLLATE NOCASE, t.name
                """,
                (user_id,),
            ).fetchall()
            return [TagDetail(**dict(row)) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def get_tag(cls, tag_id: str, user_id: str) -> TagDetail:
        conn = get_connection()
        try:
            row = conn.execute(
                """
                SELECT t.id, t.name, t.color, t.description, t.created_at,
                       COUNT(c.id) AS contact_count
                FROM tags t
                LEFT JOIN contact_tags ct ON ct.tag_id = t.id
                LEFT JOIN contacts c ON c.id = ct.contact_id AND c.user_id = ?
                WHERE t.id = ?
                GROUP BY t.id
                """,
                (user_id, tag_id),
            ).fetchone()
        finally:
            conn.close()
        if not row:
            raise NotFoundError("Tag not found")
        return TagDetail(**dict(row))

    @classmethod
    async def create_tag(cls, data: TagCreate, user_id: str) -> TagDetail:
        """Create a tag; raises ``ConflictError`` if the name is taken."""
        tag_id = str(uuid.uuid4())
        try:
            with transaction() as conn:
                conn.execute(
                    "INSERT INTO tags (id, name, color, description, created_at) VALUES (?, ?, ?, ?, ?)",
                    (tag_id, data.name, data.color, data.description, utc_now()),
                )
        except sqlite3.IntegrityError as e:
            raise ConflictError(f"Tag '{data.name}' already exists") from e
        logger.info("User %s created tag %s", user_id, tag_id)
        return await cls.get_tag(tag_id, user_id)

    @classmethod
    async def update_tag(cls, tag_id: str, data: TagUpdate, user_id: str) -> TagDetail:
        """Update the provided fields of a tag."""
        updates = data.model_dump(exclude_unset=True)
        try:
            with transaction() as conn:
                exists = conn.execute("SELECT id FROM tags WHERE id = ?", (tag_id,)).fetchone()
                if not exists:
                    raise NotFoundError("Tag not found")
                if updates:
                    assignments = ", ".join(f"{column} = ?" for column in updates)
                    conn.execute(
                        f"UPDATE tags SET {assignments} WHERE id = ?",
                        (*updates.values(), tag_id),
                    )
        except sqlite3.IntegrityError as e:
            raise ConflictError(f"Tag '{updates.get('name')}' already exists") from e
        logger.info("User %s updated tag %s", user_id, tag_id)
        return await cls.get_tag(tag_id, user_id)

    @classmethod
    async def delete_tag(cls, tag_id: str, user_id: str) -> None:
        """Delete a tag.  Its link rows cascade; contacts are kept."""
        with transaction() as conn:
            cursor = conn.execute("DELETE FROM tags WHERE id = ?", (tag_id,))
            if cursor.rowcount == 0:
                raise NotFoundError("Tag not found")
        logger.info("User %s deleted tag %s", user_id, tag_id)
